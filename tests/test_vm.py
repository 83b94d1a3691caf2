import pytest

from ossim.common import MemRegion, MmStruct, Pcb, VmArea
from ossim.memphy import MemPhy, OutOfFramesError
from ossim.paging import PAGING_PAGESZ, pte_fpn, pte_present
from ossim.vm import (
    alloc_pages_range,
    enlist_pgn_node,
    get_vma_by_num,
    inc_vma_limit,
    init_mm,
    memory_map,
    mm_swap_page,
    print_list_fp,
    print_list_pgn,
    print_list_rg,
    print_list_vma,
    print_pgtbl,
    swap_copy_page,
    validate_overlap_vm_area,
    vm_map_ram,
    vmap_page_range,
)


def make_proc(ram_frames=8, swap_frames=8):
    mm = init_mm(MmStruct())
    return Pcb(
        pid=1,
        mm=mm,
        mram=MemPhy(ram_frames * PAGING_PAGESZ),
        active_mswp=MemPhy(swap_frames * PAGING_PAGESZ),
    )


def test_init_mm_creates_area_zero():
    mm = MmStruct()
    mm.pgd[3] = 99
    init_mm(mm)
    assert len(mm.mmap) == 1
    vma = mm.mmap[0]
    assert (vma.vm_id, vma.vm_start, vma.vm_end, vma.sbrk) == (0, 0, 0, 0)
    assert vma.vm_freerg_list == [MemRegion(0, 0)]
    assert vma.vm_mm is mm
    assert mm.pgd[3] == 0


def test_get_vma_by_num():
    mm = init_mm(MmStruct())
    assert get_vma_by_num(mm, 0) is mm.mmap[0]
    assert get_vma_by_num(mm, 5) is None
    assert get_vma_by_num(MmStruct(), 0) is None


def test_enlist_pgn_node_prepends():
    mm = MmStruct()
    enlist_pgn_node(mm, 4)
    enlist_pgn_node(mm, 9)
    assert mm.fifo_pgn == [9, 4]


def test_alloc_pages_range_takes_frames():
    proc = make_proc(ram_frames=4)
    frames = alloc_pages_range(proc, 3)
    assert frames == [2, 1, 0]
    assert list(proc.mram.free_frames) == [3]


def test_alloc_pages_range_zero_request():
    proc = make_proc()
    assert alloc_pages_range(proc, 0) == []
    assert len(proc.mram.free_frames) == 8


def test_alloc_pages_range_out_of_memory_gives_frames_back():
    proc = make_proc(ram_frames=2)
    before = list(proc.mram.free_frames)
    with pytest.raises(OutOfFramesError):
        alloc_pages_range(proc, 3)
    assert list(proc.mram.free_frames) == before


def test_vmap_page_range_maps_frames():
    proc = make_proc()
    region = vmap_page_range(proc, 2 * PAGING_PAGESZ, 2, [5, 7])
    assert region == MemRegion(2 * PAGING_PAGESZ, 4 * PAGING_PAGESZ)
    assert pte_present(proc.mm.pgd[2])
    assert pte_fpn(proc.mm.pgd[2]) == 5
    assert pte_fpn(proc.mm.pgd[3]) == 7
    assert proc.mm.fifo_pgn == [3, 2]


def test_vm_map_ram_out_of_memory(capsys):
    proc = make_proc(ram_frames=1)
    with pytest.raises(OutOfFramesError):
        vm_map_ram(proc, 0, 2 * PAGING_PAGESZ, 0, 2)
    assert "PAGE FAULT OUT OF MEMORY" in capsys.readouterr().out


def test_inc_vma_limit_grows_area():
    proc = make_proc()
    inc_vma_limit(proc, 0, 100)
    vma = proc.mm.mmap[0]
    assert vma.vm_end == PAGING_PAGESZ
    assert vma.sbrk == PAGING_PAGESZ
    assert pte_present(proc.mm.pgd[0])
    inc_vma_limit(proc, 0, PAGING_PAGESZ + 1)
    assert vma.vm_end == 3 * PAGING_PAGESZ
    assert all(pte_present(proc.mm.pgd[p]) for p in range(3))
    assert not pte_present(proc.mm.pgd[3])


def test_inc_vma_limit_frames_are_distinct():
    proc = make_proc()
    inc_vma_limit(proc, 0, 3 * PAGING_PAGESZ)
    fpns = {pte_fpn(proc.mm.pgd[p]) for p in range(3)}
    assert len(fpns) == 3
    assert len(proc.mram.free_frames) == 5


def test_inc_vma_limit_out_of_memory_restores_end():
    proc = make_proc(ram_frames=1)
    with pytest.raises(OutOfFramesError):
        inc_vma_limit(proc, 0, 2 * PAGING_PAGESZ)
    assert proc.mm.mmap[0].vm_end == 0


def test_inc_vma_limit_unknown_area():
    proc = make_proc()
    with pytest.raises(LookupError):
        inc_vma_limit(proc, 3, 10)


def test_validate_overlap_detects_other_area():
    proc = make_proc()
    proc.mm.mmap.append(VmArea(vm_id=1, vm_start=1000, vm_end=2000))
    assert validate_overlap_vm_area(proc, 0, 0, 1000) is True
    with pytest.raises(ValueError):
        validate_overlap_vm_area(proc, 0, 900, 1100)


def test_swap_copy_page_copies_whole_frame():
    src = MemPhy(4 * PAGING_PAGESZ)
    dst = MemPhy(4 * PAGING_PAGESZ)
    src.write(PAGING_PAGESZ, 7)
    src.write(2 * PAGING_PAGESZ - 1, -3)
    swap_copy_page(src, 1, dst, 2)
    assert dst.read(2 * PAGING_PAGESZ) == 7
    assert dst.read(3 * PAGING_PAGESZ - 1) == -3
    assert dst.storage[2 * PAGING_PAGESZ:3 * PAGING_PAGESZ] == src.storage[PAGING_PAGESZ:2 * PAGING_PAGESZ]


def test_mm_swap_page_copies_ram_to_swap():
    proc = make_proc()
    proc.mram.write(5, 42)
    mm_swap_page(proc, 0, 3)
    assert proc.active_mswp.read(3 * PAGING_PAGESZ + 5) == 42


def test_memory_map_translates(capsys):
    proc = make_proc()
    inc_vma_limit(proc, 0, 100)
    proc.mm.symrgtbl[0] = MemRegion(0, 100)
    mapping = memory_map(proc, 0, 10)
    fpn = pte_fpn(proc.mm.pgd[0])
    assert mapping.virtual_address == 10
    assert mapping.page_number == 0
    assert mapping.frame_number == fpn
    assert mapping.physical_address == fpn * PAGING_PAGESZ + 10
    out = capsys.readouterr().out
    assert "Had virtual memory address = 10" in out


def test_memory_map_bad_region():
    proc = make_proc()
    with pytest.raises(IndexError):
        memory_map(proc, 30, 0)


def test_print_lists():
    assert print_list_fp([1, 2]) == "print_list_fp: \nfp[1]\nfp[2]\n\n"
    assert print_list_fp([]) == "print_list_fp: NULL list\n"
    assert "rg[0->256]" in print_list_rg([MemRegion(0, 256)])
    assert "va[0->512]" in print_list_vma([VmArea(vm_start=0, vm_end=512)])
    assert "va[4]-" in print_list_pgn([4])


def test_print_pgtbl_covers_area():
    proc = make_proc()
    inc_vma_limit(proc, 0, 2 * PAGING_PAGESZ)
    text = print_pgtbl(proc, 0, -1)
    assert text.startswith(f"print_pgtbl: 0 - {2 * PAGING_PAGESZ}\n")
    assert f"Page number: 1 -> Frame Number : {pte_fpn(proc.mm.pgd[1])}" in text
    assert len(text.splitlines()) == 5


def test_print_pgtbl_requires_caller():
    with pytest.raises(ValueError):
        print_pgtbl(None, 0, -1)