"""Virtual memory areas, page mapping and frame allocation."""

from __future__ import annotations

from typing import NamedTuple

from .common import PAGING_MAX_SYMTBL_SZ, MemRegion, MmStruct, Pcb, VmArea
from .memphy import MemPhy, OutOfFramesError
from .paging import (
    PAGING_MAX_PGN,
    PAGING_PAGESZ,
    page_align,
    page_number,
    page_offset,
    pte_fpn,
    pte_set_fpn,
)

_PTE_BYTES = 4


class MemoryMapping(NamedTuple):
    """Translation of one virtual address of a region."""

    virtual_address: int
    physical_address: int
    page_number: int
    frame_number: int


def _emit(text: str) -> str:
    print(text, end="")
    return text


def init_mm(mm: MmStruct) -> MmStruct:
    """Reset mm to an empty address space holding one area with id 0."""
    mm.pgd = [0] * PAGING_MAX_PGN
    vma0 = VmArea(vm_id=0, vm_start=0, vm_end=0, sbrk=0, vm_mm=mm)
    vma0.vm_freerg_list.insert(0, MemRegion(vma0.vm_start, vma0.vm_end))
    mm.mmap = [vma0]
    return mm


def get_vma_by_num(mm: MmStruct, vmaid: int) -> VmArea | None:
    """Return the first area whose id is at least vmaid, or None."""
    return next((vma for vma in mm.mmap if vma.vm_id >= vmaid), None)


def _require_vma(mm: MmStruct, vmaid: int) -> VmArea:
    vma = get_vma_by_num(mm, vmaid)
    if vma is None:
        raise LookupError(f"no virtual memory area with id {vmaid}")
    return vma


def enlist_pgn_node(mm: MmStruct, pgn: int) -> None:
    """Record pgn as the most recently mapped page."""
    mm.fifo_pgn.insert(0, pgn)


def alloc_pages_range(caller: Pcb, req_pgnum: int) -> list[int]:
    """Take req_pgnum frames from RAM, most recently taken first.

    Raises OutOfFramesError, after giving the taken frames back, when RAM
    runs out.
    """
    if req_pgnum <= 0:
        return []
    frames: list[int] = []
    try:
        for _ in range(req_pgnum):
            frames.insert(0, caller.mram.get_free_frame())
    except OutOfFramesError:
        for fpn in frames:
            caller.mram.put_free_frame(fpn)
        raise
    return frames


def vmap_page_range(caller: Pcb, addr: int, pgnum: int, frames: list[int]) -> MemRegion:
    """Map frames to consecutive pages starting at the aligned address addr."""
    mm = caller.mm
    pgn = page_number(addr)
    mapped = MemRegion(addr, addr)
    for pgit, fpn in enumerate(frames):
        mm.pgd[pgn + pgit] = pte_set_fpn(0, fpn)
        enlist_pgn_node(mm, pgn + pgit)
        mapped.rg_end += PAGING_PAGESZ
        if pgit == pgnum:
            break
    return mapped


def vm_map_ram(caller: Pcb, astart: int, aend: int, mapstart: int, incpgnum: int) -> MemRegion:
    """Back incpgnum pages at mapstart with fresh RAM frames."""
    try:
        frames = alloc_pages_range(caller, incpgnum)
    except OutOfFramesError:
        print("================PAGE FAULT OUT OF MEMORY=================")
        raise
    return vmap_page_range(caller, mapstart, incpgnum, frames)


def swap_copy_page(mpsrc: MemPhy, srcfpn: int, mpdst: MemPhy, dstfpn: int) -> None:
    """Copy one whole frame from mpsrc to mpdst."""
    src_base = srcfpn * PAGING_PAGESZ
    dst_base = dstfpn * PAGING_PAGESZ
    for cell in range(PAGING_PAGESZ):
        mpdst.write(dst_base + cell, mpsrc.read(src_base + cell))


def mm_swap_page(caller: Pcb, vicfpn: int, swpfpn: int) -> None:
    """Copy RAM frame vicfpn to frame swpfpn of the active swap device."""
    swap_copy_page(caller.mram, vicfpn, caller.active_mswp, swpfpn)


def validate_overlap_vm_area(caller: Pcb, vmaid: int, vmastart: int, vmaend: int) -> bool:
    """Check that [vmastart, vmaend) overlaps no other area.

    Raises ValueError on overlap.
    """
    for vma in caller.mm.mmap:
        if vma.vm_id == vmaid:
            continue
        if vmastart < vma.vm_end and vma.vm_start < vmaend:
            raise ValueError(
                f"range {vmastart}-{vmaend} overlaps area {vma.vm_id} "
                f"({vma.vm_start}-{vma.vm_end})"
            )
    return True


def inc_vma_limit(caller: Pcb, vmaid: int, inc_sz: int) -> MemRegion:
    """Grow area vmaid by inc_sz bytes, page aligned, and map it to RAM."""
    inc_amt = page_align(inc_sz)
    incnumpage = inc_amt // PAGING_PAGESZ
    cur_vma = _require_vma(caller.mm, vmaid)
    area = MemRegion(cur_vma.sbrk, cur_vma.sbrk + inc_amt)
    old_end = cur_vma.vm_end

    validate_overlap_vm_area(caller, vmaid, area.rg_start, area.rg_end)

    cur_vma.vm_end += inc_amt
    cur_vma.sbrk += inc_amt
    try:
        return vm_map_ram(caller, area.rg_start, area.rg_end, old_end, incnumpage)
    except OutOfFramesError:
        cur_vma.vm_end = old_end
        raise


def memory_map(proc: Pcb, source: int, offset: int) -> MemoryMapping:
    """Print and return the translation of region source plus offset."""
    if not 0 <= source < PAGING_MAX_SYMTBL_SZ:
        raise IndexError(f"region id {source} out of range")
    region = proc.mm.symrgtbl[source]
    va = region.rg_start + offset
    pgn = page_number(va)
    off = page_offset(va)
    fpn = pte_fpn(proc.mm.pgd[pgn])
    pa = (fpn << 8) + off
    _emit(
        "============MEMORY MAP=============\n"
        f"Region id = {source}, Offset = {offset}\n"
        f"Had virtual memory address = {va}\n"
        f"Had physical memory address = {pa:08x}\n"
        f"Page number = {pgn},    Frame number = {fpn}\n"
        "==============END MEMORY MAP===========\n"
    )
    return MemoryMapping(va, pa, pgn, fpn)


def _print_list(title: str, items: list[str]) -> str:
    if not items:
        return _emit(f"{title}: NULL list\n")
    return _emit(f"{title}: \n" + "".join(f"{item}\n" for item in items) + "\n")


def print_list_fp(frames: list[int]) -> str:
    """Print a list of frame numbers."""
    return _print_list("print_list_fp", [f"fp[{fpn}]" for fpn in frames])


def print_list_rg(regions: list[MemRegion]) -> str:
    """Print a list of memory regions."""
    return _print_list("print_list_rg", [f"rg[{rg.rg_start}->{rg.rg_end}]" for rg in regions])


def print_list_vma(areas: list[VmArea]) -> str:
    """Print a list of virtual memory areas."""
    return _print_list("print_list_vma", [f"va[{vma.vm_start}->{vma.vm_end}]" for vma in areas])


def print_list_pgn(pages: list[int]) -> str:
    """Print a list of page numbers."""
    return _print_list("print_list_pgn", [f"va[{pgn}]-" for pgn in pages])


def print_pgtbl(caller: Pcb, start: int = 0, end: int | None = -1) -> str:
    """Print the page table entries covering [start, end).

    An end of -1 or None stands for the end of area 0.
    """
    if caller is None:
        raise ValueError("no caller process given")
    if end is None or end == -1:
        end = _require_vma(caller.mm, 0).vm_end
    pgn_start = page_number(start)
    pgn_end = page_number(end)
    pages = range(pgn_start, pgn_end)
    lines = [f"print_pgtbl: {start} - {end}\n"]
    lines.extend(f"{pgit * _PTE_BYTES:08d}: {caller.mm.pgd[pgit]:08x}\n" for pgit in pages)
    lines.extend(
        f"Page number: {pgit} -> Frame Number : {pte_fpn(caller.mm.pgd[pgit])}\n"
        for pgit in pages
    )
    return _emit("".join(lines))