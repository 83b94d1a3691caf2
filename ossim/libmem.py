"""Paging-based memory library: region allocation, freeing and byte access."""

from __future__ import annotations

import threading

from .common import PAGING_MAX_SYMTBL_SZ, MemRegion, MmStruct, Pcb, SyscallRegs, VmArea
from .paging import (
    PAGING_ADDR_FPN_LOBIT,
    PAGING_PTE_SWAPPED_MASK,
    page_align,
    page_number,
    page_offset,
    pte_fpn,
    pte_present,
    pte_set_fpn,
    pte_set_swap,
    pte_swap_offset,
)
from .sysmem import MemOp, sys_memmap
from .vm import enlist_pgn_node, get_vma_by_num, print_pgtbl, swap_copy_page

_mmvm_lock = threading.Lock()

_RULE = "================================================================"


def _require_vma(mm: MmStruct, vmaid: int) -> VmArea:
    vma = get_vma_by_num(mm, vmaid)
    if vma is None:
        raise LookupError(f"no virtual memory area with id {vmaid}")
    return vma


def _memop(caller: Pcb, op: MemOp, a2: int, a3: int = 0) -> SyscallRegs:
    regs = SyscallRegs(a1=op, a2=a2, a3=a3)
    sys_memmap(caller, regs)
    return regs


def enlist_vm_freerg_list(mm: MmStruct, region: MemRegion) -> None:
    """Put region at the head of the free list of the first area.

    Raises ValueError for an empty region.
    """
    if region.rg_start >= region.rg_end:
        raise ValueError(f"empty region {region.rg_start}-{region.rg_end}")
    if not mm.mmap:
        raise LookupError("address space has no memory area")
    mm.mmap[0].vm_freerg_list.insert(0, region)


def get_symrg_byid(mm: MmStruct, rgid: int) -> MemRegion:
    """Return the symbol table entry of region rgid."""
    if not 0 <= rgid < PAGING_MAX_SYMTBL_SZ:
        raise IndexError(f"region id {rgid} out of range")
    return mm.symrgtbl[rgid]


def get_free_vmrg_area(caller: Pcb, vmaid: int, size: int) -> MemRegion | None:
    """Carve size bytes from the first free region that fits, or return None."""
    vma = _require_vma(caller.mm, vmaid)
    for index, free in enumerate(vma.vm_freerg_list):
        if free.rg_start + size <= free.rg_end:
            found = MemRegion(free.rg_start, free.rg_start + size)
            if found.rg_end < free.rg_end:
                free.rg_start = found.rg_end
            else:
                del vma.vm_freerg_list[index]
            return found
    return None


def alloc_region(caller: Pcb, vmaid: int, rgid: int, size: int) -> int:
    """Allocate size bytes for region rgid and return its start address.

    The area grows at its break when no free region fits; the unused tail of
    the grown pages goes to the free list.
    """
    symbol = get_symrg_byid(caller.mm, rgid)
    with _mmvm_lock:
        found = get_free_vmrg_area(caller, vmaid, size)
        if found is not None:
            symbol.rg_start, symbol.rg_end = found.rg_start, found.rg_end
            return found.rg_start

        cur_vma = _require_vma(caller.mm, vmaid)
        inc_sz = page_align(size)
        old_sbrk = cur_vma.sbrk
        _memop(caller, MemOp.INC, vmaid, inc_sz)

        if inc_sz > size:
            enlist_vm_freerg_list(caller.mm, MemRegion(old_sbrk + size, old_sbrk + inc_sz))

        symbol.rg_start, symbol.rg_end = old_sbrk, old_sbrk + size
        return old_sbrk


def free_region(caller: Pcb, vmaid: int, rgid: int) -> MemRegion:
    """Return region rgid to the free list and return a copy of it."""
    symbol = get_symrg_byid(caller.mm, rgid)
    freed = MemRegion(symbol.rg_start, symbol.rg_end)
    if freed.size() > 0:
        enlist_vm_freerg_list(caller.mm, MemRegion(freed.rg_start, freed.rg_end))
    print(f"free region startaddress = {freed.rg_start}, endaddress = {freed.rg_end}")
    return freed


def liballoc(proc: Pcb, size: int, reg_index: int) -> int:
    """Allocate size bytes in area 0 for region reg_index and report it."""
    addr = alloc_region(proc, 0, reg_index, size)
    print("================ PHYSICAL MEMORY AFTER ALLOCATION ==============")
    print(f"PID={proc.pid} - Region={reg_index} - Address={addr:08x} - Size={size} byte")
    print_pgtbl(proc, 0, -1)
    print(_RULE)
    if 0 <= reg_index < len(proc.regs):
        proc.regs[reg_index] = addr
    return addr


def libfree(proc: Pcb, reg_index: int) -> MemRegion:
    """Free region reg_index of area 0 and report it."""
    freed = free_region(proc, 0, reg_index)
    print("============== PHYSICAL MEMORY AFTER DEALLOCATION ==============")
    print(f"PID={proc.pid} - Region={reg_index}")
    print_pgtbl(proc, 0, -1)
    print(_RULE)
    return freed


def find_victim_page(mm: MmStruct) -> int:
    """Remove and return the oldest mapped page."""
    if not mm.fifo_pgn:
        raise LookupError("no page available to evict")
    return mm.fifo_pgn.pop()


def _online(pte: int) -> bool:
    return pte_present(pte) and not pte & PAGING_PTE_SWAPPED_MASK


def pg_getpage(mm: MmStruct, pgn: int, caller: Pcb) -> int:
    """Return the RAM frame of page pgn, swapping it in if needed."""
    pte = mm.pgd[pgn]
    if not _online(pte):
        tgtfpn = pte_swap_offset(pte)
        vicpgn = find_victim_page(caller.mm)
        swpfpn = caller.active_mswp.get_free_frame()
        vicfpn = pte_fpn(mm.pgd[vicpgn])

        # Victim frame out to swap, then the target frame into its place.
        _memop(caller, MemOp.SWP, vicfpn, swpfpn)
        swap_copy_page(caller.active_mswp, tgtfpn, caller.mram, vicfpn)

        mm.pgd[vicpgn] = pte_set_swap(mm.pgd[vicpgn], 0, swpfpn)
        mm.pgd[pgn] = pte_set_fpn(0, vicfpn)
        enlist_pgn_node(caller.mm, pgn)
    return pte_fpn(mm.pgd[pgn])


def _physical_address(mm: MmStruct, addr: int, caller: Pcb) -> int:
    fpn = pg_getpage(mm, page_number(addr), caller)
    return (fpn << PAGING_ADDR_FPN_LOBIT) + page_offset(addr)


def pg_getval(mm: MmStruct, addr: int, caller: Pcb) -> int:
    """Return the signed byte at virtual address addr."""
    regs = _memop(caller, MemOp.IO_READ, _physical_address(mm, addr, caller))
    return regs.a3


def pg_setval(mm: MmStruct, addr: int, value: int, caller: Pcb) -> None:
    """Store the byte value at virtual address addr."""
    _memop(caller, MemOp.IO_WRITE, _physical_address(mm, addr, caller), value)


def read_region(caller: Pcb, vmaid: int, rgid: int, offset: int) -> int:
    """Return the byte at offset inside region rgid."""
    currg = get_symrg_byid(caller.mm, rgid)
    _require_vma(caller.mm, vmaid)
    return pg_getval(caller.mm, currg.rg_start + offset, caller)


def libread(proc: Pcb, source: int, offset: int) -> int:
    """Read a byte of region source in area 0, report it and return it."""
    data = read_region(proc, 0, source, offset)
    print("================= PHYSICAL MEMORY AFTER READING ================")
    print(f"read region={source} offset={offset} value={data}")
    print_pgtbl(proc, 0, -1)
    print(_RULE)
    print(f"read region={source} offset={offset} value={data}")
    print_pgtbl(proc, 0, -1)
    proc.mram.dump()
    return data


def write_region(caller: Pcb, vmaid: int, rgid: int, offset: int, value: int) -> None:
    """Store value at offset inside region rgid."""
    currg = get_symrg_byid(caller.mm, rgid)
    _require_vma(caller.mm, vmaid)
    pg_setval(caller.mm, currg.rg_start + offset, value, caller)


def libwrite(proc: Pcb, data: int, destination: int, offset: int) -> None:
    """Write a byte into region destination of area 0 and report it."""
    print("================= PHYSICAL MEMORY AFTER WRITING ================")
    print(f"write region={destination} offset={offset} value={data}")
    write_region(proc, 0, destination, offset, data)
    print_pgtbl(proc, 0, -1)
    print(_RULE)
    proc.mram.dump()


def free_pcb_memph(caller: Pcb) -> None:
    """Give every frame held by the process back to RAM or swap."""
    for pte in caller.mm.pgd:
        if not pte_present(pte):
            continue
        if pte & PAGING_PTE_SWAPPED_MASK:
            caller.active_mswp.put_free_frame(pte_swap_offset(pte))
        else:
            caller.mram.put_free_frame(pte_fpn(pte))