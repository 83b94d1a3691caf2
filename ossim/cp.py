"""Copying data out of a process address space."""

from __future__ import annotations

from .common import Pcb
from .libmem import get_symrg_byid
from .paging import PAGING_PAGESZ, pte_fpn, pte_present
from .queue import ProcessQueue


def _find_frame(running: ProcessQueue | None, pgn: int) -> int | None:
    """Search the running list for a process mapping pgn; the list is rotated."""
    if running is None:
        return None
    visited = ProcessQueue()
    fpn = None
    while not running.empty():
        proc = running.dequeue()
        visited.enqueue(proc)
        if proc is not None and proc.mm is not None and pte_present(proc.mm.pgd[pgn]):
            fpn = pte_fpn(proc.mm.pgd[pgn])
            break
    while not visited.empty():
        running.enqueue(visited.dequeue())
    return fpn


def copy_from_userspace(caller: Pcb, memrg: int, buffer_size: int) -> bytes:
    """Return up to buffer_size - 1 bytes of region memrg, stopping at a byte of -1.

    Raises ValueError for a missing caller or an empty buffer and LookupError
    when no running process maps a page of the region.
    """
    if caller is None or buffer_size <= 0:
        raise ValueError("a caller and a non-empty buffer are required")
    region = get_symrg_byid(caller.mm, memrg)

    out = bytearray()
    for i in range(buffer_size - 1):
        vaddr = region.rg_start + i
        fpn = _find_frame(caller.running_list, vaddr // PAGING_PAGESZ)
        if fpn is None:
            raise LookupError(f"virtual address {vaddr} is not mapped by any running process")
        byte = caller.mram.read(fpn * PAGING_PAGESZ + vaddr % PAGING_PAGESZ)
        if byte == -1:
            break
        out.append(byte & 0xFF)
    return bytes(out)