"""The memory system call."""

from __future__ import annotations

import enum

from .common import Pcb, SyscallRegs
from .vm import inc_vma_limit, memory_map, mm_swap_page


class MemOp(enum.IntEnum):
    """Operations of the memory system call."""

    MAP = 1
    INC = 2
    SWP = 3
    IO_READ = 4
    IO_WRITE = 5
    IO_MEMMAP = 6


SYSMEM_MAP_OP = MemOp.MAP
SYSMEM_INC_OP = MemOp.INC
SYSMEM_SWP_OP = MemOp.SWP
SYSMEM_IO_READ = MemOp.IO_READ
SYSMEM_IO_WRITE = MemOp.IO_WRITE
SYSMEM_IO_MEMMAP = MemOp.IO_MEMMAP


def sys_memmap(caller: Pcb, regs: SyscallRegs) -> int:
    """Carry out the memory operation named by regs.a1.

    A read leaves the byte read in regs.a3. Unknown operations are reported
    and ignored.
    """
    try:
        memop = MemOp(regs.a1)
    except ValueError:
        print(f"Memop code: {regs.a1}")
        return 0

    match memop:
        case MemOp.MAP | MemOp.IO_MEMMAP:
            memory_map(caller, regs.a2, regs.a3)
        case MemOp.INC:
            inc_vma_limit(caller, regs.a2, regs.a3)
        case MemOp.SWP:
            mm_swap_page(caller, regs.a2, regs.a3)
        case MemOp.IO_READ:
            regs.a3 = caller.mram.read(regs.a2)
        case MemOp.IO_WRITE:
            caller.mram.write(regs.a2, regs.a3)
    return 0