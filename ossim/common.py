"""Core data types shared by every part of the simulator."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from .paging import PAGING_MAX_PGN

# Build configuration
MLQ_SCHED = True
MAX_PRIO = 140
MM_PAGING = True
IODUMP = True
PAGETBL_DUMP = True

# Memory management limits
PAGING_MAX_MMSWP = 4
PAGING_MAX_SYMTBL_SZ = 30

# Legacy two-level address layout
ADDRESS_SIZE = 20
OFFSET_LEN = 10
FIRST_LV_LEN = 5
SECOND_LV_LEN = 5
SEGMENT_LEN = FIRST_LV_LEN
PAGE_LEN = SECOND_LV_LEN
NUM_PAGES = 1 << (ADDRESS_SIZE - OFFSET_LEN)
PAGE_SIZE = 1 << OFFSET_LEN

NUM_REGS = 10


class Opcode(enum.IntEnum):
    """Instruction opcodes understood by the CPU."""

    CALC = 0
    ALLOC = 1
    FREE = 2
    READ = 3
    WRITE = 4
    SYSCALL = 5
    MEMMAP = 6


@dataclass
class Instruction:
    """One instruction of a process program."""

    opcode: Opcode
    arg_0: int = 0
    arg_1: int = 0
    arg_2: int = 0
    arg_3: int = 0


@dataclass
class CodeSegment:
    """The program text of a process."""

    text: list[Instruction] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.text)


@dataclass
class MemRegion:
    """A contiguous virtual memory region [rg_start, rg_end)."""

    rg_start: int = 0
    rg_end: int = 0

    def size(self) -> int:
        return self.rg_end - self.rg_start


@dataclass(eq=False)
class VmArea:
    """A virtual memory area together with its free region list."""

    vm_id: int = 0
    vm_start: int = 0
    vm_end: int = 0
    sbrk: int = 0
    vm_freerg_list: list[MemRegion] = field(default_factory=list)
    vm_mm: MmStruct | None = field(default=None, repr=False)


def _empty_symbol_table() -> list[MemRegion]:
    return [MemRegion() for _ in range(PAGING_MAX_SYMTBL_SZ)]


@dataclass(eq=False)
class MmStruct:
    """Per-process memory management state."""

    pgd: list[int] = field(default_factory=lambda: [0] * PAGING_MAX_PGN)
    mmap: list[VmArea] = field(default_factory=list)
    symrgtbl: list[MemRegion] = field(default_factory=_empty_symbol_table)
    # Most recently mapped page first.
    fifo_pgn: list[int] = field(default_factory=list)


@dataclass
class SyscallRegs:
    """Registers handed to a system call."""

    a1: int = 0
    a2: int = 0
    a3: int = 0
    a4: int = 0
    a5: int = 0
    a6: int = 0
    orig_ax: int = 0
    flags: int = 0


@dataclass(eq=False)
class Pcb:
    """Process control block."""

    pid: int = 0
    priority: int = 0
    path: str = ""
    code: CodeSegment = field(default_factory=CodeSegment)
    regs: list[int] = field(default_factory=lambda: [0] * NUM_REGS)
    pc: int = 0
    ready_queue: Any = None
    running_list: Any = None
    mlq_ready_queue: Any = None
    prio: int = 0
    mm: MmStruct | None = None
    mram: Any = None
    mswp: list[Any] = field(default_factory=list)
    active_mswp: Any = None
    active_mswp_id: int = 0
    bp: int = 0