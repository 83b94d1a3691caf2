"""Execution of process instructions."""

from __future__ import annotations

from .common import Opcode, Pcb
from .libmem import libfree, liballoc, libread, libwrite
from .syscall import libsyscall
from .vm import memory_map


def calc(proc: Pcb) -> int:
    """Spend one slot computing; touches no state."""
    return 0


def _signed_byte(value: int) -> int:
    value &= 0xFF
    return value - 256 if value >= 128 else value


def run(proc: Pcb) -> bool:
    """Execute the next instruction of proc.

    Returns False when the program has no instruction left. Errors raised by
    the instruction propagate after the program counter has moved on.
    """
    if proc.pc >= proc.code.size:
        return False
    ins = proc.code.text[proc.pc]
    proc.pc += 1

    match ins.opcode:
        case Opcode.CALC:
            calc(proc)
        case Opcode.ALLOC:
            liballoc(proc, ins.arg_0, ins.arg_1)
        case Opcode.FREE:
            libfree(proc, ins.arg_0)
        case Opcode.READ:
            libread(proc, ins.arg_0, ins.arg_1)
        case Opcode.WRITE:
            libwrite(proc, _signed_byte(ins.arg_0), ins.arg_1, ins.arg_2)
        case Opcode.SYSCALL:
            libsyscall(proc, ins.arg_0, ins.arg_1, ins.arg_2, ins.arg_3)
        case Opcode.MEMMAP:
            memory_map(proc, ins.arg_0, ins.arg_1)
        case _:
            raise ValueError(f"unknown opcode {ins.opcode!r}")
    return True