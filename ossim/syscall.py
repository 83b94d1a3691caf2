"""System call table and dispatch."""

from __future__ import annotations

from collections.abc import Callable

from .common import Pcb, SyscallRegs
from .libmem import libfree, libread
from .queue import ProcessQueue
from .sysmem import sys_memmap

_MAX_NAME_LEN = 100


def sys_ni_syscall(caller: Pcb, regs: SyscallRegs) -> int:
    """Do nothing; handles every unknown system call number."""
    return 0


def sys_listsyscall(caller: Pcb, regs: SyscallRegs) -> int:
    """Print every entry of the system call table."""
    for entry in sys_call_table:
        print(entry)
    return 0


def _read_name(caller: Pcb, memrg: int) -> str:
    name = bytearray()
    for offset in range(_MAX_NAME_LEN):
        data = libread(caller, memrg, offset)
        print(f"Data {offset}: {data}")
        if data == -1:
            break
        name.append(data & 0xFF)
    return name.decode("latin-1")


def sys_killall(caller: Pcb, regs: SyscallRegs) -> int:
    """Remove every running process whose path is the name stored in region regs.a1.

    The name is read byte by byte until a byte of -1.
    """
    memrg = regs.a1
    proc_name = _read_name(caller, memrg)
    print(f'The procname retrieved from memregionid {memrg} is "{proc_name}"')

    running = caller.running_list
    if running is None:
        return 0

    kept = ProcessQueue()
    idx = 0
    while not running.empty():
        proc = running.dequeue()
        if proc.path == proc_name:
            if proc.pid == caller.pid:
                continue
            libfree(proc, idx)
        else:
            kept.enqueue(proc)
        idx += 1

    while not kept.empty():
        running.enqueue(kept.dequeue())
    return 0


_Handler = Callable[[Pcb, SyscallRegs], int]

_SYSCALLS: dict[int, tuple[str, _Handler]] = {
    0: ("sys_listsyscall", sys_listsyscall),
    17: ("sys_memmap", sys_memmap),
    101: ("sys_killall", sys_killall),
}

sys_call_table: tuple[str, ...] = tuple(f"{nr}-{name}" for nr, (name, _) in _SYSCALLS.items())
syscall_table_size = len(sys_call_table)


def syscall(caller: Pcb, nr: int, regs: SyscallRegs) -> int:
    """Run system call nr with the given registers."""
    entry = _SYSCALLS.get(nr)
    handler = entry[1] if entry is not None else sys_ni_syscall
    return handler(caller, regs)


def libsyscall(caller: Pcb, syscall_idx: int, a1: int, a2: int, a3: int) -> int:
    """Run system call syscall_idx with the three argument registers filled in."""
    return syscall(caller, syscall_idx, SyscallRegs(a1=a1, a2=a2, a3=a3))