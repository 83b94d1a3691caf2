"""Reading process programs from their text descriptions."""

from __future__ import annotations

import threading
from pathlib import Path

from .common import PAGE_SIZE, CodeSegment, Instruction, Opcode, Pcb

_OPCODES = {
    "calc": Opcode.CALC,
    "alloc": Opcode.ALLOC,
    "free": Opcode.FREE,
    "read": Opcode.READ,
    "write": Opcode.WRITE,
    "syscall": Opcode.SYSCALL,
    "memmap": Opcode.MEMMAP,
}

_ARG_COUNTS = {
    Opcode.CALC: 0,
    Opcode.ALLOC: 2,
    Opcode.FREE: 1,
    Opcode.READ: 3,
    Opcode.WRITE: 3,
    Opcode.MEMMAP: 2,
}

_MAX_SYSCALL_ARGS = 4


class LoaderError(Exception):
    """Raised when a process description cannot be read."""


def parse_opcode(name: str) -> Opcode:
    """Return the opcode named by name."""
    try:
        return _OPCODES[name]
    except KeyError:
        raise LoaderError(f"unknown opcode: {name}") from None


class _Tokens:
    """Whitespace separated tokens that remember their line."""

    def __init__(self, text: str) -> None:
        self._tokens = [
            (lineno, token)
            for lineno, line in enumerate(text.splitlines())
            for token in line.split()
        ]
        self._pos = 0

    def next(self) -> tuple[int, str]:
        if self._pos >= len(self._tokens):
            raise LoaderError("unexpected end of process description")
        item = self._tokens[self._pos]
        self._pos += 1
        return item

    def next_int(self) -> int:
        _, token = self.next()
        return _to_int(token)

    def rest_of_line(self, lineno: int) -> list[str]:
        rest = []
        while self._pos < len(self._tokens) and self._tokens[self._pos][0] == lineno:
            rest.append(self._tokens[self._pos][1])
            self._pos += 1
        return rest


def _to_int(token: str) -> int:
    try:
        return int(token)
    except ValueError:
        raise LoaderError(f"expected a number, got {token!r}") from None


class Loader:
    """Builds process control blocks, handing out increasing PIDs."""

    def __init__(self, first_pid: int = 1) -> None:
        self.avail_pid = first_pid
        self._lock = threading.Lock()

    def _instruction(self, tokens: _Tokens) -> Instruction:
        lineno, name = tokens.next()
        opcode = parse_opcode(name)
        if opcode is Opcode.SYSCALL:
            args = [_to_int(tok) for tok in tokens.rest_of_line(lineno)[:_MAX_SYSCALL_ARGS]]
        else:
            args = [tokens.next_int() for _ in range(_ARG_COUNTS[opcode])]
        return Instruction(opcode, *args)

    def parse(self, text: str, path: str = "") -> Pcb:
        """Build a process from a description: priority, length, then instructions."""
        tokens = _Tokens(text)
        priority = tokens.next_int()
        size = tokens.next_int()
        if size < 0:
            raise LoaderError(f"negative program length {size}")
        code = CodeSegment([self._instruction(tokens) for _ in range(size)])
        with self._lock:
            pid = self.avail_pid
            self.avail_pid += 1
        return Pcb(pid=pid, priority=priority, path=path, code=code, pc=0, bp=PAGE_SIZE)

    def load(self, path: str | Path) -> Pcb:
        """Read and parse the process description stored at path."""
        try:
            text = Path(path).read_text()
        except OSError as exc:
            raise LoaderError(f"Cannot find process description at '{path}'") from exc
        return self.parse(text, str(path))