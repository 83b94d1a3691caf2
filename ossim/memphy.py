"""Physical memory devices divided into frames."""

from __future__ import annotations

from collections import deque

from .paging import PAGING_PAGESZ


class OutOfFramesError(Exception):
    """Raised when a physical memory has no free frame left."""


class MemPhy:
    """A byte-addressable physical memory with a free frame list."""

    def __init__(self, max_size: int, random_access: bool = True) -> None:
        if max_size < 0:
            raise ValueError("memory size must not be negative")
        self.storage = bytearray(max_size)
        self.maxsz = max_size
        self.random_access = bool(random_access)
        self.cursor = 0
        self.free_frames: deque[int] = deque()
        self.used_frames: list[int] = []
        if max_size >= PAGING_PAGESZ:
            self.format(PAGING_PAGESZ)

    def _check(self, addr: int) -> None:
        if not self.random_access:
            raise ValueError("sequential access mode is not supported")
        if not 0 <= addr < self.maxsz:
            raise IndexError(f"physical address {addr} out of range")

    def move_cursor(self, offset: int) -> None:
        """Move the cursor sequentially from 0 by offset steps."""
        steps = max(0, min(offset, self.maxsz))
        self.cursor = steps % self.maxsz if self.maxsz else 0

    def read(self, addr: int) -> int:
        """Return the signed byte stored at addr."""
        self._check(addr)
        value = self.storage[addr]
        return value - 256 if value >= 128 else value

    def write(self, addr: int, data: int) -> None:
        """Store the low byte of data at addr."""
        self._check(addr)
        self.storage[addr] = data & 0xFF

    def format(self, pagesz: int) -> None:
        """Rebuild the free frame list with every frame of size pagesz."""
        numfp = self.maxsz // pagesz if pagesz > 0 else 0
        if numfp <= 0:
            raise ValueError("memory too small to hold a single frame")
        self.free_frames = deque(range(numfp))

    def get_free_frame(self) -> int:
        """Take the first free frame number."""
        if not self.free_frames:
            raise OutOfFramesError("no free frame available")
        return self.free_frames.popleft()

    def put_free_frame(self, fpn: int) -> None:
        """Return a frame to the head of the free list."""
        self.free_frames.appendleft(fpn)

    def dump(self) -> str:
        """Print and return every non-zero byte of the memory."""
        lines = ["===== PHYSICAL MEMORY DUMP ====="]
        for addr, value in enumerate(self.storage):
            if value:
                signed = value - 256 if value >= 128 else value
                lines.append(f"BYTE {addr:08x}: {signed}")
        lines.append("===== PHYSICAL MEMORY END-DUMP =====")
        text = "\n".join(lines) + "\n"
        print(text, end="")
        return text