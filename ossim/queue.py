"""Bounded FIFO queue of processes."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .common import Pcb

MAX_QUEUE_SIZE = 10


class ProcessQueue:
    """A FIFO of processes that ignores additions once full."""

    def __init__(self, capacity: int = MAX_QUEUE_SIZE) -> None:
        self.capacity = capacity
        self._items: deque[Pcb] = deque()

    def enqueue(self, proc: Pcb) -> bool:
        """Append proc; return False when the queue was full."""
        if len(self._items) >= self.capacity:
            return False
        self._items.append(proc)
        return True

    def dequeue(self) -> Pcb | None:
        """Remove and return the oldest process, or None if empty."""
        return self._items.popleft() if self._items else None

    def empty(self) -> bool:
        return not self._items

    @property
    def size(self) -> int:
        return len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Pcb]:
        return iter(self._items)