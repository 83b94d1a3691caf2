"""Multi-level queue scheduler."""

from __future__ import annotations

import threading

from .common import MAX_PRIO, Pcb
from .queue import ProcessQueue


class Scheduler:
    """Picks processes from per-priority queues, each with a slot budget."""

    def __init__(self, max_prio: int = MAX_PRIO) -> None:
        self.max_prio = max_prio
        self.ready_queue = ProcessQueue()
        self.run_queue = ProcessQueue()
        self.running_list = ProcessQueue()
        self.mlq_ready_queue = [ProcessQueue() for _ in range(max_prio)]
        self._slot = [max_prio - prio for prio in range(max_prio)]
        self._cur_prio = 0
        self._lock = threading.Lock()

    def queue_empty(self) -> bool:
        """Return whether no process is waiting."""
        return (
            all(queue.empty() for queue in self.mlq_ready_queue)
            and self.ready_queue.empty()
            and self.run_queue.empty()
        )

    def _advance(self, prio: int) -> None:
        self._cur_prio = (self._cur_prio + 1) % self.max_prio
        self._slot[prio] = self.max_prio - prio

    def get_proc(self) -> Pcb | None:
        """Take the next process to run, or None when none is waiting."""
        with self._lock:
            for step in range(self.max_prio):
                prio = (self._cur_prio + step) % self.max_prio
                queue = self.mlq_ready_queue[prio]
                if queue.empty():
                    continue
                if self._slot[prio] > 0:
                    proc = queue.dequeue()
                    self._slot[prio] -= 1
                    if self._slot[prio] == 0:
                        self._advance(prio)
                    return proc
                self._advance(prio)
        return None

    def _enlist(self, proc: Pcb) -> None:
        if not 0 <= proc.prio < self.max_prio:
            raise ValueError(f"priority {proc.prio} out of range")
        proc.ready_queue = self.ready_queue
        proc.mlq_ready_queue = self.mlq_ready_queue
        proc.running_list = self.running_list
        with self._lock:
            self.running_list.enqueue(proc)
        with self._lock:
            self.mlq_ready_queue[proc.prio].enqueue(proc)

    def put_proc(self, proc: Pcb) -> None:
        """Return a process that used up its time slot."""
        self._enlist(proc)

    def add_proc(self, proc: Pcb) -> None:
        """Admit a newly loaded process."""
        self._enlist(proc)