"""Configuration reading and the multi-CPU simulation driver."""

from __future__ import annotations

import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path

from .common import MAX_PRIO, PAGING_MAX_MMSWP, MmStruct, Pcb
from .cpu import run
from .loader import Loader, LoaderError
from .memphy import MemPhy
from .sched import Scheduler
from .timer import Timer, TimerEvent
from .vm import init_mm

_PROC_DIR = "input/proc/"


class ConfigError(Exception):
    """Raised when a simulation configuration cannot be read."""


@dataclass
class _ProcessEntry:
    start_time: int
    path: str
    prio: int


@dataclass
class Config:
    """Time slice, CPU count, memory sizes and the processes to run."""

    time_slot: int
    num_cpus: int
    processes: list[_ProcessEntry] = field(default_factory=list)
    memramsz: int = 0
    memswpsz: list[int] = field(default_factory=lambda: [0] * PAGING_MAX_MMSWP)


def read_config(path: str | Path) -> Config:
    """Parse a configuration file.

    Layout: time slot, CPU count and process count; RAM size; one size per
    swap device; then start time, program name and priority per process.
    """
    try:
        text = Path(path).read_text()
    except OSError as exc:
        raise ConfigError(f"Cannot find configure file at {path}") from exc

    tokens = iter(text.split())

    def take() -> str:
        token = next(tokens, None)
        if token is None:
            raise ConfigError(f"configuration {path} ends too early")
        return token

    def take_int() -> int:
        token = take()
        try:
            return int(token)
        except ValueError:
            raise ConfigError(f"expected a number in {path}, got {token!r}") from None

    time_slot, num_cpus, num_processes = take_int(), take_int(), take_int()
    if num_cpus < 0 or num_processes < 0:
        raise ConfigError("CPU and process counts must not be negative")
    memramsz = take_int()
    memswpsz = [take_int() for _ in range(PAGING_MAX_MMSWP)]
    if memramsz < 0 or any(size < 0 for size in memswpsz):
        raise ConfigError("memory sizes must not be negative")

    processes = []
    for _ in range(num_processes):
        start_time = take_int()
        name = take()
        prio = take_int()
        if not 0 <= prio < MAX_PRIO:
            raise ConfigError(f"priority {prio} of {name} out of range")
        processes.append(_ProcessEntry(start_time, _PROC_DIR + name, prio))
    return Config(time_slot, num_cpus, processes, memramsz, memswpsz)


class Simulator:
    """Runs the configured processes on simulated CPUs driven by a timer."""

    def __init__(self, config: Config, root: str | Path | None = None) -> None:
        self.config = config
        self.root = Path(root) if root is not None else None
        self.scheduler = Scheduler()
        self.mram = MemPhy(config.memramsz)
        self.mswp = [MemPhy(size) for size in config.memswpsz]
        self.finished: list[int] = []
        self.errors: list[tuple[int, Exception]] = []
        self._loader = Loader()
        self._timer = Timer()
        self._done = threading.Event()
        self._lock = threading.Lock()

    def _resolve(self, path: str) -> Path:
        return self.root / path if self.root is not None else Path(path)

    def _load_all(self) -> list[tuple[_ProcessEntry, Pcb]]:
        loaded = []
        for entry in self.config.processes:
            proc = self._loader.load(self._resolve(entry.path))
            proc.path = entry.path
            loaded.append((entry, proc))
        return loaded

    def _cpu_routine(self, event: TimerEvent, cpu_id: int) -> None:
        try:
            self._cpu_loop(event, cpu_id)
        finally:
            event.detach()

    def _cpu_loop(self, event: TimerEvent, cpu_id: int) -> None:
        time_left = 0
        proc: Pcb | None = None
        while True:
            if proc is None:
                proc = self.scheduler.get_proc()
            elif proc.pc == proc.code.size:
                print(f"\tCPU {cpu_id}: Processed {proc.pid:2d} has finished")
                with self._lock:
                    self.finished.append(proc.pid)
                proc = self.scheduler.get_proc()
                time_left = 0
            elif time_left == 0:
                print(f"\tCPU {cpu_id}: Put process {proc.pid:2d} to run queue")
                self.scheduler.put_proc(proc)
                proc = self.scheduler.get_proc()

            if proc is None and self._done.is_set():
                print(f"\tCPU {cpu_id} stopped")
                break
            if proc is None:
                event.next_slot()
                continue
            if time_left == 0:
                print(f"\tCPU {cpu_id}: Dispatched process {proc.pid:2d}")
                time_left = self.config.time_slot

            try:
                run(proc)
            except Exception as exc:  # the instruction fails, the process goes on
                print(f"\tCPU {cpu_id}: process {proc.pid:2d} failed: {exc}")
                with self._lock:
                    self.errors.append((proc.pid, exc))
            time_left -= 1
            event.next_slot()

    def _load_routine(self, event: TimerEvent, loaded: list[tuple[_ProcessEntry, Pcb]]) -> None:
        try:
            print("ld_routine")
            for entry, proc in loaded:
                proc.prio = entry.prio
                while self._timer.current_time() < entry.start_time:
                    event.next_slot()
                proc.mm = init_mm(MmStruct())
                proc.mram = self.mram
                proc.mswp = self.mswp
                proc.active_mswp = self.mswp[0]
                proc.active_mswp_id = 0
                print(f"\tLoaded a process at {entry.path}, PID: {proc.pid} PRIO: {entry.prio}")
                self.scheduler.add_proc(proc)
                event.next_slot()
        finally:
            self._done.set()
            event.detach()

    def run(self) -> list[int]:
        """Run the simulation to the end and return PIDs in finishing order."""
        loaded = self._load_all()
        cpu_events = [self._timer.attach_event() for _ in range(self.config.num_cpus)]
        ld_event = self._timer.attach_event()
        self._timer.start()

        loader = threading.Thread(
            target=self._load_routine, args=(ld_event, loaded), name="loader", daemon=True
        )
        cpus = [
            threading.Thread(
                target=self._cpu_routine, args=(event, cpu_id), name=f"cpu{cpu_id}", daemon=True
            )
            for cpu_id, event in enumerate(cpu_events)
        ]
        loader.start()
        for cpu in cpus:
            cpu.start()
        for cpu in cpus:
            cpu.join()
        loader.join()
        self._timer.stop()
        return list(self.finished)


def main(argv: list[str] | None = None) -> int:
    """Run the simulation described by input/<config>."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 1:
        print("Usage: os [path to configure file]")
        return 1
    try:
        config = read_config(Path("input") / args[0])
        Simulator(config).run()
    except (ConfigError, LoaderError) as exc:
        print(exc)
        return 1
    return 0