"""Slot-based timer that keeps simulated devices in lockstep."""

from __future__ import annotations

import threading


class TimerEvent:
    """One device driven by the timer, one time slot at a time."""

    def __init__(self) -> None:
        self.done = False
        self.fsh = False
        self._event_cond = threading.Condition()
        self._timer_cond = threading.Condition()

    def next_slot(self) -> None:
        """Report the current slot as done and wait for the next one."""
        with self._event_cond:
            self.done = True
            self._event_cond.notify()
        with self._timer_cond:
            while self.done:
                self._timer_cond.wait()

    def detach(self) -> None:
        """Tell the timer this device has finished for good."""
        with self._event_cond:
            self.fsh = True
            self._event_cond.notify()

    def _wait_slot_end(self) -> bool:
        with self._event_cond:
            while not self.done and not self.fsh:
                self._event_cond.wait()
            return self.fsh

    def _release(self) -> None:
        with self._timer_cond:
            self.done = False
            self._timer_cond.notify()


class Timer:
    """Advances simulated time once every attached device is done with a slot."""

    def __init__(self) -> None:
        self._events: list[TimerEvent] = []
        self._time = 0
        self._started = False
        self._stop = False
        self._thread: threading.Thread | None = None

    def attach_event(self) -> TimerEvent:
        """Register a new device; only allowed before the timer starts."""
        if self._started:
            raise RuntimeError("cannot attach a device to a running timer")
        event = TimerEvent()
        self._events.insert(0, event)
        return event

    def current_time(self) -> int:
        """Return the number of completed time slots."""
        return self._time

    def start(self) -> None:
        """Start advancing time in a background thread."""
        if self._started:
            raise RuntimeError("timer already started")
        self._started = True
        self._thread = threading.Thread(target=self._routine, name="timer", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop the timer, wait for its thread and drop every device."""
        self._stop = True
        if self._thread is not None:
            self._thread.join()
        self._events.clear()

    def _routine(self) -> None:
        while not self._stop:
            print(f"Time slot {self._time:3d}")
            finished = sum(event._wait_slot_end() for event in self._events)
            self._time += 1
            for event in self._events:
                event._release()
            if finished == len(self._events):
                break