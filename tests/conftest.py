"""Shared fixtures: a controllable clock and a deterministic scheduler."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional

import pytest

from focusday.core.controller import FocusDayController
from focusday.core.models import Durations
from focusday.core.scheduler import Scheduler, TaskHandle
from focusday.persistence.store import SnapshotStore

T0 = datetime(2025, 1, 6, 9, 0, 0)

# Short intervals keep the scenarios readable: 1 minute focus.
DURATIONS = Durations(focus_seconds=60, short_break_seconds=10, long_break_seconds=30)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = T0) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


@dataclass
class _Task:
    due: datetime
    seq: int
    interval: Optional[float]
    callback: Callable[[], None]
    handle: TaskHandle = field(default_factory=TaskHandle)


class ManualScheduler(Scheduler):
    """Runs scheduled callbacks only when :meth:`advance` moves the clock."""

    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self._tasks: list[_Task] = []
        self._seq = 0

    def call_later(self, delay, callback, name=""):
        return self._add(delay, None, callback, name)

    def call_every(self, interval, callback, name=""):
        return self._add(interval, interval, callback, name)

    def _add(self, delay, interval, callback, name) -> TaskHandle:
        self._seq += 1
        task = _Task(
            due=self.clock() + timedelta(seconds=delay),
            seq=self._seq,
            interval=interval,
            callback=callback,
            handle=TaskHandle(name),
        )
        self._tasks.append(task)
        return task.handle

    @property
    def pending(self) -> list[TaskHandle]:
        return [t.handle for t in self._tasks if not t.handle.cancelled]

    def pending_named(self, name: str) -> list[TaskHandle]:
        return [h for h in self.pending if h.name == name]

    def advance(self, seconds: float) -> None:
        target = self.clock() + timedelta(seconds=seconds)
        while True:
            self._tasks = [t for t in self._tasks if not t.handle.cancelled]
            due = [t for t in self._tasks if t.due <= target]
            if not due:
                break
            task = min(due, key=lambda t: (t.due, t.seq))
            self.clock.current = task.due
            if task.interval is None:
                self._tasks.remove(task)
            else:
                task.due = task.due + timedelta(seconds=task.interval)
            task.callback()
        self.clock.current = target


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    return ManualScheduler(clock)


@pytest.fixture
def store():
    """Create an in-memory SnapshotStore for each test."""
    s = SnapshotStore(":memory:")
    s.init_db()
    yield s
    s.close()


@pytest.fixture
def controller(store, scheduler, clock):
    return FocusDayController(store, scheduler, clock=clock, durations=DURATIONS)


def finish_interval(engine, scheduler) -> None:
    """Start the engine if needed and run the current interval to completion."""
    engine.start()
    # One tick per remaining second, then one more tick observes zero.
    scheduler.advance(engine.state.remaining_seconds + 1)
