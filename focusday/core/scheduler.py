"""Schedulable tasks with explicit cancellation handles.

The timer engine never relies on ambient timer callbacks.  It asks a
:class:`Scheduler` for a task and keeps the returned :class:`TaskHandle`;
cancelling the handle guarantees the callback will not run afterwards.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable

logger = logging.getLogger(__name__)


class TaskHandle:
    """Cancellation token for a scheduled task."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def wait(self, timeout: float) -> bool:
        """Block up to *timeout* seconds; return True if cancelled meanwhile."""
        return self._cancelled.wait(timeout)

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "pending"
        return f"<TaskHandle {self.name or '?'} {state}>"


class Scheduler(ABC):
    """Common interface for running callbacks later or periodically."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None], name: str = "") -> TaskHandle:
        """Run *callback* once after *delay* seconds unless cancelled."""
        pass

    @abstractmethod
    def call_every(self, interval: float, callback: Callable[[], None], name: str = "") -> TaskHandle:
        """Run *callback* every *interval* seconds until cancelled."""
        pass


class ThreadScheduler(Scheduler):
    """Runs each task on its own daemon thread.

    A task sleeps on its handle's cancellation event, so cancelling wakes it
    up and it exits without firing.
    """

    def call_later(self, delay: float, callback: Callable[[], None], name: str = "") -> TaskHandle:
        handle = TaskHandle(name)

        def _run() -> None:
            if handle.wait(delay):
                return
            self._invoke(callback, handle)

        self._spawn(_run, handle)
        return handle

    def call_every(self, interval: float, callback: Callable[[], None], name: str = "") -> TaskHandle:
        handle = TaskHandle(name)

        def _run() -> None:
            while not handle.wait(interval):
                self._invoke(callback, handle)

        self._spawn(_run, handle)
        return handle

    @staticmethod
    def _spawn(target: Callable[[], None], handle: TaskHandle) -> None:
        t = threading.Thread(target=target, daemon=True, name=f"focusday-{handle.name or 'task'}")
        t.start()

    @staticmethod
    def _invoke(callback: Callable[[], None], handle: TaskHandle) -> None:
        try:
            callback()
        except Exception:
            logger.exception("Scheduled task %s failed", handle.name or "?")
