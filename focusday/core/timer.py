"""Timer Engine for FocusDay.

Owns the countdown state and the mode transitions.  The once-per-second
countdown and the auto-progress grace delay are tasks obtained from an
injected :class:`~focusday.core.scheduler.Scheduler`; the engine keeps
their handles and cancels them explicitly, so a pause or reset can never
be undone by a callback that was already queued.
"""

import logging
import threading
from typing import Callable, Optional

from focusday.core.day import DayTracker
from focusday.core.models import Durations, TimerMode, TimerState
from focusday.core.scheduler import Scheduler, TaskHandle

logger = logging.getLogger(__name__)


class TimerEngine:
    """Countdown state machine cycling focus, short break and long break."""

    TICK_INTERVAL = 1
    AUTO_PROGRESS_DELAY = 1

    def __init__(
        self,
        day: DayTracker,
        scheduler: Scheduler,
        durations: Optional[Durations] = None,
        auto_progress_delay: float = AUTO_PROGRESS_DELAY,
    ) -> None:
        self.day = day
        self.scheduler = scheduler
        self.durations = durations if durations is not None else Durations()
        self.auto_progress_delay = auto_progress_delay
        focus = self.durations.focus_seconds
        self.state = TimerState(
            mode=TimerMode.READY, remaining_seconds=focus, total_seconds=focus, running=False
        )
        self.lock = threading.RLock()
        # Called with the events of every scheduled (not caller-driven) change.
        self.on_change: Optional[Callable[[list[str]], None]] = None
        self._tick_task: Optional[TaskHandle] = None
        self._auto_task: Optional[TaskHandle] = None

    @property
    def running(self) -> bool:
        return self.state.running

    @property
    def auto_start_pending(self) -> bool:
        return self._auto_task is not None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self) -> list[str]:
        """Begin counting down.

        Returns ``['day_not_active']`` without touching the countdown when
        no day is active, and an empty list when already running.
        """
        if not self.day.active:
            logger.info("Start ignored: no active day")
            return ["day_not_active"]

        self.cancel_auto_start()
        if self.state.running:
            return []

        self.state.running = True

        def _on_tick() -> None:
            self._run_tick(handle)

        handle = self.scheduler.call_every(self.TICK_INTERVAL, _on_tick, name="tick")
        self._tick_task = handle
        logger.debug("Countdown started in %s with %ds left", self.state.mode.value,
                     self.state.remaining_seconds)
        return ["timer_started"]

    def pause(self) -> list[str]:
        self.cancel_auto_start()
        if not self.state.running:
            return []
        self._halt()
        return ["timer_paused"]

    def reset(self) -> list[str]:
        events = self.pause()
        self.state.remaining_seconds = self.state.total_seconds
        events.append("timer_reset")
        return events

    def tick(self) -> list[str]:
        """Advance the countdown by one second."""
        if not self.state.running:
            return []
        if self.state.remaining_seconds > 0:
            self.state.remaining_seconds -= 1
            return ["tick"]
        return self.on_complete()

    def switch_mode(self, mode: TimerMode) -> list[str]:
        """Enter *mode* with a full interval.  Does not start the countdown."""
        if mode == TimerMode.READY and self.state.running:
            self._halt()
        self.state.mode = mode
        self.state.total_seconds = self.durations.for_mode(mode)
        self.state.remaining_seconds = self.state.total_seconds
        return [f"mode_{mode.value}"]

    def on_complete(self) -> list[str]:
        """Handle the end of the current interval.

        Stops the countdown, lets the day tracker count the interval and
        pick the next mode, then schedules the automatic start of that
        mode when auto-progress is on.
        """
        self.cancel_auto_start()
        if self.state.running:
            self._halt()

        finished = self.state.mode
        next_mode = self.day.record_completion(finished)
        events = [f"{finished.value}_completed"]
        events.extend(self.switch_mode(next_mode))
        logger.info("%s interval complete; next is %s", finished.value, next_mode.value)

        if self.day.settings.auto_progress and self.day.active:
            self._schedule_auto_start()
            events.append("auto_start_scheduled")
        return events

    def cancel_auto_start(self) -> None:
        if self._auto_task is not None:
            self._auto_task.cancel()
            self._auto_task = None
            logger.debug("Pending auto-start cancelled")

    def detach(self) -> None:
        """Cancel all scheduled tasks, leaving the state as it is."""
        self.cancel_auto_start()
        if self._tick_task is not None:
            self._tick_task.cancel()
            self._tick_task = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _halt(self) -> None:
        self.state.running = False
        if self._tick_task is not None:
            self._tick_task.cancel()
            self._tick_task = None

    def _schedule_auto_start(self) -> None:
        def _on_fire() -> None:
            self._run_auto_start(handle)

        handle = self.scheduler.call_later(self.auto_progress_delay, _on_fire, name="auto-start")
        self._auto_task = handle

    def _run_tick(self, handle: TaskHandle) -> None:
        with self.lock:
            if handle is not self._tick_task:
                return
            self._notify(self.tick())

    def _run_auto_start(self, handle: TaskHandle) -> None:
        with self.lock:
            if handle is not self._auto_task:
                return
            self._auto_task = None
            self._notify(self.start())

    def _notify(self, events: list[str]) -> None:
        if self.on_change is not None:
            self.on_change(events)
