"""FocusDay controller.

The single object the presentation layer talks to.  It owns the timer
engine and the day tracker, receives user intents, and keeps the snapshot
store up to date: every intent is a mutate-then-persist step, and every
scheduled change made by the engine goes through the same commit path.
"""

import functools
import logging
import sqlite3
from datetime import datetime, timezone
from typing import Callable, Optional

from focusday.core import reconcile
from focusday.core.day import DayTracker
from focusday.core.errors import ValidationError
from focusday.core.models import (
    MAX_SESSIONS,
    MIN_SESSIONS,
    MODE_LABELS,
    TIMER_LABELS,
    DaySummary,
    DisplayState,
    Durations,
    Notice,
    PersistedSnapshot,
    Settings,
    TimerMode,
    is_valid_session_count,
)
from focusday.core.scheduler import Scheduler
from focusday.core.timer import TimerEngine
from focusday.persistence.store import SnapshotStore

logger = logging.getLogger(__name__)

# Notice text for engine events; events without an entry stay silent.
EVENT_NOTICES = {
    "day_not_active": ("Please start your day first!", "warning"),
    "focus_completed": ("Focus session complete! Take a short break!", "info"),
    "short_break_completed": ("Break is over! Ready to focus?", "info"),
    "long_break_completed": ("Long break complete! Let's get back to work!", "info"),
}
LONG_BREAK_NOTICE = "Amazing! Time for a long break!"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def persisted(method: Callable) -> Callable:
    """Run an intent under the engine lock, then save a snapshot.

    The save is attempted even when the intent raises, so no state-changing
    call returns without a consistent snapshot having been written.
    """
    @functools.wraps(method)
    def wrapper(self: "FocusDayController", *args, **kwargs):
        with self.engine.lock:
            try:
                return method(self, *args, **kwargs)
            finally:
                self._commit()
    return wrapper


class FocusDayController:
    """Facade over the timer engine, day tracker and snapshot store."""

    def __init__(
        self,
        store: SnapshotStore,
        scheduler: Scheduler,
        clock: Callable[[], datetime] = utc_now,
        durations: Optional[Durations] = None,
        auto_progress_delay: float = TimerEngine.AUTO_PROGRESS_DELAY,
        cascade_completions: bool = False,
    ) -> None:
        self.store = store
        self.clock = clock
        self.cascade_completions = cascade_completions
        self.day = DayTracker()
        self.engine = TimerEngine(
            self.day, scheduler, durations=durations, auto_progress_delay=auto_progress_delay
        )
        self.engine.on_change = self._on_engine_change
        self.notice: Optional[Notice] = None
        self.last_summary: Optional[DaySummary] = None
        self.summary_visible = False

    # ------------------------------------------------------------------
    # Day intents
    # ------------------------------------------------------------------

    @persisted
    def start_day(self) -> None:
        self.engine.pause()
        self.day.begin(self.clock())
        self.engine.switch_mode(TimerMode.FOCUS)
        self.summary_visible = False
        logger.info("Day started at %s", self.day.record.started_at)
        self._set_notice("Day started! Let's focus!")

    @persisted
    def end_day(self) -> DaySummary:
        """Pause, close the day, and return its summary.  Counters are kept."""
        self.engine.pause()
        self.day.finish()
        summary = self.day.summary(self.clock(), self.engine.durations.focus_seconds)
        self.last_summary = summary
        self.summary_visible = True
        logger.info("Day ended: %d focus sessions, %d short breaks, %d long breaks",
                    summary.focus_sessions, summary.short_breaks, summary.long_breaks)
        return summary

    @persisted
    def start_new_day(self) -> None:
        """Clear every counter and return to the idle state."""
        self.summary_visible = False
        self.engine.pause()
        self.day.clear()
        self.engine.switch_mode(TimerMode.READY)
        self.last_summary = None
        logger.info("Day cleared; timer is ready")

    def close_summary(self) -> None:
        self.summary_visible = False

    def summary(self) -> DaySummary:
        with self.engine.lock:
            return self.day.summary(self.clock(), self.engine.durations.focus_seconds)

    # ------------------------------------------------------------------
    # Timer intents
    # ------------------------------------------------------------------

    @persisted
    def start(self) -> bool:
        """Start the countdown.  Returns False when no day is active."""
        events = self.engine.start()
        self._notice_for(events)
        return "day_not_active" not in events

    @persisted
    def pause(self) -> None:
        self.engine.pause()

    @persisted
    def reset(self) -> None:
        self.engine.reset()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @persisted
    def set_configuration(
        self,
        sessions_before_long_break: Optional[int] = None,
        auto_progress: Optional[bool] = None,
    ) -> Settings:
        """Validate and apply new settings.

        Raises ValidationError, leaving the previous settings in place,
        when the session count is outside the allowed range.
        """
        current = self.day.settings
        sessions = (
            current.sessions_before_long_break
            if sessions_before_long_break is None else sessions_before_long_break
        )
        if not is_valid_session_count(sessions):
            self._set_notice(
                f"Please enter a value between {MIN_SESSIONS} and {MAX_SESSIONS}", "warning"
            )
            logger.warning("Rejected sessions_before_long_break=%r", sessions)
            raise ValidationError(
                f"sessions_before_long_break must be between {MIN_SESSIONS} and {MAX_SESSIONS}"
            )
        if auto_progress is not None and not isinstance(auto_progress, bool):
            logger.warning("Rejected auto_progress=%r", auto_progress)
            raise ValidationError("auto_progress must be a boolean")

        settings = Settings(
            sessions_before_long_break=sessions,
            auto_progress=current.auto_progress if auto_progress is None else auto_progress,
        )
        self.day.apply_settings(settings)
        if not settings.auto_progress:
            self.engine.cancel_auto_start()
        message = f"Settings saved! Long break after {sessions} sessions"
        if settings.auto_progress:
            message += ". Auto-progress enabled!"
        self._set_notice(message)
        return settings

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    @persisted
    def restore(self) -> bool:
        """Rehydrate from the stored snapshot.  Returns False on a cold start."""
        return self._reconcile_stored()

    def preview(self) -> bool:
        """Reconcile the stored snapshot in memory only.

        Nothing is written back and no task is left scheduled, so one-shot
        readers never compete with the running instance for the store.
        """
        with self.engine.lock:
            try:
                return self._reconcile_stored()
            finally:
                self.engine.detach()

    @persisted
    def resync(self) -> None:
        """Correct drift after regaining the foreground."""
        if not self.engine.running:
            return
        events = reconcile.resync(self.engine, self.store.load(), self.clock())
        self._notice_for(events)

    def shutdown(self) -> None:
        """Save the final snapshot and stop all scheduled tasks."""
        with self.engine.lock:
            self._commit()
            self.engine.detach()
        logger.info("Timer state saved on shutdown")

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------

    def snapshot(self) -> PersistedSnapshot:
        with self.engine.lock:
            state = self.engine.state
            rec = self.day.record
            return PersistedSnapshot(
                time_remaining=state.remaining_seconds,
                total_time=state.total_seconds,
                is_running=state.running,
                current_mode=state.mode,
                day_active=rec.active,
                day_start_time=rec.started_at,
                completed_focus_sessions=rec.completed_focus_sessions,
                completed_short_breaks=rec.completed_short_breaks,
                completed_long_breaks=rec.completed_long_breaks,
                sessions_since_long_break=rec.sessions_since_long_break,
                sessions_before_long_break=self.day.settings.sessions_before_long_break,
                auto_progress=self.day.settings.auto_progress,
                last_update=self.clock(),
            )

    def display(self) -> DisplayState:
        with self.engine.lock:
            state = self.engine.state
            minutes, seconds = divmod(state.remaining_seconds, 60)
            return DisplayState(
                minutes=minutes,
                seconds=seconds,
                mode=state.mode,
                mode_label=MODE_LABELS[state.mode],
                timer_label=TIMER_LABELS[state.mode],
                running=state.running,
                day_active=self.day.active,
                completed_focus_sessions=self.day.record.completed_focus_sessions,
                completed_long_breaks=self.day.record.completed_long_breaks,
                progress_fraction=self.day.progress_fraction,
                progress_label=self.day.progress_label,
                notice=self.notice,
            )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _commit(self) -> None:
        try:
            self.store.save(self.snapshot())
        except (sqlite3.Error, ValidationError):
            logger.exception("Failed to save timer snapshot")

    def _reconcile_stored(self) -> bool:
        snapshot = self.store.load()
        if snapshot is None:
            logger.info("No saved state; starting fresh")
            return False
        events = reconcile.restore(
            self.engine, snapshot, self.clock(), cascade=self.cascade_completions
        )
        self._notice_for(events)
        return True

    def _on_engine_change(self, events: list[str]) -> None:
        self._notice_for(events)
        self._commit()

    def _notice_for(self, events: list[str]) -> None:
        for event in events:
            if event == "mode_long_break":
                self._set_notice(LONG_BREAK_NOTICE)
            elif event in EVENT_NOTICES and not (
                event == "focus_completed" and "mode_long_break" in events
            ):
                message, kind = EVENT_NOTICES[event]
                self._set_notice(message, kind)

    def _set_notice(self, message: str, kind: str = "info") -> None:
        self.notice = Notice(message=message, kind=kind, created_at=self.clock())
