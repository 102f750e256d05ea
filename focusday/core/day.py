"""Day Tracker for FocusDay.

Owns the day-level counters, the long-break cadence and the day
lifecycle.  The completion rule lives here: the timer engine asks the
tracker what a finished interval counts for and which mode comes next.
"""

import logging
from datetime import datetime
from typing import Optional

from focusday.core.models import DayRecord, DaySummary, Settings, TimerMode

logger = logging.getLogger(__name__)

SUMMARY_MESSAGES = {
    "start": "Every journey starts with a single step. Tomorrow is a new day!",
    "good_start": "Good start! Keep building that momentum!",
    "great_work": "Great work today! You're making real progress!",
    "outstanding": "Outstanding performance! You're crushing it!",
}


def summary_tier(focus_sessions: int) -> str:
    """Return the message tier for a number of completed focus sessions."""
    if focus_sessions <= 0:
        return "start"
    if focus_sessions < 4:
        return "good_start"
    if focus_sessions < 8:
        return "great_work"
    return "outstanding"


class DayTracker:
    """Tracks completed intervals within a day and the long-break cadence."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings if settings is not None else Settings()
        self.record = DayRecord()

    @property
    def active(self) -> bool:
        return self.record.active

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def begin(self, now: datetime) -> None:
        """Start a day: mark it active and zero every counter."""
        if self.record.active:
            logger.info("Day restarted while already active; counters reset")
        self.record = DayRecord(active=True, started_at=now)

    def finish(self) -> None:
        """End the day, keeping the counters visible until cleared."""
        self.record.active = False

    def clear(self) -> None:
        """Forget the day entirely."""
        self.record = DayRecord()

    def apply_settings(self, settings: Settings) -> None:
        self.settings = settings
        limit = settings.sessions_before_long_break
        if self.record.sessions_since_long_break > limit:
            self.record.sessions_since_long_break = limit

    # ------------------------------------------------------------------
    # Completion rule
    # ------------------------------------------------------------------

    def record_completion(self, mode: TimerMode) -> TimerMode:
        """Count a finished interval of *mode* and return the next mode.

        Focus      -> long break once the cadence threshold is reached,
                      short break otherwise.
        Short break -> focus.
        Long break  -> focus, cadence counter back to zero.
        """
        rec = self.record
        limit = self.settings.sessions_before_long_break

        if mode == TimerMode.FOCUS:
            rec.completed_focus_sessions += 1
            rec.sessions_since_long_break = min(rec.sessions_since_long_break + 1, limit)
            if rec.sessions_since_long_break >= limit:
                return TimerMode.LONG_BREAK
            return TimerMode.SHORT_BREAK

        if mode == TimerMode.SHORT_BREAK:
            rec.completed_short_breaks += 1
            return TimerMode.FOCUS

        if mode == TimerMode.LONG_BREAK:
            rec.completed_long_breaks += 1
            rec.sessions_since_long_break = 0
            return TimerMode.FOCUS

        # READY has nothing to count; only an explicit day start leaves it.
        return TimerMode.READY

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------

    @property
    def progress_fraction(self) -> float:
        """Progress toward the next long break, 0.0 when no day is active."""
        if not self.record.active:
            return 0.0
        limit = self.settings.sessions_before_long_break
        return min(self.record.sessions_since_long_break / limit, 1.0)

    @property
    def progress_label(self) -> str:
        if not self.record.active:
            return "Start your day to begin tracking"
        return (
            f"{self.record.sessions_since_long_break} of "
            f"{self.settings.sessions_before_long_break} sessions until long break"
        )

    def summary(self, end_time: datetime, focus_seconds: int) -> DaySummary:
        """Summarise the current counters.  Does not modify any state."""
        rec = self.record
        tier = summary_tier(rec.completed_focus_sessions)
        return DaySummary(
            focus_sessions=rec.completed_focus_sessions,
            short_breaks=rec.completed_short_breaks,
            long_breaks=rec.completed_long_breaks,
            total_focus_minutes=rec.completed_focus_sessions * (focus_seconds / 60),
            started_at=rec.started_at,
            ended_at=end_time,
            tier=tier,
            message=SUMMARY_MESSAGES[tier],
        )
