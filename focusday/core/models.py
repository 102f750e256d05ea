"""Core data models for FocusDay.

Defines the dataclasses and enums shared across the application:
- Timer: TimerMode, TimerState, Durations
- Day tracking: DayRecord, DaySummary
- Configuration: Settings
- Persistence: PersistedSnapshot
- Presentation: Notice, DisplayState
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from focusday.core.errors import SnapshotError

MIN_SESSIONS = 1
MAX_SESSIONS = 10
DEFAULT_SESSIONS = 4


# ---------------------------------------------------------------------------
# Timer
# ---------------------------------------------------------------------------

class TimerMode(Enum):
    """Which interval the timer is counting down."""
    READY = "ready"
    FOCUS = "focus"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"


MODE_LABELS = {
    TimerMode.READY: "Ready",
    TimerMode.FOCUS: "Focus",
    TimerMode.SHORT_BREAK: "Break",
    TimerMode.LONG_BREAK: "Long Break",
}

TIMER_LABELS = {
    TimerMode.READY: "Ready to Start",
    TimerMode.FOCUS: "Focus Time",
    TimerMode.SHORT_BREAK: "Short Break",
    TimerMode.LONG_BREAK: "Long Break",
}


@dataclass
class Durations:
    """Fixed interval lengths for a deployment, in seconds."""
    focus_seconds: int = 25 * 60
    short_break_seconds: int = 5 * 60
    long_break_seconds: int = 30 * 60

    def for_mode(self, mode: TimerMode) -> int:
        if mode == TimerMode.SHORT_BREAK:
            return self.short_break_seconds
        if mode == TimerMode.LONG_BREAK:
            return self.long_break_seconds
        return self.focus_seconds


@dataclass
class TimerState:
    """Countdown state of the running instance."""
    mode: TimerMode = TimerMode.READY
    remaining_seconds: int = 25 * 60
    total_seconds: int = 25 * 60
    running: bool = False


# ---------------------------------------------------------------------------
# Day tracking
# ---------------------------------------------------------------------------

@dataclass
class DayRecord:
    """Counters for the current day session."""
    active: bool = False
    started_at: Optional[datetime] = None
    completed_focus_sessions: int = 0
    completed_short_breaks: int = 0
    completed_long_breaks: int = 0
    sessions_since_long_break: int = 0


@dataclass
class DaySummary:
    """End-of-day report computed from the day counters."""
    focus_sessions: int
    short_breaks: int
    long_breaks: int
    total_focus_minutes: float
    started_at: Optional[datetime]
    ended_at: datetime
    tier: str      # "start" | "good_start" | "great_work" | "outstanding"
    message: str

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["started_at"] = self.started_at.isoformat() if self.started_at else None
        data["ended_at"] = self.ended_at.isoformat()
        return data


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass
class Settings:
    """User-editable configuration, persisted with the snapshot."""
    sessions_before_long_break: int = DEFAULT_SESSIONS
    auto_progress: bool = False


def is_valid_session_count(value: Any) -> bool:
    """Return True if *value* is an int (not bool) within the allowed range."""
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and MIN_SESSIONS <= value <= MAX_SESSIONS
    )


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

_INT_FIELDS = (
    "time_remaining",
    "total_time",
    "completed_focus_sessions",
    "completed_short_breaks",
    "completed_long_breaks",
    "sessions_since_long_break",
)
_BOOL_FIELDS = ("is_running", "day_active", "auto_progress")


@dataclass
class PersistedSnapshot:
    """Flat record written to the snapshot store.

    The only durable artifact: the timer state, the day record, the
    settings, and the instant the record was written.
    """
    time_remaining: int
    total_time: int
    is_running: bool
    current_mode: TimerMode
    day_active: bool
    day_start_time: Optional[datetime]
    completed_focus_sessions: int
    completed_short_breaks: int
    completed_long_breaks: int
    sessions_since_long_break: int
    sessions_before_long_break: int
    auto_progress: bool
    last_update: datetime

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["current_mode"] = self.current_mode.value
        data["day_start_time"] = (
            self.day_start_time.isoformat() if self.day_start_time else None
        )
        data["last_update"] = self.last_update.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "PersistedSnapshot":
        """Build a snapshot from its dict form.

        Raises SnapshotError if a required key is missing or has the wrong
        type.  Out-of-range values are clamped; an out-of-range
        ``sessions_before_long_break`` falls back to the default.
        """
        if not isinstance(data, dict):
            raise SnapshotError("snapshot must be an object")

        required = _INT_FIELDS + _BOOL_FIELDS + (
            "current_mode", "sessions_before_long_break", "last_update",
        )
        missing = [k for k in required if k not in data]
        if missing:
            raise SnapshotError(f"snapshot missing fields: {', '.join(missing)}")

        for key in _INT_FIELDS:
            value = data[key]
            if not isinstance(value, int) or isinstance(value, bool):
                raise SnapshotError(f"{key} must be an integer")
        for key in _BOOL_FIELDS:
            if not isinstance(data[key], bool):
                raise SnapshotError(f"{key} must be a boolean")

        try:
            mode = TimerMode(data["current_mode"])
        except ValueError as exc:
            raise SnapshotError(f"unknown mode {data['current_mode']!r}") from exc

        last_update = _parse_timestamp(data["last_update"], "last_update")
        start_raw = data.get("day_start_time")
        day_start = None if start_raw is None else _parse_timestamp(start_raw, "day_start_time")

        sessions = data["sessions_before_long_break"]
        if not is_valid_session_count(sessions):
            sessions = DEFAULT_SESSIONS

        total = data["total_time"]
        if total <= 0:
            raise SnapshotError("total_time must be positive")
        remaining = min(max(data["time_remaining"], 0), total)

        return cls(
            time_remaining=remaining,
            total_time=total,
            is_running=data["is_running"] and mode != TimerMode.READY,
            current_mode=mode,
            day_active=data["day_active"],
            day_start_time=day_start,
            completed_focus_sessions=max(data["completed_focus_sessions"], 0),
            completed_short_breaks=max(data["completed_short_breaks"], 0),
            completed_long_breaks=max(data["completed_long_breaks"], 0),
            sessions_since_long_break=min(max(data["sessions_since_long_break"], 0), sessions),
            sessions_before_long_break=sessions,
            auto_progress=data["auto_progress"],
            last_update=last_update,
        )


def _parse_timestamp(value: Any, key: str) -> datetime:
    if not isinstance(value, str):
        raise SnapshotError(f"{key} must be an ISO 8601 string")
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise SnapshotError(f"{key} is not a valid timestamp: {value!r}") from exc


# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------

@dataclass
class Notice:
    """A transient user-facing message."""
    message: str
    kind: str = "info"  # "info" | "warning"
    created_at: Optional[datetime] = None


@dataclass
class DisplayState:
    """Read-only projection handed to the presentation layer."""
    minutes: int
    seconds: int
    mode: TimerMode
    mode_label: str
    timer_label: str
    running: bool
    day_active: bool
    completed_focus_sessions: int
    completed_long_breaks: int
    progress_fraction: float
    progress_label: str
    notice: Optional[Notice] = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["mode"] = self.mode.value
        if self.notice is not None:
            data["notice"] = {
                "message": self.notice.message,
                "kind": self.notice.kind,
                "created_at": (
                    self.notice.created_at.isoformat() if self.notice.created_at else None
                ),
            }
        return data
