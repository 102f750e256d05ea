"""Reconciliation of a stale snapshot with the current time.

Rebuilds live timer and day state as if the process had been running the
whole time between the snapshot being written and *now*.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Optional

from focusday.core.models import DayRecord, PersistedSnapshot, Settings, TimerState
from focusday.core.timer import TimerEngine

logger = logging.getLogger(__name__)


def elapsed_seconds(last_update: datetime, now: datetime) -> int:
    """Whole seconds from *last_update* to *now*, never negative.

    Both instants are compared in UTC; naive values are taken as local time.
    """
    delta = now.astimezone(timezone.utc) - last_update.astimezone(timezone.utc)
    seconds = delta.total_seconds()
    if seconds <= 0:
        return 0
    return math.floor(seconds)


def restore(
    engine: TimerEngine,
    snapshot: PersistedSnapshot,
    now: datetime,
    cascade: bool = False,
) -> list[str]:
    """Load *snapshot* into *engine* and bring it up to *now*.

    A paused snapshot is restored exactly.  A running one loses the elapsed
    time; if that empties the interval, one completion fires for the
    restored mode.  With *cascade* and auto-progress on, the time left over
    after that completion keeps flowing into the following intervals.
    """
    engine.detach()
    elapsed = elapsed_seconds(snapshot.last_update, now)

    engine.day.record = DayRecord(
        active=snapshot.day_active,
        started_at=snapshot.day_start_time,
        completed_focus_sessions=snapshot.completed_focus_sessions,
        completed_short_breaks=snapshot.completed_short_breaks,
        completed_long_breaks=snapshot.completed_long_breaks,
        sessions_since_long_break=snapshot.sessions_since_long_break,
    )
    engine.day.apply_settings(Settings(
        sessions_before_long_break=snapshot.sessions_before_long_break,
        auto_progress=snapshot.auto_progress,
    ))
    engine.state = TimerState(
        mode=snapshot.current_mode,
        remaining_seconds=snapshot.time_remaining,
        total_seconds=snapshot.total_time,
        running=False,
    )
    events = ["restored"]

    if not snapshot.is_running:
        logger.info("Restored paused %s timer with %ds left",
                    snapshot.current_mode.value, snapshot.time_remaining)
        return events

    remaining = max(0, snapshot.time_remaining - elapsed)
    engine.state.remaining_seconds = remaining
    if remaining > 0:
        logger.info("Resuming %s timer after %ds away, %ds left",
                    snapshot.current_mode.value, elapsed, remaining)
        events.extend(engine.start())
        return events

    logger.info("%s interval finished while away (%ds elapsed)",
                snapshot.current_mode.value, elapsed)
    events.extend(engine.on_complete())
    if cascade:
        events.extend(_cascade(engine, elapsed - snapshot.time_remaining))
    return events


def _cascade(engine: TimerEngine, leftover: float) -> list[str]:
    """Replay the auto-progressed intervals that fit in *leftover* seconds."""
    events: list[str] = []
    while engine.auto_start_pending:
        leftover -= engine.auto_progress_delay
        if leftover < 0:
            break
        engine.cancel_auto_start()
        total = engine.state.total_seconds
        if leftover < total:
            engine.state.remaining_seconds = total - int(leftover)
            events.extend(engine.start())
            break
        leftover -= total
        events.extend(engine.on_complete())
    return events


def resync(
    engine: TimerEngine,
    snapshot: Optional[PersistedSnapshot],
    now: datetime,
) -> list[str]:
    """Correct countdown drift of a running engine against *snapshot*.

    Only ``remaining_seconds`` is touched; a result of zero completes the
    interval.
    """
    if not engine.running or snapshot is None:
        return []
    if snapshot.current_mode != engine.state.mode:
        logger.debug("Snapshot mode %s differs from live mode %s; resync skipped",
                     snapshot.current_mode.value, engine.state.mode.value)
        return []

    elapsed = elapsed_seconds(snapshot.last_update, now)
    remaining = min(max(0, snapshot.time_remaining - elapsed), engine.state.total_seconds)
    engine.state.remaining_seconds = remaining
    events = ["resynced"]
    if remaining == 0:
        events.extend(engine.on_complete())
    return events
