"""Text formatter for FocusDay.

Renders the countdown clock and the end-of-day summary as plain text.
"""

from datetime import datetime, timedelta
from typing import Optional

from focusday.core.models import DaySummary, DisplayState, TimerMode


class TextFormatter:
    """Formats timer and summary data as human-readable plain text."""

    @staticmethod
    def format_clock(seconds: int) -> str:
        """Format a countdown as zero-padded 'MM:SS'."""
        seconds = max(int(seconds), 0)
        minutes, secs = divmod(seconds, 60)
        return f"{minutes:02d}:{secs:02d}"

    @staticmethod
    def format_duration(duration: timedelta) -> str:
        """Format a timedelta as 'Xh Ym' (e.g., '2h 15m').

        Truncates to whole minutes. Returns '0m' for zero/negative durations.
        """
        total_seconds = int(duration.total_seconds())
        if total_seconds < 0:
            total_seconds = 0
        total_minutes = total_seconds // 60
        hours = total_minutes // 60
        minutes = total_minutes % 60

        if hours == 0:
            return f"{minutes}m"
        return f"{hours}h {minutes}m"

    @staticmethod
    def format_time_of_day(moment: Optional[datetime]) -> str:
        """Local 'HH:MM' for *moment*; naive values are already local."""
        if moment is None:
            return "--:--"
        return moment.astimezone().strftime("%H:%M")

    @staticmethod
    def format_status(display: DisplayState) -> str:
        """Render the display projection as a two-line status."""
        clock = TextFormatter.format_clock(display.minutes * 60 + display.seconds)
        state = "running" if display.running else "paused"
        if display.mode == TimerMode.READY:
            state = "idle"
        return (
            f"{clock}  {display.timer_label} ({state})\n"
            f"Sessions today: {display.completed_focus_sessions}  "
            f"Long breaks: {display.completed_long_breaks}  "
            f"{display.progress_label}\n"
        )

    @staticmethod
    def format_summary(summary: DaySummary) -> str:
        """Render a day summary as aligned plain text."""
        focus_time = TextFormatter.format_duration(
            timedelta(minutes=summary.total_focus_minutes)
        )
        rows = [
            ("Focus sessions", str(summary.focus_sessions)),
            ("Short breaks", str(summary.short_breaks)),
            ("Long breaks", str(summary.long_breaks)),
            ("Focus time", focus_time),
            ("Started", TextFormatter.format_time_of_day(summary.started_at)),
            ("Ended", TextFormatter.format_time_of_day(summary.ended_at)),
        ]
        label_width = max(len(label) for label, _ in rows)
        value_width = max(len(value) for _, value in rows)

        lines = ["Day Summary", "─" * (label_width + value_width + 4)]
        for label, value in rows:
            lines.append(f"  {label:<{label_width}}  {value:>{value_width}}")
        lines.append("")
        lines.append(summary.message)
        return "\n".join(lines) + "\n"
