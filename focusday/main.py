"""FocusDay application entry point.

Supports three modes:
  - Dashboard mode (default): runs the timer and serves the web dashboard
  - --status: prints the reconciled timer state and exits
  - --summary: prints the current day's summary and exits

Usage:
    python -m focusday.main              # dashboard mode
    python -m focusday.main --status     # print the timer state
    python -m focusday.main --summary    # print today's summary
"""

import argparse
import logging
from pathlib import Path

from focusday.core.config import get_default_config_path, load_config
from focusday.reporting.formatter import TextFormatter
from focusday.ui.app import build_controller, open_store


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="focusday",
        description="FocusDay: a day-based focus and break timer",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config.json (defaults to the platform data directory)",
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--status",
        action="store_true",
        help="Print the current timer state and exit",
    )
    group.add_argument(
        "--summary",
        action="store_true",
        help="Print the current day's summary and exit",
    )
    return parser


def _print_status(config: dict) -> None:
    """Reconcile the saved snapshot in memory and print the display state."""
    store = open_store(config)
    try:
        controller = build_controller(config, store)
        saved_at = store.last_saved_at()
        controller.preview()
        print(TextFormatter.format_status(controller.display()), end="")
        if saved_at is not None:
            print(f"Last saved: {saved_at.astimezone().strftime('%Y-%m-%d %H:%M:%S')}")
    finally:
        store.close()


def _print_summary(config: dict) -> None:
    """Reconcile the saved snapshot in memory and print the day summary."""
    store = open_store(config)
    try:
        controller = build_controller(config, store)
        controller.preview()
        print(TextFormatter.format_summary(controller.summary()), end="")
    finally:
        store.close()


def main(args: list[str] | None = None) -> None:
    """Entry point for FocusDay.

    When *args* is ``None`` the arguments are read from ``sys.argv``.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    parser = build_parser()
    parsed = parser.parse_args(args)

    config_path = parsed.config if parsed.config is not None else get_default_config_path()
    config = load_config(str(config_path))
    level = getattr(logging, str(config.get("log_level", "INFO")).upper(), None)
    logging.getLogger().setLevel(level if isinstance(level, int) else logging.INFO)

    if parsed.status:
        _print_status(config)
    elif parsed.summary:
        _print_summary(config)
    else:
        # Dashboard mode: import here to avoid pulling in Flask for CLI usage
        from focusday.ui.app import FocusDayApp

        app = FocusDayApp(str(config_path))
        app.start()


if __name__ == "__main__":
    main()
