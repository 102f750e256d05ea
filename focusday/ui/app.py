"""Application runner for FocusDay.

Wires configuration, the snapshot store and the controller together,
reconciles the saved state, serves the dashboard, and saves once more on
the way out.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Optional

from focusday.core.config import durations_from_config, load_config, timer_settings
from focusday.core.controller import FocusDayController
from focusday.core.scheduler import ThreadScheduler
from focusday.persistence.store import SnapshotStore

logger = logging.getLogger(__name__)


def build_controller(config: dict, store: SnapshotStore) -> FocusDayController:
    """Create a controller from *config* backed by *store*."""
    timer = timer_settings(config)
    return FocusDayController(
        store=store,
        scheduler=ThreadScheduler(),
        durations=durations_from_config(config),
        auto_progress_delay=timer.get("auto_progress_delay_seconds", 1),
        cascade_completions=bool(timer.get("cascade_completions", False)),
    )


def open_store(config: dict) -> SnapshotStore:
    db_path = os.path.expanduser(config.get("database_path", "~/.focusday/focusday.db"))
    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    store = SnapshotStore(db_path)
    store.init_db()
    return store


class FocusDayApp:
    """Runs FocusDay with its dashboard until interrupted."""

    def __init__(self, config_path: str) -> None:
        self.config_path = config_path
        self.config = load_config(config_path)
        self.controller: Optional[FocusDayController] = None
        self._store: Optional[SnapshotStore] = None
        self._stop = threading.Event()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Initialize components, serve the dashboard, and block until stopped."""
        self._init_components()
        self._start_dashboard()
        try:
            while not self._stop.wait(1):
                pass
        except KeyboardInterrupt:
            logger.info("Interrupted, shutting down")
        finally:
            self.stop()

    def stop(self) -> None:
        """Save the final snapshot and release resources."""
        self._stop.set()
        if self.controller is not None:
            self.controller.shutdown()
            self.controller = None
        if self._store is not None:
            self._store.close()
            self._store = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _init_components(self) -> None:
        self._store = open_store(self.config)
        self.controller = build_controller(self.config, self._store)
        if self.controller.restore():
            logger.info("Restored saved state")

    def _start_dashboard(self) -> None:
        from focusday.ui.web import start_dashboard

        dashboard = self.config.get("dashboard", {})
        start_dashboard(
            self.controller,
            host=dashboard.get("host", "127.0.0.1"),
            port=dashboard.get("port", 5566),
        )
