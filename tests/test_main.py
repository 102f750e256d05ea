"""Tests for the FocusDay entry point and application runner."""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest

from focusday.core.config import get_default_config
from focusday.core.models import PersistedSnapshot, TimerMode
from focusday.core.scheduler import ThreadScheduler
from focusday.main import build_parser, main
from focusday.persistence.store import SnapshotStore
from focusday.ui.app import FocusDayApp, build_controller, open_store


@pytest.fixture
def config_file(tmp_path):
    cfg = get_default_config()
    cfg["database_path"] = str(tmp_path / "data" / "focusday.db")
    path = tmp_path / "config.json"
    path.write_text(json.dumps(cfg), encoding="utf-8")
    return path


class TestBuildParser:
    """Tests for CLI argument parsing."""

    def test_no_args_defaults_to_dashboard(self):
        parsed = build_parser().parse_args([])
        assert parsed.status is False
        assert parsed.summary is False
        assert parsed.config is None

    def test_status_flag(self):
        assert build_parser().parse_args(["--status"]).status is True

    def test_summary_flag(self):
        assert build_parser().parse_args(["--summary"]).summary is True

    def test_status_and_summary_mutually_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--status", "--summary"])


class TestMain:
    @patch("focusday.main._print_status")
    def test_status_dispatch(self, mock_print, config_file):
        main(["--status", "--config", str(config_file)])
        mock_print.assert_called_once()

    @patch("focusday.main._print_summary")
    def test_summary_dispatch(self, mock_print, config_file):
        main(["--summary", "--config", str(config_file)])
        mock_print.assert_called_once()

    @patch("focusday.ui.app.FocusDayApp")
    def test_default_runs_app(self, mock_app_cls, config_file):
        main(["--config", str(config_file)])
        mock_app_cls.assert_called_once_with(str(config_file))
        mock_app_cls.return_value.start.assert_called_once()

    def test_status_prints_ready_on_cold_start(self, config_file, capsys):
        main(["--status", "--config", str(config_file)])
        out = capsys.readouterr().out
        assert "25:00  Ready to Start (idle)" in out
        assert "Start your day to begin tracking" in out

    @pytest.mark.parametrize("flag", ["--status", "--summary"])
    def test_queries_leave_saved_state_untouched(self, config_file, capsys, flag):
        cfg = json.loads(config_file.read_text(encoding="utf-8"))
        saved = PersistedSnapshot(
            time_remaining=100, total_time=1500, is_running=True,
            current_mode=TimerMode.FOCUS, day_active=True,
            day_start_time=datetime.now(timezone.utc) - timedelta(hours=2),
            completed_focus_sessions=0, completed_short_breaks=0,
            completed_long_breaks=0, sessions_since_long_break=0,
            sessions_before_long_break=4, auto_progress=True,
            last_update=datetime.now(timezone.utc) - timedelta(hours=1),
        )
        store = open_store(cfg)
        try:
            store.save(saved)
        finally:
            store.close()

        main([flag, "--config", str(config_file)])

        store = open_store(cfg)
        try:
            assert store.load() == saved
        finally:
            store.close()
        if flag == "--status":
            assert "05:00  Short Break (paused)" in capsys.readouterr().out

    def test_summary_prints_report(self, config_file, capsys):
        main(["--summary", "--config", str(config_file)])
        out = capsys.readouterr().out
        assert out.startswith("Day Summary")


class TestAppWiring:
    def test_build_controller_uses_config(self):
        cfg = get_default_config()
        cfg["timer"]["focus_minutes"] = 50
        cfg["timer"]["cascade_completions"] = True
        store = MagicMock(spec=SnapshotStore)
        controller = build_controller(cfg, store)
        assert controller.engine.durations.focus_seconds == 3000
        assert controller.cascade_completions is True
        assert isinstance(controller.engine.scheduler, ThreadScheduler)

    def test_open_store_creates_directory(self, tmp_path):
        db = tmp_path / "deep" / "dir" / "focusday.db"
        store = open_store({"database_path": str(db)})
        try:
            assert db.parent.is_dir()
            assert store.load() is None
        finally:
            store.close()

    def test_app_start_and_stop(self, config_file):
        app = FocusDayApp(str(config_file))
        app._stop.set()
        with patch("focusday.ui.web.start_dashboard") as mock_dashboard:
            app.start()
        mock_dashboard.assert_called_once()
        assert app.controller is None
        assert app._store is None

    def test_stop_saves_state(self, config_file):
        app = FocusDayApp(str(config_file))
        app._init_components()
        app.controller.start_day()
        app.stop()

        store = open_store(app.config)
        try:
            saved = store.load()
            assert saved.day_active is True
        finally:
            store.close()
