"""Tests for the dashboard JSON API."""

import pytest

from focusday.ui.web import create_flask_app


@pytest.fixture
def client(controller):
    flask_app = create_flask_app(controller)
    flask_app.config["TESTING"] = True
    with flask_app.test_client() as c:
        yield c


class TestIndex:
    def test_serves_page(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert b"FocusDay" in resp.data


class TestState:
    def test_initial_state(self, client):
        data = client.get("/api/state").get_json()
        assert data["mode"] == "ready"
        assert data["timer_label"] == "Ready to Start"
        assert data["day_active"] is False
        assert data["running"] is False
        assert data["progress_fraction"] == 0.0
        assert data["summary_visible"] is False


class TestDayEndpoints:
    def test_start_day(self, client):
        data = client.post("/api/day/start").get_json()
        assert data["mode"] == "focus"
        assert data["day_active"] is True
        assert data["notice"]["message"] == "Day started! Let's focus!"

    def test_end_day_returns_summary(self, client, controller, scheduler):
        client.post("/api/day/start")
        client.post("/api/timer/start")
        scheduler.advance(controller.engine.state.remaining_seconds + 1)
        data = client.post("/api/day/end").get_json()
        assert data["summary"]["focus_sessions"] == 1
        assert data["summary"]["tier"] == "good_start"
        assert data["summary_visible"] is True
        assert data["day_active"] is False

    def test_summary_preview(self, client):
        client.post("/api/day/start")
        data = client.get("/api/summary").get_json()
        assert data["focus_sessions"] == 0
        assert data["tier"] == "start"

    def test_close_summary(self, client):
        client.post("/api/day/start")
        client.post("/api/day/end")
        data = client.post("/api/summary/close").get_json()
        assert data["summary_visible"] is False

    def test_new_day(self, client):
        client.post("/api/day/start")
        client.post("/api/day/end")
        data = client.post("/api/day/new").get_json()
        assert data["mode"] == "ready"
        assert data["completed_focus_sessions"] == 0


class TestTimerEndpoints:
    def test_start_without_day_conflicts(self, client):
        resp = client.post("/api/timer/start")
        assert resp.status_code == 409
        data = resp.get_json()
        assert data["running"] is False
        assert data["notice"]["kind"] == "warning"

    def test_start_pause_reset(self, client, scheduler):
        client.post("/api/day/start")
        assert client.post("/api/timer/start").get_json()["running"] is True
        scheduler.advance(5)
        data = client.post("/api/timer/pause").get_json()
        assert data["running"] is False
        assert (data["minutes"], data["seconds"]) == (0, 55)
        data = client.post("/api/timer/reset").get_json()
        assert (data["minutes"], data["seconds"]) == (1, 0)

    def test_visibility_resyncs(self, client, scheduler, clock):
        client.post("/api/day/start")
        client.post("/api/timer/start")
        scheduler.advance(10)
        clock.advance(20)
        data = client.post("/api/visibility").get_json()
        assert data["seconds"] == 30


class TestSettingsEndpoints:
    def test_get_defaults(self, client):
        assert client.get("/api/settings").get_json() == {
            "sessions_before_long_break": 4,
            "auto_progress": False,
        }

    def test_save_valid(self, client):
        resp = client.post("/api/settings", json={"sessions_before_long_break": 6, "auto_progress": True})
        assert resp.status_code == 200
        assert client.get("/api/settings").get_json()["sessions_before_long_break"] == 6

    @pytest.mark.parametrize("value", [0, 11])
    def test_save_out_of_range(self, client, value):
        resp = client.post("/api/settings", json={"sessions_before_long_break": value})
        assert resp.status_code == 400
        assert "between 1 and 10" in resp.get_json()["error"]
        assert client.get("/api/settings").get_json()["sessions_before_long_break"] == 4

    def test_save_non_object(self, client):
        resp = client.post("/api/settings", data="nope", content_type="text/plain")
        assert resp.status_code == 400
