"""Web-based dashboard for FocusDay.

A lightweight Flask app serving a single page plus a JSON API that maps
one-to-one onto the controller's intents:
- Day lifecycle (start, end with summary, start a new day)
- Timer controls (start, pause, reset)
- Settings (sessions before a long break, auto-progress)
- Visibility resync when the page comes back to the foreground
"""

import logging
import threading

from flask import Flask, jsonify, render_template_string, request

from focusday.core.controller import FocusDayController
from focusday.core.errors import ValidationError

logger = logging.getLogger(__name__)


def create_flask_app(controller: FocusDayController) -> Flask:
    app = Flask(__name__)
    app.config["SEND_FILE_MAX_AGE_DEFAULT"] = 0

    def _state_response(**extra):
        payload = controller.display().to_dict()
        payload["summary_visible"] = controller.summary_visible
        payload.update(extra)
        return jsonify(payload)

    @app.route("/")
    def index():
        return render_template_string(DASHBOARD_HTML)

    @app.route("/api/state")
    def api_state():
        return _state_response()

    # -- Day lifecycle ---------------------------------------------------

    @app.route("/api/day/start", methods=["POST"])
    def api_start_day():
        controller.start_day()
        return _state_response()

    @app.route("/api/day/end", methods=["POST"])
    def api_end_day():
        summary = controller.end_day()
        return _state_response(summary=summary.to_dict())

    @app.route("/api/day/new", methods=["POST"])
    def api_new_day():
        controller.start_new_day()
        return _state_response()

    @app.route("/api/summary")
    def api_summary():
        return jsonify(controller.summary().to_dict())

    @app.route("/api/summary/close", methods=["POST"])
    def api_close_summary():
        controller.close_summary()
        return _state_response()

    # -- Timer controls --------------------------------------------------

    @app.route("/api/timer/start", methods=["POST"])
    def api_start():
        started = controller.start()
        if not started:
            return _state_response(error="day not active"), 409
        return _state_response()

    @app.route("/api/timer/pause", methods=["POST"])
    def api_pause():
        controller.pause()
        return _state_response()

    @app.route("/api/timer/reset", methods=["POST"])
    def api_reset():
        controller.reset()
        return _state_response()

    @app.route("/api/visibility", methods=["POST"])
    def api_visibility():
        controller.resync()
        return _state_response()

    # -- Settings --------------------------------------------------------

    @app.route("/api/settings")
    def api_get_settings():
        settings = controller.day.settings
        return jsonify({
            "sessions_before_long_break": settings.sessions_before_long_break,
            "auto_progress": settings.auto_progress,
        })

    @app.route("/api/settings", methods=["POST"])
    def api_save_settings():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"error": "invalid"}), 400
        try:
            settings = controller.set_configuration(
                sessions_before_long_break=data.get("sessions_before_long_break"),
                auto_progress=data.get("auto_progress"),
            )
        except ValidationError as exc:
            return jsonify({"error": str(exc)}), 400
        return jsonify({
            "sessions_before_long_break": settings.sessions_before_long_break,
            "auto_progress": settings.auto_progress,
        })

    return app


def start_dashboard(
    controller: FocusDayController, host: str = "127.0.0.1", port: int = 5566
) -> threading.Thread:
    """Start the Flask dashboard in a daemon thread."""
    flask_app = create_flask_app(controller)

    def _run():
        flask_app.run(host=host, port=port, debug=False, use_reloader=False)

    t = threading.Thread(target=_run, daemon=True, name="focusday-web")
    t.start()
    logger.info("Dashboard started at http://%s:%d", host, port)
    return t


DASHBOARD_HTML = """<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>FocusDay</title>
<style>
  body { font-family: system-ui, sans-serif; max-width: 28rem; margin: 3rem auto; text-align: center; }
  #clock { font-size: 4rem; font-variant-numeric: tabular-nums; }
  #bar { height: .5rem; background: #ddd; } #fill { height: 100%; background: #6a5acd; width: 0; }
  button { margin: .25rem; }
  #notice { min-height: 1.5rem; color: #555; }
  #summary { display: none; text-align: left; border: 1px solid #ccc; padding: 1rem; }
</style>
</head>
<body>
  <div id="label">Ready to Start</div>
  <div id="clock">25:00</div>
  <div id="notice"></div>
  <div>
    <button onclick="post('/api/day/start')">Start Day</button>
    <button onclick="endDay()">End Day</button>
    <button onclick="post('/api/timer/start')">Start</button>
    <button onclick="post('/api/timer/pause')">Pause</button>
    <button onclick="post('/api/timer/reset')">Reset</button>
  </div>
  <p>Sessions today: <span id="sessions">0</span> &middot; Long breaks: <span id="longs">0</span></p>
  <div id="bar"><div id="fill"></div></div>
  <p id="progress"></p>
  <p>
    Long break after <input id="n" type="number" min="1" max="10" value="4" style="width:3rem">
    <label><input id="auto" type="checkbox"> auto-progress</label>
    <button onclick="saveSettings()">Save</button>
  </p>
  <pre id="summary"></pre>
<script>
function render(s) {
  const pad = v => String(v).padStart(2, '0');
  document.getElementById('clock').textContent = pad(s.minutes) + ':' + pad(s.seconds);
  document.getElementById('label').textContent = s.timer_label;
  document.getElementById('sessions').textContent = s.completed_focus_sessions;
  document.getElementById('longs').textContent = s.completed_long_breaks;
  document.getElementById('fill').style.width = (s.progress_fraction * 100) + '%';
  document.getElementById('progress').textContent = s.progress_label;
  document.getElementById('notice').textContent = s.notice ? s.notice.message : '';
  document.title = s.day_active ? pad(s.minutes) + ':' + pad(s.seconds) + ' - ' + s.timer_label : 'FocusDay';
  if (!s.summary_visible) document.getElementById('summary').style.display = 'none';
}
async function post(url, body) {
  const r = await fetch(url, {method: 'POST', headers: {'Content-Type': 'application/json'},
                              body: JSON.stringify(body || {})});
  const s = await r.json();
  if (s.minutes !== undefined) render(s);
  return s;
}
async function endDay() {
  const s = await post('/api/day/end');
  const el = document.getElementById('summary');
  el.textContent = JSON.stringify(s.summary, null, 2);
  el.style.display = 'block';
}
async function saveSettings() {
  const s = await post('/api/settings', {
    sessions_before_long_break: parseInt(document.getElementById('n').value, 10),
    auto_progress: document.getElementById('auto').checked});
  if (s.error) document.getElementById('notice').textContent = s.error;
}
async function refresh() { render(await (await fetch('/api/state')).json()); }
document.addEventListener('visibilitychange', () => { if (!document.hidden) post('/api/visibility'); });
setInterval(refresh, 1000);
refresh();
</script>
</body>
</html>
"""
