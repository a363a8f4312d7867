"""
Flask-based web server for monitoring and steering a running control loop.

Runs in a background daemon thread started by main.py.  The control loop
writes snapshots to a SharedState object; the Flask routes read from it.

Routes:
  GET  /status    → JSON snapshot of the latest control step
  POST /setpoint  → Queue a new setpoint, body {"setpoint": <number>}

Threading model:
  - SharedState uses a threading.Lock for all reads and writes.
  - The web thread never touches the controller.  A setpoint request is only
    recorded here; the control loop picks it up on its next step, so the
    controller keeps a single owner.
"""

import logging
import math
import threading
from dataclasses import dataclass, field
from typing import Optional

from flask import Flask, jsonify, request

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Shared state between the control loop and the Flask server
# ---------------------------------------------------------------------------

@dataclass
class SharedState:
    """Thread-safe container for loop data shared between threads."""
    setpoint:    float = 0.0
    measurement: float = 0.0
    output:      float = 0.0
    steps:       int   = 0

    _lock:             threading.Lock  = field(default_factory=threading.Lock, repr=False)
    _pending_setpoint: Optional[float] = field(default=None, repr=False)

    def update(self, setpoint: float, measurement: float, output: float) -> None:
        """Called by the control loop after each step."""
        with self._lock:
            self.setpoint    = setpoint
            self.measurement = measurement
            self.output      = output
            self.steps      += 1

    def get_status(self) -> dict:
        with self._lock:
            return {
                "setpoint":    round(self.setpoint, 3),
                "measurement": round(self.measurement, 3),
                "output":      round(self.output, 4),
                "steps":       self.steps,
            }

    def request_setpoint(self, value: float) -> None:
        with self._lock:
            self._pending_setpoint = value

    def take_setpoint_request(self) -> Optional[float]:
        """Return and clear the pending setpoint, or None if there is none."""
        with self._lock:
            value, self._pending_setpoint = self._pending_setpoint, None
            return value


# ---------------------------------------------------------------------------
# Flask application factory
# ---------------------------------------------------------------------------

def create_app(shared_state: SharedState) -> Flask:
    app = Flask(__name__)
    # Suppress Flask's default request logging to keep the console clean
    log = logging.getLogger("werkzeug")
    log.setLevel(logging.WARNING)

    @app.route("/status")
    def status():
        return jsonify(shared_state.get_status())

    @app.route("/setpoint", methods=["POST"])
    def setpoint():
        body = request.get_json(silent=True)
        value = body.get("setpoint") if isinstance(body, dict) else None
        number = None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            try:
                number = float(value)
            except OverflowError:
                pass
        if number is None or not math.isfinite(number):
            return jsonify({"error": "setpoint must be a finite number"}), 400

        shared_state.request_setpoint(number)
        logger.info("Setpoint change to %.3f requested via web.", number)
        return jsonify({"pending_setpoint": number}), 202

    return app


# ---------------------------------------------------------------------------
# Background thread launcher
# ---------------------------------------------------------------------------

def start_web_server(shared_state: SharedState, web_config: dict) -> threading.Thread:
    """
    Start Flask in a background daemon thread.

    Args:
        shared_state: The SharedState instance to read from.
        web_config:   The 'web' subtree from config.yaml.

    Returns:
        The started Thread object (daemon=True; stops automatically when
        the main process exits).
    """
    host = web_config.get("host", "127.0.0.1")
    port = int(web_config.get("port", 5000))

    app = create_app(shared_state)

    thread = threading.Thread(
        target=lambda: app.run(
            host=host,
            port=port,
            debug=False,
            use_reloader=False,   # must be False in a non-main thread
            threaded=True,
        ),
        daemon=True,
        name="WebServer",
    )
    thread.start()
    logger.info("Web server started at http://%s:%d", host, port)
    return thread
