"""
pidctrl demo — simulated thermostat driven by a PID controller.

Entry point.  Wires up all components and runs the control loop.

Control loop (per period):
  1. Apply any setpoint change posted to the web server
  2. Read the simulated room temperature (ThermalPlant)
  3. Feed it to the PIDController → heater power
  4. Drive the plant with that power
  5. Publish the step to SharedState for the web server

Shutdown:
  - Ctrl-C or SIGTERM → stops the loop after the current step.
"""

import logging
import signal
import sys
from typing import Optional

from pidctrl.config import build_pid, build_plant, load_config, setup_logging
from pidctrl.loop import ControlLoop
from pidctrl.web_server import SharedState, start_web_server


def main(config_path: str = "config.yaml") -> int:
    # ── Config ─────────────────────────────────────────────────────────────
    try:
        config = load_config(config_path)
    except FileNotFoundError as exc:
        setup_logging()
        logging.getLogger("main").error("%s", exc)
        return 1

    setup_logging((config.get("logging") or {}).get("level", "INFO"))
    log = logging.getLogger("main")

    loop_cfg = config.get("loop") or {}
    period       = float(loop_cfg.get("period", 0.5))
    status_every = int(loop_cfg.get("status_every", 10))

    web_cfg = config.get("web") or {}
    web_enabled = web_cfg.get("enabled", True)

    # ── Controller + plant ──────────────────────────────────────────────────
    try:
        pid = build_pid(config.get("pid") or {})
    except KeyError as exc:
        log.error("Missing PID configuration key: %s", exc)
        return 1
    except ValueError as exc:
        log.error("Invalid PID configuration: %s", exc)
        return 1

    plant = build_plant(config.get("plant") or {})

    # ── Shared state + web server ───────────────────────────────────────────
    shared_state: Optional[SharedState] = SharedState() if web_enabled else None
    if shared_state is not None:
        start_web_server(shared_state, web_cfg)

    loop = ControlLoop(pid, plant, period, shared_state, status_every)

    # ── Graceful shutdown ────────────────────────────────────────────────────
    def _stop(signum, _frame):
        log.info("Signal %d received; shutting down.", signum)
        loop.stop()

    signal.signal(signal.SIGINT,  _stop)
    signal.signal(signal.SIGTERM, _stop)

    exit_code = 0
    try:
        log.info(
            "Thermostat running: setpoint=%.2f gains=%s limits=%s. %s",
            pid.setpoint, pid.gains, pid.output_limits,
            f"Web UI: http://{web_cfg.get('host', '127.0.0.1')}:{web_cfg.get('port', 5000)}/status"
            if web_enabled else "Web UI: disabled",
        )
        loop.run()
    except Exception as exc:
        log.exception("Unexpected error in control loop: %s", exc)
        exit_code = 1
    finally:
        log.info("Done. Final temperature %.2f.", plant.temperature)

    return exit_code


if __name__ == "__main__":
    sys.exit(main(*sys.argv[1:2]))
