"""
Configuration and logging helpers shared by main.py and the tests.

All tunable values live in config.yaml; the factories here turn its subtrees
into ready-to-use objects so no magic constants live inside the components.
"""

import logging
from pathlib import Path

import yaml

from .pid import PIDController
from .plant import ThermalPlant

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def load_config(path: str = "config.yaml") -> dict:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path.resolve()}\n"
            f"Pass an existing YAML file (got '{path}')."
        )
    with open(config_path) as fh:
        return yaml.safe_load(fh) or {}


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
    )


def _optional_float(value):
    return None if value is None else float(value)


def build_pid(pid_cfg: dict) -> PIDController:
    """
    Build a controller from the 'pid' subtree.

    Raises:
        KeyError:           If a gain is missing.
        InvalidLimitsError: If output_min > output_max.
    """
    pid = PIDController(
        kp=float(pid_cfg["kp"]),
        ki=float(pid_cfg["ki"]),
        kd=float(pid_cfg["kd"]),
        sample_period=float(pid_cfg.get("sample_period", 0.0)),
    )
    pid.set_setpoint(float(pid_cfg.get("setpoint", 0.0)))
    pid.set_output_limits(
        _optional_float(pid_cfg.get("output_min")),
        _optional_float(pid_cfg.get("output_max")),
    )
    return pid


def build_plant(plant_cfg: dict) -> ThermalPlant:
    seed = plant_cfg.get("seed")
    return ThermalPlant(
        initial_temperature=float(plant_cfg.get("initial_temperature", 20.0)),
        ambient_temperature=float(plant_cfg.get("ambient_temperature", 15.0)),
        heater_gain=float(plant_cfg.get("heater_gain", 40.0)),
        time_constant=float(plant_cfg.get("time_constant", 60.0)),
        noise_std=float(plant_cfg.get("noise_std", 0.0)),
        seed=None if seed is None else int(seed),
    )
