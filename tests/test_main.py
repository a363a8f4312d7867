"""Tests for the entry point's configuration failure paths."""

from __future__ import annotations

import yaml

from main import main


def test_missing_config_exits_with_error(tmp_path) -> None:
    assert main(str(tmp_path / "missing.yaml")) == 1


def test_swapped_limits_exit_with_error(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "pid": {"kp": 1, "ki": 0, "kd": 0, "output_min": 100, "output_max": 1},
        "web": {"enabled": False},
    }))
    assert main(str(path)) == 1


def test_missing_gain_exits_with_error(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"pid": {"kp": 1}, "web": {"enabled": False}}))
    assert main(str(path)) == 1


def test_null_sections_fall_back_to_defaults(tmp_path) -> None:
    """Empty YAML sections behave like missing ones."""
    path = tmp_path / "config.yaml"
    path.write_text(
        "pid:\n  kp: 1\n  ki: 0\n  kd: 0\n  output_min: 100\n  output_max: 1\n"
        "logging:\nloop:\nweb:\nplant:\n"
    )
    assert main(str(path)) == 1


def test_null_pid_section_exits_with_error(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("pid:\nweb:\n  enabled: false\n")
    assert main(str(path)) == 1


def test_negative_sample_period_exits_with_error(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "pid": {"kp": 1, "ki": 0, "kd": 0, "sample_period": -1},
        "web": {"enabled": False},
    }))
    assert main(str(path)) == 1
