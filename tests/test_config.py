from __future__ import annotations

import json
from pathlib import Path

import pytest

from lightfieldmodel.config import (
    DEFAULT_CONFIG,
    ConfigValidationError,
    load_interpolation_config,
    parse_interpolation_config,
)


def test_defaults() -> None:
    assert DEFAULT_CONFIG.gaussian_half_decay == pytest.approx(1.11741)
    assert DEFAULT_CONFIG.contributors_half_window == 4
    assert DEFAULT_CONFIG.contribution_epsilon == pytest.approx(0.01)
    assert DEFAULT_CONFIG.max_search_iterations == 50
    assert DEFAULT_CONFIG.validate_view_order is False


def test_partial_config_keeps_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"contributors_half_window": 2, "validate_view_order": True}), encoding="utf-8")
    cfg = load_interpolation_config(path)
    assert cfg.contributors_half_window == 2
    assert cfg.validate_view_order is True
    assert cfg.max_search_iterations == DEFAULT_CONFIG.max_search_iterations


def test_rejects_unknown_and_invalid_values() -> None:
    with pytest.raises(ConfigValidationError, match="unknown"):
        parse_interpolation_config({"gaussian_decay": 1.0})
    with pytest.raises(ConfigValidationError):
        parse_interpolation_config({"gaussian_half_decay": 0.0})
    with pytest.raises(ConfigValidationError):
        parse_interpolation_config({"contributors_half_window": 0})
    with pytest.raises(ConfigValidationError):
        parse_interpolation_config({"max_search_iterations": 0})


@pytest.mark.parametrize(
    "data",
    [
        {"validate_view_order": "false"},
        {"validate_view_order": 0},
        {"contributors_half_window": 2.7},
        {"contributors_half_window": True},
        {"max_search_iterations": "many"},
        {"gaussian_half_decay": "1.1"},
        {"contribution_epsilon": None},
    ],
)
def test_rejects_values_of_the_wrong_type(data: dict) -> None:
    with pytest.raises(ConfigValidationError):
        parse_interpolation_config(data)


def test_integral_floats_are_accepted() -> None:
    cfg = parse_interpolation_config({"gaussian_half_decay": 1, "contribution_epsilon": 0})
    assert cfg.gaussian_half_decay == 1.0
    assert isinstance(cfg.contribution_epsilon, float)


def test_load_reports_the_path_of_a_bad_file(tmp_path: Path) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigValidationError, match="broken.json"):
        load_interpolation_config(broken)

    invalid = tmp_path / "invalid.json"
    invalid.write_text(json.dumps({"max_search_iterations": 0}), encoding="utf-8")
    with pytest.raises(ConfigValidationError, match="invalid.json"):
        load_interpolation_config(invalid)

    with pytest.raises(FileNotFoundError):
        load_interpolation_config(tmp_path / "missing.json")
