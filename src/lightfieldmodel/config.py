from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any


class ConfigValidationError(ValueError):
    pass


@dataclass(frozen=True)
class InterpolationConfig:
    """
    Tunables of the angular search and the perceptual compositor.

    gaussian_half_decay: ratio between the angular scattering of a projector
        and the sigma of its Gaussian lobe, weight = exp(-dtheta^2 / sigma^2).
    contributors_half_window: K, projectors [left-(K-1), left+K] are blended.
    contribution_epsilon: weights at or below this floor are dropped.
    max_search_iterations: upper bound of the bisection over the view array.
    validate_view_order: reject unsorted view arrays instead of letting the
        search fall back to index 0.
    """

    gaussian_half_decay: float = 1.11741
    contributors_half_window: int = 4
    contribution_epsilon: float = 0.01
    max_search_iterations: int = 50
    validate_view_order: bool = False

    @property
    def gaussian_half_decay_sqr(self) -> float:
        return self.gaussian_half_decay * self.gaussian_half_decay


DEFAULT_CONFIG = InterpolationConfig()


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise ConfigValidationError(msg)


def _int_value(merged: dict[str, Any], key: str) -> int:
    raw = merged[key]
    _require(isinstance(raw, int) and not isinstance(raw, bool), f"{key} must be an integer")
    return int(raw)


def _float_value(merged: dict[str, Any], key: str) -> float:
    raw = merged[key]
    _require(isinstance(raw, (int, float)) and not isinstance(raw, bool), f"{key} must be a number")
    return float(raw)


def _bool_value(merged: dict[str, Any], key: str) -> bool:
    raw = merged[key]
    _require(isinstance(raw, bool), f"{key} must be true or false")
    return raw


def parse_interpolation_config(data: dict[str, Any]) -> InterpolationConfig:
    _require(isinstance(data, dict), "interpolation config must be a JSON object")
    known = {f.name for f in fields(InterpolationConfig)}
    unknown = sorted(set(data) - known)
    _require(not unknown, f"unknown config keys: {unknown}")

    merged = {**asdict(DEFAULT_CONFIG), **data}
    half_decay = _float_value(merged, "gaussian_half_decay")
    window = _int_value(merged, "contributors_half_window")
    eps = _float_value(merged, "contribution_epsilon")
    iters = _int_value(merged, "max_search_iterations")
    _require(half_decay > 0.0, "gaussian_half_decay must be > 0")
    _require(window >= 1, "contributors_half_window must be >= 1")
    _require(eps >= 0.0, "contribution_epsilon must be >= 0")
    _require(iters >= 1, "max_search_iterations must be >= 1")

    return InterpolationConfig(
        gaussian_half_decay=half_decay,
        contributors_half_window=window,
        contribution_epsilon=eps,
        max_search_iterations=iters,
        validate_view_order=_bool_value(merged, "validate_view_order"),
    )


def load_interpolation_config(path: Path) -> InterpolationConfig:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigValidationError(f"{path} is not valid JSON: {e}") from e
    try:
        return parse_interpolation_config(data)
    except ConfigValidationError as e:
        raise ConfigValidationError(f"{path}: {e}") from e
