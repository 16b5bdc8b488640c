from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np


class ModelValidationError(ValueError):
    pass


class ViewArrayOrderError(ValueError):
    pass


@dataclass(frozen=True)
class ProjectorArrayModel:
    """
    Multi-projector display descriptor.

    Assumptions (not checked here, see `check_view_array_order`):
    - projectors are sorted by increasing x,
    - all projectors are behind the screen (z < 0).

    Lengths are in millimeters, `angular_scattering` in radians.
    """

    name: str
    num_projectors: int
    image_size_x: int
    image_size_y: int
    observer_distance: float
    screen_size_x: float
    screen_size_y: float
    angular_scattering: float
    projectors_pos_x: tuple[float, ...]
    projectors_pos_y: tuple[float, ...]
    projectors_pos_z: tuple[float, ...]

    @property
    def num_views(self) -> int:
        return self.num_projectors

    @property
    def image_size(self) -> tuple[int, int]:
        return self.image_size_x, self.image_size_y

    @property
    def screen_size(self) -> tuple[float, float]:
        return self.screen_size_x, self.screen_size_y

    def positions(self) -> np.ndarray:
        return _stack_positions(self.projectors_pos_x, self.projectors_pos_y, self.projectors_pos_z)

    def position(self, projector_id: int) -> np.ndarray:
        return self.positions()[projector_id]


@dataclass(frozen=True)
class CameraArrayModel:
    """
    Multi-view display descriptor: pinhole cameras in front of the screen
    (z > 0), sorted by increasing x.
    """

    name: str
    num_cameras: int
    image_size_x: int
    image_size_y: int
    screen_size_x: float
    screen_size_y: float
    cameras_pos_x: tuple[float, ...]
    cameras_pos_y: tuple[float, ...]
    cameras_pos_z: tuple[float, ...]

    @property
    def num_views(self) -> int:
        return self.num_cameras

    @property
    def image_size(self) -> tuple[int, int]:
        return self.image_size_x, self.image_size_y

    @property
    def screen_size(self) -> tuple[float, float]:
        return self.screen_size_x, self.screen_size_y

    def positions(self) -> np.ndarray:
        return _stack_positions(self.cameras_pos_x, self.cameras_pos_y, self.cameras_pos_z)

    def position(self, camera_id: int) -> np.ndarray:
        return self.positions()[camera_id]


def _stack_positions(xs: tuple[float, ...], ys: tuple[float, ...], zs: tuple[float, ...]) -> np.ndarray:
    if not xs:
        return np.zeros((0, 3), dtype=np.float64)
    return np.stack([np.asarray(xs), np.asarray(ys), np.asarray(zs)], axis=-1).astype(np.float64)


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise ModelValidationError(msg)


def _get(data: dict[str, Any], key: str) -> Any:
    _require(key in data, f"{key} is required")
    return data[key]


def _int_field(data: dict[str, Any], key: str) -> int:
    raw = _get(data, key)
    _require(isinstance(raw, int) and not isinstance(raw, bool), f"{key} must be an integer")
    _require(raw >= 0, f"{key} must be >= 0")
    return int(raw)


def _float_field(data: dict[str, Any], key: str) -> float:
    raw = _get(data, key)
    _require(isinstance(raw, (int, float)) and not isinstance(raw, bool), f"{key} must be a number")
    return float(raw)


def _float_array(data: dict[str, Any], key: str, n: int) -> tuple[float, ...]:
    raw = _get(data, key)
    _require(isinstance(raw, list), f"{key} must be an array")
    _require(len(raw) == n, f"{key} must have {n} entries, got {len(raw)}")
    for v in raw:
        _require(isinstance(v, (int, float)) and not isinstance(v, bool), f"{key} entries must be numbers")
    return tuple(float(v) for v in raw)


def parse_projector_array_model(data: dict[str, Any]) -> ProjectorArrayModel:
    _require(isinstance(data, dict), "projector array model must be a JSON object")
    name = _get(data, "name")
    _require(isinstance(name, str), "name must be a string")
    n = _int_field(data, "num_projectors")
    return ProjectorArrayModel(
        name=name,
        num_projectors=n,
        image_size_x=_int_field(data, "image_size_x"),
        image_size_y=_int_field(data, "image_size_y"),
        observer_distance=_float_field(data, "observer_distance"),
        screen_size_x=_float_field(data, "screen_size_x"),
        screen_size_y=_float_field(data, "screen_size_y"),
        angular_scattering=_float_field(data, "angular_scattering"),
        projectors_pos_x=_float_array(data, "projectors_pos_x", n),
        projectors_pos_y=_float_array(data, "projectors_pos_y", n),
        projectors_pos_z=_float_array(data, "projectors_pos_z", n),
    )


def parse_camera_array_model(data: dict[str, Any]) -> CameraArrayModel:
    _require(isinstance(data, dict), "camera array model must be a JSON object")
    name = _get(data, "name")
    _require(isinstance(name, str), "name must be a string")
    n = _int_field(data, "num_cameras")
    return CameraArrayModel(
        name=name,
        num_cameras=n,
        image_size_x=_int_field(data, "image_size_x"),
        image_size_y=_int_field(data, "image_size_y"),
        screen_size_x=_float_field(data, "screen_size_x"),
        screen_size_y=_float_field(data, "screen_size_y"),
        cameras_pos_x=_float_array(data, "cameras_pos_x", n),
        cameras_pos_y=_float_array(data, "cameras_pos_y", n),
        cameras_pos_z=_float_array(data, "cameras_pos_z", n),
    )


def projector_array_model_to_dict(model: ProjectorArrayModel) -> dict[str, Any]:
    return {
        "name": model.name,
        "num_projectors": int(model.num_projectors),
        "image_size_x": int(model.image_size_x),
        "image_size_y": int(model.image_size_y),
        "observer_distance": float(model.observer_distance),
        "screen_size_x": float(model.screen_size_x),
        "screen_size_y": float(model.screen_size_y),
        "angular_scattering": float(model.angular_scattering),
        "projectors_pos_x": [float(v) for v in model.projectors_pos_x],
        "projectors_pos_y": [float(v) for v in model.projectors_pos_y],
        "projectors_pos_z": [float(v) for v in model.projectors_pos_z],
    }


def camera_array_model_to_dict(model: CameraArrayModel) -> dict[str, Any]:
    return {
        "name": model.name,
        "num_cameras": int(model.num_cameras),
        "image_size_x": int(model.image_size_x),
        "image_size_y": int(model.image_size_y),
        "screen_size_x": float(model.screen_size_x),
        "screen_size_y": float(model.screen_size_y),
        "cameras_pos_x": [float(v) for v in model.cameras_pos_x],
        "cameras_pos_y": [float(v) for v in model.cameras_pos_y],
        "cameras_pos_z": [float(v) for v in model.cameras_pos_z],
    }


def check_view_array_order(model: ProjectorArrayModel | CameraArrayModel) -> None:
    """
    Explicit check of the ordering the angular search relies on:
    x strictly increasing, projectors behind the screen, cameras in front.
    """
    pos = model.positions()
    kind = "projector" if isinstance(model, ProjectorArrayModel) else "camera"
    if pos.shape[0] > 1 and not np.all(np.diff(pos[:, 0]) > 0.0):
        raise ViewArrayOrderError(f"{kind} positions must be sorted by strictly increasing x")
    if kind == "projector" and not np.all(pos[:, 2] < 0.0):
        raise ViewArrayOrderError("all projectors must be behind the screen (z < 0)")
    if kind == "camera" and not np.all(pos[:, 2] > 0.0):
        raise ViewArrayOrderError("all cameras must be in front of the screen (z > 0)")
