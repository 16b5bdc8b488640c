from __future__ import annotations

import math

import numpy as np

from lightfieldmodel.display_meta import CameraArrayModel, ProjectorArrayModel

OBSERVER_DISTANCE_MM = 2000.0


def _linspace(lo: float, hi: float, n: int) -> tuple[float, ...]:
    if n == 1:
        return (float(lo),)
    return tuple(float(v) for v in np.linspace(lo, hi, n))


def rule_of_thumb_scattering(projectors_pos_x: tuple[float, ...], projectors_pos_z: tuple[float, ...]) -> float:
    """
    Half-decay angle = 1.5x the angle between the two central-most projectors,
    seen from the screen center.
    """
    if len(projectors_pos_x) < 2:
        return 0.0
    c = min(len(projectors_pos_x) // 2, len(projectors_pos_x) - 2)
    a = np.array([projectors_pos_x[c], 0.0, projectors_pos_z[c]])
    b = np.array([projectors_pos_x[c + 1], 0.0, projectors_pos_z[c + 1]])
    cosine = float(np.dot(a / np.linalg.norm(a), b / np.linalg.norm(b)))
    return 1.5 * math.acos(max(-1.0, min(1.0, cosine)))


def generate_sample_projector_model(
    num_projectors: int = 21,
    image_size: tuple[int, int] = (1000, 600),
    screen_size: tuple[float, float] = (1000.0, 600.0),
    x_range: tuple[float, float] = (-1000.0, 1000.0),
    y: float = 0.0,
    z: float = -700.0,
    observer_distance: float = OBSERVER_DISTANCE_MM,
    name: str = "MyHoloVizio",
) -> ProjectorArrayModel:
    """Uniformly spaced projector row behind the screen."""
    xs = _linspace(x_range[0], x_range[1], num_projectors)
    zs = tuple(float(z) for _ in xs)
    return ProjectorArrayModel(
        name=name,
        num_projectors=int(num_projectors),
        image_size_x=int(image_size[0]),
        image_size_y=int(image_size[1]),
        observer_distance=float(observer_distance),
        screen_size_x=float(screen_size[0]),
        screen_size_y=float(screen_size[1]),
        angular_scattering=rule_of_thumb_scattering(xs, zs),
        projectors_pos_x=xs,
        projectors_pos_y=tuple(float(y) for _ in xs),
        projectors_pos_z=zs,
    )


def generate_sample_camera_model(
    num_cameras: int = 21,
    image_size: tuple[int, int] = (1000, 600),
    screen_size: tuple[float, float] = (1000.0, 600.0),
    x_range: tuple[float, float] = (-2000.0, 2000.0),
    y: float = 0.0,
    z: float = OBSERVER_DISTANCE_MM,
    name: str = "MyMultiView",
) -> CameraArrayModel:
    """Uniformly spaced camera row on the observer plane."""
    xs = _linspace(x_range[0], x_range[1], num_cameras)
    return CameraArrayModel(
        name=name,
        num_cameras=int(num_cameras),
        image_size_x=int(image_size[0]),
        image_size_y=int(image_size[1]),
        screen_size_x=float(screen_size[0]),
        screen_size_y=float(screen_size[1]),
        cameras_pos_x=xs,
        cameras_pos_y=tuple(float(y) for _ in xs),
        cameras_pos_z=tuple(float(z) for _ in xs),
    )
