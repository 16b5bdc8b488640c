from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from lightfieldmodel.display_meta import CameraArrayModel, ProjectorArrayModel


def screen_grid(width: int, height: int, screen_size: tuple[float, float], flip_y: bool = False) -> np.ndarray:
    """
    Screen-plane points (z=0) at the pixel centers of a (width, height) image.

    Convention: screen centered at the origin, pixel (x,y) maps linearly onto
    [-size/2, +size/2]. With flip_y=False row 0 sits at y=-size_y/2; the
    renderer uses flip_y=True so that row 0 is the top of the screen.
    Returns an (H,W,3) float64 array.
    """
    size_x, size_y = float(screen_size[0]), float(screen_size[1])
    xs = -0.5 * size_x + size_x * (np.arange(width, dtype=np.float64) + 0.5) / width
    rows = np.arange(height, dtype=np.float64)
    if flip_y:
        rows = (height - 1) - rows
    ys = -0.5 * size_y + size_y * (rows + 0.5) / height
    xx, yy = np.meshgrid(xs, ys)
    return np.stack([xx, yy, np.zeros_like(xx)], axis=-1)


def ray_tangent(screen_xyz: np.ndarray, origin_xyz: np.ndarray) -> np.ndarray:
    """Horizontal slope dx/dz of the line through `origin_xyz` and `screen_xyz`."""
    s = np.asarray(screen_xyz, dtype=np.float64)
    o = np.asarray(origin_xyz, dtype=np.float64)
    return (s[..., 0] - o[..., 0]) / (s[..., 2] - o[..., 2])


@dataclass(frozen=True)
class ViewArray:
    """
    Sorted viewpoints seen from the screen.

    orientation is +1 for cameras in front of the screen (ray tangents grow
    with the view id) and -1 for projectors behind it (tangents shrink).
    """

    positions: np.ndarray  # (N,3)
    orientation: int

    @property
    def count(self) -> int:
        return int(self.positions.shape[0])

    @classmethod
    def from_model(cls, model: ProjectorArrayModel | CameraArrayModel) -> "ViewArray":
        orientation = -1 if isinstance(model, ProjectorArrayModel) else 1
        return cls(positions=model.positions(), orientation=orientation)

    def tangents(self, screen_xyz: np.ndarray, view_ids: np.ndarray) -> np.ndarray:
        """Tangents of the rays from views `view_ids` (per pixel) through `screen_xyz`."""
        pos = self.positions[np.asarray(view_ids)]
        return ray_tangent(screen_xyz, pos)


def projector_ray_origins(screen_xyz: np.ndarray, projector_pos: np.ndarray, observer_distance: float) -> np.ndarray:
    """
    Points on the observer plane (z=observer_distance, y=0) lying on the
    projector rays through `screen_xyz`. A projector image is rendered from
    these origins so that the scene in front of the screen is seen correctly.
    """
    s = np.asarray(screen_xyz, dtype=np.float64)
    p = np.asarray(projector_pos, dtype=np.float64).reshape(3)
    observer_x = s[..., 0] - (s[..., 0] - p[0]) / p[2] * float(observer_distance)
    return np.stack(
        [observer_x, np.zeros_like(observer_x), np.full_like(observer_x, float(observer_distance))],
        axis=-1,
    )


def normalize(v: np.ndarray) -> np.ndarray:
    v = np.asarray(v, dtype=np.float64)
    norms = np.linalg.norm(v, axis=-1, keepdims=True)
    return v / np.where(norms > 0.0, norms, 1.0)
