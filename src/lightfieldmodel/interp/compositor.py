from __future__ import annotations

import logging

import numpy as np

from lightfieldmodel.config import DEFAULT_CONFIG, InterpolationConfig
from lightfieldmodel.core.angular_search import angular_index, bracket
from lightfieldmodel.core.geometry import ViewArray, ray_tangent, screen_grid
from lightfieldmodel.core.layered_image import LayeredImage
from lightfieldmodel.display_meta import ProjectorArrayModel
from lightfieldmodel.interp.resample import check_stack

logger = logging.getLogger(__name__)


def projector_weight(
    projector_pos: np.ndarray,
    screen_xyz: np.ndarray,
    camera_pos: np.ndarray,
    angular_scattering: float,
    config: InterpolationConfig = DEFAULT_CONFIG,
) -> np.ndarray:
    """
    Gaussian emission lobe of a projector seen by a camera through a screen point:
    exp(-dtheta^2 / sigma^2) with sigma^2 = angular_scattering^2 / half_decay^2.
    """
    projector_angle = np.arctan(ray_tangent(screen_xyz, projector_pos))
    camera_angle = np.arctan(ray_tangent(screen_xyz, camera_pos))
    angle_diff = np.abs(projector_angle - camera_angle)
    sigma_sqr = float(angular_scattering) ** 2 / config.gaussian_half_decay_sqr
    with np.errstate(divide="ignore", invalid="ignore"):
        arg = angle_diff * angle_diff / sigma_sqr
    # Zero scattering means an infinitely narrow lobe.
    arg = np.where(np.isnan(arg), 0.0, arg)
    return np.exp(-arg)


def simulate_perceived_view(
    projector_stack: LayeredImage,
    projector_model: ProjectorArrayModel,
    observer_pos: np.ndarray,
    normalize: bool = True,
    config: InterpolationConfig = DEFAULT_CONFIG,
) -> np.ndarray:
    """
    Image perceived by a pinhole observer at `observer_pos` looking at the display.

    For each pixel a window of projectors around the bracketing pair is blended
    with `projector_weight`; contributions at or below
    `config.contribution_epsilon` are ignored. With `normalize` the sum is
    divided by the total weight when that exceeds the floor, otherwise the
    raw weighted sum is returned (dark pixels reveal under-covered regions).
    """
    check_stack(projector_stack, projector_model.image_size, projector_model.num_views, "projector stack")

    views = ViewArray.from_model(projector_model)
    n = views.count
    width, height = projector_model.image_size
    screen = screen_grid(width, height, projector_model.screen_size)
    observer_pos = np.asarray(observer_pos, dtype=np.float64).reshape(3)

    index = angular_index(screen, observer_pos, views, clamp=False, max_iterations=config.max_search_iterations)
    left, _right, _weight = bracket(index, n)

    data = projector_stack.data
    yy, xx = np.meshgrid(np.arange(height), np.arange(width), indexing="ij")
    eps = float(config.contribution_epsilon)
    k = int(config.contributors_half_window)

    color = np.zeros((height, width, 3), dtype=np.float64)
    weight_sum = np.zeros((height, width), dtype=np.float64)
    for offset in range(-k + 1, k + 1):
        proj_ids = left + offset
        valid = (proj_ids >= 0) & (proj_ids <= n - 1)
        if not np.any(valid):
            continue
        safe_ids = np.clip(proj_ids, 0, n - 1)
        weight = projector_weight(
            views.positions[safe_ids],
            screen,
            observer_pos,
            projector_model.angular_scattering,
            config,
        )
        weight = np.where(valid & (weight > eps), weight, 0.0)
        color += data[safe_ids, yy, xx].astype(np.float64) * weight[..., None]
        weight_sum += weight

    if normalize:
        covered = weight_sum > eps
        color = np.where(covered[..., None], color / np.where(covered, weight_sum, 1.0)[..., None], color)
    return color.astype(np.float32)


def simulate_perceived_stack(
    projector_stack: LayeredImage,
    projector_model: ProjectorArrayModel,
    observer_positions: np.ndarray,
    normalize: bool = True,
    config: InterpolationConfig = DEFAULT_CONFIG,
) -> LayeredImage:
    """Perceived view for each observer position, stacked in the given order."""
    check_stack(projector_stack, projector_model.image_size, projector_model.num_views, "projector stack")
    observer_positions = np.asarray(observer_positions, dtype=np.float64).reshape(-1, 3)
    width, height = projector_model.image_size
    out = LayeredImage(width, height, observer_positions.shape[0])
    for i, pos in enumerate(observer_positions):
        out.set_layer(i, simulate_perceived_view(projector_stack, projector_model, pos, normalize, config))
        logger.debug("Simulated observer %d/%d at %s", i + 1, observer_positions.shape[0], pos.tolist())
    return out
