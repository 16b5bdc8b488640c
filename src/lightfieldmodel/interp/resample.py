from __future__ import annotations

import logging

import numpy as np

from lightfieldmodel.config import DEFAULT_CONFIG, InterpolationConfig
from lightfieldmodel.core.angular_search import angular_index, bracket
from lightfieldmodel.core.geometry import ViewArray, screen_grid
from lightfieldmodel.core.layered_image import LayeredImage

logger = logging.getLogger(__name__)


class ConfigurationMismatchError(ValueError):
    pass


def check_stack(stack: LayeredImage, image_size: tuple[int, int], num_views: int, what: str) -> None:
    width, height = image_size
    if num_views <= 0:
        raise ConfigurationMismatchError(f"{what}: view count must be > 0")
    if width <= 0 or height <= 0:
        raise ConfigurationMismatchError(f"{what}: image size must be > 0, got {(width, height)}")
    if (stack.width, stack.height, stack.depth) != (width, height, num_views):
        raise ConfigurationMismatchError(
            f"{what}: stack is {(stack.width, stack.height, stack.depth)}, expected {(width, height, num_views)}"
        )


def check_convertible(
    source: LayeredImage,
    source_image_size: tuple[int, int],
    source_screen_size: tuple[float, float],
    source_count: int,
    target_image_size: tuple[int, int],
    target_screen_size: tuple[float, float],
    target_count: int,
) -> None:
    """Raise before any work if the two arrays cannot share one light field."""
    if target_count <= 0:
        raise ConfigurationMismatchError("target view count must be > 0")
    if tuple(source_image_size) != tuple(target_image_size):
        raise ConfigurationMismatchError(
            f"image sizes differ: source {tuple(source_image_size)} != target {tuple(target_image_size)}"
        )
    if tuple(source_screen_size) != tuple(target_screen_size):
        raise ConfigurationMismatchError(
            f"screen sizes differ: source {tuple(source_screen_size)} != target {tuple(target_screen_size)}"
        )
    check_stack(source, source_image_size, source_count, "source")


def two_tap_blend(source: LayeredImage, left: np.ndarray, right: np.ndarray, weight: np.ndarray) -> np.ndarray:
    """Per-pixel blend (1-w)*source[left] + w*source[right] at the same (x,y)."""
    data = source.data
    h, w = data.shape[1:3]
    yy, xx = np.meshgrid(np.arange(h), np.arange(w), indexing="ij")
    left_val = data[left, yy, xx].astype(np.float64)
    right_val = data[right, yy, xx].astype(np.float64)
    wgt = weight[..., None]
    return (left_val * (1.0 - wgt) + right_val * wgt).astype(np.float32)


def interpolate_view(
    source: LayeredImage,
    source_views: ViewArray,
    query_pos: np.ndarray,
    screen_size: tuple[float, float],
    config: InterpolationConfig = DEFAULT_CONFIG,
) -> np.ndarray:
    """
    Resample the source stack into the (H,W,3) image seen from `query_pos`.

    Each pixel takes the two source views bracketing the ray from `query_pos`
    through that pixel's screen point.
    """
    screen = screen_grid(source.width, source.height, screen_size)
    index = angular_index(
        screen,
        query_pos,
        source_views,
        clamp=True,
        max_iterations=config.max_search_iterations,
    )
    left, right, weight = bracket(index, source_views.count)
    return two_tap_blend(source, left, right, weight)


def convert_stack(
    source: LayeredImage,
    source_views: ViewArray,
    target_views: ViewArray,
    screen_size: tuple[float, float],
    config: InterpolationConfig = DEFAULT_CONFIG,
) -> LayeredImage:
    """One output layer per target view; layers are independent of each other."""
    target = LayeredImage(source.width, source.height, target_views.count)
    for target_id in range(target_views.count):
        target.set_layer(
            target_id,
            interpolate_view(source, source_views, target_views.positions[target_id], screen_size, config),
        )
        logger.debug("Resampled layer %d/%d", target_id + 1, target_views.count)
    return target
