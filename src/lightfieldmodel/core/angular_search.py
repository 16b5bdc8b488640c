from __future__ import annotations

import numpy as np

from lightfieldmodel.core.geometry import ViewArray, ray_tangent


def angular_index(
    screen_xyz: np.ndarray,
    query_pos: np.ndarray,
    views: ViewArray,
    *,
    clamp: bool = True,
    max_iterations: int = 50,
) -> np.ndarray:
    """
    Continuous index into `views` of the ray from `query_pos` through each
    screen point.

    The ray tangents of the sorted view array are bisected to find the
    bracketing pair (left, right) and the blend weight is taken in angle
    space: (atan(t) - atan(t_left)) / (atan(t_right) - atan(t_left)).
    With clamp=True the weight is limited to [0,1]; the perceptual path keeps
    it unclamped and tolerates extrapolation.

    When the end views of the array are not in the expected order for a
    screen point, index 0 is returned for that point.
    """
    screen_xyz = np.asarray(screen_xyz, dtype=np.float64)
    shape = screen_xyz.shape[:-1]
    n = views.count
    if n <= 1:
        return np.zeros(shape, dtype=np.float64)

    sign = float(views.orientation)
    target = sign * ray_tangent(screen_xyz, np.asarray(query_pos, dtype=np.float64))

    left = np.zeros(shape, dtype=np.int64)
    right = np.full(shape, n - 1, dtype=np.int64)
    left_tan = sign * views.tangents(screen_xyz, left)
    right_tan = sign * views.tangents(screen_xyz, right)
    degenerate = left_tan > right_tan

    for _ in range(int(max_iterations)):
        open_ = (right - left) > 1
        if not np.any(open_):
            break
        mid = (left + right) // 2
        mid_tan = sign * views.tangents(screen_xyz, mid)
        go_left = open_ & (mid_tan > target)
        go_right = open_ & ~(mid_tan > target)
        right = np.where(go_left, mid, right)
        right_tan = np.where(go_left, mid_tan, right_tan)
        left = np.where(go_right, mid, left)
        left_tan = np.where(go_right, mid_tan, left_tan)

    # atan is odd, so the orientation sign cancels in the weight.
    target_angle = np.arctan(target)
    left_angle = np.arctan(left_tan)
    right_angle = np.arctan(right_tan)
    with np.errstate(divide="ignore", invalid="ignore"):
        weight = (target_angle - left_angle) / (right_angle - left_angle)
    weight = np.where(np.isfinite(weight), weight, 0.0)
    if clamp:
        weight = np.clip(weight, 0.0, 1.0)

    index = left.astype(np.float64) + weight
    return np.where(degenerate, 0.0, index)


def bracket(index: np.ndarray, n: int) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Split a continuous index into (left, right, weight) with left clamped to
    [0, n-2] and weight clamped to [0,1]. A single view gives left=right=0.
    """
    index = np.asarray(index, dtype=np.float64)
    left = np.clip(np.floor(index).astype(np.int64), 0, max(n - 2, 0))
    right = np.minimum(left + 1, max(n - 1, 0))
    weight = np.clip(index - left, 0.0, 1.0)
    if n <= 1:
        weight = np.zeros_like(weight)
    return left, right, weight
