from __future__ import annotations

import numpy as np

from lightfieldmodel.core.geometry import ViewArray, normalize, projector_ray_origins, ray_tangent, screen_grid
from lightfieldmodel.sim.sample_models import generate_sample_camera_model, generate_sample_projector_model


def test_screen_grid_pixel_centers() -> None:
    grid = screen_grid(4, 2, (100.0, 50.0))
    assert grid.shape == (2, 4, 3)
    np.testing.assert_allclose(grid[0, :, 0], [-37.5, -12.5, 12.5, 37.5])
    np.testing.assert_allclose(grid[:, 0, 1], [-12.5, 12.5])
    assert np.all(grid[..., 2] == 0.0)


def test_screen_grid_flip_puts_row_zero_on_top() -> None:
    grid = screen_grid(4, 2, (100.0, 50.0), flip_y=True)
    np.testing.assert_allclose(grid[:, 0, 1], [12.5, -12.5])
    np.testing.assert_allclose(grid[..., 0], screen_grid(4, 2, (100.0, 50.0))[..., 0])


def test_ray_tangent_sign_depends_on_side_of_screen() -> None:
    s = np.array([10.0, 0.0, 0.0])
    assert ray_tangent(s, np.array([0.0, 0.0, 100.0])) == -0.1
    assert ray_tangent(s, np.array([0.0, 0.0, -100.0])) == 0.1


def test_view_array_orientation_makes_sorted_tangents_ascending() -> None:
    cameras = ViewArray.from_model(generate_sample_camera_model(7, image_size=(4, 2)))
    projectors = ViewArray.from_model(generate_sample_projector_model(7, image_size=(4, 2)))
    assert (cameras.orientation, projectors.orientation) == (1, -1)

    screen = np.tile(np.array([[120.0, 30.0, 0.0]]), (7, 1))
    ids = np.arange(7)
    for views in (cameras, projectors):
        t = views.orientation * views.tangents(screen, ids)
        assert np.all(np.diff(t) > 0.0)


def test_projector_ray_origins_lie_on_projector_rays() -> None:
    screen = screen_grid(5, 3, (1000.0, 600.0)).reshape(-1, 3)
    projector = np.array([250.0, 0.0, -700.0])
    origins = projector_ray_origins(screen, projector, 2000.0)
    assert np.all(origins[:, 2] == 2000.0)
    assert np.all(origins[:, 1] == 0.0)
    np.testing.assert_allclose(ray_tangent(screen, origins), ray_tangent(screen, projector))


def test_normalize_keeps_zero_vectors() -> None:
    v = normalize(np.array([[3.0, 4.0, 0.0], [0.0, 0.0, 0.0]]))
    np.testing.assert_allclose(v, [[0.6, 0.8, 0.0], [0.0, 0.0, 0.0]])
