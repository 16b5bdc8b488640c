from __future__ import annotations

import dataclasses

import numpy as np
import pytest

from lightfieldmodel.api.light_field_interpolation import LightFieldInterpolation
from lightfieldmodel.config import InterpolationConfig
from lightfieldmodel.core.layered_image import LayeredImage
from lightfieldmodel.display_meta import ProjectorArrayModel, ViewArrayOrderError
from lightfieldmodel.sim.sample_models import generate_sample_camera_model, generate_sample_projector_model

IMAGE_SIZE = (16, 2)
SCREEN_SIZE = (400.0, 20.0)


def _reversed(model: ProjectorArrayModel) -> ProjectorArrayModel:
    return dataclasses.replace(
        model,
        projectors_pos_x=model.projectors_pos_x[::-1],
        projectors_pos_y=model.projectors_pos_y[::-1],
        projectors_pos_z=model.projectors_pos_z[::-1],
    )


def _models() -> tuple:
    projectors = generate_sample_projector_model(7, image_size=IMAGE_SIZE, screen_size=SCREEN_SIZE)
    cameras = generate_sample_camera_model(5, image_size=IMAGE_SIZE, screen_size=SCREEN_SIZE)
    return projectors, cameras


def test_view_order_validation_rejects_reversed_projectors() -> None:
    projectors, cameras = _models()
    strict = InterpolationConfig(validate_view_order=True)
    with pytest.raises(ViewArrayOrderError, match="increasing x"):
        LightFieldInterpolation(_reversed(projectors), cameras, strict)

    lfi = LightFieldInterpolation(projectors, cameras, strict)
    with pytest.raises(ViewArrayOrderError):
        lfi.set_projector_model(_reversed(projectors))
    assert lfi.projector_model == projectors


def test_view_order_validation_rejects_cameras_behind_the_screen() -> None:
    projectors, cameras = _models()
    behind = dataclasses.replace(cameras, cameras_pos_z=tuple(-z for z in cameras.cameras_pos_z))
    with pytest.raises(ViewArrayOrderError, match="in front of the screen"):
        LightFieldInterpolation(projectors, behind, InterpolationConfig(validate_view_order=True))


def test_default_config_keeps_index_zero_fallback_for_reversed_projectors() -> None:
    projectors, cameras = _models()
    lfi = LightFieldInterpolation(_reversed(projectors), cameras)

    rng = np.random.default_rng(3)
    stack = LayeredImage.from_array(rng.uniform(0.0, 1.0, size=(7, IMAGE_SIZE[1], IMAGE_SIZE[0], 3)))
    out = lfi.interpolate_projectors_to_camera(stack, np.array([150.0, 0.0, 2000.0]))
    np.testing.assert_array_equal(out, stack.layer(0))
