from lightfieldmodel import display_meta
from lightfieldmodel.api import (
    LightFieldInterpolation,
    load_camera_array_model,
    load_projector_array_model,
    save_camera_array_model,
    save_projector_array_model,
)
from lightfieldmodel.config import InterpolationConfig
from lightfieldmodel.core.layered_image import LayeredImage
from lightfieldmodel.display_meta import CameraArrayModel, ProjectorArrayModel

__all__ = [
    "display_meta",
    "CameraArrayModel",
    "ProjectorArrayModel",
    "InterpolationConfig",
    "LayeredImage",
    "LightFieldInterpolation",
    "load_camera_array_model",
    "load_projector_array_model",
    "save_camera_array_model",
    "save_projector_array_model",
]
