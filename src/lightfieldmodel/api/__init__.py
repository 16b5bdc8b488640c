from lightfieldmodel.api.light_field_interpolation import LightFieldInterpolation
from lightfieldmodel.api.model_io import (
    load_camera_array_model,
    load_projector_array_model,
    save_camera_array_model,
    save_projector_array_model,
)

__all__ = [
    "LightFieldInterpolation",
    "load_camera_array_model",
    "load_projector_array_model",
    "save_camera_array_model",
    "save_projector_array_model",
]
