from __future__ import annotations

import logging

import numpy as np

from lightfieldmodel.config import DEFAULT_CONFIG, InterpolationConfig
from lightfieldmodel.core.geometry import ViewArray
from lightfieldmodel.core.layered_image import LayeredImage
from lightfieldmodel.display_meta import CameraArrayModel, ProjectorArrayModel, check_view_array_order
from lightfieldmodel.interp import compositor
from lightfieldmodel.interp.resample import check_convertible, check_stack, convert_stack, interpolate_view

logger = logging.getLogger(__name__)


class LightFieldInterpolation:
    """
    Conversions between a multi-view (camera array) light field and a
    multi-projector one, plus the perceived-view simulation of the projector
    display.

    Convention:
    - the screen is the z=0 plane, centered at the origin,
    - cameras sit in front of it (z>0), projectors behind it (z<0),
    - both arrays are sorted by increasing x.

    Every method validates sizes and counts before computing anything and
    raises `ConfigurationMismatchError` on mismatch; results are returned as
    new arrays/stacks so a failed call never touches caller data.
    """

    def __init__(
        self,
        projector_model: ProjectorArrayModel,
        camera_model: CameraArrayModel,
        config: InterpolationConfig = DEFAULT_CONFIG,
    ) -> None:
        self.config = config
        self.set_projector_model(projector_model)
        self.set_camera_model(camera_model)

    def set_projector_model(self, projector_model: ProjectorArrayModel) -> None:
        if self.config.validate_view_order:
            check_view_array_order(projector_model)
        self.projector_model = projector_model
        self._projector_views = ViewArray.from_model(projector_model)

    def set_camera_model(self, camera_model: CameraArrayModel) -> None:
        if self.config.validate_view_order:
            check_view_array_order(camera_model)
        self.camera_model = camera_model
        self._camera_views = ViewArray.from_model(camera_model)

    def convert_views_to_projectors(self, multiview_image: LayeredImage) -> LayeredImage:
        pm, cm = self.projector_model, self.camera_model
        check_convertible(
            multiview_image,
            cm.image_size,
            cm.screen_size,
            cm.num_views,
            pm.image_size,
            pm.screen_size,
            pm.num_views,
        )
        logger.info("Converting %d views to %d projector images", cm.num_cameras, pm.num_projectors)
        return convert_stack(multiview_image, self._camera_views, self._projector_views, cm.screen_size, self.config)

    def convert_projectors_to_views(self, projector_image: LayeredImage) -> LayeredImage:
        pm, cm = self.projector_model, self.camera_model
        check_convertible(
            projector_image,
            pm.image_size,
            pm.screen_size,
            pm.num_views,
            cm.image_size,
            cm.screen_size,
            cm.num_views,
        )
        logger.info("Converting %d projector images to %d views", pm.num_projectors, cm.num_cameras)
        return convert_stack(projector_image, self._projector_views, self._camera_views, pm.screen_size, self.config)

    def interpolate_views_to_projector(self, multiview_image: LayeredImage, projector_pos: np.ndarray) -> np.ndarray:
        cm = self.camera_model
        check_stack(multiview_image, cm.image_size, cm.num_views, "multi-view stack")
        return interpolate_view(
            multiview_image,
            self._camera_views,
            np.asarray(projector_pos, dtype=np.float64).reshape(3),
            cm.screen_size,
            self.config,
        )

    def interpolate_projectors_to_camera(self, projector_image: LayeredImage, camera_pos: np.ndarray) -> np.ndarray:
        pm = self.projector_model
        check_stack(projector_image, pm.image_size, pm.num_views, "projector stack")
        return interpolate_view(
            projector_image,
            self._projector_views,
            np.asarray(camera_pos, dtype=np.float64).reshape(3),
            pm.screen_size,
            self.config,
        )

    def visualize_projectors_to_camera(
        self, projector_image: LayeredImage, camera_pos: np.ndarray, normalize: bool = True
    ) -> np.ndarray:
        return compositor.simulate_perceived_view(
            projector_image, self.projector_model, camera_pos, normalize=normalize, config=self.config
        )

    def visualize_projectors_to_views(self, projector_image: LayeredImage, normalize: bool = True) -> LayeredImage:
        """Perceived image at every camera position of the camera model."""
        logger.info("Simulating the projector display for %d camera positions", self.camera_model.num_cameras)
        return compositor.simulate_perceived_stack(
            projector_image,
            self.projector_model,
            self.camera_model.positions(),
            normalize=normalize,
            config=self.config,
        )

    def projector_weight(self, projector_pos: np.ndarray, screen_pos: np.ndarray, camera_pos: np.ndarray) -> float:
        w = compositor.projector_weight(
            np.asarray(projector_pos, dtype=np.float64),
            np.asarray(screen_pos, dtype=np.float64),
            np.asarray(camera_pos, dtype=np.float64),
            self.projector_model.angular_scattering,
            self.config,
        )
        return float(w)
