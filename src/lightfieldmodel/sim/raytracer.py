from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from lightfieldmodel.core.geometry import normalize, projector_ray_origins, screen_grid
from lightfieldmodel.core.layered_image import LayeredImage
from lightfieldmodel.display_meta import CameraArrayModel, ProjectorArrayModel
from lightfieldmodel.sim.scene import Scene

logger = logging.getLogger(__name__)

SCENE_EPSILON = 0.05
DEFAULT_MAX_RAY_DEPTH = 4
_MAX_DISTANCE = 100000.0


@dataclass
class _Hits:
    mask: np.ndarray  # (N,) bool
    dist: np.ndarray  # (N,)
    point: np.ndarray  # (N,3)
    normal: np.ndarray  # (N,3)
    diffuse: np.ndarray  # (N,3)
    albedo: np.ndarray  # (N,4)
    specular_exponent: np.ndarray  # (N,)
    refractive_index: np.ndarray  # (N,)


def _dot(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.sum(a * b, axis=-1)


def reflect(incident: np.ndarray, normal: np.ndarray) -> np.ndarray:
    return incident - normal * (2.0 * _dot(incident, normal))[..., None]


def refract(incident: np.ndarray, normal: np.ndarray, eta_t: np.ndarray, eta_i: float = 1.0) -> np.ndarray:
    """
    Snell refraction. Rays leaving the object swap the media. Under total
    internal reflection the direction (1,0,0) is returned.
    """
    eta_t = np.asarray(eta_t, dtype=np.float64)
    cosi = -np.clip(_dot(incident, normal), -1.0, 1.0)
    inside = cosi < 0.0
    n = np.where(inside[..., None], -normal, normal)
    cosi = np.where(inside, -cosi, cosi)
    eta = np.where(inside, eta_t / eta_i, eta_i / eta_t)
    k = 1.0 - eta * eta * (1.0 - cosi * cosi)
    out = incident * eta[..., None] + n * (eta * cosi - np.sqrt(np.maximum(k, 0.0)))[..., None]
    return np.where((k < 0.0)[..., None], np.array([1.0, 0.0, 0.0]), out)


class RayTracer:
    """
    Whitted-style ray tracer over a `Scene`, vectorized over ray batches.

    Used as the data source of the light-field stacks: `render_pinhole` gives
    a camera view through the screen, `render_projector` the image a
    projector behind the screen must emit.
    """

    def __init__(self, scene: Scene, max_ray_depth: int = DEFAULT_MAX_RAY_DEPTH) -> None:
        if max_ray_depth < 0:
            raise ValueError("max_ray_depth must be >= 0")
        self.scene = scene
        self.max_ray_depth = int(max_ray_depth)
        self._background = np.asarray(scene.background, dtype=np.float64)

    def scene_intersect(self, orig: np.ndarray, direction: np.ndarray) -> _Hits:
        n = orig.shape[0]
        dist = np.full((n,), np.finfo(np.float64).max)
        normal = np.zeros((n, 3))
        diffuse = np.zeros((n, 3))
        albedo = np.tile(np.array([1.0, 0.0, 0.0, 0.0]), (n, 1))
        shininess = np.zeros((n,))
        refr = np.ones((n,))

        for sphere in self.scene.spheres:
            center = np.asarray(sphere.center, dtype=np.float64)
            r2 = float(sphere.radius) ** 2
            L = center - orig
            tca = _dot(L, direction)
            d2 = _dot(L, L) - tca * tca
            thc = np.sqrt(np.maximum(r2 - d2, 0.0))
            t0 = tca - thc
            t0 = np.where(t0 < 0.0, tca + thc, t0)
            closer = (d2 <= r2) & (t0 >= 0.0) & (t0 < dist)
            if not np.any(closer):
                continue
            dist = np.where(closer, t0, dist)
            hit = orig + direction * t0[:, None]
            normal = np.where(closer[:, None], normalize(hit - center), normal)
            m = sphere.material
            diffuse = np.where(closer[:, None], np.asarray(m.diffuse_color), diffuse)
            albedo = np.where(closer[:, None], np.asarray(m.albedo), albedo)
            shininess = np.where(closer, m.specular_exponent, shininess)
            refr = np.where(closer, m.refractive_index, refr)

        board = self.scene.checkerboard
        if board is not None:
            dy = direction[:, 1]
            usable = np.abs(dy) > 1e-3
            with np.errstate(divide="ignore", invalid="ignore"):
                d = np.where(usable, -(orig[:, 1] - board.height) / np.where(usable, dy, 1.0), -1.0)
            pt = orig + direction * d[:, None]
            on_board = (
                usable
                & (d > 0.0)
                & (np.abs(pt[:, 0]) < board.half_extent)
                & (np.abs(pt[:, 2]) < board.half_extent)
                & (d < dist)
            )
            if np.any(on_board):
                dist = np.where(on_board, d, dist)
                normal = np.where(on_board[:, None], np.array([0.0, 1.0, 0.0]), normal)
                tiles = np.trunc(pt[:, 0] / board.tile_size + 1000.0).astype(np.int64) + np.trunc(
                    pt[:, 2] / board.tile_size
                ).astype(np.int64)
                color = np.where(
                    ((tiles & 1) == 1)[:, None], np.asarray(board.color_a), np.asarray(board.color_b)
                )
                diffuse = np.where(on_board[:, None], color, diffuse)
                albedo = np.where(on_board[:, None], np.array([1.0, 0.0, 0.0, 0.0]), albedo)
                shininess = np.where(on_board, 0.0, shininess)
                refr = np.where(on_board, 1.0, refr)

        mask = dist < _MAX_DISTANCE
        point = orig + direction * np.where(mask, dist, 0.0)[:, None]
        return _Hits(mask, dist, point, normal, diffuse, albedo, shininess, refr)

    def _offset(self, point: np.ndarray, normal: np.ndarray, direction: np.ndarray) -> np.ndarray:
        below = (_dot(direction, normal) < 0.0)[:, None]
        return np.where(below, point - normal * SCENE_EPSILON, point + normal * SCENE_EPSILON)

    def cast_rays(self, orig: np.ndarray, direction: np.ndarray, depth: int = 0) -> np.ndarray:
        """Colors (N,3) seen along N rays with unit directions."""
        orig = np.asarray(orig, dtype=np.float64).reshape(-1, 3)
        direction = np.asarray(direction, dtype=np.float64).reshape(-1, 3)
        colors = np.tile(self._background, (orig.shape[0], 1))
        if depth > self.max_ray_depth or orig.shape[0] == 0:
            return colors

        hits = self.scene_intersect(orig, direction)
        idx = np.nonzero(hits.mask)[0]
        if idx.size == 0:
            return colors

        d = direction[idx]
        p = hits.point[idx]
        nrm = hits.normal[idx]
        albedo = hits.albedo[idx]

        reflect_color = np.zeros((idx.size, 3))
        need = albedo[:, 2] != 0.0
        if np.any(need):
            rdir = normalize(reflect(d[need], nrm[need]))
            reflect_color[need] = self.cast_rays(self._offset(p[need], nrm[need], rdir), rdir, depth + 1)

        refract_color = np.zeros((idx.size, 3))
        need = albedo[:, 3] != 0.0
        if np.any(need):
            tdir = normalize(refract(d[need], nrm[need], hits.refractive_index[idx][need]))
            refract_color[need] = self.cast_rays(self._offset(p[need], nrm[need], tdir), tdir, depth + 1)

        diffuse_intensity = np.zeros((idx.size,))
        specular_intensity = np.zeros((idx.size,))
        spec_exp = hits.specular_exponent[idx]
        for light in self.scene.lights:
            to_light = np.asarray(light.position, dtype=np.float64) - p
            light_distance = np.linalg.norm(to_light, axis=-1)
            light_dir = normalize(to_light)
            shadow_orig = self._offset(p, nrm, light_dir)
            shadow = self.scene_intersect(shadow_orig, light_dir)
            in_shadow = shadow.mask & (np.linalg.norm(shadow.point - shadow_orig, axis=-1) < light_distance)
            lit = ~in_shadow
            diffuse_intensity += np.where(lit, light.intensity * np.maximum(0.0, _dot(light_dir, nrm)), 0.0)
            highlight = np.maximum(0.0, _dot(-reflect(-light_dir, nrm), d))
            specular_intensity += np.where(lit, np.power(highlight, spec_exp) * light.intensity, 0.0)

        colors[idx] = (
            hits.diffuse[idx] * (diffuse_intensity * albedo[:, 0])[:, None]
            + (specular_intensity * albedo[:, 1])[:, None]
            + reflect_color * albedo[:, 2:3]
            + refract_color * albedo[:, 3:4]
        )
        return colors

    def render_pinhole(
        self, width: int, height: int, position: np.ndarray, screen_size: tuple[float, float]
    ) -> np.ndarray:
        """(H,W,3) view from a pinhole at `position` through the screen window (row 0 on top)."""
        screen = screen_grid(width, height, screen_size, flip_y=True).reshape(-1, 3)
        origin = np.broadcast_to(np.asarray(position, dtype=np.float64).reshape(1, 3), screen.shape)
        direction = normalize(screen - origin)
        return self.cast_rays(origin, direction).reshape(height, width, 3).astype(np.float32)

    def render_projector(
        self,
        width: int,
        height: int,
        position: np.ndarray,
        observer_distance: float,
        screen_size: tuple[float, float],
    ) -> np.ndarray:
        """
        (H,W,3) image a projector at `position` (behind the screen) must emit:
        each pixel is the scene seen along the projector ray, traced from the
        observer plane towards the screen.
        """
        screen = screen_grid(width, height, screen_size, flip_y=True).reshape(-1, 3)
        origin = projector_ray_origins(screen, np.asarray(position, dtype=np.float64), observer_distance)
        direction = normalize(screen - origin)
        return self.cast_rays(origin, direction).reshape(height, width, 3).astype(np.float32)

    def render_camera_stack(self, model: CameraArrayModel) -> LayeredImage:
        out = LayeredImage(model.image_size_x, model.image_size_y, model.num_cameras)
        for camera_id in range(model.num_views):
            pos = model.position(camera_id)
            logger.info("Rendering view %d/%d", camera_id + 1, model.num_cameras)
            out.set_layer(camera_id, self.render_pinhole(model.image_size_x, model.image_size_y, pos, model.screen_size))
        return out

    def render_projector_stack(self, model: ProjectorArrayModel) -> LayeredImage:
        out = LayeredImage(model.image_size_x, model.image_size_y, model.num_projectors)
        for projector_id in range(model.num_views):
            pos = model.position(projector_id)
            logger.info("Rendering projector image %d/%d", projector_id + 1, model.num_projectors)
            out.set_layer(
                projector_id,
                self.render_projector(
                    model.image_size_x, model.image_size_y, pos, model.observer_distance, model.screen_size
                ),
            )
        return out
