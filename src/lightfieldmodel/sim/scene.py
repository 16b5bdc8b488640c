from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Material:
    refractive_index: float = 1.0
    # Weights of (diffuse, specular, reflected, refracted) light.
    albedo: tuple[float, float, float, float] = (1.0, 0.0, 0.0, 0.0)
    diffuse_color: tuple[float, float, float] = (0.0, 0.0, 0.0)
    specular_exponent: float = 0.0


@dataclass(frozen=True)
class Sphere:
    center: tuple[float, float, float]
    radius: float
    material: Material


@dataclass(frozen=True)
class Light:
    position: tuple[float, float, float]
    intensity: float


@dataclass(frozen=True)
class Checkerboard:
    """Horizontal tiled floor y = height, limited to |x|, |z| < half_extent."""

    height: float = -200.0
    half_extent: float = 1000.0
    tile_size: float = 200.0
    color_a: tuple[float, float, float] = (0.3, 0.3, 0.3)
    color_b: tuple[float, float, float] = (0.3, 0.2, 0.1)


@dataclass(frozen=True)
class Scene:
    spheres: tuple[Sphere, ...] = field(default_factory=tuple)
    lights: tuple[Light, ...] = field(default_factory=tuple)
    checkerboard: Checkerboard | None = None
    background: tuple[float, float, float] = (0.2, 0.7, 0.8)


IVORY = Material(1.0, (0.6, 0.3, 0.1, 0.0), (0.4, 0.4, 0.3), 50.0)
GLASS = Material(1.5, (0.0, 0.5, 0.1, 0.8), (0.6, 0.7, 0.8), 125.0)
RED_RUBBER = Material(1.0, (0.9, 0.1, 0.0, 0.0), (0.3, 0.1, 0.1), 10.0)
MIRROR = Material(1.0, (0.0, 10.0, 0.8, 0.0), (1.0, 1.0, 1.0), 1425.0)


def default_scene() -> Scene:
    """Four spheres around the screen plane over a checkerboard, three point lights (mm)."""
    return Scene(
        spheres=(
            Sphere((-180.0, -80.0, -40.0), 80.0, IVORY),
            Sphere((-100.0, -100.0, 120.0), 80.0, GLASS),
            Sphere((0.0, -60.0, -120.0), 120.0, RED_RUBBER),
            Sphere((300.0, 120.0, -200.0), 160.0, MIRROR),
        ),
        lights=(
            Light((-1000.0, 1000.0, 1000.0), 1.5),
            Light((1500.0, 2500.0, -1200.0), 1.8),
            Light((1500.0, 1000.0, 1500.0), 1.7),
        ),
        checkerboard=Checkerboard(),
    )
