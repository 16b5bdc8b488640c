from __future__ import annotations

import argparse
import logging
from dataclasses import asdict
from pathlib import Path

from lightfieldmodel.api.light_field_interpolation import LightFieldInterpolation
from lightfieldmodel.api.model_io import (
    load_camera_array_model,
    load_projector_array_model,
    save_camera_array_model,
    save_projector_array_model,
)
from lightfieldmodel.config import DEFAULT_CONFIG, InterpolationConfig, load_interpolation_config, parse_interpolation_config
from lightfieldmodel.core.image_io import SUPPORTED_EXTENSIONS
from lightfieldmodel.core.layered_image import DEFAULT_EXTENSION, LayeredImage
from lightfieldmodel.logging_config import setup_logging
from lightfieldmodel.sim.raytracer import DEFAULT_MAX_RAY_DEPTH, RayTracer
from lightfieldmodel.sim.sample_models import generate_sample_camera_model, generate_sample_projector_model
from lightfieldmodel.sim.scene import default_scene

logger = logging.getLogger(__name__)

_EXTENSIONS = [e.lstrip(".") for e in SUPPORTED_EXTENSIONS]


def _add_models(p: argparse.ArgumentParser) -> None:
    p.add_argument("--projector-model", type=Path, required=True, help="Projector array model (JSON).")
    p.add_argument("--camera-model", type=Path, required=True, help="Camera array model (JSON).")
    p.add_argument("--extension", type=str, default=DEFAULT_EXTENSION, choices=_EXTENSIONS, help="Layer file format.")


def _add_config(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", type=Path, default=None, help="Interpolation config (JSON).")
    p.add_argument("--gaussian-half-decay", type=float, default=None)
    p.add_argument("--contributors-half-window", type=int, default=None)
    p.add_argument("--contribution-epsilon", type=float, default=None)
    p.add_argument("--max-search-iterations", type=int, default=None)
    p.add_argument(
        "--validate-view-order",
        action="store_true",
        help="Reject view arrays that are not sorted by x (instead of silently degrading).",
    )


def _config_from_args(args: argparse.Namespace) -> InterpolationConfig:
    config = load_interpolation_config(args.config) if args.config is not None else DEFAULT_CONFIG
    data = asdict(config)
    for key in ("gaussian_half_decay", "contributors_half_window", "contribution_epsilon", "max_search_iterations"):
        value = getattr(args, key)
        if value is not None:
            data[key] = value
    if args.validate_view_order:
        data["validate_view_order"] = True
    return parse_interpolation_config(data)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="lightfieldmodel")
    parser.add_argument("--verbose", action="store_true", help="Debug logging.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    gen = sub.add_parser("generate-sample-models", help="Write the sample projector and camera array models.")
    gen.add_argument("--out-dir", type=Path, required=True)
    gen.add_argument("--num-projectors", type=int, default=21)
    gen.add_argument("--num-cameras", type=int, default=21)
    gen.add_argument("--width", type=int, default=1000)
    gen.add_argument("--height", type=int, default=600)
    gen.add_argument("--screen-width-mm", type=float, default=1000.0)
    gen.add_argument("--screen-height-mm", type=float, default=600.0)

    render = sub.add_parser("render", help="Ray trace the demo scene for both arrays.")
    _add_models(render)
    render.add_argument("--out", type=Path, required=True)
    render.add_argument("--max-ray-depth", type=int, default=DEFAULT_MAX_RAY_DEPTH)

    conv = sub.add_parser("convert", help="Resample a light field between the camera and projector arrays.")
    _add_models(conv)
    _add_config(conv)
    conv.add_argument(
        "--direction",
        type=str,
        required=True,
        choices=["views-to-projectors", "projectors-to-views"],
    )
    conv.add_argument("--input", type=Path, required=True, help="Directory of source layers.")
    conv.add_argument("--out", type=Path, required=True, help="Directory for the converted layers.")

    sim = sub.add_parser("simulate", help="Simulate the projector display as perceived at each camera position.")
    _add_models(sim)
    _add_config(sim)
    sim.add_argument("--input", type=Path, required=True, help="Directory of projector layers.")
    sim.add_argument("--out", type=Path, required=True)
    sim.add_argument("--no-normalize", action="store_true", help="Keep the raw weighted sum (shows coverage gaps).")

    args = parser.parse_args(argv)
    setup_logging(debug=args.verbose)

    if args.cmd == "generate-sample-models":
        image_size = (args.width, args.height)
        screen_size = (args.screen_width_mm, args.screen_height_mm)
        out_dir: Path = args.out_dir
        p = save_projector_array_model(
            out_dir / "sample_projector_model.json",
            generate_sample_projector_model(args.num_projectors, image_size=image_size, screen_size=screen_size),
        )
        c = save_camera_array_model(
            out_dir / "sample_camera_model.json",
            generate_sample_camera_model(args.num_cameras, image_size=image_size, screen_size=screen_size),
        )
        print(f"Wrote {p}")
        print(f"Wrote {c}")
        return 0

    projector_model = load_projector_array_model(args.projector_model)
    camera_model = load_camera_array_model(args.camera_model)

    if args.cmd == "render":
        tracer = RayTracer(default_scene(), max_ray_depth=args.max_ray_depth)
        multiview_dir = args.out / "rt_multiview"
        projector_dir = args.out / "rt_projectors"
        tracer.render_camera_stack(camera_model).save(multiview_dir, args.extension)
        tracer.render_projector_stack(projector_model).save(projector_dir, args.extension)
        print(f"Wrote {multiview_dir}")
        print(f"Wrote {projector_dir}")
        return 0

    interp = LightFieldInterpolation(projector_model, camera_model, _config_from_args(args))

    if args.cmd == "convert":
        source = LayeredImage()
        if args.direction == "views-to-projectors":
            source.load(args.input, camera_model.num_cameras, args.extension)
            result = interp.convert_views_to_projectors(source)
        else:
            source.load(args.input, projector_model.num_projectors, args.extension)
            result = interp.convert_projectors_to_views(source)
        result.save(args.out, args.extension)
        print(f"Wrote {args.out}")
        return 0

    if args.cmd == "simulate":
        source = LayeredImage()
        source.load(args.input, projector_model.num_projectors, args.extension)
        interp.visualize_projectors_to_views(source, normalize=not args.no_normalize).save(args.out, args.extension)
        print(f"Wrote {args.out}")
        return 0

    raise AssertionError(f"Unhandled cmd: {args.cmd}")
