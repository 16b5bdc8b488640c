from __future__ import annotations

import json
from pathlib import Path

import pytest

from lightfieldmodel.api.model_io import (
    load_camera_array_model,
    load_projector_array_model,
    save_camera_array_model,
    save_projector_array_model,
)
from lightfieldmodel.display_meta import ModelValidationError
from lightfieldmodel.sim.sample_models import generate_sample_camera_model, generate_sample_projector_model


def test_projector_model_roundtrip_is_exact(tmp_path: Path) -> None:
    model = generate_sample_projector_model()
    path = save_projector_array_model(tmp_path / "models" / "projectors.json", model)
    assert load_projector_array_model(path) == model


def test_camera_model_roundtrip_is_exact(tmp_path: Path) -> None:
    model = generate_sample_camera_model(num_cameras=7, x_range=(-1.0 / 3.0, 5.0 / 7.0))
    path = save_camera_array_model(tmp_path / "cameras.json", model)
    assert load_camera_array_model(path) == model


def test_saved_json_uses_flat_field_names(tmp_path: Path) -> None:
    path = save_projector_array_model(tmp_path / "p.json", generate_sample_projector_model(num_projectors=3))
    data = json.loads(path.read_text(encoding="utf-8"))
    assert list(data) == [
        "name",
        "num_projectors",
        "image_size_x",
        "image_size_y",
        "observer_distance",
        "screen_size_x",
        "screen_size_y",
        "angular_scattering",
        "projectors_pos_x",
        "projectors_pos_y",
        "projectors_pos_z",
    ]
    assert data["projectors_pos_x"] == [-1000.0, 0.0, 1000.0]


def test_load_reports_missing_and_malformed_files(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_camera_array_model(tmp_path / "missing.json")

    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(ModelValidationError):
        load_projector_array_model(bad)

    incomplete = tmp_path / "incomplete.json"
    incomplete.write_text(json.dumps({"name": "x", "num_cameras": 1}), encoding="utf-8")
    with pytest.raises(ModelValidationError, match="incomplete.json"):
        load_camera_array_model(incomplete)
