from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from lightfieldmodel.display_meta import (
    CameraArrayModel,
    ModelValidationError,
    ProjectorArrayModel,
    camera_array_model_to_dict,
    parse_camera_array_model,
    parse_projector_array_model,
    projector_array_model_to_dict,
)


def _read_json(path: Path) -> Any:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ModelValidationError(f"{path} is not valid JSON: {e}") from e


def _write_json(path: Path, data: dict[str, Any]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=4) + "\n", encoding="utf-8")
    return path


def save_projector_array_model(path: Path, model: ProjectorArrayModel) -> Path:
    return _write_json(path, projector_array_model_to_dict(model))


def load_projector_array_model(path: Path) -> ProjectorArrayModel:
    data = _read_json(path)
    try:
        return parse_projector_array_model(data)
    except ModelValidationError as e:
        raise ModelValidationError(f"{path}: {e}") from e


def save_camera_array_model(path: Path, model: CameraArrayModel) -> Path:
    return _write_json(path, camera_array_model_to_dict(model))


def load_camera_array_model(path: Path) -> CameraArrayModel:
    data = _read_json(path)
    try:
        return parse_camera_array_model(data)
    except ModelValidationError as e:
        raise ModelValidationError(f"{path}: {e}") from e
