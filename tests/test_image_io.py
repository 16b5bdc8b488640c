from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from lightfieldmodel.core.image_io import load_rgb_f32, save_rgb_f32


def _gradient(h: int = 6, w: int = 8) -> np.ndarray:
    yy, xx = np.meshgrid(np.arange(h), np.arange(w), indexing="ij")
    return np.stack([xx / (w - 1), yy / (h - 1), np.full_like(xx, 0.5, dtype=np.float64)], axis=-1).astype(np.float32)


def test_npy_keeps_full_precision_and_out_of_range_values(tmp_path: Path) -> None:
    img = _gradient() * 3.0 - 1.0
    save_rgb_f32(tmp_path / "a.npy", img)
    back = load_rgb_f32(tmp_path / "a.npy")
    assert back.dtype == np.float32
    np.testing.assert_array_equal(back, img)


def test_ppm_and_png_are_clamped_to_8bit(tmp_path: Path) -> None:
    img = _gradient()
    img[0, 0] = [-1.0, 2.0, 0.5]
    for name in ("a.ppm", "a.png"):
        save_rgb_f32(tmp_path / name, img)
        with Image.open(tmp_path / name) as im:
            assert im.size == (8, 6)
            assert im.mode == "RGB"
        back = load_rgb_f32(tmp_path / name)
        assert back.shape == (6, 8, 3)
        assert back.dtype == np.float32
        np.testing.assert_allclose(back[0, 0], [0.0, 1.0, 127.0 / 255.0], atol=1e-6)
        assert np.max(np.abs(back - np.clip(img, 0.0, 1.0))) <= 1.0 / 255.0 + 1e-6


def test_unknown_extension_and_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="unknown image format"):
        save_rgb_f32(tmp_path / "a.tiff", _gradient())
    with pytest.raises(ValueError):
        load_rgb_f32(tmp_path / "a.bmp")
    with pytest.raises(FileNotFoundError):
        load_rgb_f32(tmp_path / "missing.npy")


def test_exr_keeps_float_values_outside_unit_range(tmp_path: Path) -> None:
    img = _gradient() * 4.0 - 1.5
    img[2, 3] = [12.25, -0.125, 1e-3]
    save_rgb_f32(tmp_path / "0000.exr", img)
    back = load_rgb_f32(tmp_path / "0000.exr")
    assert back.shape == (6, 8, 3)
    assert back.dtype == np.float32
    np.testing.assert_array_equal(back, img)


def test_exr_with_separate_channels_is_loaded(tmp_path: Path) -> None:
    import OpenEXR

    img = _gradient() * 2.0
    header = {"compression": OpenEXR.ZIP_COMPRESSION, "type": OpenEXR.scanlineimage}
    channels = {c: np.ascontiguousarray(img[..., i]) for i, c in enumerate(("R", "G", "B"))}
    with OpenEXR.File(header, channels) as f:
        f.write(str(tmp_path / "layer.exr"))
    np.testing.assert_array_equal(load_rgb_f32(tmp_path / "layer.exr"), img)
