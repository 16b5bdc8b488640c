from __future__ import annotations

from pathlib import Path

import numpy as np
import OpenEXR
from PIL import Image

LOW_PRECISION_EXTENSIONS = (".ppm", ".png")
FULL_PRECISION_EXTENSIONS = (".npy", ".exr")
SUPPORTED_EXTENSIONS = LOW_PRECISION_EXTENSIONS + FULL_PRECISION_EXTENSIONS


def _extension(path: Path) -> str:
    ext = path.suffix.lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise ValueError(f"unknown image format: {path.name} (expected one of {SUPPORTED_EXTENSIONS})")
    return ext


def _check_rgb(arr: np.ndarray, what: str) -> None:
    if arr.ndim != 3 or arr.shape[2] != 3:
        raise ValueError(f"{what} must hold an (H,W,3) array, got {arr.shape}")


def _load_exr(p: Path) -> np.ndarray:
    with OpenEXR.File(str(p)) as f:
        channels = f.channels()
        if "RGB" in channels:
            arr = channels["RGB"].pixels
        elif "RGBA" in channels:
            arr = channels["RGBA"].pixels[..., :3]
        elif all(c in channels for c in ("R", "G", "B")):
            arr = np.stack([channels[c].pixels for c in ("R", "G", "B")], axis=-1)
        else:
            raise ValueError(f"{p} has no RGB channels (found {sorted(channels)})")
    return np.asarray(arr, dtype=np.float32)


def _save_exr(p: Path, img: np.ndarray) -> None:
    header = {"compression": OpenEXR.ZIP_COMPRESSION, "type": OpenEXR.scanlineimage}
    with OpenEXR.File(header, {"RGB": np.ascontiguousarray(img, dtype=np.float32)}) as f:
        f.write(str(p))


def load_rgb_f32(path: str | Path) -> np.ndarray:
    """
    Load a color image as an (H,W,3) float32 array.

    8-bit formats are decoded through Pillow and scaled to [0,1]; `.npy` and
    `.exr` layers are read back at full float precision.
    """
    p = Path(path)
    ext = _extension(p)
    if not p.exists():
        raise FileNotFoundError(f"Missing {p}")

    if ext == ".npy":
        arr = np.load(p, allow_pickle=False)
        _check_rgb(arr, str(p))
        return np.asarray(arr, dtype=np.float32)
    if ext == ".exr":
        arr = _load_exr(p)
        _check_rgb(arr, str(p))
        return arr

    with Image.open(p) as im:
        im = im.convert("RGB")
        arr = np.asarray(im, dtype=np.float32)
    return arr / 255.0


def save_rgb_f32(path: str | Path, image: np.ndarray) -> None:
    """
    Save an (H,W,3) float image. Values are clamped to [0,1] for the 8-bit
    formats and written untouched to `.npy` and `.exr` (32-bit float).
    """
    p = Path(path)
    ext = _extension(p)
    img = np.asarray(image, dtype=np.float32)
    _check_rgb(img, "image")

    if ext == ".npy":
        np.save(p, img, allow_pickle=False)
        return
    if ext == ".exr":
        _save_exr(p, img)
        return

    u8 = (255.0 * np.clip(img, 0.0, 1.0)).astype(np.uint8)
    Image.fromarray(u8).save(p)
