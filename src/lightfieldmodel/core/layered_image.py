from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from lightfieldmodel.core.image_io import load_rgb_f32, save_rgb_f32

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = "npy"


class LayeredImageError(ValueError):
    pass


def clamped_at(image: np.ndarray, x: int, y: int) -> np.ndarray:
    """Color of an (H,W,3) layer at (x,y), coordinates clamped to the image."""
    h, w = image.shape[:2]
    return image[min(max(int(y), 0), h - 1), min(max(int(x), 0), w - 1)]


def layer_filename(layer_id: int, extension: str = DEFAULT_EXTENSION) -> str:
    return f"{int(layer_id):04d}.{extension.lstrip('.')}"


class LayeredImage:
    """
    Ordered stack of same-sized RGB float layers, one per view or projector.

    Data is held as a float32 array shaped (depth, height, width, 3). Layer and
    pixel accessors clamp out-of-range indices instead of failing.
    """

    def __init__(self, width: int = 0, height: int = 0, depth: int = 0) -> None:
        self._data = np.zeros((0, 0, 0, 3), dtype=np.float32)
        self.resize(width, height, depth)

    @classmethod
    def from_array(cls, data: np.ndarray) -> "LayeredImage":
        arr = np.asarray(data, dtype=np.float32)
        if arr.ndim != 4 or arr.shape[3] != 3:
            raise LayeredImageError(f"layered image data must be (D,H,W,3), got {arr.shape}")
        out = cls()
        out._data = arr.copy()
        return out

    @property
    def width(self) -> int:
        return int(self._data.shape[2])

    @property
    def height(self) -> int:
        return int(self._data.shape[1])

    @property
    def depth(self) -> int:
        return int(self._data.shape[0])

    @property
    def data(self) -> np.ndarray:
        return self._data

    def __len__(self) -> int:
        return self.depth

    def resize(self, width: int, height: int, depth: int) -> None:
        """Reallocate as zeros. Ignored unless every dimension is > 0."""
        if width > 0 and height > 0 and depth > 0:
            self._data = np.zeros((int(depth), int(height), int(width), 3), dtype=np.float32)

    def clear(self) -> None:
        self._data = np.zeros((0, 0, 0, 3), dtype=np.float32)

    def _layer_index(self, z: int) -> int:
        if self.depth == 0:
            raise IndexError("layered image is empty")
        return min(max(int(z), 0), self.depth - 1)

    def layer(self, z: int) -> np.ndarray:
        """(H,W,3) view of layer z (clamped); writes go through to the stack."""
        return self._data[self._layer_index(z)]

    def set_layer(self, z: int, image: np.ndarray) -> None:
        img = np.asarray(image, dtype=np.float32)
        if img.shape != (self.height, self.width, 3):
            raise LayeredImageError(f"layer must be {(self.height, self.width, 3)}, got {img.shape}")
        self._data[self._layer_index(z)] = img

    def at(self, x: int, y: int, z: int) -> np.ndarray:
        return clamped_at(self.layer(z), x, y)

    def load(self, directory: str | Path, num_layers: int, extension: str = DEFAULT_EXTENSION) -> None:
        """
        Load `num_layers` files 0000.<ext>, 0001.<ext>, ... from `directory`.

        All layers must decode to the same size. On any failure the stack is
        left empty and the error is re-raised.
        """
        directory = Path(directory)
        try:
            if num_layers <= 0:
                raise LayeredImageError("num_layers must be > 0")
            layers: list[np.ndarray] = []
            for layer_id in range(int(num_layers)):
                path = directory / layer_filename(layer_id, extension)
                img = load_rgb_f32(path)
                if layers and img.shape != layers[0].shape:
                    raise LayeredImageError(
                        f"{path} size {img.shape[1::-1]} != {layers[0].shape[1::-1]} of the first layer"
                    )
                layers.append(img)
        except Exception:
            self.clear()
            raise
        self._data = np.stack(layers, axis=0).astype(np.float32)
        logger.debug("Loaded %d layers from %s", self.depth, directory)

    def save(self, directory: str | Path, extension: str = DEFAULT_EXTENSION) -> list[Path]:
        directory = Path(directory)
        if self.depth == 0:
            raise LayeredImageError("cannot save an empty layered image")
        directory.mkdir(parents=True, exist_ok=True)
        paths: list[Path] = []
        for layer_id in range(self.depth):
            path = directory / layer_filename(layer_id, extension)
            save_rgb_f32(path, self._data[layer_id])
            paths.append(path)
        logger.debug("Saved %d layers to %s", self.depth, directory)
        return paths
