"""Grayscale image decoding for image-shaped samples (BMP/PPM/PGM/PNG...)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image, UnidentifiedImageError


FloatArray = npt.NDArray[np.float64]


@dataclass(frozen=True, slots=True)
class GrayscaleImage:
    """Decoded image with ``pixels[y, x]`` gray levels in 0..255."""

    width: int
    height: int
    pixels: npt.NDArray[np.uint8]

    def pixel(self, x: int, y: int) -> int:
        return int(self.pixels[y, x])

    def as_features(self) -> FloatArray:
        """Row-major flattening: pixel ``(x, y)`` lands at ``y * width + x``."""
        return self.pixels.reshape(-1).astype(np.float64)


def load_grayscale_image(path: str | Path) -> GrayscaleImage:
    """Decode an image file and convert it to 8-bit grayscale."""
    image_path = Path(path)
    if not image_path.exists():
        raise FileNotFoundError(f"image file does not exist: {image_path}")
    try:
        with Image.open(image_path) as img:
            gray = img.convert("L")
            pixels = np.asarray(gray, dtype=np.uint8).copy()
    except UnidentifiedImageError as exc:
        raise ValueError(f"Error reading image {image_path}: unsupported format") from exc

    if pixels.ndim != 2 or pixels.shape[0] == 0 or pixels.shape[1] == 0:
        raise ValueError(f"Error reading image {image_path}: zero width or height")
    height, width = pixels.shape
    return GrayscaleImage(width=int(width), height=int(height), pixels=pixels)
