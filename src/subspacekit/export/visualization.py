"""Grayscale renderings of learned axes and local feature coverage."""

from __future__ import annotations

import logging
import math
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image

from subspacekit.errors import ShapeMismatchError
from subspacekit.subspace.contracts import Subspace
from subspacekit.subspace.local import LocalSubspace


FloatArray = npt.NDArray[np.float64]

logger = logging.getLogger(__name__)


def axis_image(axis: npt.ArrayLike, width: int, height: int) -> Image.Image:
    """Min-max scale one axis to 0..255 and lay it out row-major."""
    values = np.asarray(axis, dtype=np.float64)
    if values.shape[0] < width * height:
        raise ShapeMismatchError(
            f"axis has {values.shape[0]} values, {width}x{height} image needs {width * height}"
        )
    values = values[: width * height]
    low, high = float(np.min(values)), float(np.max(values))
    if high > low:
        scaled = np.clip((values - low) / (high - low) * 256.0, 0.0, 255.0)
    else:
        scaled = np.zeros_like(values)
    return Image.fromarray(scaled.astype(np.uint8).reshape(height, width))


def axes_to_images(
    subspace: Subspace,
    count: int,
    basename: str | Path,
    width: int = 0,
    height: int = 0,
    *,
    suffix: str = ".bmp",
) -> tuple[Path, ...]:
    """Write the ``count`` leading axes as ``<basename>000.bmp``, ``<basename>001.bmp``, ...

    Without an explicit geometry the image is assumed to be (close to) square.
    """
    if count < 0:
        raise ValueError("count must be >= 0")
    if width <= 0 or height <= 0:
        width = max(int(math.isqrt(subspace.original_dim)), 1)
        height = subspace.original_dim // width

    written: list[Path] = []
    for index in range(min(count, subspace.subspace_dim)):
        path = Path(f"{basename}{index:03d}{suffix}")
        axis_image(subspace.axes[index], width, height).save(path)
        written.append(path)
    logger.debug("Wrote %d axis images with prefix %s", len(written), basename)
    return tuple(written)


def local_feature_heatmap(
    local: LocalSubspace,
    width: int,
    height: int,
    count: int = 0,
) -> Image.Image:
    """How often each pixel is covered by the ``count`` leading features, scaled to 0..255."""
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be > 0")
    if count < 0:
        raise ValueError("count must be >= 0")
    size = width * height
    coverage = np.zeros((size,), dtype=np.int64)
    selected = local.features[:count] if count else local.features
    for feature in selected:
        indices = local.descriptors[feature.patch_index].pixel_indices
        indices = indices[(indices >= 0) & (indices < size)]
        np.add.at(coverage, indices, 1)

    peak = int(coverage.max()) if size else 0
    if peak > 0:
        coverage = (coverage * 255) // peak
    return Image.fromarray(coverage.astype(np.uint8).reshape(height, width))
