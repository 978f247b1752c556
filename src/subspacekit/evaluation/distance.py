"""Distance measures between feature vectors.

Every function compares the first ``dim`` coordinates (all of them when
``dim == 0``) and broadcasts over leading axes, so a single probe can be
compared against a stacked gallery in one call.
"""

from __future__ import annotations

from enum import StrEnum

import numpy as np
import numpy.typing as npt

from subspacekit.errors import ShapeMismatchError


FloatArray = npt.NDArray[np.float64]


class DistanceMetric(StrEnum):
    """Names accepted on the command line."""

    EUCLIDEAN = "euclid"
    COSINE = "nc"
    HAMMING = "hamming"


def euclidean_distance(u: npt.ArrayLike, v: npt.ArrayLike, dim: int = 0) -> FloatArray:
    a, b = _leading(u, v, dim)
    return np.sqrt(np.sum((b - a) ** 2, axis=-1))


def cosine_distance(u: npt.ArrayLike, v: npt.ArrayLike, dim: int = 0) -> FloatArray:
    """``1 - cos(u, v)`` in ``[0, 2]``; a zero vector is at distance 1 from everything."""
    a, b = _leading(u, v, dim)
    norms = np.linalg.norm(a, axis=-1) * np.linalg.norm(b, axis=-1)
    dots = np.sum(a * b, axis=-1)
    cosine = np.divide(dots, norms, out=np.zeros(np.broadcast(dots, norms).shape), where=norms > 0.0)
    return 1.0 - np.clip(cosine, -1.0, 1.0)


def hamming_distance(u: npt.ArrayLike, v: npt.ArrayLike, dim: int = 0) -> FloatArray:
    """Fraction of coordinates with strictly opposite, nonzero signs."""
    a, b = _leading(u, v, dim)
    count = a.shape[-1] if a.shape[-1] else 1
    opposite = np.sign(a) * np.sign(b) < 0
    return np.sum(opposite, axis=-1) / count


def distance(metric: DistanceMetric, u: npt.ArrayLike, v: npt.ArrayLike, dim: int = 0) -> FloatArray:
    metric = DistanceMetric(metric)
    if metric == DistanceMetric.EUCLIDEAN:
        return euclidean_distance(u, v, dim)
    if metric == DistanceMetric.COSINE:
        return cosine_distance(u, v, dim)
    return hamming_distance(u, v, dim)


def _leading(u: npt.ArrayLike, v: npt.ArrayLike, dim: int) -> tuple[FloatArray, FloatArray]:
    if dim < 0:
        raise ValueError("dim must be >= 0")
    a = np.asarray(u, dtype=np.float64)
    b = np.asarray(v, dtype=np.float64)
    if dim == 0:
        dim = a.shape[-1]
    if a.shape[-1] < dim or b.shape[-1] < dim:
        raise ShapeMismatchError(
            f"cannot compare {dim} coordinates of vectors with {a.shape[-1]} and {b.shape[-1]} values"
        )
    return a[..., :dim], b[..., :dim]
