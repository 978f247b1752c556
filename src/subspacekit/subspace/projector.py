"""Projection of samples onto (a prefix of) a learned subspace basis."""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from subspacekit.data.contracts import Sample, SampleSet
from subspacekit.errors import ShapeMismatchError
from subspacekit.subspace.contracts import Subspace


FloatArray = npt.NDArray[np.float64]


class SubspaceProjector:
    """Maps samples to their coordinates along the leading subspace axes."""

    def __init__(self, subspace: Subspace) -> None:
        self.subspace = subspace

    def resolve_dim(self, dim: int = 0) -> int:
        """``0`` selects every axis; larger requests than available axes are rejected."""
        if dim < 0:
            raise ValueError("dim must be >= 0")
        if dim == 0:
            return self.subspace.subspace_dim
        if dim > self.subspace.subspace_dim:
            raise ValueError(
                f"dim {dim} exceeds the {self.subspace.subspace_dim} available subspace axes"
            )
        return dim

    def project_features(self, features: npt.ArrayLike, dim: int = 0) -> FloatArray:
        values = np.asarray(features, dtype=np.float64)
        if values.shape != (self.subspace.original_dim,):
            raise ShapeMismatchError(
                f"sample has shape {values.shape}, subspace expects ({self.subspace.original_dim},)"
            )
        count = self.resolve_dim(dim)
        return self.subspace.axes[:count] @ (values - self.subspace.center)

    def project(self, sample: Sample, dim: int = 0) -> Sample:
        """Project one sample; label and provenance are copied through."""
        return Sample(
            self.project_features(sample.features, dim),
            label=sample.label,
            source_id=sample.source_id,
        )

    def project_set(self, samples: SampleSet, dim: int = 0) -> SampleSet:
        return SampleSet(self.project(sample, dim) for sample in samples)

    def reconstruct(self, projected: Sample) -> Sample:
        """Map subspace coordinates back: ``center + y^T axes[:d]``."""
        count = projected.dim
        if count > self.subspace.subspace_dim:
            raise ShapeMismatchError(
                f"projected sample has {count} coordinates, subspace has "
                f"{self.subspace.subspace_dim} axes"
            )
        features = self.subspace.center + projected.features @ self.subspace.axes[:count]
        return Sample(features, label=projected.label, source_id=projected.source_id)
