"""Learned linear subspace artifact shared by generators, projectors and persistence."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

import numpy as np
import numpy.typing as npt

from subspacekit.linalg import DenseMatrix


FloatArray = npt.NDArray[np.float64]


class SubspaceKind(IntEnum):
    """Generator that produced a subspace; the integer is the persisted tag."""

    PCA = 0
    LDA = 1


@dataclass(frozen=True, slots=True, eq=False)
class Subspace:
    """Basis of ``subspace_dim`` axes in an ``original_dim``-dimensional space.

    Row ``i`` of ``axes`` is the i-th basis vector and ``criterion[i]`` its
    relevance score (eigenvalue for PCA, generalized eigenvalue for LDA). Axes
    are not assumed orthogonal.
    """

    kind: SubspaceKind
    center: FloatArray
    axes: FloatArray
    criterion: FloatArray

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", SubspaceKind(self.kind))
        center = np.array(self.center, dtype=np.float64, copy=True)
        axes = np.array(self.axes, dtype=np.float64, copy=True)
        criterion = np.array(self.criterion, dtype=np.float64, copy=True)
        if center.ndim != 1:
            raise ValueError("center must be a 1D array")
        if axes.ndim != 2:
            raise ValueError("axes must be a 2D array [subspace_dim, original_dim]")
        if criterion.ndim != 1:
            raise ValueError("criterion must be a 1D array")
        if axes.shape[1] != center.shape[0]:
            raise ValueError("axes width must match center length")
        if criterion.shape[0] != axes.shape[0]:
            raise ValueError("criterion length must match number of axes")
        object.__setattr__(self, "center", center)
        object.__setattr__(self, "axes", axes)
        object.__setattr__(self, "criterion", criterion)

    @property
    def subspace_dim(self) -> int:
        return int(self.axes.shape[0])

    @property
    def original_dim(self) -> int:
        return int(self.axes.shape[1])

    def normalize(self) -> Subspace:
        """Return a copy whose axes have unit Euclidean norm; zero rows stay zero."""
        norms = np.linalg.norm(self.axes, axis=1)
        safe = np.where(norms > 0.0, norms, 1.0)
        return Subspace(self.kind, self.center, self.axes / safe[:, None], self.criterion)

    def reorder_abs_descending(self) -> Subspace:
        """Sort axes by descending ``|criterion|``; ties keep their current order."""
        return self._reordered(np.argsort(-np.abs(self.criterion), kind="stable"))

    def reorder_descending(self) -> Subspace:
        """Sort axes by descending signed criterion; ties keep their current order."""
        return self._reordered(np.argsort(-self.criterion, kind="stable"))

    def truncate(self, dim: int) -> Subspace:
        """Keep the ``dim`` leading axes."""
        if dim < 0 or dim > self.subspace_dim:
            raise ValueError(f"dim must be in [0, {self.subspace_dim}], got {dim}")
        return Subspace(self.kind, self.center, self.axes[:dim], self.criterion[:dim])

    def to_matrix(self) -> DenseMatrix:
        return DenseMatrix(self.axes)

    def _reordered(self, order: npt.NDArray[np.intp]) -> Subspace:
        return Subspace(self.kind, self.center, self.axes[order], self.criterion[order])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Subspace):
            return NotImplemented
        return (
            self.kind == other.kind
            and np.array_equal(self.center, other.center)
            and np.array_equal(self.axes, other.axes)
            and np.array_equal(self.criterion, other.criterion)
        )

    __hash__ = None  # type: ignore[assignment]
