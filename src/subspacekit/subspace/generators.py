"""PCA and LDA subspace generators.

PCA uses the Gram-matrix ("small sample") trick when samples have more
dimensions than there are samples. LDA solves ``B x = lambda W x`` either
directly in the original space or, when the within-class scatter would be
singular there, after a PCA reduction to ``N - Nc`` (or the configured number
of) dimensions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import numpy as np

from subspacekit.data.contracts import SampleSet
from subspacekit.errors import EmptyInputError
from subspacekit.linalg import EigenStrategy, eigen, generalized_eigen
from subspacekit.subspace.contracts import Subspace, SubspaceKind
from subspacekit.subspace.projector import SubspaceProjector


logger = logging.getLogger(__name__)


class SubspaceGenerator(Protocol):
    """Anything that learns a :class:`Subspace` from a labeled sample set."""

    def generate(self, samples: SampleSet) -> Subspace: ...


class PcaSubspaceGenerator:
    """Principal component analysis; ``criterion`` holds covariance eigenvalues."""

    def generate(self, samples: SampleSet) -> Subspace:
        if len(samples) == 0:
            raise EmptyInputError("PCA needs at least one sample")

        features = samples.feature_matrix()
        count, dim = features.shape
        mean = np.mean(features, axis=0)
        centered = features - mean

        if dim > count:
            logger.debug("Computing %dx%d Gram matrix (dim %d > %d samples)", count, count, dim, count)
            gram = (centered @ centered.T) / count
            logger.debug("Computing eigenvectors")
            decomposition = eigen(gram)
            values = decomposition.values.copy()
            axes = decomposition.vectors.data @ centered
            # Centered data has rank < count; null Gram eigenpairs map to rounding noise.
            tolerance = np.finfo(np.float64).eps * float(np.max(np.abs(values))) * count
            null = np.abs(values) <= tolerance
            logger.debug("Zeroing %d rank-deficient axes", int(np.count_nonzero(null)))
            axes[null] = 0.0
            values[null] = 0.0
        else:
            logger.debug("Computing %dx%d covariance matrix", dim, dim)
            covariance = (centered.T @ centered) / count
            logger.debug("Computing eigenvectors")
            decomposition = eigen(covariance)
            values = decomposition.values
            axes = decomposition.vectors.data

        subspace = Subspace(SubspaceKind.PCA, mean, axes, values)
        return subspace.normalize().reorder_abs_descending()


@dataclass(frozen=True, slots=True)
class LdaConfig:
    """``pca_reduction_dim == 0`` selects the direct path when possible, else ``N - Nc``."""

    pca_reduction_dim: int = 0

    def __post_init__(self) -> None:
        if self.pca_reduction_dim < 0:
            raise ValueError("pca_reduction_dim must be >= 0")


class LdaSubspaceGenerator:
    """Fisher linear discriminant analysis; ``criterion`` holds generalized eigenvalues."""

    def __init__(self, config: LdaConfig | None = None) -> None:
        self.config = config or LdaConfig()

    def generate(self, samples: SampleSet) -> Subspace:
        if len(samples) == 0:
            raise EmptyInputError("LDA needs at least one sample")

        count = len(samples)
        dim = samples.dim
        classes = samples.number_of_classes()

        if self.config.pca_reduction_dim <= 0 and dim <= count - classes:
            subspace = self._generate_direct(samples)
        else:
            subspace = self._generate_two_stage(samples, count - classes)

        return subspace.reorder_abs_descending().normalize()

    def _generate_direct(self, samples: SampleSet) -> Subspace:
        logger.debug("Computing between-class scatter matrix")
        between = samples.between_class_scatter()
        logger.debug("Computing within-class scatter matrix")
        within = samples.within_class_scatter()
        logger.debug("Computing generalized eigenvectors")
        decomposition = generalized_eigen(between, within, EigenStrategy.CHOLESKY)
        return Subspace(SubspaceKind.LDA, samples.mean(), decomposition.vectors.data, decomposition.values)

    def _generate_two_stage(self, samples: SampleSet, default_dim: int) -> Subspace:
        reduction_dim = self.config.pca_reduction_dim or default_dim
        if reduction_dim <= 0:
            raise ValueError(
                f"cannot reduce to {reduction_dim} dimensions: LDA needs more samples "
                "than classes"
            )

        logger.debug("Computing PCA subspace")
        pca = PcaSubspaceGenerator().generate(samples)
        reduction_dim = min(reduction_dim, pca.subspace_dim)

        logger.debug("Projecting samples into %d-dimensional PCA subspace", reduction_dim)
        reduced = SubspaceProjector(pca).project_set(samples, reduction_dim)

        logger.debug("Computing between-class scatter matrix")
        between = reduced.between_class_scatter()
        logger.debug("Computing within-class scatter matrix")
        within = reduced.within_class_scatter()
        logger.debug("Computing generalized eigenvectors")
        decomposition = generalized_eigen(between, within, EigenStrategy.CHOLESKY)

        lda = Subspace(
            SubspaceKind.LDA,
            np.zeros((reduction_dim,), dtype=np.float64),
            decomposition.vectors.data,
            decomposition.values,
        ).reorder_abs_descending()

        logger.debug("Computing final subspace")
        # Center stays the PCA mean; axes are LDA directions expressed in the original space.
        axes = lda.axes @ pca.axes[:reduction_dim]
        return Subspace(SubspaceKind.LDA, pca.center, axes, lda.criterion)
