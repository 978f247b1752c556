"""Standard and generalized symmetric eigen-decomposition.

Both entry points copy their operands into solver-owned buffers, so the
caller's matrices are never modified. Eigenvectors are returned as the rows of
a :class:`DenseMatrix` (row ``i`` pairs with ``values[i]``).

Generalized problems ``A x = lambda B x`` support two strategies:

* ``CHOLESKY`` factors ``B = U^T U`` and solves the reduced standard problem
  ``U^-T A U^-1 y = lambda y``; ``B`` must be symmetric positive definite.
* ``QZ`` runs the generalized Schur (QZ) algorithm on the pencil and keeps only
  the real parts of the eigenpairs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

import numpy as np
import numpy.typing as npt
import scipy.linalg

from subspacekit.errors import EigenFailure, EigenSolverError
from subspacekit.linalg.matrix import DenseMatrix


FloatArray = npt.NDArray[np.float64]

logger = logging.getLogger(__name__)


class EigenStrategy(StrEnum):
    """Solver used for the generalized symmetric eigenproblem."""

    CHOLESKY = "cholesky"
    QZ = "qz"


@dataclass(frozen=True, slots=True)
class EigenDecomposition:
    """Eigenvectors (one per row) and matching eigenvalues."""

    vectors: DenseMatrix
    values: FloatArray

    @property
    def size(self) -> int:
        return int(self.values.shape[0])


def eigen(matrix: DenseMatrix | npt.ArrayLike) -> EigenDecomposition:
    """Solve ``A v_i = e_i v_i`` for a symmetric matrix (ascending eigenvalues)."""
    a = _owned_square(matrix, name="matrix", strategy="symmetric")
    try:
        values, vectors = scipy.linalg.eigh(a, lower=False, overwrite_a=True)
    except np.linalg.LinAlgError as exc:
        raise _failure(EigenFailure.NON_CONVERGENCE, f"algorithm failed to converge ({exc})", "symmetric") from exc
    except ValueError as exc:
        raise _failure(EigenFailure.ILLEGAL_ARGUMENT, f"illegal argument ({exc})", "symmetric") from exc
    return EigenDecomposition(vectors=DenseMatrix(vectors.T), values=np.asarray(values, dtype=np.float64))


def generalized_eigen(
    a: DenseMatrix | npt.ArrayLike,
    b: DenseMatrix | npt.ArrayLike,
    strategy: EigenStrategy = EigenStrategy.CHOLESKY,
) -> EigenDecomposition:
    """Solve ``A x = lambda B x`` for symmetric ``A`` and ``B``."""
    strategy = EigenStrategy(strategy)
    left = _owned_square(a, name="A", strategy=strategy.value)
    right = _owned_square(b, name="B", strategy=strategy.value)
    if left.shape != right.shape:
        raise _failure(
            EigenFailure.ILLEGAL_ARGUMENT,
            f"A and B must have the same order, got {left.shape[0]} and {right.shape[0]}",
            strategy.value,
        )
    if strategy == EigenStrategy.CHOLESKY:
        return _cholesky_generalized(left, right)
    return _qz_generalized(left, right)


def _cholesky_generalized(a: FloatArray, b: FloatArray) -> EigenDecomposition:
    strategy = EigenStrategy.CHOLESKY.value
    try:
        upper = scipy.linalg.cholesky(b, lower=False, overwrite_a=True)
    except np.linalg.LinAlgError as exc:
        raise _failure(EigenFailure.NOT_POSITIVE_DEFINITE, f"matrix B is not positive definite ({exc})", strategy) from exc
    except ValueError as exc:
        raise _failure(EigenFailure.ILLEGAL_ARGUMENT, f"illegal argument ({exc})", strategy) from exc

    # C = U^-T A U^-1, symmetric up to rounding.
    half = scipy.linalg.solve_triangular(upper, a, trans="T", lower=False, overwrite_b=True)
    reduced = scipy.linalg.solve_triangular(upper, half.T, trans="T", lower=False).T
    reduced = 0.5 * (reduced + reduced.T)
    try:
        values, reduced_vectors = scipy.linalg.eigh(reduced, lower=False, overwrite_a=True)
    except np.linalg.LinAlgError as exc:
        raise _failure(EigenFailure.NON_CONVERGENCE, f"the problem failed to converge ({exc})", strategy) from exc

    vectors = scipy.linalg.solve_triangular(upper, reduced_vectors, lower=False)
    return EigenDecomposition(vectors=DenseMatrix(vectors.T), values=np.asarray(values, dtype=np.float64))


def _qz_generalized(a: FloatArray, b: FloatArray) -> EigenDecomposition:
    strategy = EigenStrategy.QZ.value
    try:
        eigvals, vectors = scipy.linalg.eig(
            a,
            b,
            right=True,
            overwrite_a=True,
            overwrite_b=True,
            homogeneous_eigvals=True,
        )
    except np.linalg.LinAlgError as exc:
        raise _failure(EigenFailure.NON_CONVERGENCE, f"QZ iteration failed ({exc})", strategy) from exc
    except ValueError as exc:
        raise _failure(EigenFailure.ILLEGAL_ARGUMENT, f"illegal argument ({exc})", strategy) from exc

    alpha = np.real(eigvals[0])
    beta = np.real(eigvals[1])
    values = np.zeros(alpha.shape, dtype=np.float64)
    finite = beta != 0.0
    values[finite] = alpha[finite] / beta[finite]
    return EigenDecomposition(vectors=DenseMatrix(np.real(vectors).T), values=values)


def _owned_square(matrix: DenseMatrix | npt.ArrayLike, *, name: str, strategy: str) -> FloatArray:
    source = matrix.data if isinstance(matrix, DenseMatrix) else matrix
    try:
        values = np.array(source, dtype=np.float64, order="C", copy=True)
    except (TypeError, ValueError) as exc:
        raise _failure(EigenFailure.ILLEGAL_ARGUMENT, f"{name} is not numeric ({exc})", strategy) from exc
    if values.ndim != 2 or values.shape[0] != values.shape[1]:
        raise _failure(EigenFailure.ILLEGAL_ARGUMENT, f"{name} must be a square 2D matrix, got {values.shape}", strategy)
    if values.shape[0] == 0:
        raise _failure(EigenFailure.ILLEGAL_ARGUMENT, f"{name} must not be empty", strategy)
    if not np.all(np.isfinite(values)):
        raise _failure(EigenFailure.ILLEGAL_ARGUMENT, f"{name} contains non-finite values", strategy)
    return values


def _failure(failure: EigenFailure, detail: str, strategy: str) -> EigenSolverError:
    message = f"Error computing eigenvectors ({strategy}): {detail}"
    logger.warning(message)
    return EigenSolverError(failure, message, strategy=strategy)
