"""Error kinds raised by subspace learning, persistence, and evaluation."""

from __future__ import annotations

from enum import StrEnum


class EigenFailure(StrEnum):
    """Classification of an eigen-decomposition failure."""

    NON_CONVERGENCE = "non_convergence"
    ILLEGAL_ARGUMENT = "illegal_argument"
    NOT_POSITIVE_DEFINITE = "not_positive_definite"


class ShapeMismatchError(ValueError):
    """Operand shapes are incompatible for the requested operation."""


class EmptyInputError(ValueError):
    """An operation received zero samples, zero classes, or an absent class."""


class ExhaustedCandidatesError(LookupError):
    """No comparable gallery sample remains after self-exclusion."""


class ArtifactFormatError(ValueError):
    """A persisted artifact is truncated or malformed."""


class EigenSolverError(RuntimeError):
    """Eigen-decomposition failed; ``failure`` tells why."""

    def __init__(self, failure: EigenFailure, message: str, *, strategy: str | None = None) -> None:
        super().__init__(message)
        self.failure = failure
        self.strategy = strategy
