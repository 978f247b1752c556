"""Labeled feature-vector samples and the statistics computed over sets of them."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PureWindowsPath
from typing import Iterable, Iterator, overload

import numpy as np
import numpy.typing as npt

from subspacekit.errors import EmptyInputError, ShapeMismatchError
from subspacekit.linalg import DenseMatrix


FloatArray = npt.NDArray[np.float64]


@dataclass(slots=True, eq=False)
class Sample:
    """One feature vector with its class label and provenance (e.g. source file)."""

    features: FloatArray
    label: str = ""
    source_id: str = ""

    def __post_init__(self) -> None:
        values = np.array(self.features, dtype=np.float64, copy=True)
        if values.ndim != 1:
            raise ValueError("features must be a 1D array")
        self.features = values

    @classmethod
    def zeros(cls, dim: int, *, label: str = "", source_id: str = "") -> Sample:
        """Create a sample with ``dim`` features, all set to 0."""
        if dim < 0:
            raise ValueError("dim must be >= 0")
        return cls(np.zeros((dim,), dtype=np.float64), label=label, source_id=source_id)

    @property
    def dim(self) -> int:
        return int(self.features.shape[0])

    def reinit(self, dim: int) -> None:
        """Discard features and metadata, leaving ``dim`` zero features."""
        if dim < 0:
            raise ValueError("dim must be >= 0")
        self.features = np.zeros((dim,), dtype=np.float64)
        self.label = ""
        self.source_id = ""

    def copy(self) -> Sample:
        return Sample(self.features, label=self.label, source_id=self.source_id)


class SampleSet:
    """Ordered, owning collection of samples sharing one feature length.

    Statistics follow the usual definitions:

    * within-class scatter ``W = sum_i (x_i - m_c(i)) (x_i - m_c(i))^T``
    * between-class scatter ``B = sum_c n_c (m_c - m) (m_c - m)^T``

    so that ``B + W`` equals the total scatter around the global mean.
    """

    __slots__ = ("_samples",)

    def __init__(self, samples: Iterable[Sample] = ()) -> None:
        self._samples: list[Sample] = list(samples)

    @classmethod
    def with_size(cls, count: int, dim: int = 0) -> SampleSet:
        sample_set = cls()
        sample_set.init(count, dim)
        return sample_set

    def init(self, count: int, dim: int = 0) -> None:
        """Replace the contents with ``count`` zero samples of length ``dim``."""
        if count < 0:
            raise ValueError("count must be >= 0")
        self._samples = [Sample.zeros(dim) for _ in range(count)]

    def clear(self) -> None:
        self._samples = []

    def append(self, sample: Sample) -> None:
        self._samples.append(sample)

    def merge(self, other: SampleSet) -> None:
        """Append deep copies of every sample in ``other``; ``other`` is left intact."""
        self._samples.extend(sample.copy() for sample in other)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self._samples)

    @overload
    def __getitem__(self, index: int) -> Sample: ...

    @overload
    def __getitem__(self, index: slice) -> list[Sample]: ...

    def __getitem__(self, index: int | slice) -> Sample | list[Sample]:
        return self._samples[index]

    def __setitem__(self, index: int, sample: Sample) -> None:
        self._samples[index] = sample

    @property
    def dim(self) -> int:
        """Feature length of the first sample."""
        if not self._samples:
            raise EmptyInputError("sample set is empty")
        return self._samples[0].dim

    def labels(self) -> tuple[str, ...]:
        return tuple(sample.label for sample in self._samples)

    def class_labels(self) -> tuple[str, ...]:
        """Distinct labels in order of first occurrence."""
        return tuple(dict.fromkeys(self.labels()))

    def number_of_classes(self) -> int:
        return len(self.class_labels())

    def feature_matrix(self) -> FloatArray:
        """Stack samples as rows of an ``N x n`` array."""
        if not self._samples:
            raise EmptyInputError("sample set is empty")
        dim = self._samples[0].dim
        for index, sample in enumerate(self._samples):
            if sample.dim != dim:
                raise ShapeMismatchError(
                    f"sample {index} has {sample.dim} features, expected {dim}"
                )
        return np.stack([sample.features for sample in self._samples], axis=0)

    def as_matrix(self) -> DenseMatrix:
        """Design matrix with one COLUMN per sample (``n x N``)."""
        return DenseMatrix(self.feature_matrix().T)

    def mean(self) -> FloatArray:
        return np.mean(self.feature_matrix(), axis=0)

    def mean_of_class(self, label: str) -> FloatArray:
        features = self.feature_matrix()
        members = self._member_indices(label)
        if not members:
            raise EmptyInputError(f"no sample has label {label!r}")
        return np.mean(features[members], axis=0)

    def class_sizes(self) -> dict[str, int]:
        sizes: dict[str, int] = {}
        for label in self.labels():
            sizes[label] = sizes.get(label, 0) + 1
        return sizes

    def within_class_scatter(self) -> DenseMatrix:
        features = self.feature_matrix()
        dim = features.shape[1]
        scatter = np.zeros((dim, dim), dtype=np.float64)
        for label in self.class_labels():
            members = features[self._member_indices(label)]
            deviations = members - np.mean(members, axis=0)
            scatter += deviations.T @ deviations
        return DenseMatrix(_mirror_upper(scatter))

    def between_class_scatter(self) -> DenseMatrix:
        features = self.feature_matrix()
        dim = features.shape[1]
        overall = np.mean(features, axis=0)
        scatter = np.zeros((dim, dim), dtype=np.float64)
        for label in self.class_labels():
            members = self._member_indices(label)
            offset = np.mean(features[members], axis=0) - overall
            scatter += len(members) * np.outer(offset, offset)
        return DenseMatrix(_mirror_upper(scatter))

    def save(self, folder: str | Path) -> tuple[Path, ...]:
        """Write every sample as a raw little-endian float64 array.

        Files are named after the basename of each sample's ``source_id``.
        """
        target = Path(folder)
        target.mkdir(parents=True, exist_ok=True)
        written: list[Path] = []
        for index, sample in enumerate(self._samples):
            name = PureWindowsPath(sample.source_id).name or f"sample_{index:05d}.dat"
            path = target / name
            path.write_bytes(sample.features.astype("<f8").tobytes())
            written.append(path)
        return tuple(written)

    def _member_indices(self, label: str) -> list[int]:
        return [index for index, sample in enumerate(self._samples) if sample.label == label]


def _mirror_upper(matrix: FloatArray) -> FloatArray:
    """Copy the upper triangle onto the lower one so the result is exactly symmetric."""
    return np.triu(matrix) + np.triu(matrix, k=1).T
