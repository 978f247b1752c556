"""Row-major dense matrix used by scatter, covariance, and subspace code."""

from __future__ import annotations

from typing import Any

import numpy as np
import numpy.typing as npt

from subspacekit.errors import ShapeMismatchError


FloatArray = npt.NDArray[np.float64]


class DenseMatrix:
    """Owning 2D float64 matrix; construction and ``copy`` are always deep."""

    __slots__ = ("_data",)

    def __init__(self, data: npt.ArrayLike) -> None:
        values = np.array(data, dtype=np.float64, order="C", copy=True)
        if values.ndim != 2:
            raise ValueError("DenseMatrix data must be a 2D array [rows, cols]")
        self._data = values

    @classmethod
    def zeros(cls, rows: int, cols: int) -> DenseMatrix:
        """Create a ``rows x cols`` matrix with every element set to 0."""
        if rows < 0 or cols < 0:
            raise ValueError("rows and cols must be >= 0")
        return cls(np.zeros((rows, cols), dtype=np.float64))

    @property
    def rows(self) -> int:
        return int(self._data.shape[0])

    @property
    def cols(self) -> int:
        return int(self._data.shape[1])

    @property
    def shape(self) -> tuple[int, int]:
        return self.rows, self.cols

    @property
    def data(self) -> FloatArray:
        """Backing row-major buffer (mutations are visible to this matrix)."""
        return self._data

    def row(self, index: int) -> FloatArray:
        """Return a view on row ``index``."""
        return self._data[index]

    def copy(self) -> DenseMatrix:
        return DenseMatrix(self._data)

    def multiply(self, other: DenseMatrix) -> DenseMatrix:
        """Matrix product ``self @ other``."""
        if self.cols != other.rows:
            raise ShapeMismatchError(
                f"cannot multiply {self.rows}x{self.cols} by {other.rows}x{other.cols}: "
                "inner dimensions differ"
            )
        return DenseMatrix(np.matmul(self._data, other._data))

    def add(self, other: DenseMatrix) -> DenseMatrix:
        """Elementwise sum of two equally shaped matrices."""
        if self.shape != other.shape:
            raise ShapeMismatchError(
                f"cannot add {self.rows}x{self.cols} and {other.rows}x{other.cols}"
            )
        return DenseMatrix(self._data + other._data)

    def transpose(self) -> DenseMatrix:
        return DenseMatrix(self._data.T)

    def scale(self, factor: float) -> DenseMatrix:
        """Return a copy with every element multiplied by ``factor``."""
        return DenseMatrix(self._data * float(factor))

    def __matmul__(self, other: DenseMatrix) -> DenseMatrix:
        return self.multiply(other)

    def __add__(self, other: DenseMatrix) -> DenseMatrix:
        return self.add(other)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, DenseMatrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"DenseMatrix(rows={self.rows}, cols={self.cols})"
