"""Binary persistence for matrices, subspaces and local subspaces.

Every integer is a little-endian int64 and every real a little-endian
float64, written field by field with no padding, header or version tag:

* matrix: ``rows, cols, data[rows * cols]`` (row-major)
* subspace: ``kind, subspace_dim, original_dim, center[original_dim],
  axes[subspace_dim * original_dim], criterion[subspace_dim]``
* local subspace: ``num_descriptors, num_subspaces, num_features``, then each
  descriptor as ``size, indices[size]``, then each subspace as above, then each
  feature as ``patch_index, subspace_index, axis_index, score``.
"""

from __future__ import annotations

import io
import struct
from pathlib import Path
from typing import BinaryIO

import numpy as np
import numpy.typing as npt

from subspacekit.errors import ArtifactFormatError
from subspacekit.linalg import DenseMatrix
from subspacekit.subspace.contracts import Subspace, SubspaceKind
from subspacekit.subspace.local import LocalDescriptor, LocalFeature, LocalSubspace


FloatArray = npt.NDArray[np.float64]

_INT = struct.Struct("<q")
_FEATURE = struct.Struct("<qqqd")
_FLOAT_DTYPE = np.dtype("<f8")
_INT_DTYPE = np.dtype("<q")


def write_matrix(handle: BinaryIO, matrix: DenseMatrix) -> None:
    _write_ints(handle, matrix.rows, matrix.cols)
    _write_floats(handle, matrix.data)


def read_matrix(handle: BinaryIO) -> DenseMatrix:
    rows, cols = _read_counts(handle, 2, what="matrix header")
    data = _read_floats(handle, rows * cols, what="matrix data")
    return DenseMatrix(data.reshape(rows, cols))


def write_subspace(handle: BinaryIO, subspace: Subspace) -> None:
    _write_ints(handle, int(subspace.kind), subspace.subspace_dim, subspace.original_dim)
    _write_floats(handle, subspace.center)
    _write_floats(handle, subspace.axes)
    _write_floats(handle, subspace.criterion)


def read_subspace(handle: BinaryIO) -> Subspace:
    (raw_kind,) = _read_ints(handle, 1, what="subspace kind")
    try:
        kind = SubspaceKind(raw_kind)
    except ValueError as exc:
        raise ArtifactFormatError(f"unknown subspace kind tag: {raw_kind}") from exc
    subspace_dim, original_dim = _read_counts(handle, 2, what="subspace header")
    center = _read_floats(handle, original_dim, what="subspace center")
    axes = _read_floats(handle, subspace_dim * original_dim, what="subspace axes")
    criterion = _read_floats(handle, subspace_dim, what="subspace criterion")
    return Subspace(kind, center, axes.reshape(subspace_dim, original_dim), criterion)


def write_local_subspace(handle: BinaryIO, local: LocalSubspace) -> None:
    _write_ints(handle, len(local.descriptors), len(local.subspaces), len(local.features))
    for descriptor in local.descriptors:
        _write_ints(handle, descriptor.size)
        handle.write(descriptor.pixel_indices.astype(_INT_DTYPE).tobytes())
    for subspace in local.subspaces:
        write_subspace(handle, subspace)
    for feature in local.features:
        handle.write(
            _FEATURE.pack(
                feature.patch_index,
                feature.subspace_index,
                feature.axis_index,
                feature.score,
            )
        )


def read_local_subspace(handle: BinaryIO) -> LocalSubspace:
    num_descriptors, num_subspaces, num_features = _read_counts(handle, 3, what="local subspace header")
    descriptors = []
    for _ in range(num_descriptors):
        (size,) = _read_counts(handle, 1, what="descriptor size")
        payload = _read_exact(handle, size * _INT_DTYPE.itemsize, what="descriptor indices")
        descriptors.append(LocalDescriptor(np.frombuffer(payload, dtype=_INT_DTYPE)))
    subspaces = [read_subspace(handle) for _ in range(num_subspaces)]
    features = []
    for _ in range(num_features):
        patch_index, subspace_index, axis_index, score = _FEATURE.unpack(
            _read_exact(handle, _FEATURE.size, what="local feature")
        )
        features.append(
            LocalFeature(
                patch_index=patch_index,
                subspace_index=subspace_index,
                axis_index=axis_index,
                score=score,
            )
        )
    try:
        return LocalSubspace(tuple(descriptors), tuple(subspaces), tuple(features))
    except ValueError as exc:
        raise ArtifactFormatError(f"inconsistent local subspace: {exc}") from exc


def save_matrix(path: str | Path, matrix: DenseMatrix) -> None:
    with Path(path).open("wb") as handle:
        write_matrix(handle, matrix)


def load_matrix(path: str | Path) -> DenseMatrix:
    with _open_artifact(path) as handle:
        matrix = read_matrix(handle)
        _expect_end(handle, path)
    return matrix


def save_subspace(path: str | Path, subspace: Subspace) -> None:
    with Path(path).open("wb") as handle:
        write_subspace(handle, subspace)


def load_subspace(path: str | Path) -> Subspace:
    with _open_artifact(path) as handle:
        subspace = read_subspace(handle)
        _expect_end(handle, path)
    return subspace


def save_local_subspace(path: str | Path, local: LocalSubspace) -> None:
    with Path(path).open("wb") as handle:
        write_local_subspace(handle, local)


def load_local_subspace(path: str | Path) -> LocalSubspace:
    with _open_artifact(path) as handle:
        local = read_local_subspace(handle)
        _expect_end(handle, path)
    return local


def _open_artifact(path: str | Path) -> BinaryIO:
    artifact = Path(path)
    if not artifact.exists():
        raise FileNotFoundError(f"artifact does not exist: {artifact}")
    return artifact.open("rb")


def _expect_end(handle: BinaryIO, path: str | Path) -> None:
    if handle.read(1):
        raise ArtifactFormatError(f"unexpected trailing bytes in {path}")


def _write_ints(handle: BinaryIO, *values: int) -> None:
    for value in values:
        handle.write(_INT.pack(int(value)))


def _write_floats(handle: BinaryIO, values: npt.ArrayLike) -> None:
    handle.write(np.ascontiguousarray(values, dtype=_FLOAT_DTYPE).tobytes())


def _read_exact(handle: BinaryIO, size: int, *, what: str) -> bytes:
    remaining = _remaining(handle)
    if remaining is not None and size > remaining:
        raise ArtifactFormatError(f"truncated {what}: expected {size} bytes, got {remaining}")
    try:
        payload = handle.read(size)
    except (OverflowError, MemoryError) as exc:
        raise ArtifactFormatError(f"unreadable {what}: cannot read {size} bytes") from exc
    if len(payload) != size:
        raise ArtifactFormatError(f"truncated {what}: expected {size} bytes, got {len(payload)}")
    return payload


def _remaining(handle: BinaryIO) -> int | None:
    if not handle.seekable():
        return None
    position = handle.tell()
    end = handle.seek(0, io.SEEK_END)
    handle.seek(position)
    return end - position


def _read_ints(handle: BinaryIO, count: int, *, what: str) -> tuple[int, ...]:
    payload = _read_exact(handle, count * _INT.size, what=what)
    return tuple(value for (value,) in _INT.iter_unpack(payload))


def _read_counts(handle: BinaryIO, count: int, *, what: str) -> tuple[int, ...]:
    values = _read_ints(handle, count, what=what)
    if any(value < 0 for value in values):
        raise ArtifactFormatError(f"negative count in {what}: {values}")
    return values


def _read_floats(handle: BinaryIO, count: int, *, what: str) -> FloatArray:
    payload = _read_exact(handle, count * _FLOAT_DTYPE.itemsize, what=what)
    return np.frombuffer(payload, dtype=_FLOAT_DTYPE).astype(np.float64)
