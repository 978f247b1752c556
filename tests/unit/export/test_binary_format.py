"""Tests for binary persistence of matrices and (local) subspaces."""

from __future__ import annotations

import io
import struct
from pathlib import Path

import numpy as np
import pytest

from subspacekit.data import Sample, SampleSet
from subspacekit.errors import ArtifactFormatError
from subspacekit.export import (
    load_local_subspace,
    load_matrix,
    load_subspace,
    save_local_subspace,
    save_matrix,
    save_subspace,
)
from subspacekit.export.binary_format import read_local_subspace, read_matrix
from subspacekit.linalg import DenseMatrix
from subspacekit.subspace import (
    LocalSubspaceConfig,
    LocalSubspaceGenerator,
    PcaSubspaceGenerator,
    Subspace,
    SubspaceKind,
)


def test_matrix_layout_is_int64_header_then_row_major_doubles(tmp_path: Path) -> None:
    path = tmp_path / "m.dat"
    matrix = DenseMatrix([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])

    save_matrix(path, matrix)

    payload = path.read_bytes()
    assert struct.unpack("<qq", payload[:16]) == (2, 3)
    assert np.frombuffer(payload[16:], dtype="<f8").tolist() == [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]
    assert load_matrix(path) == matrix


def test_subspace_round_trip_is_exact(tmp_path: Path) -> None:
    path = tmp_path / "s.dat"
    subspace = Subspace(
        SubspaceKind.LDA,
        center=[0.5, -1.25, 3.0],
        axes=[[0.1, 0.2, 0.3], [1e-300, -2.5, np.pi]],
        criterion=[7.0, -0.125],
    )

    save_subspace(path, subspace)
    loaded = load_subspace(path)

    assert loaded == subspace
    assert loaded.kind == SubspaceKind.LDA
    assert path.stat().st_size == 8 * (3 + 3 + 6 + 2)


def test_local_subspace_round_trip_is_exact(tmp_path: Path) -> None:
    rng = np.random.default_rng(23)
    samples = SampleSet(Sample(rng.normal(size=16), label=str(index % 2)) for index in range(5))
    config = LocalSubspaceConfig(image_width=4, image_height=4, patch_size=3, patch_stride=1, max_features=6)
    local = LocalSubspaceGenerator(PcaSubspaceGenerator(), config).generate(samples)
    path = tmp_path / "local.dat"

    save_local_subspace(path, local)
    loaded = load_local_subspace(path)

    assert loaded == local
    assert struct.unpack("<qqq", path.read_bytes()[:24]) == (4, 4, 6)


def test_truncated_subspace_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "s.dat"
    save_subspace(path, Subspace(SubspaceKind.PCA, [0.0, 0.0], [[1.0, 0.0]], [1.0]))
    path.write_bytes(path.read_bytes()[:-4])

    with pytest.raises(ArtifactFormatError, match="truncated subspace criterion"):
        load_subspace(path)


def test_unknown_subspace_kind_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "s.dat"
    path.write_bytes(struct.pack("<qqq", 9, 0, 0))

    with pytest.raises(ArtifactFormatError, match="unknown subspace kind"):
        load_subspace(path)


def test_trailing_bytes_are_rejected(tmp_path: Path) -> None:
    path = tmp_path / "m.dat"
    save_matrix(path, DenseMatrix.zeros(1, 1))
    path.write_bytes(path.read_bytes() + b"\x00")

    with pytest.raises(ArtifactFormatError, match="trailing"):
        load_matrix(path)


def test_missing_artifact_is_an_io_error(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_subspace(tmp_path / "missing.dat")


class _StreamOnly(io.BytesIO):
    def seekable(self) -> bool:
        return False


def test_oversized_matrix_header_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "m.dat"
    path.write_bytes(struct.pack("<qq", 2**62, 2**62))

    with pytest.raises(ArtifactFormatError, match="truncated matrix data"):
        load_matrix(path)
    with pytest.raises(ArtifactFormatError, match="matrix data"):
        read_matrix(_StreamOnly(struct.pack("<qq", 2**62, 2**62)))


def test_oversized_descriptor_size_is_rejected() -> None:
    payload = struct.pack("<qqqq", 1, 1, 0, 2**61)

    with pytest.raises(ArtifactFormatError, match="truncated descriptor indices"):
        read_local_subspace(io.BytesIO(payload))
    with pytest.raises(ArtifactFormatError, match="descriptor indices"):
        read_local_subspace(_StreamOnly(payload))
