"""Tests for subspace projection."""

from __future__ import annotations

import numpy as np
import pytest

from subspacekit.data import Sample, SampleSet
from subspacekit.errors import ShapeMismatchError
from subspacekit.subspace import Subspace, SubspaceKind, SubspaceProjector


def _projector() -> SubspaceProjector:
    subspace = Subspace(
        SubspaceKind.PCA,
        center=[1.0, 1.0, 1.0],
        axes=[[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]],
        criterion=[2.0, 1.0],
    )
    return SubspaceProjector(subspace)


def test_project_subtracts_center_and_copies_metadata() -> None:
    projected = _projector().project(Sample([3.0, -1.0, 7.0], label="p", source_id="p.raw"))

    assert projected.features.tolist() == [2.0, -2.0]
    assert projected.label == "p"
    assert projected.source_id == "p.raw"


def test_project_with_prefix_dim_keeps_leading_axes() -> None:
    projected = _projector().project(Sample([3.0, -1.0, 7.0]), dim=1)

    assert projected.features.tolist() == [2.0]


def test_project_rejects_more_axes_than_available() -> None:
    with pytest.raises(ValueError, match="exceeds"):
        _projector().project(Sample([0.0, 0.0, 0.0]), dim=3)


def test_project_rejects_wrong_sample_length() -> None:
    with pytest.raises(ShapeMismatchError):
        _projector().project(Sample([0.0, 0.0]))


def test_project_set_preserves_order() -> None:
    samples = SampleSet([Sample([1.0, 2.0, 3.0], label="a"), Sample([2.0, 1.0, 0.0], label="b")])

    projected = _projector().project_set(samples)

    assert projected.labels() == ("a", "b")
    assert np.allclose(projected.feature_matrix(), [[0.0, 1.0], [1.0, 0.0]])


def test_reconstruct_maps_back_into_original_space() -> None:
    projector = _projector()

    restored = projector.reconstruct(Sample([2.0, -2.0]))

    assert restored.features.tolist() == [3.0, -1.0, 1.0]
