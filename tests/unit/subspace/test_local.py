"""Tests for patch-local subspace generation and projection."""

from __future__ import annotations

import numpy as np
import pytest

from subspacekit.data import Sample, SampleSet
from subspacekit.errors import EigenFailure, EigenSolverError, ShapeMismatchError
from subspacekit.subspace import (
    LdaSubspaceGenerator,
    LocalDescriptor,
    LocalSubspaceConfig,
    LocalSubspaceGenerator,
    LocalSubspaceProjector,
    PcaSubspaceGenerator,
    Subspace,
    SubspaceKind,
)
from subspacekit.subspace.local import merge_features, tile_descriptors


def _image_set(width: int, height: int, count: int = 6) -> SampleSet:
    rng = np.random.default_rng(17)
    return SampleSet(
        Sample(rng.normal(size=width * height), label=f"p{index % 2}", source_id=f"img{index}.pgm")
        for index in range(count)
    )


def test_tiling_steps_rows_outer_from_origin() -> None:
    config = LocalSubspaceConfig(image_width=5, image_height=4, patch_size=2, patch_stride=2)

    descriptors = tile_descriptors(config)

    # (5 - 2) // 2 + 1 = 2 columns, (4 - 2) // 2 + 1 = 2 rows.
    assert len(descriptors) == 4
    assert descriptors[0].pixel_indices.tolist() == [0, 1, 5, 6]
    assert descriptors[1].pixel_indices.tolist() == [2, 3, 7, 8]
    assert descriptors[2].pixel_indices.tolist() == [10, 11, 15, 16]


def test_border_patch_is_clipped_to_image() -> None:
    descriptor = LocalDescriptor.from_geometry(image_width=3, image_height=3, patch_size=2, x=2, y=2)

    assert descriptor.pixel_indices.tolist() == [8]


def test_out_of_range_indices_read_as_zero() -> None:
    descriptor = LocalDescriptor([0, 5, -1])

    assert descriptor.extract(np.asarray([7.0, 8.0])).tolist() == [7.0, 0.0, 0.0]


def test_generated_features_are_capped_and_sorted() -> None:
    config = LocalSubspaceConfig(
        image_width=6,
        image_height=6,
        patch_size=3,
        patch_stride=3,
        max_features=5,
    )

    local = LocalSubspaceGenerator(PcaSubspaceGenerator(), config).generate(_image_set(6, 6))

    assert len(local.descriptors) == 4
    assert len(local.subspaces) == 4
    assert local.num_features == 5
    scores = [feature.score for feature in local.features]
    assert scores == sorted(scores, reverse=True)
    for feature in local.features:
        assert feature.subspace_index == feature.patch_index
        criterion = local.subspaces[feature.patch_index].criterion[feature.axis_index]
        assert feature.score == pytest.approx(abs(criterion))


def test_feature_cap_larger_than_candidates_keeps_everything() -> None:
    config = LocalSubspaceConfig(
        image_width=4,
        image_height=4,
        patch_size=2,
        patch_stride=2,
        max_features=1000,
    )

    local = LocalSubspaceGenerator(PcaSubspaceGenerator(), config).generate(_image_set(4, 4))

    assert local.num_features == sum(subspace.subspace_dim for subspace in local.subspaces)


def test_local_projector_follows_ranked_features() -> None:
    config = LocalSubspaceConfig(image_width=4, image_height=4, patch_size=2, patch_stride=2)
    samples = _image_set(4, 4)
    local = LocalSubspaceGenerator(PcaSubspaceGenerator(), config).generate(samples)
    sample = samples[0]

    projected = LocalSubspaceProjector(local).project(sample, dim=3)

    assert projected.dim == 3
    assert projected.label == sample.label
    for position, feature in enumerate(local.features[:3]):
        subspace = local.subspaces[feature.subspace_index]
        patch = sample.features[local.descriptors[feature.patch_index].pixel_indices]
        expected = (patch - subspace.center) @ subspace.axes[feature.axis_index]
        assert projected.features[position] == pytest.approx(expected)


def test_local_projector_defaults_to_all_features() -> None:
    config = LocalSubspaceConfig(image_width=4, image_height=4, patch_size=2, patch_stride=2, max_features=7)
    samples = _image_set(4, 4)
    local = LocalSubspaceGenerator(PcaSubspaceGenerator(), config).generate(samples)

    projected = LocalSubspaceProjector(local).project_set(samples)

    assert projected.dim == 7
    with pytest.raises(ValueError, match="exceeds"):
        LocalSubspaceProjector(local).project(samples[0], dim=8)


def test_generator_rejects_samples_not_matching_geometry() -> None:
    config = LocalSubspaceConfig(image_width=4, image_height=4, patch_size=2, patch_stride=2)

    with pytest.raises(ShapeMismatchError, match="expected 4x4"):
        LocalSubspaceGenerator(PcaSubspaceGenerator(), config).generate(_image_set(3, 3))


def test_config_validation() -> None:
    with pytest.raises(ValueError, match="patch_size must fit"):
        LocalSubspaceConfig(image_width=4, image_height=4, patch_size=5, patch_stride=1)
    with pytest.raises(ValueError, match="patch_stride must be > 0"):
        LocalSubspaceConfig(image_width=4, image_height=4, patch_size=2, patch_stride=0)
    with pytest.raises(ValueError, match="max_features must be > 0"):
        LocalSubspaceConfig(image_width=4, image_height=4, patch_size=2, patch_stride=1, max_features=0)


def test_equal_scores_keep_patch_then_axis_order() -> None:
    subspaces = (
        Subspace(SubspaceKind.PCA, [0.0, 0.0], [[1.0, 0.0], [0.0, 1.0]], [3.0, -2.0]),
        Subspace(SubspaceKind.PCA, [0.0, 0.0], [[1.0, 0.0], [0.0, 1.0]], [2.0, -3.0]),
    )

    features = merge_features(subspaces)

    assert [(feature.patch_index, feature.axis_index) for feature in features] == [
        (0, 0),
        (1, 1),
        (0, 1),
        (1, 0),
    ]
    assert [feature.score for feature in features] == [3.0, 3.0, 2.0, 2.0]


class _RecordingGenerator:
    def __init__(self, inner: LdaSubspaceGenerator) -> None:
        self.inner = inner
        self.calls = 0

    def generate(self, samples: SampleSet) -> Subspace:
        self.calls += 1
        return self.inner.generate(samples)


def test_failing_patch_aborts_local_generation() -> None:
    rng = np.random.default_rng(23)
    samples = SampleSet()
    for index in range(8):
        label = "a" if index % 2 else "b"
        # Only the first patch varies within a class; the second has a singular within-class scatter.
        features = np.full(16, 1.0 if label == "a" else 0.0)
        features[[0, 1, 4, 5]] = rng.normal(size=4)
        samples.append(Sample(features, label=label))
    config = LocalSubspaceConfig(image_width=4, image_height=4, patch_size=2, patch_stride=2)
    inner = _RecordingGenerator(LdaSubspaceGenerator())

    with pytest.raises(EigenSolverError) as excinfo:
        LocalSubspaceGenerator(inner, config).generate(samples)

    assert excinfo.value.failure == EigenFailure.NOT_POSITIVE_DEFINITE
    assert inner.calls == 2
