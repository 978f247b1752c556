"""Tests for axis images and local feature heat maps."""

from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image

from subspacekit.export.visualization import axes_to_images, local_feature_heatmap
from subspacekit.subspace import LocalDescriptor, LocalFeature, LocalSubspace, Subspace, SubspaceKind


def test_axes_to_images_scales_each_axis_to_gray_levels(tmp_path: Path) -> None:
    subspace = Subspace(
        SubspaceKind.PCA,
        center=np.zeros(4),
        axes=[[-1.0, 0.0, 0.0, 1.0], [2.0, 2.0, 2.0, 2.0]],
        criterion=[2.0, 1.0],
    )

    written = axes_to_images(subspace, 5, tmp_path / "axis", 2, 2)

    assert [path.name for path in written] == ["axis000.bmp", "axis001.bmp"]
    with Image.open(written[0]) as image:
        pixels = np.asarray(image.convert("L"))
    assert pixels.shape == (2, 2)
    assert pixels[0, 0] == 0
    assert pixels[1, 1] == 255
    with Image.open(written[1]) as image:
        assert np.all(np.asarray(image.convert("L")) == 0)


def test_axes_to_images_infers_square_geometry(tmp_path: Path) -> None:
    subspace = Subspace(SubspaceKind.PCA, np.zeros(9), np.eye(9)[:1], [1.0])

    (path,) = axes_to_images(subspace, 1, tmp_path / "face", suffix=".png")

    with Image.open(path) as image:
        assert image.size == (3, 3)


def test_local_feature_heatmap_counts_patch_coverage() -> None:
    patch = Subspace(SubspaceKind.PCA, np.zeros(2), [[1.0, 0.0], [0.0, 1.0]], [3.0, 1.0])
    local = LocalSubspace(
        descriptors=(LocalDescriptor([0, 1]), LocalDescriptor([1, 3])),
        subspaces=(patch, patch),
        features=(
            LocalFeature(patch_index=0, subspace_index=0, axis_index=0, score=3.0),
            LocalFeature(patch_index=1, subspace_index=1, axis_index=0, score=3.0),
            LocalFeature(patch_index=1, subspace_index=1, axis_index=1, score=1.0),
        ),
    )

    image = local_feature_heatmap(local, 2, 2)
    first_only = local_feature_heatmap(local, 2, 2, count=1)

    assert np.asarray(image).tolist() == [[85, 255], [0, 170]]
    assert np.asarray(first_only).tolist() == [[255, 255], [0, 0]]
