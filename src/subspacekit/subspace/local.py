"""Patch-tiled ("local") subspaces over image-shaped samples.

An image of ``image_width x image_height`` is covered by square patches laid
out from ``(0, 0)`` with a fixed stride. One ordinary subspace is learned per
patch and the axes of all patches are merged into a single feature list ranked
by ``|criterion|``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from subspacekit.data.contracts import Sample, SampleSet
from subspacekit.errors import EmptyInputError, ShapeMismatchError
from subspacekit.subspace.contracts import Subspace
from subspacekit.subspace.generators import SubspaceGenerator


FloatArray = npt.NDArray[np.float64]
IntArray = npt.NDArray[np.int64]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, eq=False)
class LocalDescriptor:
    """Flattened sample positions covered by one patch, in patch row-major order."""

    pixel_indices: IntArray

    def __post_init__(self) -> None:
        indices = np.array(self.pixel_indices, dtype=np.int64, copy=True)
        if indices.ndim != 1:
            raise ValueError("pixel_indices must be a 1D array")
        object.__setattr__(self, "pixel_indices", indices)

    @classmethod
    def from_geometry(
        cls,
        *,
        image_width: int,
        image_height: int,
        patch_size: int,
        x: int,
        y: int,
    ) -> LocalDescriptor:
        """Patch at ``(x, y)`` clipped to the image; border patches may be smaller."""
        min_x, min_y = max(x, 0), max(y, 0)
        max_x = min(x + patch_size, image_width)
        max_y = min(y + patch_size, image_height)
        rows = np.arange(min_y, max_y, dtype=np.int64)
        cols = np.arange(min_x, max_x, dtype=np.int64)
        return cls((rows[:, None] * image_width + cols[None, :]).reshape(-1))

    @property
    def size(self) -> int:
        return int(self.pixel_indices.shape[0])

    def extract(self, features: FloatArray) -> FloatArray:
        """Gather the patch values; indices outside ``features`` read as 0."""
        valid = (self.pixel_indices >= 0) & (self.pixel_indices < features.shape[0])
        local = np.zeros((self.size,), dtype=np.float64)
        local[valid] = features[self.pixel_indices[valid]]
        return local

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LocalDescriptor):
            return NotImplemented
        return np.array_equal(self.pixel_indices, other.pixel_indices)

    __hash__ = None  # type: ignore[assignment]


@dataclass(frozen=True, slots=True)
class LocalFeature:
    """One ranked axis: ``axis_index`` of the subspace trained on patch ``patch_index``."""

    patch_index: int
    subspace_index: int
    axis_index: int
    score: float


@dataclass(frozen=True, slots=True)
class LocalSubspace:
    """Per-patch descriptors and subspaces (1:1) plus the merged ranked features."""

    descriptors: tuple[LocalDescriptor, ...]
    subspaces: tuple[Subspace, ...]
    features: tuple[LocalFeature, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "descriptors", tuple(self.descriptors))
        object.__setattr__(self, "subspaces", tuple(self.subspaces))
        object.__setattr__(self, "features", tuple(self.features))
        if len(self.descriptors) != len(self.subspaces):
            raise ValueError("descriptors and subspaces must have the same length")
        for feature in self.features:
            if not 0 <= feature.patch_index < len(self.descriptors):
                raise ValueError(f"feature refers to unknown patch {feature.patch_index}")
            if not 0 <= feature.subspace_index < len(self.subspaces):
                raise ValueError(f"feature refers to unknown subspace {feature.subspace_index}")
            axes = self.subspaces[feature.subspace_index].subspace_dim
            if not 0 <= feature.axis_index < axes:
                raise ValueError(
                    f"feature axis {feature.axis_index} out of range for subspace "
                    f"{feature.subspace_index} with {axes} axes"
                )

    @property
    def num_features(self) -> int:
        return len(self.features)


@dataclass(frozen=True, slots=True)
class LocalSubspaceConfig:
    """Patch geometry and the cap on merged features (``None`` keeps all)."""

    image_width: int
    image_height: int
    patch_size: int
    patch_stride: int
    max_features: int | None = None

    def __post_init__(self) -> None:
        if self.image_width <= 0:
            raise ValueError("image_width must be > 0")
        if self.image_height <= 0:
            raise ValueError("image_height must be > 0")
        if self.patch_size <= 0:
            raise ValueError("patch_size must be > 0")
        if self.patch_stride <= 0:
            raise ValueError("patch_stride must be > 0")
        if self.patch_size > min(self.image_width, self.image_height):
            raise ValueError("patch_size must fit inside the image")
        if self.max_features is not None and self.max_features <= 0:
            raise ValueError("max_features must be > 0 when set")

    @property
    def sample_dim(self) -> int:
        return self.image_width * self.image_height


def tile_descriptors(config: LocalSubspaceConfig) -> tuple[LocalDescriptor, ...]:
    """Patch grid, rows outer, starting at the top-left corner."""
    steps_x = (config.image_width - config.patch_size) // config.patch_stride + 1
    steps_y = (config.image_height - config.patch_size) // config.patch_stride + 1
    return tuple(
        LocalDescriptor.from_geometry(
            image_width=config.image_width,
            image_height=config.image_height,
            patch_size=config.patch_size,
            x=column * config.patch_stride,
            y=row * config.patch_stride,
        )
        for row in range(steps_y)
        for column in range(steps_x)
    )


def local_sample(sample: Sample, descriptor: LocalDescriptor) -> Sample:
    return Sample(descriptor.extract(sample.features), label=sample.label, source_id=sample.source_id)


def merge_features(
    subspaces: tuple[Subspace, ...],
    max_features: int | None = None,
) -> tuple[LocalFeature, ...]:
    """Rank every axis of every patch by ``|criterion|``, descending, then cap."""
    candidates = [
        LocalFeature(
            patch_index=patch,
            subspace_index=patch,
            axis_index=axis,
            score=float(abs(value)),
        )
        for patch, subspace in enumerate(subspaces)
        for axis, value in enumerate(subspace.criterion)
    ]
    candidates.sort(key=lambda feature: feature.score, reverse=True)
    if max_features is not None:
        candidates = candidates[:max_features]
    return tuple(candidates)


class LocalSubspaceGenerator:
    """Trains ``inner`` once per patch and merges the results."""

    def __init__(self, inner: SubspaceGenerator, config: LocalSubspaceConfig) -> None:
        self.inner = inner
        self.config = config

    def generate(self, samples: SampleSet) -> LocalSubspace:
        if len(samples) == 0:
            raise EmptyInputError("local subspace generation needs at least one sample")
        for sample in samples:
            if sample.dim != self.config.sample_dim:
                raise ShapeMismatchError(
                    f"sample {sample.source_id or '<unnamed>'} has {sample.dim} features, "
                    f"expected {self.config.image_width}x{self.config.image_height}"
                )

        descriptors = tile_descriptors(self.config)
        subspaces: list[Subspace] = []
        for index, descriptor in enumerate(descriptors):
            logger.debug("Generating local subspace %d/%d", index + 1, len(descriptors))
            patch_samples = SampleSet(local_sample(sample, descriptor) for sample in samples)
            subspaces.append(self.inner.generate(patch_samples))

        features = merge_features(tuple(subspaces), self.config.max_features)
        return LocalSubspace(descriptors, tuple(subspaces), features)


class LocalSubspaceProjector:
    """Maps a sample to one coordinate per ranked local feature."""

    def __init__(self, local: LocalSubspace) -> None:
        self.local = local

    def resolve_dim(self, dim: int = 0) -> int:
        if dim < 0:
            raise ValueError("dim must be >= 0")
        if dim == 0:
            return self.local.num_features
        if dim > self.local.num_features:
            raise ValueError(f"dim {dim} exceeds the {self.local.num_features} local features")
        return dim

    def project(self, sample: Sample, dim: int = 0) -> Sample:
        count = self.resolve_dim(dim)
        patches: dict[int, FloatArray] = {}
        output = np.zeros((count,), dtype=np.float64)
        for position, feature in enumerate(self.local.features[:count]):
            if feature.patch_index not in patches:
                descriptor = self.local.descriptors[feature.patch_index]
                patches[feature.patch_index] = descriptor.extract(sample.features)
            subspace = self.local.subspaces[feature.subspace_index]
            local = patches[feature.patch_index]
            if local.shape[0] != subspace.original_dim:
                raise ShapeMismatchError(
                    f"patch {feature.patch_index} has {local.shape[0]} values, subspace "
                    f"{feature.subspace_index} expects {subspace.original_dim}"
                )
            output[position] = (local - subspace.center) @ subspace.axes[feature.axis_index]
        return Sample(output, label=sample.label, source_id=sample.source_id)

    def project_set(self, samples: SampleSet, dim: int = 0) -> SampleSet:
        return SampleSet(self.project(sample, dim) for sample in samples)
