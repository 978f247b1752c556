"""Manifest-driven sample-set loading."""

from __future__ import annotations

import logging
from pathlib import Path

from subspacekit.data.adapters.image import load_grayscale_image
from subspacekit.data.adapters.manifest import read_sample_manifest
from subspacekit.data.adapters.raw import ElementType, load_raw_features
from subspacekit.data.contracts import Sample, SampleSet
from subspacekit.errors import EmptyInputError, ShapeMismatchError


logger = logging.getLogger(__name__)


def load_sample(
    path: str | Path,
    element_type: ElementType,
    *,
    label: str = "",
    size: int | None = None,
) -> Sample:
    """Load one sample file; images are flattened row-major, raw files decoded per element."""
    element_type = ElementType(element_type)
    if element_type == ElementType.IMAGE:
        features = load_grayscale_image(path).as_features()
    else:
        features = load_raw_features(path, element_type, size)
    return Sample(features, label=label, source_id=str(path))


def load_sample_set(
    manifest_path: str | Path,
    element_type: ElementType,
    size: int | None = None,
    *,
    base_dir: str | Path | None = None,
) -> SampleSet:
    """Load every manifest entry, in order, into one consistent SampleSet."""
    entries = read_sample_manifest(manifest_path, base_dir=base_dir)
    if not entries:
        raise EmptyInputError(f"sample manifest lists no samples: {manifest_path}")

    samples = SampleSet()
    for entry in entries:
        sample = load_sample(entry.path, element_type, label=entry.label, size=size)
        if len(samples) and sample.dim != samples[0].dim:
            raise ShapeMismatchError(
                f"{entry.path} has {sample.dim} features, expected {samples[0].dim}"
            )
        samples.append(sample)

    logger.debug("Loaded %d samples of length %d from %s", len(samples), samples.dim, manifest_path)
    return samples
