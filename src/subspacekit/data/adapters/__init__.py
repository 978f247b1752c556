"""File-format adapters feeding samples into the core."""

from subspacekit.data.adapters.image import GrayscaleImage, load_grayscale_image
from subspacekit.data.adapters.manifest import SampleManifestEntry, read_sample_manifest
from subspacekit.data.adapters.raw import ELEMENT_DTYPES, ElementType, load_raw_features

__all__ = [
    "ELEMENT_DTYPES",
    "ElementType",
    "GrayscaleImage",
    "SampleManifestEntry",
    "load_grayscale_image",
    "load_raw_features",
    "read_sample_manifest",
]
