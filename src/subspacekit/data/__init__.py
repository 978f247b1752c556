"""Samples, sample sets and the loaders that build them from files."""

from subspacekit.data.contracts import Sample, SampleSet
from subspacekit.data.loading import load_sample, load_sample_set
from subspacekit.data.versioning import sample_set_fingerprint

__all__ = [
    "Sample",
    "SampleSet",
    "load_sample",
    "load_sample_set",
    "sample_set_fingerprint",
]
