"""Artifact persistence, integrity manifests and visual exports."""

from subspacekit.export.binary_format import (
    load_local_subspace,
    load_matrix,
    load_subspace,
    save_local_subspace,
    save_matrix,
    save_subspace,
)
from subspacekit.export.manifest import build_manifest_payload, manifest_path_for, write_manifest
from subspacekit.export.verification import ArtifactVerificationResult, verify_artifact

__all__ = [
    "ArtifactVerificationResult",
    "build_manifest_payload",
    "load_local_subspace",
    "load_matrix",
    "load_subspace",
    "manifest_path_for",
    "save_local_subspace",
    "save_matrix",
    "save_subspace",
    "verify_artifact",
    "write_manifest",
]
