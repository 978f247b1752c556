"""Verification helpers for persisted subspace artifacts."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from subspacekit.export.manifest import manifest_path_for, read_manifest, sha256_file


@dataclass(frozen=True, slots=True)
class ArtifactVerificationResult:
    """Outcome of checking an artifact against its sidecar manifest."""

    ok: bool
    manifest_present: bool
    artifact_present: bool
    size_matches: bool
    checksum_matches: bool
    reason: str | None


def verify_artifact(artifact_path: Path) -> ArtifactVerificationResult:
    """Verify size and checksum of ``artifact_path`` against its manifest."""
    manifest_path = manifest_path_for(artifact_path)
    if not manifest_path.exists():
        return ArtifactVerificationResult(
            ok=False,
            manifest_present=False,
            artifact_present=artifact_path.exists(),
            size_matches=False,
            checksum_matches=False,
            reason="manifest_missing",
        )
    if not artifact_path.exists():
        return ArtifactVerificationResult(
            ok=False,
            manifest_present=True,
            artifact_present=False,
            size_matches=False,
            checksum_matches=False,
            reason="artifact_missing",
        )

    entry = _artifact_entry(read_manifest(manifest_path))
    size_matches = int(artifact_path.stat().st_size) == int(entry["size_bytes"])
    checksum_matches = sha256_file(artifact_path) == str(entry["sha256"])
    if not size_matches:
        reason: str | None = "size_mismatch"
    elif not checksum_matches:
        reason = "checksum_mismatch"
    else:
        reason = None
    return ArtifactVerificationResult(
        ok=size_matches and checksum_matches,
        manifest_present=True,
        artifact_present=True,
        size_matches=size_matches,
        checksum_matches=checksum_matches,
        reason=reason,
    )


def _artifact_entry(manifest: dict[str, Any]) -> dict[str, Any]:
    entry = manifest.get("artifact")
    if not isinstance(entry, dict):
        raise ValueError("manifest artifact must be an object")
    for required in ("path", "sha256", "size_bytes"):
        if required not in entry:
            raise ValueError(f"manifest artifact entry missing required field: {required}")
    return entry
