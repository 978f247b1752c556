"""Manifest helpers for subspace artifact integrity and traceability."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, cast


MANIFEST_SUFFIX = ".manifest.json"


@dataclass(frozen=True, slots=True)
class ManifestFileEntry:
    """File-level integrity metadata."""

    path: str
    sha256: str
    size_bytes: int


def sha256_file(path: Path) -> str:
    """Compute SHA-256 hash for a file."""
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


def manifest_path_for(artifact_path: Path) -> Path:
    """Sidecar manifest location: ``<artifact>.manifest.json``."""
    return artifact_path.with_name(artifact_path.name + MANIFEST_SUFFIX)


def build_manifest_payload(
    *,
    artifact_path: Path,
    artifact_kind: str,
    metadata: dict[str, Any],
) -> dict[str, Any]:
    """Build JSON-safe manifest payload describing one emitted artifact."""
    if not artifact_path.exists():
        raise FileNotFoundError(f"cannot add missing file to manifest: {artifact_path}")
    entry = ManifestFileEntry(
        path=artifact_path.name,
        sha256=sha256_file(artifact_path),
        size_bytes=int(artifact_path.stat().st_size),
    )
    return {
        "manifest_version": "1.0",
        "artifact_kind": artifact_kind,
        "created_at_utc": datetime.now(UTC).isoformat(),
        "artifact": {
            "path": entry.path,
            "sha256": entry.sha256,
            "size_bytes": entry.size_bytes,
        },
        "metadata": metadata,
    }


def write_manifest(path: Path, payload: dict[str, Any]) -> None:
    """Write canonical JSON manifest."""
    path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")


def read_manifest(path: Path) -> dict[str, Any]:
    """Read manifest JSON payload."""
    return cast(dict[str, Any], json.loads(path.read_text(encoding="utf-8")))
