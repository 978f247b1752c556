"""Reproducible sample-set fingerprint helpers."""

from __future__ import annotations

import hashlib
from pathlib import Path

from subspacekit.data.adapters.manifest import SampleManifestEntry, read_sample_manifest


def sample_set_fingerprint(manifest_path: str | Path, *, base_dir: str | Path | None = None) -> str:
    """Create deterministic SHA256 fingerprint from path+label+size metadata."""
    entries = read_sample_manifest(manifest_path, base_dir=base_dir)
    return entries_fingerprint(entries)


def entries_fingerprint(entries: tuple[SampleManifestEntry, ...]) -> str:
    if not entries:
        raise ValueError("entries must not be empty")

    digest = hashlib.sha256()
    for entry in entries:
        path = entry.path
        if not path.exists():
            raise FileNotFoundError(f"Path does not exist: {path}")
        if not path.is_file():
            raise ValueError(f"Expected file path, got: {path}")
        digest.update(str(path.resolve()).encode("utf-8"))
        digest.update(b"\x00")
        digest.update(entry.label.encode("utf-8"))
        digest.update(b"\x00")
        digest.update(str(path.stat().st_size).encode("utf-8"))
        digest.update(b"\n")

    return digest.hexdigest()
