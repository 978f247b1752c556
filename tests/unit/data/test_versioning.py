"""Tests for reproducible sample-set fingerprinting."""

from __future__ import annotations

from pathlib import Path

import pytest

from subspacekit.data.versioning import sample_set_fingerprint


def _manifest(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "set.txt"
    path.write_text(text, encoding="utf-8")
    return path


def test_fingerprint_is_deterministic(tmp_path: Path) -> None:
    (tmp_path / "a.raw").write_bytes(b"alpha")
    manifest = _manifest(tmp_path, "a.raw p1\n")

    assert sample_set_fingerprint(manifest, base_dir=tmp_path) == sample_set_fingerprint(
        manifest, base_dir=tmp_path
    )


def test_fingerprint_changes_with_label_or_size(tmp_path: Path) -> None:
    sample = tmp_path / "a.raw"
    sample.write_bytes(b"alpha")
    before = sample_set_fingerprint(_manifest(tmp_path, "a.raw p1\n"), base_dir=tmp_path)
    relabeled = sample_set_fingerprint(_manifest(tmp_path, "a.raw p2\n"), base_dir=tmp_path)

    sample.write_bytes(b"alpha-extended")
    resized = sample_set_fingerprint(_manifest(tmp_path, "a.raw p1\n"), base_dir=tmp_path)

    assert len({before, relabeled, resized}) == 3


def test_fingerprint_validates_missing_paths(tmp_path: Path) -> None:
    manifest = _manifest(tmp_path, "missing.raw p1\n")

    with pytest.raises(FileNotFoundError):
        sample_set_fingerprint(manifest, base_dir=tmp_path)
