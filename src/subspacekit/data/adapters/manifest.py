"""Sample-set manifest files: one ``<sample-path> <label>`` pair per line."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class SampleManifestEntry:
    """One sample reference from a manifest, in file order."""

    path: Path
    label: str


def read_sample_manifest(
    manifest_path: str | Path,
    *,
    base_dir: str | Path | None = None,
) -> tuple[SampleManifestEntry, ...]:
    """Parse a manifest, preserving line order and skipping blank lines.

    Relative sample paths are resolved against ``base_dir`` when it is given and
    used verbatim otherwise.
    """
    path = Path(manifest_path)
    if not path.exists():
        raise FileNotFoundError(f"sample manifest does not exist: {path}")

    entries: list[SampleManifestEntry] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        tokens = line.split()
        if not tokens:
            continue
        sample_path = Path(tokens[0])
        if base_dir is not None and not sample_path.is_absolute():
            sample_path = Path(base_dir) / sample_path
        label = tokens[1] if len(tokens) > 1 else ""
        entries.append(SampleManifestEntry(path=sample_path, label=label))
    return tuple(entries)
