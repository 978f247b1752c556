"""CLI runner for learning subspaces and running nearest-neighbor tests."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

from subspacekit.data import SampleSet, load_sample_set, sample_set_fingerprint
from subspacekit.data.adapters import ElementType
from subspacekit.evaluation import ClassificationReport, DistanceMetric, OneNNClassifier
from subspacekit.export import (
    build_manifest_payload,
    load_local_subspace,
    load_subspace,
    manifest_path_for,
    save_local_subspace,
    save_matrix,
    save_subspace,
    verify_artifact,
    write_manifest,
)
from subspacekit.export.visualization import axes_to_images, local_feature_heatmap
from subspacekit.subspace import (
    LdaConfig,
    LdaSubspaceGenerator,
    LocalSubspaceConfig,
    LocalSubspaceGenerator,
    LocalSubspaceProjector,
    PcaSubspaceGenerator,
    SubspaceGenerator,
    SubspaceProjector,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LearnCliArtifacts:
    """Files written by one ``learn`` execution."""

    subspace_path: Path
    manifest_path: Path
    num_samples: int
    num_classes: int
    num_features: int


@dataclass(frozen=True, slots=True)
class EvaluationCliArtifacts:
    """Outcome of one ``test`` execution."""

    report: ClassificationReport
    leave_one_out: bool
    report_path: Path | None
    distance_matrix_path: Path | None


def build_parser() -> argparse.ArgumentParser:
    """Create CLI parser with ``learn``, ``test`` and ``visualize`` commands."""
    parser = argparse.ArgumentParser(
        prog="subspacekit",
        description="Learn PCA/LDA (optionally patch-local) subspaces and evaluate 1-NN classification.",
    )
    parser.add_argument(
        "--workspace-root",
        type=Path,
        default=Path.cwd(),
        help="Workspace root path used to resolve relative inputs/outputs.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Print progress diagnostics.")
    commands = parser.add_subparsers(dest="command", required=True)

    learn = commands.add_parser("learn", help="Learn a subspace from a labeled sample set.")
    _add_sample_arguments(learn)
    learn.add_argument(
        "--subspace-type",
        choices=("pca", "lda"),
        default="pca",
        help="Subspace generator to use.",
    )
    learn.add_argument(
        "--npca",
        type=int,
        default=0,
        help="PCA reduction applied before LDA (0 = automatic).",
    )
    learn.add_argument(
        "--dim",
        type=int,
        default=None,
        help="Number of merged local features to keep (local subspaces only).",
    )
    _add_local_arguments(learn)

    test = commands.add_parser("test", help="Run a nearest-neighbor classification test.")
    _add_sample_arguments(test, learn_set_required=False)
    test.add_argument("--test-set", type=Path, default=None, help="Probe sample manifest.")
    test.add_argument("--dim", type=int, default=0, help="Feature dimensionality (0 = all).")
    test.add_argument(
        "--distance",
        choices=tuple(metric.value for metric in DistanceMetric),
        default=DistanceMetric.EUCLIDEAN.value,
        help="Distance measure: euclid, nc (normalized correlation) or hamming.",
    )
    test.add_argument(
        "--distance-matrix",
        type=Path,
        default=None,
        help="Optional path for the probes x gallery distance matrix (binary).",
    )
    test.add_argument("--report", type=Path, default=None, help="Optional JSON report path.")
    test.add_argument("--local", action="store_true", help="Subspace file holds a local subspace.")

    visualize = commands.add_parser("visualize", help="Render learned axes or local feature coverage.")
    visualize.add_argument("--subspace-file", type=Path, required=True, help="Subspace artifact.")
    visualize.add_argument("--local", action="store_true", help="Subspace file holds a local subspace.")
    visualize.add_argument("--output-prefix", type=Path, required=True, help="Prefix of written images.")
    visualize.add_argument("--count", type=int, default=10, help="Number of axes/features to render.")
    visualize.add_argument("--width", type=int, default=0, help="Image width.")
    visualize.add_argument("--height", type=int, default=0, help="Image height.")
    return parser


def _add_sample_arguments(parser: argparse.ArgumentParser, *, learn_set_required: bool = True) -> None:
    parser.add_argument(
        "--learn-set",
        type=Path,
        required=learn_set_required,
        default=None,
        help="Manifest of '<sample-path> <label>' lines.",
    )
    parser.add_argument(
        "--sample-type",
        choices=tuple(element.value for element in ElementType),
        default=ElementType.IMAGE.value,
        help="Element type of sample files.",
    )
    parser.add_argument(
        "--sample-size",
        type=int,
        default=None,
        help="Elements per raw sample file (default: whole file).",
    )
    parser.add_argument("--subspace-file", type=Path, required=True, help="Subspace artifact path.")


def _add_local_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--local", action="store_true", help="Learn a patch-local subspace.")
    parser.add_argument("--width", type=int, default=0, help="Sample image width.")
    parser.add_argument("--height", type=int, default=0, help="Sample image height.")
    parser.add_argument("--window-size", type=int, default=0, help="Local patch size.")
    parser.add_argument("--window-step", type=int, default=0, help="Local patch stride.")


def run_learn_from_args(args: argparse.Namespace) -> LearnCliArtifacts:
    """Learn a (local) subspace and persist it next to an integrity manifest."""
    workspace_root = args.workspace_root.resolve()
    learn_set_path = _resolve_path(workspace_root, args.learn_set)
    subspace_path = _resolve_path(workspace_root, args.subspace_file)
    element_type = ElementType(args.sample_type)

    samples = load_sample_set(learn_set_path, element_type, args.sample_size, base_dir=workspace_root)
    generator = _build_generator(args)

    metadata: dict[str, Any] = {
        "learn_set": str(learn_set_path),
        "learn_set_fingerprint": sample_set_fingerprint(learn_set_path, base_dir=workspace_root),
        "num_samples": len(samples),
        "num_classes": samples.number_of_classes(),
        "original_dim": samples.dim,
        "sample_type": element_type.value,
        "subspace_type": args.subspace_type,
        "npca": int(args.npca),
    }

    subspace_path.parent.mkdir(parents=True, exist_ok=True)
    if args.local:
        config = LocalSubspaceConfig(
            image_width=args.width,
            image_height=args.height,
            patch_size=args.window_size,
            patch_stride=args.window_step,
            max_features=args.dim or None,
        )
        local = LocalSubspaceGenerator(generator, config).generate(samples)
        save_local_subspace(subspace_path, local)
        artifact_kind = "local_subspace"
        num_features = local.num_features
        metadata.update(
            {
                "width": config.image_width,
                "height": config.image_height,
                "window_size": config.patch_size,
                "window_step": config.patch_stride,
                "num_patches": len(local.descriptors),
            }
        )
    else:
        subspace = generator.generate(samples)
        save_subspace(subspace_path, subspace)
        artifact_kind = "subspace"
        num_features = subspace.subspace_dim
    metadata["num_features"] = num_features

    manifest_path = manifest_path_for(subspace_path)
    write_manifest(
        manifest_path,
        build_manifest_payload(
            artifact_path=subspace_path,
            artifact_kind=artifact_kind,
            metadata=metadata,
        ),
    )
    return LearnCliArtifacts(
        subspace_path=subspace_path,
        manifest_path=manifest_path,
        num_samples=len(samples),
        num_classes=samples.number_of_classes(),
        num_features=num_features,
    )


def run_test_from_args(args: argparse.Namespace) -> EvaluationCliArtifacts:
    """Project gallery/probe sets and run the 1-NN classification test.

    With a single sample set, it serves as both gallery and probes (leave-one-out).
    """
    workspace_root = args.workspace_root.resolve()
    if args.learn_set is None and args.test_set is None:
        raise ValueError("at least one of --learn-set / --test-set is required")
    subspace_path = _resolve_path(workspace_root, args.subspace_file)
    _verify_subspace_artifact(subspace_path)

    element_type = ElementType(args.sample_type)
    sets: list[SampleSet] = []
    for manifest in (args.learn_set, args.test_set):
        if manifest is not None:
            sets.append(
                load_sample_set(
                    _resolve_path(workspace_root, manifest),
                    element_type,
                    args.sample_size,
                    base_dir=workspace_root,
                )
            )

    if args.local:
        projector: SubspaceProjector | LocalSubspaceProjector = LocalSubspaceProjector(
            load_local_subspace(subspace_path)
        )
    else:
        projector = SubspaceProjector(load_subspace(subspace_path))
    projected = [projector.project_set(sample_set) for sample_set in sets]
    gallery = projected[0]
    probes = projected[-1]
    leave_one_out = len(projected) == 1

    classifier = OneNNClassifier(DistanceMetric(args.distance), verbose=bool(args.verbose))
    report = classifier.run_classification_test(gallery, probes, args.dim)

    distance_matrix_path: Path | None = None
    if args.distance_matrix is not None:
        distance_matrix_path = _resolve_path(workspace_root, args.distance_matrix)
        distance_matrix_path.parent.mkdir(parents=True, exist_ok=True)
        save_matrix(distance_matrix_path, classifier.distance_matrix(gallery, probes, args.dim))

    report_path: Path | None = None
    if args.report is not None:
        report_path = _resolve_path(workspace_root, args.report)
        report_path.parent.mkdir(parents=True, exist_ok=True)
        _write_json(
            report_path,
            {
                "accuracy": report.accuracy,
                "num_probes": report.num_probes,
                "num_correct": report.num_correct,
                "per_class_recall": dict(report.per_class_recall),
                "misclassifications": [
                    {
                        "source_id": miss.source_id,
                        "true_label": miss.true_label,
                        "claimed_label": miss.claimed_label,
                    }
                    for miss in report.misclassifications
                ],
                "distance": args.distance,
                "dim": int(args.dim),
                "leave_one_out": leave_one_out,
                "subspace_file": str(subspace_path),
            },
        )

    return EvaluationCliArtifacts(
        report=report,
        leave_one_out=leave_one_out,
        report_path=report_path,
        distance_matrix_path=distance_matrix_path,
    )


def run_visualize_from_args(args: argparse.Namespace) -> tuple[Path, ...]:
    workspace_root = args.workspace_root.resolve()
    subspace_path = _resolve_path(workspace_root, args.subspace_file)
    prefix = _resolve_path(workspace_root, args.output_prefix)
    prefix.parent.mkdir(parents=True, exist_ok=True)
    if args.local:
        output = prefix.with_name(prefix.name + "heatmap.bmp")
        image = local_feature_heatmap(load_local_subspace(subspace_path), args.width, args.height, args.count)
        image.save(output)
        return (output,)
    return axes_to_images(load_subspace(subspace_path), args.count, prefix, args.width, args.height)


def _build_generator(args: argparse.Namespace) -> SubspaceGenerator:
    if args.subspace_type == "lda":
        return LdaSubspaceGenerator(LdaConfig(pca_reduction_dim=args.npca))
    return PcaSubspaceGenerator()


def _verify_subspace_artifact(subspace_path: Path) -> None:
    if not subspace_path.exists():
        raise FileNotFoundError(f"subspace file does not exist: {subspace_path}")
    verification = verify_artifact(subspace_path)
    if not verification.manifest_present:
        logger.warning("No manifest found for %s; skipping integrity check", subspace_path)
        return
    if not verification.ok:
        raise RuntimeError(f"subspace file failed verification ({verification.reason}): {subspace_path}")


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        lines = _run_command(args)
    except Exception as exc:
        print(f"[ERROR] subspacekit {args.command} failed: {exc}", file=sys.stderr)
        return 2

    for line in lines:
        print(line)
    return 0


def _run_command(args: argparse.Namespace) -> list[str]:
    if args.command == "learn":
        learned = run_learn_from_args(args)
        return [
            f"subspace_file: {learned.subspace_path}",
            f"manifest: {learned.manifest_path}",
            f"num_samples: {learned.num_samples}",
            f"num_classes: {learned.num_classes}",
            f"num_features: {learned.num_features}",
        ]
    if args.command == "test":
        tested = run_test_from_args(args)
        lines = [
            f"accuracy: {tested.report.accuracy:.6f}",
            f"num_probes: {tested.report.num_probes}",
            f"leave_one_out: {tested.leave_one_out}",
        ]
        if tested.report_path is not None:
            lines.append(f"report: {tested.report_path}")
        if tested.distance_matrix_path is not None:
            lines.append(f"distance_matrix: {tested.distance_matrix_path}")
        return lines
    return [f"image: {path}" for path in run_visualize_from_args(args)]


def _resolve_path(base_dir: Path, path_value: Path) -> Path:
    if path_value.is_absolute():
        return path_value.resolve()
    return (base_dir / path_value).resolve()


def _write_json(path: Path, payload: dict[str, Any]) -> None:
    path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")


if __name__ == "__main__":
    raise SystemExit(main())
