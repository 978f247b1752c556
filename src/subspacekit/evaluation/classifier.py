"""Nearest-neighbor (1-NN) classification over projected sample sets."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping

import numpy as np

from subspacekit.data.contracts import Sample, SampleSet
from subspacekit.errors import EmptyInputError, ExhaustedCandidatesError, ShapeMismatchError
from subspacekit.evaluation.distance import DistanceMetric, distance
from subspacekit.linalg import DenseMatrix


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Misclassification:
    source_id: str
    true_label: str
    claimed_label: str


@dataclass(frozen=True, slots=True)
class ClassificationReport:
    """Outcome of classifying every probe against a gallery."""

    accuracy: float
    num_probes: int
    num_correct: int
    per_class_recall: Mapping[str, float]
    misclassifications: tuple[Misclassification, ...]


class OneNNClassifier:
    """Labels a probe with the label of its closest gallery sample.

    A gallery sample that is the very same object as the probe is skipped, so
    passing one set as both gallery and probes gives a leave-one-out test.
    """

    def __init__(self, metric: DistanceMetric = DistanceMetric.EUCLIDEAN, *, verbose: bool = False) -> None:
        self.metric = DistanceMetric(metric)
        self.verbose = verbose

    @staticmethod
    def resolve_dim(gallery: SampleSet, dim: int = 0) -> int:
        """``0`` or anything longer than the first gallery sample means its full length."""
        if len(gallery) == 0:
            raise EmptyInputError("gallery is empty")
        full = gallery[0].dim
        if dim <= 0 or dim > full:
            return full
        return dim

    def classify(self, probe: Sample, gallery: SampleSet, dim: int = 0) -> str:
        if len(gallery) == 0:
            raise ExhaustedCandidatesError("no gallery sample to compare against")
        return self._classify(probe, gallery, self.resolve_dim(gallery, dim))

    def run_classification_test(
        self,
        gallery: SampleSet,
        probes: SampleSet,
        dim: int = 0,
    ) -> ClassificationReport:
        if len(probes) == 0:
            raise EmptyInputError("probe set is empty")
        resolved = self.resolve_dim(gallery, dim)

        totals: dict[str, int] = {}
        hits: dict[str, int] = {}
        misses: list[Misclassification] = []
        for probe in probes:
            claimed = self._classify(probe, gallery, resolved)
            totals[probe.label] = totals.get(probe.label, 0) + 1
            if claimed == probe.label:
                hits[probe.label] = hits.get(probe.label, 0) + 1
                continue
            misses.append(Misclassification(probe.source_id, probe.label, claimed))
            if self.verbose:
                logger.info("Incorrect classification: %s <---> %s", probe.source_id, claimed)

        num_correct = len(probes) - len(misses)
        return ClassificationReport(
            accuracy=num_correct / len(probes),
            num_probes=len(probes),
            num_correct=num_correct,
            per_class_recall={label: hits.get(label, 0) / total for label, total in totals.items()},
            misclassifications=tuple(misses),
        )

    def evaluate(self, gallery: SampleSet, probes: SampleSet, dim: int = 0) -> float:
        """Fraction of probes whose claimed label equals their true label."""
        return self.run_classification_test(gallery, probes, dim).accuracy

    def distance_matrix(self, gallery: SampleSet, probes: SampleSet, dim: int = 0) -> DenseMatrix:
        """``probes x gallery`` pairwise distances, self pairs included."""
        resolved = self.resolve_dim(gallery, dim)
        stacked = _stack(gallery, resolved)
        rows = np.zeros((len(probes), len(gallery)), dtype=np.float64)
        for index, probe in enumerate(probes):
            rows[index] = distance(self.metric, stacked, probe.features, resolved)
        return DenseMatrix(rows)

    def _classify(self, probe: Sample, gallery: SampleSet, dim: int) -> str:
        candidates = [sample for sample in gallery if sample is not probe]
        if not candidates:
            raise ExhaustedCandidatesError(
                f"no gallery sample left for {probe.source_id or '<unnamed>'} after excluding itself"
            )
        distances = distance(self.metric, _stack(candidates, dim), probe.features, dim)
        # argmin keeps the first of equal minima.
        return candidates[int(np.argmin(distances))].label


def _stack(samples: SampleSet | list[Sample], dim: int) -> np.ndarray:
    for sample in samples:
        if sample.dim < dim:
            raise ShapeMismatchError(
                f"gallery sample {sample.source_id or '<unnamed>'} has {sample.dim} features, need {dim}"
            )
    return np.stack([sample.features[:dim] for sample in samples], axis=0)
