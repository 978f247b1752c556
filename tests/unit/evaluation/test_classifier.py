"""Tests for the 1-NN classifier."""

from __future__ import annotations

import logging

import numpy as np
import pytest

from subspacekit.data import Sample, SampleSet
from subspacekit.errors import EmptyInputError, ExhaustedCandidatesError
from subspacekit.evaluation import DistanceMetric, OneNNClassifier


def _gallery() -> SampleSet:
    return SampleSet(
        [
            Sample([0.0, 0.0], label="A", source_id="a1"),
            Sample([1.0, 0.0], label="A", source_id="a2"),
            Sample([0.0, 5.0], label="B", source_id="b1"),
            Sample([1.0, 5.0], label="B", source_id="b2"),
        ]
    )


def test_classify_picks_nearest_gallery_label() -> None:
    classifier = OneNNClassifier()
    gallery = _gallery()

    assert classifier.classify(Sample([0.5, 0.1]), gallery) == "A"
    assert classifier.classify(Sample([0.5, 4.9]), gallery) == "B"


def test_classify_skips_the_probe_object_itself() -> None:
    gallery = SampleSet([Sample([0.0], label="A"), Sample([10.0], label="A")])

    assert OneNNClassifier().classify(gallery[0], gallery) == "A"


def test_classify_raises_when_only_the_probe_remains() -> None:
    gallery = SampleSet([Sample([0.0], label="A")])

    with pytest.raises(ExhaustedCandidatesError):
        OneNNClassifier().classify(gallery[0], gallery)


def test_equal_but_distinct_sample_is_not_excluded() -> None:
    gallery = SampleSet([Sample([0.0], label="A"), Sample([1.0], label="B")])

    assert OneNNClassifier().classify(Sample([0.0], label="?"), gallery) == "A"


def test_leave_one_out_accuracy_and_report() -> None:
    samples = _gallery()
    samples.append(Sample([0.9, 4.0], label="A", source_id="odd"))

    report = OneNNClassifier().run_classification_test(samples, samples)

    assert report.num_probes == 5
    assert report.num_correct == 4
    assert report.accuracy == pytest.approx(0.8)
    assert report.per_class_recall == {"A": pytest.approx(2 / 3), "B": pytest.approx(1.0)}
    assert [(miss.source_id, miss.claimed_label) for miss in report.misclassifications] == [("odd", "B")]


def test_verbose_mode_logs_misclassifications(caplog: pytest.LogCaptureFixture) -> None:
    gallery = _gallery()
    probes = SampleSet([Sample([0.0, 4.0], label="A", source_id="probe.pgm")])

    with caplog.at_level(logging.INFO, logger="subspacekit.evaluation.classifier"):
        accuracy = OneNNClassifier(verbose=True).evaluate(gallery, probes)

    assert accuracy == pytest.approx(0.0)
    assert "Incorrect classification: probe.pgm <---> B" in caplog.text


def test_dim_zero_or_too_large_uses_full_gallery_length() -> None:
    gallery = SampleSet([Sample([0.0, 0.0], label="A"), Sample([0.0, 10.0], label="B")])
    probe = Sample([0.0, 9.0])
    classifier = OneNNClassifier()

    assert classifier.classify(probe, gallery, 0) == "B"
    assert classifier.classify(probe, gallery, 50) == "B"
    assert classifier.classify(probe, gallery, 1) == "A"


def test_distance_matrix_has_probe_rows_and_no_self_exclusion() -> None:
    gallery = _gallery()
    classifier = OneNNClassifier(DistanceMetric.EUCLIDEAN)

    matrix = classifier.distance_matrix(gallery, gallery)

    assert matrix.shape == (4, 4)
    assert np.allclose(np.diag(matrix.data), 0.0)
    assert matrix.data[0, 2] == pytest.approx(5.0)


def test_empty_probe_set_is_rejected() -> None:
    with pytest.raises(EmptyInputError):
        OneNNClassifier().evaluate(_gallery(), SampleSet())
