"""Nearest-neighbor classification and distance measures."""

from subspacekit.evaluation.classifier import ClassificationReport, Misclassification, OneNNClassifier
from subspacekit.evaluation.distance import (
    DistanceMetric,
    cosine_distance,
    distance,
    euclidean_distance,
    hamming_distance,
)

__all__ = [
    "ClassificationReport",
    "DistanceMetric",
    "Misclassification",
    "OneNNClassifier",
    "cosine_distance",
    "distance",
    "euclidean_distance",
    "hamming_distance",
]
