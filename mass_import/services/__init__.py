"""Duplicate-detection services: locator, scorer and decision engine."""

from mass_import.services.duplicate_detector import DuplicateDetector
from mass_import.services.geo_locator import (
    CandidateLocator,
    bounding_box,
    haversine_distance_m,
)
from mass_import.services.similarity_scorer import SimilarityScorer

__all__ = [
    "CandidateLocator",
    "DuplicateDetector",
    "SimilarityScorer",
    "bounding_box",
    "haversine_distance_m",
]
