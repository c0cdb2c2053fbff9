"""Confidence scoring utilities for duplicate detection.

The pipeline assigns numeric confidence scores (0.0--1.0) when comparing an
incoming record against each nearby catalog entry.  This module provides
the two operations the scorer and decision engine share:

1. **calculate_confidence** -- Weighted average of multiple score signals
   (title, artist, location, tags) into a single per-candidate score.
2. **confidence_to_level** -- Maps a numeric score to a human-readable
   tier used in skip warnings and log events.
"""

from enum import Enum


class ConfidenceLevel(Enum):
    """Human-readable confidence tiers for duplicate matches."""

    VERY_LOW = "very_low"    # < 0.2
    LOW = "low"              # 0.2 - 0.4
    MEDIUM = "medium"        # 0.4 - 0.6
    HIGH = "high"            # 0.6 - 0.8
    VERY_HIGH = "very_high"  # >= 0.8


def clamp_unit(value: float) -> float:
    """Clamp ``value`` into [0.0, 1.0]."""
    return max(0.0, min(1.0, value))


def calculate_confidence(
    scores: list[float],
    weights: list[float] | None = None,
) -> float:
    """Compute a weighted average confidence score.

    Args:
        scores: Individual confidence scores, each in [0.0, 1.0].
        weights: Optional weights for each score. Defaults to equal weighting.

    Returns:
        Weighted average clamped to [0.0, 1.0].

    Raises:
        ValueError: If scores is empty or lengths of scores and weights differ.
    """
    if not scores:
        raise ValueError("scores must not be empty")

    if weights is None:
        weights = [1.0] * len(scores)

    if len(scores) != len(weights):
        raise ValueError("scores and weights must have the same length")

    total_weight = sum(weights)
    if total_weight == 0:
        return 0.0

    weighted_sum = sum(s * w for s, w in zip(scores, weights, strict=True))
    # Floating-point drift can push an all-ones average a hair past 1.0.
    return clamp_unit(weighted_sum / total_weight)


def confidence_to_level(score: float) -> ConfidenceLevel:
    """Map a numeric confidence score to a human-readable level.

    Args:
        score: Confidence score in [0.0, 1.0].

    Returns:
        Corresponding ConfidenceLevel enum member.
    """
    if score < 0.2:
        return ConfidenceLevel.VERY_LOW
    if score < 0.4:
        return ConfidenceLevel.LOW
    if score < 0.6:
        return ConfidenceLevel.MEDIUM
    if score < 0.8:
        return ConfidenceLevel.HIGH
    return ConfidenceLevel.VERY_HIGH
