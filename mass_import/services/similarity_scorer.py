"""Deterministic similarity scoring between import records and candidates.

Four signals are computed for every (record, candidate) pair:

* **title**    -- normalized Levenshtein similarity of the two titles.
* **artist**   -- best pairwise similarity after splitting multi-artist
                  credits ("A & B, C").  Both sides missing scores 1.0,
                  exactly one side missing scores 0.0.
* **location** -- ``max(0, 1 - distance / search_radius)``: 1.0 at the
                  same point, falling linearly to 0 at the search radius.
* **tags**     -- share of normalized key/value pairs the two tag maps have
                  in common, relative to the smaller map.  Weighted 0 by
                  default; reported in the breakdown for explanation.

The confidence is the weighted average of the four signals using the static
SimilarityWeights.  Given fixed weights and the same two inputs, the scorer
always returns the same result; it holds no state between calls.
"""

from __future__ import annotations

import json
from typing import Any

from mass_import.models.records import CandidateArtwork, CanonicalImportRecord
from mass_import.models.similarity import ScoreBreakdown, SimilarityWeights
from mass_import.services.geo_locator import haversine_distance_m
from mass_import.utils.confidence import calculate_confidence, clamp_unit
from mass_import.utils.text_normalizer import (
    normalize_for_comparison,
    split_artist_names,
    string_similarity,
)


def title_similarity(a: str | None, b: str | None) -> float:
    return string_similarity(a, b)


def artist_similarity(a: str | None, b: str | None) -> float:
    """Best match between any credited artist on each side."""
    left = split_artist_names(a)
    right = split_artist_names(b)

    if not left and not right:
        return 1.0
    if not left or not right:
        return 0.0

    return max(string_similarity(x, y) for x in left for y in right)


def location_similarity(distance_m: float, search_radius_m: float) -> float:
    """Linear decay from 1.0 at 0 m to 0.0 at ``search_radius_m``."""
    if search_radius_m <= 0:
        return 1.0 if distance_m <= 0 else 0.0
    return clamp_unit(1.0 - distance_m / search_radius_m)


def parse_tag_blob(blob: str | dict[str, Any] | None) -> dict[str, str]:
    """Decode a stored tag blob into a flat string map.

    Accepts either a flat JSON object or ``{"tags": {...}}``.  Anything
    unparseable decodes to an empty map.
    """
    if blob is None:
        return {}
    if isinstance(blob, dict):
        parsed: Any = blob
    else:
        try:
            parsed = json.loads(blob)
        except (TypeError, ValueError):
            return {}

    if isinstance(parsed, dict) and isinstance(parsed.get("tags"), dict):
        parsed = parsed["tags"]
    if not isinstance(parsed, dict):
        return {}
    return {str(k): str(v) for k, v in parsed.items() if v is not None}


def tag_similarity(query_tags: dict[str, str], candidate_tags: dict[str, str]) -> float:
    """Overlap ratio of shared normalized key/value pairs.

    Follows the same degenerate-case rule as the string signals: two
    untagged records score 1.0, exactly one untagged side scores 0.0.
    """
    if not query_tags and not candidate_tags:
        return 1.0
    if not query_tags or not candidate_tags:
        return 0.0

    left = {
        (normalize_for_comparison(k), normalize_for_comparison(v))
        for k, v in query_tags.items()
    }
    right = {
        (normalize_for_comparison(k), normalize_for_comparison(v))
        for k, v in candidate_tags.items()
    }
    shared = len(left & right)
    return clamp_unit(shared / min(len(left), len(right)))


class SimilarityScorer:
    """Scores an import record against catalog candidates.

    Parameters
    ----------
    weights:
        Static weights for the title, artist, location and tag signals.
    """

    def __init__(self, weights: SimilarityWeights | None = None) -> None:
        self._weights = weights or SimilarityWeights()

    @property
    def weights(self) -> SimilarityWeights:
        return self._weights

    def score(
        self,
        record: CanonicalImportRecord,
        candidate: CandidateArtwork,
        search_radius_m: float,
        distance_m: float | None = None,
    ) -> ScoreBreakdown:
        """Compute the per-signal breakdown for one pair.

        ``distance_m`` may be passed when the locator has already computed
        it; otherwise the Haversine distance is computed here.
        """
        if distance_m is None:
            distance_m = haversine_distance_m(record.lat, record.lon, candidate.lat, candidate.lon)

        return ScoreBreakdown(
            title=clamp_unit(title_similarity(record.title, candidate.title)),
            artist=clamp_unit(artist_similarity(record.artist_name, candidate.primary_artist_name)),
            location=location_similarity(distance_m, search_radius_m),
            tags=tag_similarity(record.tags, parse_tag_blob(candidate.tags)),
        )

    def confidence(self, breakdown: ScoreBreakdown) -> float:
        """Weighted average of the breakdown, always in [0, 1]."""
        return calculate_confidence(breakdown.as_list(), self._weights.as_list())
