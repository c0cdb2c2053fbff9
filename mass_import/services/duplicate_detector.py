"""Duplicate decision engine.

Combines the candidate locator and the similarity scorer into a single
accept/reject decision per import record.

Two radii are involved and they are deliberately different:

* the **search radius** (default 500 m, per session) only bounds which
  catalog entries are looked at and how the location signal decays;
* the **hard cutoff** (default 50 m, static) bounds which of those can
  actually be accepted as the same artwork.

A candidate is a duplicate only when ``confidence >= threshold`` *and*
``distance <= hard cutoff``.  Of all scored candidates the single best one
is kept: highest confidence, ties broken by smaller distance.
"""

from __future__ import annotations

import structlog

from mass_import.models.records import CandidateArtwork, CanonicalImportRecord
from mass_import.models.similarity import DuplicateCheckResult, SimilarityResult
from mass_import.services.geo_locator import CandidateLocator
from mass_import.services.similarity_scorer import SimilarityScorer
from mass_import.utils.confidence import confidence_to_level
from mass_import.utils.errors import ConfigurationError

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_THRESHOLD = 0.7
DEFAULT_HARD_CUTOFF_M = 50.0
DEFAULT_SEARCH_RADIUS_M = 500.0


class DuplicateDetector:
    """Decides whether an import record already exists in the catalog.

    Parameters
    ----------
    locator:
        Finds nearby approved artworks.
    scorer:
        Rates each candidate.
    threshold:
        Minimum confidence for a duplicate.
    hard_cutoff_m:
        Maximum distance for a duplicate, independent of the search radius.
    """

    def __init__(
        self,
        locator: CandidateLocator,
        scorer: SimilarityScorer | None = None,
        threshold: float = DEFAULT_THRESHOLD,
        hard_cutoff_m: float = DEFAULT_HARD_CUTOFF_M,
    ) -> None:
        if not 0.0 <= threshold <= 1.0:
            raise ConfigurationError(f"Duplicate threshold must be in [0, 1], got {threshold}")
        if hard_cutoff_m <= 0:
            raise ConfigurationError(f"Hard cutoff must be positive, got {hard_cutoff_m}")
        self._locator = locator
        self._scorer = scorer or SimilarityScorer()
        self._threshold = threshold
        self._hard_cutoff_m = hard_cutoff_m

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def hard_cutoff_m(self) -> float:
        return self._hard_cutoff_m

    def rate(
        self,
        record: CanonicalImportRecord,
        candidate: CandidateArtwork,
        search_radius_m: float,
    ) -> SimilarityResult:
        """Score one candidate and apply the two-part accept rule."""
        breakdown = self._scorer.score(
            record, candidate, search_radius_m, distance_m=candidate.distance_m
        )
        confidence = self._scorer.confidence(breakdown)
        is_duplicate = (
            confidence >= self._threshold and candidate.distance_m <= self._hard_cutoff_m
        )
        return SimilarityResult(
            candidate_id=candidate.id,
            confidence=confidence,
            breakdown=breakdown,
            distance_m=candidate.distance_m,
            is_duplicate=is_duplicate,
        )

    def evaluate(
        self,
        record: CanonicalImportRecord,
        candidates: list[CandidateArtwork],
        search_radius_m: float,
    ) -> DuplicateCheckResult:
        """Pick the best candidate with a running maximum and decide."""
        best: SimilarityResult | None = None
        for candidate in candidates:
            result = self.rate(record, candidate, search_radius_m)
            if best is None or _beats(result, best):
                best = result

        if best is None:
            return DuplicateCheckResult(
                is_duplicate=False,
                candidate_count=0,
                reason=f"No approved artworks within {search_radius_m:g}m",
            )

        reason = _explain(best, self._threshold, self._hard_cutoff_m)
        return DuplicateCheckResult(
            is_duplicate=best.is_duplicate,
            best_match=best,
            candidate_count=len(candidates),
            reason=reason,
        )

    async def check(
        self,
        record: CanonicalImportRecord,
        search_radius_m: float = DEFAULT_SEARCH_RADIUS_M,
    ) -> DuplicateCheckResult:
        """Locate candidates around ``record`` and decide.

        Raises
        ------
        StorageError
            If the candidate lookup fails; the caller treats that as a
            failure of this record only.
        """
        candidates = await self._locator.query_near(record.lat, record.lon, search_radius_m)
        result = self.evaluate(record, candidates, search_radius_m)
        logger.debug(
            "duplicate_check_complete",
            source_id=record.source_id,
            candidates=result.candidate_count,
            is_duplicate=result.is_duplicate,
            best_confidence=result.best_match.confidence if result.best_match else None,
        )
        return result


def _beats(challenger: SimilarityResult, incumbent: SimilarityResult) -> bool:
    if challenger.confidence != incumbent.confidence:
        return challenger.confidence > incumbent.confidence
    return challenger.distance_m < incumbent.distance_m


def _explain(best: SimilarityResult, threshold: float, hard_cutoff_m: float) -> str:
    b = best.breakdown
    detail = (
        f"confidence {best.confidence:.2f} ({confidence_to_level(best.confidence).value}; "
        f"title {b.title:.2f}, artist {b.artist:.2f}, location {b.location:.2f}, "
        f"tags {b.tags:.2f}) at {best.distance_m:.1f}m"
    )
    if best.is_duplicate:
        return f"Matches {best.candidate_id}: {detail}"
    if best.confidence < threshold:
        return f"Best candidate {best.candidate_id} below threshold {threshold:.2f}: {detail}"
    return f"Best candidate {best.candidate_id} beyond {hard_cutoff_m:g}m cutoff: {detail}"
