"""Similarity scoring and duplicate-decision models.

ScoreBreakdown carries the per-signal sub-scores for one
(record, candidate) pair, SimilarityResult adds the weighted confidence and
the accept decision, and DuplicateCheckResult is what the orchestrator sees
for a whole record: the single best match (if any) plus how many candidates
were considered.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SimilarityWeights(BaseModel):
    """Static weights for combining sub-scores into one confidence.

    Loaded once from Settings; never changed while a session runs.
    """

    model_config = ConfigDict(frozen=True)

    title: float = Field(default=0.4, ge=0.0)
    artist: float = Field(default=0.2, ge=0.0)
    location: float = Field(default=0.4, ge=0.0)
    tags: float = Field(default=0.0, ge=0.0)

    @model_validator(mode="after")
    def _require_positive_total(self) -> SimilarityWeights:
        if self.title + self.artist + self.location + self.tags <= 0:
            raise ValueError("at least one similarity weight must be positive")
        return self

    def as_list(self) -> list[float]:
        return [self.title, self.artist, self.location, self.tags]


class ScoreBreakdown(BaseModel):
    """Per-signal similarity sub-scores, each in [0, 1]."""

    model_config = ConfigDict(frozen=True)

    title: float = Field(ge=0.0, le=1.0)
    artist: float = Field(ge=0.0, le=1.0)
    location: float = Field(ge=0.0, le=1.0)
    tags: float = Field(default=0.0, ge=0.0, le=1.0)

    def as_list(self) -> list[float]:
        return [self.title, self.artist, self.location, self.tags]


class SimilarityResult(BaseModel):
    """Scored comparison of an import record against one candidate."""

    model_config = ConfigDict(frozen=True)

    candidate_id: str
    confidence: float = Field(ge=0.0, le=1.0)
    breakdown: ScoreBreakdown
    distance_m: float = Field(ge=0.0)
    is_duplicate: bool = False


class DuplicateCheckResult(BaseModel):
    """Outcome of checking one record against all nearby candidates."""

    model_config = ConfigDict(frozen=True)

    is_duplicate: bool
    best_match: SimilarityResult | None = None
    candidate_count: int = Field(default=0, ge=0)
    reason: str = ""

    @property
    def duplicate_id(self) -> str | None:
        if self.is_duplicate and self.best_match is not None:
            return self.best_match.candidate_id
        return None
