"""Mass-import domain models - re-exports all public model classes.

The models are organized across three submodules by domain concern:
    - records.py    - Canonical import records, bounding boxes, candidates
    - similarity.py - Score breakdowns, weights, duplicate-check results
    - session.py    - Import configuration and the per-session result

If you add a new model class, remember to add it to ``__all__`` too.
"""

from __future__ import annotations

from mass_import.models.records import (
    BoundingBox,
    CandidateArtwork,
    CanonicalImportRecord,
    SourceType,
)
from mass_import.models.session import (
    ImportConfig,
    ImportSessionResult,
    RecordOutcome,
    RecordState,
)
from mass_import.models.similarity import (
    DuplicateCheckResult,
    ScoreBreakdown,
    SimilarityResult,
    SimilarityWeights,
)

__all__ = [
    "BoundingBox",
    "CandidateArtwork",
    "CanonicalImportRecord",
    "DuplicateCheckResult",
    "ImportConfig",
    "ImportSessionResult",
    "RecordOutcome",
    "RecordState",
    "ScoreBreakdown",
    "SimilarityResult",
    "SimilarityWeights",
    "SourceType",
]
