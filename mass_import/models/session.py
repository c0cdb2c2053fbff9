"""Import session configuration and result models.

Architecture note:
    ImportConfig is frozen and validated up front; an invalid configuration
    never reaches the record loop.  ImportSessionResult is the one mutable
    model in the package: it is created by the orchestrator at the start of
    ``run()``, threaded through every batch, and returned at the end.  It is
    never shared between sessions or stored at module level.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ImportConfig(BaseModel):
    """Policy knobs for one import session."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    batch_size: int = Field(default=50, gt=0, le=1000)
    auto_approve: bool = False
    # Candidate search radius in meters. Looser than the hard accept cutoff.
    duplicate_check_radius: float = Field(default=500.0, gt=0.0, allow_inf_nan=False)
    importer_identity: str = Field(min_length=1)
    dry_run: bool = False
    source_name: str = Field(min_length=1)
    skip_duplicates: bool = True
    create_artists: bool = True

    def audit_summary(self) -> dict[str, Any]:
        """Configuration fields recorded with the session audit entry."""
        return {
            "sourceName": self.source_name,
            "batchSize": self.batch_size,
            "autoApprove": self.auto_approve,
            "dryRun": self.dry_run,
            "duplicateCheckRadius": self.duplicate_check_radius,
            "skipDuplicates": self.skip_duplicates,
            "createArtists": self.create_artists,
        }


class RecordState(str, Enum):  # noqa: UP042 — StrEnum requires Python 3.11+
    """Where a record ended up in the per-record state machine.

        VALIDATED → DUPLICATE_CHECKED → {SKIPPED | CREATED}
        CREATED → {AUTO_APPROVED | PENDING_REVIEW}

    FAILED is terminal from any state.
    """

    VALIDATED = "VALIDATED"
    DUPLICATE_CHECKED = "DUPLICATE_CHECKED"
    SKIPPED = "SKIPPED"
    CREATED = "CREATED"
    AUTO_APPROVED = "AUTO_APPROVED"
    PENDING_REVIEW = "PENDING_REVIEW"
    FAILED = "FAILED"


class RecordOutcome(BaseModel):
    """Final trace for one input record."""

    model_config = ConfigDict(frozen=True)

    source_id: str
    state: RecordState
    submission_id: str | None = None
    artwork_id: str | None = None
    artist_id: str | None = None
    duplicate_of: str | None = None
    message: str | None = None


class ImportSessionResult(BaseModel):
    """Mutable accumulator for one pipeline invocation."""

    total_records: int = 0
    successful_imports: int = 0
    duplicates_skipped: int = 0
    failed_imports: int = 0
    created_artwork_ids: list[str] = Field(default_factory=list)
    created_artist_ids: list[str] = Field(default_factory=list)
    created_submission_ids: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    processing_time_ms: int = 0
    outcomes: list[RecordOutcome] = Field(default_factory=list)

    # ── Accumulation helpers used by the orchestrator ────────────────

    def record_failure(self, source_id: str, message: str) -> None:
        self.failed_imports += 1
        self.errors.append(f"{source_id}: {message}")
        self.outcomes.append(
            RecordOutcome(source_id=source_id, state=RecordState.FAILED, message=message)
        )

    def record_skip(self, source_id: str, duplicate_of: str | None, message: str) -> None:
        self.duplicates_skipped += 1
        self.warnings.append(message)
        self.outcomes.append(
            RecordOutcome(
                source_id=source_id,
                state=RecordState.SKIPPED,
                duplicate_of=duplicate_of,
                message=message,
            )
        )

    def record_success(self, outcome: RecordOutcome) -> None:
        self.successful_imports += 1
        self.outcomes.append(outcome)

    def to_summary(self) -> dict[str, Any]:
        """Serialise to the camelCase session-result shape."""
        return {
            "totalRecords": self.total_records,
            "successfulImports": self.successful_imports,
            "duplicatesSkipped": self.duplicates_skipped,
            "failedImports": self.failed_imports,
            "createdArtworkIds": list(self.created_artwork_ids),
            "createdArtistIds": list(self.created_artist_ids),
            "createdSubmissionIds": list(self.created_submission_ids),
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "processingTimeMs": self.processing_time_ms,
        }
