"""Batch import orchestrator.

Drives one import session from raw records to a session result:

    validate all → batch → per record: duplicate check → skip | create
                                                 → one audit entry

ARCHITECTURE NOTE:
    Every collaborator is injected: the catalog store, the audit sink and
    (optionally) a pre-built DuplicateDetector.  Anything not injected is
    built from :class:`Settings`, so tests can hand in mocks for exactly the
    pieces they care about.

    Failure isolation is per record.  Validation errors, adapter errors,
    storage errors and timeouts are caught at the record boundary, written
    into the session result as ``"<source_id>: <message>"`` and the loop
    moves on.  The only exception that leaves :meth:`run` is
    :class:`ConfigurationError`, raised before the first record is touched.

    Records are processed strictly sequentially.  Batches exist to pace the
    session (optional inter-batch delay) and to structure the logs; they
    carry no transactional meaning.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from typing import Any, Iterable, Mapping, Sequence
from urllib.parse import urlparse

import pydantic
import structlog

from mass_import.config.loader import build_import_config
from mass_import.config.settings import Settings
from mass_import.interfaces.audit_sink import IAuditSink
from mass_import.interfaces.catalog_store import ICatalogStore
from mass_import.models.records import CanonicalImportRecord
from mass_import.models.session import (
    ImportConfig,
    ImportSessionResult,
    RecordOutcome,
    RecordState,
)
from mass_import.pipeline.entity_pipeline import EntityCreationPipeline
from mass_import.pipeline.validation import record_label, validate_record
from mass_import.providers.audit.logging_audit_sink import LoggingAuditSink
from mass_import.services.duplicate_detector import DuplicateDetector
from mass_import.services.geo_locator import CandidateLocator
from mass_import.services.similarity_scorer import SimilarityScorer
from mass_import.utils.concurrency import call_with_timeout
from mass_import.utils.errors import ConfigurationError, MassImportError, ValidationError
from mass_import.utils.logging import get_logger

AUDIT_ENTITY_TYPE = "submission"
AUDIT_ENTITY_ID = "mass_import_session"
AUDIT_ACTION = "create"


class BatchImportOrchestrator:
    """Runs import sessions against one catalog store.

    Parameters
    ----------
    store:
        Catalog store used for the duplicate check and entity creation.
    config:
        Session policy, either an :class:`ImportConfig` or a mapping that
        validates into one.  Validation happens at the start of ``run``.
    audit_sink:
        Receives the end-of-session audit entry.  Defaults to a
        :class:`LoggingAuditSink`.
    detector:
        Pre-built duplicate detector.  Built from ``settings`` when omitted.
    settings:
        Static tuning (thresholds, weights, timeouts, batch delay).
    """

    def __init__(
        self,
        store: ICatalogStore,
        config: ImportConfig | Mapping[str, Any],
        audit_sink: IAuditSink | None = None,
        detector: DuplicateDetector | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._store = store
        self._config = config
        self._audit_sink = audit_sink or LoggingAuditSink()
        self._detector = detector
        self._settings = settings or Settings()
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def _resolve_config(self) -> ImportConfig:
        if isinstance(self._config, ImportConfig):
            return self._config
        if not isinstance(self._config, Mapping):
            raise ConfigurationError(
                f"Import configuration must be a mapping, got {type(self._config).__name__}"
            )
        return build_import_config(self._config)

    def _build_detector(self) -> DuplicateDetector:
        if self._detector is not None:
            return self._detector
        try:
            weights = self._settings.similarity_weights()
        except pydantic.ValidationError as exc:
            raise ConfigurationError(f"Invalid similarity weights: {exc}") from exc
        locator = CandidateLocator(
            self._store,
            max_candidates=self._settings.max_candidates,
            timeout_seconds=self._settings.storage_timeout_seconds,
        )
        return DuplicateDetector(
            locator,
            SimilarityScorer(weights),
            threshold=self._settings.duplicate_threshold,
            hard_cutoff_m=self._settings.duplicate_hard_cutoff_m,
        )

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    async def run(
        self,
        records: Iterable[CanonicalImportRecord | Mapping[str, Any]],
        prior_failures: Sequence[tuple[str, str]] = (),
    ) -> ImportSessionResult:
        """Import ``records`` and return the session result.

        Parameters
        ----------
        records:
            Canonical records or canonical-shape mappings (as produced by
            the adapters).  Invalid entries are counted as failures.
        prior_failures:
            ``(label, message)`` pairs for input that failed before reaching
            the pipeline (adapter mapping).  They count toward
            ``total_records`` and ``failed_imports``.

        Returns
        -------
        ImportSessionResult
            Counts, created ids, per-record errors and warnings.

        Raises
        ------
        ConfigurationError
            If the configuration is invalid, the similarity settings are
            unusable, or the hard cutoff exceeds the search radius.
        """
        started = time.perf_counter()
        config = self._resolve_config()
        detector = self._build_detector()
        if detector.hard_cutoff_m > config.duplicate_check_radius:
            raise ConfigurationError(
                f"Duplicate hard cutoff ({detector.hard_cutoff_m:g}m) exceeds the "
                f"search radius ({config.duplicate_check_radius:g}m)"
            )

        items = list(records)
        result = ImportSessionResult(total_records=len(items) + len(prior_failures))
        for label, message in prior_failures:
            result.record_failure(label, message)
        entities = EntityCreationPipeline(
            self._store, config, timeout_seconds=self._settings.storage_timeout_seconds
        )
        session_id = uuid.uuid4().hex[:12]

        with structlog.contextvars.bound_contextvars(
            import_session_id=session_id,
            source_name=config.source_name,
        ):
            self._logger.info(
                "import_session_started",
                total_records=result.total_records,
                dry_run=config.dry_run,
                auto_approve=config.auto_approve,
                batch_size=config.batch_size,
            )

            valid = self._validate_all(items, result)
            batches = [
                valid[i : i + config.batch_size]
                for i in range(0, len(valid), config.batch_size)
            ]

            for batch_number, batch in enumerate(batches, start=1):
                if batch_number > 1 and self._settings.batch_delay_seconds > 0:
                    await asyncio.sleep(self._settings.batch_delay_seconds)
                self._logger.info(
                    "batch_started",
                    batch=batch_number,
                    batches=len(batches),
                    size=len(batch),
                )
                for record in batch:
                    await self._process_record(record, config, detector, entities, result)

            result.processing_time_ms = int((time.perf_counter() - started) * 1000)
            await self._record_audit(result, config, session_id)

            self._logger.info(
                "import_session_finished",
                successful=result.successful_imports,
                duplicates=result.duplicates_skipped,
                failed=result.failed_imports,
                processing_time_ms=result.processing_time_ms,
            )
        return result

    def _validate_all(
        self,
        items: list[Any],
        result: ImportSessionResult,
    ) -> list[CanonicalImportRecord]:
        valid: list[CanonicalImportRecord] = []
        for index, raw in enumerate(items):
            try:
                record = validate_record(raw, index)
            except ValidationError as exc:
                source_id = exc.source_id or record_label(raw, index)
                result.record_failure(source_id, exc.message)
                self._logger.warning("record_invalid", source_id=source_id, error=exc.message)
                continue
            self._warn_photo_urls(record, result)
            valid.append(record)
        return valid

    def _warn_photo_urls(self, record: CanonicalImportRecord, result: ImportSessionResult) -> None:
        for url in record.photos:
            if urlparse(url).scheme.lower() not in ("http", "https"):
                result.warnings.append(
                    f"{record.source_id}: photo is not an http(s) URL: {url}"
                )

    async def _process_record(
        self,
        record: CanonicalImportRecord,
        config: ImportConfig,
        detector: DuplicateDetector,
        entities: EntityCreationPipeline,
        result: ImportSessionResult,
    ) -> None:
        log = self._logger.bind(source_id=record.source_id)
        try:
            if config.skip_duplicates:
                check = await detector.check(record, config.duplicate_check_radius)
                if check.is_duplicate:
                    result.record_skip(
                        record.source_id,
                        check.duplicate_id,
                        f"Skipped duplicate: {record.title} near {check.duplicate_id}",
                    )
                    log.info(
                        "record_skipped_duplicate",
                        duplicate_of=check.duplicate_id,
                        reason=check.reason,
                    )
                    return

            if config.dry_run:
                # A dry-run record stops at the last check it went through.
                result.record_success(
                    RecordOutcome(
                        source_id=record.source_id,
                        state=(
                            RecordState.DUPLICATE_CHECKED
                            if config.skip_duplicates
                            else RecordState.VALIDATED
                        ),
                        message="Dry run: no submission created",
                    )
                )
                log.debug("record_dry_run")
                return

            outcome, _ = await entities.create(record)
        except MassImportError as exc:
            result.record_failure(record.source_id, exc.message)
            log.warning("record_failed", error=str(exc))
            return
        except Exception as exc:
            result.record_failure(record.source_id, f"Unexpected error: {exc}")
            log.exception("record_failed_unexpectedly")
            return
        finally:
            # Entities written before a failure still count as created.
            created = entities.take_created()
            result.created_submission_ids.extend(created.submission_ids)
            result.created_artist_ids.extend(created.artist_ids)
            result.created_artwork_ids.extend(created.artwork_ids)

        result.record_success(outcome)
        log.info(
            "record_imported",
            state=outcome.state.value,
            submission_id=outcome.submission_id,
            artwork_id=outcome.artwork_id,
        )

    async def _record_audit(
        self,
        result: ImportSessionResult,
        config: ImportConfig,
        session_id: str,
    ) -> None:
        metadata = {
            "sessionId": session_id,
            "importResult": result.to_summary(),
            "config": config.audit_summary(),
        }
        try:
            await call_with_timeout(
                self._audit_sink.record(AUDIT_ENTITY_TYPE, AUDIT_ENTITY_ID, AUDIT_ACTION, metadata),
                self._settings.storage_timeout_seconds,
                operation="audit_record",
                provider_name=self._audit_sink.get_provider_name(),
            )
        except MassImportError as exc:
            result.warnings.append(f"Audit log failed: {exc.message}")
            self._logger.warning("audit_record_failed", error=str(exc))
