"""Unit tests for BatchImportOrchestrator with mocked collaborators."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
import structlog

from mass_import.models.session import ImportConfig, RecordOutcome, RecordState
from mass_import.pipeline.orchestrator import (
    AUDIT_ACTION,
    AUDIT_ENTITY_ID,
    AUDIT_ENTITY_TYPE,
    BatchImportOrchestrator,
)
from mass_import.utils.errors import ConfigurationError
from tests.conftest import IMPORTER_ID, VAN_LAT, VAN_LON, make_candidate, make_record


def _config(**overrides) -> ImportConfig:
    data = {"importer_identity": IMPORTER_ID, "source_name": "test-source", **overrides}
    return ImportConfig(**data)


def _raw(source_id: str, **overrides) -> dict:
    data = {"source_id": source_id, "title": f"Artwork {source_id}", "lat": VAN_LAT, "lon": VAN_LON}
    data.update(overrides)
    return data


@pytest.fixture
def make_orchestrator(mock_store, mock_audit_sink, settings):
    def _make(**config_overrides) -> BatchImportOrchestrator:
        return BatchImportOrchestrator(
            mock_store,
            _config(**config_overrides),
            audit_sink=mock_audit_sink,
            settings=settings,
        )

    return _make


# ======================================================================
# Configuration
# ======================================================================


class TestConfiguration:
    @pytest.mark.asyncio
    async def test_invalid_mapping_config_raises_before_processing(
        self, mock_store, mock_audit_sink, settings
    ) -> None:
        orchestrator = BatchImportOrchestrator(
            mock_store,
            {"importer_identity": "", "source_name": "s"},
            audit_sink=mock_audit_sink,
            settings=settings,
        )

        with pytest.raises(ConfigurationError):
            await orchestrator.run([_raw("a")])

        mock_store.find_artworks_in_bounds.assert_not_called()
        mock_audit_sink.record.assert_not_called()

    @pytest.mark.asyncio
    async def test_mapping_config_accepted(self, mock_store, mock_audit_sink, settings) -> None:
        orchestrator = BatchImportOrchestrator(
            mock_store,
            {"importer_identity": IMPORTER_ID, "source_name": "s", "dry_run": True},
            audit_sink=mock_audit_sink,
            settings=settings,
        )
        result = await orchestrator.run([_raw("a")])
        assert result.successful_imports == 1

    @pytest.mark.asyncio
    async def test_cutoff_larger_than_radius_rejected(self, make_orchestrator) -> None:
        orchestrator = make_orchestrator(duplicate_check_radius=30)
        with pytest.raises(ConfigurationError, match="exceeds the search radius"):
            await orchestrator.run([_raw("a")])


# ======================================================================
# Validation
# ======================================================================


class TestValidation:
    @pytest.mark.asyncio
    async def test_invalid_and_valid_counts(self, make_orchestrator) -> None:
        records = [
            _raw("ok-1"),
            _raw("bad-lat", lat=123.0),
            {"title": "No id", "lat": 1.0, "lon": 1.0},
            _raw("ok-2"),
            "not a record",
        ]
        result = await make_orchestrator(dry_run=True).run(records)

        assert result.total_records == 5
        assert result.failed_imports == 3
        assert result.successful_imports == 2
        assert result.errors[0].startswith("bad-lat: ")
        assert result.errors[1].startswith("record[2]: ")
        assert result.errors[2].startswith("record[4]: ")

    @pytest.mark.asyncio
    async def test_missing_coordinates_named_in_error(self, make_orchestrator, mock_store) -> None:
        records = [_raw("good"), {"source_id": "no-coords", "title": "Lost"}]

        result = await make_orchestrator().run(records)

        assert result.failed_imports == 1
        assert result.successful_imports <= 1
        assert any(err.startswith("no-coords: ") for err in result.errors)
        # The invalid record never reaches the candidate search.
        assert mock_store.find_artworks_in_bounds.await_count == 1

    @pytest.mark.asyncio
    async def test_accepts_canonical_records(self, make_orchestrator) -> None:
        result = await make_orchestrator(dry_run=True).run([make_record()])
        assert result.successful_imports == 1

    @pytest.mark.asyncio
    async def test_prior_failures_counted(self, make_orchestrator) -> None:
        result = await make_orchestrator(dry_run=True).run(
            [_raw("a")], prior_failures=[("record[3]", "Expected a JSON object, got str")]
        )
        assert result.total_records == 2
        assert result.failed_imports == 1
        assert result.errors == ["record[3]: Expected a JSON object, got str"]

    @pytest.mark.asyncio
    async def test_non_http_photo_warns(self, make_orchestrator) -> None:
        result = await make_orchestrator(dry_run=True).run(
            [_raw("a", photos=["https://ok/1.jpg", "ftp://old/2.jpg", "/local/3.jpg"])]
        )
        photo_warnings = [w for w in result.warnings if "photo" in w]
        assert len(photo_warnings) == 2
        assert result.successful_imports == 1


# ======================================================================
# Duplicates, dry run and creation
# ======================================================================


class TestRecordFlow:
    @pytest.mark.asyncio
    async def test_duplicate_is_skipped(self, make_orchestrator, mock_store) -> None:
        mock_store.find_artworks_in_bounds.return_value = [make_candidate(id="art-9")]

        result = await make_orchestrator().run([make_record(source_id="x")])

        assert result.duplicates_skipped == 1
        assert result.successful_imports == 0
        assert result.warnings == ["Skipped duplicate: Bronze Horse near art-9"]
        assert result.outcomes[0].state is RecordState.SKIPPED
        mock_store.create_submission.assert_not_called()

    @pytest.mark.asyncio
    async def test_skip_duplicates_disabled(self, make_orchestrator, mock_store) -> None:
        mock_store.find_artworks_in_bounds.return_value = [make_candidate(id="art-9")]

        result = await make_orchestrator(skip_duplicates=False).run([make_record()])

        assert result.duplicates_skipped == 0
        assert result.successful_imports == 1
        mock_store.find_artworks_in_bounds.assert_not_called()

    @pytest.mark.asyncio
    async def test_dry_run_never_writes(self, make_orchestrator, mock_store) -> None:
        result = await make_orchestrator(dry_run=True, auto_approve=True).run(
            [make_record(source_id="a"), make_record(source_id="b", title="Other")]
        )

        assert result.successful_imports == 2
        assert result.created_artwork_ids == []
        assert result.created_artist_ids == []
        assert result.created_submission_ids == []
        mock_store.create_submission.assert_not_called()
        mock_store.approve_submission.assert_not_called()
        assert all(o.state is RecordState.DUPLICATE_CHECKED for o in result.outcomes)

    @pytest.mark.asyncio
    async def test_dry_run_without_duplicate_check_stops_at_validated(
        self, make_orchestrator
    ) -> None:
        result = await make_orchestrator(dry_run=True, skip_duplicates=False).run([_raw("a")])

        assert result.successful_imports == 1
        assert result.outcomes[0].state is RecordState.VALIDATED

    @pytest.mark.asyncio
    async def test_pending_creation_records_submission_ids(self, make_orchestrator) -> None:
        result = await make_orchestrator().run([make_record()])

        assert result.successful_imports == 1
        assert result.created_submission_ids == ["sub-1", "sub-2"]
        assert result.created_artwork_ids == []
        assert result.created_artist_ids == []
        assert result.outcomes[0].state is RecordState.PENDING_REVIEW

    @pytest.mark.asyncio
    async def test_auto_approve_records_entity_ids(self, make_orchestrator) -> None:
        result = await make_orchestrator(auto_approve=True).run(
            [make_record(source_id="a"), make_record(source_id="b", title="Another Piece")]
        )

        assert result.successful_imports == 2
        # Jane Doe is submitted once and reused for the second record.
        assert result.created_artist_ids == ["entity-1"]
        assert result.created_artwork_ids == ["entity-2", "entity-3"]
        assert result.created_submission_ids == ["sub-1", "sub-2", "sub-3"]

    @pytest.mark.asyncio
    async def test_artist_created_before_artwork_failure_is_reported(
        self, make_orchestrator, mock_store
    ) -> None:
        calls = {"n": 0}

        async def _create(data):
            calls["n"] += 1
            if calls["n"] == 2:
                raise RuntimeError("disk full")
            return f"sub-{calls['n']}"

        mock_store.create_submission = AsyncMock(side_effect=_create)

        # Both records share Jane Doe; the first record's artwork write fails.
        result = await make_orchestrator(auto_approve=True).run(
            [make_record(source_id="r1"), make_record(source_id="r2", title="Another Piece")]
        )

        assert result.failed_imports == 1
        assert result.successful_imports == 1
        assert result.created_submission_ids == ["sub-1", "sub-3"]
        assert result.created_artist_ids == ["entity-1"]
        assert result.created_artwork_ids == ["entity-3"]

    @pytest.mark.asyncio
    async def test_refused_artwork_approval_still_reports_submission(
        self, make_orchestrator, mock_store
    ) -> None:
        mock_store.approve_submission = AsyncMock(side_effect=[True, False])

        result = await make_orchestrator(auto_approve=True).run([make_record()])

        assert result.failed_imports == 1
        assert "could not be approved" in result.errors[0]
        assert result.created_submission_ids == ["sub-1", "sub-2"]
        assert result.created_artist_ids == ["entity-1"]
        assert result.created_artwork_ids == []

    @pytest.mark.asyncio
    async def test_storage_failure_is_per_record(self, make_orchestrator, mock_store) -> None:
        calls = {"n": 0}

        async def _flaky(box, status="approved"):
            calls["n"] += 1
            if calls["n"] == 1:
                raise OSError("database is locked")
            return []

        mock_store.find_artworks_in_bounds = AsyncMock(side_effect=_flaky)

        result = await make_orchestrator(dry_run=True).run([_raw("first"), _raw("second")])

        assert result.failed_imports == 1
        assert result.successful_imports == 1
        assert result.errors[0].startswith("first: find_artworks_in_bounds failed")

    @pytest.mark.asyncio
    async def test_unexpected_error_is_per_record(self, make_orchestrator) -> None:
        pending = RecordOutcome(source_id="b", state=RecordState.PENDING_REVIEW, submission_id="s")
        with patch(
            "mass_import.pipeline.orchestrator.EntityCreationPipeline.create",
            new=AsyncMock(side_effect=[KeyError("boom"), (pending, None)]),
        ):
            result = await make_orchestrator().run([_raw("a"), _raw("b")])

        assert result.failed_imports == 1
        assert result.errors[0].startswith("a: Unexpected error")
        assert result.successful_imports == 1


# ======================================================================
# Batching
# ======================================================================


class TestBatching:
    @pytest.mark.asyncio
    async def test_records_processed_in_order_across_batches(
        self, make_orchestrator, mock_store
    ) -> None:
        records = [_raw(f"r{i}") for i in range(7)]

        result = await make_orchestrator(batch_size=3).run(records)

        assert [o.source_id for o in result.outcomes] == [f"r{i}" for i in range(7)]
        assert result.successful_imports == 7

    @pytest.mark.asyncio
    async def test_inter_batch_delay(self, mock_store, mock_audit_sink, settings) -> None:
        settings = settings.model_copy(update={"batch_delay_seconds": 1.0})
        orchestrator = BatchImportOrchestrator(
            mock_store, _config(batch_size=2, dry_run=True),
            audit_sink=mock_audit_sink, settings=settings,
        )
        with patch("mass_import.pipeline.orchestrator.asyncio.sleep", new=AsyncMock()) as sleep:
            await orchestrator.run([_raw(f"r{i}") for i in range(5)])

        # Three batches, two pauses between them.
        assert sleep.await_count == 2
        sleep.assert_awaited_with(1.0)


# ======================================================================
# Audit
# ======================================================================


class TestAudit:
    @pytest.mark.asyncio
    async def test_single_audit_entry(self, make_orchestrator, mock_audit_sink) -> None:
        result = await make_orchestrator(dry_run=True).run([_raw("a")])

        mock_audit_sink.record.assert_awaited_once()
        entity_type, entity_id, action, metadata = mock_audit_sink.record.await_args.args
        assert (entity_type, entity_id, action) == (AUDIT_ENTITY_TYPE, AUDIT_ENTITY_ID, AUDIT_ACTION)
        assert (entity_type, entity_id, action) == ("submission", "mass_import_session", "create")
        assert metadata["importResult"]["totalRecords"] == 1
        assert metadata["importResult"]["processingTimeMs"] == result.processing_time_ms
        assert metadata["config"]["dryRun"] is True
        assert metadata["config"]["sourceName"] == "test-source"

    @pytest.mark.asyncio
    async def test_audit_failure_becomes_warning(self, make_orchestrator, mock_audit_sink) -> None:
        mock_audit_sink.record.side_effect = RuntimeError("audit db offline")

        result = await make_orchestrator(dry_run=True).run([_raw("a")])

        assert result.successful_imports == 1
        assert any(w.startswith("Audit log failed") for w in result.warnings)

    @pytest.mark.asyncio
    async def test_session_id_bound_only_during_run(self, make_orchestrator, mock_audit_sink) -> None:
        seen = {}

        async def _capture(*args):
            seen.update(structlog.contextvars.get_contextvars())

        mock_audit_sink.record.side_effect = _capture

        await make_orchestrator(dry_run=True).run([_raw("a")])

        assert "import_session_id" in seen
        assert seen["source_name"] == "test-source"
        assert "import_session_id" not in structlog.contextvars.get_contextvars()
