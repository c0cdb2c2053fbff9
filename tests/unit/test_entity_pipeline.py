"""Unit tests for EntityCreationPipeline."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from mass_import.models.session import ImportConfig, RecordState
from mass_import.pipeline.entity_pipeline import APPROVAL_NOTE, EntityCreationPipeline
from mass_import.utils.errors import StorageError
from tests.conftest import IMPORTER_ID, make_record


def _config(**overrides) -> ImportConfig:
    data = {"importer_identity": IMPORTER_ID, "source_name": "osm-vancouver", **overrides}
    return ImportConfig(**data)


def _submissions(mock_store, submission_type: str) -> list[dict]:
    return [
        call.args[0]
        for call in mock_store.create_submission.call_args_list
        if call.args[0]["submission_type"] == submission_type
    ]


class TestPendingReview:
    @pytest.mark.asyncio
    async def test_creates_artist_and_artwork_submissions(self, mock_store) -> None:
        pipeline = EntityCreationPipeline(mock_store, _config())

        outcome, artist = await pipeline.create(make_record(source_id="osm-1"))

        assert outcome.state is RecordState.PENDING_REVIEW
        assert outcome.submission_id == "sub-2"
        assert outcome.artwork_id is None
        assert artist.created is True
        assert artist.submission_id == "sub-1"
        assert artist.artist_id is None
        mock_store.approve_submission.assert_not_called()

        [artist_sub] = _submissions(mock_store, "new_artist")
        assert artist_sub["new_data"] == {"name": "Jane Doe"}
        assert artist_sub["verification_status"] == "pending"

        [artwork_sub] = _submissions(mock_store, "new_artwork")
        assert artwork_sub["notes"] == "Mass import from osm-vancouver. Source ID: osm-1"
        assert artwork_sub["submitter"] == IMPORTER_ID
        assert artwork_sub["artist_id"] == "sub-1"
        assert artwork_sub["lat"] == pytest.approx(49.2827)
        assert artwork_sub["new_data"]["title"] == "Bronze Horse"
        assert artwork_sub["new_data"]["source_type"] == "osm-import"
        assert artwork_sub["verification_status"] == "pending"

    @pytest.mark.asyncio
    async def test_existing_artist_is_referenced(self, mock_store) -> None:
        mock_store.find_artist_by_name.return_value = "artist-42"
        pipeline = EntityCreationPipeline(mock_store, _config())

        outcome, artist = await pipeline.create(make_record())

        assert artist.created is False
        assert outcome.artist_id == "artist-42"
        assert _submissions(mock_store, "new_artist") == []
        assert _submissions(mock_store, "new_artwork")[0]["artist_id"] == "artist-42"

    @pytest.mark.asyncio
    async def test_no_artist_name(self, mock_store) -> None:
        pipeline = EntityCreationPipeline(mock_store, _config())

        outcome, artist = await pipeline.create(make_record(artist_name=None))

        assert artist is None
        mock_store.find_artist_by_name.assert_not_called()
        assert _submissions(mock_store, "new_artwork")[0]["artist_id"] is None

    @pytest.mark.asyncio
    async def test_create_artists_disabled(self, mock_store) -> None:
        pipeline = EntityCreationPipeline(mock_store, _config(create_artists=False))

        _, artist = await pipeline.create(make_record())

        assert artist is None
        mock_store.find_artist_by_name.assert_not_called()


class TestArtistMemoisation:
    @pytest.mark.asyncio
    async def test_same_unknown_artist_submitted_once(self, mock_store) -> None:
        pipeline = EntityCreationPipeline(mock_store, _config())

        _, first = await pipeline.create(make_record(source_id="a", artist_name="Jane Doe"))
        _, second = await pipeline.create(make_record(source_id="b", artist_name="  JANE doe"))

        assert first.created is True
        assert second.created is False
        assert second.submission_id == first.submission_id
        assert len(_submissions(mock_store, "new_artist")) == 1
        assert mock_store.find_artist_by_name.await_count == 1
        artworks = _submissions(mock_store, "new_artwork")
        assert artworks[0]["artist_id"] == artworks[1]["artist_id"] == first.submission_id


class TestAutoApprove:
    @pytest.mark.asyncio
    async def test_approves_artist_and_artwork(self, mock_store) -> None:
        pipeline = EntityCreationPipeline(mock_store, _config(auto_approve=True))

        outcome, artist = await pipeline.create(make_record())

        assert outcome.state is RecordState.AUTO_APPROVED
        assert outcome.artwork_id == "entity-2"
        assert artist.artist_id == "entity-1"
        assert outcome.artist_id == "entity-1"
        assert mock_store.approve_submission.await_count == 2
        mock_store.approve_submission.assert_any_await("sub-2", IMPORTER_ID, APPROVAL_NOTE)
        artwork_sub = _submissions(mock_store, "new_artwork")[0]
        assert artwork_sub["verification_status"] == "verified"
        assert artwork_sub["artist_id"] == "entity-1"

    @pytest.mark.asyncio
    async def test_refused_approval_raises(self, mock_store) -> None:
        mock_store.approve_submission.return_value = False
        pipeline = EntityCreationPipeline(mock_store, _config(auto_approve=True))

        with pytest.raises(StorageError, match="could not be approved"):
            await pipeline.create(make_record(artist_name=None))


class TestFailures:
    @pytest.mark.asyncio
    async def test_store_exception_becomes_storage_error(self, mock_store) -> None:
        mock_store.create_submission.side_effect = RuntimeError("constraint failed")
        pipeline = EntityCreationPipeline(mock_store, _config())

        with pytest.raises(StorageError, match="create_submission failed"):
            await pipeline.create(make_record(artist_name=None))

    @pytest.mark.asyncio
    async def test_timeout(self, mock_store) -> None:
        async def _hang(name):
            await asyncio.sleep(5)

        mock_store.find_artist_by_name = AsyncMock(side_effect=_hang)
        pipeline = EntityCreationPipeline(mock_store, _config(), timeout_seconds=0.01)

        with pytest.raises(StorageError, match="find_artist_by_name timed out"):
            await pipeline.create(make_record())


class TestCreatedJournal:
    @pytest.mark.asyncio
    async def test_journal_in_write_order_and_reset(self, mock_store) -> None:
        pipeline = EntityCreationPipeline(mock_store, _config(auto_approve=True))

        await pipeline.create(make_record())
        created = pipeline.take_created()

        assert created.submission_ids == ["sub-1", "sub-2"]
        assert created.artist_ids == ["entity-1"]
        assert created.artwork_ids == ["entity-2"]
        assert pipeline.take_created().submission_ids == []

    @pytest.mark.asyncio
    async def test_artist_kept_when_artwork_write_fails(self, mock_store) -> None:
        mock_store.create_submission.side_effect = ["sub-1", RuntimeError("disk full")]
        pipeline = EntityCreationPipeline(mock_store, _config(auto_approve=True))

        with pytest.raises(StorageError):
            await pipeline.create(make_record())

        created = pipeline.take_created()
        assert created.submission_ids == ["sub-1"]
        assert created.artist_ids == ["entity-1"]
        assert created.artwork_ids == []
