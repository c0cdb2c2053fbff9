"""Shared pytest fixtures for the mass-import test suite."""

from __future__ import annotations

import logging
import os
import tempfile
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog

from mass_import.config.settings import Settings
from mass_import.interfaces.audit_sink import IAuditSink
from mass_import.interfaces.catalog_store import ICatalogStore
from mass_import.models.records import CandidateArtwork, CanonicalImportRecord
from mass_import.models.session import ImportConfig
from mass_import.providers.catalog.sqlite_catalog_store import SQLiteCatalogStore

IMPORTER_ID = "00000000-0000-0000-0000-000000000002"

# Downtown Vancouver, the reference location used throughout the suite.
VAN_LAT = 49.2827
VAN_LON = -123.1207


def make_record(**overrides: Any) -> CanonicalImportRecord:
    """Build a valid canonical record, overriding any field."""
    data: dict[str, Any] = {
        "source_id": "src-001",
        "title": "Bronze Horse",
        "artist_name": "Jane Doe",
        "lat": VAN_LAT,
        "lon": VAN_LON,
        "source_type": "osm-import",
    }
    data.update(overrides)
    return CanonicalImportRecord(**data)


def make_candidate(**overrides: Any) -> CandidateArtwork:
    data: dict[str, Any] = {
        "id": "art-1",
        "lat": VAN_LAT,
        "lon": VAN_LON,
        "title": "Bronze Horse",
        "primary_artist_name": "Jane Doe",
        "tags": None,
    }
    data.update(overrides)
    return CandidateArtwork(**data)


# ---------------------------------------------------------------------------
# Test isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _restore_logging_config():
    """Undo logging configuration done inside a test (e.g. by the CLI).

    Otherwise loggers stay bound to a stream captured by that test, which
    pytest closes afterwards.
    """
    saved = structlog.get_config()
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    yield
    structlog.configure(**saved)
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    """Settings with defaults only (no .env file) and no timeouts."""
    return Settings(_env_file=None, storage_timeout_seconds=0)


@pytest.fixture
def import_config() -> ImportConfig:
    return ImportConfig(importer_identity=IMPORTER_ID, source_name="test-source")


# ---------------------------------------------------------------------------
# Collaborator doubles
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_store() -> MagicMock:
    """ICatalogStore double with an empty catalog.

    ``create_submission`` hands out sequential ids ``sub-1``, ``sub-2``...
    and ``get_submission_entity_id`` maps ``sub-N`` to ``entity-N``.
    """
    store = MagicMock(spec=ICatalogStore)
    store.get_provider_name.return_value = "mock_catalog"
    store.initialize = AsyncMock()
    store.find_artworks_in_bounds = AsyncMock(return_value=[])
    store.find_artist_by_name = AsyncMock(return_value=None)
    counter = {"n": 0}

    async def _create_submission(data: dict[str, Any]) -> str:
        counter["n"] += 1
        return f"sub-{counter['n']}"

    async def _entity_id(submission_id: str) -> str:
        return submission_id.replace("sub-", "entity-")

    store.create_submission = AsyncMock(side_effect=_create_submission)
    store.approve_submission = AsyncMock(return_value=True)
    store.get_submission_entity_id = AsyncMock(side_effect=_entity_id)
    return store


@pytest.fixture
def mock_audit_sink() -> MagicMock:
    sink = MagicMock(spec=IAuditSink)
    sink.get_provider_name.return_value = "mock_audit"
    sink.record = AsyncMock()
    return sink


# ---------------------------------------------------------------------------
# SQLite
# ---------------------------------------------------------------------------


@pytest.fixture
async def sqlite_store():
    """SQLiteCatalogStore on a temporary database file."""
    tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
    tmp.close()
    store = SQLiteCatalogStore(db_path=tmp.name)
    await store.initialize()
    yield store
    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(tmp.name + suffix):
            os.unlink(tmp.name + suffix)
