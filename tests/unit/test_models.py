"""Unit tests for the mass-import pydantic models."""

from __future__ import annotations

import math

import pydantic
import pytest

from mass_import.models import (
    CanonicalImportRecord,
    ImportConfig,
    ImportSessionResult,
    RecordOutcome,
    RecordState,
    SimilarityWeights,
    SourceType,
)
from tests.conftest import IMPORTER_ID, make_record


class TestSourceType:
    def test_values(self) -> None:
        assert {s.value for s in SourceType} == {
            "crowd-import", "manual-entry", "api-import", "osm-import",
        }

    def test_parse_accepts_underscores(self) -> None:
        assert SourceType.parse("osm_import") is SourceType.OSM_IMPORT
        assert SourceType.parse(" API-IMPORT ") is SourceType.API_IMPORT

    def test_parse_rejects_unknown(self) -> None:
        with pytest.raises(ValueError):
            SourceType.parse("csv-import")


class TestCanonicalImportRecord:
    def test_minimal_record(self) -> None:
        record = CanonicalImportRecord(source_id="x", title="T", lat=1.0, lon=2.0)
        assert record.source_type is SourceType.MANUAL_ENTRY
        assert record.photos == []
        assert record.tags == {}
        assert record.artist_name is None

    def test_frozen(self) -> None:
        record = make_record()
        with pytest.raises(pydantic.ValidationError):
            record.title = "Other"

    def test_strips_whitespace_and_blanks(self) -> None:
        record = make_record(title="  Bronze Horse ", artist_name="   ", city=" ")
        assert record.title == "Bronze Horse"
        assert record.artist_name is None
        assert record.city is None

    @pytest.mark.parametrize(
        "overrides",
        [
            {"source_id": ""},
            {"source_id": "   "},
            {"title": ""},
            {"title": "x" * 201},
            {"lat": 91.0},
            {"lat": -90.5},
            {"lon": 180.5},
            {"lat": math.nan},
            {"lon": math.inf},
        ],
    )
    def test_invalid_records_rejected(self, overrides) -> None:
        with pytest.raises(pydantic.ValidationError):
            make_record(**overrides)

    def test_tag_values_are_stringified(self) -> None:
        record = make_record(tags={"start_date": 1998, "lit": True, "gone": None})
        assert record.tags == {"start_date": "1998", "lit": "true"}

    def test_blank_photos_dropped(self) -> None:
        record = make_record(photos=["https://a/1.jpg", "", "  "])
        assert record.photos == ["https://a/1.jpg"]

    def test_source_type_parsed(self) -> None:
        assert make_record(source_type="crowd_import").source_type is SourceType.CROWD_IMPORT


class TestImportConfig:
    def test_defaults(self) -> None:
        config = ImportConfig(importer_identity=IMPORTER_ID, source_name="s")
        assert config.batch_size == 50
        assert config.duplicate_check_radius == 500.0
        assert config.skip_duplicates is True
        assert config.create_artists is True
        assert config.auto_approve is False
        assert config.dry_run is False

    @pytest.mark.parametrize(
        "overrides",
        [
            {"batch_size": 0},
            {"batch_size": 1001},
            {"duplicate_check_radius": 0},
            {"importer_identity": ""},
            {"source_name": "  "},
        ],
    )
    def test_invalid(self, overrides) -> None:
        data = {"importer_identity": IMPORTER_ID, "source_name": "s", **overrides}
        with pytest.raises(pydantic.ValidationError):
            ImportConfig(**data)

    def test_audit_summary_keys(self) -> None:
        config = ImportConfig(importer_identity=IMPORTER_ID, source_name="osm")
        assert config.audit_summary()["sourceName"] == "osm"
        assert "importerIdentity" not in config.audit_summary()


class TestSimilarityWeights:
    def test_defaults(self) -> None:
        assert SimilarityWeights().as_list() == [0.4, 0.2, 0.4, 0.0]

    def test_zero_total_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            SimilarityWeights(title=0, artist=0, location=0, tags=0)


class TestImportSessionResult:
    def test_failure_message_names_record(self) -> None:
        result = ImportSessionResult(total_records=1)
        result.record_failure("osm-node-1", "lat: missing")

        assert result.failed_imports == 1
        assert result.errors == ["osm-node-1: lat: missing"]
        assert result.outcomes[0].state is RecordState.FAILED

    def test_skip(self) -> None:
        result = ImportSessionResult()
        result.record_skip("a", "art-9", "Skipped duplicate: T near art-9")

        assert result.duplicates_skipped == 1
        assert result.warnings == ["Skipped duplicate: T near art-9"]
        assert result.outcomes[0].duplicate_of == "art-9"

    def test_summary_shape(self) -> None:
        result = ImportSessionResult(total_records=2)
        result.record_success(RecordOutcome(source_id="a", state=RecordState.PENDING_REVIEW))
        summary = result.to_summary()

        assert set(summary) == {
            "totalRecords", "successfulImports", "duplicatesSkipped", "failedImports",
            "createdArtworkIds", "createdArtistIds", "createdSubmissionIds",
            "errors", "warnings", "processingTimeMs",
        }
        assert summary["successfulImports"] == 1
