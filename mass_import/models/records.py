"""Import record and catalog candidate models.

Defines the canonical record shape every source adapter produces, the
bounding box used for the spatial range scan, and the read-only candidate
projection the catalog store returns for duplicate checks.  All models use
frozen config: records are never mutated once they enter the pipeline.

Key relationships:
    - Adapters (mass_import/adapters/) map source blobs to CanonicalImportRecord
    - CandidateLocator fetches CandidateArtwork rows inside a BoundingBox
    - SimilarityScorer compares one CanonicalImportRecord to one CandidateArtwork
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SourceType(str, Enum):  # noqa: UP042 — StrEnum requires Python 3.11+
    """Origin of an import record.

    Each value selects one adapter in mass_import/adapters/registry.py.
    """

    CROWD_IMPORT = "crowd-import"    # Crowd-sourced platform dumps
    MANUAL_ENTRY = "manual-entry"    # Hand-curated, already canonical
    API_IMPORT = "api-import"        # Municipal open-data APIs
    OSM_IMPORT = "osm-import"        # OpenStreetMap GeoJSON extracts

    @classmethod
    def parse(cls, value: str | SourceType) -> SourceType:
        """Accept both ``osm-import`` and the legacy ``osm_import`` spelling."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower().replace("_", "-"))


class CanonicalImportRecord(BaseModel):
    """One artwork record in the shape the pipeline consumes.

    Every optional field is an explicit nullable attribute; adapters fill
    what their source provides and leave the rest as ``None`` or empty.
    Construction performs the pipeline's validation: non-empty
    ``source_id``/``title`` and finite, in-range WGS84 coordinates.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    source_id: str = Field(min_length=1, description="Unique within the source system.")
    title: str = Field(min_length=1, max_length=200)
    artist_name: str | None = None
    year_created: int | None = None
    medium: str | None = None
    dimensions: str | None = None
    description: str | None = None
    lat: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    lon: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)
    address: str | None = None
    neighborhood: str | None = None
    city: str | None = None
    region: str | None = None
    country: str | None = None
    photos: list[str] = Field(default_factory=list)
    tags: dict[str, str] = Field(default_factory=dict)
    source_type: SourceType = SourceType.MANUAL_ENTRY
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator(
        "artist_name", "medium", "dimensions", "description",
        "address", "neighborhood", "city", "region", "country",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def _stringify_tag_values(cls, value: Any) -> Any:
        # Source dumps carry numeric and boolean tag values ("start_date": 1998).
        if isinstance(value, dict):
            return {
                str(k): str(v).lower() if isinstance(v, bool) else str(v)
                for k, v in value.items()
                if v is not None
            }
        return value

    @field_validator("photos", mode="before")
    @classmethod
    def _drop_blank_photos(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [p for p in value if isinstance(p, str) and p.strip()]
        return value

    @field_validator("source_type", mode="before")
    @classmethod
    def _parse_source_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return SourceType.parse(value)
        return value


class BoundingBox(BaseModel):
    """Latitude/longitude rectangle bounding a candidate range scan."""

    model_config = ConfigDict(frozen=True)

    south: float
    north: float
    west: float
    east: float

    def contains(self, lat: float, lon: float) -> bool:
        return self.south <= lat <= self.north and self.west <= lon <= self.east


class CandidateArtwork(BaseModel):
    """Read-only projection of an approved catalog artwork.

    ``tags`` is the raw JSON blob stored with the artwork; the scorer
    parses it lazily.  ``distance_m`` is filled in by the locator after the
    exact Haversine check.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    lat: float
    lon: float
    title: str | None = None
    primary_artist_name: str | None = None
    tags: str | None = None
    distance_m: float = 0.0
