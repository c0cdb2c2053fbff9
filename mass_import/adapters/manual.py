"""Manual-entry adapter (``manual-entry``).

Manual entries are written by curators directly in the canonical shape, so
this adapter only normalises common key aliases (``latitude``, ``lng``,
``artist``, ``photo_urls``) and leaves validation to the pipeline.
"""

from __future__ import annotations

from typing import Any, Mapping

from mass_import.adapters.common import (
    first_present,
    first_text,
    mapping_field,
    parse_coordinate,
    parse_year,
    url_list,
)
from mass_import.adapters.registry import register_adapter
from mass_import.models.records import SourceType

_PROVIDER = SourceType.MANUAL_ENTRY.value

_CANONICAL_TEXT_FIELDS = (
    "medium", "dimensions", "description", "address",
    "neighborhood", "city", "region", "country",
)


@register_adapter(SourceType.MANUAL_ENTRY)
def map_manual_entry(blob: Mapping[str, Any]) -> dict[str, Any]:
    """Pass a canonical-shape mapping through with key aliases resolved."""
    source_id = first_present(blob, "source_id", "id", "external_id")
    mapped: dict[str, Any] = {
        "source_id": str(source_id).strip() if source_id is not None else None,
        "title": first_text(blob, "title", "name"),
        "artist_name": first_text(blob, "artist_name", "artist", "created_by"),
        "year_created": parse_year(first_present(blob, "year_created", "year")),
        "lat": parse_coordinate(first_present(blob, "lat", "latitude")),
        "lon": parse_coordinate(first_present(blob, "lon", "lng", "longitude")),
        "photos": url_list(first_present(blob, "photos", "photo_urls"), "photos", _PROVIDER),
        "tags": mapping_field(blob, "tags", _PROVIDER),
        "metadata": mapping_field(blob, "metadata", _PROVIDER),
    }
    for field in _CANONICAL_TEXT_FIELDS:
        mapped[field] = first_text(blob, field)
    return mapped
