"""Crowd-sourced platform dump adapter (``crowd-import``).

Crowd platforms export loosely structured JSON: ``id``, ``name`` or
``title``, an ``artist`` credit, coordinates as ``latitude``/``longitude``,
``lat``/``lng`` or a nested ``location`` object, a list of ``images``
(strings or ``{"url": ...}`` objects) and ``tags`` as either a mapping or a
list of ``"key=value"`` / bare-label strings.
"""

from __future__ import annotations

from typing import Any, Mapping

from mass_import.adapters.common import (
    first_present,
    first_text,
    parse_coordinate,
    parse_year,
    url_list,
)
from mass_import.adapters.registry import register_adapter
from mass_import.models.records import SourceType
from mass_import.utils.errors import AdapterError
from mass_import.utils.text_normalizer import normalize_tag_value

_PROVIDER = SourceType.CROWD_IMPORT.value


def _coordinates(blob: Mapping[str, Any]) -> tuple[float | None, float | None]:
    source = blob.get("location") if isinstance(blob.get("location"), Mapping) else blob
    lat = parse_coordinate(first_present(source, "lat", "latitude"))
    lon = parse_coordinate(first_present(source, "lon", "lng", "longitude"))
    return lat, lon


def _photos(blob: Mapping[str, Any]) -> list[str]:
    return url_list(first_present(blob, "images", "photos", "photo_urls"), "images", _PROVIDER)


def _tags(blob: Mapping[str, Any]) -> dict[str, str]:
    raw = blob.get("tags")
    tags: dict[str, str] = {}
    if isinstance(raw, Mapping):
        for key, value in raw.items():
            if value is not None and str(value).strip():
                tags[str(key)] = str(value).strip()
    elif isinstance(raw, list):
        for item in raw:
            text = str(item).strip()
            if not text:
                continue
            if "=" in text:
                key, _, value = text.partition("=")
                tags[key.strip()] = value.strip()
            else:
                # Bare labels ("mural", "Street Art") become keyword tags.
                tags[f"keyword:{normalize_tag_value(text)}"] = "yes"
    elif raw is not None:
        raise AdapterError(
            f"'tags' must be an object or a list, got {type(raw).__name__}",
            provider_name=_PROVIDER,
        )
    if category := first_text(blob, "category", "type"):
        tags.setdefault("artwork_type", normalize_tag_value(category))
    tags.setdefault("tourism", "artwork")
    return tags


@register_adapter(SourceType.CROWD_IMPORT)
def map_crowd_record(blob: Mapping[str, Any]) -> dict[str, Any]:
    """Map one crowd-platform record to a canonical-shape dict."""
    raw_id = first_present(blob, "id", "uuid", "source_id")
    lat, lon = _coordinates(blob)
    return {
        "source_id": f"crowd-{raw_id}" if raw_id is not None else None,
        "title": first_text(blob, "title", "name"),
        "artist_name": first_text(blob, "artist", "artist_name", "creator"),
        "year_created": parse_year(first_present(blob, "year", "year_created", "date")),
        "medium": first_text(blob, "medium", "material"),
        "dimensions": first_text(blob, "dimensions", "size"),
        "description": first_text(blob, "description", "notes"),
        "lat": lat,
        "lon": lon,
        "address": first_text(blob, "address"),
        "neighborhood": first_text(blob, "neighborhood", "neighbourhood"),
        "city": first_text(blob, "city"),
        "region": first_text(blob, "region", "state", "province"),
        "country": first_text(blob, "country"),
        "photos": _photos(blob),
        "tags": _tags(blob),
        "metadata": {
            "platform_id": raw_id,
            "submitted_by": first_text(blob, "user", "submitted_by"),
            "url": first_text(blob, "url", "permalink"),
        },
    }
