"""Municipal open-data adapter (``api-import``).

Maps rows of the City of Vancouver public-art dataset (the reference
municipal export) into canonical records.  Other municipal datasets with
the same column names map through unchanged.

Columns used: ``registryid``, ``title_of_work``, ``artists`` (registry
artist ids), ``artist_names`` (resolved names, when present), ``type``,
``status``, ``sitename``, ``siteaddress``, ``primarymaterial``, ``url``,
``photourl``, ``ownership``, ``neighbourhood``, ``locationonsite``,
``geo_point_2d`` / ``geom``, ``geo_local_area``, ``descriptionofwork``,
``artistprojectstatement``, ``yearofinstallation``.
"""

from __future__ import annotations

import datetime
from typing import Any, Mapping

from mass_import.adapters.common import (
    first_present,
    first_text,
    parse_coordinate,
    parse_year,
    split_multi_value,
    url_list,
)
from mass_import.adapters.registry import register_adapter
from mass_import.models.records import SourceType
from mass_import.utils.text_normalizer import normalize_tag_value

_PROVIDER = SourceType.API_IMPORT.value
_DATASET_URL = "https://opendata.vancouver.ca/explore/dataset/public-art/table/?refine.registryid="

ARTWORK_TYPES: dict[str, str] = {
    "sculpture": "sculpture",
    "mural": "mural",
    "installation": "installation",
    "monument": "monument",
    "mosaic": "mosaic",
    "painting": "mural",
    "fountain": "sculpture",
    "statue": "statue",
    "relief": "sculpture",
    "memorial": "monument",
}

CONDITIONS: dict[str, str] = {
    "in_place": "good",
    "installed": "good",
    "active": "good",
    "removed": "poor",
    "damaged": "poor",
    "missing": "poor",
    "relocated": "good",
    "restored": "excellent",
}


def map_artwork_type(raw: str) -> str:
    """Map a dataset ``type`` value onto the catalog's artwork_type values."""
    normalized = normalize_tag_value(raw)
    if normalized in ARTWORK_TYPES:
        return ARTWORK_TYPES[normalized]
    for key, value in ARTWORK_TYPES.items():
        if key in normalized:
            return value
    return "sculpture"


def map_condition(raw: str) -> str:
    return CONDITIONS.get(normalize_tag_value(raw), "unknown")


def _coordinates(row: Mapping[str, Any]) -> tuple[float | None, float | None]:
    point = row.get("geo_point_2d")
    if isinstance(point, Mapping):
        return parse_coordinate(point.get("lat")), parse_coordinate(point.get("lon"))
    geom = row.get("geom")
    if isinstance(geom, Mapping):
        geometry = geom.get("geometry", geom)
        coords = geometry.get("coordinates") if isinstance(geometry, Mapping) else None
        if isinstance(coords, (list, tuple)) and len(coords) >= 2:
            return parse_coordinate(coords[1]), parse_coordinate(coords[0])
    return None, None


def _description(row: Mapping[str, Any]) -> str | None:
    parts = []
    if text := first_text(row, "descriptionofwork"):
        parts.append(text)
    if text := first_text(row, "artistprojectstatement"):
        parts.append(f"Artist Statement: {text}")
    if text := first_text(row, "sitename"):
        parts.append(f"Location: {text}")
    if text := first_text(row, "locationonsite"):
        parts.append(f"Site Details: {text}")
    return "\n\n".join(parts) or None


def _tags(row: Mapping[str, Any], registry_id: Any, year: int | None) -> dict[str, str]:
    tags: dict[str, str] = {"tourism": "artwork"}
    if text := first_text(row, "type"):
        tags["artwork_type"] = map_artwork_type(text)
    if text := first_text(row, "primarymaterial"):
        tags["material"] = normalize_tag_value(text)
    if text := first_text(row, "ownership"):
        tags["operator"] = normalize_tag_value(text)
    if text := first_text(row, "status"):
        tags["condition"] = map_condition(text)
    if year is not None:
        tags["start_date"] = str(year)
    tags["source"] = "vancouver-opendata"
    tags["source_license"] = "Open Government Licence - Vancouver"
    if registry_id is not None:
        tags["source_ref"] = f"{_DATASET_URL}{registry_id}"
    return tags


@register_adapter(SourceType.API_IMPORT)
def map_open_data_row(row: Mapping[str, Any]) -> dict[str, Any]:
    """Map one public-art dataset row to a canonical-shape dict."""
    registry_id = first_present(row, "registryid", "registry_id")
    lat, lon = _coordinates(row)

    year = parse_year(row.get("yearofinstallation"))
    # Installation years outside [1800, this year] are data-entry noise.
    if year is not None and not 1800 < year <= datetime.date.today().year:
        year = None

    artist_names = split_multi_value(row.get("artist_names"), separator=",")
    photo = row.get("photourl")
    photos = url_list([photo] if isinstance(photo, Mapping) else photo, "photourl", _PROVIDER)

    return {
        "source_id": f"vancouver-{registry_id}" if registry_id is not None else None,
        "title": first_text(row, "title_of_work") or (
            f"Artwork #{registry_id}" if registry_id is not None else None
        ),
        "artist_name": ", ".join(artist_names) or None,
        "year_created": year,
        "medium": first_text(row, "primarymaterial"),
        "description": _description(row),
        "lat": lat,
        "lon": lon,
        "address": first_text(row, "siteaddress"),
        "neighborhood": first_text(row, "neighbourhood", "geo_local_area"),
        "city": first_text(row, "city") or "Vancouver",
        "region": "British Columbia",
        "country": "Canada",
        "photos": photos,
        "tags": _tags(row, registry_id, year),
        "metadata": {
            "registry_id": registry_id,
            "registry_url": first_text(row, "url"),
            "artist_registry_ids": split_multi_value(row.get("artists"), separator=","),
        },
    }
