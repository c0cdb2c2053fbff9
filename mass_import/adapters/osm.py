"""OpenStreetMap extract adapter (``osm-import``).

Accepts the two shapes OSM extracts usually come in:

* a GeoJSON ``Feature`` with a ``Point`` geometry (``[lon, lat]``) and the
  OSM tags under ``properties`` -- what osmtogeojson and most export tools
  produce;
* a raw Overpass API element (``{"type": "node", "id": 1, "lat": ..,
  "lon": .., "tags": {..}}``).

OSM tags are kept as the record's tags (they already are key/value
metadata); well-known keys are additionally lifted into canonical fields.
"""

from __future__ import annotations

from typing import Any, Mapping

from mass_import.adapters.common import (
    first_present,
    first_text,
    parse_coordinate,
    parse_year,
    scalar_tags,
    split_multi_value,
)
from mass_import.adapters.registry import register_adapter
from mass_import.models.records import SourceType
from mass_import.utils.errors import AdapterError

_COMMONS_URL = "https://commons.wikimedia.org/wiki/"


def _coordinates(blob: Mapping[str, Any]) -> tuple[float | None, float | None]:
    geometry = blob.get("geometry")
    if isinstance(geometry, Mapping):
        if geometry.get("type") != "Point":
            raise AdapterError(
                f"Only Point geometries are supported, got {geometry.get('type')!r}",
                provider_name=SourceType.OSM_IMPORT.value,
            )
        coords = geometry.get("coordinates")
        if isinstance(coords, (list, tuple)) and len(coords) >= 2:
            return parse_coordinate(coords[1]), parse_coordinate(coords[0])
        return None, None
    # Overpass elements carry lat/lon at the top level; ways/relations
    # exported with "out center" put them under "center".
    center = blob.get("center") if isinstance(blob.get("center"), Mapping) else blob
    return parse_coordinate(center.get("lat")), parse_coordinate(center.get("lon"))


def _osm_identity(blob: Mapping[str, Any], props: Mapping[str, Any]) -> tuple[str | None, str | None]:
    """Return (osm_type, osm_id) from ``@id``/``id`` fields."""
    raw_id = first_present(props, "@id", "id") or blob.get("id")
    if raw_id is None:
        return None, None
    text = str(raw_id)
    if "/" in text:
        osm_type, _, osm_id = text.partition("/")
        return osm_type, osm_id
    element_type = blob.get("type") if blob.get("type") in ("node", "way", "relation") else None
    return element_type, text


def _address(props: Mapping[str, Any]) -> str | None:
    full = first_text(props, "addr:full")
    if full:
        return full
    parts = [first_text(props, "addr:housenumber"), first_text(props, "addr:street")]
    joined = " ".join(p for p in parts if p)
    return joined or None


def _photos(props: Mapping[str, Any]) -> list[str]:
    photos = split_multi_value(props.get("image"))
    for name in split_multi_value(props.get("wikimedia_commons")):
        photos.append(name if name.startswith("http") else _COMMONS_URL + name.replace(" ", "_"))
    return photos


@register_adapter(SourceType.OSM_IMPORT)
def map_osm_feature(blob: Mapping[str, Any]) -> dict[str, Any]:
    """Map a GeoJSON feature or Overpass element to a canonical-shape dict."""
    props = blob.get("properties")
    if not isinstance(props, Mapping):
        props = blob.get("tags") if isinstance(blob.get("tags"), Mapping) else {}

    lat, lon = _coordinates(blob)
    osm_type, osm_id = _osm_identity(blob, props)
    artwork_type = first_text(props, "artwork_type", "historic", "memorial")

    title = first_text(props, "name", "title", "name:en")
    if title is None:
        title = f"Untitled {artwork_type}" if artwork_type else "Untitled artwork"

    tags = scalar_tags(props)
    tags.setdefault("tourism", "artwork")

    return {
        "source_id": f"osm-{osm_type}-{osm_id}" if osm_type and osm_id else (
            f"osm-{osm_id}" if osm_id else None
        ),
        "title": title,
        "artist_name": first_text(props, "artist_name", "artist", "artist:name", "created_by"),
        "year_created": parse_year(first_present(props, "start_date", "year")),
        "medium": first_text(props, "material"),
        "dimensions": first_text(props, "dimensions"),
        "description": first_text(props, "description", "inscription"),
        "lat": lat,
        "lon": lon,
        "address": _address(props),
        "neighborhood": first_text(props, "addr:suburb", "addr:neighbourhood"),
        "city": first_text(props, "addr:city"),
        "region": first_text(props, "addr:province", "addr:state"),
        "country": first_text(props, "addr:country"),
        "photos": _photos(props),
        "tags": tags,
        "metadata": {
            "osm_type": osm_type,
            "osm_id": osm_id,
            "wikidata": first_text(props, "wikidata"),
        },
    }
