"""Small parsing helpers shared by the record adapters."""

from __future__ import annotations

import math
import re
from typing import Any, Mapping

from mass_import.utils.errors import AdapterError
from mass_import.utils.text_normalizer import clean_optional_text

_YEAR_PATTERN = re.compile(r"\b(\d{4})\b")


def first_present(source: Mapping[str, Any], *keys: str) -> Any:
    """Return the first value under ``keys`` that is not None or blank."""
    for key in keys:
        value = source.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def first_text(source: Mapping[str, Any], *keys: str) -> str | None:
    return clean_optional_text(first_present(source, *keys))


def parse_year(value: Any) -> int | None:
    """Extract a four-digit year from ints, "1998", "1998-05-01" or "c. 1998"."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    match = _YEAR_PATTERN.search(str(value))
    return int(match.group(1)) if match else None


def parse_coordinate(value: Any) -> float | None:
    """Coerce a coordinate to float; unparseable values become None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def split_multi_value(value: Any, separator: str = ";") -> list[str]:
    """Split OSM-style ``a;b;c`` values (or pass lists through) into strings."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if v is not None and str(v).strip()]
    return [part.strip() for part in str(value).split(separator) if part.strip()]


def scalar_tags(source: Mapping[str, Any], exclude: set[str] | None = None) -> dict[str, str]:
    """Keep string/number/bool entries of ``source`` as string tags."""
    exclude = exclude or set()
    tags: dict[str, str] = {}
    for key, value in source.items():
        if key in exclude or key.startswith("@") or value is None:
            continue
        if isinstance(value, bool):
            tags[key] = "yes" if value else "no"
        elif isinstance(value, (str, int, float)):
            text = str(value).strip()
            if text:
                tags[key] = text
    return tags


def url_list(value: Any, field: str, provider_name: str) -> list[str]:
    """Normalise a photo field to a list of URL strings.

    Accepts a single URL string, or a list of strings and ``{"url": ...}``
    objects.  Blank entries are dropped.

    Raises
    ------
    AdapterError
        If the field is neither a string nor a list.
    """
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise AdapterError(
            f"'{field}' must be a URL or a list of URLs, got {type(value).__name__}",
            provider_name=provider_name,
        )
    urls: list[str] = []
    for item in value:
        url = item.get("url") if isinstance(item, Mapping) else item
        if isinstance(url, str) and url.strip():
            urls.append(url.strip())
    return urls


def mapping_field(source: Mapping[str, Any], field: str, provider_name: str) -> dict[str, Any]:
    """Copy of the object under ``field``; missing values become ``{}``.

    Raises
    ------
    AdapterError
        If the field holds anything other than an object.
    """
    value = source.get(field)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise AdapterError(
            f"'{field}' must be an object, got {type(value).__name__}",
            provider_name=provider_name,
        )
    return dict(value)
