"""Text normalization and edit-distance similarity for import records.

This module handles three distinct concerns:

1. **Comparison normalization** -- Lower-cases and trims titles and artist
   names so that "Bronze Horse " and "bronze horse" compare as equal.

2. **Edit-distance similarity** -- ``1 - distance / max(len(a), len(b))``
   over the normalized strings, with the Levenshtein distance computed by
   rapidfuzz.  Two empty strings are treated as identical (score 1.0); see
   DESIGN.md for why that degenerate case is kept.

3. **Tag normalization** -- Converts free-form source values such as
   "Stainless Steel / Glass" into tag-friendly tokens
   ("stainless_steel_glass") for the record adapters.
"""

import re

from rapidfuzz.distance import Levenshtein

# Multi-artist credits in source dumps use commas, ampersands, or "and".
_ARTIST_SEPARATORS = re.compile(r"\s*(?:,|&|\band\b)\s*", re.IGNORECASE)


def normalize_for_comparison(value: str | None) -> str:
    """Lower-case and trim a string for similarity comparison.

    ``None`` normalizes to the empty string so optional fields can be
    compared without special-casing at every call site.
    """
    if value is None:
        return ""
    return re.sub(r"\s+", " ", value.strip().lower())


def string_similarity(a: str | None, b: str | None) -> float:
    """Return the normalized edit-distance similarity of two strings.

    Args:
        a: First string (or None).
        b: Second string (or None).

    Returns:
        1.0 for equal normalized strings (including both empty), 0.0 when
        exactly one side is empty, otherwise
        ``1 - levenshtein(a, b) / max(len(a), len(b))``.
    """
    left = normalize_for_comparison(a)
    right = normalize_for_comparison(b)

    if left == right:
        return 1.0
    if not left or not right:
        return 0.0

    distance = Levenshtein.distance(left, right)
    return 1.0 - distance / max(len(left), len(right))


def split_artist_names(raw: str | None) -> list[str]:
    """Split a multi-artist credit into individual names.

    "Jane Doe & John Roe, Studio X" -> ["Jane Doe", "John Roe", "Studio X"]
    """
    if not raw:
        return []
    return [part.strip() for part in _ARTIST_SEPARATORS.split(raw) if part.strip()]


def normalize_tag_value(text: str) -> str:
    """Normalize free text into an underscore-separated tag token."""
    normalized = text.lower().strip()
    normalized = re.sub(r"[^a-z0-9\s_-]", "", normalized)
    normalized = re.sub(r"[\s-]+", "_", normalized)
    normalized = re.sub(r"_+", "_", normalized)
    return normalized.strip("_")


def clean_optional_text(value: object) -> str | None:
    """Trim a source value into a string, mapping blanks to ``None``."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None
