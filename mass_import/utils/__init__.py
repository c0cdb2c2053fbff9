"""Utility modules for the mass-import pipeline.

Available utility modules (all re-exported here for convenience):

- **confidence** -- Weighted scoring math and human-readable level mapping
  used by the similarity scorer and duplicate detector.
- **concurrency** -- Caller-enforced timeouts for catalog and audit calls.
- **errors** -- Domain-specific exception hierarchy rooted at MassImportError.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **text_normalizer** -- Comparison normalization, Levenshtein similarity,
  artist-credit splitting and tag-token normalization.
"""

# -- Confidence scoring utilities ------------------------------------------
from mass_import.utils.confidence import (
    ConfidenceLevel,
    calculate_confidence,
    clamp_unit,
    confidence_to_level,
)

# -- Storage call timeouts -------------------------------------------------
from mass_import.utils.concurrency import call_with_timeout

# -- Domain exception hierarchy --------------------------------------------
from mass_import.utils.errors import (
    AdapterError,
    ConfigurationError,
    MassImportError,
    StorageError,
    ValidationError,
)

# -- Structured logging setup ----------------------------------------------
from mass_import.utils.logging import configure_logging, get_logger

# -- Text normalization ----------------------------------------------------
from mass_import.utils.text_normalizer import (
    normalize_for_comparison,
    normalize_tag_value,
    split_artist_names,
    string_similarity,
)

__all__ = [
    "AdapterError",
    "ConfidenceLevel",
    "ConfigurationError",
    "MassImportError",
    "StorageError",
    "ValidationError",
    "calculate_confidence",
    "call_with_timeout",
    "clamp_unit",
    "confidence_to_level",
    "configure_logging",
    "get_logger",
    "normalize_for_comparison",
    "normalize_tag_value",
    "split_artist_names",
    "string_similarity",
]
