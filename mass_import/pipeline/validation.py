"""Synchronous record validation.

Pure: no storage access, no logging side effects beyond debug events.
A failure names the record's ``source_id`` when one can be read from the
input, otherwise its position in the batch.
"""

from __future__ import annotations

from typing import Any, Mapping

import pydantic

from mass_import.models.records import CanonicalImportRecord
from mass_import.utils.errors import ValidationError


def record_label(raw: Any, index: int) -> str:
    """Best identifier for a record in error messages."""
    if isinstance(raw, CanonicalImportRecord):
        return raw.source_id
    if isinstance(raw, Mapping):
        source_id = raw.get("source_id")
        if source_id is not None and str(source_id).strip():
            return str(source_id).strip()
    return f"record[{index}]"


def validate_record(raw: Any, index: int = 0) -> CanonicalImportRecord:
    """Return ``raw`` as a validated CanonicalImportRecord.

    Parameters
    ----------
    raw:
        A CanonicalImportRecord (accepted as-is) or a canonical-shape mapping.
    index:
        Position of the record in the session input, used when it has no
        usable ``source_id``.

    Raises
    ------
    ValidationError
        If the mapping is missing required fields, has non-finite or
        out-of-range coordinates, or is not a mapping at all.
    """
    label = record_label(raw, index)
    if isinstance(raw, CanonicalImportRecord):
        return raw
    if not isinstance(raw, Mapping):
        raise ValidationError(
            f"Expected a record mapping, got {type(raw).__name__}",
            source_id=label,
        )

    try:
        return CanonicalImportRecord.model_validate(dict(raw))
    except pydantic.ValidationError as exc:
        issues = [
            f"{'.'.join(str(p) for p in err['loc']) or 'record'}: {err['msg']}"
            for err in exc.errors()
        ]
        raise ValidationError(
            f"Invalid record: {'; '.join(issues)}",
            source_id=label,
            issues=issues,
        ) from exc
