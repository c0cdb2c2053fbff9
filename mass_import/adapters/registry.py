"""Source-type dispatch for record adapters.

Each source type has exactly one adapter: a pure function that takes a raw
source blob (one row of an export, one GeoJSON feature, ...) and returns a
dict in the canonical record shape.  Adapters register themselves with
:func:`register_adapter`; callers go through :func:`map_record` (lenient,
returns the dict so the orchestrator can report validation failures per
record) or :func:`adapt_record` (strict, returns a validated
CanonicalImportRecord).
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

import pydantic
import structlog

from mass_import.models.records import CanonicalImportRecord, SourceType
from mass_import.utils.errors import AdapterError

logger = structlog.get_logger(logger_name=__name__)

RecordAdapter = Callable[[Mapping[str, Any]], dict[str, Any]]

ADAPTERS: dict[SourceType, RecordAdapter] = {}


def register_adapter(source_type: SourceType) -> Callable[[RecordAdapter], RecordAdapter]:
    """Decorator registering ``fn`` as the adapter for ``source_type``."""

    def _decorator(fn: RecordAdapter) -> RecordAdapter:
        if source_type in ADAPTERS and ADAPTERS[source_type] is not fn:
            raise ValueError(f"An adapter is already registered for {source_type.value}")
        ADAPTERS[source_type] = fn
        return fn

    return _decorator


def get_adapter(source_type: SourceType | str) -> RecordAdapter:
    """Return the adapter for ``source_type``.

    Raises
    ------
    AdapterError
        If the source type is unknown or has no adapter.
    """
    try:
        parsed = SourceType.parse(source_type)
    except ValueError as exc:
        raise AdapterError(f"Unknown source type: {source_type!r}") from exc
    adapter = ADAPTERS.get(parsed)
    if adapter is None:
        raise AdapterError(f"No adapter registered for {parsed.value}")
    return adapter


def map_record(source_type: SourceType | str, blob: Any) -> dict[str, Any]:
    """Map one source blob into a canonical-shape dict without validating it.

    The returned dict always carries ``source_type``.

    Raises
    ------
    AdapterError
        If the blob is not a mapping or the adapter cannot interpret it.
    """
    adapter = get_adapter(source_type)
    if not isinstance(blob, Mapping):
        raise AdapterError(
            f"Expected a JSON object, got {type(blob).__name__}",
            provider_name=SourceType.parse(source_type).value,
        )
    mapped = adapter(blob)
    mapped["source_type"] = SourceType.parse(source_type).value
    return mapped


def adapt_record(source_type: SourceType | str, blob: Any) -> CanonicalImportRecord:
    """Map and validate one source blob.

    Raises
    ------
    AdapterError
        If mapping fails or the mapped record is not valid.
    """
    mapped = map_record(source_type, blob)
    try:
        return CanonicalImportRecord.model_validate(mapped)
    except pydantic.ValidationError as exc:
        issues = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        ]
        source_id = mapped.get("source_id")
        raise AdapterError(
            f"Mapped record is invalid: {'; '.join(issues)}",
            provider_name=SourceType.parse(source_type).value,
            source_id=str(source_id) if source_id else None,
            issues=issues,
        ) from exc


def map_records(
    source_type: SourceType | str,
    blobs: list[Any],
) -> tuple[list[dict[str, Any]], list[tuple[str, str]]]:
    """Map a whole export, collecting per-blob adapter failures.

    Returns
    -------
    tuple
        ``(mapped_records, failures)``; each failure is a
        ``(label, message)`` pair where the label is the blob's position,
        ``record[<index>]``.
    """
    mapped: list[dict[str, Any]] = []
    failures: list[tuple[str, str]] = []
    for index, blob in enumerate(blobs):
        try:
            mapped.append(map_record(source_type, blob))
        except AdapterError as exc:
            failures.append((f"record[{index}]", exc.message))
            logger.warning("record_adapter_failed", index=index, error=str(exc))
        except Exception as exc:
            failures.append((f"record[{index}]", f"Could not map record: {exc}"))
            logger.exception("record_adapter_crashed", index=index)
    return mapped, failures
