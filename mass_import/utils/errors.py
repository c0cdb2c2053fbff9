"""Custom exception hierarchy for the mass-import pipeline.

All application exceptions inherit from :class:`MassImportError`, which
carries an optional ``provider_name`` so error handlers can identify which
collaborator (e.g. "sqlite-catalog", "osm-import") caused the failure.

The hierarchy is organized by how the orchestrator treats each failure:

    MassImportError  (base -- catch-all for any mass-import error)
    +-- ValidationError          (bad input record; recorded, non-fatal)
    |   +-- AdapterError         (source blob could not be mapped)
    +-- StorageError             (catalog query/write failure or timeout)
    +-- ConfigurationError       (invalid pipeline configuration; fatal)

Only :class:`ConfigurationError` is allowed to escape a session run.  The
other errors are downgraded by the orchestrator into messages scoped to the
record that triggered them.
"""


class MassImportError(Exception):
    """Base exception for all mass-import errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which collaborator triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[sqlite-catalog] database is locked``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Input errors
# ---------------------------------------------------------------------------

class ValidationError(MassImportError):
    """Raised when an import record fails type, range, or non-empty checks.

    ``source_id`` identifies the offending record when it is known so the
    session result can name it in its error list.  ``issues`` keeps the
    individual failure messages for callers that want them separately.
    """

    def __init__(
        self,
        message: str = "Record validation failed",
        provider_name: str | None = None,
        source_id: str | None = None,
        issues: list[str] | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._source_id = source_id
        self._issues = list(issues or [])

    @property
    def source_id(self) -> str | None:
        return self._source_id

    @property
    def issues(self) -> list[str]:
        return list(self._issues)


class AdapterError(ValidationError):
    """Raised when a source-specific blob cannot be mapped to a canonical record."""

    def __init__(
        self,
        message: str = "Source record could not be adapted",
        provider_name: str | None = None,
        source_id: str | None = None,
        issues: list[str] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            provider_name=provider_name,
            source_id=source_id,
            issues=issues,
        )


# ---------------------------------------------------------------------------
# Collaborator errors
# ---------------------------------------------------------------------------

class StorageError(MassImportError):
    """Raised when a catalog query or write fails or times out.

    Scoped to a single record: the orchestrator records it as that
    record's failure and moves on to the next one.
    """

    def __init__(
        self,
        message: str = "Catalog storage operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(MassImportError):
    """Raised when pipeline configuration is invalid, before any record runs."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
