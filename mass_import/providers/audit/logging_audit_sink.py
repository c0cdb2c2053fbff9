"""Audit sink that writes entries to the structured log.

Used when no audit database is configured.  Entries go out as one
``audit_entry_recorded`` event, so JSON log shipping keeps them.
"""

from __future__ import annotations

from typing import Any

import structlog

from mass_import.interfaces.audit_sink import IAuditSink

logger = structlog.get_logger(logger_name=__name__)


class LoggingAuditSink(IAuditSink):
    """Emit each audit entry as a structlog event."""

    def __init__(self) -> None:
        self._entries: list[dict[str, Any]] = []

    @property
    def entries(self) -> list[dict[str, Any]]:
        """Entries recorded by this sink instance, oldest first."""
        return list(self._entries)

    async def record(
        self,
        entity_type: str,
        entity_id: str,
        action: str,
        metadata: dict[str, Any],
    ) -> None:
        entry = {
            "entity_type": entity_type,
            "entity_id": entity_id,
            "action": action,
            "metadata": metadata,
        }
        self._entries.append(entry)
        logger.info("audit_entry_recorded", **entry)

    def get_provider_name(self) -> str:
        return "logging_audit"
