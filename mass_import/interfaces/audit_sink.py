"""Abstract base class for audit-log sinks.

The import pipeline emits exactly one audit entry per session.  Durable
storage of that entry is the sink's business; the pipeline only needs
``record`` to accept it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class IAuditSink(ABC):
    """Contract for side-effecting audit-log sinks."""

    @abstractmethod
    async def record(
        self,
        entity_type: str,
        entity_id: str,
        action: str,
        metadata: dict[str, Any],
    ) -> None:
        """Record one audit event.

        Parameters
        ----------
        entity_type:
            Kind of entity the event concerns (``"submission"``).
        entity_id:
            Identifier of the entity (``"mass_import_session"``).
        action:
            What happened (``"create"``).
        metadata:
            JSON-serialisable payload describing the event.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this sink."""
