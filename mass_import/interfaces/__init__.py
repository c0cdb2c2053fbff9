"""Abstract collaborator interfaces consumed by the import pipeline."""

from mass_import.interfaces.audit_sink import IAuditSink
from mass_import.interfaces.catalog_store import ICatalogStore

__all__ = ["IAuditSink", "ICatalogStore"]
