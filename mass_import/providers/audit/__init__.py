"""Audit sinks for the once-per-session import audit entry."""

from mass_import.providers.audit.logging_audit_sink import LoggingAuditSink
from mass_import.providers.audit.sqlite_audit_sink import SQLiteAuditSink

__all__ = ["LoggingAuditSink", "SQLiteAuditSink"]
