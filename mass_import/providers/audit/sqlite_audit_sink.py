"""SQLite-backed audit sink.

Persists audit entries to ``data/audit.db`` with the metadata payload
stored as JSON.  Follows the same aiosqlite provider pattern as
mass_import/providers/catalog/sqlite_catalog_store.py.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from mass_import.interfaces.audit_sink import IAuditSink

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/audit.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS audit_log (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    entity_type  TEXT NOT NULL,
    entity_id    TEXT NOT NULL,
    action       TEXT NOT NULL,
    metadata     TEXT NOT NULL,
    created_at   TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_audit_entity ON audit_log(entity_type, entity_id);",
]


class SQLiteAuditSink(IAuditSink):
    """SQLite-backed audit log persistence."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the audit_log table and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute("PRAGMA journal_mode=WAL;")
            await db.execute(_CREATE_TABLE_SQL)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("audit_db_initialized", path=str(self._db_path))

    async def record(
        self,
        entity_type: str,
        entity_id: str,
        action: str,
        metadata: dict[str, Any],
    ) -> None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(
                "INSERT INTO audit_log (entity_type, entity_id, action, metadata) "
                "VALUES (?, ?, ?, ?)",
                (entity_type, entity_id, action, json.dumps(metadata, default=str)),
            )
            await db.commit()
        logger.debug("audit_entry_persisted", entity_type=entity_type, action=action)

    async def get_entries(self, entity_id: str | None = None) -> list[dict[str, Any]]:
        """Return stored entries, newest first, with metadata decoded."""
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            if entity_id:
                cursor = await db.execute(
                    "SELECT * FROM audit_log WHERE entity_id = ? ORDER BY id DESC",
                    (entity_id,),
                )
            else:
                cursor = await db.execute("SELECT * FROM audit_log ORDER BY id DESC")
            rows = await cursor.fetchall()
        entries = []
        for row in rows:
            entry = dict(row)
            entry["metadata"] = json.loads(entry["metadata"])
            entries.append(entry)
        return entries

    def get_provider_name(self) -> str:
        return "sqlite_audit"
