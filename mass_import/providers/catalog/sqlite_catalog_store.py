"""SQLite-backed artwork catalog store.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Providers (concrete adapter implementing ICatalogStore).
#
# Database: ``data/catalog.db`` with four tables:
#   - artwork          approved/pending artworks with coordinates + tag blob
#   - artists          artist entities (status 'active' once approved)
#   - artwork_artists  artwork ↔ artist links, role 'primary' or 'contributor'
#   - submissions      proposed new_artwork / new_artist entities
#
# Submissions are the only write path the import pipeline uses.
# ``approve_submission`` materialises the proposed entity in one
# transaction, so readers (WAL mode) never observe a half-approved row.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import json
import uuid
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from mass_import.interfaces.catalog_store import ICatalogStore
from mass_import.models.records import BoundingBox, CandidateArtwork

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/catalog.db")

# ── Schema DDL ────────────────────────────────────────────────────────

_CREATE_ARTWORK_TABLE = """\
CREATE TABLE IF NOT EXISTS artwork (
    id            TEXT PRIMARY KEY,
    lat           REAL NOT NULL,
    lon           REAL NOT NULL,
    title         TEXT,
    description   TEXT,
    created_by    TEXT,
    year_created  INTEGER,
    medium        TEXT,
    dimensions    TEXT,
    address       TEXT,
    tags          TEXT,
    photos        TEXT,
    source_type   TEXT,
    source_id     TEXT,
    submission_id TEXT,
    status        TEXT NOT NULL DEFAULT 'approved',
    created_at    TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

_CREATE_ARTISTS_TABLE = """\
CREATE TABLE IF NOT EXISTS artists (
    id            TEXT PRIMARY KEY,
    name          TEXT NOT NULL,
    description   TEXT,
    tags          TEXT,
    submission_id TEXT,
    status        TEXT NOT NULL DEFAULT 'active',
    created_at    TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

_CREATE_ARTWORK_ARTISTS_TABLE = """\
CREATE TABLE IF NOT EXISTS artwork_artists (
    artwork_id  TEXT NOT NULL REFERENCES artwork(id),
    artist_id   TEXT NOT NULL REFERENCES artists(id),
    role        TEXT NOT NULL DEFAULT 'primary',
    PRIMARY KEY (artwork_id, artist_id)
);
"""

_CREATE_SUBMISSIONS_TABLE = """\
CREATE TABLE IF NOT EXISTS submissions (
    id                   TEXT PRIMARY KEY,
    submission_type      TEXT NOT NULL,
    submitter            TEXT NOT NULL,
    notes                TEXT,
    new_data             TEXT NOT NULL,
    verification_status  TEXT NOT NULL DEFAULT 'pending',
    status               TEXT NOT NULL DEFAULT 'pending',
    lat                  REAL,
    lon                  REAL,
    photos               TEXT,
    tags                 TEXT,
    artist_id            TEXT,
    entity_id            TEXT,
    reviewer             TEXT,
    review_note          TEXT,
    created_at           TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    reviewed_at          TEXT
);
"""

_CREATE_INDICES = [
    "CREATE INDEX IF NOT EXISTS idx_artwork_lat_lon ON artwork(lat, lon);",
    "CREATE INDEX IF NOT EXISTS idx_artwork_status ON artwork(status);",
    "CREATE INDEX IF NOT EXISTS idx_artists_name ON artists(LOWER(name));",
    "CREATE INDEX IF NOT EXISTS idx_submissions_status ON submissions(status);",
]

# ── Queries ───────────────────────────────────────────────────────────

# The primary artist comes from the link table; artworks imported without a
# linked artist fall back to their free-text ``created_by`` credit.
_SELECT_IN_BOUNDS = """\
SELECT a.id, a.lat, a.lon, a.title, a.tags,
       COALESCE(
           (SELECT ar.name FROM artwork_artists aa
              JOIN artists ar ON ar.id = aa.artist_id
             WHERE aa.artwork_id = a.id AND aa.role = 'primary'
             LIMIT 1),
           a.created_by
       ) AS primary_artist_name
FROM artwork a
WHERE a.status = ?
  AND a.lat BETWEEN ? AND ?
  AND a.lon BETWEEN ? AND ?;
"""

_SELECT_ARTIST_BY_NAME = """\
SELECT id FROM artists
WHERE LOWER(TRIM(name)) = LOWER(TRIM(?)) AND status = 'active'
ORDER BY created_at
LIMIT 1;
"""

_INSERT_SUBMISSION = """\
INSERT INTO submissions (
    id, submission_type, submitter, notes, new_data, verification_status,
    lat, lon, photos, tags, artist_id
) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
"""

_INSERT_ARTWORK = """\
INSERT INTO artwork (
    id, lat, lon, title, description, created_by, year_created, medium,
    dimensions, address, tags, photos, source_type, source_id,
    submission_id, status
) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
"""

_INSERT_ARTIST = """\
INSERT INTO artists (id, name, description, tags, submission_id, status)
VALUES (?, ?, ?, ?, ?, ?);
"""


def _new_id() -> str:
    return str(uuid.uuid4())


def _json_or_none(value: Any) -> str | None:
    if value is None:
        return None
    return json.dumps(value, sort_keys=True)


class SQLiteCatalogStore(ICatalogStore):
    """SQLite-backed catalog for the CLI and the integration tests."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create all catalog tables and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute("PRAGMA journal_mode=WAL;")
            await db.execute(_CREATE_ARTWORK_TABLE)
            await db.execute(_CREATE_ARTISTS_TABLE)
            await db.execute(_CREATE_ARTWORK_ARTISTS_TABLE)
            await db.execute(_CREATE_SUBMISSIONS_TABLE)
            for idx_sql in _CREATE_INDICES:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("catalog_db_initialized", path=str(self._db_path))

    def get_provider_name(self) -> str:
        return "sqlite_catalog"

    # ── Queries ────────────────────────────────────────────────────────

    async def find_artworks_in_bounds(
        self,
        box: BoundingBox,
        status: str = "approved",
    ) -> list[CandidateArtwork]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                _SELECT_IN_BOUNDS,
                (status, box.south, box.north, box.west, box.east),
            )
            rows = await cursor.fetchall()
        return [
            CandidateArtwork(
                id=row["id"],
                lat=row["lat"],
                lon=row["lon"],
                title=row["title"],
                primary_artist_name=row["primary_artist_name"],
                tags=row["tags"],
            )
            for row in rows
        ]

    async def find_artist_by_name(self, name: str) -> str | None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute(_SELECT_ARTIST_BY_NAME, (name,))
            row = await cursor.fetchone()
        return row[0] if row else None

    async def get_submission_entity_id(self, submission_id: str) -> str | None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute(
                "SELECT entity_id FROM submissions WHERE id = ?", (submission_id,)
            )
            row = await cursor.fetchone()
        return row[0] if row else None

    async def get_submission(self, submission_id: str) -> dict[str, Any] | None:
        """Return a submission row with its JSON columns decoded."""
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM submissions WHERE id = ?", (submission_id,)
            )
            row = await cursor.fetchone()
        if row is None:
            return None
        result = dict(row)
        for key in ("new_data", "photos", "tags"):
            if result.get(key):
                result[key] = json.loads(result[key])
        return result

    async def count_rows(self, table: str) -> int:
        """Row count for one catalog table; used by tooling and tests."""
        if table not in ("artwork", "artists", "artwork_artists", "submissions"):
            msg = f"Unknown catalog table: {table}"
            raise ValueError(msg)
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute(f"SELECT COUNT(*) FROM {table}")  # noqa: S608
            row = await cursor.fetchone()
        return int(row[0])

    # ── Writes ─────────────────────────────────────────────────────────

    async def create_submission(self, data: dict[str, Any]) -> str:
        submission_id = _new_id()
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_INSERT_SUBMISSION, (
                submission_id,
                data["submission_type"],
                data["submitter"],
                data.get("notes"),
                json.dumps(data.get("new_data") or {}, sort_keys=True),
                data.get("verification_status", "pending"),
                data.get("lat"),
                data.get("lon"),
                _json_or_none(data.get("photos")),
                _json_or_none(data.get("tags")),
                data.get("artist_id"),
            ))
            await db.commit()
        logger.debug(
            "submission_created",
            submission_id=submission_id,
            submission_type=data["submission_type"],
        )
        return submission_id

    async def approve_submission(
        self,
        submission_id: str,
        approver_identity: str,
        note: str,
    ) -> bool:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM submissions WHERE id = ? AND status = 'pending'",
                (submission_id,),
            )
            row = await cursor.fetchone()
            if row is None:
                logger.warning("submission_not_pending", submission_id=submission_id)
                return False

            submission = dict(row)
            new_data = json.loads(submission["new_data"])
            if submission["submission_type"] == "new_artist":
                entity_id = await self._materialise_artist(db, submission, new_data)
            else:
                entity_id = await self._materialise_artwork(db, submission, new_data)

            await db.execute(
                "UPDATE submissions SET status = 'approved', entity_id = ?, reviewer = ?, "
                "review_note = ?, verification_status = 'verified', "
                "reviewed_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now') WHERE id = ?",
                (entity_id, approver_identity, note, submission_id),
            )
            await db.commit()

        logger.debug(
            "submission_approved",
            submission_id=submission_id,
            entity_id=entity_id,
            submission_type=submission["submission_type"],
        )
        return True

    async def _materialise_artist(
        self,
        db: aiosqlite.Connection,
        submission: dict[str, Any],
        new_data: dict[str, Any],
    ) -> str:
        artist_id = _new_id()
        tags = submission.get("tags")
        await db.execute(_INSERT_ARTIST, (
            artist_id,
            new_data["name"],
            new_data.get("description"),
            tags,
            submission["id"],
            "active",
        ))
        return artist_id

    async def _materialise_artwork(
        self,
        db: aiosqlite.Connection,
        submission: dict[str, Any],
        new_data: dict[str, Any],
    ) -> str:
        artwork_id = _new_id()
        await db.execute(_INSERT_ARTWORK, (
            artwork_id,
            submission["lat"] if submission["lat"] is not None else new_data.get("lat"),
            submission["lon"] if submission["lon"] is not None else new_data.get("lon"),
            new_data.get("title"),
            new_data.get("description"),
            new_data.get("artist_name"),
            new_data.get("year_created"),
            new_data.get("medium"),
            new_data.get("dimensions"),
            new_data.get("address"),
            submission.get("tags"),
            submission.get("photos"),
            new_data.get("source_type"),
            new_data.get("source_id"),
            submission["id"],
            "approved",
        ))

        artist_id = await self._resolve_artist_reference(db, submission.get("artist_id"))
        if artist_id is not None:
            await db.execute(
                "INSERT OR IGNORE INTO artwork_artists (artwork_id, artist_id, role) "
                "VALUES (?, ?, 'primary')",
                (artwork_id, artist_id),
            )
        return artwork_id

    async def _resolve_artist_reference(
        self,
        db: aiosqlite.Connection,
        reference: str | None,
    ) -> str | None:
        """Map an artist id or an artist submission id to a live artist id.

        A reference to a still-pending artist submission resolves to
        ``None``; the artwork is approved without a link.
        """
        if not reference:
            return None
        cursor = await db.execute("SELECT id FROM artists WHERE id = ?", (reference,))
        row = await cursor.fetchone()
        if row:
            return row[0]
        cursor = await db.execute(
            "SELECT entity_id FROM submissions "
            "WHERE id = ? AND submission_type = 'new_artist' AND status = 'approved'",
            (reference,),
        )
        row = await cursor.fetchone()
        return row[0] if row and row[0] else None

    # ── Seeding ────────────────────────────────────────────────────────

    async def add_artwork(
        self,
        lat: float,
        lon: float,
        title: str | None,
        artist_name: str | None = None,
        tags: dict[str, str] | None = None,
        status: str = "approved",
        artwork_id: str | None = None,
    ) -> str:
        """Insert an artwork directly, creating and linking its artist.

        Used to seed a catalog (tests, fixtures, backfills); the import
        pipeline itself only writes through submissions.
        """
        artwork_id = artwork_id or _new_id()
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_INSERT_ARTWORK, (
                artwork_id, lat, lon, title, None, artist_name, None, None,
                None, None, _json_or_none(tags), None, None, None, None, status,
            ))
            if artist_name:
                cursor = await db.execute(_SELECT_ARTIST_BY_NAME, (artist_name,))
                row = await cursor.fetchone()
                artist_id = row[0] if row else _new_id()
                if row is None:
                    await db.execute(
                        _INSERT_ARTIST, (artist_id, artist_name, None, None, None, "active")
                    )
                await db.execute(
                    "INSERT OR IGNORE INTO artwork_artists (artwork_id, artist_id, role) "
                    "VALUES (?, ?, 'primary')",
                    (artwork_id, artist_id),
                )
            await db.commit()
        return artwork_id

    async def add_artist(self, name: str, status: str = "active") -> str:
        """Insert an artist row directly and return its id."""
        artist_id = _new_id()
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_INSERT_ARTIST, (artist_id, name, None, None, None, status))
            await db.commit()
        return artist_id
