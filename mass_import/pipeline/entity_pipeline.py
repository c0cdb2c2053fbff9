"""Entity creation for records that passed the duplicate check.

For each record:

    (a) resolve the artist: existing active artist by exact
        case-insensitive name, else a ``new_artist`` submission
        (approved immediately under auto-approve);
    (b) create the ``new_artwork`` submission referencing that artist;
    (c) under auto-approve, approve it and fetch the live artwork id.

Artist resolution is memoised for the lifetime of one pipeline instance
(one session), keyed by the normalised name, so an unknown artist shared
by many records is submitted once.
"""

from __future__ import annotations

from typing import Any

import structlog

from mass_import.interfaces.catalog_store import ICatalogStore
from mass_import.models.records import CanonicalImportRecord
from mass_import.models.session import ImportConfig, RecordOutcome, RecordState
from mass_import.utils.concurrency import call_with_timeout
from mass_import.utils.errors import StorageError
from mass_import.utils.text_normalizer import normalize_for_comparison

logger = structlog.get_logger(logger_name=__name__)

APPROVAL_NOTE = "Auto-approved mass import"


class ArtistResolution:
    """How one artist name was resolved within a session."""

    __slots__ = ("artist_id", "submission_id", "created")

    def __init__(
        self,
        artist_id: str | None,
        submission_id: str | None = None,
        created: bool = False,
    ) -> None:
        self.artist_id = artist_id
        self.submission_id = submission_id
        self.created = created

    @property
    def reference(self) -> str | None:
        """Id the artwork submission should point at."""
        return self.artist_id or self.submission_id


class CreatedEntities:
    """Ids written to the store, in write order."""

    __slots__ = ("submission_ids", "artist_ids", "artwork_ids")

    def __init__(self) -> None:
        self.submission_ids: list[str] = []
        self.artist_ids: list[str] = []
        self.artwork_ids: list[str] = []


class EntityCreationPipeline:
    """Creates artist and artwork submissions through the catalog store.

    Parameters
    ----------
    store:
        Catalog store receiving the submissions.
    config:
        Session configuration (auto-approve, artist creation, identity).
    timeout_seconds:
        Caller-enforced timeout applied to every store call.
    """

    def __init__(
        self,
        store: ICatalogStore,
        config: ImportConfig,
        timeout_seconds: float | None = None,
    ) -> None:
        self._store = store
        self._config = config
        self._timeout_seconds = timeout_seconds
        self._artists: dict[str, ArtistResolution] = {}
        self._created = CreatedEntities()

    def take_created(self) -> CreatedEntities:
        """Return the ids written since the last call and start a new journal.

        Ids are journaled as soon as the store returns them, so a record that
        fails halfway still reports the entities it did create.
        """
        created, self._created = self._created, CreatedEntities()
        return created

    async def _call(self, awaitable: Any, operation: str) -> Any:
        return await call_with_timeout(
            awaitable,
            self._timeout_seconds,
            operation=operation,
            provider_name=self._store.get_provider_name(),
        )

    # ── (a) artist resolution ─────────────────────────────────────────

    async def resolve_artist(self, name: str) -> ArtistResolution:
        """Find or submit the artist called ``name``.

        The first call for a given normalised name does the work; later
        calls in the same session reuse the result and report
        ``created=False``.
        """
        key = normalize_for_comparison(name)
        cached = self._artists.get(key)
        if cached is not None:
            return ArtistResolution(cached.artist_id, cached.submission_id, created=False)

        existing = await self._call(self._store.find_artist_by_name(name), "find_artist_by_name")
        if existing:
            resolution = ArtistResolution(existing)
            self._artists[key] = resolution
            return resolution

        submission_id = await self._call(
            self._store.create_submission({
                "submission_type": "new_artist",
                "submitter": self._config.importer_identity,
                "notes": f"Artist created during mass import from {self._config.source_name}",
                "new_data": {"name": name.strip()},
                "verification_status": self._verification_status(),
            }),
            "create_submission",
        )
        self._created.submission_ids.append(submission_id)

        artist_id: str | None = None
        if self._config.auto_approve:
            await self._approve(submission_id)
            artist_id = await self._call(
                self._store.get_submission_entity_id(submission_id),
                "get_submission_entity_id",
            )
            if artist_id:
                self._created.artist_ids.append(artist_id)

        logger.info(
            "artist_submission_created",
            artist_name=name,
            submission_id=submission_id,
            artist_id=artist_id,
        )
        resolution = ArtistResolution(artist_id, submission_id, created=True)
        self._artists[key] = resolution
        return resolution

    # ── (b) + (c) artwork submission ──────────────────────────────────

    async def create(self, record: CanonicalImportRecord) -> tuple[RecordOutcome, ArtistResolution | None]:
        """Create the submissions for one record.

        Returns
        -------
        tuple
            The record's outcome (``AUTO_APPROVED`` or ``PENDING_REVIEW``)
            and the artist resolution when one happened.

        Raises
        ------
        StorageError
            If any store call fails or times out, or auto-approval is
            refused.
        """
        artist: ArtistResolution | None = None
        if self._config.create_artists and record.artist_name:
            artist = await self.resolve_artist(record.artist_name)

        submission_id = await self._call(
            self._store.create_submission(self._artwork_submission(record, artist)),
            "create_submission",
        )
        self._created.submission_ids.append(submission_id)

        if not self._config.auto_approve:
            return (
                RecordOutcome(
                    source_id=record.source_id,
                    state=RecordState.PENDING_REVIEW,
                    submission_id=submission_id,
                    artist_id=artist.artist_id if artist else None,
                ),
                artist,
            )

        await self._approve(submission_id)
        artwork_id = await self._call(
            self._store.get_submission_entity_id(submission_id),
            "get_submission_entity_id",
        )
        if artwork_id:
            self._created.artwork_ids.append(artwork_id)
        return (
            RecordOutcome(
                source_id=record.source_id,
                state=RecordState.AUTO_APPROVED,
                submission_id=submission_id,
                artwork_id=artwork_id,
                artist_id=artist.artist_id if artist else None,
            ),
            artist,
        )

    async def _approve(self, submission_id: str) -> None:
        approved = await self._call(
            self._store.approve_submission(
                submission_id, self._config.importer_identity, APPROVAL_NOTE
            ),
            "approve_submission",
        )
        if not approved:
            raise StorageError(
                f"Submission {submission_id} could not be approved",
                provider_name=self._store.get_provider_name(),
            )

    def _verification_status(self) -> str:
        return "verified" if self._config.auto_approve else "pending"

    def _artwork_submission(
        self,
        record: CanonicalImportRecord,
        artist: ArtistResolution | None,
    ) -> dict[str, Any]:
        new_data = record.model_dump(
            mode="json",
            exclude={"photos", "tags", "lat", "lon"},
        )
        new_data["source_name"] = self._config.source_name
        return {
            "submission_type": "new_artwork",
            "submitter": self._config.importer_identity,
            "notes": f"Mass import from {self._config.source_name}. Source ID: {record.source_id}",
            "new_data": new_data,
            "verification_status": self._verification_status(),
            "lat": record.lat,
            "lon": record.lon,
            "photos": list(record.photos),
            "tags": dict(record.tags),
            "artist_id": artist.reference if artist else None,
        }
