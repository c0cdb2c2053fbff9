"""Abstract base class for the artwork catalog store.

# ─── ADAPTER PATTERN ─────────────────────────────────────────────────
#
# ICatalogStore is the only way the import pipeline touches the catalog.
# The concrete implementation shipped with the package is
# SQLiteCatalogStore (mass_import/providers/catalog/sqlite_catalog_store.py);
# a production deployment can plug in any backend that honours this
# contract.
#
# All operations are async so network-backed stores fit without changes.
# Implementations raise StorageError (or any exception, which the
# orchestrator's timeout wrapper converts) on failure.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from mass_import.models.records import BoundingBox, CandidateArtwork


class ICatalogStore(ABC):
    """Contract for catalog query and submission primitives."""

    # ── Lifecycle ──────────────────────────────────────────────────────

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables/indices if they don't exist.  Called at startup."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

    # ── Queries ────────────────────────────────────────────────────────

    @abstractmethod
    async def find_artworks_in_bounds(
        self,
        box: BoundingBox,
        status: str = "approved",
    ) -> list[CandidateArtwork]:
        """Range-scan artworks whose coordinates fall inside ``box``.

        Parameters
        ----------
        box:
            Latitude/longitude rectangle to scan.
        status:
            Lifecycle state filter; the duplicate check only ever asks for
            ``"approved"``.

        Returns
        -------
        list[CandidateArtwork]
            Every matching artwork with its primary artist name and tag
            blob.  Order is unspecified; ``distance_m`` is left at 0.
        """

    @abstractmethod
    async def find_artist_by_name(self, name: str) -> str | None:
        """Return the id of an active artist whose name matches exactly,
        ignoring case and surrounding whitespace, or ``None``."""

    @abstractmethod
    async def get_submission_entity_id(self, submission_id: str) -> str | None:
        """Return the artwork or artist id an approved submission produced."""

    # ── Writes ─────────────────────────────────────────────────────────

    @abstractmethod
    async def create_submission(self, data: dict[str, Any]) -> str:
        """Persist a new submission and return its id.

        Parameters
        ----------
        data:
            Contains ``submission_type`` (``"new_artwork"`` or
            ``"new_artist"``), ``submitter``, ``notes``, ``new_data`` (the
            proposed entity fields), ``verification_status`` and optional
            ``lat``, ``lon``, ``photos``, ``tags``, ``artist_id``.
        """

    @abstractmethod
    async def approve_submission(
        self,
        submission_id: str,
        approver_identity: str,
        note: str,
    ) -> bool:
        """Approve a pending submission, materialising its entity.

        Returns
        -------
        bool
            ``True`` when the submission was pending and is now approved.
        """
