"""Catalog store providers.

SQLiteCatalogStore keeps artworks, artists, their links and pending
submissions in data/catalog.db.  It backs the CLI and the integration
tests; production deployments plug their own ICatalogStore in.
"""

from mass_import.providers.catalog.sqlite_catalog_store import SQLiteCatalogStore

__all__ = ["SQLiteCatalogStore"]
