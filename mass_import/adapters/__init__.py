"""Record adapters: source-specific blobs -> canonical import records.

One pure function per source type, selected through the registry:

- **osm-import**    -- OpenStreetMap GeoJSON features / Overpass elements
- **api-import**    -- Municipal open-data exports (Vancouver public art)
- **crowd-import**  -- Crowd-sourced platform dumps
- **manual-entry**  -- Curator-written canonical records

Importing this package registers all four adapters.
"""

from mass_import.adapters.registry import (
    ADAPTERS,
    adapt_record,
    get_adapter,
    map_record,
    map_records,
    register_adapter,
)

# Imported for their registration side effect.
from mass_import.adapters import crowd, manual, open_data, osm  # noqa: E402,F401

__all__ = [
    "ADAPTERS",
    "adapt_record",
    "get_adapter",
    "map_record",
    "map_records",
    "register_adapter",
]
