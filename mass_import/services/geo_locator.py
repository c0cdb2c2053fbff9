"""Geospatial candidate lookup for duplicate detection.

# ─── ALGORITHM ─────────────────────────────────────────────────────────
#
# 1. Convert the search radius into a latitude/longitude bounding box
#    (111,320 m per degree of latitude; the longitude span is divided by
#    cos(latitude)).  The box is a superset of the true search circle.
# 2. Ask the catalog store for every approved artwork inside the box.
# 3. Drop anything whose Haversine great-circle distance exceeds the radius.
# 4. Order survivors by a cheap planar distance proxy and cap the list so
#    downstream scoring cost stays bounded.
#
# Read-only.  Store failures and timeouts surface as StorageError for the
# record being checked.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import math

import structlog

from mass_import.interfaces.catalog_store import ICatalogStore
from mass_import.models.records import BoundingBox, CandidateArtwork
from mass_import.utils.concurrency import call_with_timeout

logger = structlog.get_logger(logger_name=__name__)

EARTH_RADIUS_M = 6_371_000.0
METERS_PER_DEGREE_LAT = 111_320.0
MAX_CANDIDATES = 50

# cos(lat) below this is treated as "at the pole": the box spans all longitudes.
_POLE_EPSILON = 1e-9


def haversine_distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two WGS84 points in meters."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # Rounding can push ``a`` a hair past 1.0 for antipodal points.
    a = min(1.0, max(0.0, a))
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def planar_distance_proxy(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Squared equirectangular delta in degrees; only meaningful for ordering."""
    d_lat = lat2 - lat1
    d_lon = (lon2 - lon1) * math.cos(math.radians((lat1 + lat2) / 2))
    return d_lat * d_lat + d_lon * d_lon


def bounding_box(lat: float, lon: float, radius_m: float) -> BoundingBox:
    """Return a box enclosing the circle of ``radius_m`` around (lat, lon)."""
    lat_delta = radius_m / METERS_PER_DEGREE_LAT
    cos_lat = math.cos(math.radians(lat))

    south = max(-90.0, lat - lat_delta)
    north = min(90.0, lat + lat_delta)

    if cos_lat <= _POLE_EPSILON or south <= -90.0 or north >= 90.0:
        return BoundingBox(south=south, north=north, west=-180.0, east=180.0)

    lon_delta = radius_m / (METERS_PER_DEGREE_LAT * cos_lat)
    # Boxes that would wrap the antimeridian are widened to the full range
    # rather than split into two scans.
    if lon - lon_delta < -180.0 or lon + lon_delta > 180.0:
        return BoundingBox(south=south, north=north, west=-180.0, east=180.0)

    return BoundingBox(south=south, north=north, west=lon - lon_delta, east=lon + lon_delta)


class CandidateLocator:
    """Finds approved catalog artworks near a point.

    Parameters
    ----------
    store:
        Catalog store providing the bounding-box range scan.
    max_candidates:
        Upper bound on returned candidates (never more than 50).
    timeout_seconds:
        Caller-enforced timeout for the range scan.
    """

    def __init__(
        self,
        store: ICatalogStore,
        max_candidates: int = MAX_CANDIDATES,
        timeout_seconds: float | None = None,
    ) -> None:
        self._store = store
        self._max_candidates = max(1, min(MAX_CANDIDATES, max_candidates))
        self._timeout_seconds = timeout_seconds

    @property
    def max_candidates(self) -> int:
        return self._max_candidates

    async def query_near(
        self,
        lat: float,
        lon: float,
        radius_m: float,
    ) -> list[CandidateArtwork]:
        """Return approved artworks within ``radius_m`` of (lat, lon).

        Candidates carry their exact ``distance_m`` and are ordered nearest
        first by the planar proxy.  At most ``max_candidates`` are returned.

        Raises
        ------
        StorageError
            If the store scan fails or times out.
        """
        box = bounding_box(lat, lon, radius_m)
        rows = await call_with_timeout(
            self._store.find_artworks_in_bounds(box, status="approved"),
            self._timeout_seconds,
            operation="find_artworks_in_bounds",
            provider_name=self._store.get_provider_name(),
        )

        within: list[tuple[float, CandidateArtwork]] = []
        for row in rows:
            # The circle lies inside the box, so rows outside it are never candidates.
            if not box.contains(row.lat, row.lon):
                continue
            distance = haversine_distance_m(lat, lon, row.lat, row.lon)
            if distance > radius_m:
                continue
            proxy = planar_distance_proxy(lat, lon, row.lat, row.lon)
            within.append((proxy, row.model_copy(update={"distance_m": distance})))

        within.sort(key=lambda pair: pair[0])
        candidates = [candidate for _, candidate in within[: self._max_candidates]]

        logger.debug(
            "candidates_located",
            lat=lat,
            lon=lon,
            radius_m=radius_m,
            scanned=len(rows),
            within_radius=len(within),
            returned=len(candidates),
        )
        return candidates
