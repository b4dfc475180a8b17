"""
Flight data fetcher - orchestrates one snapshot request.

Pipeline stages:
1. Query: Build the bounding box and its cache key
2. Cache: Serve a fresh snapshot without touching the network
3. Auth: Make sure a bearer token is available (or proceed anonymously)
4. Fetch: Call OpenSky /states/all
5. Filter: Drop aircraft on the ground
6. Store: Cache the filtered snapshot under the query key

Upstream failures degrade to an empty list. Callers cannot tell
"no aircraft" from "upstream error" at this layer, and every failure heals
on the next poll.
"""

import logging
from typing import List, Optional

from flightradar.cache import SnapshotCache
from flightradar.ingestion.auth import AuthTokenCache
from flightradar.ingestion.opensky_client import BoundingBox, FlightRecord, OpenSkyClient

logger = logging.getLogger(__name__)


class FlightDataFetcher:
    """
    Serves geo-bounded flight snapshots backed by OpenSky.

    The snapshot cache and token cache are injected so tests can control
    time and share stores between fetchers.
    """

    def __init__(
        self,
        client: Optional[OpenSkyClient] = None,
        token_cache: Optional[AuthTokenCache] = None,
        snapshot_cache: Optional[SnapshotCache] = None,
    ):
        """
        Initialize the fetcher.

        Args:
            client: OpenSky API client (created from config if None)
            token_cache: Bearer token store (created from config if None)
            snapshot_cache: Query-keyed snapshot store (default TTL if None)
        """
        self.client = client or OpenSkyClient.from_config()
        self.token_cache = token_cache or AuthTokenCache.from_config()
        self.snapshot_cache = snapshot_cache if snapshot_cache is not None else SnapshotCache()

        # State tracking
        self._fetch_count: int = 0
        self._cache_hit_count: int = 0
        self._error_count: int = 0

    def get_flights(self, lat: float, lng: float, size_km: float) -> List[FlightRecord]:
        """
        Get airborne flights inside a square of size_km centered on (lat, lng).

        Returns an empty list when the upstream feed is unavailable.
        """
        logger.info(f'get_flights(lat={lat}, lng={lng}, size={size_km})')

        bbox = BoundingBox.from_center_size(lat, lng, size_km)
        key = bbox.query_key()

        cached = self.snapshot_cache.get(key)
        if cached is not None:
            self._cache_hit_count += 1
            logger.info(f'{len(cached)} flights retrieved from cache')
            return cached

        token = self.token_cache.ensure_valid_token()

        self._fetch_count += 1
        records, status = self.client.get_states(bbox, token=token)

        if records is None:
            self._error_count += 1
            if status == 401 and token:
                # Token rejected upstream; force a new grant on the next miss
                self.token_cache.invalidate()
            return []

        flights = [r for r in records if not r.on_ground]
        self.snapshot_cache.put(key, flights)

        logger.info(f'{len(flights)} flights retrieved from OpenSky')
        return flights

    @property
    def stats(self) -> dict:
        """Get fetcher statistics."""
        return {
            'fetch_count': self._fetch_count,
            'cache_hit_count': self._cache_hit_count,
            'error_count': self._error_count,
            'auth': self.token_cache.stats,
        }
