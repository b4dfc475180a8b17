"""
Data acquisition module for FlightRadar.

Handles OpenSky authentication, bounding-box queries, snapshot caching,
and aircraft metadata lookup.
"""

from flightradar.ingestion.auth import AuthTokenCache
from flightradar.ingestion.fetcher import FlightDataFetcher
from flightradar.ingestion.opensky_client import BoundingBox, FlightRecord, OpenSkyClient

__all__ = ['AuthTokenCache', 'BoundingBox', 'FlightDataFetcher', 'FlightRecord', 'OpenSkyClient']
