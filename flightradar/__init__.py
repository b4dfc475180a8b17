"""
FlightRadar Package.

Live aircraft radar around a fixed point, built with Flask and requests
on top of the OpenSky Network state-vector feed.

Modules:
    api/         REST endpoint serving geo-bounded flight snapshots
    ingestion/   OpenSky client, OAuth2 token cache, fetcher, aircraft CSV lookup
    display/     Marker reconciliation, selection tracking, poll scheduler
    cache.py     Thread-safe TTL cache keyed by the effective OpenSky query
    config.py    Centralized configuration from environment variables
"""

__version__ = '1.0.0'
