"""
API module for FlightRadar.

Provides REST endpoints for:
- Flight snapshots around a point
"""

from flightradar.api.flights import flights_bp

__all__ = ['flights_bp']
