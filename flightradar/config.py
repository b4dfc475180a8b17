"""
Configuration management for FlightRadar.

Loads settings from environment variables with sensible defaults.
All configuration is centralized here to avoid magic strings scattered
throughout the codebase.
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dotenv import load_dotenv

load_dotenv()

# Ben Gurion Airport
DEFAULT_CENTER = (32.012, 34.887)


def _parse_location(value: str) -> Optional[Tuple[float, float]]:
    """Parse 'lat,lon' string into tuple, or None if empty/invalid."""
    if not value:
        return None
    try:
        lat, lon = value.split(',')
        return (float(lat.strip()), float(lon.strip()))
    except (ValueError, AttributeError):
        return None


@dataclass(frozen=True)
class OpenSkyConfig:
    """OpenSky API configuration (OAuth2 client credentials)."""
    client_id: Optional[str] = os.getenv('OPENSKY_CLIENT_ID') or None
    client_secret: Optional[str] = os.getenv('OPENSKY_CLIENT_SECRET') or None
    base_url: str = os.getenv('OPENSKY_BASE_URL', 'https://opensky-network.org/api')
    auth_base_url: str = os.getenv(
        'OPENSKY_AUTH_BASE_URL', 'https://auth.opensky-network.org/auth'
    )
    token_validity_seconds: int = int(os.getenv('OPENSKY_TOKEN_VALIDITY_SECONDS', '1500'))
    request_timeout: float = float(os.getenv('OPENSKY_TIMEOUT_SECONDS', '30'))

    @property
    def token_url(self) -> str:
        return f'{self.auth_base_url}/realms/opensky-network/protocol/openid-connect/token'


@dataclass(frozen=True)
class CacheConfig:
    """Snapshot cache settings."""
    ttl_seconds: float = float(os.getenv('FLIGHTS_CACHE_TTL_SECONDS', '5'))
    max_entries: int = 500  # Distinct bounding boxes kept at once


@dataclass(frozen=True)
class DisplayConfig:
    """Radar display settings."""
    center: Tuple[float, float] = field(
        default_factory=lambda: _parse_location(os.getenv('MAP_CENTER', '')) or DEFAULT_CENTER
    )
    square_size_km: float = float(os.getenv('SQUARE_SIZE_KM', '500'))
    poll_interval: float = float(os.getenv('POLL_INTERVAL_SECONDS', '60'))
    api_url: str = os.getenv('FLIGHTS_API_URL', 'http://localhost:7879')


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    opensky: OpenSkyConfig
    cache: CacheConfig
    display: DisplayConfig

    # Aircraft metadata CSV (OpenSky aircraft database export)
    planes_csv_path: str

    # Flask settings
    port: int
    allowed_origins: str
    debug: bool


def load_config() -> AppConfig:
    """Load and validate all configuration."""
    return AppConfig(
        opensky=OpenSkyConfig(),
        cache=CacheConfig(),
        display=DisplayConfig(),
        planes_csv_path=os.getenv('PLANES_CSV_PATH', 'data/planes.csv'),
        port=int(os.getenv('PORT', '7879')),
        allowed_origins=os.getenv('ALLOWED_ORIGINS', '*'),
        debug=os.getenv('FLASK_DEBUG', '0') == '1',
    )


# Singleton instance
config = load_config()
