"""
OpenSky Network API client.

Handles communication with the OpenSky REST API, including:
- Bounding box queries for geographic filtering
- Bearer token attachment (OAuth2 client credentials)
- Error handling that degrades to "no data" instead of raising

OpenSky state vector format (array indices, extended=1):
0: icao24          - ICAO24 hex address
1: callsign        - Callsign (8 chars max, space padded)
2: origin_country  - Country of registration
3: time_position   - Unix timestamp of last position update
4: last_contact    - Unix timestamp of last message
5: longitude       - WGS84 longitude
6: latitude        - WGS84 latitude
7: baro_altitude   - Barometric altitude (meters)
8: on_ground       - Boolean
9: velocity        - Ground speed (m/s)
10: true_track     - Track angle (degrees, 0=north)
11: vertical_rate  - Vertical rate (m/s)
12: sensors        - Sensor IDs (array)
13: geo_altitude   - Geometric altitude (meters)
14: squawk         - Transponder code
15: spi            - Special position indicator
16: position_source - 0=ADS-B, 1=ASTERIX, 2=MLAT, 3=FLARM
17: category       - Aircraft category (only with extended=1)
"""

import logging
import math
from dataclasses import dataclass, asdict
from typing import Optional, List, Any, Dict, NamedTuple
from urllib.parse import urlencode

import requests

from flightradar.config import config

logger = logging.getLogger(__name__)

KM_PER_DEG_LAT = 111.32

STATE_VECTOR_LENGTH = 18


def wrap_longitude(lng: float) -> float:
    """Wrap a longitude into [-180, 180)."""
    wrapped = ((lng + 540) % 360) - 180
    # Float modulo can round up to exactly 360 for tiny negative inputs
    if wrapped >= 180:
        wrapped -= 360
    return wrapped


def _format_degrees(value: float) -> str:
    # Adding 0.0 turns -0.0 into 0.0 so near-zero bounds share one key
    return f'{round(value, 1) + 0.0:.1f}'


@dataclass(frozen=True)
class BoundingBox:
    """
    Geographic bounding box for API queries.

    OpenSky expects: lamin, lamax, lomin, lomax
    (latitude min, latitude max, longitude min, longitude max)
    """
    lat_min: float
    lat_max: float
    lng_min: float
    lng_max: float

    @classmethod
    def from_center_size(
        cls,
        center_lat: float,
        center_lng: float,
        size_km: float,
    ) -> 'BoundingBox':
        """
        Create a square bounding box centered on a point.

        The longitude half-width is divided by cos(latitude) to account for
        meridian convergence, so it grows without bound near the poles.
        Longitude bounds wrap across the antimeridian.
        """
        half = size_km / 2
        lat_delta = half / KM_PER_DEG_LAT
        lng_delta = half / (KM_PER_DEG_LAT * math.cos(math.radians(center_lat)))

        return cls(
            lat_min=center_lat - lat_delta,
            lat_max=center_lat + lat_delta,
            lng_min=wrap_longitude(center_lng - lng_delta),
            lng_max=wrap_longitude(center_lng + lng_delta),
        )

    def to_params(self) -> Dict[str, str]:
        """Convert to OpenSky API query parameters, rounded to 0.1 degree."""
        return {
            'lamin': _format_degrees(self.lat_min),
            'lamax': _format_degrees(self.lat_max),
            'lomin': _format_degrees(self.lng_min),
            'lomax': _format_degrees(self.lng_max),
            'extended': '1',
        }

    def query_key(self) -> str:
        """Serialized query string; equal for boxes that round alike."""
        return urlencode(self.to_params())


@dataclass(frozen=True)
class FlightRecord:
    """
    One aircraft observation parsed from an OpenSky state vector.

    Values are passed through as received (SI units), only the callsign is
    trimmed. Unit conversion is a presentation concern.
    """
    icao24: str
    callsign: Optional[str]
    origin_country: Optional[str]
    time_position: Optional[int]
    last_contact: Optional[int]
    longitude: Optional[float]
    latitude: Optional[float]
    baro_altitude: Optional[float]
    on_ground: bool
    velocity: Optional[float]
    true_track: Optional[float]
    vertical_rate: Optional[float]
    sensors: Optional[List[int]]
    geo_altitude: Optional[float]
    squawk: Optional[str]
    spi: bool
    position_source: Optional[int]
    category: Optional[int]

    @classmethod
    def from_array(cls, arr: List[Any]) -> Optional['FlightRecord']:
        """
        Parse OpenSky state vector array into a FlightRecord.

        Returns None if the row is not a list or has no usable icao24. A
        non-string callsign is treated as missing. Short arrays (feeds
        queried without extended=1) are padded with None.
        """
        if not arr or not isinstance(arr, (list, tuple)):
            return None

        icao24 = arr[0]
        if not isinstance(icao24, str) or not icao24.strip():
            return None

        arr = list(arr) + [None] * (STATE_VECTOR_LENGTH - len(arr))

        callsign = arr[1]
        if not isinstance(callsign, str):
            callsign = None
        else:
            callsign = callsign.strip() or None

        return cls(
            icao24=icao24.strip().lower(),
            callsign=callsign,
            origin_country=arr[2],
            time_position=arr[3],
            last_contact=arr[4],
            longitude=arr[5],
            latitude=arr[6],
            baro_altitude=arr[7],
            on_ground=bool(arr[8]),
            velocity=arr[9],
            true_track=arr[10],
            vertical_rate=arr[11],
            sensors=arr[12],
            geo_altitude=arr[13],
            squawk=arr[14],
            spi=bool(arr[15]),
            position_source=arr[16],
            category=arr[17],
        )

    def to_dict(self) -> dict:
        """Convert to a camelCase JSON-serializable dict for API responses."""
        return {_to_camel(key): value for key, value in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: dict) -> 'FlightRecord':
        """
        Rebuild a record from its API representation.

        Raises ValueError when the icao24 is missing.
        """
        icao24 = data.get('icao24')
        if not icao24 or not isinstance(icao24, str):
            raise ValueError(f'Flight record without icao24: {data!r}')
        return cls(
            icao24=icao24.lower(),
            callsign=data.get('callsign'),
            origin_country=data.get('originCountry'),
            time_position=data.get('timePosition'),
            last_contact=data.get('lastContact'),
            longitude=data.get('longitude'),
            latitude=data.get('latitude'),
            baro_altitude=data.get('baroAltitude'),
            on_ground=bool(data.get('onGround')),
            velocity=data.get('velocity'),
            true_track=data.get('trueTrack'),
            vertical_rate=data.get('verticalRate'),
            sensors=data.get('sensors'),
            geo_altitude=data.get('geoAltitude'),
            squawk=data.get('squawk'),
            spi=bool(data.get('spi')),
            position_source=data.get('positionSource'),
            category=data.get('category'),
        )


def _to_camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.capitalize() for part in rest)


class StatesResult(NamedTuple):
    """Outcome of one /states/all call. records is None when unusable."""
    records: Optional[List[FlightRecord]]
    status: Optional[int] = None


class OpenSkyClient:
    """
    Client for the OpenSky /states/all endpoint.

    get_states() never raises for upstream problems: any transport error,
    non-2xx status or payload without a 'states' list yields records=None
    so the caller can degrade to an empty snapshot. The HTTP status travels
    with the result; the client keeps no per-call state.
    """

    def __init__(
        self,
        base_url: str = 'https://opensky-network.org/api',
        session: Optional[requests.Session] = None,
        timeout: float = 30,
    ):
        self.base_url = base_url
        self.session = session or requests.Session()
        self.timeout = timeout

    @classmethod
    def from_config(cls) -> 'OpenSkyClient':
        """Create client from application configuration."""
        return cls(
            base_url=config.opensky.base_url,
            timeout=config.opensky.request_timeout,
        )

    def get_states(
        self,
        bbox: BoundingBox,
        token: str = '',
    ) -> StatesResult:
        """
        Fetch current state vectors inside a bounding box.

        Args:
            bbox: Area to query
            token: Bearer token; the Authorization header is sent only if non-empty

        Returns:
            StatesResult with the parsed FlightRecords (on-ground ones
            included), or records=None when the upstream response is
            unusable. status is None when no response arrived.
        """
        url = f'{self.base_url}/states/all'
        params = bbox.to_params()
        headers = {'Accept': 'application/json'}
        if token:
            headers['Authorization'] = f'Bearer {token}'

        logger.debug(f'Fetching states: {url} params={params}')

        try:
            response = self.session.get(
                url,
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            logger.error('OpenSky API timeout')
            return StatesResult(None)
        except requests.exceptions.RequestException as e:
            logger.error(f'OpenSky request failed: {e}')
            return StatesResult(None)

        status = response.status_code

        if not response.ok:
            if status == 429:
                logger.warning('OpenSky rate limit exceeded')
            else:
                logger.error(f'OpenSky API error: {status} {response.text or ""}'.strip())
            return StatesResult(None, status)

        remaining = response.headers.get('x-rate-limit-remaining')
        if remaining is not None:
            logger.debug(f'OpenSky credits remaining: {remaining}')

        try:
            data = response.json()
        except ValueError:
            logger.error('OpenSky returned a non-JSON body')
            return StatesResult(None, status)

        states_raw = data.get('states') if isinstance(data, dict) else None
        if not isinstance(states_raw, list):
            logger.error(f'Missing flights data from OpenSky: states={states_raw!r}')
            return StatesResult(None, status)

        records = []
        for arr in states_raw:
            record = FlightRecord.from_array(arr)
            if record is None:
                logger.debug(f'Skipping malformed state vector: {arr!r}')
                continue
            records.append(record)

        logger.debug(f'Parsed {len(records)} of {len(states_raw)} state vectors')
        return StatesResult(records, status)
