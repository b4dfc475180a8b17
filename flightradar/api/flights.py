"""
Flight data API endpoints.

Provides endpoints for:
- GET /api/flights?lat=<float>&lng=<float>&size=<float> - Airborne flights
  inside a square of `size` km centered on (lat, lng)
"""

import logging
import math
import time

from flask import Blueprint, current_app, jsonify, request

logger = logging.getLogger(__name__)

flights_bp = Blueprint('flights', __name__, url_prefix='/api')


def _float_arg(name: str) -> float:
    """Read a required finite float query parameter, raising ValueError otherwise."""
    raw = request.args.get(name)
    if raw is None or raw == '':
        raise ValueError(f'{name} is required')
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f'{name} must be a number') from None
    if not math.isfinite(value):
        raise ValueError(f'{name} must be a number')
    return value


@flights_bp.route('/flights', methods=['GET'])
def list_flights():
    """
    List airborne flights around a point.

    Responds with a JSON array of camelCase flight records. Upstream outages
    yield an empty array; only unexpected failures return 500.
    """
    start_time = time.perf_counter()

    try:
        lat = _float_arg('lat')
        lng = _float_arg('lng')
        size = _float_arg('size')
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    if not (-90 <= lat <= 90):
        return jsonify({'error': 'Latitude must be between -90 and 90'}), 400
    if size <= 0:
        return jsonify({'error': 'size must be positive'}), 400

    fetcher = current_app.config['FLIGHT_FETCHER']
    try:
        flights = fetcher.get_flights(lat, lng, size)
    except Exception as e:
        logger.error(f'Flight fetch failed: {e}')
        return jsonify({'error': 'Failed to fetch flights'}), 500

    query_time_ms = (time.perf_counter() - start_time) * 1000
    logger.debug(f'/api/flights served {len(flights)} flights in {query_time_ms:.1f}ms')

    return jsonify([f.to_dict() for f in flights])
