"""
FlightRadar Flask Application.

Main entry point for the flight API. Initializes:
- Flight data fetcher (OpenSky client, token cache, snapshot cache)
- API routes
- CORS for /api/*

Usage:
    python -m flightradar.app

Or with gunicorn:
    gunicorn 'flightradar.app:create_app()'
"""

import logging
import os
import time
from datetime import datetime, timezone
from typing import Optional

from flask import Flask
from flask_cors import CORS

from flightradar.config import config
from flightradar.api import flights_bp
from flightradar.ingestion import FlightDataFetcher

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__name__)


def create_app(fetcher: Optional[FlightDataFetcher] = None) -> Flask:
    """
    Application factory for Flask.

    Args:
        fetcher: Flight data fetcher to serve from. Built from config if None;
                 tests pass one wired to fake upstreams.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    origins = [o.strip() for o in config.allowed_origins.split(',') if o.strip()] or '*'
    CORS(app, resources={r'/api/*': {'origins': origins}})

    app.config['FLIGHT_FETCHER'] = fetcher or FlightDataFetcher()
    app.config['STARTED_AT'] = time.monotonic()

    app.register_blueprint(flights_bp)

    @app.route('/health')
    def health():
        """Health check with cache and fetcher statistics."""
        flight_fetcher = app.config['FLIGHT_FETCHER']
        return {
            'status': 'ok',
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'uptime': round(time.monotonic() - app.config['STARTED_AT'], 1),
            'cache': flight_fetcher.snapshot_cache.stats,
            'fetcher': flight_fetcher.stats,
        }

    # -------------------------------------------------------------------------
    # Error handlers
    # -------------------------------------------------------------------------

    @app.errorhandler(404)
    def not_found(e):
        return {'error': 'API endpoint not found'}, 404

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f'Server error: {e}')
        return {'error': 'Internal server error'}, 500

    return app


def run_development_server():
    """Run the development server."""
    app = create_app()

    port = int(os.environ.get('PORT', config.port))

    logger.info(f'Starting FlightRadar on http://localhost:{port}')
    logger.info(f'Flights API: http://localhost:{port}/api/flights')

    app.run(
        host='0.0.0.0',
        port=port,
        debug=config.debug,
        use_reloader=False,
    )


if __name__ == '__main__':
    run_development_server()
