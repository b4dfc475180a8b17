"""
Radar display - ties polling, reconciliation and selection together.

Each poll cycle:
1. Fetch: get the snapshot for the map square (over HTTP or in-process)
2. Reconcile: create/update/remove markers
3. Select: re-resolve the tracked aircraft

Usage:
    python -m flightradar.display.radar

The headless Logging* render targets log what a map widget would draw.
"""

import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests

from flightradar.config import config
from flightradar.display.markers import MarkerLayer, MarkerReconciler, ReconcileResult, RenderState
from flightradar.display.scheduler import PollScheduler
from flightradar.display.selection import InfoPanel, SelectionTracker
from flightradar.ingestion.aircraft_db import PlaneLookup
from flightradar.ingestion.opensky_client import FlightRecord

logger = logging.getLogger(__name__)


class FlightsApiClient:
    """Fetches snapshots from the FlightRadar /api/flights endpoint."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 30,
    ):
        self.base_url = (base_url or config.display.api_url).rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    def get_flights(self, lat: float, lng: float, size_km: float) -> List[FlightRecord]:
        """Airborne flights for the square, or [] on any failure."""
        try:
            response = self.session.get(
                f'{self.base_url}/api/flights',
                params={'lat': lat, 'lng': lng, 'size': size_km},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
            flights = [FlightRecord.from_dict(item) for item in payload]
        except requests.exceptions.RequestException as e:
            logger.error(f'Failed to fetch flights: {e}')
            return []
        except (TypeError, ValueError) as e:
            logger.error(f'Malformed flights response: {e}')
            return []

        flights = [f for f in flights if not f.on_ground]
        logger.debug(f'{len(flights)} flights received from API')
        return flights


class LoggingMarkerLayer(MarkerLayer):
    """Marker layer that keeps widgets in memory and logs changes."""

    def __init__(self):
        self.widgets: Dict[str, Dict[str, Any]] = {}

    def create(self, icao24, state, on_click=None):
        widget = {'icao24': icao24, 'state': state, 'on_click': on_click}
        self.widgets[icao24] = widget
        logger.debug(f'+ {icao24} {state.info_line1} {state.info_line2}')
        return widget

    def update(self, widget, state: RenderState) -> None:
        widget['state'] = state

    def remove(self, widget) -> None:
        widget['on_click'] = None
        self.widgets.pop(widget['icao24'], None)
        logger.debug(f'- {widget["icao24"]}')

    def click(self, icao24: str) -> None:
        """Simulate a click on a marker."""
        widget = self.widgets.get(icao24)
        if widget and widget['on_click']:
            widget['on_click']()


class LoggingInfoPanel(InfoPanel):
    """Info panel that logs the tracked aircraft's details."""

    def __init__(self):
        self.lines: List[str] = []
        self.visible = False

    def show(self, lines: List[str]) -> None:
        self.lines = list(lines)
        self.visible = True
        logger.info('Tracked: ' + ' | '.join(self.lines))

    def hide(self) -> None:
        self.lines = []
        self.visible = False


class RadarDisplay:
    """
    Client-side controller for one radar map.

    source is anything with get_flights(lat, lng, size_km): a
    FlightsApiClient, or a FlightDataFetcher when running in-process.
    """

    def __init__(
        self,
        source,
        layer: Optional[MarkerLayer] = None,
        panel: Optional[InfoPanel] = None,
        plane_lookup: Optional[Callable] = None,
        center: Optional[Tuple[float, float]] = None,
        square_size_km: Optional[float] = None,
        interval: Optional[float] = None,
        timer_factory: Optional[Callable] = None,
    ):
        self.source = source
        self.center = center or config.display.center
        self.square_size_km = square_size_km or config.display.square_size_km

        self.reconciler = MarkerReconciler(layer, on_click=self.handle_marker_click)
        self.selection = SelectionTracker(self.reconciler, panel, plane_lookup)

        scheduler_kwargs = {}
        if timer_factory is not None:
            scheduler_kwargs['timer_factory'] = timer_factory
        self.scheduler = PollScheduler(
            self.update_flights,
            interval or config.display.poll_interval,
            **scheduler_kwargs,
        )

    def update_flights(self) -> Optional[ReconcileResult]:
        """One poll cycle. Failures are logged; the map keeps its markers."""
        try:
            flights = self.source.get_flights(self.center[0], self.center[1], self.square_size_km)
            result = self.reconciler.reconcile(flights)
            self.selection.on_snapshot(flights)
        except Exception as e:
            logger.error(f'Failed to update flights: {e}')
            return None
        logger.info(
            f'{len(self.reconciler)} flights on map '
            f'(+{len(result.created)} -{len(result.removed)})'
        )
        return result

    def handle_marker_click(self, icao24: str) -> None:
        self.selection.select(icao24)

    def handle_panel_click(self) -> None:
        self.selection.clear()

    def start(self) -> None:
        self.scheduler.start()

    def stop(self) -> None:
        self.scheduler.stop()

    def restart_updates(self) -> None:
        """Poll right away and restart the countdown, e.g. from a refresh button."""
        self.scheduler.trigger_now()

    def set_interval(self, seconds: float) -> None:
        """Change the poll interval; takes effect when the next poll is armed."""
        self.scheduler.set_interval(seconds)


def run_display():
    """Run the headless radar against the configured API."""
    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    lookup = PlaneLookup.load_csv(Path(config.planes_csv_path))
    display = RadarDisplay(
        FlightsApiClient(),
        layer=LoggingMarkerLayer(),
        panel=LoggingInfoPanel(),
        plane_lookup=lookup.get,
    )

    logger.info(f'Polling {config.display.api_url} every {display.scheduler.interval}s')
    display.start()

    # Timer threads are daemons; keep the main thread alive
    try:
        while display.scheduler.running:
            time.sleep(1)
    except KeyboardInterrupt:
        display.stop()


if __name__ == '__main__':
    run_display()
