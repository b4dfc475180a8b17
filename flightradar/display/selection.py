"""
Selection tracking for the single user-selected aircraft.

States:
- Unselected
- Selected(icao24)

Transitions:
- select(icao24): marker click, replaces any previous selection
- on_snapshot(records): after each reconciliation; refreshes the info panel
  when the tracked aircraft is still present, otherwise clears the selection
- clear(): explicit dismissal, always ends Unselected

A selection always refers to a marker the reconciler currently shows.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from flightradar.display.markers import MarkerReconciler
from flightradar.display.units import METERS_PER_SECOND_TO_KNOTS, METERS_TO_FEET, vertical_rate_fpm
from flightradar.ingestion.aircraft_db import PlaneInfo
from flightradar.ingestion.opensky_client import FlightRecord

logger = logging.getLogger(__name__)


class InfoPanel:
    """Render target for the tracked aircraft's detail lines."""

    def show(self, lines: List[str]) -> None:
        raise NotImplementedError

    def hide(self) -> None:
        raise NotImplementedError


def format_info_lines(record: FlightRecord, plane: Optional[PlaneInfo] = None) -> List[str]:
    """Detail panel text for one aircraft."""
    alt_str = f'{round((record.baro_altitude or 0) * METERS_TO_FEET)} ft'
    vr = vertical_rate_fpm(record.vertical_rate)
    vr_str = '' if vr == 0 else f'{vr:+d} ft/min'
    track_str = f'{round(record.true_track)}°' if record.true_track is not None else 'N/A'
    speed_str = f'{round((record.velocity or 0) * METERS_PER_SECOND_TO_KNOTS)} kts'

    registration = plane.registration if plane else ''
    type_code = plane.type_code if plane else ''
    model = plane.model if plane else ''
    registration_str = f'{registration} {record.origin_country or ""}'.strip() or 'N/A'
    model_str = f'{type_code} {model}'.strip() or 'N/A'

    return [
        f'Call/ICAO24: {record.callsign or ""} / {record.icao24}',
        f'Reg: {registration_str}',
        f'Model: {model_str}',
        f'Altitude: {alt_str} {vr_str}'.rstrip(),
        f'Position: {record.latitude}, {record.longitude}',
        f'Track/Speed: {track_str} / {speed_str}',
    ]


class SelectionTracker:
    """State machine for the tracked aircraft."""

    def __init__(
        self,
        reconciler: MarkerReconciler,
        panel: Optional[InfoPanel] = None,
        plane_lookup: Optional[Callable[[str], Optional[PlaneInfo]]] = None,
    ):
        self.reconciler = reconciler
        self.panel = panel
        self.plane_lookup = plane_lookup
        self._selected: Optional[str] = None
        # Latest record per icao24, refreshed on every snapshot
        self._records: Dict[str, FlightRecord] = {}

    @property
    def selected(self) -> Optional[str]:
        """icao24 of the tracked aircraft, or None when Unselected."""
        return self._selected

    @property
    def is_selected(self) -> bool:
        return self._selected is not None

    def select(self, icao24: str) -> bool:
        """
        Track the aircraft behind a clicked marker.

        Returns False (and keeps the current state) if no marker or record
        exists for icao24.
        """
        record = self._records.get(icao24)
        if record is None or icao24 not in self.reconciler:
            logger.warning(f'Cannot select {icao24}: not in current snapshot')
            return False

        self.clear()
        self._selected = icao24
        self.reconciler.set_selected(icao24, True)
        self._show(record)
        logger.info(f'Tracking {icao24}')
        return True

    def clear(self) -> None:
        """Return to Unselected and hide the panel."""
        if self._selected is not None:
            self.reconciler.set_selected(self._selected, False)
            logger.info(f'Stopped tracking {self._selected}')
        self._selected = None
        if self.panel is not None:
            self.panel.hide()

    def on_snapshot(self, records: Iterable[FlightRecord]) -> None:
        """Re-resolve the selection against the latest snapshot."""
        latest: Dict[str, FlightRecord] = {}
        for record in records:
            # Keep first, matching the reconciler's duplicate policy
            latest.setdefault(record.icao24, record)
        self._records = latest

        if self._selected is None:
            return

        record = latest.get(self._selected)
        if record is None or self._selected not in self.reconciler:
            logger.info(f'Tracked aircraft {self._selected} left the snapshot')
            self.clear()
            return

        self._show(record)

    def _show(self, record: FlightRecord) -> None:
        if self.panel is None:
            return
        plane = self.plane_lookup(record.icao24) if self.plane_lookup else None
        self.panel.show(format_info_lines(record, plane))
