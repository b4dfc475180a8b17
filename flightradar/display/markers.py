"""
Marker reconciliation - keeps the map markers in step with each snapshot.

Every poll delivers a complete snapshot, never a patch. The reconciler
diffs it against the markers currently shown, keyed by icao24:
- present before and now    -> update the marker's render state in place
- new in this snapshot      -> create a marker
- missing from the snapshot -> remove the marker and release its listeners

Feeding the same snapshot twice produces only updates.

The map layer is a dumb render target. It hands back an opaque widget on
create; the reconciler owns the icao24 -> MarkerHandle mapping and only ever
replaces a handle's render_state, never its identity.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from flightradar.display.units import altitude_hundreds_ft, speed_knots, to_3_digits
from flightradar.ingestion.opensky_client import FlightRecord

logger = logging.getLogger(__name__)

# The aircraft glyph points down; rotate by 180 so it faces its track
ROTATION_OFFSET = 180

CLIMB_ARROW = '↑'
DESCENT_ARROW = '↓'


@dataclass(frozen=True)
class RenderState:
    """Display attributes derived from one FlightRecord."""
    position: Tuple[float, float]
    title: str
    rotation: Optional[int]
    info_line1: str
    info_line2: str
    selected: bool = False


def climb_arrow(vertical_rate: Optional[float]) -> str:
    """Up/down arrow for a strictly nonzero vertical rate, else ''."""
    if not vertical_rate:
        return ''
    return CLIMB_ARROW if vertical_rate > 0 else DESCENT_ARROW


def derive_render_state(
    record: FlightRecord,
    previous: Optional[RenderState] = None,
) -> RenderState:
    """
    Compute a marker's render state from a flight record.

    A record without true_track keeps the previous rotation. The selected
    flag is owned by the selection tracker and carried over unchanged.
    """
    rotation = previous.rotation if previous else None
    if record.true_track is not None:
        rotation = round(record.true_track) + ROTATION_OFFSET

    alt_info = to_3_digits(altitude_hundreds_ft(record.baro_altitude))
    speed_info = to_3_digits(speed_knots(record.velocity))

    return RenderState(
        position=(record.latitude or 0.0, record.longitude or 0.0),
        title=f'{record.callsign or "???"} ({record.origin_country or ""})',
        rotation=rotation,
        info_line1=record.callsign or '???',
        info_line2=f'{alt_info}{climb_arrow(record.vertical_rate)} {speed_info}',
        selected=previous.selected if previous else False,
    )


@dataclass
class MarkerHandle:
    """A displayed aircraft: identity, current render state, layer widget."""
    icao24: str
    render_state: RenderState
    widget: Any = None


class MarkerLayer:
    """
    Render target interface for flight markers.

    Subclasses draw markers on an actual map. is_ready is False while the
    map widget does not exist, in which case reconciliation is skipped.
    """

    @property
    def is_ready(self) -> bool:
        return True

    def create(
        self,
        icao24: str,
        state: RenderState,
        on_click: Optional[Callable[[], None]] = None,
    ) -> Any:
        """Draw a new marker and return its widget."""
        raise NotImplementedError

    def update(self, widget: Any, state: RenderState) -> None:
        raise NotImplementedError

    def remove(self, widget: Any) -> None:
        """Take the marker off the map and drop its listeners."""
        raise NotImplementedError


@dataclass
class ReconcileResult:
    """Outcome of one reconciliation pass."""
    markers: Dict[str, MarkerHandle]
    created: List[str] = field(default_factory=list)
    updated: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    duplicates: List[str] = field(default_factory=list)


def reconcile_markers(
    previous: Dict[str, MarkerHandle],
    incoming: Iterable[FlightRecord],
    layer: Optional[MarkerLayer],
    on_click: Optional[Callable[[str], None]] = None,
) -> ReconcileResult:
    """
    Three-way diff of the displayed markers against a new snapshot.

    Duplicate icao24 values inside one snapshot keep the first occurrence;
    later ones are skipped and reported in ReconcileResult.duplicates.
    """
    if layer is None or not layer.is_ready:
        logger.debug('Marker layer not ready, skipping reconciliation')
        return ReconcileResult(markers=previous)

    markers = dict(previous)
    to_remove = set(markers)
    seen = set()
    result = ReconcileResult(markers=markers)

    for record in incoming:
        icao24 = record.icao24
        if not icao24:
            logger.warning(f'Skipping flight record without icao24: {record!r}')
            continue
        if icao24 in seen:
            logger.warning(f'Duplicate icao24 {icao24} in snapshot, keeping first occurrence')
            result.duplicates.append(icao24)
            continue
        seen.add(icao24)

        handle = markers.get(icao24)
        if handle is not None:
            handle.render_state = derive_render_state(record, handle.render_state)
            layer.update(handle.widget, handle.render_state)
            to_remove.discard(icao24)
            result.updated.append(icao24)
        else:
            state = derive_render_state(record)
            click = _bind_click(on_click, icao24)
            widget = layer.create(icao24, state, on_click=click)
            markers[icao24] = MarkerHandle(icao24=icao24, render_state=state, widget=widget)
            result.created.append(icao24)

    for icao24 in [key for key in previous if key in to_remove]:
        handle = markers.pop(icao24)
        layer.remove(handle.widget)
        result.removed.append(icao24)

    logger.debug(
        f'Reconciled markers: {len(result.created)} created, '
        f'{len(result.updated)} updated, {len(result.removed)} removed'
    )
    return result


def _bind_click(
    on_click: Optional[Callable[[str], None]],
    icao24: str,
) -> Optional[Callable[[], None]]:
    if on_click is None:
        return None
    return lambda: on_click(icao24)


class MarkerReconciler:
    """
    Owns the icao24 -> MarkerHandle mapping for one map.

    Clicks on a marker are forwarded to on_click with the marker's icao24.
    """

    def __init__(
        self,
        layer: Optional[MarkerLayer],
        on_click: Optional[Callable[[str], None]] = None,
    ):
        self.layer = layer
        self.on_click = on_click
        self._markers: Dict[str, MarkerHandle] = {}

    def _handle_click(self, icao24: str) -> None:
        if self.on_click is not None:
            self.on_click(icao24)

    @property
    def markers(self) -> Dict[str, MarkerHandle]:
        """Snapshot of the current mapping."""
        return dict(self._markers)

    def get(self, icao24: str) -> Optional[MarkerHandle]:
        return self._markers.get(icao24)

    def __contains__(self, icao24: str) -> bool:
        return icao24 in self._markers

    def __len__(self) -> int:
        return len(self._markers)

    def reconcile(self, incoming: Iterable[FlightRecord]) -> ReconcileResult:
        """Apply a snapshot to the map and adopt the resulting mapping."""
        result = reconcile_markers(self._markers, incoming, self.layer, self._handle_click)
        self._markers = result.markers
        return result

    def set_selected(self, icao24: str, selected: bool) -> bool:
        """
        Toggle the highlight of one marker.

        Returns False when no marker exists for icao24.
        """
        handle = self._markers.get(icao24)
        if handle is None:
            return False
        if handle.render_state.selected != selected:
            handle.render_state = replace(handle.render_state, selected=selected)
            if self.layer is not None and self.layer.is_ready:
                self.layer.update(handle.widget, handle.render_state)
        return True
