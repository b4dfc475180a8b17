"""
Aircraft database loader and lookup utilities.

Maps ICAO24 hex addresses to aircraft metadata (registration, type, model)
from the OpenSky aircraft database CSV export. The whole file is held in
memory; lookups are plain dict reads.

Usage:
    from flightradar.ingestion.aircraft_db import PlaneLookup

    lookup = PlaneLookup.load_csv(Path('data/planes.csv'))
    info = lookup.get('4x7abc')
    print(info.registration)  # '4X-EKA'
"""

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Dict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlaneInfo:
    """Aircraft information from lookup."""
    registration: str = ''
    type_code: str = ''
    model: str = ''


def _normalize(value: Optional[str]) -> str:
    """Strip quotes and whitespace that the OpenSky export leaves around fields."""
    if not value:
        return ''
    return value.replace("'", '').strip()


def build_model_name(manufacturer_icao: str, manufacturer_name: str, model: str) -> str:
    """
    Compose a display model from manufacturer and model columns.

    Each prefix is skipped when the part after it already starts with it,
    e.g. ('BOEING', 'Boeing', 'Boeing 737-800') -> 'Boeing 737-800'.
    """
    parts = []
    if manufacturer_icao:
        lowered = manufacturer_icao.lower()
        if (not manufacturer_name.lower().startswith(lowered)
                and not model.lower().startswith(lowered)):
            parts.append(manufacturer_icao)
    if manufacturer_name and not model.lower().startswith(manufacturer_name.lower()):
        parts.append(manufacturer_name)
    parts.append(model)
    return ' '.join(p for p in parts if p).strip()


class PlaneLookup:
    """In-memory aircraft lookup keyed by lower-case ICAO24."""

    def __init__(self, planes: Optional[Dict[str, PlaneInfo]] = None):
        self._planes: Dict[str, PlaneInfo] = planes or {}

    @classmethod
    def load_csv(cls, csv_path: Path) -> 'PlaneLookup':
        """
        Load aircraft data from CSV.

        Expected CSV format (OpenSky aircraft database):
        icao24,registration,manufacturericao,manufacturername,model,typecode,...

        A missing file yields an empty lookup.
        """
        csv_path = Path(csv_path)
        if not csv_path.exists():
            logger.warning(f'Aircraft CSV not found: {csv_path}')
            return cls()

        logger.info(f'Loading planes data from {csv_path}')
        planes: Dict[str, PlaneInfo] = {}

        with open(csv_path, 'r', encoding='utf-8', errors='ignore', newline='') as f:
            reader = csv.DictReader(f)
            if reader.fieldnames:
                reader.fieldnames = [_normalize(name) for name in reader.fieldnames]

            for row in reader:
                icao24 = _normalize(row.get('icao24')).lower()
                if not icao24:
                    continue

                planes[icao24] = PlaneInfo(
                    registration=_normalize(row.get('registration')),
                    type_code=_normalize(row.get('typecode')),
                    model=build_model_name(
                        _normalize(row.get('manufacturerIcao') or row.get('manufacturericao')),
                        _normalize(row.get('manufacturerName') or row.get('manufacturername')),
                        _normalize(row.get('model')),
                    ),
                )

        logger.info(f'Loaded {len(planes)} aircraft records')
        return cls(planes)

    def get(self, icao24: str) -> Optional[PlaneInfo]:
        """Look up aircraft by ICAO24 address."""
        return self._planes.get(icao24.lower())

    def __len__(self) -> int:
        return len(self._planes)
