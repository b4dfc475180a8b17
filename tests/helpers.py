from flightradar.ingestion.opensky_client import FlightRecord

from conftest import state_vector


def record(icao24, **kwargs):
    """A FlightRecord built the same way the fetcher builds one."""
    return FlightRecord.from_array(state_vector(icao24, **kwargs))
