import pytest
import requests

from flightradar.display.markers import MarkerLayer


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


_NO_BODY = object()


class FakeResponse:
    def __init__(self, status_code=200, json_data=_NO_BODY, text='', headers=None, reason=''):
        self.status_code = status_code
        self._json = json_data
        self.text = text
        self.headers = headers or {}
        self.reason = reason

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._json is _NO_BODY:
            raise ValueError('No JSON body')
        return self._json

    def raise_for_status(self):
        if not self.ok:
            raise requests.exceptions.HTTPError(f'{self.status_code} Error', response=self)


class FakeSession:
    """Stands in for requests.Session; handlers return a FakeResponse or raise."""

    def __init__(self, get_handler=None, post_handler=None):
        self.get_handler = get_handler
        self.post_handler = post_handler
        self.get_calls = []
        self.post_calls = []

    def get(self, url, **kwargs):
        self.get_calls.append({'url': url, **kwargs})
        return self.get_handler(url, **kwargs)

    def post(self, url, **kwargs):
        self.post_calls.append({'url': url, **kwargs})
        return self.post_handler(url, **kwargs)


class RecordingLayer(MarkerLayer):
    """Marker layer that records every operation."""

    def __init__(self, ready=True):
        self.ready = ready
        self.ops = []
        self.widgets = {}

    @property
    def is_ready(self):
        return self.ready

    def create(self, icao24, state, on_click=None):
        widget = {'icao24': icao24, 'state': state, 'on_click': on_click}
        self.widgets[icao24] = widget
        self.ops.append(('create', icao24))
        return widget

    def update(self, widget, state):
        widget['state'] = state
        self.ops.append(('update', widget['icao24']))

    def remove(self, widget):
        self.widgets.pop(widget['icao24'], None)
        self.ops.append(('remove', widget['icao24']))

    def click(self, icao24):
        self.widgets[icao24]['on_click']()


class RecordingPanel:
    def __init__(self):
        self.lines = []
        self.visible = False

    def show(self, lines):
        self.lines = list(lines)
        self.visible = True

    def hide(self):
        self.lines = []
        self.visible = False


class FakeTimer:
    """threading.Timer stand-in that only fires when told to."""

    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function()


class FakeTimerFactory:
    def __init__(self):
        self.timers = []

    def __call__(self, interval, function):
        timer = FakeTimer(interval, function)
        self.timers.append(timer)
        return timer

    @property
    def last(self):
        return self.timers[-1]


def state_vector(icao24, callsign='TEST123 ', on_ground=False, lat=32.1, lng=34.8,
                 baro_altitude=3048.0, velocity=128.6, true_track=90.0, vertical_rate=0.0):
    """An 18-element OpenSky state vector."""
    return [
        icao24,
        callsign,
        'Israel',
        1714765198,
        1714765200,
        lng,
        lat,
        baro_altitude,
        on_ground,
        velocity,
        true_track,
        vertical_rate,
        None,
        baro_altitude,
        '7000',
        False,
        0,
        3,
    ]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def layer():
    return RecordingLayer()


@pytest.fixture
def panel():
    return RecordingPanel()


@pytest.fixture
def timer_factory():
    return FakeTimerFactory()
