import requests

from conftest import FakeResponse, FakeSession, RecordingPanel
from helpers import record
from flightradar.display.markers import derive_render_state
from flightradar.display.radar import FlightsApiClient, LoggingInfoPanel, LoggingMarkerLayer, RadarDisplay


class StubSource:
    def __init__(self, *snapshots):
        self.snapshots = list(snapshots)
        self.calls = []

    def get_flights(self, lat, lng, size_km):
        self.calls.append((lat, lng, size_km))
        snapshot = self.snapshots.pop(0)
        if isinstance(snapshot, Exception):
            raise snapshot
        return snapshot


def make_display(source, timer_factory, layer=None, panel=None):
    return RadarDisplay(
        source,
        layer=layer or LoggingMarkerLayer(),
        panel=panel or RecordingPanel(),
        center=(32.012, 34.887),
        square_size_km=500,
        interval=60,
        timer_factory=timer_factory,
    )


def test_poll_cycle_reconciles_and_tracks(timer_factory):
    layer = LoggingMarkerLayer()
    panel = RecordingPanel()
    source = StubSource(
        [record('aaa111'), record('bbb222')],
        [record('bbb222'), record('ccc333')],
    )
    display = make_display(source, timer_factory, layer, panel)

    display.start()
    layer.click('aaa111')
    assert display.selection.selected == 'aaa111'
    assert panel.visible

    timer_factory.last.fire()

    assert source.calls == [(32.012, 34.887, 500), (32.012, 34.887, 500)]
    assert set(layer.widgets) == {'bbb222', 'ccc333'}
    assert display.selection.selected is None
    assert not panel.visible


def test_panel_click_dismisses_selection(timer_factory):
    layer = LoggingMarkerLayer()
    display = make_display(StubSource([record('aaa111')]), timer_factory, layer)
    display.update_flights()
    layer.click('aaa111')

    display.handle_panel_click()

    assert display.selection.selected is None


def test_failed_cycle_keeps_markers_and_keeps_polling(timer_factory):
    layer = LoggingMarkerLayer()
    source = StubSource([record('aaa111')], RuntimeError('server down'), [record('aaa111')])
    display = make_display(source, timer_factory, layer)

    display.start()
    timer_factory.last.fire()

    assert set(layer.widgets) == {'aaa111'}
    assert len(timer_factory.timers) == 2

    timer_factory.last.fire()
    assert len(source.calls) == 3


def test_removed_marker_drops_click_listener():
    layer = LoggingMarkerLayer()
    widget = layer.create('aaa111', derive_render_state(record('aaa111')), on_click=lambda: None)

    layer.remove(widget)

    assert widget['on_click'] is None
    assert layer.widgets == {}


def test_logging_info_panel():
    panel = LoggingInfoPanel()
    panel.show(['Call/ICAO24: ISR702 / aaa111'])
    assert panel.visible

    panel.hide()
    assert panel.lines == []
    assert not panel.visible


def test_api_client_parses_records():
    session = FakeSession(get_handler=lambda url, **kw: FakeResponse(200, [
        record('aaa111', callsign='ISR702').to_dict(),
        record('bbb222', on_ground=True).to_dict(),
    ]))
    client = FlightsApiClient(base_url='http://radar.test/', session=session)

    flights = client.get_flights(32.0, 34.9, 500)

    assert [f.icao24 for f in flights] == ['aaa111']
    assert flights[0] == record('aaa111', callsign='ISR702')
    call = session.get_calls[0]
    assert call['url'] == 'http://radar.test/api/flights'
    assert call['params'] == {'lat': 32.0, 'lng': 34.9, 'size': 500}


def test_api_client_http_error_is_empty():
    session = FakeSession(get_handler=lambda url, **kw: FakeResponse(500, {'error': 'Failed to fetch flights'}))

    assert FlightsApiClient(base_url='http://radar.test', session=session).get_flights(0, 0, 10) == []


def test_api_client_network_error_is_empty():
    def boom(url, **kwargs):
        raise requests.exceptions.ConnectionError('refused')

    session = FakeSession(get_handler=boom)

    assert FlightsApiClient(base_url='http://radar.test', session=session).get_flights(0, 0, 10) == []


def test_api_client_malformed_payload_is_empty():
    session = FakeSession(get_handler=lambda url, **kw: FakeResponse(200, [{'callsign': 'NOID'}]))

    assert FlightsApiClient(base_url='http://radar.test', session=session).get_flights(0, 0, 10) == []


def test_restart_updates_polls_now_and_rearms(timer_factory):
    source = StubSource([record('aaa111')], [record('aaa111'), record('bbb222')])
    layer = LoggingMarkerLayer()
    display = make_display(source, timer_factory, layer)
    display.start()
    pending = timer_factory.last

    display.restart_updates()

    assert pending.cancelled
    assert len(source.calls) == 2
    assert set(layer.widgets) == {'aaa111', 'bbb222'}
    assert display.scheduler.running


def test_restart_updates_after_stop_resumes_polling(timer_factory):
    source = StubSource([record('aaa111')], [record('aaa111')])
    display = make_display(source, timer_factory)
    display.start()
    display.stop()

    display.restart_updates()

    assert len(source.calls) == 2
    assert display.scheduler.running
    assert not timer_factory.last.cancelled


def test_set_interval_applies_to_next_poll(timer_factory):
    source = StubSource([record('aaa111')], [record('aaa111')])
    display = make_display(source, timer_factory)
    display.start()

    display.set_interval(15)

    assert timer_factory.last.interval == 60
    timer_factory.last.fire()
    assert timer_factory.last.interval == 15
    assert display.scheduler.interval == 15
