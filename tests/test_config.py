from flightradar.config import DEFAULT_CENTER, OpenSkyConfig, _parse_location, config


def test_parse_location():
    assert _parse_location('32.012, 34.887') == (32.012, 34.887)
    assert _parse_location('') is None
    assert _parse_location('not-a-location') is None


def test_token_url():
    opensky = OpenSkyConfig(client_id='id', client_secret='secret', auth_base_url='https://auth.example.test/auth')

    assert opensky.token_url == 'https://auth.example.test/auth/realms/opensky-network/protocol/openid-connect/token'


def test_defaults():
    assert config.cache.max_entries == 500
    assert len(config.display.center) == 2
    assert DEFAULT_CENTER == (32.012, 34.887)
