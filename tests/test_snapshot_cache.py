from flightradar.cache import SnapshotCache


def test_hit_within_ttl(clock):
    cache = SnapshotCache(ttl_seconds=5, clock=clock)
    cache.put('k', ['a'])

    clock.advance(4.9)

    assert cache.get('k') == ['a']


def test_entry_expires_at_ttl(clock):
    cache = SnapshotCache(ttl_seconds=5, clock=clock)
    cache.put('k', ['a'])

    clock.advance(5.0)

    assert cache.get('k') is None
    assert len(cache) == 0


def test_put_replaces_entry_and_restamps(clock):
    cache = SnapshotCache(ttl_seconds=5, clock=clock)
    cache.put('k', ['old'])
    clock.advance(4)
    cache.put('k', ['new'])
    clock.advance(4)

    assert cache.get('k') == ['new']
    assert len(cache) == 1


def test_empty_list_is_a_hit(clock):
    cache = SnapshotCache(ttl_seconds=5, clock=clock)
    cache.put('k', [])

    assert cache.get('k') == []


def test_evicts_oldest_when_over_capacity(clock):
    cache = SnapshotCache(ttl_seconds=60, max_entries=10, clock=clock)
    for i in range(11):
        cache.put(f'k{i}', i)
        clock.advance(1)

    assert len(cache) == 10
    assert cache.get('k0') is None
    assert cache.get('k10') == 10


def test_stats_and_invalidate(clock):
    cache = SnapshotCache(ttl_seconds=5, clock=clock)
    cache.put('k', 1)
    cache.get('k')
    cache.get('missing')
    cache.invalidate('k')

    stats = cache.stats
    assert stats['hits'] == 1
    assert stats['misses'] == 1
    assert stats['hit_rate'] == 0.5
    assert stats['entries'] == 0


def test_clear(clock):
    cache = SnapshotCache(ttl_seconds=5, clock=clock)
    cache.put('a', 1)
    cache.put('b', 2)
    cache.clear()

    assert cache.get('a') is None
    assert len(cache) == 0
