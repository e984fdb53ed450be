from cache import MemoryCache, CacheEntry, TTLPolicy, ALWAYS_FRESH, is_fresh


def test_hit_within_ttl(clock):
    cache = MemoryCache(TTLPolicy(900), clock=clock)
    cache.put("Camden|burglary|latest", 42)
    clock.advance(899)
    assert cache.get("Camden|burglary|latest") == (42, True)


def test_miss_after_ttl(clock):
    cache = MemoryCache(TTLPolicy(900), clock=clock)
    cache.put("k", "v")
    clock.advance(900)
    assert cache.get("k") == (None, False)
    # stale entry is still there until overwritten
    assert cache.entry("k").payload == "v"


def test_unknown_key(clock):
    assert MemoryCache(TTLPolicy(900), clock=clock).get("nope") == (None, False)


def test_per_call_policy_override(clock):
    cache = MemoryCache(TTLPolicy(10), clock=clock)
    cache.put("k", 1)
    clock.advance(10_000)
    assert cache.get("k") == (None, False)
    assert cache.get("k", policy=ALWAYS_FRESH) == (1, True)


def test_falsy_payloads_are_hits(clock):
    cache = MemoryCache(TTLPolicy(60), clock=clock)
    cache.put("zero", 0)
    cache.put("empty", [])
    assert cache.get("zero") == (0, True)
    assert cache.get("empty") == ([], True)


def test_size_bound_evicts_least_recently_used(clock):
    cache = MemoryCache(TTLPolicy(60), max_size=2, clock=clock)
    cache.put("a", 1)
    cache.put("b", 2)
    cache.get("a")
    cache.put("c", 3)
    assert "a" in cache and "c" in cache
    assert "b" not in cache
    assert len(cache) == 2


def test_is_fresh_policies():
    entry = CacheEntry(fetched_at=1000.0, payload=None)
    assert is_fresh(entry, TTLPolicy(21600), now=1000.0 + 21599)
    assert not is_fresh(entry, TTLPolicy(21600), now=1000.0 + 21600)
    assert is_fresh(entry, ALWAYS_FRESH, now=1e12)
    assert not is_fresh(None, ALWAYS_FRESH)
