import threading

import pytest

from omanx.cache.response_cache import ResponseCache


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def test_set_then_get_returns_text():
    cache = ResponseCache(ttl_seconds=60, max_entries=10)
    cache.set("k", "answer")

    assert cache.get("k") == "answer"
    assert "k" in cache
    assert len(cache) == 1


def test_missing_key_is_a_miss():
    cache = ResponseCache()
    assert cache.get("nope") is None


def test_entry_expires_after_ttl_and_is_removed():
    clock = FakeClock()
    cache = ResponseCache(ttl_seconds=10, max_entries=10, clock=clock)
    cache.set("k", "answer")

    clock.advance(10)
    assert cache.get("k") == "answer"

    clock.advance(0.5)
    assert cache.get("k") is None
    assert "k" not in cache


def test_oldest_entry_is_evicted_past_capacity():
    cache = ResponseCache(ttl_seconds=60, max_entries=2)
    cache.set("a", "1")
    cache.set("b", "2")
    cache.set("c", "3")

    assert len(cache) == 2
    assert cache.get("a") is None
    assert cache.get("b") == "2"
    assert cache.get("c") == "3"


def test_concurrent_writers_never_exceed_capacity():
    cache = ResponseCache(ttl_seconds=60, max_entries=16)
    observed = []
    start = threading.Barrier(8)

    def writer(worker):
        start.wait()
        largest = 0
        for i in range(500):
            cache.set(f"{worker}-{i}", "answer")
            largest = max(largest, len(cache))
        observed.append(largest)

    threads = [threading.Thread(target=writer, args=(w,)) for w in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(observed) == 8
    assert max(observed) <= 16
    assert len(cache) == 16


def test_read_refreshes_eviction_order():
    cache = ResponseCache(ttl_seconds=60, max_entries=2)
    cache.set("a", "1")
    cache.set("b", "2")
    cache.get("a")
    cache.set("c", "3")

    assert cache.get("a") == "1"
    assert cache.get("b") is None


def test_overwrite_replaces_text_and_resets_age():
    clock = FakeClock()
    cache = ResponseCache(ttl_seconds=10, max_entries=2, clock=clock)
    cache.set("k", "old")
    clock.advance(8)
    cache.set("k", "new")
    clock.advance(8)

    assert cache.get("k") == "new"
    assert len(cache) == 1


def test_clear_and_stats():
    cache = ResponseCache(ttl_seconds=600, max_entries=500)
    cache.set("a", "1")
    cache.set("b", "2")
    assert cache.stats() == {"size": 2, "max_entries": 500, "ttl_seconds": 600}

    cache.clear()
    assert cache.stats()["size"] == 0


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        ResponseCache(max_entries=0)


def test_key_is_deterministic_sha256_hex():
    key = ResponseCache.key_for("m", "What is OPT?", "official", "scholar")

    assert key == ResponseCache.key_for("m", "What is OPT?", "official", "scholar")
    assert len(key) == 64
    int(key, 16)


@pytest.mark.parametrize(
    "other",
    [
        ("m2", "What is OPT?", "official", "scholar"),
        ("m", "What is OPT? ", "official", "scholar"),
        ("m", "What is OPT?", "community", "scholar"),
        ("m", "What is OPT?", "official", "local"),
    ],
)
def test_key_covers_every_component(other):
    base = ResponseCache.key_for("m", "What is OPT?", "official", "scholar")
    assert ResponseCache.key_for(*other) != base


def test_missing_mode_and_lane_become_empty_segments():
    assert ResponseCache.key_for("m", "hi", None, None) == ResponseCache.key_for("m", "hi", "", "")
