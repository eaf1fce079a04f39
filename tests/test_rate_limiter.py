from omanx.core.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


def test_allows_up_to_limit_then_blocks():
    limiter = RateLimiter(max_requests=3, window_seconds=60, clock=FakeClock())

    assert [limiter.is_allowed("a") for _ in range(4)] == [
        (True, 2), (True, 1), (True, 0), (False, 0),
    ]


def test_clients_are_limited_independently():
    limiter = RateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())

    assert limiter.is_allowed("a") == (True, 0)
    assert limiter.is_allowed("b") == (True, 0)
    assert limiter.is_allowed("a") == (False, 0)


def test_window_slides():
    clock = FakeClock()
    limiter = RateLimiter(max_requests=2, window_seconds=60, clock=clock)
    limiter.is_allowed("a")
    clock.now = 30
    limiter.is_allowed("a")

    clock.now = 59
    assert limiter.is_allowed("a")[0] is False
    assert limiter.retry_after("a") == 1

    clock.now = 60
    assert limiter.is_allowed("a") == (True, 0)


def test_retry_after_counts_down_to_oldest_expiry():
    clock = FakeClock(100.0)
    limiter = RateLimiter(max_requests=1, window_seconds=900, clock=clock)
    limiter.is_allowed("a")

    clock.now = 400.0
    assert limiter.retry_after("a") == 600
    assert limiter.retry_after("unknown") == 1


def test_idle_clients_are_forgotten():
    clock = FakeClock()
    limiter = RateLimiter(max_requests=5, window_seconds=10, cleanup_interval_seconds=20, clock=clock)
    limiter.is_allowed("a")

    clock.now = 25
    limiter.is_allowed("b")

    assert "a" not in limiter._hits
    assert "b" in limiter._hits
