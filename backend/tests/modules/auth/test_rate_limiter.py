import pytest

from modules.auth.rate_limiter import (
    SlidingWindowRateLimiter,
    get_rate_limiter,
    reset_rate_limiter,
)


WINDOW_MS = 15 * 60 * 1000


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class TestSlidingWindowRateLimiter:
    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def limiter(self, clock):
        return SlidingWindowRateLimiter(clock=clock)

    def test_allows_up_to_max_attempts(self, limiter):
        results = [limiter.is_allowed("login:a@example.com", 5, WINDOW_MS) for _ in range(6)]
        assert results == [True, True, True, True, True, False]

    def test_keys_are_independent(self, limiter):
        for _ in range(5):
            limiter.is_allowed("login:a@example.com", 5, WINDOW_MS)
        assert not limiter.is_allowed("login:a@example.com", 5, WINDOW_MS)
        assert limiter.is_allowed("login:b@example.com", 5, WINDOW_MS)

    def test_window_slides(self, limiter, clock):
        for _ in range(5):
            limiter.is_allowed("k", 5, WINDOW_MS)
            clock.advance(1000)
        assert not limiter.is_allowed("k", 5, WINDOW_MS)

        # The first attempt leaves the window exactly WINDOW_MS after it was made
        clock.advance(WINDOW_MS - 5000)
        assert limiter.is_allowed("k", 5, WINDOW_MS)
        assert not limiter.is_allowed("k", 5, WINDOW_MS)

    def test_denied_attempts_are_not_recorded(self, limiter, clock):
        for _ in range(5):
            limiter.is_allowed("k", 5, WINDOW_MS)
        for _ in range(10):
            assert not limiter.is_allowed("k", 5, WINDOW_MS)

        clock.advance(WINDOW_MS)
        assert limiter.is_allowed("k", 5, WINDOW_MS)

    def test_reset_clears_key(self, limiter):
        for _ in range(5):
            limiter.is_allowed("k", 5, WINDOW_MS)
        limiter.reset("k")
        assert limiter.is_allowed("k", 5, WINDOW_MS)

    def test_reset_unknown_key_is_noop(self, limiter):
        limiter.reset("never-seen")

    def test_retry_after(self, limiter, clock):
        assert limiter.retry_after("k", 2, 10_000) == 0
        limiter.is_allowed("k", 2, 10_000)
        limiter.is_allowed("k", 2, 10_000)
        clock.advance(4_000)
        assert limiter.retry_after("k", 2, 10_000) == 7


class TestRateLimiterSingleton:
    def test_singleton_and_reset(self):
        reset_rate_limiter()
        first = get_rate_limiter()
        assert get_rate_limiter() is first
        reset_rate_limiter()
        assert get_rate_limiter() is not first
        reset_rate_limiter()
