"""Unit tests for per-category token-bucket rate limiting."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from steer_ops_gateway.errors import ConfigurationError, RateLimitExceeded
from steer_ops_gateway.models.config import RateLimitSettings, default_rate_limits
from steer_ops_gateway.reliability.rate_limiter import RateLimiter, TokenBucket


def make_limiter(clock, **categories):
    limits = {
        name: RateLimitSettings(points=points, duration_ms=duration_ms)
        for name, (points, duration_ms) in categories.items()
    }
    return RateLimiter(limits, clock=clock)


class TestTokenBucket:
    """Test the bucket arithmetic directly."""

    def test_starts_full(self):
        bucket = TokenBucket(capacity=5, refill_interval_ms=1000)

        assert bucket.tokens_remaining == 5.0

    def test_continuous_refill(self):
        """Test tokens refill proportionally to elapsed time."""
        bucket = TokenBucket(capacity=10, refill_interval_ms=1000)
        for _ in range(10):
            assert bucket.try_consume(0.0) is None

        bucket.refill(500.0)

        assert bucket.tokens_remaining == pytest.approx(5.0)

    def test_refill_never_exceeds_capacity(self):
        bucket = TokenBucket(capacity=3, refill_interval_ms=1000)

        bucket.refill(1_000_000.0)

        assert bucket.tokens_remaining == 3.0

    def test_rejection_reports_wait(self):
        """Test an empty bucket reports the wait for one token."""
        bucket = TokenBucket(capacity=2, refill_interval_ms=1000)
        bucket.try_consume(0.0)
        bucket.try_consume(0.0)

        assert bucket.try_consume(0.0) in (500, 501)
        assert bucket.tokens_remaining == 0.0


class TestRateLimiter:
    """Test admission across categories."""

    @pytest.mark.parametrize("points,duration_ms", [(1, 1000), (3, 60_000), (10, 5000)])
    def test_n_plus_one_is_rejected(self, fake_clock, points, duration_ms):
        """Test N admissions succeed and the (N+1)th is rejected with a wait hint."""
        limiter = make_limiter(fake_clock, authOps=(points, duration_ms))

        for _ in range(points):
            limiter.admit("authOps")

        with pytest.raises(RateLimitExceeded) as exc_info:
            limiter.admit("authOps")

        assert exc_info.value.category == "authOps"
        assert exc_info.value.retry_after_ms > 0
        assert exc_info.value.retry_after_ms <= duration_ms + 1

    def test_retry_after_matches_refill_rate(self, fake_clock):
        limiter = make_limiter(fake_clock, storageOps=(3, 60_000))
        for _ in range(3):
            limiter.admit("storageOps")

        with pytest.raises(RateLimitExceeded) as exc_info:
            limiter.admit("storageOps")

        # One token takes 60000 / 3 ms to refill
        assert 20_000 <= exc_info.value.retry_after_ms <= 20_001

    def test_rejection_message(self, fake_clock):
        limiter = make_limiter(fake_clock, hostingOps=(1, 60_000))
        limiter.admit("hostingOps")

        with pytest.raises(RateLimitExceeded, match="Rate limit exceeded for hostingOps"):
            limiter.admit("hostingOps")

    def test_refill_after_waiting(self, fake_clock):
        """Test a rejected category admits again once a token has refilled."""
        limiter = make_limiter(fake_clock, dataOps=(2, 1000))
        limiter.admit("dataOps")
        limiter.admit("dataOps")

        fake_clock.advance(0.25)
        with pytest.raises(RateLimitExceeded):
            limiter.admit("dataOps")

        fake_clock.advance(0.3)
        limiter.admit("dataOps")

    def test_no_window_boundary_burst(self, fake_clock):
        """Test a full window's worth of tokens is not restored at once."""
        limiter = make_limiter(fake_clock, global_=(10, 1000))
        for _ in range(10):
            limiter.admit("global_")

        fake_clock.advance(0.1)

        assert limiter.available("global_") == pytest.approx(1.0)

    def test_categories_are_independent(self, fake_clock):
        limiter = make_limiter(fake_clock, authOps=(1, 60_000), storageOps=(1, 60_000))
        limiter.admit("authOps")

        limiter.admit("storageOps")
        with pytest.raises(RateLimitExceeded):
            limiter.admit("authOps")

    def test_tokens_never_negative(self, fake_clock):
        limiter = make_limiter(fake_clock, authOps=(2, 60_000))
        for _ in range(2):
            limiter.admit("authOps")
        for _ in range(5):
            with pytest.raises(RateLimitExceeded):
                limiter.admit("authOps")

        assert limiter.available("authOps") >= 0.0

    def test_undeclared_category(self, fake_clock):
        limiter = make_limiter(fake_clock, authOps=(1, 1000))

        with pytest.raises(KeyError):
            limiter.admit("mysteryOps")

    def test_requires_categories(self):
        with pytest.raises(ConfigurationError):
            RateLimiter({})

    def test_reset(self, fake_clock):
        limiter = make_limiter(fake_clock, authOps=(1, 60_000))
        limiter.admit("authOps")

        limiter.reset("authOps")

        limiter.admit("authOps")

    def test_default_categories(self, fake_clock):
        limiter = RateLimiter(default_rate_limits(), clock=fake_clock)

        assert set(limiter.categories()) == {"global", "authOps", "storageOps", "dataOps", "hostingOps"}
        assert limiter.get_state()["hostingOps"]["capacity"] == 100

    def test_concurrent_admission_never_overdraws(self, fake_clock):
        """Test concurrent callers on threads admit exactly capacity requests."""
        limiter = make_limiter(fake_clock, authOps=(100, 60_000))

        def try_admit(_):
            try:
                limiter.admit("authOps")
                return True
            except RateLimitExceeded:
                return False

        with ThreadPoolExecutor(max_workers=16) as pool:
            results = list(pool.map(try_admit, range(400)))

        assert results.count(True) == 100
        assert limiter.available("authOps") == pytest.approx(0.0)
