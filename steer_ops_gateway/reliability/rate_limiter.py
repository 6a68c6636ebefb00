"""
Per-category token-bucket admission control.

Each category owns an independent bucket that refills continuously at
``points / duration`` tokens per millisecond, so there is no burst cliff at
window boundaries the way a fixed window would have.
"""

import logging
import math
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, TYPE_CHECKING

from ..errors import ConfigurationError, RateLimitExceeded

if TYPE_CHECKING:
    from ..models.config import RateLimitSettings

logger = logging.getLogger(__name__)


@dataclass
class TokenBucket:
    """Continuously refilling token bucket."""
    capacity: int
    refill_interval_ms: int
    tokens_remaining: float = field(init=False)
    last_refill_ms: float = 0.0

    def __post_init__(self):
        self.tokens_remaining = float(self.capacity)

    @property
    def refill_rate_per_ms(self) -> float:
        return self.capacity / self.refill_interval_ms

    def refill(self, now_ms: float) -> None:
        elapsed = now_ms - self.last_refill_ms
        if elapsed > 0:
            self.tokens_remaining = min(
                float(self.capacity),
                self.tokens_remaining + elapsed * self.refill_rate_per_ms
            )
        self.last_refill_ms = max(self.last_refill_ms, now_ms)

    def try_consume(self, now_ms: float, tokens: float = 1.0) -> Optional[int]:
        """
        Take ``tokens`` from the bucket.

        Returns:
            None when admitted, otherwise the milliseconds until enough
            tokens will have refilled (always > 0)
        """
        self.refill(now_ms)
        if self.tokens_remaining >= tokens:
            self.tokens_remaining -= tokens
            return None
        deficit = tokens - self.tokens_remaining
        return max(1, math.ceil(deficit / self.refill_rate_per_ms))


class RateLimiter:
    """
    Admission control across declared categories.

    Buckets are built once from static config. Token consumption is guarded
    by a lock so concurrent admission checks never overdraw a bucket.
    """

    def __init__(
        self,
        limits: Mapping[str, "RateLimitSettings"],
        clock: Optional[Callable[[], float]] = None
    ):
        """
        Initialize the limiter.

        Args:
            limits: Category name to settings with ``points``/``duration_ms``
            clock: Monotonic clock in seconds (injectable for tests)
        """
        if not limits:
            raise ConfigurationError("RateLimiter requires at least one category")

        self._clock = clock or time.monotonic
        self._lock = threading.Lock()
        now_ms = self._now_ms()
        self._buckets: Dict[str, TokenBucket] = {}
        for category, settings in limits.items():
            bucket = TokenBucket(capacity=settings.points, refill_interval_ms=settings.duration_ms)
            bucket.last_refill_ms = now_ms
            self._buckets[category] = bucket

    def admit(self, category: str, tokens: float = 1.0) -> None:
        """
        Consume a token for ``category``.

        Raises:
            RateLimitExceeded: If the bucket is empty; carries ``retry_after_ms``
            KeyError: If the category was never declared
        """
        bucket = self._buckets.get(category)
        if bucket is None:
            raise KeyError(f"Undeclared rate-limit category: {category}")

        with self._lock:
            retry_after_ms = bucket.try_consume(self._now_ms(), tokens)
            remaining = bucket.tokens_remaining

        if retry_after_ms is None:
            logger.debug(f"Rate limit check passed for {category}")
            return

        logger.warning(
            f"Rate limit exceeded for {category}",
            extra={"category": category, "remaining": remaining, "retry_after_ms": retry_after_ms}
        )
        raise RateLimitExceeded(category, retry_after_ms)

    def available(self, category: str) -> float:
        """Tokens currently available for ``category`` (after refill)."""
        bucket = self._buckets[category]
        with self._lock:
            bucket.refill(self._now_ms())
            return bucket.tokens_remaining

    def categories(self) -> List[str]:
        return list(self._buckets)

    def has_category(self, category: str) -> bool:
        return category in self._buckets

    def reset(self, category: Optional[str] = None) -> None:
        """Refill one bucket (or all) to capacity."""
        with self._lock:
            now_ms = self._now_ms()
            targets = [self._buckets[category]] if category else list(self._buckets.values())
            for bucket in targets:
                bucket.tokens_remaining = float(bucket.capacity)
                bucket.last_refill_ms = now_ms

    def get_state(self) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            now_ms = self._now_ms()
            state = {}
            for category, bucket in self._buckets.items():
                bucket.refill(now_ms)
                state[category] = {
                    "capacity": bucket.capacity,
                    "refill_interval_ms": bucket.refill_interval_ms,
                    "tokens_remaining": bucket.tokens_remaining,
                }
            return state

    def _now_ms(self) -> float:
        return self._clock() * 1000.0
