"""
In-process usage metrics for gateway operations.

Counters live for the lifetime of the process only. Writers take a short
lock so concurrent updates never lose increments; readers get a
point-in-time snapshot.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass
class OperationMetric:
    """Aggregates for one operation name."""
    count: int = 0
    total_latency_ms: float = 0.0
    success_count: int = 0
    failure_count: int = 0
    cancelled_count: int = 0

    @property
    def average_latency_ms(self) -> float:
        return self.total_latency_ms / self.count if self.count else 0.0


class MetricsRegistry:
    """
    Invocation counts, latencies, rate-limit hits and cache hit/miss counters.

    ``average_response_time`` is the latency average across every recorded
    invocation: sum of per-operation ``total_latency_ms`` over sum of
    per-operation ``count``.
    """

    OUTCOME_SUCCESS = "success"
    OUTCOME_FAILURE = "failure"
    OUTCOME_CANCELLED = "cancelled"

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._lock = threading.Lock()
        self._operations: Dict[str, OperationMetric] = {}
        self._rate_limit_hits: Dict[str, int] = defaultdict(int)
        self._errors_by_category: Dict[str, int] = defaultdict(int)
        self._cache_hits = 0
        self._cache_misses = 0
        self._total_requests = 0

    def record_invocation(
        self,
        op_name: str,
        duration_ms: float,
        success: bool,
        outcome: Optional[str] = None
    ) -> None:
        """
        Record one execution attempt.

        Args:
            op_name: Operation name
            duration_ms: Elapsed wall time of the attempt
            success: Whether the attempt succeeded
            outcome: Optional explicit outcome; ``"cancelled"`` is counted
                separately from error-caused failures
        """
        if not self.enabled:
            return
        outcome = outcome or (self.OUTCOME_SUCCESS if success else self.OUTCOME_FAILURE)
        with self._lock:
            metric = self._operations.get(op_name)
            if metric is None:
                metric = self._operations[op_name] = OperationMetric()
            metric.count += 1
            metric.total_latency_ms += max(0.0, float(duration_ms))
            if outcome == self.OUTCOME_SUCCESS:
                metric.success_count += 1
            elif outcome == self.OUTCOME_CANCELLED:
                metric.cancelled_count += 1
            else:
                metric.failure_count += 1
            self._total_requests += 1

    def record_cancellation(self, op_name: str) -> None:
        """Count a cancellation that happened between attempts (no attempt ran)."""
        if not self.enabled:
            return
        with self._lock:
            metric = self._operations.get(op_name)
            if metric is None:
                metric = self._operations[op_name] = OperationMetric()
            metric.cancelled_count += 1

    def record_rate_limit_hit(self, category: str) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._rate_limit_hits[category] += 1

    def record_error(self, category: str) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._errors_by_category[category] += 1

    def record_cache_hit(self) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._cache_hits += 1

    def record_cache_miss(self) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._cache_misses += 1

    @property
    def cache_hits(self) -> int:
        return self._cache_hits

    @property
    def cache_misses(self) -> int:
        return self._cache_misses

    @property
    def total_requests(self) -> int:
        return self._total_requests

    @property
    def average_response_time(self) -> float:
        """Rolling average latency in ms across all operations."""
        with self._lock:
            total_time = sum(m.total_latency_ms for m in self._operations.values())
            total_count = sum(m.count for m in self._operations.values())
        return total_time / total_count if total_count > 0 else 0.0

    def get_operation(self, op_name: str) -> Optional[OperationMetric]:
        """Copy of the aggregates for ``op_name``, if any were recorded."""
        with self._lock:
            metric = self._operations.get(op_name)
            return OperationMetric(**asdict(metric)) if metric else None

    def rate_limit_hits(self, category: Optional[str] = None) -> Any:
        with self._lock:
            if category is not None:
                return self._rate_limit_hits.get(category, 0)
            return dict(self._rate_limit_hits)

    def errors_by_category(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._errors_by_category)

    def snapshot(self) -> Dict[str, Any]:
        """Point-in-time copy of every counter."""
        with self._lock:
            operations = {name: asdict(m) for name, m in self._operations.items()}
            total_time = sum(m.total_latency_ms for m in self._operations.values())
            total_count = sum(m.count for m in self._operations.values())
            cache_lookups = self._cache_hits + self._cache_misses
            return {
                "total_requests": self._total_requests,
                "requests_by_operation": operations,
                "errors_by_category": dict(self._errors_by_category),
                "average_response_time": total_time / total_count if total_count else 0.0,
                "rate_limit_hits": dict(self._rate_limit_hits),
                "cache_hits": self._cache_hits,
                "cache_misses": self._cache_misses,
                "cache_hit_rate": self._cache_hits / cache_lookups if cache_lookups else 0.0,
            }

    def reset(self) -> None:
        with self._lock:
            self._operations.clear()
            self._rate_limit_hits.clear()
            self._errors_by_category.clear()
            self._cache_hits = 0
            self._cache_misses = 0
            self._total_requests = 0
