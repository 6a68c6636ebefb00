"""Unit tests for the metrics registry."""

import random
import threading

import pytest

from steer_ops_gateway.observability.metrics import MetricsRegistry


class TestMetricsRegistry:
    """Test counters and aggregates."""

    def test_empty_registry(self, metrics):
        assert metrics.total_requests == 0
        assert metrics.average_response_time == 0.0
        assert metrics.get_operation("listUsers") is None

    def test_record_invocation(self, metrics):
        metrics.record_invocation("listUsers", 100.0, True)
        metrics.record_invocation("listUsers", 300.0, False)

        metric = metrics.get_operation("listUsers")
        assert metric.count == 2
        assert metric.total_latency_ms == 400.0
        assert metric.success_count == 1
        assert metric.failure_count == 1
        assert metric.average_latency_ms == 200.0

    def test_cancelled_outcome_counted_separately(self, metrics):
        metrics.record_invocation("deployHosting", 0.0, False, outcome=MetricsRegistry.OUTCOME_CANCELLED)

        metric = metrics.get_operation("deployHosting")
        assert metric.cancelled_count == 1
        assert metric.failure_count == 0

    def test_record_cancellation_leaves_latency_alone(self, metrics):
        """Test a between-attempt cancellation is not a latency sample."""
        metrics.record_invocation("deployHosting", 100.0, False)
        metrics.record_cancellation("deployHosting")

        metric = metrics.get_operation("deployHosting")
        assert metric.count == 1
        assert metric.cancelled_count == 1
        assert metrics.total_requests == 1
        assert metrics.average_response_time == 100.0

    def test_average_across_operations(self, metrics):
        """Test the average is weighted by count, not a mean of per-op averages."""
        metrics.record_invocation("listUsers", 100.0, True)
        metrics.record_invocation("listFiles", 200.0, True)
        metrics.record_invocation("listFiles", 600.0, True)

        assert metrics.average_response_time == pytest.approx(300.0)

    def test_rate_limit_and_cache_counters(self, metrics):
        metrics.record_rate_limit_hit("authOps")
        metrics.record_rate_limit_hit("authOps")
        metrics.record_rate_limit_hit("hostingOps")
        metrics.record_cache_hit()
        metrics.record_cache_miss()
        metrics.record_cache_miss()

        assert metrics.rate_limit_hits("authOps") == 2
        assert metrics.rate_limit_hits() == {"authOps": 2, "hostingOps": 1}
        assert metrics.cache_hits == 1
        assert metrics.cache_misses == 2

    def test_rate_limit_hit_is_not_an_invocation(self, metrics):
        metrics.record_rate_limit_hit("authOps")

        assert metrics.total_requests == 0

    def test_snapshot(self, metrics):
        metrics.record_invocation("listUsers", 50.0, True)
        metrics.record_error("Network")
        metrics.record_cache_hit()
        metrics.record_cache_miss()

        snapshot = metrics.snapshot()

        assert snapshot["total_requests"] == 1
        assert snapshot["requests_by_operation"]["listUsers"]["count"] == 1
        assert snapshot["errors_by_category"] == {"Network": 1}
        assert snapshot["cache_hit_rate"] == 0.5
        assert snapshot["average_response_time"] == 50.0

    def test_get_operation_returns_copy(self, metrics):
        metrics.record_invocation("listUsers", 10.0, True)

        copy = metrics.get_operation("listUsers")
        copy.count = 99

        assert metrics.get_operation("listUsers").count == 1

    def test_disabled_registry_records_nothing(self):
        metrics = MetricsRegistry(enabled=False)
        metrics.record_invocation("listUsers", 10.0, True)
        metrics.record_rate_limit_hit("authOps")
        metrics.record_cache_hit()

        assert metrics.total_requests == 0
        assert metrics.cache_hits == 0
        assert metrics.rate_limit_hits() == {}

    def test_reset(self, metrics):
        metrics.record_invocation("listUsers", 10.0, True)
        metrics.record_cache_hit()

        metrics.reset()

        assert metrics.snapshot()["total_requests"] == 0
        assert metrics.cache_hits == 0

    def test_concurrent_writers_lose_nothing(self, metrics):
        def writer():
            for _ in range(1000):
                metrics.record_invocation("listUsers", 1.0, True)
                metrics.record_cache_hit()

        threads = [threading.Thread(target=writer) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert metrics.get_operation("listUsers").count == 8000
        assert metrics.cache_hits == 8000


class TestAverageResponseTimeProperty:
    """averageResponseTime equals sum(totalLatencyMs) / sum(count) for any sequence."""

    OPERATIONS = ["listUsers", "createUser", "listFiles", "deployHosting", "queryDocuments"]

    @pytest.mark.parametrize("seed", range(25))
    def test_average_matches_definition(self, seed):
        rng = random.Random(seed)
        metrics = MetricsRegistry()
        recorded = []

        for _ in range(rng.randint(1, 200)):
            op_name = rng.choice(self.OPERATIONS)
            duration = rng.uniform(0, 5000)
            metrics.record_invocation(op_name, duration, rng.random() < 0.8)
            recorded.append(duration)

        per_op = [metrics.get_operation(name) for name in self.OPERATIONS]
        per_op = [metric for metric in per_op if metric is not None]
        expected = sum(m.total_latency_ms for m in per_op) / sum(m.count for m in per_op)

        assert metrics.average_response_time == pytest.approx(expected)
        assert metrics.average_response_time == pytest.approx(sum(recorded) / len(recorded))
        assert metrics.total_requests == len(recorded)
