"""Shared pytest fixtures for Steer Ops Gateway tests."""

import pytest

from steer_ops_gateway.gateway import OperationGateway
from steer_ops_gateway.models.config import GatewayConfig
from steer_ops_gateway.observability.metrics import MetricsRegistry
from tests.helpers.fakes import FakeClock, FakeExecutor, FakeHandle, SleepRecorder


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: exercises the full gateway pipeline")


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep developer environment overrides out of the tests."""
    for var in ("STEER_OPS_CONFIG_JSON", "STEER_OPS_CONFIG_FILE", "STEER_OPS_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def fake_clock():
    """Manually advanced clock starting at t=1000s."""
    return FakeClock()


@pytest.fixture
def sleep_recorder(fake_clock):
    """Sleep replacement that records delays and advances ``fake_clock``."""
    return SleepRecorder(fake_clock)


@pytest.fixture
def metrics():
    return MetricsRegistry()


@pytest.fixture
def gateway_config():
    """Default limits, retry schedule and cache settings."""
    return GatewayConfig()


@pytest.fixture
def executor():
    return FakeExecutor()


@pytest.fixture
def gateway(executor, gateway_config, fake_clock, sleep_recorder):
    """Gateway wired to fakes: no real time passes and no backend is called."""
    return OperationGateway(
        executor,
        handle_factory=FakeHandle,
        config=gateway_config,
        clock=fake_clock,
        sleep=sleep_recorder
    )
