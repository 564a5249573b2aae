"""Shared fixtures for provisioner tests."""

import pytest
import structlog

from searxng_provisioner.config import Settings
from searxng_provisioner.provisioner import Provisioner
from searxng_provisioner.schemas import TargetSizing, TargetSpec

from .fixtures.fake_backend import FakeBackend

FAST_POLLING = {
    "start_attempts": 3,
    "start_interval": 0,
    "address_attempts": 2,
    "address_interval": 0,
    "cache_ready_attempts": 3,
    "cache_ready_interval": 0,
    "verify_attempts": 3,
    "verify_interval": 0,
}


@pytest.fixture(autouse=True)
def reset_log_context():
    yield
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment, with instant polling."""
    return Settings(_env_file=None, **FAST_POLLING)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def provisioner(backend, settings, sleeps) -> Provisioner:
    return Provisioner(backend, settings, sleep=sleeps.append)


@pytest.fixture
def spec() -> TargetSpec:
    return TargetSpec(
        hostname="searxng-server",
        sizing=TargetSizing(cores=2, memory_mb=2048, swap_mb=512),
    )
