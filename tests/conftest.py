"""Shared pytest configuration and fixtures for Rovo Relay tests."""

import pytest

# Import HTTP mocking fixtures from fixtures module
pytest_plugins = ["tests.fixtures.mock_http"]

from src.core.config.context import temporary_config  # noqa: E402
from src.core.credentials import CredentialStore  # noqa: E402
from tests.config import DEFAULT_TEST_CONFIG, TEST_CREDENTIALS  # noqa: E402


class FakeClock:
    """Manually advanced clock for quarantine expiry tests."""

    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def credential_store(fake_clock):
    """A fresh shared store loaded with the test credentials."""
    store = CredentialStore(clock=fake_clock)
    store.initialize(",".join(TEST_CREDENTIALS))
    return store


@pytest.fixture
def test_config():
    """Isolated Config built from DEFAULT_TEST_CONFIG."""
    with temporary_config(DEFAULT_TEST_CONFIG) as cfg:
        yield cfg


@pytest.fixture
def make_config():
    """Build an isolated Config from DEFAULT_TEST_CONFIG plus overrides."""
    # Config reads the environment once, so the instance outlives the context
    def _make(**overrides: str):
        with temporary_config({**DEFAULT_TEST_CONFIG, **overrides}) as cfg:
            return cfg

    return _make


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests (fast, no external deps)")
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (requires services)"
    )


def pytest_collection_modifyitems(config, items):
    """Add markers to tests based on their location."""
    for item in items:
        if "tests/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
