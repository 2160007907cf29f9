"""Test configuration module for Rovo Relay tests."""

from .test_config import (
    DEFAULT_TEST_CONFIG,
    TEST_CREDENTIALS,
    TEST_ENDPOINTS,
    TEST_HEADERS,
    TEST_MODELS,
)

__all__ = [
    "DEFAULT_TEST_CONFIG",
    "TEST_CREDENTIALS",
    "TEST_ENDPOINTS",
    "TEST_HEADERS",
    "TEST_MODELS",
]
