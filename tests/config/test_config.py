"""Shared test constants for Rovo Relay tests."""

TEST_CREDENTIALS = ("cred-alpha", "cred-bravo", "cred-charlie")

TEST_MODELS = {
    "default": "anthropic:claude-sonnet-4@20250514",
    "bedrock": "bedrock:anthropic.claude-sonnet-4-20250514-v1:0",
    "unsupported": "openai:gpt-4o",
}

TEST_ENDPOINTS = {
    "upstream_base": "https://upstream.test/rovodev/v2/proxy/ai",
    "upstream_chat": "https://upstream.test/rovodev/v2/proxy/ai/v2/beta/chat",
}

TEST_HEADERS = {
    "client_secret": "relay-secret",
}

DEFAULT_TEST_CONFIG = {
    "RELAY_CREDENTIALS": ",".join(TEST_CREDENTIALS),
    "UPSTREAM_BASE_URL": TEST_ENDPOINTS["upstream_base"],
    "LOG_LEVEL": "DEBUG",
}
