"""Every environment variable the relay reads, in one declarative table.

Each ``EnvVarSpec`` carries its default, target type, optional validator
and whether it is secret. ``Config`` and ``rovo-relay config show`` are both
driven from this table.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class EnvVarSpec:
    """Specification for a single environment variable.

    Attributes:
        name: Environment variable name (e.g., "PORT", "LOG_LEVEL")
        default: Default value if env var not set
        type_hint: Type for validation (int, str, float, bool, tuple)
        description: Human-readable description for docs
        validator: Optional custom validation function
        coerce: Optional function to convert string to target type
        secret: Whether the value must be masked when displayed
    """

    name: str
    default: Any
    type_hint: type
    description: str
    validator: Callable[[Any], bool] | None = None
    coerce: Callable[[str], Any] | None = None
    secret: bool = False


class ConfigSchema:
    """Registry of all configuration environment variables."""

    # === Server Settings ===

    HOST = EnvVarSpec(
        name="HOST",
        default="0.0.0.0",
        type_hint=str,
        description="Server host address to bind to",
    )

    PORT = EnvVarSpec(
        name="PORT",
        default=10111,
        type_hint=int,
        description="Server port number",
        validator=lambda x: 1 <= x <= 65535,
    )

    LOG_LEVEL = EnvVarSpec(
        name="LOG_LEVEL",
        default="INFO",
        type_hint=str,
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        validator=lambda x: x.split()[0].upper() in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )

    ROUTE_PREFIX = EnvVarSpec(
        name="ROUTE_PREFIX",
        default="",
        type_hint=str,
        description="Path prefix for the /v1 routes (e.g. /rovo)",
        validator=lambda x: x == "" or (x.startswith("/") and not x.endswith("/")),
    )

    # === Security ===

    API_SECRET = EnvVarSpec(
        name="API_SECRET",
        default=(),
        type_hint=tuple,
        description="Comma-separated bearer secrets accepted from clients (empty = open)",
        secret=True,
    )

    # === Credential Pool ===

    RELAY_CREDENTIALS = EnvVarSpec(
        name="RELAY_CREDENTIALS",
        default="",
        type_hint=str,
        description="Comma-separated upstream credentials forming the shared pool",
        secret=True,
    )

    RATE_LIMIT_LOCK_SECONDS = EnvVarSpec(
        name="RATE_LIMIT_LOCK_SECONDS",
        default=600,
        type_hint=int,
        description="How long a rate-limited credential stays quarantined",
        validator=lambda x: x >= 0,
    )

    CUSTOM_HEADER_KEY_ENABLED = EnvVarSpec(
        name="CUSTOM_HEADER_KEY_ENABLED",
        default=False,
        type_hint=bool,
        description="Take credentials from the client's Authorization header instead of the pool",
    )

    # === Request Translation ===

    PRE_MESSAGES_JSON = EnvVarSpec(
        name="PRE_MESSAGES_JSON",
        default="",
        type_hint=str,
        description="JSON list of messages inserted after the last system message",
    )

    DEFAULT_MAX_TOKENS = EnvVarSpec(
        name="DEFAULT_MAX_TOKENS",
        default=8192,
        type_hint=int,
        description="max_tokens sent upstream when the client supplies a non-positive value",
        validator=lambda x: x > 0,
    )

    MODEL_REGISTRY_JSON = EnvVarSpec(
        name="MODEL_REGISTRY_JSON",
        default="",
        type_hint=str,
        description='JSON object replacing the built-in model registry ({"model": max_tokens})',
    )

    # === Upstream ===

    UPSTREAM_BASE_URL = EnvVarSpec(
        name="UPSTREAM_BASE_URL",
        default="https://api.atlassian.com/rovodev/v2/proxy/ai",
        type_hint=str,
        description="Base URL of the upstream chat API",
        validator=lambda x: x.startswith(("http://", "https://")),
    )

    PROXY_URL = EnvVarSpec(
        name="PROXY_URL",
        default=None,
        type_hint=str,
        description="Optional outbound HTTP proxy for upstream requests",
    )

    # === Timeout Settings ===

    REQUEST_TIMEOUT = EnvVarSpec(
        name="REQUEST_TIMEOUT",
        default=600,
        type_hint=int,
        description="Overall upstream request timeout in seconds",
        validator=lambda x: x > 0,
    )

    STREAMING_READ_TIMEOUT_SECONDS = EnvVarSpec(
        name="STREAMING_READ_TIMEOUT_SECONDS",
        default=None,
        type_hint=float,
        description="Read timeout for streaming SSE requests (None = unlimited)",
        validator=lambda x: x is None or x > 0,
    )

    STREAMING_CONNECT_TIMEOUT_SECONDS = EnvVarSpec(
        name="STREAMING_CONNECT_TIMEOUT_SECONDS",
        default=30,
        type_hint=float,
        description="Connect timeout for streaming requests",
        validator=lambda x: x > 0,
    )

    @classmethod
    def all_specs(cls) -> dict[str, EnvVarSpec]:
        """Attribute name to EnvVarSpec for every declared setting."""
        return {
            name: getattr(cls, name)
            for name in dir(cls)
            if isinstance(getattr(cls, name), EnvVarSpec)
        }

