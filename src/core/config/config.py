"""Configuration singleton for Rovo Relay.

This module provides a simple singleton that gives direct access to
configuration values without unnecessary abstraction. Every value is loaded
once at initialization time from environment variables using the
schema-based validation in ``validation.py``.
"""

import hashlib
from typing import Any

from src.core.config.schema import ConfigSchema, EnvVarSpec
from src.core.config.validation import load_env_var


def mask_secret(value: str | None) -> str:
    """Render a secret as a short, stable fingerprint safe for logs and tables."""
    if not value:
        return "<not-set>"
    return "sha256:" + hashlib.sha256(value.encode()).hexdigest()[:16] + "..."


class Config:
    """Configuration singleton with direct access to all settings.

    Values are read-only properties; build a new instance (or use
    ``temporary_config``) to pick up environment changes.
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {
            name: load_env_var(spec) for name, spec in ConfigSchema.all_specs().items()
        }

    def _get(self, spec: EnvVarSpec) -> Any:
        return self._values[spec.name]

    # Server settings
    @property
    def host(self) -> str:
        return self._get(ConfigSchema.HOST)

    @property
    def port(self) -> int:
        return self._get(ConfigSchema.PORT)

    @property
    def log_level(self) -> str:
        return self._get(ConfigSchema.LOG_LEVEL)

    @property
    def route_prefix(self) -> str:
        return self._get(ConfigSchema.ROUTE_PREFIX)

    # Security settings
    @property
    def api_secrets(self) -> tuple[str, ...]:
        return self._get(ConfigSchema.API_SECRET)

    def validate_client_api_key(self, client_api_key: str | None) -> bool:
        if not self.api_secrets:
            return True
        return client_api_key is not None and client_api_key in self.api_secrets

    # Credential pool settings
    @property
    def credentials_raw(self) -> str:
        return self._get(ConfigSchema.RELAY_CREDENTIALS)

    @property
    def rate_limit_lock_seconds(self) -> int:
        return self._get(ConfigSchema.RATE_LIMIT_LOCK_SECONDS)

    @property
    def custom_header_key_enabled(self) -> bool:
        return self._get(ConfigSchema.CUSTOM_HEADER_KEY_ENABLED)

    # Translation settings
    @property
    def pre_messages_json(self) -> str:
        return self._get(ConfigSchema.PRE_MESSAGES_JSON)

    @property
    def default_max_tokens(self) -> int:
        return self._get(ConfigSchema.DEFAULT_MAX_TOKENS)

    @property
    def model_registry_json(self) -> str:
        return self._get(ConfigSchema.MODEL_REGISTRY_JSON)

    # Upstream settings
    @property
    def upstream_base_url(self) -> str:
        return self._get(ConfigSchema.UPSTREAM_BASE_URL).rstrip("/")

    @property
    def proxy_url(self) -> str | None:
        return self._get(ConfigSchema.PROXY_URL) or None

    # Timeout settings
    @property
    def request_timeout(self) -> int:
        return self._get(ConfigSchema.REQUEST_TIMEOUT)

    @property
    def streaming_read_timeout(self) -> float | None:
        return self._get(ConfigSchema.STREAMING_READ_TIMEOUT_SECONDS)

    @property
    def streaming_connect_timeout(self) -> float:
        return self._get(ConfigSchema.STREAMING_CONNECT_TIMEOUT_SECONDS)

    # Utility methods
    def display_values(self) -> dict[str, str]:
        """Environment variable names mapped to printable values, secrets masked."""
        rows: dict[str, str] = {}
        for spec in sorted(ConfigSchema.all_specs().values(), key=lambda s: s.name):
            value = self._values[spec.name]
            if spec.secret:
                if isinstance(value, tuple):
                    value = ",".join(value)
                rows[spec.name] = mask_secret(value)
            else:
                rows[spec.name] = "" if value is None else str(value)
        return rows


# Module-level singleton
config = Config()
