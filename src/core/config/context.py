"""Isolated Config instances for tests.

``Config`` reads the environment once, so tests build their own instance
inside ``temporary_config`` instead of touching the module singleton.
"""

import os
from collections.abc import Generator
from contextlib import contextmanager

from src.core.config.config import Config
from src.core.config.schema import ConfigSchema


@contextmanager
def temporary_config(
    env_overrides: dict[str, str] | None = None,
    clear_schema_vars: bool = True,
) -> Generator[Config, None, None]:
    """Yield a Config built from ``env_overrides``; the environment is restored after.

    Args:
        env_overrides: Environment variables to set, e.g. {"RELAY_CREDENTIALS": "a,b"}
        clear_schema_vars: Unset every relay variable first so values from
            the developer's shell or .env do not leak in.

    Example:
        with temporary_config({"CUSTOM_HEADER_KEY_ENABLED": "true"}) as cfg:
            assert cfg.custom_header_key_enabled
    """
    saved_env = os.environ.copy()
    try:
        if clear_schema_vars:
            for spec in ConfigSchema.all_specs().values():
                os.environ.pop(spec.name, None)
        os.environ.update(env_overrides or {})
        yield Config()
    finally:
        os.environ.clear()
        os.environ.update(saved_env)
