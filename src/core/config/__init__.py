"""Configuration package.

Exposes the module-level ``config`` singleton plus the schema and loaders it
is built from.
"""

from src.core.config.config import Config, config, mask_secret
from src.core.config.schema import ConfigSchema, EnvVarSpec
from src.core.config.validation import ConfigError, validate_all

__all__ = [
    "Config",
    "ConfigError",
    "ConfigSchema",
    "EnvVarSpec",
    "config",
    "mask_secret",
    "validate_all",
]
