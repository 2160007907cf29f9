"""Loading of relay settings from the environment.

Raw strings are coerced by the spec's ``type_hint`` (or its own ``coerce``)
and checked by its ``validator``. Every failure becomes a ``ConfigError``
naming the variable, so ``rovo-relay config check`` can list all of them.
"""

import os
from collections.abc import Callable
from typing import Any

from src.core.config.schema import ConfigSchema, EnvVarSpec

TRUTHY = frozenset({"true", "1", "yes", "on"})


class ConfigError(Exception):
    """A relay setting could not be loaded.

    Attributes:
        env_var: The environment variable name
        value: The raw value that was rejected
        message: What was wrong with it
    """

    def __init__(self, env_var: str, value: str, message: str) -> None:
        self.env_var = env_var
        self.value = value
        self.message = message
        super().__init__(f"{env_var}={value}: {message}")


def _split_list(raw: str) -> tuple[str, ...]:
    return tuple(part for part in (p.strip() for p in raw.split(",")) if part)


_COERCERS: dict[type, Callable[[str], Any]] = {
    bool: lambda raw: raw.strip().lower() in TRUTHY,
    int: lambda raw: int(raw.strip()),
    float: lambda raw: float(raw.strip()),
    tuple: _split_list,
    str: lambda raw: raw,
}


def _coerce(spec: EnvVarSpec, raw: str) -> Any:
    coerce = spec.coerce or _COERCERS.get(spec.type_hint, _COERCERS[str])
    try:
        return coerce(raw)
    except (ValueError, TypeError) as e:
        raise ConfigError(spec.name, raw, f"expected {spec.type_hint.__name__} ({e})") from e


def load_env_var(spec: EnvVarSpec) -> Any:
    """Read one setting; unset variables take the spec's default unchecked.

    Raises:
        ConfigError: If the value cannot be coerced or fails the validator.
    """
    raw = os.environ.get(spec.name)
    if raw is None:
        return spec.default

    value = _coerce(spec, raw)
    if spec.validator is None:
        return value

    try:
        accepted = spec.validator(value)
    except (TypeError, IndexError) as e:
        raise ConfigError(spec.name, raw, f"validator error: {e}") from e
    if not accepted:
        raise ConfigError(spec.name, raw, f"out of range: {spec.description}")
    return value


def load_all_specs() -> dict[str, Any]:
    """Load every setting, keeping a ConfigError in place of each bad value."""
    result: dict[str, Any] = {}
    for name, spec in ConfigSchema.all_specs().items():
        try:
            result[name] = load_env_var(spec)
        except ConfigError as e:
            result[name] = e
    return result


def validate_all() -> list[ConfigError]:
    """Every configuration error in the current environment, empty when valid."""
    return [value for value in load_all_specs().values() if isinstance(value, ConfigError)]
