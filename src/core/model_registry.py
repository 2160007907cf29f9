"""Registry of models the relay accepts and their max-token ceilings."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass

from src.core.exceptions import ConfigurationError

DEFAULT_MODEL_MAX_TOKENS: dict[str, int] = {
    "anthropic:claude-3-5-sonnet-v2@20241022": 200000,
    "anthropic:claude-3-7-sonnet@20250219": 200000,
    "anthropic:claude-sonnet-4@20250514": 200000,
    "anthropic:claude-opus-4@20250514": 200000,
    "bedrock:anthropic.claude-3-5-sonnet-20241022-v2:0": 200000,
    "bedrock:anthropic.claude-3-7-sonnet-20250219-v1:0": 200000,
    "bedrock:anthropic.claude-sonnet-4-20250514-v1:0": 200000,
    "bedrock:anthropic.claude-opus-4-20250514-v1:0": 200000,
}


@dataclass(frozen=True, slots=True)
class ModelInfo:
    model: str
    max_tokens: int


class ModelRegistry:
    """Read-only lookup of supported models, in registration order."""

    def __init__(self, max_tokens_by_model: Mapping[str, int]) -> None:
        self._models = {
            name: ModelInfo(model=name, max_tokens=limit)
            for name, limit in max_tokens_by_model.items()
        }

    def get(self, model: str) -> ModelInfo | None:
        return self._models.get(model)

    def list_models(self) -> list[str]:
        return list(self._models)

    def __contains__(self, model: object) -> bool:
        return model in self._models

    def __len__(self) -> int:
        return len(self._models)

    @classmethod
    def from_json(cls, raw: str) -> ModelRegistry:
        """Build a registry from MODEL_REGISTRY_JSON, or the defaults when empty.

        Raises:
            ConfigurationError: If the JSON is not an object of positive integers.
        """
        if not raw.strip():
            return cls(DEFAULT_MODEL_MAX_TOKENS)
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"MODEL_REGISTRY_JSON is not valid JSON: {e}") from e
        if not isinstance(parsed, dict) or not parsed:
            raise ConfigurationError("MODEL_REGISTRY_JSON must be a non-empty JSON object")
        for name, limit in parsed.items():
            if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
                raise ConfigurationError(
                    f"MODEL_REGISTRY_JSON entry {name!r} must map to a positive integer"
                )
        return cls(parsed)
