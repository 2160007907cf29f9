"""Request context dataclass for encapsulating request processing data."""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from typing import Any

from src.core.credentials import PoolView
from src.core.model_registry import ModelInfo
from src.models.openai import ChatCompletionRequest


@dataclass(frozen=True)
class ChatRequestContext:
    """Immutable context for one /v1/chat/completions request.

    The pool view is the only mutable member: its cursor advances as the
    failover orchestrator retries, and it is never shared between requests.
    """

    request: ChatCompletionRequest
    request_id: str
    model_info: ModelInfo
    pool: PoolView
    upstream_body: dict[str, Any]
    http_request: Any = None  # FastAPI Request

    @property
    def is_streaming(self) -> bool:
        return bool(self.request.stream)

    @property
    def model(self) -> str:
        return self.request.model

    @property
    def prompt_text(self) -> str:
        """Serialized upstream body, the basis for prompt token accounting."""
        return json.dumps(self.upstream_body, ensure_ascii=False)

    def build_body(self) -> dict[str, Any]:
        """Fresh copy of the upstream body for one attempt."""
        return copy.deepcopy(self.upstream_body)

    async def is_disconnected(self) -> bool:
        if self.http_request is None:
            return False
        return await self.http_request.is_disconnected()
