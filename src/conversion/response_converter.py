"""Building OpenAI-compatible responses from relayed upstream text.

Usage numbers are computed locally with a token counter over the serialized
upstream body (prompt) and the relayed text (completion). They approximate
the upstream's accounting and are not reported by it.
"""

import time
from datetime import datetime
from typing import Any

from src.core.tokens import TokenCounter, count_tokens
from src.models.upstream import UpstreamEnvelope

ASSISTANT_ROLE = "assistant"
FINISH_STOP = "stop"


def new_response_id(now: datetime | None = None) -> str:
    return "chatcmpl-" + (now or datetime.now()).strftime("%Y%m%d%H%M%S")


def extract_delta_text(envelope: UpstreamEnvelope) -> str:
    return envelope.text()


def build_usage(prompt_tokens: int, completion_tokens: int) -> dict[str, int]:
    return {
        "prompt_tokens": prompt_tokens,
        "completion_tokens": completion_tokens,
        "total_tokens": prompt_tokens + completion_tokens,
    }


def compute_usage(
    prompt_text: str,
    completion_text: str,
    model: str,
    counter: TokenCounter = count_tokens,
) -> dict[str, int]:
    return build_usage(counter(prompt_text, model), counter(completion_text, model))


def build_stream_chunk(
    response_id: str,
    model: str,
    content: str,
    usage: dict[str, int],
    finish_reason: str | None = None,
) -> dict[str, Any]:
    return {
        "id": response_id,
        "object": "chat.completion.chunk",
        "created": int(time.time()),
        "model": model,
        "choices": [
            {
                "index": 0,
                "delta": {"role": ASSISTANT_ROLE, "content": content},
                "finish_reason": finish_reason,
            }
        ],
        "usage": usage,
    }


def build_final_chunk(response_id: str, model: str, usage: dict[str, int]) -> dict[str, Any]:
    """Closing chunk: empty delta, ``finish_reason: stop`` and cumulative usage."""
    return build_stream_chunk(response_id, model, "", usage, FINISH_STOP)


def build_chat_completion(
    response_id: str, model: str, content: str, usage: dict[str, int]
) -> dict[str, Any]:
    return {
        "id": response_id,
        "object": "chat.completion",
        "created": int(time.time()),
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": ASSISTANT_ROLE, "content": content},
                "finish_reason": FINISH_STOP,
            }
        ],
        "usage": usage,
    }
