"""Token counting for usage accounting.

Counts are computed locally with tiktoken over the text the relay sends and
receives. They approximate, and are not, the upstream's own billing counts.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import lru_cache
from typing import Any

import tiktoken

TokenCounter = Callable[[str, str], int]

FALLBACK_ENCODING = "cl100k_base"


@lru_cache(maxsize=32)
def _resolve_token_encoder(model_hint: str) -> Any:
    hints: list[str] = []
    normalized = model_hint.strip()
    if normalized:
        hints.append(normalized)
        # "provider:model" and "vendor/model" ids carry the usable name last
        for separator in (":", "/"):
            if separator in normalized:
                suffix = normalized.split(separator, 1)[1].strip()
                if suffix:
                    hints.append(suffix)

    for hint in hints:
        try:
            return tiktoken.encoding_for_model(hint)
        except KeyError:
            continue

    return tiktoken.get_encoding(FALLBACK_ENCODING)


def count_tokens(text: str, model: str) -> int:
    """Count tokens in ``text`` with the encoder that best matches ``model``."""
    if not text:
        return 0
    encoder = _resolve_token_encoder(model)
    return len(encoder.encode(text, disallowed_special=()))
