"""Prepend messages transformer.

Inserts operator-configured boilerplate messages into the conversation.
"""

import dataclasses
import json
from typing import Any

from src.conversion.pipeline.base import ConversionContext, RequestTransformer
from src.core.exceptions import ConfigurationError


def parse_pre_messages(raw: str) -> list[dict[str, Any]]:
    """Parse PRE_MESSAGES_JSON into a list of ``{role, content}`` dicts.

    Raises:
        ConfigurationError: If the value is not a JSON list of message objects.
    """
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"PRE_MESSAGES_JSON is not valid JSON: {e}") from e
    if not isinstance(parsed, list) or not all(
        isinstance(item, dict) and "role" in item for item in parsed
    ):
        raise ConfigurationError("PRE_MESSAGES_JSON must be a JSON list of {role, content} objects")
    return parsed


def insert_after_last_system(
    messages: list[dict[str, Any]], extra: list[dict[str, Any]]
) -> list[dict[str, Any]]:
    """Return a new list with ``extra`` after the last system message, or first."""
    insert_at = 0
    for i, message in enumerate(messages):
        if message.get("role") == "system":
            insert_at = i + 1
    return [*messages[:insert_at], *extra, *messages[insert_at:]]


class PrependMessagesTransformer(RequestTransformer):
    """Adds PRE_MESSAGES_JSON messages after the last system message.

    The client's messages are never modified in place, so rebuilding the body
    for a retry starts from the same input and never duplicates the prepend.
    """

    def transform(self, context: ConversionContext) -> ConversionContext:
        if not context.pre_messages_json.strip():
            return context
        extra = parse_pre_messages(context.pre_messages_json)
        return dataclasses.replace(
            context, messages=insert_after_last_system(context.messages, extra)
        )
