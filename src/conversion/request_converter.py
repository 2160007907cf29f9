import json
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from src.core.exceptions import TokenLimitExceededError, UnsupportedModelError
from src.core.logging import ConversationLogger
from src.core.model_registry import ModelInfo, ModelRegistry
from src.models.openai import ChatCompletionRequest, ChatMessage

if TYPE_CHECKING:
    from src.conversion.pipeline.base import ConversionContext

logger = logging.getLogger(__name__)
conversation_logger = ConversationLogger.get_logger()

CONTENT_TEXT = "text"
CONTENT_IMAGE_URL = "image_url"
CONTENT_IMAGE = "image"


def _is_empty_content(content: Any) -> bool:
    return content is None or content == "" or (isinstance(content, list) and not content)


def remove_empty_content_messages(messages: Sequence[ChatMessage]) -> list[ChatMessage]:
    """Drop messages whose content is null, an empty string or an empty list."""
    return [msg for msg in messages if not _is_empty_content(msg.content)]


def validate_chat_request(request: ChatCompletionRequest, registry: ModelRegistry) -> ModelInfo:
    """Check the model and token ceiling before any upstream call.

    Raises:
        UnsupportedModelError: If the model is not registered.
        TokenLimitExceededError: If max_tokens exceeds the model's ceiling.
    """
    model_info = registry.get(request.model)
    if model_info is None:
        raise UnsupportedModelError(request.model)
    if request.max_tokens is not None and request.max_tokens > model_info.max_tokens:
        raise TokenLimitExceededError(request.max_tokens, model_info.max_tokens)
    return model_info


def transform_model_id(model_id: str) -> str:
    """Drop the ``provider:`` prefix; later colons belong to the model id."""
    _, sep, rest = model_id.partition(":")
    return rest if sep else model_id


def _serialize_content(content: Any) -> str:
    if isinstance(content, str):
        return content
    try:
        return json.dumps(content, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(content)


def transform_content(content: Any) -> list[dict[str, Any]]:
    """Convert OpenAI message content into upstream content items."""
    if isinstance(content, str):
        return [{"type": CONTENT_TEXT, "text": content}]

    if isinstance(content, list):
        items: list[dict[str, Any]] = []
        for part in content:
            if not isinstance(part, dict):
                continue
            part_type = part.get("type")
            if part_type == CONTENT_TEXT:
                text = part.get("text")
                items.append({"type": CONTENT_TEXT, "text": text if isinstance(text, str) else ""})
            elif part_type == CONTENT_IMAGE_URL:
                image_url = part.get("image_url")
                if isinstance(image_url, dict):
                    url = image_url.get("url")
                    items.append(
                        {
                            "type": CONTENT_IMAGE,
                            "image": {"url": url if isinstance(url, str) else ""},
                        }
                    )
            else:
                logger.debug(f"Dropping unsupported content part type: {part_type}")
        return items

    return [{"type": CONTENT_TEXT, "text": _serialize_content(content)}]


def convert_message(message: dict[str, Any]) -> dict[str, Any]:
    return {"role": message.get("role"), "content": transform_content(message.get("content"))}


def _build_initial_context(
    request: ChatCompletionRequest,
    *,
    pre_messages_json: str,
    default_max_tokens: int,
) -> "ConversionContext":
    from src.conversion.pipeline.base import ConversionContext

    messages = [
        {"role": msg.role, "content": msg.content}
        for msg in remove_empty_content_messages(request.messages)
    ]
    return ConversionContext(
        chat_request=request,
        messages=messages,
        pre_messages_json=pre_messages_json,
        default_max_tokens=default_max_tokens,
    )


def convert_chat_to_upstream(
    request: ChatCompletionRequest,
    *,
    pre_messages_json: str = "",
    default_max_tokens: int = 8192,
) -> dict[str, Any]:
    """Convert an OpenAI chat request to the upstream chat body.

    Pure: the request is never modified, so calling this once per attempt
    yields identical bodies.

    Raises:
        ConfigurationError: If PRE_MESSAGES_JSON is invalid.
    """
    from src.conversion.pipeline import RequestPipelineFactory

    context = _build_initial_context(
        request, pre_messages_json=pre_messages_json, default_max_tokens=default_max_tokens
    )
    body = RequestPipelineFactory.create_default().execute(context)
    conversation_logger.debug(
        f"Converted request for model {request.model}: "
        f"{len(body['request_payload'].get('messages', []))} messages"
    )
    return body
