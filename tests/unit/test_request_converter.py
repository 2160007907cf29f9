import json

import pytest

from src.conversion.request_converter import (
    convert_chat_to_upstream,
    remove_empty_content_messages,
    transform_content,
    transform_model_id,
    validate_chat_request,
)
from src.conversion.response_converter import extract_delta_text
from src.core.exceptions import (
    ConfigurationError,
    TokenLimitExceededError,
    UnsupportedModelError,
)
from src.core.model_registry import ModelRegistry
from src.models.openai import ChatCompletionRequest, ChatMessage
from src.models.upstream import UpstreamEnvelope
from tests.config import TEST_MODELS


def _request(**overrides):
    payload = {
        "model": TEST_MODELS["default"],
        "messages": [{"role": "user", "content": "Hello"}],
        "max_tokens": 100,
    }
    payload.update(overrides)
    return ChatCompletionRequest.model_validate(payload)


@pytest.mark.unit
class TestRemoveEmptyContentMessages:
    def test_drops_null_empty_string_and_empty_list(self):
        messages = [
            ChatMessage(role="system", content=None),
            ChatMessage(role="user", content=""),
            ChatMessage(role="user", content=[]),
            ChatMessage(role="user", content="kept"),
        ]
        result = remove_empty_content_messages(messages)
        assert [m.content for m in result] == ["kept"]

    def test_is_idempotent(self):
        messages = [
            ChatMessage(role="user", content="a"),
            ChatMessage(role="assistant", content=""),
            ChatMessage(role="user", content=[{"type": "text", "text": "b"}]),
        ]
        once = remove_empty_content_messages(messages)
        assert remove_empty_content_messages(once) == once


@pytest.mark.unit
class TestValidateChatRequest:
    def test_accepts_registered_model(self):
        info = validate_chat_request(_request(), ModelRegistry.from_json(""))
        assert info.max_tokens == 200000

    def test_rejects_unregistered_model(self):
        with pytest.raises(UnsupportedModelError) as exc_info:
            validate_chat_request(
                _request(model=TEST_MODELS["unsupported"]), ModelRegistry.from_json("")
            )
        assert exc_info.value.status_code == 400
        assert exc_info.value.code == "invalid_model"
        assert exc_info.value.message == f"Model {TEST_MODELS['unsupported']} not supported"

    def test_rejects_max_tokens_above_ceiling(self):
        registry = ModelRegistry({TEST_MODELS["default"]: 1000})
        with pytest.raises(TokenLimitExceededError) as exc_info:
            validate_chat_request(_request(max_tokens=1001), registry)
        assert exc_info.value.code == "invalid_max_tokens"
        assert exc_info.value.message == "Max tokens 1001 exceeds limit 1000"

    def test_ceiling_itself_is_allowed(self):
        registry = ModelRegistry({TEST_MODELS["default"]: 1000})
        validate_chat_request(_request(max_tokens=1000), registry)

    def test_null_max_tokens_is_allowed(self):
        registry = ModelRegistry({TEST_MODELS["default"]: 1000})
        info = validate_chat_request(_request(max_tokens=None, stream=None), registry)
        assert info.max_tokens == 1000


@pytest.mark.unit
class TestTransforms:
    @pytest.mark.parametrize(
        "model_id, expected",
        [
            ("anthropic:claude-sonnet-4@20250514", "claude-sonnet-4@20250514"),
            (
                "bedrock:anthropic.claude-sonnet-4-20250514-v1:0",
                "anthropic.claude-sonnet-4-20250514-v1:0",
            ),
            ("bare-model", "bare-model"),
        ],
    )
    def test_transform_model_id(self, model_id, expected):
        assert transform_model_id(model_id) == expected

    def test_plain_text_content(self):
        assert transform_content("hi") == [{"type": "text", "text": "hi"}]

    def test_mixed_parts(self):
        content = [
            {"type": "text", "text": "look"},
            {"type": "image_url", "image_url": {"url": "https://img.test/a.png"}},
            {"type": "input_audio", "input_audio": {}},
        ]
        assert transform_content(content) == [
            {"type": "text", "text": "look"},
            {"type": "image", "image": {"url": "https://img.test/a.png"}},
        ]

    def test_other_values_are_serialized(self):
        assert transform_content({"k": 1}) == [{"type": "text", "text": '{"k": 1}'}]


@pytest.mark.unit
class TestConvertChatToUpstream:
    def test_body_shape(self):
        body = convert_chat_to_upstream(_request(temperature=0.5, top_p=0.9))

        assert body == {
            "request_payload": {
                "messages": [{"role": "user", "content": [{"type": "text", "text": "Hello"}]}],
                "max_tokens": 100,
                "stream": "true",
                "temperature": 0.5,
                "top_p": 0.9,
            },
            "platform_attributes": {"model": "claude-sonnet-4@20250514"},
        }

    def test_unset_sampling_params_are_omitted(self):
        payload = convert_chat_to_upstream(_request())["request_payload"]
        for name in ("temperature", "frequency_penalty", "presence_penalty", "top_p"):
            assert name not in payload

    @pytest.mark.parametrize("max_tokens", [0, -5, None])
    def test_null_or_non_positive_max_tokens_uses_default(self, max_tokens):
        body = convert_chat_to_upstream(_request(max_tokens=max_tokens), default_max_tokens=8192)
        assert body["request_payload"]["max_tokens"] == 8192

    def test_prepend_after_last_system_message(self):
        request = _request(
            messages=[
                {"role": "system", "content": "s1"},
                {"role": "user", "content": "u1"},
                {"role": "system", "content": "s2"},
                {"role": "user", "content": "u2"},
            ]
        )
        pre = json.dumps([{"role": "user", "content": "boilerplate"}])

        messages = convert_chat_to_upstream(request, pre_messages_json=pre)["request_payload"][
            "messages"
        ]

        texts = [m["content"][0]["text"] for m in messages]
        assert texts == ["s1", "u1", "s2", "boilerplate", "u2"]

    def test_prepend_without_system_goes_first(self):
        pre = json.dumps([{"role": "assistant", "content": "ready"}])
        messages = convert_chat_to_upstream(_request(), pre_messages_json=pre)["request_payload"][
            "messages"
        ]
        assert [m["role"] for m in messages] == ["assistant", "user"]

    def test_repeated_conversion_is_identical(self):
        request = _request(messages=[{"role": "system", "content": "s"}, {"role": "user", "content": "u"}])
        pre = json.dumps([{"role": "user", "content": "boilerplate"}])

        first = convert_chat_to_upstream(request, pre_messages_json=pre)
        second = convert_chat_to_upstream(request, pre_messages_json=pre)

        assert first == second
        assert len(first["request_payload"]["messages"]) == 3
        assert len(request.messages) == 2

    def test_invalid_pre_messages_json_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            convert_chat_to_upstream(_request(), pre_messages_json="{not json")

    def test_empty_messages_are_dropped(self):
        request = _request(
            messages=[{"role": "assistant", "content": ""}, {"role": "user", "content": "hi"}]
        )
        messages = convert_chat_to_upstream(request)["request_payload"]["messages"]
        assert [m["role"] for m in messages] == ["user"]


@pytest.mark.unit
@pytest.mark.parametrize("text", ["Hello", "héllo wörld 你好", "line1\nline2", "trailing  "])
def test_upstream_text_item_reads_back_unchanged(text):
    body = convert_chat_to_upstream(_request(messages=[{"role": "user", "content": text}]))
    content = body["request_payload"]["messages"][0]["content"]
    envelope = UpstreamEnvelope.model_validate(
        {"response_payload": {"choices": [{"message": {"role": "assistant", "content": content}}]}}
    )

    assert extract_delta_text(envelope) == text
