import base64
import json

import httpx
import pytest

from src.core.exceptions import TransportError
from src.core.upstream_client import CHAT_PATH, UpstreamClient, build_auth_headers
from tests.config import TEST_ENDPOINTS
from tests.fixtures.mock_http import create_streaming_response, upstream_frame


async def collect(client, body=None, credential="user@example.com:token"):
    return [event async for event in client.stream_chat(body or {"k": "v"}, credential)]


@pytest.mark.unit
class TestAuthHeaders:
    def test_credential_is_base64_encoded_in_both_headers(self):
        headers = build_auth_headers("user@example.com:token")
        encoded = base64.b64encode(b"user@example.com:token").decode()

        assert headers["Authorization"] == f"Basic {encoded}"
        assert headers["X-Atlassian-EncodedToken"] == encoded
        assert headers["Accept"] == "text/event-stream"

    def test_chat_url_strips_trailing_slash(self):
        client = UpstreamClient(TEST_ENDPOINTS["upstream_base"] + "/")
        assert client.chat_url == TEST_ENDPOINTS["upstream_chat"]


@pytest.mark.unit
@pytest.mark.asyncio
class TestUpstreamClient:
    async def test_posts_body_with_auth_headers(self, mock_upstream_api):
        route = mock_upstream_api.post(CHAT_PATH).mock(
            return_value=create_streaming_response(b"data: [DONE]\n\n")
        )
        client = UpstreamClient(TEST_ENDPOINTS["upstream_base"])

        await collect(client, body={"request_payload": {"messages": []}})
        await client.aclose()

        request = route.calls.last.request
        assert str(request.url) == TEST_ENDPOINTS["upstream_chat"]
        assert json.loads(request.content) == {"request_payload": {"messages": []}}
        assert request.headers["authorization"].startswith("Basic ")
        assert "x-atlassian-encodedtoken" in request.headers

    async def test_yields_data_lines_and_skips_other_fields(self, mock_upstream_api):
        body = (
            ": keep-alive\n"
            "event: message\n"
            "id: 7\n"
            f"data: {upstream_frame('Hi')}\n\n"
            "retry: 1000\n"
            "data: [DONE]\n\n"
        ).encode()
        mock_upstream_api.post(CHAT_PATH).mock(return_value=create_streaming_response(body))
        client = UpstreamClient(TEST_ENDPOINTS["upstream_base"])

        events = await collect(client)
        await client.aclose()

        assert [e.data for e in events] == [f"data: {upstream_frame('Hi')}", "data: [DONE]"]
        assert not any(e.done for e in events)

    async def test_error_status_yields_single_done_event(self, mock_upstream_api):
        mock_upstream_api.post(CHAT_PATH).mock(
            return_value=httpx.Response(429, text='{"error": "Rate limit exceeded"}')
        )
        client = UpstreamClient(TEST_ENDPOINTS["upstream_base"])

        events = await collect(client)
        await client.aclose()

        assert len(events) == 1
        assert events[0].done
        assert events[0].status == 429
        assert events[0].data == '{"error": "Rate limit exceeded"}'

    async def test_timeout_becomes_transport_error(self, mock_upstream_api):
        mock_upstream_api.post(CHAT_PATH).mock(side_effect=httpx.ReadTimeout("slow"))
        client = UpstreamClient(TEST_ENDPOINTS["upstream_base"])

        with pytest.raises(TransportError) as exc_info:
            await collect(client)
        await client.aclose()

        assert exc_info.value.timeout
        assert exc_info.value.status_code == 504

    async def test_connection_failure_becomes_transport_error(self, mock_upstream_api):
        mock_upstream_api.post(CHAT_PATH).mock(side_effect=httpx.ConnectError("refused"))
        client = UpstreamClient(TEST_ENDPOINTS["upstream_base"])

        with pytest.raises(TransportError) as exc_info:
            await collect(client)
        await client.aclose()

        assert not exc_info.value.timeout
        assert exc_info.value.status_code == 502
