import pytest

from src.conversion.sse_decoder import (
    DeltaEvent,
    StatusEvent,
    TerminalEvent,
    decode_frame,
    decode_stream,
)
from src.conversion.stream_classifier import OutcomeKind
from src.core.exceptions import MalformedPayloadError
from src.core.upstream_client import TransportEvent
from tests.fixtures.mock_http import upstream_frame


@pytest.mark.unit
class TestDecodeFrame:
    def test_text_items_are_concatenated_in_order(self):
        events = decode_frame(TransportEvent(upstream_frame("Hel", "lo")))
        assert events == [DeltaEvent("Hello")]

    def test_data_prefix_is_stripped(self):
        events = decode_frame(TransportEvent("data: " + upstream_frame("hi")))
        assert events == [DeltaEvent("hi")]

    def test_non_text_items_are_ignored(self):
        frame = (
            '{"response_payload": {"choices": [{"message": {"content": ['
            '{"type": "tool_use", "text": "x"}, {"type": "text", "text": "ok"}]}}]}}'
        )
        assert decode_frame(TransportEvent(frame)) == [DeltaEvent("ok")]

    def test_empty_frame_yields_nothing(self):
        assert decode_frame(TransportEvent("   ")) == []
        assert decode_frame(TransportEvent("data: ")) == []

    def test_empty_content_yields_nothing(self):
        assert decode_frame(TransportEvent(upstream_frame())) == []

    def test_null_content_yields_nothing(self):
        frame = (
            'data: {"response_payload":{"choices":'
            '[{"message":{"role":"assistant","content":null}}]}}'
        )
        assert decode_frame(TransportEvent(frame)) == []

    def test_null_content_with_end_turn_is_success(self):
        frame = (
            '{"response_payload": {"choices": [{"message": {"content": null}, '
            '"finish_reason": "end_turn"}]}}'
        )
        assert decode_frame(TransportEvent(frame)) == [TerminalEvent(OutcomeKind.SUCCESS)]

    def test_done_sentinel_is_success_terminal(self):
        assert decode_frame(TransportEvent("data: [DONE]")) == [
            TerminalEvent(OutcomeKind.SUCCESS)
        ]

    def test_end_turn_appends_success_after_delta(self):
        events = decode_frame(TransportEvent(upstream_frame("bye", finish_reason="end_turn")))
        assert events == [DeltaEvent("bye"), TerminalEvent(OutcomeKind.SUCCESS)]

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_status_is_reported_before_done(self, status):
        assert decode_frame(TransportEvent("anything", status=status)) == [StatusEvent(status)]
        assert decode_frame(TransportEvent("", done=True, status=status)) == [
            StatusEvent(status)
        ]

    def test_done_event_is_classified(self):
        events = decode_frame(
            TransportEvent('{"error": "Rate limit exceeded"}', done=True, status=429)
        )
        assert events == [
            TerminalEvent(OutcomeKind.RATE_LIMITED, '{"error": "Rate limit exceeded"}')
        ]

    @pytest.mark.parametrize(
        "frame",
        [
            "not json",
            '{"something": "else"}',
            '{"response_payload": {"choices": []}}',
        ],
    )
    def test_malformed_frames_raise(self, frame):
        with pytest.raises(MalformedPayloadError) as exc_info:
            decode_frame(TransportEvent(frame))
        assert exc_info.value.frame == frame
        assert exc_info.value.status_code == 500


@pytest.mark.unit
@pytest.mark.asyncio
async def test_decode_stream_preserves_arrival_order():
    async def transport():
        yield TransportEvent(upstream_frame("a"))
        yield TransportEvent("")
        yield TransportEvent(upstream_frame("b"))
        yield TransportEvent("[DONE]")

    events = [event async for event in decode_stream(transport())]

    assert events == [
        DeltaEvent("a"),
        DeltaEvent("b"),
        TerminalEvent(OutcomeKind.SUCCESS),
    ]
