"""Decoding of raw upstream frames into typed stream events.

Each transport frame becomes zero or more events:

- ``StatusEvent`` for auth-class HTTP statuses, reported even before ``done``
- ``DeltaEvent`` for text carried by a payload frame
- ``TerminalEvent`` for anything that ends the attempt
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, AsyncIterable
from dataclasses import dataclass

from pydantic import ValidationError

from src.conversion.stream_classifier import DONE_SENTINEL, OutcomeKind, classify_terminal
from src.core.exceptions import MalformedPayloadError
from src.core.upstream_client import TransportEvent
from src.models.upstream import UpstreamEnvelope

AUTH_STATUSES = frozenset({401, 403})
END_TURN = "end_turn"

_DATA_PREFIX = "data:"


@dataclass(frozen=True, slots=True)
class DeltaEvent:
    text: str


@dataclass(frozen=True, slots=True)
class TerminalEvent:
    outcome: OutcomeKind
    raw_payload: str = ""


@dataclass(frozen=True, slots=True)
class StatusEvent:
    code: int


StreamEvent = DeltaEvent | TerminalEvent | StatusEvent


def strip_frame(data: str) -> str:
    frame = data.strip()
    if frame.startswith(_DATA_PREFIX):
        frame = frame[len(_DATA_PREFIX) :].strip()
    return frame


def decode_frame(event: TransportEvent) -> list[StreamEvent]:
    """Decode one transport event.

    Raises:
        MalformedPayloadError: If a payload frame does not match the envelope.
    """
    if event.status in AUTH_STATUSES:
        return [StatusEvent(event.status)]

    frame = strip_frame(event.data)

    if event.done:
        return [TerminalEvent(classify_terminal(frame, event.status), frame)]
    if not frame:
        return []
    if frame == DONE_SENTINEL:
        return [TerminalEvent(OutcomeKind.SUCCESS)]

    try:
        envelope = UpstreamEnvelope.model_validate_json(frame)
    except ValidationError as e:
        raise MalformedPayloadError(frame, str(e.errors()[0]["msg"])) from e

    events: list[StreamEvent] = []
    text = envelope.text()
    if text:
        events.append(DeltaEvent(text))
    if envelope.first_choice.finish_reason == END_TURN:
        events.append(TerminalEvent(OutcomeKind.SUCCESS))
    return events


async def decode_stream(
    events: AsyncIterable[TransportEvent],
) -> AsyncGenerator[StreamEvent, None]:
    """Decode a transport stream, preserving arrival order."""
    async for event in events:
        for decoded in decode_frame(event):
            yield decoded
