"""Scripted stand-in for UpstreamClient.

Each call to ``stream_chat`` replays the next scripted attempt: a list of
TransportEvents, or an exception to raise when the stream is opened.
"""

from src.core.upstream_client import TransportEvent
from tests.fixtures.mock_http import upstream_frame


class FakeTransport:
    def __init__(self, *attempts):
        self.attempts = list(attempts)
        self.calls: list[tuple[dict, str]] = []
        self.closed = 0

    async def stream_chat(self, body, credential):
        self.calls.append((body, credential))
        script = self.attempts.pop(0)
        try:
            if isinstance(script, Exception):
                raise script
            for event in script:
                yield event
        finally:
            self.closed += 1

    async def aclose(self):
        pass


def frames(*payloads: str) -> list[TransportEvent]:
    return [TransportEvent(data=f"data: {payload}") for payload in payloads]


def terminal(body: str, status: int = 200) -> list[TransportEvent]:
    return [TransportEvent(data=body, done=True, status=status)]


def hello_attempt() -> list[TransportEvent]:
    return frames(
        upstream_frame("Hel"), upstream_frame("lo"), upstream_frame(finish_reason="end_turn")
    )


RATE_LIMITED = terminal('{"error": "Rate limit exceeded"}', 429)
QUOTA = terminal('{"error": "You have reached your usage limit"}', 402)
