"""Failover relay across a request's credential pool view.

The orchestrator runs one attempt at a time. Each attempt builds the upstream
body, opens a transport stream with the current credential and consumes the
decoded events in arrival order:

- deltas are yielded to the caller immediately
- the first terminal or auth-status event picks a ``(PoolAction, RelayState)``
  pair from the transition tables below
- retryable states advance to the next credential of the same view until the
  view is used up

The generator yields any number of ``RelayDelta`` items followed by exactly
one ``RelayOutcome``. A ``RelayRetry`` between them marks the deltas of the
attempt before it as void, so callers that buffer must drop what they hold.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import AsyncGenerator, AsyncIterator, Awaitable, Callable
from contextlib import aclosing
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from src.conversion.sse_decoder import DeltaEvent, StatusEvent, TerminalEvent, decode_stream
from src.conversion.stream_classifier import OutcomeKind
from src.core.config import mask_secret
from src.core.credentials import PoolView
from src.core.exceptions import (
    ClientDisconnectedError,
    MalformedPayloadError,
    PoolExhaustedError,
    RelayError,
    UnexpectedUpstreamResponseError,
    UpstreamServerError,
)
from src.core.upstream_client import TransportEvent

logger = logging.getLogger(__name__)

ALL_UNAVAILABLE_MESSAGE = "All credentials are temporarily unavailable."
NO_CREDENTIALS_MESSAGE = "No credentials available"


class RelayState(str, Enum):
    START = "start"
    ATTEMPTING = "attempting"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"
    FATAL_ERROR = "fatal_error"


class PoolAction(str, Enum):
    NONE = "none"
    QUARANTINE = "quarantine"
    EVICT = "evict"


Transition = tuple[PoolAction, RelayState]

TRANSITIONS: dict[OutcomeKind, Transition] = {
    OutcomeKind.QUOTA_EXCEEDED: (PoolAction.EVICT, RelayState.RETRYING),
    OutcomeKind.RATE_LIMITED: (PoolAction.QUARANTINE, RelayState.RETRYING),
    OutcomeKind.NOT_AUTHENTICATED: (PoolAction.NONE, RelayState.RETRYING),
    OutcomeKind.UPSTREAM_SERVER_ERROR: (PoolAction.NONE, RelayState.FATAL_ERROR),
    OutcomeKind.SUCCESS: (PoolAction.NONE, RelayState.SUCCEEDED),
    OutcomeKind.UNKNOWN: (PoolAction.NONE, RelayState.FATAL_ERROR),
}

STATUS_TRANSITIONS: dict[int, Transition] = {
    403: (PoolAction.EVICT, RelayState.RETRYING),
    401: (PoolAction.NONE, RelayState.RETRYING),
}


@dataclass(frozen=True, slots=True)
class RelayDelta:
    text: str


@dataclass(frozen=True, slots=True)
class RelayRetry:
    """Attempt `attempt` ended retryably; deltas it yielded are void."""

    attempt: int
    reason: str


@dataclass(frozen=True)
class RelayOutcome:
    state: RelayState
    attempts: int
    credential: str | None = None
    error: RelayError | None = None
    transitions: tuple[RelayState, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.state is RelayState.SUCCEEDED


RelayItem = RelayDelta | RelayRetry | RelayOutcome


class ChatTransport(Protocol):
    def stream_chat(
        self, body: dict[str, Any], credential: str
    ) -> AsyncGenerator[TransportEvent, None]: ...


BodyBuilder = Callable[[], dict[str, Any]]
DisconnectCheck = Callable[[], Awaitable[bool]]


@dataclass(frozen=True, slots=True)
class _AttemptResult:
    action: PoolAction
    next_state: RelayState
    outcome: OutcomeKind | None = None
    status: int | None = None
    raw_payload: str = ""


class FailoverOrchestrator:
    """Relays one request with transparent retry on credential faults."""

    def __init__(
        self,
        transport: ChatTransport,
        *,
        lock_seconds: int = 600,
        clock: Callable[[], float] = time.time,
        rng: random.Random | None = None,
    ) -> None:
        self._transport = transport
        self._lock_seconds = lock_seconds
        self._clock = clock
        self._rng = rng

    async def relay(
        self,
        pool: PoolView,
        build_body: BodyBuilder,
        is_disconnected: DisconnectCheck | None = None,
    ) -> AsyncIterator[RelayItem]:
        """Run attempts over ``pool`` until a terminal state is reached.

        Raises:
            ClientDisconnectedError: If ``is_disconnected`` reports the client
                gone before an attempt or between events.
        """
        transitions: list[RelayState] = [RelayState.START]

        if not len(pool):
            transitions.append(RelayState.FATAL_ERROR)
            yield RelayOutcome(
                RelayState.FATAL_ERROR,
                attempts=0,
                error=PoolExhaustedError(NO_CREDENTIALS_MESSAGE),
                transitions=tuple(transitions),
            )
            return

        max_attempts = len(pool)
        credential = pool.pick_random(self._rng)
        attempt = 0

        while True:
            await self._check_disconnected(is_disconnected)
            transitions.append(RelayState.ATTEMPTING)

            result: _AttemptResult | None = None
            try:
                body = build_body()
                raw_events = self._transport.stream_chat(body, credential)
                async with aclosing(raw_events), aclosing(decode_stream(raw_events)) as events:
                    async for event in events:
                        if isinstance(event, DeltaEvent):
                            yield RelayDelta(event.text)
                            await self._check_disconnected(is_disconnected)
                        elif isinstance(event, StatusEvent):
                            action, next_state = STATUS_TRANSITIONS[event.code]
                            result = _AttemptResult(action, next_state, status=event.code)
                            break
                        elif isinstance(event, TerminalEvent):
                            action, next_state = TRANSITIONS[event.outcome]
                            result = _AttemptResult(
                                action,
                                next_state,
                                outcome=event.outcome,
                                raw_payload=event.raw_payload,
                            )
                            break
            except ClientDisconnectedError:
                logger.info(f"Client disconnected during attempt {attempt + 1}; stopping relay")
                raise
            except MalformedPayloadError as e:
                logger.error(f"Malformed upstream frame ({e.reason}): {e.frame}")
                yield self._finish(RelayState.FATAL_ERROR, attempt, credential, e, transitions)
                return
            except RelayError as e:
                logger.error(
                    f"Attempt {attempt + 1} with credential {mask_secret(credential)} "
                    f"failed: {e.message}"
                )
                yield self._finish(RelayState.FATAL_ERROR, attempt, credential, e, transitions)
                return

            if result is None:
                # Stream drained without a terminal frame
                result = _AttemptResult(
                    PoolAction.NONE, RelayState.SUCCEEDED, outcome=OutcomeKind.SUCCESS
                )

            self._apply_pool_action(pool, credential, result, attempt)

            if result.next_state is RelayState.SUCCEEDED:
                yield self._finish(RelayState.SUCCEEDED, attempt, credential, None, transitions)
                return

            if result.next_state is RelayState.FATAL_ERROR:
                error: RelayError
                if result.outcome is OutcomeKind.UPSTREAM_SERVER_ERROR:
                    logger.error(f"Upstream server error: {result.raw_payload}")
                    error = UpstreamServerError()
                else:
                    logger.error(f"Unrecognized upstream terminal payload: {result.raw_payload}")
                    error = UnexpectedUpstreamResponseError(result.raw_payload)
                yield self._finish(RelayState.FATAL_ERROR, attempt, credential, error, transitions)
                return

            transitions.append(RelayState.RETRYING)
            if attempt + 1 == max_attempts:
                logger.error(f"All credentials exhausted after {attempt + 1} attempts")
                yield self._finish(
                    RelayState.EXHAUSTED,
                    attempt,
                    credential,
                    PoolExhaustedError(ALL_UNAVAILABLE_MESSAGE),
                    transitions,
                )
                return

            yield RelayRetry(attempt + 1, _reason(result))
            credential = pool.pick_next()
            attempt += 1

    async def _check_disconnected(self, is_disconnected: DisconnectCheck | None) -> None:
        if is_disconnected is not None and await is_disconnected():
            raise ClientDisconnectedError()

    def _apply_pool_action(
        self, pool: PoolView, credential: str, result: _AttemptResult, attempt: int
    ) -> None:
        reason = _reason(result)
        label = f"Attempt {attempt + 1}: credential {mask_secret(credential)}"
        if result.action is PoolAction.EVICT:
            logger.warning(f"{label} evicted ({reason})")
            pool.evict(credential)
        elif result.action is PoolAction.QUARANTINE:
            until = self._clock() + self._lock_seconds
            logger.warning(f"{label} quarantined for {self._lock_seconds}s ({reason})")
            pool.quarantine(credential, until)
        elif result.next_state is RelayState.RETRYING:
            logger.warning(f"{label} not accepted ({reason}), trying next")

    @staticmethod
    def _finish(
        state: RelayState,
        attempt: int,
        credential: str,
        error: RelayError | None,
        transitions: list[RelayState],
    ) -> RelayOutcome:
        transitions.append(state)
        return RelayOutcome(
            state,
            attempts=attempt + 1,
            credential=credential,
            error=error,
            transitions=tuple(transitions),
        )


def _reason(result: _AttemptResult) -> str:
    return result.outcome.value if result.outcome else f"HTTP {result.status}"
