"""Classification of terminal upstream payloads into relay outcomes."""

from __future__ import annotations

from enum import Enum

DONE_SENTINEL = "[DONE]"


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    QUOTA_EXCEEDED = "quota_exceeded"
    RATE_LIMITED = "rate_limited"
    NOT_AUTHENTICATED = "not_authenticated"
    UPSTREAM_SERVER_ERROR = "upstream_server_error"
    UNKNOWN = "unknown"


QUOTA_MARKERS = (
    "usage limit",
    "usage_limit",
    "quota exceeded",
    "exceeded your quota",
    "insufficient_quota",
    "credit limit",
)

SERVER_ERROR_MARKERS = (
    "internal server error",
    "internal_server_error",
    "service unavailable",
    "bad gateway",
    "gateway timeout",
    "server_error",
)

NOT_AUTHENTICATED_MARKERS = (
    "not logged in",
    "not_logged_in",
    "unauthorized",
    "unauthenticated",
    "authentication required",
    "invalid credentials",
)

RATE_LIMIT_MARKERS = (
    "rate limit",
    "rate_limit",
    "ratelimit",
    "too many requests",
    "throttl",
)

# First match wins
_MARKER_TABLE: tuple[tuple[tuple[str, ...], OutcomeKind], ...] = (
    (QUOTA_MARKERS, OutcomeKind.QUOTA_EXCEEDED),
    (SERVER_ERROR_MARKERS, OutcomeKind.UPSTREAM_SERVER_ERROR),
    (NOT_AUTHENTICATED_MARKERS, OutcomeKind.NOT_AUTHENTICATED),
    (RATE_LIMIT_MARKERS, OutcomeKind.RATE_LIMITED),
)


def _status_fallback(status: int) -> OutcomeKind:
    if status == 429:
        return OutcomeKind.RATE_LIMITED
    if status == 401:
        return OutcomeKind.NOT_AUTHENTICATED
    if status == 402:
        return OutcomeKind.QUOTA_EXCEEDED
    if status >= 500:
        return OutcomeKind.UPSTREAM_SERVER_ERROR
    return OutcomeKind.UNKNOWN


def classify_terminal(payload: str, status: int = 200) -> OutcomeKind:
    """Classify a terminal payload by content markers, then by HTTP status."""
    stripped = payload.strip()
    if stripped == DONE_SENTINEL:
        return OutcomeKind.SUCCESS

    lowered = stripped.lower()
    for markers, outcome in _MARKER_TABLE:
        if any(marker in lowered for marker in markers):
            return outcome

    return _status_fallback(status)
