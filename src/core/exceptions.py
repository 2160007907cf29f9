"""
Exception hierarchy for the relay.

Every error the relay can surface to a client inherits from RelayError,
which carries the HTTP status, the error type and an optional machine code.
Routes raise these; the application-level exception handler renders them.

Example:
    >>> try:
    ...     view.pick_random()
    ... except PoolExhaustedError as e:
    ...     print(e.status_code, e.message)
    503 No credentials available
"""

from __future__ import annotations

from typing import Any

from src.core.error_types import ErrorType


class RelayError(Exception):
    """Base exception for all client-visible relay errors.

    Attributes:
        message: Human-readable error message
        details: Optional extra context (never shown for credential faults)
    """

    status_code: int = 500
    error_type: ErrorType = ErrorType.INTERNAL_ERROR
    code: str | None = None

    def __init__(self, message: str, *, details: Any | None = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(status_code={self.status_code}, message={self.message!r})"


class PoolExhaustedError(RelayError):
    """No usable credential remains for this request."""

    status_code = 503
    error_type = ErrorType.SERVICE_UNAVAILABLE


class UnsupportedModelError(RelayError):
    """The requested model is not in the registry."""

    status_code = 400
    error_type = ErrorType.INVALID_REQUEST
    code = "invalid_model"

    def __init__(self, model: str) -> None:
        self.model = model
        super().__init__(f"Model {model} not supported")


class TokenLimitExceededError(RelayError):
    """max_tokens exceeds the model's configured ceiling."""

    status_code = 400
    error_type = ErrorType.INVALID_REQUEST
    code = "invalid_max_tokens"

    def __init__(self, requested: int, limit: int) -> None:
        self.requested = requested
        self.limit = limit
        super().__init__(f"Max tokens {requested} exceeds limit {limit}")


class MissingOverrideCredentialError(RelayError):
    """Override mode is on but the request carries no credential header."""

    status_code = 400
    error_type = ErrorType.INVALID_REQUEST
    code = "missing_authorization"

    def __init__(self) -> None:
        super().__init__("Authorization header is required")


class InvalidClientKeyError(RelayError):
    """The client did not present an accepted API secret."""

    status_code = 401
    error_type = ErrorType.AUTH_ERROR
    code = "invalid_api_key"

    def __init__(self) -> None:
        super().__init__("Invalid API key. Please provide a valid relay API key.")


class UpstreamServerError(RelayError):
    """The upstream reported a server-side fault; not a credential problem."""

    status_code = 502
    error_type = ErrorType.UPSTREAM_ERROR

    def __init__(self, message: str = "Service Unavailable", *, details: Any | None = None) -> None:
        super().__init__(message, details=details)


class UnexpectedUpstreamResponseError(RelayError):
    """A terminal upstream payload matched no known outcome."""

    status_code = 502
    error_type = ErrorType.UPSTREAM_ERROR

    def __init__(self, raw_payload: str) -> None:
        self.raw_payload = raw_payload
        super().__init__("Unexpected upstream response", details=raw_payload)


class TransportError(RelayError):
    """The transport failed to establish or produce a stream."""

    status_code = 502
    error_type = ErrorType.UPSTREAM_ERROR

    def __init__(self, message: str, *, timeout: bool = False) -> None:
        self.timeout = timeout
        if timeout:
            self.status_code = 504
            self.error_type = ErrorType.UPSTREAM_TIMEOUT
        super().__init__(message)


class MalformedPayloadError(RelayError):
    """An upstream frame could not be decoded into the envelope schema."""

    status_code = 500
    error_type = ErrorType.INTERNAL_ERROR

    def __init__(self, frame: str, reason: str) -> None:
        self.frame = frame
        self.reason = reason
        super().__init__(f"Malformed upstream payload: {reason}")


class ConfigurationError(RelayError):
    """A relay setting needed by this request is invalid."""

    status_code = 500
    error_type = ErrorType.CONFIGURATION_ERROR


class ClientDisconnectedError(RelayError):
    """The client went away; no further attempts are made."""

    status_code = 499
    error_type = ErrorType.CLIENT_DISCONNECT

    def __init__(self) -> None:
        super().__init__("Client disconnected")
