"""Error handling services for API endpoints.

All client-visible errors use the OpenAI error envelope so that OpenAI SDKs
surface the message and code unchanged.
"""

import logging
from dataclasses import dataclass
from typing import Any

from fastapi.responses import JSONResponse

from src.core.error_types import ErrorType
from src.core.exceptions import RelayError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ErrorResponseBuilder:
    """Centralized builder for consistent error responses across all endpoints.

    Error response format:
    {
        "error": {
            "message": "<error_message>",
            "type": "<error_type>",
            "code": "<error_code or null>",
            "param": null
        }
    }
    """

    @staticmethod
    def error_body(
        message: str,
        error_type: str,
        code: str | None = None,
        details: Any | None = None,
    ) -> dict[str, Any]:
        error: dict[str, Any] = {
            "message": message,
            "type": error_type,
            "code": code,
            "param": None,
        }
        if details is not None:
            error["details"] = details
        return {"error": error}

    @staticmethod
    def from_relay_error(error: RelayError) -> JSONResponse:
        """Build the JSON response for any ``RelayError``.

        Args:
            error: The relay error raised by a route or the orchestrator

        Returns:
            JSONResponse with the error's status code and OpenAI-style body
        """
        return JSONResponse(
            status_code=error.status_code,
            content=ErrorResponseBuilder.error_body(
                error.message, error.error_type.value, error.code, error.details
            ),
        )

    @staticmethod
    def stream_error_payload(error: RelayError) -> dict[str, Any]:
        """Body of the single SSE error frame sent after streaming has begun."""
        return ErrorResponseBuilder.error_body(
            error.message, error.error_type.value, error.code, error.details
        )

    @staticmethod
    def invalid_request(message: str, details: Any | None = None) -> JSONResponse:
        """Build a 400 error for a body that failed schema validation."""
        return JSONResponse(
            status_code=400,
            content=ErrorResponseBuilder.error_body(
                message, ErrorType.INVALID_REQUEST.value, details=details
            ),
        )

    @staticmethod
    def internal_error(message: str = "Internal server error") -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content=ErrorResponseBuilder.error_body(message, ErrorType.INTERNAL_ERROR.value),
        )
