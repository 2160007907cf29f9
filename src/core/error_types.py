"""Error type enumeration for Rovo Relay.

Provides type-safe error categorization for error responses and logs.
"""

from enum import Enum


class ErrorType(str, Enum):
    """Error type categories used in client-facing error bodies.

    When adding new error types:
    1. Add the enum value here
    2. Map the RelayError subclass that raises it in src/core/exceptions.py
    """

    # Request lifecycle errors
    CLIENT_DISCONNECT = "client_disconnect"  # Client disconnected mid-request

    # Client errors
    INVALID_REQUEST = "invalid_request_error"  # Rejected before any upstream call
    AUTH_ERROR = "authentication_error"  # Client failed proxy authentication

    # Upstream errors
    UPSTREAM_ERROR = "upstream_error"  # Upstream or transport fault
    UPSTREAM_TIMEOUT = "upstream_timeout"  # Transport timed out

    # Pool errors
    SERVICE_UNAVAILABLE = "service_unavailable"  # No usable credential left

    # Server-side errors
    CONFIGURATION_ERROR = "configuration_error"  # Invalid relay configuration
    INTERNAL_ERROR = "internal_error"  # Malformed upstream payload or unexpected fault
