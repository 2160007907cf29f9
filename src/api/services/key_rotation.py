"""Per-request credential pool views.

Requests normally draw from the shared credential store. When override mode
(CUSTOM_HEADER_KEY_ENABLED) is on, the client supplies its own credentials in
the Authorization header and the shared store is never touched.
"""

from __future__ import annotations

from typing import Any

from src.core.credentials import CredentialStore, PoolView
from src.core.exceptions import MissingOverrideCredentialError

BEARER_SCHEME = "bearer"


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token of a ``Bearer`` Authorization header, or None."""
    if not authorization:
        return None
    value = authorization.strip()
    scheme, _, token = value.partition(" ")
    if scheme.lower() == BEARER_SCHEME:
        value = token.strip()
    return value or None


def build_pool_view(
    *,
    config: Any,
    store: CredentialStore,
    authorization: str | None,
) -> PoolView:
    """Build the credential view a single request will fail over across.

    Raises:
        MissingOverrideCredentialError: If override mode is on and the request
            carries no credential.
    """
    if config.custom_header_key_enabled:
        token = extract_bearer_token(authorization)
        if token is None:
            raise MissingOverrideCredentialError()
        view = PoolView.from_override(token)
        if not len(view):
            raise MissingOverrideCredentialError()
        return view

    return PoolView.from_store(store)
