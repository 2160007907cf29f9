"""Credential pool: shared store plus per-request views."""

from src.core.credentials.pool import PoolView
from src.core.credentials.store import CredentialStore, credential_store

__all__ = ["CredentialStore", "PoolView", "credential_store"]
