"""Per-request credential views and selection primitives."""

from __future__ import annotations

import random
from collections.abc import Sequence

from src.core.credentials.store import CredentialStore
from src.core.exceptions import PoolExhaustedError


class PoolView:
    """Ordered credentials fixed for one request, with a selection cursor.

    A view is owned by a single request. Pool mutations are forwarded to the
    shared store when the view was derived from it; override views (built
    from a client-supplied header) have no store and ignore them.
    """

    def __init__(self, credentials: Sequence[str], store: CredentialStore | None = None) -> None:
        self._credentials: tuple[str, ...] = tuple(credentials)
        self._store = store
        self.current_index = 0

    @classmethod
    def from_store(cls, store: CredentialStore) -> PoolView:
        return cls(store.build_selectable(), store)

    @classmethod
    def from_override(cls, header_value: str, rng: random.Random | None = None) -> PoolView:
        """Single-entry view from a comma-separated override, one entry picked at random."""
        candidates = [c.strip() for c in header_value.split(",") if c.strip()]
        if not candidates:
            return cls(())
        return cls(((rng or random).choice(candidates),))

    @property
    def credentials(self) -> tuple[str, ...]:
        return self._credentials

    @property
    def is_override(self) -> bool:
        return self._store is None

    def __len__(self) -> int:
        return len(self._credentials)

    def pick_random(self, rng: random.Random | None = None) -> str:
        if not self._credentials:
            raise PoolExhaustedError("No credentials available")
        self.current_index = (rng or random).randrange(len(self._credentials))
        return self._credentials[self.current_index]

    def pick_next(self) -> str:
        if not self._credentials:
            raise PoolExhaustedError("No credentials available")
        self.current_index = (self.current_index + 1) % len(self._credentials)
        return self._credentials[self.current_index]

    def quarantine(self, credential: str, until: float) -> None:
        if self._store is not None:
            self._store.quarantine(credential, until)

    def evict(self, credential: str) -> None:
        if self._store is not None:
            self._store.evict(credential)
