"""Process-wide credential list with quarantine and eviction."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from src.core.config import mask_secret

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class CredentialStore:
    """Thread-safe owner of the shared credential list and quarantine map.

    Responsibilities:
    - Hold the configured credentials (rebuilt by ``initialize``)
    - Derive per-request selectable lists, purging expired quarantine entries
    - Apply quarantine and eviction from any request, last writer wins

    In override mode credentials come from the client, so quarantine and
    eviction leave the shared state untouched.
    """

    def __init__(self, *, override_mode: bool = False, clock: Clock = time.time) -> None:
        self._lock = threading.Lock()
        self._credentials: list[str] = []
        self._quarantined_until: dict[str, float] = {}
        self._clock = clock
        self.override_mode = override_mode

    def initialize(self, raw_list: str, *, override_mode: bool | None = None) -> None:
        """Replace the credential list with the comma-separated ``raw_list``."""
        credentials = raw_list.split(",") if raw_list else []
        with self._lock:
            self._credentials = credentials
            if override_mode is not None:
                self.override_mode = override_mode
        entries = sum(1 for c in credentials if c.strip())
        mode = " (override mode)" if self.override_mode else ""
        logger.info(f"Credential pool initialized with {entries} entries{mode}")

    def snapshot(self) -> list[str]:
        with self._lock:
            return list(self._credentials)

    def build_selectable(self) -> list[str]:
        """Trimmed, non-empty credentials that are not currently quarantined."""
        now = self._clock()
        selectable: list[str] = []
        with self._lock:
            for raw in self._credentials:
                credential = raw.strip()
                if not credential:
                    continue
                expires_at = self._quarantined_until.get(credential)
                if expires_at is not None:
                    if expires_at > now:
                        continue
                    del self._quarantined_until[credential]
                selectable.append(credential)
        return selectable

    def quarantine(self, credential: str, until: float) -> None:
        if self.override_mode:
            return
        with self._lock:
            self._quarantined_until[credential] = until
        logger.info(f"Credential {mask_secret(credential)} quarantined until {until:.0f}")

    def evict(self, credential: str) -> None:
        if self.override_mode:
            return
        with self._lock:
            self._credentials = [c for c in self._credentials if c.strip() != credential]
        logger.info(f"Credential {mask_secret(credential)} evicted from pool")

    def is_quarantined(self, credential: str) -> bool:
        with self._lock:
            expires_at = self._quarantined_until.get(credential)
        return expires_at is not None and expires_at > self._clock()

    def stats(self) -> dict[str, int]:
        now = self._clock()
        with self._lock:
            configured = sum(1 for c in self._credentials if c.strip())
            quarantined = sum(1 for until in self._quarantined_until.values() if until > now)
        return {"configured": configured, "quarantined": quarantined}


# Module-level singleton shared by every request in the process
credential_store = CredentialStore()
