"""Time-limited cache of the user's raw repository records.

Records are stored as JSON in a :class:`KeyValueStorage` together with the
time they were written.  ``get`` only returns fresh entries; ``peek`` also
returns expired ones so callers can fall back to stale data.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable

from tailored_ai.domain.ports.storage import KeyValueStorage

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3_600
DEFAULT_KEY = "github_repositories"

Listener = Callable[[list[dict[str, Any]]], None]


class RepositoryCache:
    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        clock: Callable[[], float] = time.time,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        key: str = DEFAULT_KEY,
    ) -> None:
        self._storage = storage
        self._clock = clock
        self._ttl = ttl_seconds
        self._key = key
        self._time_key = f"{key}_time"
        self._listeners: list[Listener] = []

    def get(self) -> list[dict[str, Any]] | None:
        """Cached records if younger than the TTL, else ``None``."""
        stored_at = self._stored_at()
        if stored_at is None or self._clock() - stored_at >= self._ttl:
            return None
        return self.peek()

    def peek(self) -> list[dict[str, Any]] | None:
        """Cached records regardless of age."""
        raw = self._storage.get(self._key)
        if raw is None:
            return None
        try:
            records = json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable repository cache entry")
            self.invalidate()
            return None
        return records if isinstance(records, list) else None

    def set(self, records: list[dict[str, Any]]) -> None:
        self._storage.set(self._key, json.dumps(records))
        self._storage.set(self._time_key, repr(self._clock()))
        logger.info("Cached %d repositories", len(records))
        self._notify(records)

    def invalidate(self) -> None:
        self._storage.delete(self._key)
        self._storage.delete(self._time_key)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* on every ``set``; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _stored_at(self) -> float | None:
        raw = self._storage.get(self._time_key)
        if raw is None:
            return None
        try:
            return float(raw)
        except ValueError:
            return None

    def _notify(self, records: list[dict[str, Any]]) -> None:
        for listener in list(self._listeners):
            try:
                listener(records)
            except Exception:
                logger.exception("Repository cache listener failed")
