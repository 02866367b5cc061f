"""Signing key cache.

Signing keys are kept for the lifetime of the process: there is no TTL and no
eviction. Identity provider keys rotate rarely, and a rotated key simply
arrives under a new kid, which misses the cache and triggers a fetch.

A single process-wide instance is returned by ``shared_key_cache()`` and used
by every TokenValidator that is not handed its own cache.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import SigningKey


class InMemoryKeyCache:
    """Thread-safe in-process mapping from kid to SigningKey.

    Example:
        ```python
        cache = InMemoryKeyCache()
        cache.set("kid-1", key)
        assert cache.get("kid-1") is key
        assert cache.get("unknown") is None
        ```

    Attributes:
        _store: Internal dict mapping kid -> SigningKey.
        _lock: Guards ``_store`` against concurrent writers.
    """

    def __init__(self) -> None:
        self._store: dict[str, SigningKey] = {}
        self._lock = threading.Lock()

    def get(self, kid: str) -> SigningKey | None:
        with self._lock:
            return self._store.get(kid)

    def set(self, kid: str, key: SigningKey) -> None:
        """Store ``key`` under ``kid``, replacing any existing entry.

        Raises:
            ValueError: If ``kid`` is empty.
        """
        if not kid:
            raise ValueError("kid must be a non-empty string to be cached")

        with self._lock:
            self._store[kid] = key

    def __contains__(self, kid: object) -> bool:
        with self._lock:
            return kid in self._store

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def clear(self) -> None:
        """Drop every entry. Intended for tests and controlled restarts."""
        with self._lock:
            self._store.clear()


_shared_cache = InMemoryKeyCache()


def shared_key_cache() -> InMemoryKeyCache:
    """Return the process-wide key cache."""
    return _shared_cache
