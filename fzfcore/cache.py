"""Per-chunk cache of query results."""

from __future__ import annotations

import threading
from typing import Any, Optional, Sequence

from .constants import QUERY_CACHE_MAX


class ChunkCache:
    """Maps a chunk and a query string to the results found in that chunk.

    Only full chunks are cached, and only for queries with few results.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cache: dict[Any, dict[str, list]] = {}

    def clear(self) -> None:
        """Forget everything."""
        with self._lock:
            self._cache = {}

    def retire(self, *args: Any) -> None:
        """Forget the entries of the given chunks."""
        with self._lock:
            for chunk in args:
                self._cache.pop(chunk, None)

    def add(self, chunk: Any, key: str, results: Sequence) -> None:
        """Store the results of query key on chunk."""
        if not key or not chunk.is_full() or len(results) > QUERY_CACHE_MAX:
            return
        with self._lock:
            self._cache.setdefault(chunk, {})[key] = list(results)

    def lookup(self, chunk: Any, key: str) -> Optional[list]:
        """Return the cached results of query key on chunk, or None."""
        if not key or not chunk.is_full():
            return None
        with self._lock:
            return self._cache.get(chunk, {}).get(key)

    def search(self, chunk: Any, key: str) -> Optional[list]:
        """Return cached results of the longest prefix or suffix of key, or None."""
        if not key or not chunk.is_full():
            return None
        with self._lock:
            queries = self._cache.get(chunk)
            if queries is None:
                return None
            for cut in range(1, len(key)):
                for substr in (key[: len(key) - cut], key[cut:]):
                    cached = queries.get(substr)
                    if cached is not None:
                        return cached
        return None