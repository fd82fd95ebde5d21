"""Append-only list of items stored in fixed-size chunks."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from .cache import ChunkCache
from .constants import CHUNK_SIZE
from .item import Item

ItemBuilder = Callable[[bytes], Optional[Item]]


@dataclass(eq=False)
class Chunk:
    """Up to CHUNK_SIZE items. Chunks compare and hash by identity."""

    items: list[Item] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.items)

    def is_full(self) -> bool:
        """True when the chunk holds CHUNK_SIZE items."""
        return self.count == CHUNK_SIZE

    def _copy(self) -> "Chunk":
        return Chunk(items=list(self.items))


def count_items(chunks: Sequence[Chunk]) -> int:
    """Total number of items in a snapshot; only the first and last chunks may be partial."""
    if not chunks:
        return 0
    if len(chunks) == 1:
        return chunks[0].count
    # The first chunk might not be full because of a tail limit
    return chunks[0].count + CHUNK_SIZE * (len(chunks) - 2) + chunks[-1].count


class ChunkList:
    """Thread-safe list of chunks fed by an item builder."""

    def __init__(self, cache: ChunkCache, builder: ItemBuilder) -> None:
        self._chunks: list[Chunk] = []
        self._lock = threading.Lock()
        self._builder = builder
        self._cache = cache

    def push(self, data: bytes) -> bool:
        """Build an item from data and append it; False if the builder rejected it."""
        with self._lock:
            if not self._chunks or self._chunks[-1].is_full():
                self._chunks.append(Chunk())
            item = self._builder(data)
            if item is None:
                return False
            self._chunks[-1].items.append(item)
            return True

    def clear(self) -> None:
        """Drop all chunks."""
        with self._lock:
            self._chunks = []

    def snapshot(self, tail: int) -> tuple[list[Chunk], int, bool]:
        """Return an immutable view of the chunks, the item count and whether tail trimmed the list.

        With tail > 0 only the last tail items are kept, permanently.
        """
        with self._lock:
            changed = False
            if tail > 0 and count_items(self._chunks) > tail:
                changed = True
                num_chunks = 0
                left = tail
                for chunk in reversed(self._chunks):
                    if left <= 0:
                        break
                    num_chunks += 1
                    left -= chunk.count

                min_index = len(self._chunks) - num_chunks
                self._cache.retire(*self._chunks[:min_index])
                kept = self._chunks[min_index:]

                left = tail
                for pos in range(len(kept) - 1, -1, -1):
                    chunk = kept[pos]
                    if chunk.count > left:
                        kept[pos] = Chunk(items=chunk.items[chunk.count - left:])
                        self._cache.retire(chunk)
                        break
                    left -= chunk.count
                self._chunks = kept

            result = list(self._chunks)
            # Copy the chunks that may still change
            if result:
                if tail > 0 and len(result) > 1:
                    result[0] = result[0]._copy()
                result[-1] = result[-1]._copy()
            return result, count_items(result), changed