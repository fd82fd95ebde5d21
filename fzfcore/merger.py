"""A single ordered view over several partial result lists."""

from __future__ import annotations

import heapq
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Sequence

from .chunklist import Chunk
from .constants import CHUNK_SIZE, MERGER_CACHE_MAX
from .item import Item


@dataclass(frozen=True)
class Result:
    """An item that matched, with its ranking points (lower ranks first)."""

    item: Item
    points: tuple[int, ...] = ()

    def rank(self, tac: bool = False) -> tuple[int, ...]:
        index = -self.item.index if tac else self.item.index
        return (*self.points, index)


class Merger:
    """Globally ordered view of locally sorted lists, or of whole chunks in pass mode."""

    def __init__(
        self,
        pattern: Any,
        lists: Sequence[Sequence[Result]],
        is_sorted: bool = False,
        tac: bool = False,
        revision: Any = None,
        min_index: int = 0,
        *,
        chunks: Optional[Sequence[Chunk]] = None,
    ) -> None:
        self.pattern = pattern
        self.lists = [list(lst) for lst in lists]
        self.chunks = list(chunks) if chunks is not None else None
        self.sorted = is_sorted
        self.tac = tac
        self.final = False
        self.passthrough = chunks is not None
        self.revision = revision
        self.min_index = min_index
        self.merged: list[Result] = []
        if self.chunks is not None:
            self.count = sum(chunk.count for chunk in self.chunks)
        else:
            self.count = sum(len(lst) for lst in self.lists)
        self._pending: Optional[Iterator[Result]] = None
        if is_sorted and self.chunks is None:
            self._pending = heapq.merge(*self.lists, key=lambda r: r.rank(tac))

    def length(self) -> int:
        """Number of results."""
        return self.count

    def first(self) -> Result:
        """The first result as displayed."""
        if self.tac and not self.sorted:
            return self.get(self.count - 1)
        return self.get(0)

    def find_index(self, item_index: int) -> int:
        """Position of the item with the given index, or -1."""
        if self.passthrough:
            index = item_index - self.min_index
            if self.tac:
                index = self.count - index - 1
            return index
        return next(
            (i for i in range(self.count) if self.get(i).item.index == item_index), -1
        )

    def get(self, idx: int) -> Result:
        """Result at position idx; raises IndexError when out of range."""
        if not 0 <= idx < self.count:
            raise IndexError(f"index out of bounds ({idx}/{self.count})")

        if self.chunks is not None:
            if self.tac:
                idx = self.count - idx - 1
            first_chunk = self.chunks[0]
            if first_chunk.count < CHUNK_SIZE and idx >= first_chunk.count:
                idx -= first_chunk.count
                chunk = self.chunks[idx // CHUNK_SIZE + 1]
            else:
                chunk = self.chunks[idx // CHUNK_SIZE]
            return Result(item=chunk.items[idx % CHUNK_SIZE])

        if self.sorted:
            return self._merged_get(idx)

        if self.tac:
            idx = self.count - idx - 1
        for lst in self.lists:
            if idx < len(lst):
                return lst[idx]
            idx -= len(lst)
        raise IndexError(f"index out of bounds (unsorted, {idx}/{self.count})")

    def cacheable(self) -> bool:
        """Whether the merger is small enough to be cached."""
        return self.count < MERGER_CACHE_MAX

    def _merged_get(self, idx: int) -> Result:
        assert self._pending is not None
        while len(self.merged) <= idx:
            try:
                self.merged.append(next(self._pending))
            except StopIteration:
                raise IndexError(
                    f"index out of bounds (sorted, {len(self.merged)}/{self.count})"
                ) from None
        return self.merged[idx]


def empty_merger(revision: Any) -> Merger:
    """A merger with no results."""
    return Merger(None, [], False, False, revision, 0)


def pass_merger(chunks: Sequence[Chunk], tac: bool, revision: Any) -> Merger:
    """A merger that yields the items of chunks in their original order."""
    min_index = chunks[0].items[0].index if chunks else 0
    return Merger(None, [], False, tac, revision, min_index, chunks=chunks)