"""Bounded in-memory store of resolved translation pairs."""

from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass, field

CacheKey = tuple[str, str]  # (language code, text)


@dataclass(frozen=True)
class CacheEntry:
    primary: str
    english: str
    created_at: float = field(default_factory=time.time)


class ResultCache:
    """Translation pairs keyed by ``(language code, text)``.

    Eviction follows insertion order, not access order: a ``get`` never
    reorders entries, while re-putting an existing key moves it to the
    newest position.
    """

    def __init__(self, max_entries: int = 500) -> None:
        if max_entries < 1:
            raise ValueError("Cache capacity must be at least 1")
        self.max_entries = max_entries
        self._entries: OrderedDict[CacheKey, CacheEntry] = OrderedDict()

    def get(self, key: CacheKey) -> CacheEntry | None:
        return self._entries.get(key)

    def put(self, key: CacheKey, entry: CacheEntry) -> None:
        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self.max_entries:
            self._entries.popitem(last=False)
        self._entries[key] = entry

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
