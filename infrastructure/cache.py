"""In-process response cache with tag-based invalidation."""

from __future__ import annotations
from tracking import t

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Iterable, Optional, Set


@dataclass
class _Entry:
    value: Any
    expires_at: float
    tags: FrozenSet[str]


class ResponseCache:
    """TTL cache for decoded remote reads.

    Each entry carries the tags of the data it holds; writes invalidate by
    tag so every cached read touching a changed reservation, unit or user is
    dropped together.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        t('infrastructure.cache.ResponseCache.__init__')
        self._clock = clock
        self._entries: Dict[str, _Entry] = {}
        self._tag_index: Dict[str, Set[str]] = {}
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value or ``None`` when missing or expired."""
        t('infrastructure.cache.ResponseCache.get')

        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            self._drop(key)
            return None
        self.logger.debug("Cache HIT: %s", key)
        return entry.value

    def set(self, key: str, value: Any, ttl: float, tags: Iterable[str] = ()) -> None:
        t('infrastructure.cache.ResponseCache.set')

        if ttl <= 0:
            return
        self._drop(key)
        entry = _Entry(value=value, expires_at=self._clock() + ttl, tags=frozenset(tags))
        self._entries[key] = entry
        for tag in entry.tags:
            self._tag_index.setdefault(tag, set()).add(key)

    def invalidate_tags(self, tags: Iterable[str]) -> int:
        """Drop every entry carrying any of ``tags``; returns how many were removed."""
        t('infrastructure.cache.ResponseCache.invalidate_tags')

        keys: Set[str] = set()
        wanted = set(tags)
        for tag in wanted:
            keys.update(self._tag_index.get(tag, ()))
        for key in keys:
            self._drop(key)
        if keys:
            self.logger.debug("Cache invalidated %d entries for tags %s", len(keys), sorted(wanted))
        return len(keys)

    def clear(self) -> None:
        self._entries.clear()
        self._tag_index.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def _drop(self, key: str) -> None:
        entry = self._entries.pop(key, None)
        if entry is None:
            return
        for tag in entry.tags:
            members = self._tag_index.get(tag)
            if members is None:
                continue
            members.discard(key)
            if not members:
                del self._tag_index[tag]
