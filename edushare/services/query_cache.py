"""Owned query cache with invalidate-and-refetch.

Each fetch is stamped with an issuance number. A result is only stored if no
later-issued fetch for the same key has been stored already, so a slow
response can never overwrite a newer one.
"""

import itertools
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional, Tuple

from ..utils.logger import get_logger

logger = get_logger("query_cache")

Fetcher = Callable[[], Awaitable[Any]]


def query_key(name: str, **params: Any) -> Tuple[Hashable, ...]:
    """Build a cache key from a query name and its parameters."""
    return (name,) + tuple(sorted(params.items()))


@dataclass
class QueryCacheEntry:
    """Cached result of a query."""

    value: Any
    issued: int
    stale: bool = False


class QueryCache:
    """Results keyed by query parameters, last write wins by issuance order."""

    def __init__(self):
        self._entries: Dict[Hashable, QueryCacheEntry] = {}
        self._counter = itertools.count(1)

    def get(self, key: Hashable) -> Optional[Any]:
        """Cached value for ``key`` (possibly stale), or None."""
        entry = self._entries.get(key)
        return entry.value if entry else None

    def is_stale(self, key: Hashable) -> bool:
        """True when nothing is cached or the entry was invalidated."""
        entry = self._entries.get(key)
        return entry is None or entry.stale

    def invalidate(self, key: Hashable) -> None:
        """Mark an entry stale; its value stays readable until replaced."""
        entry = self._entries.get(key)
        if entry:
            entry.stale = True
            logger.debug(f"Invalidated query {key}")

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    async def fetch(self, key: Hashable, fetcher: Fetcher) -> Any:
        """
        Run ``fetcher`` and store its result unless a newer one already landed.

        Args:
            key: Query key
            fetcher: Coroutine function producing the fresh value

        Returns:
            The authoritative cached value after this fetch completes

        Raises:
            Whatever ``fetcher`` raises; the cached value is left untouched
        """
        issued = next(self._counter)
        value = await fetcher()

        entry = self._entries.get(key)
        if entry is not None and entry.issued > issued:
            logger.debug(f"Discarded stale result #{issued} for {key} (have #{entry.issued})")
            return entry.value

        self._entries[key] = QueryCacheEntry(value=value, issued=issued)
        return value

    async def invalidate_and_refetch(self, key: Hashable, fetcher: Fetcher) -> Any:
        """Invalidate ``key`` then fetch it again."""
        self.invalidate(key)
        return await self.fetch(key, fetcher)
