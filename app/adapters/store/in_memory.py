"""In-memory key-value store with TTL expiry and secondary indexes.

Notes:
- Per-process only: running multiple workers gives each its own store.
- Thread-safe: uses a lock around shared state.
- Expired items are dropped lazily on read and on the next write.
"""

from __future__ import annotations

import copy
import itertools
import threading
import time
from dataclasses import dataclass
from typing import Callable, Mapping

from app.adapters.store.base import AbstractKeyValueStore, IndexSpec, Item
from app.core.errors import StoreError


@dataclass
class _StoredItem:
    item: Item
    expires_at: int | None
    seq: int


class InMemoryKeyValueStore(AbstractKeyValueStore):
    """Dictionary-backed store mirroring the semantics of the shared backends.

    Items are deep-copied on the way in and out so callers can never mutate
    stored state in place.
    """

    def __init__(
        self,
        *,
        indexes: Mapping[str, IndexSpec] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the store.

        Args:
            indexes: Secondary index definitions keyed by index name.
            clock: Time source function returning UNIX time in seconds.
        """
        self._indexes = dict(indexes or {})
        self._clock = clock
        self._lock = threading.RLock()
        self._items: dict[str, _StoredItem] = {}
        self._seq = itertools.count()

    def _is_expired(self, stored: _StoredItem, now: float) -> bool:
        return stored.expires_at is not None and stored.expires_at <= now

    def _evict_expired_locked(self, now: float) -> None:
        expired = [k for k, v in self._items.items() if self._is_expired(v, now)]
        for key in expired:
            del self._items[key]

    def get(self, key: str) -> Item | None:
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()
        with self._lock:
            stored = self._items.get(key)
            if stored is None:
                return None
            if self._is_expired(stored, now):
                del self._items[key]
                return None
            return copy.deepcopy(stored.item)

    def put(self, key: str, item: Item, *, expires_at: int | None = None) -> None:
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()
        with self._lock:
            self._evict_expired_locked(now)
            self._items[key] = _StoredItem(
                item=copy.deepcopy(item),
                expires_at=expires_at,
                seq=next(self._seq),
            )

    def query(
        self,
        index_name: str,
        partition_value: str,
        *,
        descending: bool = True,
        limit: int = 100,
    ) -> list[Item]:
        spec = self._indexes.get(index_name)
        if spec is None:
            raise StoreError(
                code="store_unknown_index",
                message=f"Unknown secondary index: '{index_name}'",
                details={"index_name": index_name, "backend": "memory"},
            )
        if limit < 1:
            return []

        now = self._clock()
        with self._lock:
            matches = [
                stored
                for stored in self._items.values()
                if not self._is_expired(stored, now)
                and stored.item.get(spec.partition_attr) == partition_value
                and spec.sort_attr in stored.item
            ]
            # Insertion order breaks ties between equal sort values
            matches.sort(
                key=lambda s: (s.item[spec.sort_attr], s.seq),
                reverse=descending,
            )
            return [copy.deepcopy(s.item) for s in matches[:limit]]
