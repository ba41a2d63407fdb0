"""Redis-backed key-value store shared by every worker in the fleet.

Layout (``<ns>`` is the configured table name):
- ``<ns>:<key>``: JSON-encoded item, with ``EXAT`` expiry when requested.
- ``<ns>:idx:<index>:<partition>``: sorted set of primary keys scored by the
  index sort attribute.

Index entries are not expired together with their items; ``query`` skips
members whose item is gone.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

import redis

from app.adapters.store.base import AbstractKeyValueStore, IndexSpec, Item
from app.core.errors import StoreError

logger = logging.getLogger(__name__)


class RedisKeyValueStore(AbstractKeyValueStore):
    """Store items as JSON strings in Redis."""

    def __init__(
        self,
        client: "redis.Redis",
        *,
        namespace: str,
        indexes: Mapping[str, IndexSpec] | None = None,
    ) -> None:
        if not namespace:
            raise ValueError("namespace must be a non-empty string")

        self._client = client
        self._namespace = namespace
        self._indexes = dict(indexes or {})

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        namespace: str,
        indexes: Mapping[str, IndexSpec] | None = None,
    ) -> "RedisKeyValueStore":
        client = redis.Redis.from_url(url, decode_responses=True)
        return cls(client, namespace=namespace, indexes=indexes)

    def _item_key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def _index_key(self, index_name: str, partition_value: Any) -> str:
        return f"{self._namespace}:idx:{index_name}:{partition_value}"

    def _decode(self, key: str, raw: str) -> Item:
        try:
            item = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StoreError(
                code="store_malformed_item",
                message=f"Stored value for '{key}' is not valid JSON",
                details={"backend": "redis"},
            ) from exc
        if not isinstance(item, dict):
            raise StoreError(
                code="store_malformed_item",
                message=f"Stored value for '{key}' is not an object",
                details={"backend": "redis"},
            )
        return item

    def get(self, key: str) -> Item | None:
        if not key:
            raise ValueError("key must be a non-empty string")

        try:
            raw = self._client.get(self._item_key(key))
        except redis.RedisError as exc:
            raise StoreError(
                code="store_unavailable",
                message=f"Redis GET failed: {exc}",
                details={"backend": "redis"},
            ) from exc

        if raw is None:
            return None
        return self._decode(key, raw)

    def put(self, key: str, item: Item, *, expires_at: int | None = None) -> None:
        if not key:
            raise ValueError("key must be a non-empty string")

        payload = json.dumps(item, separators=(",", ":"))
        try:
            pipe = self._client.pipeline()
            if expires_at is not None:
                pipe.set(self._item_key(key), payload, exat=int(expires_at))
            else:
                pipe.set(self._item_key(key), payload)
            for index_name, spec in self._indexes.items():
                partition = item.get(spec.partition_attr)
                score = item.get(spec.sort_attr)
                if partition is None or not isinstance(score, (int, float)):
                    continue
                pipe.zadd(self._index_key(index_name, partition), {key: score})
            pipe.execute()
        except redis.RedisError as exc:
            raise StoreError(
                code="store_unavailable",
                message=f"Redis write failed: {exc}",
                details={"backend": "redis"},
            ) from exc

    def query(
        self,
        index_name: str,
        partition_value: str,
        *,
        descending: bool = True,
        limit: int = 100,
    ) -> list[Item]:
        if index_name not in self._indexes:
            raise StoreError(
                code="store_unknown_index",
                message=f"Unknown secondary index: '{index_name}'",
                details={"index_name": index_name, "backend": "redis"},
            )
        if limit < 1:
            return []

        index_key = self._index_key(index_name, partition_value)
        try:
            if descending:
                members = self._client.zrevrange(index_key, 0, limit - 1)
            else:
                members = self._client.zrange(index_key, 0, limit - 1)
            if not members:
                return []
            raws = self._client.mget([self._item_key(m) for m in members])
        except redis.RedisError as exc:
            raise StoreError(
                code="store_unavailable",
                message=f"Redis query failed: {exc}",
                details={"backend": "redis", "index_name": index_name},
            ) from exc

        items: list[Item] = []
        for member, raw in zip(members, raws):
            if raw is None:
                logger.debug("store.index_member_missing", extra={"index_name": index_name})
                continue
            items.append(self._decode(member, raw))
        return items
