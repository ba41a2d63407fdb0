"""Key-value store adapters.

Rate windows and submission records share one logical table. Services depend
on ``AbstractKeyValueStore`` only, so the backend can move from the in-process
store to Redis without touching the limiter or recorder.
"""

from app.adapters.store.base import AbstractKeyValueStore, IndexSpec
from app.adapters.store.factory import create_store
from app.adapters.store.in_memory import InMemoryKeyValueStore
from app.adapters.store.redis_store import RedisKeyValueStore

__all__ = [
    "AbstractKeyValueStore",
    "InMemoryKeyValueStore",
    "IndexSpec",
    "RedisKeyValueStore",
    "create_store",
]
