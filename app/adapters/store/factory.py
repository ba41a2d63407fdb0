"""Factory pattern for creating key-value store instances."""

from __future__ import annotations

import logging

from app.adapters.store.base import AbstractKeyValueStore, IndexSpec
from app.adapters.store.in_memory import InMemoryKeyValueStore
from app.adapters.store.redis_store import RedisKeyValueStore
from app.core.config import StoreSettings, settings
from app.core.errors import ValidationAppError

logger = logging.getLogger(__name__)


def build_indexes(store_settings: StoreSettings) -> dict[str, IndexSpec]:
    """Secondary indexes every backend must provide."""
    return {
        store_settings.client_index_name: IndexSpec(
            partition_attr="clientId",
            sort_attr="timestamp",
        ),
    }


def create_store(store_settings: StoreSettings | None = None) -> AbstractKeyValueStore | None:
    """Instantiate the configured store backend.

    Args:
        store_settings: Optional store settings; defaults to global settings.

    Returns:
        Configured store, or None when no table name is set (storage disabled).

    Raises:
        ValidationAppError: If the backend name is not supported.
    """
    cfg = store_settings or settings.store

    if not cfg.table_name:
        logger.warning(
            "store.disabled",
            extra={"reason": "table_name_not_configured"},
        )
        return None

    backend = cfg.backend.lower()
    indexes = build_indexes(cfg)

    if backend == "memory":
        return InMemoryKeyValueStore(indexes=indexes)

    if backend == "redis":
        return RedisKeyValueStore.from_url(
            cfg.redis_url,
            namespace=cfg.table_name,
            indexes=indexes,
        )

    raise ValidationAppError(
        code="store_unknown_backend",
        message=f"Unknown store backend: '{backend}'. Supported backends: memory, redis",
        details={"backend": backend},
    )
