"""Key-value store interfaces.

Items are flat JSON-compatible dicts. Each item may carry an absolute expiry
(UNIX epoch seconds) after which the backend stops returning it. Secondary
indexes partition items on one attribute and order them by a numeric one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

Item = dict[str, Any]


@dataclass(frozen=True)
class IndexSpec:
    """Secondary index definition.

    Attributes:
        partition_attr: Item attribute whose value selects the partition.
        sort_attr: Numeric item attribute used for ordering within a partition.
    """

    partition_attr: str
    sort_attr: str


class AbstractKeyValueStore(ABC):
    """Interface for key-value stores with per-item expiry."""

    @abstractmethod
    def get(self, key: str) -> Item | None:
        """Fetch an item by primary key.

        Args:
            key: Primary key (e.g. ``"ip:203.0.113.7"``).

        Returns:
            The stored item, or None if absent or expired.

        Raises:
            StoreError: If the backend call fails.
        """
        raise NotImplementedError

    @abstractmethod
    def put(self, key: str, item: Item, *, expires_at: int | None = None) -> None:
        """Replace the item stored under key.

        Args:
            key: Primary key.
            item: Full item to store (overwrites any previous value).
            expires_at: Optional absolute expiry in UNIX epoch seconds.

        Raises:
            StoreError: If the backend call fails.
        """
        raise NotImplementedError

    @abstractmethod
    def query(
        self,
        index_name: str,
        partition_value: str,
        *,
        descending: bool = True,
        limit: int = 100,
    ) -> list[Item]:
        """Query a secondary index partition ordered by its sort attribute.

        Args:
            index_name: Name of a configured secondary index.
            partition_value: Value of the index partition attribute.
            descending: Newest (largest sort value) first when True.
            limit: Maximum number of items to return.

        Returns:
            Matching items, ordered by the index sort attribute.

        Raises:
            StoreError: If the index is unknown or the backend call fails.
        """
        raise NotImplementedError
