"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any app import so settings pick them up.
"""

import os

import pytest

os.environ["APP_ENV"] = "testing"
os.environ.setdefault("APP_API_KEY_REQUIRED", "true")
os.environ.setdefault("APP_API_KEYS", "test-api-key-123,test-api-key-456")
os.environ.setdefault("APP_CLIENT_EMAIL_MAPPINGS", "portfolio:owner@example.com,studio:hello@studio.dev")
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("STORE_TABLE_NAME", "test-form-relay")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from app.adapters.store.base import IndexSpec  # noqa: E402
from app.adapters.store.in_memory import InMemoryKeyValueStore  # noqa: E402

CLIENT_INDEX = "clientId-timestamp-index"


class FakeClock:
    """Deterministic clock used to test window and expiry logic."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds

    def set(self, value: float) -> None:
        self.current = value


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store(clock: FakeClock) -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore(
        indexes={CLIENT_INDEX: IndexSpec(partition_attr="clientId", sort_attr="timestamp")},
        clock=clock,
    )
