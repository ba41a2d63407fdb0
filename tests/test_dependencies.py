"""Tests for the cached store provider."""

from unittest.mock import patch

import pytest

from app.adapters.store.in_memory import InMemoryKeyValueStore
from app.core.dependencies import get_store, reset_store


@pytest.fixture(autouse=True)
def fresh_store():
    reset_store()
    yield
    reset_store()


def test_store_is_cached_across_calls() -> None:
    first = get_store()

    assert isinstance(first, InMemoryKeyValueStore)
    assert get_store() is first


def test_reset_store_rebuilds_on_next_call() -> None:
    first = get_store()

    reset_store()

    assert get_store() is not first


@patch("app.core.dependencies.create_store")
def test_store_rebuilt_when_configuration_changes(mock_create) -> None:
    mock_create.side_effect = lambda store_settings: object()
    first = get_store()

    with patch("app.core.dependencies.settings.store.table_name", "other-table"):
        second = get_store()

    assert second is not first
    assert mock_create.call_count == 2
