"""Tests for config_store.base module."""

import pytest

from railwatch.config_store import STORE_ERRORS, ConfigStoreError, MemoryConfigStore


@pytest.mark.asyncio
async def test_memory_store_operations() -> None:
    store = MemoryConfigStore({"a": 1})

    await store.set("b", [1, 2])
    await store.delete("a")

    assert await store.get("a") is None
    assert store.snapshot() == {"b": [1, 2]}

    await store.clear()
    assert store.snapshot() == {}


def test_store_error_message() -> None:
    error = ConfigStoreError("write", "projectId", OSError("disk full"))

    assert str(error) == "Config store write failed for 'projectId': disk full"
    assert isinstance(error, STORE_ERRORS)
