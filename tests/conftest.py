"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import os
import re
from typing import Any

import pytest

from railwatch.config import reset_default_values
from railwatch.config_store import MemoryConfigStore


class FakeRedis:
    """In-memory stand-in for the redis.asyncio string commands the stores use."""

    def __init__(self):
        self._data: dict[str, str] = {}
        self.closed = False

    async def set(self, key: str, value: str | bytes) -> bool:
        """Set a string value."""
        self._data[key] = value if isinstance(value, str) else value.decode()
        return True

    async def get(self, key: str) -> str | None:
        """Get a string value."""
        return self._data.get(key)

    async def delete(self, *keys: str) -> int:
        """Delete keys."""
        deleted = 0
        for k in keys:
            if k in self._data:
                del self._data[k]
                deleted += 1
        return deleted

    async def exists(self, *keys: str) -> int:
        return sum(1 for k in keys if k in self._data)

    async def scan_iter(self, match: str | None = None, count: int | None = None):
        """Scan keys."""
        keys = list(self._data.keys())
        if match:
            regex = "^" + re.escape(match).replace(r"\*", ".*").replace(r"\?", ".") + "$"
            keys = [k for k in keys if re.match(regex, k)]
        for key in keys:
            yield key

    async def ping(self) -> str:
        return "PONG"

    async def aclose(self) -> None:
        self.closed = True

    def dump_string(self, key: str) -> str | None:
        return self._data.get(key)


@pytest.fixture
def fake_redis() -> FakeRedis:
    """Provide a fake Redis instance."""
    return FakeRedis()


@pytest.fixture
def memory_store() -> MemoryConfigStore:
    return MemoryConfigStore()


@pytest.fixture(autouse=True)
def isolated_settings_env(monkeypatch, tmp_path) -> Any:
    """Keep developer .env files and RAILWATCH_* variables out of tests."""
    for name in list(os.environ):
        if name.startswith("RAILWATCH_") or name in {"RAILWAY_TOKEN", "LOG_APPEND"}:
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("railwatch.config.runtime._DOTENV_CANDIDATES", ())
    reset_default_values()
    yield
    reset_default_values()
