"""Key/value persistence contract for monitor configuration and history."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional, Protocol

from redis.exceptions import RedisError


class ConfigStoreError(RuntimeError):
    """Raised when a configuration store cannot be read or written."""

    def __init__(self, operation: str, key: Optional[str] = None, original: Optional[BaseException] = None) -> None:
        message = f"Config store {operation} failed"
        if key:
            message = f"{message} for {key!r}"
        if original:
            message = f"{message}: {original}"
        super().__init__(message)
        self.operation = operation
        self.key = key
        self.original = original


# Storage backends may surface OS, redis-py or timeout errors.
STORE_ERRORS = (OSError, RedisError, asyncio.TimeoutError, ConfigStoreError)


class ConfigStore(Protocol):
    """Persisted key/value state. Values are JSON-compatible."""

    async def get(self, key: str) -> Any: ...

    async def set(self, key: str, value: Any) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def clear(self) -> None: ...


class MemoryConfigStore:
    """Process-local store for embedding and tests."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._values: Dict[str, Any] = dict(initial or {})

    async def get(self, key: str) -> Any:
        return self._values.get(key)

    async def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    async def delete(self, key: str) -> None:
        self._values.pop(key, None)

    async def clear(self) -> None:
        self._values.clear()

    def snapshot(self) -> Dict[str, Any]:
        return dict(self._values)


__all__ = ["ConfigStore", "ConfigStoreError", "MemoryConfigStore", "STORE_ERRORS"]
