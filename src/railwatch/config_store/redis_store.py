"""Redis-backed configuration store (one orjson value per key)."""

from __future__ import annotations

import logging
from typing import Any, List

import orjson
from redis.asyncio import Redis
from redis.exceptions import RedisError

from .base import ConfigStoreError

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "railwatch"


class RedisConfigStore:
    """Stores each key at ``<namespace>:config:<key>`` as an orjson document."""

    def __init__(self, client: Redis, namespace: str = DEFAULT_NAMESPACE) -> None:
        self._client = client
        self._prefix = f"{namespace}:config:"

    @classmethod
    def from_url(cls, url: str, namespace: str = DEFAULT_NAMESPACE) -> "RedisConfigStore":
        return cls(Redis.from_url(url), namespace)

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> Any:
        try:
            raw = await self._client.get(self._key(key))
        except RedisError as exc:
            raise ConfigStoreError("get", key, exc) from exc
        if raw is None:
            return None
        try:
            return orjson.loads(raw)
        except orjson.JSONDecodeError:  # policy_guard: allow-silent-handler
            logger.warning("Discarding undecodable config value for %s", key)
            return None

    async def set(self, key: str, value: Any) -> None:
        try:
            payload = orjson.dumps(value).decode()
        except TypeError as exc:
            raise ConfigStoreError("serialize", key, exc) from exc
        try:
            await self._client.set(self._key(key), payload)
        except RedisError as exc:
            raise ConfigStoreError("set", key, exc) from exc

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(self._key(key))
        except RedisError as exc:
            raise ConfigStoreError("delete", key, exc) from exc

    async def clear(self) -> None:
        try:
            keys: List[Any] = [key async for key in self._client.scan_iter(match=f"{self._prefix}*")]
            if keys:
                await self._client.delete(*keys)
        except RedisError as exc:
            raise ConfigStoreError("clear", None, exc) from exc

    async def close(self) -> None:
        await self._client.aclose()


__all__ = ["DEFAULT_NAMESPACE", "RedisConfigStore"]
