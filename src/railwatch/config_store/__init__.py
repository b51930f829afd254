"""Configuration store backends."""

from .base import STORE_ERRORS, ConfigStore, ConfigStoreError, MemoryConfigStore
from .json_file_store import JsonFileConfigStore
from .redis_store import DEFAULT_NAMESPACE, RedisConfigStore

__all__ = [
    "ConfigStore",
    "ConfigStoreError",
    "DEFAULT_NAMESPACE",
    "JsonFileConfigStore",
    "MemoryConfigStore",
    "RedisConfigStore",
    "STORE_ERRORS",
]
