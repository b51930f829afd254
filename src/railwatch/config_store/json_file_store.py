"""Single JSON document store written atomically after every change."""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

import orjson

from .base import ConfigStoreError

logger = logging.getLogger(__name__)


class JsonFileConfigStore:
    """
    Key/value store backed by one JSON object on disk.

    The document is read lazily on first access. An unreadable or corrupt file
    is treated as empty (and logged) so a damaged store never blocks startup.
    Writes go to a temporary file in the same directory and are moved into
    place with ``os.replace`` so readers see either the old or new document.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()
        self._values: Optional[Dict[str, Any]] = None
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Any:
        values = self._ensure_loaded()
        return values.get(key)

    async def set(self, key: str, value: Any) -> None:
        async with self._lock:
            values = self._ensure_loaded()
            values[key] = value
            self._write(values, key)

    async def delete(self, key: str) -> None:
        async with self._lock:
            values = self._ensure_loaded()
            if key not in values:
                return
            del values[key]
            self._write(values, key)

    async def clear(self) -> None:
        async with self._lock:
            self._values = {}
            self._write(self._values, None)

    def _ensure_loaded(self) -> Dict[str, Any]:
        if self._values is None:
            self._values = self._read()
        return self._values

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            payload = orjson.loads(self.path.read_bytes())
        except (OSError, orjson.JSONDecodeError) as exc:  # policy_guard: allow-silent-handler
            logger.warning("Config file %s unreadable, starting empty: %s", self.path, exc)
            return {}
        if not isinstance(payload, dict):
            logger.warning("Config file %s does not contain an object, starting empty", self.path)
            return {}
        return payload

    def _write(self, values: Dict[str, Any], key: Optional[str]) -> None:
        try:
            data = orjson.dumps(values, option=orjson.OPT_INDENT_2)
        except TypeError as exc:
            raise ConfigStoreError("serialize", key, exc) from exc
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}-", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as handle:
                    handle.write(data)
                    handle.flush()
                    os.fsync(handle.fileno())
                os.replace(tmp_name, self.path)
            except OSError:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise ConfigStoreError("write", key, exc) from exc


__all__ = ["JsonFileConfigStore"]
