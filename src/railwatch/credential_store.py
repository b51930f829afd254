"""Storage for the opaque Railway API token."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Protocol

from .config_store.base import ConfigStoreError

logger = logging.getLogger(__name__)

_TOKEN_FILE_MODE = 0o600


class CredentialStore(Protocol):
    async def get(self) -> Optional[str]: ...

    async def set(self, token: str) -> None: ...

    async def delete(self) -> None: ...


class MemoryCredentialStore:
    def __init__(self, token: Optional[str] = None) -> None:
        self._token = token

    async def get(self) -> Optional[str]:
        return self._token

    async def set(self, token: str) -> None:
        self._token = token

    async def delete(self) -> None:
        self._token = None


class FileCredentialStore:
    """
    Keeps the token in a single file readable only by the owner.

    The token is never logged. A missing or empty file means no credential.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()

    async def get(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            token = self.path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigStoreError("read", "credentials", exc) from exc
        return token or None

    async def set(self, token: str) -> None:
        if not token.strip():
            raise ValueError("API token must not be empty")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, _TOKEN_FILE_MODE)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(token.strip())
            os.chmod(self.path, _TOKEN_FILE_MODE)
        except OSError as exc:
            raise ConfigStoreError("write", "credentials", exc) from exc
        logger.info("Stored API token at %s", self.path)

    async def delete(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            raise ConfigStoreError("delete", "credentials", exc) from exc


__all__ = ["CredentialStore", "FileCredentialStore", "MemoryCredentialStore"]
