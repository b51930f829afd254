"""HTTP session management for the Railway API client."""

from __future__ import annotations

import asyncio
from typing import Optional

import aiohttp


class SessionManager:
    """Lazily creates and closes the shared aiohttp session."""

    def __init__(self, timeout_seconds: float) -> None:
        self._timeout_seconds = timeout_seconds
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_lock = asyncio.Lock()

    async def get_session(self) -> aiohttp.ClientSession:
        async with self._session_lock:
            if self._session is None or self._session.closed:
                timeout = aiohttp.ClientTimeout(total=self._timeout_seconds)
                self._session = aiohttp.ClientSession(timeout=timeout)
            return self._session

    def set_session(self, value: Optional[aiohttp.ClientSession]) -> None:
        """Override the managed session (tests inject fakes here)."""
        self._session = value

    async def close(self) -> None:
        async with self._session_lock:
            if self._session is not None:
                await self._session.close()
                self._session = None


__all__ = ["SessionManager"]
