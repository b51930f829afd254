from __future__ import annotations

"""Delivery backends for notifications."""

import asyncio
import logging
from typing import List, Protocol

import aiohttp
import orjson

from .models import Notification

logger = logging.getLogger(__name__)

# HTTP status codes treated as delivered
_HTTP_SUCCESS_CODES = frozenset({200, 201, 202, 204})

DELIVERY_ERRORS = (
    aiohttp.ClientError,
    asyncio.TimeoutError,
    OSError,
    RuntimeError,
)


def _dumps(payload: object) -> str:
    return orjson.dumps(payload).decode()


class NotificationDeliveryError(RuntimeError):
    """Raised when a notifier could not deliver a notification."""


class Notifier(Protocol):
    async def deliver(self, notification: Notification) -> None: ...


class LoggingNotifier:
    """Writes notifications to the log; the default when no other channel is configured."""

    def __init__(self, level: int = logging.INFO) -> None:
        self._level = level

    async def deliver(self, notification: Notification) -> None:
        logger.log(self._level, "%s | %s | %s", notification.title, notification.body, notification.url)


class RecordingNotifier:
    """Keeps delivered notifications in memory."""

    def __init__(self) -> None:
        self.delivered: List[Notification] = []

    async def deliver(self, notification: Notification) -> None:
        self.delivered.append(notification)


class WebhookNotifier:
    """POSTs each notification as JSON to a webhook URL."""

    def __init__(self, url: str, *, timeout_seconds: float = 10.0) -> None:
        self._url = url
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    @property
    def url(self) -> str:
        return self._url

    async def deliver(self, notification: Notification) -> None:
        async with aiohttp.ClientSession(timeout=self._timeout, json_serialize=_dumps) as session:
            async with session.post(self._url, json=notification.to_dict()) as response:
                if response.status in _HTTP_SUCCESS_CODES:
                    return
                detail = await response.text()
                raise NotificationDeliveryError(f"Webhook returned {response.status}: {detail}")


__all__ = [
    "DELIVERY_ERRORS",
    "LoggingNotifier",
    "NotificationDeliveryError",
    "Notifier",
    "RecordingNotifier",
    "WebhookNotifier",
]
