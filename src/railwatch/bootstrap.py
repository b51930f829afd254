"""Builds a :class:`StatusMonitor` and its collaborators from settings."""

from __future__ import annotations

import logging
from typing import Optional

from .config_store import ConfigStore, JsonFileConfigStore, RedisConfigStore
from .credential_store import FileCredentialStore
from .monitor import StatusMonitor
from .notifications import LoggingNotifier, NotificationThrottle, Notifier, WebhookNotifier
from .settings import MonitorSettings

logger = logging.getLogger(__name__)


def build_config_store(settings: MonitorSettings) -> ConfigStore:
    """Redis when ``RAILWATCH_REDIS_URL`` is set, otherwise the JSON file."""
    if settings.redis_url:
        logger.info("Using Redis configuration store")
        return RedisConfigStore.from_url(settings.redis_url)
    logger.info("Using configuration file %s", settings.config_path)
    return JsonFileConfigStore(settings.config_path)


def build_notifier(settings: MonitorSettings) -> Notifier:
    if settings.webhook_url:
        return WebhookNotifier(settings.webhook_url)
    return LoggingNotifier()


def build_throttle(settings: MonitorSettings) -> Optional[NotificationThrottle]:
    if not settings.throttle_enabled:
        return None
    return NotificationThrottle(settings.notify_window_seconds, settings.notify_max_per_window)


def create_monitor(settings: Optional[MonitorSettings] = None) -> StatusMonitor:
    resolved = settings or MonitorSettings.from_env()
    return StatusMonitor(
        build_config_store(resolved),
        FileCredentialStore(resolved.credentials_path),
        build_notifier(resolved),
        settings=resolved,
        throttle=build_throttle(resolved),
    )


__all__ = ["build_config_store", "build_notifier", "build_throttle", "create_monitor"]
