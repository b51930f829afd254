"""
Persisted monitor configuration.

Keys match the documents written by earlier releases: ``projectId``,
``projectName``, ``environmentId``, ``serviceIds``, ``serviceNames``,
``notificationPreferences``. Transition history (``deploymentHistory``) and
groups (``apps``) are owned by the history ledger and group registry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from .config_store.base import ConfigStore
from .notifications.models import NotificationPreferences

logger = logging.getLogger(__name__)

PROJECT_ID_KEY = "projectId"
PROJECT_NAME_KEY = "projectName"
ENVIRONMENT_ID_KEY = "environmentId"
SERVICE_IDS_KEY = "serviceIds"
SERVICE_NAMES_KEY = "serviceNames"
PREFERENCES_KEY = "notificationPreferences"

DEFAULT_PROJECT_NAME = "Project"


@dataclass(frozen=True)
class MonitorConfiguration:
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    environment_id: Optional[str] = None
    service_ids: Tuple[str, ...] = ()
    service_names: Dict[str, str] = field(default_factory=dict)
    preferences: NotificationPreferences = field(default_factory=NotificationPreferences)

    @property
    def is_configured(self) -> bool:
        return bool(self.project_id) and bool(self.service_ids)

    @property
    def display_project_name(self) -> str:
        return self.project_name or DEFAULT_PROJECT_NAME

    def with_environment(self, environment_id: Optional[str]) -> "MonitorConfiguration":
        return replace(self, environment_id=environment_id)

    def with_service_names(self, names: Mapping[str, str]) -> "MonitorConfiguration":
        return replace(self, service_names=dict(names))

    def with_preferences(self, preferences: NotificationPreferences) -> "MonitorConfiguration":
        return replace(self, preferences=preferences)


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text or None


class ConfigurationRepository:
    """Reads and writes :class:`MonitorConfiguration` through a config store."""

    def __init__(self, store: ConfigStore) -> None:
        self.store = store

    async def load(self) -> MonitorConfiguration:
        raw_ids = await self.store.get(SERVICE_IDS_KEY)
        raw_names = await self.store.get(SERVICE_NAMES_KEY)
        service_ids: Tuple[str, ...] = ()
        if isinstance(raw_ids, list):
            service_ids = tuple(dict.fromkeys(str(service_id) for service_id in raw_ids))
        elif raw_ids is not None:
            logger.warning("Ignoring malformed %s value", SERVICE_IDS_KEY)
        names: Dict[str, str] = {}
        if isinstance(raw_names, dict):
            names = {str(key): str(value) for key, value in raw_names.items()}
        return MonitorConfiguration(
            project_id=_optional_str(await self.store.get(PROJECT_ID_KEY)),
            project_name=_optional_str(await self.store.get(PROJECT_NAME_KEY)),
            environment_id=_optional_str(await self.store.get(ENVIRONMENT_ID_KEY)),
            service_ids=service_ids,
            service_names=names,
            preferences=NotificationPreferences.from_dict(await self.store.get(PREFERENCES_KEY)),
        )

    async def save(self, config: MonitorConfiguration) -> None:
        await self._set_optional(PROJECT_ID_KEY, config.project_id)
        await self._set_optional(PROJECT_NAME_KEY, config.project_name)
        await self._set_optional(ENVIRONMENT_ID_KEY, config.environment_id)
        await self.store.set(SERVICE_IDS_KEY, list(config.service_ids))
        await self.store.set(SERVICE_NAMES_KEY, dict(config.service_names))
        await self.store.set(PREFERENCES_KEY, config.preferences.to_dict())

    async def save_environment(self, environment_id: Optional[str]) -> None:
        await self._set_optional(ENVIRONMENT_ID_KEY, environment_id)

    async def reset(self) -> None:
        """Remove every persisted key, history and groups included."""
        await self.store.clear()

    async def _set_optional(self, key: str, value: Optional[str]) -> None:
        if value is None:
            await self.store.delete(key)
        else:
            await self.store.set(key, value)


__all__ = [
    "ConfigurationRepository",
    "DEFAULT_PROJECT_NAME",
    "ENVIRONMENT_ID_KEY",
    "MonitorConfiguration",
    "PREFERENCES_KEY",
    "PROJECT_ID_KEY",
    "PROJECT_NAME_KEY",
    "SERVICE_IDS_KEY",
    "SERVICE_NAMES_KEY",
]
