"""Persisted registry of user-defined service groups."""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Tuple

from .config_store.base import STORE_ERRORS, ConfigStore
from .models.group import ServiceGroup

logger = logging.getLogger(__name__)

GROUPS_KEY = "apps"

_GROUP_ERRORS = (KeyError, TypeError, ValueError)


class GroupNotFoundError(KeyError):
    """Raised when a group id is not in the registry."""

    def __init__(self, group_id: str) -> None:
        super().__init__(group_id)
        self.group_id = group_id

    def __str__(self) -> str:
        return f"No service group with id {self.group_id!r}"


class ServiceGroupRegistry:
    """Create, update and delete groups; every change is written to the store."""

    def __init__(self, store: ConfigStore) -> None:
        self._store = store
        self._groups: List[ServiceGroup] = []

    @property
    def groups(self) -> Tuple[ServiceGroup, ...]:
        return tuple(self._groups)

    def get(self, group_id: str) -> Optional[ServiceGroup]:
        for group in self._groups:
            if group.id == group_id:
                return group
        return None

    async def load(self) -> Tuple[ServiceGroup, ...]:
        try:
            raw = await self._store.get(GROUPS_KEY)
        except STORE_ERRORS as exc:  # policy_guard: allow-silent-handler
            logger.warning("Group store unreadable, starting with no groups: %s", exc)
            self._groups = []
            return self.groups
        self._groups = self._decode(raw)
        return self.groups

    async def create(self, name: str, service_ids: Iterable[str] = ()) -> ServiceGroup:
        cleaned = name.strip()
        if not cleaned:
            raise ValueError("Group name must not be empty")
        group = ServiceGroup(name=cleaned, service_ids=tuple(dict.fromkeys(service_ids)))
        self._groups.append(group)
        await self._persist()
        logger.info("Created group %s with %d service(s)", group.name, len(group.service_ids))
        return group

    async def update(
        self,
        group_id: str,
        *,
        name: Optional[str] = None,
        service_ids: Optional[Iterable[str]] = None,
    ) -> ServiceGroup:
        for index, group in enumerate(self._groups):
            if group.id != group_id:
                continue
            if name is not None and not name.strip():
                raise ValueError("Group name must not be empty")
            updated = group.updated(
                name=name.strip() if name is not None else None,
                service_ids=tuple(dict.fromkeys(service_ids)) if service_ids is not None else None,
            )
            self._groups[index] = updated
            await self._persist()
            return updated
        raise GroupNotFoundError(group_id)

    async def delete(self, group_id: str) -> None:
        remaining = [group for group in self._groups if group.id != group_id]
        if len(remaining) == len(self._groups):
            raise GroupNotFoundError(group_id)
        self._groups = remaining
        await self._persist()

    async def clear(self) -> None:
        self._groups = []
        await self._persist()

    async def _persist(self) -> None:
        await self._store.set(GROUPS_KEY, [group.to_dict() for group in self._groups])

    @staticmethod
    def _decode(raw: Any) -> List[ServiceGroup]:
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Persisted groups are not a list; ignoring them")
            return []
        groups: List[ServiceGroup] = []
        for item in raw:
            if not isinstance(item, dict):
                continue
            try:
                groups.append(ServiceGroup.from_dict(item))
            except _GROUP_ERRORS as exc:  # policy_guard: allow-silent-handler
                logger.warning("Skipping undecodable group entry: %s", exc)
        return groups


__all__ = ["GROUPS_KEY", "GroupNotFoundError", "ServiceGroupRegistry"]
