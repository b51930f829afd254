"""One-time resolution of the environment filter for projects configured without one."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from ..config_store.base import STORE_ERRORS
from ..errors import RateLimitedError, StatusSourceError
from ..status_source import StatusSource

logger = logging.getLogger(__name__)

MIGRATION_ERRORS = (StatusSourceError, asyncio.TimeoutError)


class EnvironmentResolver:
    """
    Best-effort lookup of the project's production environment id.

    Only one attempt is made per resolver; a failure leaves polling unfiltered
    and is not retried automatically. A rate-limited attempt still counts as
    the one attempt but is re-raised so the caller can back off. A resolved id
    is handed to ``on_resolved`` so the caller can persist it.
    """

    def __init__(
        self,
        source: StatusSource,
        project_id: Optional[str],
        *,
        on_resolved: Optional[Callable[[str], Awaitable[None]]] = None,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        self._source = source
        self._project_id = project_id
        self._on_resolved = on_resolved
        self._timeout_seconds = timeout_seconds
        self.attempted = False

    async def resolve(self, current: Optional[str]) -> Optional[str]:
        if current is not None or self.attempted or not self._project_id:
            return current
        self.attempted = True
        try:
            project = await asyncio.wait_for(self._source.fetch_project(self._project_id), timeout=self._timeout_seconds)
        except RateLimitedError:
            logger.warning("Rate limited resolving environment for project %s; polling unfiltered", self._project_id)
            raise
        except MIGRATION_ERRORS as exc:  # policy_guard: allow-silent-handler
            logger.warning("Could not resolve environment for project %s; polling unfiltered: %s", self._project_id, exc)
            return None
        if project is None or project.production_environment_id is None:
            logger.info("Project %s has no environment to filter on", self._project_id)
            return None
        environment_id = project.production_environment_id
        logger.info("Resolved environment %s for project %s", environment_id, self._project_id)
        if self._on_resolved is not None:
            try:
                await self._on_resolved(environment_id)
            except STORE_ERRORS as exc:  # policy_guard: allow-silent-handler
                logger.warning("Resolved environment %s could not be persisted: %s", environment_id, exc)
        return environment_id


__all__ = ["EnvironmentResolver", "MIGRATION_ERRORS"]
