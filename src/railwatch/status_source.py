from __future__ import annotations

"""Interface the polling engine depends on for fetching deployment state."""

from typing import Optional, Protocol

from .models.service import Deployment, Project


class StatusSource(Protocol):
    """Remote source of per-service deployment status.

    Implementations raise subclasses of ``railwatch.errors.StatusSourceError``;
    ``RateLimitedError`` is treated specially by the polling engine.
    """

    async def fetch_status(self, service_id: str, environment_id: Optional[str] = None) -> Optional[Deployment]: ...

    async def fetch_project(self, project_id: str) -> Optional[Project]: ...


__all__ = ["StatusSource"]
