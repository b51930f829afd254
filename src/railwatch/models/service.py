from __future__ import annotations

"""Tracked services and the remote deployment/project records they are built from."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import List, Optional, Tuple

from ..formatting import format_elapsed, service_url
from ..time_utils import get_current_utc
from .status import DeploymentStatus

_PRODUCTION_ENVIRONMENT_NAME = "production"


@dataclass(frozen=True)
class Deployment:
    """Latest deployment of a service as reported by the remote source."""

    id: str
    status: DeploymentStatus
    created_at: datetime


@dataclass(frozen=True)
class ServiceSummary:
    id: str
    name: str


@dataclass(frozen=True)
class Environment:
    id: str
    name: str


@dataclass(frozen=True)
class Project:
    """Project metadata used for service discovery and environment resolution."""

    id: str
    name: str
    services: Tuple[ServiceSummary, ...] = ()
    environments: Tuple[Environment, ...] = ()

    @property
    def production_environment_id(self) -> Optional[str]:
        """Environment named ``production``, else the first one listed."""
        for environment in self.environments:
            if environment.name.strip().lower() == _PRODUCTION_ENVIRONMENT_NAME:
                return environment.id
        if self.environments:
            return self.environments[0].id
        return None


@dataclass(frozen=True)
class TrackedService:
    """A monitored service and its most recently observed deployment state."""

    id: str
    project_id: str
    project_name: str
    name: str
    status: DeploymentStatus = DeploymentStatus.UNKNOWN
    last_updated: datetime = field(default_factory=get_current_utc)
    deployment_id: Optional[str] = None
    deployment_created_at: Optional[datetime] = None

    @property
    def railway_url(self) -> str:
        return service_url(self.project_id, self.id)

    def with_deployment(self, deployment: Deployment, observed_at: datetime) -> "TrackedService":
        return replace(
            self,
            status=deployment.status,
            last_updated=observed_at,
            deployment_id=deployment.id,
            deployment_created_at=deployment.created_at,
        )

    def renamed(self, name: str) -> "TrackedService":
        return replace(self, name=name)

    def time_in_current_state(self, now: Optional[datetime] = None) -> Optional[str]:
        if self.deployment_created_at is None:
            return None
        current = now or get_current_utc()
        return format_elapsed((current - self.deployment_created_at).total_seconds())


def snapshot_signature(services: List[TrackedService]) -> List[Tuple[str, DeploymentStatus, Optional[str]]]:
    """Identity of a snapshot for change detection (id, status, deployment id)."""
    return [(service.id, service.status, service.deployment_id) for service in services]


def snapshots_equal(lhs: List[TrackedService], rhs: List[TrackedService]) -> bool:
    return snapshot_signature(lhs) == snapshot_signature(rhs)


__all__ = [
    "Deployment",
    "Environment",
    "Project",
    "ServiceSummary",
    "TrackedService",
    "snapshot_signature",
    "snapshots_equal",
]
