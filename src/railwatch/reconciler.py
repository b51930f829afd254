"""
Diffing of freshly fetched deployment state against the last known state.

Pure functions: no I/O, no clock reads beyond the ``observed_at`` argument.
The polling engine feeds one cycle's fetch results in and applies the
returned snapshot, status map and transitions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Mapping, Optional, Sequence

from .errors import RateLimitedError, describe_error
from .models.service import Deployment, TrackedService, snapshots_equal
from .models.status import DeploymentStatus
from .models.transition import TransitionEvent
from .time_utils import get_current_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one fetch: a deployment (possibly None) or an error."""

    deployment: Optional[Deployment] = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, deployment: Optional[Deployment]) -> "FetchResult":
        return cls(deployment=deployment)

    @classmethod
    def failure(cls, error: BaseException) -> "FetchResult":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def rate_limited(self) -> bool:
        return isinstance(self.error, RateLimitedError)


@dataclass(frozen=True)
class ProjectContext:
    project_id: str = ""
    project_name: str = "Project"


@dataclass
class ReconcileResult:
    services: List[TrackedService]
    transitions: List[TransitionEvent]
    statuses: Dict[str, DeploymentStatus]
    last_error: Optional[str] = None
    rate_limited: bool = False
    failures: Dict[str, str] = field(default_factory=dict)

    def changed_from(self, previous: List[TrackedService]) -> bool:
        return not snapshots_equal(previous, self.services)


def reconcile(
    tracked: Sequence[str],
    previous: Mapping[str, DeploymentStatus],
    fetched: Mapping[str, FetchResult],
    *,
    existing: Optional[Mapping[str, TrackedService]] = None,
    context: Optional[ProjectContext] = None,
    names: Optional[Mapping[str, str]] = None,
    observed_at: Optional[datetime] = None,
) -> ReconcileResult:
    """
    Compute the updated snapshot and the transitions for one polling cycle.

    Args:
        tracked: Tracked service ids in polling order
        previous: Last observed status per service id (for diffing)
        fetched: Fetch outcome per service id; ids absent here were not attempted
        existing: Current snapshot entries by id (names and unchanged entries come from here)
        context: Project id/name stamped onto newly created entries
        names: Display-name overrides used when no existing entry is present
        observed_at: Detection time for updates and transitions

    Returns:
        ReconcileResult whose ``statuses`` keys are a subset of ``tracked``
    """
    existing = existing or {}
    context = context or ProjectContext()
    names = names or {}
    now = observed_at or get_current_utc()

    services: List[TrackedService] = []
    transitions: List[TransitionEvent] = []
    statuses: Dict[str, DeploymentStatus] = {}
    failures: Dict[str, str] = {}
    last_error: Optional[str] = None
    rate_limited = False

    for service_id in tracked:
        prior = existing.get(service_id)
        known_status = previous.get(service_id)
        result = fetched.get(service_id)

        if result is not None and result.error is not None:
            message = describe_error(result.error)
            failures[service_id] = message
            last_error = message
            rate_limited = rate_limited or result.rate_limited

        if result is None or not result.ok or result.deployment is None:
            if prior is not None:
                services.append(prior)
            if known_status is not None:
                statuses[service_id] = known_status
            continue

        deployment = result.deployment
        base = prior or TrackedService(
            id=service_id,
            project_id=context.project_id,
            project_name=context.project_name,
            name=names.get(service_id, service_id),
        )
        updated = base.with_deployment(deployment, now)
        services.append(updated)
        statuses[service_id] = deployment.status

        if known_status is not None and known_status != deployment.status:
            transition = TransitionEvent(
                service_id=service_id,
                service_name=updated.name,
                project_id=updated.project_id,
                deployment_id=deployment.id,
                old_status=known_status,
                new_status=deployment.status,
                timestamp=now,
                deployment_created_at=deployment.created_at,
            )
            transitions.append(transition)
            logger.info(
                "%s changed %s -> %s (deployment %s)",
                updated.name,
                known_status.value,
                deployment.status.value,
                deployment.id,
            )

    return ReconcileResult(
        services=services,
        transitions=transitions,
        statuses=statuses,
        last_error=last_error,
        rate_limited=rate_limited,
        failures=failures,
    )


__all__ = ["FetchResult", "ProjectContext", "ReconcileResult", "reconcile"]
