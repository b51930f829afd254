"""Worst-status aggregation over user-defined groups and the whole tracked set."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

from .models.group import ServiceGroup
from .models.service import TrackedService
from .models.status import DeploymentStatus, worst_status

logger = logging.getLogger(__name__)


def aggregate_status(services: Iterable[TrackedService]) -> DeploymentStatus:
    """Worst status among ``services``; Unknown for an empty set."""
    worst = worst_status(service.status for service in services)
    return worst if worst is not None else DeploymentStatus.UNKNOWN


def group_members(group: ServiceGroup, services: Iterable[TrackedService]) -> List[TrackedService]:
    """Tracked services belonging to ``group``, in snapshot order."""
    return [service for service in services if group.contains(service.id)]


def group_status(group: ServiceGroup, services: Iterable[TrackedService]) -> DeploymentStatus:
    return aggregate_status(group_members(group, services))


def ungrouped_services(groups: Iterable[ServiceGroup], services: Iterable[TrackedService]) -> List[TrackedService]:
    grouped = {service_id for group in groups for service_id in group.service_ids}
    return [service for service in services if service.id not in grouped]


@dataclass(frozen=True)
class GroupTransition:
    group: ServiceGroup
    members: Tuple[TrackedService, ...]
    old_status: DeploymentStatus
    new_status: DeploymentStatus


class GroupTransitionTracker:
    """
    Detects changes of each group's aggregate status between snapshots.

    The first observation of a group only records a baseline. A group whose
    aggregate is Unknown (no tracked members, or none observed yet) is not
    baselined, so it starts fresh once real statuses arrive instead of
    reporting a change from Unknown.
    """

    def __init__(self) -> None:
        self._last: Dict[str, DeploymentStatus] = {}

    def observe(
        self, groups: Sequence[ServiceGroup], services: Sequence[TrackedService]
    ) -> List[GroupTransition]:
        transitions: List[GroupTransition] = []
        seen = set()
        for group in groups:
            members = group_members(group, services)
            status = aggregate_status(members)
            if status is DeploymentStatus.UNKNOWN:
                self._last.pop(group.id, None)
                continue
            seen.add(group.id)
            previous = self._last.get(group.id)
            self._last[group.id] = status
            if previous is not None and previous != status:
                logger.info("Group %s changed %s -> %s", group.name, previous.value, status.value)
                transitions.append(GroupTransition(group, tuple(members), previous, status))
        for stale in [group_id for group_id in self._last if group_id not in seen]:
            del self._last[stale]
        return transitions

    def reset(self) -> None:
        self._last.clear()


__all__ = [
    "GroupTransition",
    "GroupTransitionTracker",
    "aggregate_status",
    "group_members",
    "group_status",
    "ungrouped_services",
]
