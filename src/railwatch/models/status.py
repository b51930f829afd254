"""Deployment status values, their worst-first priority and classification."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterable, List, Optional

logger = logging.getLogger(__name__)


class DeploymentStatus(Enum):
    """Closed set of deployment states reported by the platform API."""

    SUCCESS = "SUCCESS"
    BUILDING = "BUILDING"
    DEPLOYING = "DEPLOYING"
    FAILED = "FAILED"
    CRASHED = "CRASHED"
    ERROR = "ERROR"
    REMOVED = "REMOVED"
    REMOVING = "REMOVING"
    INITIALIZING = "INITIALIZING"
    WAITING = "WAITING"
    SLEEPING = "SLEEPING"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_wire(cls, raw: Any) -> "DeploymentStatus":
        """Decode a wire value, falling back to UNKNOWN for anything unrecognised."""
        if isinstance(raw, DeploymentStatus):
            return raw
        if not isinstance(raw, str):
            return cls.UNKNOWN
        try:
            return cls(raw.strip().upper())
        except ValueError:  # policy_guard: allow-silent-handler
            logger.debug("Unrecognised deployment status %r; treating as UNKNOWN", raw)
            return cls.UNKNOWN

    @property
    def priority(self) -> int:
        """Worst-wins ordering key (lower is worse)."""
        return _PRIORITY[self]

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def is_healthy(self) -> bool:
        return self is DeploymentStatus.SUCCESS

    @property
    def is_failed(self) -> bool:
        return self in _FAILED

    @property
    def is_in_progress(self) -> bool:
        return self in _IN_PROGRESS

    @property
    def is_building(self) -> bool:
        return self is DeploymentStatus.BUILDING

    @property
    def is_deploying(self) -> bool:
        return self in _DEPLOYING

    @property
    def is_terminal(self) -> bool:
        """Success or a failure state; durations are only meaningful for these."""
        return self.is_healthy or self.is_failed


_FAILED = frozenset({DeploymentStatus.FAILED, DeploymentStatus.CRASHED, DeploymentStatus.ERROR})
_DEPLOYING = frozenset({DeploymentStatus.DEPLOYING, DeploymentStatus.INITIALIZING, DeploymentStatus.WAITING})
_IN_PROGRESS = _DEPLOYING | {DeploymentStatus.BUILDING}

_PRIORITY = {
    DeploymentStatus.FAILED: 0,
    DeploymentStatus.CRASHED: 0,
    DeploymentStatus.ERROR: 0,
    DeploymentStatus.BUILDING: 1,
    DeploymentStatus.DEPLOYING: 2,
    DeploymentStatus.INITIALIZING: 2,
    DeploymentStatus.WAITING: 2,
    DeploymentStatus.SUCCESS: 3,
    DeploymentStatus.SLEEPING: 4,
    DeploymentStatus.REMOVED: 5,
    DeploymentStatus.REMOVING: 5,
    DeploymentStatus.UNKNOWN: 5,
}

_DISPLAY_NAMES = {
    DeploymentStatus.SUCCESS: "Online",
    DeploymentStatus.BUILDING: "Building",
    DeploymentStatus.DEPLOYING: "Deploying",
    DeploymentStatus.FAILED: "Failed",
    DeploymentStatus.CRASHED: "Crashed",
    DeploymentStatus.ERROR: "Error",
    DeploymentStatus.REMOVED: "Removed",
    DeploymentStatus.REMOVING: "Removing",
    DeploymentStatus.INITIALIZING: "Initializing",
    DeploymentStatus.WAITING: "Waiting",
    DeploymentStatus.SLEEPING: "Sleeping",
    DeploymentStatus.UNKNOWN: "Unknown",
}


def priority(status: DeploymentStatus) -> int:
    return status.priority


def is_healthy(status: DeploymentStatus) -> bool:
    return status.is_healthy


def is_failed(status: DeploymentStatus) -> bool:
    return status.is_failed


def is_in_progress(status: DeploymentStatus) -> bool:
    return status.is_in_progress


def sort_worst_first(statuses: Iterable[DeploymentStatus]) -> List[DeploymentStatus]:
    """Return statuses ordered by ascending priority (stable for ties)."""
    return sorted(statuses, key=priority)


def worst_status(statuses: Iterable[DeploymentStatus]) -> Optional[DeploymentStatus]:
    """Return the lowest-priority status, or None for an empty input."""
    ordered = sort_worst_first(statuses)
    if not ordered:
        return None
    return ordered[0]


__all__ = [
    "DeploymentStatus",
    "is_failed",
    "is_healthy",
    "is_in_progress",
    "priority",
    "sort_worst_first",
    "worst_status",
]
