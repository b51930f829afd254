from __future__ import annotations

"""Immutable record of one detected deployment status change."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ..formatting import deployment_url, format_duration, format_time_ago
from ..time_utils import format_timestamp, get_current_utc, parse_timestamp
from .status import DeploymentStatus


class TransitionDecodeError(ValueError):
    """Raised when a persisted transition entry lacks a required field."""

    def __init__(self, field_name: str) -> None:
        super().__init__(f"Transition entry missing required field {field_name!r}")
        self.field_name = field_name


def _new_event_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class TransitionEvent:
    """Old status -> new status for a single service, detected once."""

    service_id: str
    service_name: str
    old_status: DeploymentStatus
    new_status: DeploymentStatus
    project_id: str = ""
    deployment_id: Optional[str] = None
    deployment_created_at: Optional[datetime] = None
    timestamp: datetime = field(default_factory=get_current_utc)
    id: str = field(default_factory=_new_event_id)

    @property
    def railway_url(self) -> str:
        return deployment_url(self.project_id, self.service_id, self.deployment_id)

    def deployment_duration(self) -> Optional[str]:
        """Creation-to-detection time, only for transitions into a terminal state."""
        if self.deployment_created_at is None:
            return None
        if not self.new_status.is_terminal:
            return None
        return format_duration((self.timestamp - self.deployment_created_at).total_seconds())

    def time_ago(self, now: Optional[datetime] = None) -> str:
        current = now or get_current_utc()
        return format_time_ago((current - self.timestamp).total_seconds())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "serviceId": self.service_id,
            "serviceName": self.service_name,
            "projectId": self.project_id,
            "deploymentId": self.deployment_id,
            "oldStatus": self.old_status.value,
            "newStatus": self.new_status.value,
            "timestamp": format_timestamp(self.timestamp),
            "deploymentCreatedAt": (
                format_timestamp(self.deployment_created_at) if self.deployment_created_at is not None else None
            ),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "TransitionEvent":
        """Decode a persisted entry; fields added after the first release are optional."""
        for required in ("id", "serviceId", "serviceName", "oldStatus", "newStatus", "timestamp"):
            if payload.get(required) is None:
                raise TransitionDecodeError(required)
        timestamp = parse_timestamp(payload["timestamp"])
        assert timestamp is not None
        project_id = payload.get("projectId")
        deployment_id = payload.get("deploymentId")
        return cls(
            id=str(payload["id"]),
            service_id=str(payload["serviceId"]),
            service_name=str(payload["serviceName"]),
            project_id=str(project_id) if project_id is not None else "",
            deployment_id=str(deployment_id) if deployment_id is not None else None,
            old_status=DeploymentStatus.from_wire(payload["oldStatus"]),
            new_status=DeploymentStatus.from_wire(payload["newStatus"]),
            timestamp=timestamp,
            deployment_created_at=parse_timestamp(payload.get("deploymentCreatedAt"), allow_none=True),
        )


__all__ = ["TransitionDecodeError", "TransitionEvent"]
