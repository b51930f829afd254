"""Value types shared across the polling engine and its collaborators."""

from .group import ServiceGroup
from .service import (
    Deployment,
    Environment,
    Project,
    ServiceSummary,
    TrackedService,
    snapshot_signature,
    snapshots_equal,
)
from .status import (
    DeploymentStatus,
    is_failed,
    is_healthy,
    is_in_progress,
    priority,
    sort_worst_first,
    worst_status,
)
from .transition import TransitionDecodeError, TransitionEvent

__all__ = [
    "Deployment",
    "DeploymentStatus",
    "Environment",
    "Project",
    "ServiceGroup",
    "ServiceSummary",
    "TrackedService",
    "TransitionDecodeError",
    "TransitionEvent",
    "is_failed",
    "is_healthy",
    "is_in_progress",
    "priority",
    "snapshot_signature",
    "snapshots_equal",
    "sort_worst_first",
    "worst_status",
]
