"""Process-wide polling state owned by the engine's single execution stream."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Optional

from ..models.status import DeploymentStatus


class EnginePhase(Enum):
    IDLE = "idle"
    POLLING = "polling"
    BACKOFF_SCHEDULED = "backoff_scheduled"
    STOPPED = "stopped"


@dataclass
class PollingState:
    current_interval: float
    consecutive_rate_limits: int = 0
    last_statuses: Dict[str, DeploymentStatus] = field(default_factory=dict)
    last_error: Optional[str] = None
    in_flight: bool = False
    phase: EnginePhase = EnginePhase.IDLE

    def prune(self, tracked_ids: Iterable[str]) -> None:
        """Drop remembered statuses for services no longer tracked."""
        keep = set(tracked_ids)
        for service_id in [key for key in self.last_statuses if key not in keep]:
            del self.last_statuses[service_id]

    def clear(self, base_interval: float) -> None:
        self.current_interval = base_interval
        self.consecutive_rate_limits = 0
        self.last_statuses.clear()
        self.last_error = None
        self.in_flight = False
        self.phase = EnginePhase.IDLE


__all__ = ["EnginePhase", "PollingState"]
