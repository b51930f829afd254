from __future__ import annotations

"""User-defined grouping of tracked services (an "app")."""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Tuple

from ..time_utils import format_timestamp, get_current_utc, parse_timestamp


@dataclass(frozen=True)
class ServiceGroup:
    """Named, ordered set of member service ids. Members need not be tracked."""

    name: str
    service_ids: Tuple[str, ...] = ()
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=get_current_utc)

    def contains(self, service_id: str) -> bool:
        return service_id in self.service_ids

    def updated(self, *, name: Optional[str] = None, service_ids: Optional[Iterable[str]] = None) -> "ServiceGroup":
        return replace(
            self,
            name=self.name if name is None else name,
            service_ids=self.service_ids if service_ids is None else tuple(service_ids),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "serviceIds": list(self.service_ids),
            "createdAt": format_timestamp(self.created_at),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ServiceGroup":
        created_at = parse_timestamp(payload.get("createdAt"), allow_none=True)
        raw_ids = payload.get("serviceIds") or []
        return cls(
            id=str(payload["id"]),
            name=str(payload["name"]),
            service_ids=tuple(str(service_id) for service_id in raw_ids),
            created_at=created_at or get_current_utc(),
        )


__all__ = ["ServiceGroup"]
