from __future__ import annotations

"""Notification preferences and the payload handed to notifiers."""

import time
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class NotificationCategory(Enum):
    STATUS_CHANGE = "STATUS_CHANGE"
    APP_STATUS_CHANGE = "APP_STATUS_CHANGE"


class SoundCue(Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class NotificationPreferences:
    """Which transitions alert the user. All alerts on, sounds off by default."""

    notify_on_success: bool = True
    notify_on_building: bool = True
    notify_on_deploying: bool = True
    notify_on_failure: bool = True
    play_sound_on_success: bool = False
    play_sound_on_failure: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {
            "notifyOnSuccess": self.notify_on_success,
            "notifyOnBuilding": self.notify_on_building,
            "notifyOnDeploying": self.notify_on_deploying,
            "notifyOnFailure": self.notify_on_failure,
            "playSoundOnSuccess": self.play_sound_on_success,
            "playSoundOnFailure": self.play_sound_on_failure,
        }

    @classmethod
    def from_dict(cls, payload: Optional[Dict[str, Any]]) -> "NotificationPreferences":
        """Missing or non-boolean entries keep their defaults."""
        defaults = cls()
        if not isinstance(payload, dict):
            return defaults

        def _flag(key: str, default: bool) -> bool:
            value = payload.get(key)
            return value if isinstance(value, bool) else default

        return cls(
            notify_on_success=_flag("notifyOnSuccess", defaults.notify_on_success),
            notify_on_building=_flag("notifyOnBuilding", defaults.notify_on_building),
            notify_on_deploying=_flag("notifyOnDeploying", defaults.notify_on_deploying),
            notify_on_failure=_flag("notifyOnFailure", defaults.notify_on_failure),
            play_sound_on_success=_flag("playSoundOnSuccess", defaults.play_sound_on_success),
            play_sound_on_failure=_flag("playSoundOnFailure", defaults.play_sound_on_failure),
        )


@dataclass(frozen=True)
class Notification:
    """A user-facing alert ready for delivery."""

    identifier: str
    source_id: str
    title: str
    body: str
    category: NotificationCategory
    url: str = ""
    sound: Optional[SoundCue] = None
    project_id: str = ""
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["category"] = self.category.value
        payload["sound"] = self.sound.value if self.sound is not None else None
        return payload


__all__ = [
    "Notification",
    "NotificationCategory",
    "NotificationPreferences",
    "SoundCue",
]
