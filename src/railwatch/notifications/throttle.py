from __future__ import annotations

"""Notification throttling helpers."""


from collections import deque
from typing import Deque, Dict

from .models import Notification


class NotificationThrottle:
    """Sliding-window throttle that caps notification volume per source."""

    def __init__(self, window_seconds: float, max_notifications: int) -> None:
        self._window_seconds = window_seconds
        self._max_notifications = max_notifications
        self._recent: Dict[str, Deque[float]] = {}

    def record(self, notification: Notification) -> bool:
        """Record a notification and return True when it should be delivered."""

        now = notification.timestamp
        queue = self._recent.setdefault(notification.source_id, deque())
        self._prune(queue, now)
        if len(queue) >= self._max_notifications:
            return False
        queue.append(now)
        return True

    def _prune(self, queue: Deque[float], now: float) -> None:
        """Remove notifications that fall outside the sliding window."""

        window_start = now - self._window_seconds
        while queue and queue[0] < window_start:
            queue.popleft()


__all__ = ["NotificationThrottle"]
