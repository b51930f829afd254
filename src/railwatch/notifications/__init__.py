"""Notification decisions and delivery backends."""

from .dispatcher import (
    NotificationDispatcher,
    group_status_body,
    should_notify,
    sound_for,
    status_body,
    status_title,
)
from .models import Notification, NotificationCategory, NotificationPreferences, SoundCue
from .notifiers import (
    DELIVERY_ERRORS,
    LoggingNotifier,
    NotificationDeliveryError,
    Notifier,
    RecordingNotifier,
    WebhookNotifier,
)
from .throttle import NotificationThrottle

__all__ = [
    "DELIVERY_ERRORS",
    "LoggingNotifier",
    "Notification",
    "NotificationCategory",
    "NotificationDeliveryError",
    "NotificationDispatcher",
    "NotificationPreferences",
    "NotificationThrottle",
    "Notifier",
    "RecordingNotifier",
    "SoundCue",
    "WebhookNotifier",
    "group_status_body",
    "should_notify",
    "sound_for",
    "status_body",
    "status_title",
]
