"""Decides whether a transition alerts the user and hands it to a notifier."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Optional, Sequence, Set

from ..async_helpers import schedule_background
from ..formatting import project_url
from ..models.group import ServiceGroup
from ..models.service import TrackedService
from ..models.status import DeploymentStatus
from ..models.transition import TransitionEvent
from .models import Notification, NotificationCategory, NotificationPreferences, SoundCue
from .notifiers import DELIVERY_ERRORS, Notifier
from .throttle import NotificationThrottle

logger = logging.getLogger(__name__)


def should_notify(status: DeploymentStatus, preferences: NotificationPreferences) -> bool:
    if status.is_healthy:
        return preferences.notify_on_success
    if status.is_building:
        return preferences.notify_on_building
    if status.is_deploying:
        return preferences.notify_on_deploying
    if status.is_failed:
        return preferences.notify_on_failure
    return False


def sound_for(status: DeploymentStatus, preferences: NotificationPreferences) -> Optional[SoundCue]:
    if status.is_failed and preferences.play_sound_on_failure:
        return SoundCue.FAILURE
    if status.is_healthy and preferences.play_sound_on_success:
        return SoundCue.SUCCESS
    return None


def status_title(status: DeploymentStatus, name: str) -> str:
    if status is DeploymentStatus.SUCCESS:
        return f"✅ {name} Deployed"
    if status is DeploymentStatus.BUILDING:
        return f"🔨 {name} Building"
    if status.is_deploying:
        return f"🚀 {name} Deploying"
    if status is DeploymentStatus.FAILED:
        return f"❌ {name} Failed"
    if status is DeploymentStatus.CRASHED:
        return f"💥 {name} Crashed"
    if status is DeploymentStatus.ERROR:
        return f"⚠️ {name} Error"
    return f"{name} Status Changed"


def status_body(status: DeploymentStatus) -> str:
    if status is DeploymentStatus.SUCCESS:
        return "Deployment completed successfully"
    if status is DeploymentStatus.BUILDING:
        return "Build started"
    if status is DeploymentStatus.DEPLOYING:
        return "Deployment in progress"
    if status is DeploymentStatus.FAILED:
        return "Deployment failed - check Railway dashboard"
    if status is DeploymentStatus.CRASHED:
        return "Service crashed - check Railway dashboard"
    if status is DeploymentStatus.ERROR:
        return "Service has errors - check Railway dashboard"
    return f"Status: {status.display_name}"


def group_status_body(status: DeploymentStatus, service_count: int) -> str:
    noun = "service" if service_count == 1 else "services"
    if status is DeploymentStatus.SUCCESS:
        return f"{service_count} {noun} deployed successfully"
    if status is DeploymentStatus.BUILDING:
        return f"{service_count} {noun} building"
    if status is DeploymentStatus.DEPLOYING:
        return f"{service_count} {noun} deploying"
    if status is DeploymentStatus.FAILED:
        return f"{service_count} {noun} failed"
    if status is DeploymentStatus.CRASHED:
        return f"{service_count} {noun} crashed"
    return f"Status: {status.display_name}"


class NotificationDispatcher:
    """
    Fire-and-forget notification front end for the polling engine.

    ``notify`` never awaits delivery and never raises for delivery problems,
    so a slow or broken channel cannot stall or fail a polling cycle.
    """

    def __init__(
        self,
        notifier: Notifier,
        preferences: Optional[NotificationPreferences] = None,
        *,
        throttle: Optional[NotificationThrottle] = None,
    ) -> None:
        self.notifier = notifier
        self.preferences = preferences or NotificationPreferences()
        self.throttle = throttle
        self._pending: Set["asyncio.Task[Any]"] = set()

    def notify(self, transition: TransitionEvent, preferences: Optional[NotificationPreferences] = None) -> Optional[Notification]:
        """Alert on a service transition. Returns the notification if one was scheduled."""
        prefs = preferences or self.preferences
        if not should_notify(transition.new_status, prefs):
            return None
        notification = Notification(
            identifier=f"{transition.service_id}-{time.time()}",
            source_id=transition.service_id,
            title=status_title(transition.new_status, transition.service_name),
            body=status_body(transition.new_status),
            category=NotificationCategory.STATUS_CHANGE,
            url=transition.railway_url,
            sound=sound_for(transition.new_status, prefs),
            project_id=transition.project_id,
        )
        return self._dispatch(notification)

    def notify_group_change(
        self,
        group: ServiceGroup,
        members: Sequence[TrackedService],
        old_status: DeploymentStatus,
        new_status: DeploymentStatus,
        preferences: Optional[NotificationPreferences] = None,
    ) -> Optional[Notification]:
        prefs = preferences or self.preferences
        if not should_notify(new_status, prefs):
            return None
        project_id = members[0].project_id if members else ""
        notification = Notification(
            identifier=f"{group.id}-{time.time()}",
            source_id=group.id,
            title=status_title(new_status, group.name),
            body=group_status_body(new_status, len(members)),
            category=NotificationCategory.APP_STATUS_CHANGE,
            url=project_url(project_id) if project_id else "",
            sound=sound_for(new_status, prefs),
            project_id=project_id,
        )
        logger.debug("Group %s changed %s -> %s", group.name, old_status.value, new_status.value)
        return self._dispatch(notification)

    async def drain(self) -> None:
        """Wait for in-flight deliveries (used on shutdown and in tests)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _dispatch(self, notification: Notification) -> Optional[Notification]:
        if self.throttle is not None and not self.throttle.record(notification):
            logger.info("Throttled notification for %s: %s", notification.source_id, notification.title)
            return None
        schedule_background(
            lambda: self._deliver(notification),
            pending=self._pending,
            description=f"notification {notification.identifier}",
        )
        return notification

    async def _deliver(self, notification: Notification) -> None:
        try:
            await self.notifier.deliver(notification)
        except DELIVERY_ERRORS as exc:  # Fire-and-forget  # policy_guard: allow-silent-handler
            logger.warning("Notification delivery failed for %s: %s", notification.source_id, exc)


__all__ = [
    "NotificationDispatcher",
    "group_status_body",
    "should_notify",
    "sound_for",
    "status_body",
    "status_title",
]
