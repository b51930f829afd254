"""Human-readable rendering of durations, ages, links and status lines."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models.service import TrackedService

RAILWAY_BASE_URL = "https://railway.com"

_SECONDS_PER_MINUTE = 60
_SECONDS_PER_HOUR = 3600
_SECONDS_PER_DAY = 86400
_JUST_NOW_THRESHOLD_SECONDS = 10

_STATUS_EMOJI = {
    "SUCCESS": "🟢",
    "BUILDING": "🟣",
    "DEPLOYING": "🔵",
    "INITIALIZING": "🔵",
    "WAITING": "🔵",
    "FAILED": "🔴",
    "CRASHED": "🔴",
    "ERROR": "🟠",
}
_DEFAULT_EMOJI = "⚪"


def format_duration(seconds: float) -> str:
    """Render a deployment duration as ``"1m 5s"`` or ``"45s"``."""
    total = max(0, int(seconds))
    minutes = total // _SECONDS_PER_MINUTE
    if minutes > 0:
        return f"{minutes}m {total % _SECONDS_PER_MINUTE}s"
    return f"{total}s"


def format_elapsed(seconds: float) -> str:
    """Coarse time-in-state: whole minutes once past a minute, else seconds."""
    total = max(0, int(seconds))
    minutes = total // _SECONDS_PER_MINUTE
    if minutes > 0:
        return f"{minutes}m"
    return f"{total}s"


def format_time_ago(seconds: float) -> str:
    total = max(0, int(seconds))
    if total >= _SECONDS_PER_DAY:
        return f"{total // _SECONDS_PER_DAY}d ago"
    if total >= _SECONDS_PER_HOUR:
        return f"{total // _SECONDS_PER_HOUR}h ago"
    if total >= _SECONDS_PER_MINUTE:
        return f"{total // _SECONDS_PER_MINUTE}m ago"
    if total > _JUST_NOW_THRESHOLD_SECONDS:
        return f"{total}s ago"
    return "just now"


def project_url(project_id: str) -> str:
    return f"{RAILWAY_BASE_URL}/project/{project_id}"


def service_url(project_id: str, service_id: str) -> str:
    return f"{project_url(project_id)}/service/{service_id}"


def deployment_url(project_id: str, service_id: str, deployment_id: Optional[str]) -> str:
    """Deep link to a deployment, or to the service when the deployment is unknown."""
    if not deployment_id:
        return service_url(project_id, service_id)
    return f"{service_url(project_id, service_id)}/deployment/{deployment_id}"


def status_line(service: "TrackedService", *, elapsed: Optional[str] = None) -> str:
    """Format a single service row for terminal output."""
    emoji = _STATUS_EMOJI.get(service.status.value, _DEFAULT_EMOJI)
    line = f"{emoji} {service.name} - {service.status.display_name}"
    if elapsed:
        line = f"{line} ({elapsed})"
    return line


__all__ = [
    "RAILWAY_BASE_URL",
    "deployment_url",
    "format_duration",
    "format_elapsed",
    "format_time_ago",
    "project_url",
    "service_url",
    "status_line",
]
