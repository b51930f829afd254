from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Union

from railwatch.models import Deployment, DeploymentStatus, Environment, Project, ServiceSummary

BASE_TIME = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

Outcome = Union[Deployment, BaseException, None, "asyncio.Event"]


def deployment(
    deployment_id: str,
    status: DeploymentStatus,
    created_at: Optional[datetime] = None,
) -> Deployment:
    return Deployment(id=deployment_id, status=status, created_at=created_at or BASE_TIME - timedelta(minutes=1))


class FakeStatusSource:
    """
    Scripted status source.

    ``outcomes[service_id]`` is either a single outcome or a list consumed one
    per call (the last one repeats). An outcome is a Deployment, None, an
    exception instance to raise, or an asyncio.Event to wait on forever.
    """

    def __init__(self, outcomes: Optional[Dict[str, object]] = None, project: Optional[Project] = None) -> None:
        self.outcomes: Dict[str, object] = dict(outcomes or {})
        self.project = project
        self.calls: List[tuple] = []
        self.project_calls: List[str] = []
        self.project_error: Optional[BaseException] = None
        self.restarted: List[str] = []
        self.redeployed: List[str] = []
        self.projects: List[Project] = [project] if project else []
        self.closed = False

    def set(self, service_id: str, outcome: object) -> None:
        self.outcomes[service_id] = outcome

    async def fetch_status(self, service_id: str, environment_id: Optional[str] = None) -> Optional[Deployment]:
        self.calls.append((service_id, environment_id))
        outcome = self.outcomes.get(service_id)
        if isinstance(outcome, list):
            outcome = outcome.pop(0) if len(outcome) > 1 else outcome[0]
        if isinstance(outcome, asyncio.Event):
            await outcome.wait()
            return None
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def fetch_project(self, project_id: str) -> Optional[Project]:
        self.project_calls.append(project_id)
        if self.project_error is not None:
            raise self.project_error
        return self.project

    async def fetch_projects(self) -> List[Project]:
        return list(self.projects)

    async def restart_deployment(self, deployment_id: str) -> None:
        self.restarted.append(deployment_id)

    async def redeploy_deployment(self, deployment_id: str) -> None:
        self.redeployed.append(deployment_id)

    async def close(self) -> None:
        self.closed = True

    @property
    def fetched_ids(self) -> List[str]:
        return [call[0] for call in self.calls]


def sample_project(project_id: str = "proj-1") -> Project:
    return Project(
        id=project_id,
        name="Shop",
        services=(ServiceSummary("svc-a", "api"), ServiceSummary("svc-b", "worker")),
        environments=(Environment("env-stg", "staging"), Environment("env-prod", "production")),
    )


class RecordingObserver:
    """EngineObserver that keeps everything it is sent."""

    def __init__(self) -> None:
        self.snapshots: List[tuple] = []
        self.transitions: List[object] = []
        self.errors: List[Optional[str]] = []
        self.loading: List[bool] = []

    def on_snapshot(self, services) -> None:
        self.snapshots.append(tuple(services))

    def on_transition(self, event) -> None:
        self.transitions.append(event)

    def on_error(self, message: Optional[str]) -> None:
        self.errors.append(message)

    def on_loading(self, loading: bool) -> None:
        self.loading.append(loading)


async def wait_until(predicate, timeout: float = 1.0, step: float = 0.005) -> bool:
    """Poll ``predicate`` on the event loop until it holds or ``timeout`` passes."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        if predicate():
            return True
        await asyncio.sleep(step)
    return bool(predicate())
