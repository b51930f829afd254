"""
Top-level monitor composing configuration, credentials, history, groups,
notifications and the polling engine.

Everything is constructed explicitly; a process may run several monitors
(each test builds its own). Presentation layers read the published outputs
(``services``, ``last_error``, ``is_loading``, ``history``) or subscribe an
``EngineObserver``.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Mapping, Optional, Sequence, Tuple

from .backoff_controller import BackoffController
from .config_store.base import STORE_ERRORS, ConfigStore
from .credential_store import CredentialStore
from .group_aggregator import GroupTransitionTracker, aggregate_status, group_status, ungrouped_services
from .groups import ServiceGroupRegistry
from .history_ledger import HistoryLedger
from .models.group import ServiceGroup
from .models.service import Project, ServiceSummary, TrackedService
from .models.status import DeploymentStatus
from .models.transition import TransitionEvent
from .monitor_config import ConfigurationRepository, MonitorConfiguration
from .notifications.dispatcher import NotificationDispatcher
from .notifications.models import NotificationPreferences
from .notifications.notifiers import LoggingNotifier, Notifier
from .notifications.throttle import NotificationThrottle
from .polling_engine import PollingEngine
from .polling_engine_helpers import EngineObserver, EnvironmentResolver, ObserverRegistry
from .railway_api.client import RailwayClient
from .reconciler import ProjectContext, ReconcileResult
from .settings import MonitorSettings

logger = logging.getLogger(__name__)

SourceFactory = Callable[[str], RailwayClient]


class _MonitorRelay(EngineObserver):
    """Forwards engine output to the monitor's subscribers and drives group alerts."""

    def __init__(self, monitor: "StatusMonitor") -> None:
        self._monitor = monitor

    def on_snapshot(self, services: Sequence[TrackedService]) -> None:
        self._monitor._handle_snapshot(services)

    def on_transition(self, event: TransitionEvent) -> None:
        self._monitor.observers.publish_transition(event)

    def on_error(self, message: Optional[str]) -> None:
        self._monitor.observers.publish_error(message)

    def on_loading(self, loading: bool) -> None:
        self._monitor.observers.publish_loading(loading)


class StatusMonitor:
    """Deployment status monitor for one Railway project."""

    def __init__(
        self,
        store: ConfigStore,
        credentials: CredentialStore,
        notifier: Optional[Notifier] = None,
        *,
        settings: Optional[MonitorSettings] = None,
        source_factory: Optional[SourceFactory] = None,
        throttle: Optional[NotificationThrottle] = None,
    ) -> None:
        self.settings = settings or MonitorSettings()
        self.credentials = credentials
        self.repository = ConfigurationRepository(store)
        self.ledger = HistoryLedger(store, self.settings.history_capacity)
        self.groups = ServiceGroupRegistry(store)
        self.dispatcher = NotificationDispatcher(notifier or LoggingNotifier(), throttle=throttle)
        self.config = MonitorConfiguration()
        self.observers = ObserverRegistry()
        self._source_factory = source_factory or self._default_source_factory
        self._source: Optional[RailwayClient] = None
        self._engine: Optional[PollingEngine] = None
        self._relay = _MonitorRelay(self)
        self._group_tracker = GroupTransitionTracker()

    # Published outputs

    @property
    def engine(self) -> Optional[PollingEngine]:
        return self._engine

    @property
    def services(self) -> Tuple[TrackedService, ...]:
        return self._engine.services if self._engine is not None else ()

    @property
    def last_error(self) -> Optional[str]:
        return self._engine.last_error if self._engine is not None else None

    @property
    def is_loading(self) -> bool:
        return self._engine.is_loading if self._engine is not None else False

    @property
    def history(self) -> Tuple[TransitionEvent, ...]:
        return self.ledger.all()

    @property
    def aggregate_status(self) -> DeploymentStatus:
        return aggregate_status(self.services)

    @property
    def is_configured(self) -> bool:
        return self.config.is_configured and self._engine is not None

    @property
    def preferences(self) -> NotificationPreferences:
        return self.config.preferences

    def group_status(self, group: ServiceGroup) -> DeploymentStatus:
        return group_status(group, self.services)

    def ungrouped_services(self) -> List[TrackedService]:
        return ungrouped_services(self.groups.groups, self.services)

    def subscribe(self, observer: EngineObserver) -> Callable[[], None]:
        return self.observers.subscribe(observer)

    # Lifecycle

    async def load(self) -> MonitorConfiguration:
        """Restore persisted state; builds the engine when a project is configured."""
        try:
            self.config = await self.repository.load()
        except STORE_ERRORS as exc:  # policy_guard: allow-silent-handler
            logger.warning("Configuration unreadable, starting unconfigured: %s", exc)
            self.config = MonitorConfiguration()
        self.dispatcher.preferences = self.config.preferences
        await self.ledger.load()
        await self.groups.load()

        token = await self.credentials.get()
        if token and self.config.is_configured:
            await self._replace_engine(token)
        elif self.config.is_configured:
            logger.warning("Project configured but no API token stored; polling disabled")
        return self.config

    async def configure(
        self,
        token: str,
        project_id: str,
        project_name: Optional[str],
        environment_id: Optional[str],
        service_ids: Sequence[str],
        service_names: Optional[Mapping[str, str]] = None,
    ) -> ReconcileResult:
        """Store the token and project selection, poll once, then keep polling."""
        if not service_ids:
            raise ValueError("At least one service id is required")
        await self.credentials.set(token)
        self.config = MonitorConfiguration(
            project_id=project_id,
            project_name=project_name,
            environment_id=environment_id,
            service_ids=tuple(dict.fromkeys(service_ids)),
            service_names=dict(service_names or {}),
            preferences=self.config.preferences,
        )
        await self.repository.save(self.config)
        engine = await self._replace_engine(token)
        result = await engine.refresh(show_loading=True)
        engine.start()
        return result

    async def refresh(self) -> Optional[ReconcileResult]:
        """Manual refresh; shows the loading flag."""
        if self._engine is None:
            logger.debug("Refresh requested before configuration")
            return None
        return await self._engine.refresh(show_loading=True)

    def start(self) -> None:
        if self._engine is None:
            logger.warning("Cannot start polling: monitor is not configured")
            return
        self._engine.start()

    async def stop(self) -> None:
        if self._engine is not None:
            await self._engine.stop()

    async def close(self) -> None:
        """Stop polling, release the HTTP session and wait for pending notifications."""
        await self.stop()
        await self._close_source()
        await self.dispatcher.drain()

    async def reset(self) -> None:
        """Forget everything: token, configuration, history, groups and engine state."""
        if self._engine is not None:
            await self._engine.reset()
        await self._close_source()
        self._engine = None
        await self.credentials.delete()
        await self.ledger.clear()
        await self.groups.clear()
        await self.repository.reset()
        self.config = MonitorConfiguration()
        self.dispatcher.preferences = self.config.preferences
        self._group_tracker.reset()
        self.observers.publish_snapshot(())
        self.observers.publish_error(None)
        logger.info("Monitor reset")

    # Configuration changes

    async def set_service_names(self, names: Mapping[str, str]) -> None:
        self.config = self.config.with_service_names(names)
        await self.repository.save(self.config)
        if self._engine is not None:
            self._engine.set_names(names)

    async def set_notification_preferences(self, preferences: NotificationPreferences) -> None:
        self.config = self.config.with_preferences(preferences)
        self.dispatcher.preferences = preferences
        await self.repository.save(self.config)

    async def discover_services(self, token: str) -> List[Tuple[Project, Tuple[ServiceSummary, ...]]]:
        """Projects visible to ``token`` with their services, for picking what to monitor."""
        client = self._source_factory(token)
        try:
            projects = await client.fetch_projects()
        finally:
            await client.close()
        return [(project, project.services) for project in projects]

    async def restart_service(self, service: TrackedService) -> bool:
        """Restart the service's current deployment; False when there is nothing to restart."""
        if self._source is None or not service.deployment_id:
            logger.warning("No deployment to restart for %s", service.name)
            return False
        await self._source.restart_deployment(service.deployment_id)
        await self.refresh()
        return True

    async def redeploy_service(self, service: TrackedService) -> bool:
        """Rebuild and redeploy the service's current deployment."""
        if self._source is None or not service.deployment_id:
            logger.warning("No deployment to redeploy for %s", service.name)
            return False
        await self._source.redeploy_deployment(service.deployment_id)
        await self.refresh()
        return True

    # Groups

    async def create_group(self, name: str, service_ids: Iterable[str] = ()) -> ServiceGroup:
        group = await self.groups.create(name, service_ids)
        self._rebaseline_groups()
        return group

    async def update_group(
        self, group_id: str, *, name: Optional[str] = None, service_ids: Optional[Iterable[str]] = None
    ) -> ServiceGroup:
        group = await self.groups.update(group_id, name=name, service_ids=service_ids)
        self._rebaseline_groups()
        return group

    async def delete_group(self, group_id: str) -> None:
        await self.groups.delete(group_id)
        self._rebaseline_groups()

    # Internals

    def _default_source_factory(self, token: str) -> RailwayClient:
        return RailwayClient(
            token,
            api_url=self.settings.api_url,
            timeout_seconds=self.settings.fetch_timeout_seconds,
        )

    async def _replace_engine(self, token: str) -> PollingEngine:
        if self._engine is not None:
            await self._engine.stop()
        await self._close_source()

        config = self.config
        source = self._source_factory(token)
        context = ProjectContext(project_id=config.project_id or "", project_name=config.display_project_name)
        seeded = [
            TrackedService(
                id=service_id,
                project_id=context.project_id,
                project_name=context.project_name,
                name=config.service_names.get(service_id, service_id),
            )
            for service_id in config.service_ids
        ]
        resolver = EnvironmentResolver(
            source,
            config.project_id,
            on_resolved=self._persist_environment,
            timeout_seconds=self.settings.fetch_timeout_seconds,
        )
        engine = PollingEngine(
            source,
            self.ledger,
            self.dispatcher,
            tracked_ids=config.service_ids,
            context=context,
            names=config.service_names,
            environment_id=config.environment_id,
            backoff=BackoffController(self.settings.backoff_config()),
            fetch_timeout_seconds=self.settings.fetch_timeout_seconds,
            resolver=resolver,
            initial_services=seeded,
        )
        engine.subscribe(self._relay)
        self._source = source
        self._engine = engine
        self._group_tracker.reset()
        self._handle_snapshot(engine.services)
        return engine

    async def _persist_environment(self, environment_id: str) -> None:
        self.config = self.config.with_environment(environment_id)
        await self.repository.save_environment(environment_id)

    async def _close_source(self) -> None:
        if self._source is not None:
            await self._source.close()
            self._source = None

    def _rebaseline_groups(self) -> None:
        self._group_tracker.reset()
        self._group_tracker.observe(self.groups.groups, self.services)

    def _handle_snapshot(self, services: Sequence[TrackedService]) -> None:
        for change in self._group_tracker.observe(self.groups.groups, services):
            self.dispatcher.notify_group_change(change.group, change.members, change.old_status, change.new_status)
        self.observers.publish_snapshot(services)


__all__ = ["SourceFactory", "StatusMonitor"]
