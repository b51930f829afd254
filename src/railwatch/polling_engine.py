"""
Polling engine: periodically fetches deployment status and publishes changes.

One logical stream owns all mutable state. Timer-driven cycles and manual
refreshes share a lock so they never interleave, and both run the same
fetch -> reconcile -> record -> notify path. Fetches are sequential in
tracked order; the first rate-limit response ends the cycle early and
lengthens the poll interval.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .backoff_controller import BackoffConfig, BackoffController
from .config_store.base import STORE_ERRORS
from .errors import NetworkError, RateLimitedError, StatusSourceError, describe_error
from .history_ledger import HistoryLedger
from .models.service import TrackedService, snapshots_equal
from .models.transition import TransitionEvent
from .notifications.dispatcher import NotificationDispatcher
from .polling_engine_helpers import (
    EngineObserver,
    EnginePhase,
    EnvironmentResolver,
    ObserverRegistry,
    PollingState,
    PollTimer,
)
from .reconciler import FetchResult, ProjectContext, ReconcileResult, reconcile
from .status_source import StatusSource
from .time_utils import get_current_utc

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT_SECONDS = 20.0


class PollingEngine:
    """Drives status polling for a set of tracked services."""

    def __init__(
        self,
        source: StatusSource,
        ledger: HistoryLedger,
        dispatcher: Optional[NotificationDispatcher] = None,
        *,
        tracked_ids: Sequence[str] = (),
        context: Optional[ProjectContext] = None,
        names: Optional[Mapping[str, str]] = None,
        environment_id: Optional[str] = None,
        backoff: Optional[BackoffController] = None,
        fetch_timeout_seconds: Optional[float] = DEFAULT_FETCH_TIMEOUT_SECONDS,
        resolver: Optional[EnvironmentResolver] = None,
        initial_services: Optional[Sequence[TrackedService]] = None,
    ) -> None:
        self.source = source
        self.ledger = ledger
        self.dispatcher = dispatcher
        self.context = context or ProjectContext()
        self.backoff = backoff or BackoffController(BackoffConfig())
        self.fetch_timeout_seconds = fetch_timeout_seconds
        self.resolver = resolver
        self.environment_id = environment_id
        self._tracked_ids: List[str] = list(dict.fromkeys(tracked_ids))
        self._names: Dict[str, str] = dict(names or {})
        self._services: List[TrackedService] = [
            service for service in (initial_services or ()) if service.id in self._tracked_ids
        ]
        self.state = PollingState(current_interval=self.backoff.current_interval)
        self.observers = ObserverRegistry()
        self._is_loading = False
        self._cycle_lock = asyncio.Lock()
        self._generation = 0
        self._stop_requested = False
        self._timer = PollTimer(self._on_timer_tick, self.backoff.current_interval)

    # Read-only outputs

    @property
    def services(self) -> Tuple[TrackedService, ...]:
        return tuple(self._services)

    @property
    def last_error(self) -> Optional[str]:
        return self.state.last_error

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def history(self) -> Tuple[TransitionEvent, ...]:
        return self.ledger.all()

    @property
    def tracked_ids(self) -> Tuple[str, ...]:
        return tuple(self._tracked_ids)

    @property
    def current_interval(self) -> float:
        return self.state.current_interval

    @property
    def phase(self) -> EnginePhase:
        return self.state.phase

    @property
    def running(self) -> bool:
        return not self._stop_requested and self._timer.running

    def subscribe(self, observer: EngineObserver) -> Callable[[], None]:
        return self.observers.subscribe(observer)

    # Lifecycle

    def start(self) -> None:
        """Begin timer-driven polling at the current interval."""
        if self.running:
            logger.debug("Polling engine already running")
            return
        self._stop_requested = False
        self.state.phase = EnginePhase.IDLE
        self._timer = PollTimer(self._on_timer_tick, self.state.current_interval)
        self._timer.start()
        logger.info(
            "Polling %d service(s) every %.0fs", len(self._tracked_ids), self.state.current_interval
        )

    async def stop(self) -> None:
        """Cancel the timer; an in-flight timer cycle is cancelled and never reschedules."""
        self._stop_requested = True
        self.state.phase = EnginePhase.STOPPED
        await self._timer.stop()
        logger.info("Polling engine stopped")

    async def reset(self) -> None:
        """Stop polling and forget snapshot, backoff and remembered statuses.

        A cycle still fetching when this runs discards its results.
        """
        self._generation += 1
        await self.stop()
        self.backoff.reset()
        self.state.clear(self.backoff.current_interval)
        self.state.phase = EnginePhase.STOPPED
        had_services = bool(self._services)
        self._services = []
        if had_services:
            self.observers.publish_snapshot(self._services)
        self.observers.publish_error(None)

    async def refresh(self, show_loading: bool = True) -> ReconcileResult:
        """Run one cycle now. Only this path toggles the loading flag."""
        return await self._run_cycle(show_loading=show_loading)

    # Configuration changes

    def set_tracked(self, service_ids: Iterable[str], names: Optional[Mapping[str, str]] = None) -> None:
        """Replace the tracked id set, dropping state for ids no longer tracked."""
        self._tracked_ids = list(dict.fromkeys(service_ids))
        if names is not None:
            self._names = dict(names)
        self.state.prune(self._tracked_ids)
        kept = [service for service in self._services if service.id in self._tracked_ids]
        if not snapshots_equal(self._services, kept):
            self._services = kept
            self.observers.publish_snapshot(self._services)

    def set_names(self, names: Mapping[str, str]) -> None:
        """Apply display-name overrides to the current snapshot."""
        self._names = dict(names)
        renamed = [
            service.renamed(self._names[service.id]) if service.id in self._names else service
            for service in self._services
        ]
        if any(new.name != old.name for new, old in zip(renamed, self._services)):
            self._services = renamed
            self.observers.publish_snapshot(self._services)

    # Cycle

    async def _on_timer_tick(self) -> None:
        if self._stop_requested:
            return
        await self._run_cycle(show_loading=False)

    async def _run_cycle(self, *, show_loading: bool) -> ReconcileResult:
        async with self._cycle_lock:
            if show_loading:
                self._set_loading(True)
            try:
                return await self._poll_once()
            finally:
                if show_loading:
                    self._set_loading(False)

    async def _poll_once(self) -> ReconcileResult:
        self.state.phase = EnginePhase.POLLING
        self.state.in_flight = True
        logger.debug("Poll cycle started for %d service(s)", len(self._tracked_ids))
        generation = self._generation
        try:
            resolve_limit: Optional[RateLimitedError] = None
            if self.resolver is not None:
                try:
                    self.environment_id = await self.resolver.resolve(self.environment_id)
                except RateLimitedError as exc:
                    resolve_limit = exc

            fetched = {} if resolve_limit is not None else await self._fetch_all(list(self._tracked_ids))
            if generation != self._generation:
                logger.info("Discarding poll results fetched before reset")
                return ReconcileResult(services=list(self._services), transitions=[], statuses={})
            result = reconcile(
                self._tracked_ids,
                self.state.last_statuses,
                fetched,
                existing={service.id: service for service in self._services},
                context=self.context,
                names=self._names,
                observed_at=get_current_utc(),
            )
            if resolve_limit is not None:
                result.rate_limited = True
                result.last_error = describe_error(resolve_limit)
            self.state.last_statuses = dict(result.statuses)
            self._apply_backoff(result.rate_limited)
            self._publish(result)
            await self._record_transitions(result.transitions)
            logger.debug(
                "Poll cycle finished: %d transition(s), %d failure(s)",
                len(result.transitions),
                len(result.failures),
            )
            return result
        finally:
            self.state.in_flight = False
            self.state.phase = EnginePhase.STOPPED if self._stop_requested else EnginePhase.IDLE

    async def _fetch_all(self, service_ids: List[str]) -> Dict[str, FetchResult]:
        fetched: Dict[str, FetchResult] = {}
        for service_id in service_ids:
            outcome = await self._fetch_one(service_id)
            fetched[service_id] = outcome
            if outcome.error is not None:
                logger.warning("Fetch failed for service %s: %s", service_id, outcome.error)
            if outcome.rate_limited:
                skipped = len(service_ids) - len(fetched)
                if skipped:
                    logger.warning("Rate limited; skipping %d remaining service(s) this cycle", skipped)
                break
        return fetched

    async def _fetch_one(self, service_id: str) -> FetchResult:
        try:
            deployment = await asyncio.wait_for(
                self.source.fetch_status(service_id, self.environment_id),
                timeout=self.fetch_timeout_seconds,
            )
        except asyncio.TimeoutError:
            return FetchResult.failure(NetworkError(f"Request timed out after {self.fetch_timeout_seconds:g}s"))
        except StatusSourceError as exc:
            return FetchResult.failure(exc)
        return FetchResult.success(deployment)

    def _apply_backoff(self, rate_limited: bool) -> None:
        if rate_limited:
            changed = self.backoff.on_rate_limited()
            self.state.phase = EnginePhase.BACKOFF_SCHEDULED
        else:
            changed = self.backoff.on_success_or_non_rate_limit_failure()
        self.state.consecutive_rate_limits = self.backoff.consecutive_rate_limits
        self.state.current_interval = self.backoff.current_interval
        if changed and not self._stop_requested:
            self._timer.rearm(self.state.current_interval)

    def _publish(self, result: ReconcileResult) -> None:
        if result.changed_from(self._services):
            self._services = list(result.services)
            self.observers.publish_snapshot(self._services)
        else:
            # Same identity; keep refreshed timestamps without notifying.
            self._services = list(result.services)
        if result.last_error != self.state.last_error:
            self.state.last_error = result.last_error
            self.observers.publish_error(result.last_error)

    async def _record_transitions(self, transitions: List[TransitionEvent]) -> None:
        for event in transitions:
            try:
                await self.ledger.append(event)
            except STORE_ERRORS as exc:  # policy_guard: allow-silent-handler
                logger.warning("Transition for %s kept in memory only: %s", event.service_name, exc)
            self.observers.publish_transition(event)
            if self.dispatcher is not None:
                self.dispatcher.notify(event)

    def _set_loading(self, loading: bool) -> None:
        if self._is_loading != loading:
            self._is_loading = loading
            self.observers.publish_loading(loading)


__all__ = ["DEFAULT_FETCH_TIMEOUT_SECONDS", "PollingEngine"]
