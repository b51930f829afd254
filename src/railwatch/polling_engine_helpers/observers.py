"""Subscription interface through which the engine publishes its outputs."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from ..models.service import TrackedService
from ..models.transition import TransitionEvent

logger = logging.getLogger(__name__)


class EngineObserver:
    """Receives engine output. Override only the hooks you need."""

    def on_snapshot(self, services: Sequence[TrackedService]) -> None:
        """Called with the new read-only snapshot whenever it changed."""

    def on_transition(self, event: TransitionEvent) -> None:
        """Called once per recorded transition, after it is in the ledger."""

    def on_error(self, message: Optional[str]) -> None:
        """Called when the last-error value changes (None clears it)."""

    def on_loading(self, loading: bool) -> None:
        """Called when a manual refresh starts and finishes."""


class ObserverRegistry:
    """Fan-out to subscribed observers; a failing observer never breaks a cycle."""

    def __init__(self) -> None:
        self._observers: List[EngineObserver] = []

    def __len__(self) -> int:
        return len(self._observers)

    def subscribe(self, observer: EngineObserver) -> Callable[[], None]:
        """Register ``observer`` and return a callable that unsubscribes it."""
        self._observers.append(observer)

        def _unsubscribe() -> None:
            self.unsubscribe(observer)

        return _unsubscribe

    def unsubscribe(self, observer: EngineObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def publish_snapshot(self, services: Sequence[TrackedService]) -> None:
        frozen = tuple(services)
        for observer in list(self._observers):
            self._deliver("on_snapshot", observer.on_snapshot, frozen)

    def publish_transition(self, event: TransitionEvent) -> None:
        for observer in list(self._observers):
            self._deliver("on_transition", observer.on_transition, event)

    def publish_error(self, message: Optional[str]) -> None:
        for observer in list(self._observers):
            self._deliver("on_error", observer.on_error, message)

    def publish_loading(self, loading: bool) -> None:
        for observer in list(self._observers):
            self._deliver("on_loading", observer.on_loading, loading)

    @staticmethod
    def _deliver(hook: str, callback: Callable[..., None], payload: object) -> None:
        try:
            callback(payload)
        except Exception:  # Observer bugs must not stop polling  # policy_guard: allow-silent-handler
            logger.exception("Observer hook %s failed", hook)


__all__ = ["EngineObserver", "ObserverRegistry"]
