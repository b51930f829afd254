"""Tests for polling_engine_helpers.observers module."""

from railwatch.polling_engine_helpers.observers import EngineObserver, ObserverRegistry
from tests.helpers.status_fakes import RecordingObserver


class _ExplodingObserver(EngineObserver):
    def on_snapshot(self, services) -> None:
        raise ValueError("observer bug")


def test_publish_reaches_all_observers() -> None:
    registry = ObserverRegistry()
    first = RecordingObserver()
    second = RecordingObserver()
    registry.subscribe(first)
    registry.subscribe(second)

    registry.publish_snapshot([])
    registry.publish_error("oops")
    registry.publish_loading(True)

    assert first.snapshots == [()] == second.snapshots
    assert first.errors == ["oops"]
    assert second.loading == [True]


def test_unsubscribe_callable() -> None:
    registry = ObserverRegistry()
    observer = RecordingObserver()
    unsubscribe = registry.subscribe(observer)

    unsubscribe()
    registry.publish_error("ignored")

    assert observer.errors == []
    assert len(registry) == 0


def test_failing_observer_does_not_block_others() -> None:
    registry = ObserverRegistry()
    registry.subscribe(_ExplodingObserver())
    healthy = RecordingObserver()
    registry.subscribe(healthy)

    registry.publish_snapshot([])

    assert healthy.snapshots == [()]


def test_base_observer_hooks_are_noops() -> None:
    observer = EngineObserver()

    observer.on_snapshot(())
    observer.on_transition(None)
    observer.on_error(None)
    observer.on_loading(False)
