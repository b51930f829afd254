"""Helper classes for the polling engine."""

from .environment_migration import EnvironmentResolver
from .observers import EngineObserver, ObserverRegistry
from .state import EnginePhase, PollingState
from .timer import PollTimer

__all__ = [
    "EngineObserver",
    "EnginePhase",
    "EnvironmentResolver",
    "ObserverRegistry",
    "PollTimer",
    "PollingState",
]
