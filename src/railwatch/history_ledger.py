"""
Bounded, persisted, most-recent-first log of status transitions.

The ledger is persisted after every mutation under the ``deploymentHistory``
key of the configuration store. Entries written by older releases may lack
newer fields; those decode with defaults. Individual entries that cannot be
decoded are dropped, and a store that cannot be read at all yields an empty
ledger instead of an error.
"""

from __future__ import annotations

import logging
from typing import Any, List, Tuple

from .config_store.base import STORE_ERRORS, ConfigStore
from .models.transition import TransitionEvent

logger = logging.getLogger(__name__)

HISTORY_KEY = "deploymentHistory"
DEFAULT_HISTORY_CAPACITY = 20

_ENTRY_ERRORS = (KeyError, TypeError, ValueError)


class HistoryLedger:
    """Append-only, capacity-bounded transition history."""

    def __init__(self, store: ConfigStore, capacity: int = DEFAULT_HISTORY_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("History capacity must be positive")
        self._store = store
        self.capacity = capacity
        self._entries: List[TransitionEvent] = []

    def __len__(self) -> int:
        return len(self._entries)

    def all(self) -> Tuple[TransitionEvent, ...]:
        """Entries ordered most recent first."""
        return tuple(self._entries)

    async def append(self, event: TransitionEvent) -> None:
        self._entries.insert(0, event)
        if len(self._entries) > self.capacity:
            del self._entries[self.capacity :]
        await self.persist()

    async def extend(self, events: List[TransitionEvent]) -> None:
        """Append several events in detection order (the last one ends up first)."""
        for event in events:
            await self.append(event)

    async def clear(self) -> None:
        self._entries = []
        await self.persist()

    async def load(self) -> Tuple[TransitionEvent, ...]:
        try:
            raw = await self._store.get(HISTORY_KEY)
        except STORE_ERRORS as exc:  # policy_guard: allow-silent-handler
            logger.warning("History store unreadable, starting with empty history: %s", exc)
            self._entries = []
            return self.all()
        self._entries = self._decode(raw)[: self.capacity]
        logger.debug("Loaded %d history entries", len(self._entries))
        return self.all()

    async def persist(self) -> None:
        payload = [entry.to_dict() for entry in self._entries]
        try:
            await self._store.set(HISTORY_KEY, payload)
        except STORE_ERRORS:
            logger.exception("Failed to persist deployment history")
            raise

    @staticmethod
    def _decode(raw: Any) -> List[TransitionEvent]:
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Persisted history is not a list (%s); ignoring it", type(raw).__name__)
            return []
        entries: List[TransitionEvent] = []
        for item in raw:
            if not isinstance(item, dict):
                logger.warning("Skipping non-object history entry")
                continue
            try:
                entries.append(TransitionEvent.from_dict(item))
            except _ENTRY_ERRORS as exc:  # policy_guard: allow-silent-handler
                logger.warning("Skipping undecodable history entry: %s", exc)
        return entries


__all__ = ["DEFAULT_HISTORY_CAPACITY", "HISTORY_KEY", "HistoryLedger"]
