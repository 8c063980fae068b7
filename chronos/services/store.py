"""
State container.

Holds the current AppState snapshot and is the only place where it gets
replaced. Every mutation goes through ``apply``:
- the mutator receives the latest snapshot and returns a new one,
- returning the same object means "nothing changed" (no save, no notify),
- after a change the snapshot is handed to the persistence adapter and then
  to subscribers.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import fields
from typing import Any, Callable, Iterable, Optional, Protocol

from chronos.domain.entities import AppState

from .errors import NotFoundError

logger = logging.getLogger(__name__)

Mutator = Callable[[AppState], AppState]
Listener = Callable[[AppState], None]


class Persistence(Protocol):
    def load(self) -> Optional[AppState]: ...

    def save(self, state: AppState) -> None: ...

    def clear(self) -> None: ...


def new_id() -> str:
    return uuid.uuid4().hex


def check_fields(entity_cls: type, changes: dict[str, Any], locked: Iterable[str] = ("id",)) -> None:
    names = {f.name for f in fields(entity_cls)}
    unknown = sorted(set(changes) - names)
    if unknown:
        raise ValueError(f"Unknown {entity_cls.__name__} field(s): {', '.join(unknown)}")
    frozen = sorted(set(changes) & set(locked))
    if frozen:
        raise ValueError(f"{entity_cls.__name__} field(s) cannot be changed: {', '.join(frozen)}")


def replace_item(items: tuple, item_id: str, updated: Any) -> tuple:
    return tuple(updated if item.id == item_id else item for item in items)


class StateStore:
    def __init__(
        self,
        initial: AppState,
        persistence: Optional[Persistence] = None,
        *,
        strict: bool = False,
        defaults: Optional[Callable[[], AppState]] = None,
    ) -> None:
        self._state = initial
        self._persistence = persistence
        self._strict = strict
        self._defaults = defaults or AppState
        self._lock = threading.RLock()
        self._listeners: list[Listener] = []

    @classmethod
    def open(
        cls,
        persistence: Persistence,
        defaults: Callable[[], AppState],
        *,
        strict: bool = False,
    ) -> StateStore:
        state = persistence.load()
        if state is None:
            logger.info("No usable stored state; starting from defaults")
            state = defaults()
        return cls(state, persistence, strict=strict, defaults=defaults)

    @property
    def snapshot(self) -> AppState:
        return self._state

    @property
    def strict(self) -> bool:
        return self._strict

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def apply(self, mutator: Mutator) -> AppState:
        with self._lock:
            current = self._state
            updated = mutator(current)
            if updated is current:
                return current
            self._state = updated
            self._persist(updated)
        self._notify(updated)
        return updated

    def missing(self, kind: str, item_id: str) -> None:
        """Report a reference to an id that is not in the snapshot."""
        if self._strict:
            raise NotFoundError(kind, item_id)
        logger.debug("%s %s not found; ignoring", kind, item_id)

    def reset(self) -> AppState:
        with self._lock:
            if self._persistence is not None:
                self._persistence.clear()
            self._state = self._defaults()
            state = self._state
        logger.info("State reset to defaults")
        self._notify(state)
        return state

    def _persist(self, state: AppState) -> None:
        if self._persistence is None:
            return
        try:
            self._persistence.save(state)
        except Exception:
            logger.exception("Failed to persist state snapshot")

    def _notify(self, state: AppState) -> None:
        for listener in list(self._listeners):
            listener(state)


__all__ = ["StateStore", "Persistence", "check_fields", "replace_item", "new_id"]
