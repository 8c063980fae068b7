from __future__ import annotations

from dataclasses import replace

from chronos.domain.entities import AppState
from chronos.domain.enums import TaskStatus

from .store import StateStore

TICK_SECONDS = 1.0


def has_running_tasks(state: AppState) -> bool:
    return any(task.status == TaskStatus.IN_PROGRESS for task in state.tasks)


def accrue(state: AppState, seconds: float) -> AppState:
    """Add ``seconds`` (as minutes) to every In Progress task.

    Returns ``state`` itself when no task changed, so the store emits nothing.
    """
    if seconds <= 0 or not has_running_tasks(state):
        return state
    minutes = seconds / 60
    tasks = tuple(
        replace(task, actual_time=task.actual_time + minutes)
        if task.status == TaskStatus.IN_PROGRESS
        else task
        for task in state.tasks
    )
    return replace(state, tasks=tasks)


class TimerService:
    """Interval-based accrual: each tick adds a fixed amount, it never reads wall-clock timestamps."""

    def __init__(self, store: StateStore, interval_seconds: float = TICK_SECONDS) -> None:
        self._store = store
        self.interval_seconds = interval_seconds

    def should_run(self) -> bool:
        return has_running_tasks(self._store.snapshot)

    def tick(self) -> bool:
        changed = False

        def mutate(state: AppState) -> AppState:
            nonlocal changed
            updated = accrue(state, self.interval_seconds)
            changed = updated is not state
            return updated

        self._store.apply(mutate)
        return changed
