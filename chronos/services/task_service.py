from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime

from chronos.domain.defaults import CATEGORIES
from chronos.domain.entities import AppState, Task
from chronos.domain.enums import Priority, RecurrenceType, TaskStatus
from chronos.domain.filters import TaskFilters

from .audit import with_audit
from .clock import Clock, SystemClock
from .store import StateStore, check_fields, new_id, replace_item

logger = logging.getLogger(__name__)

MODULE = "Tasks"
CLONE_SUFFIX = " (Clone)"
_DRAFT_LOCKED = ("id", "actual_time", "created_at")
_UPDATE_LOCKED = ("id", "created_at")


class TaskService:
    def __init__(self, store: StateStore, clock: Clock | None = None) -> None:
        self._store = store
        self._clock = clock or SystemClock()

    def list_tasks(self, filters: TaskFilters | None = None) -> list[Task]:
        filters = filters or TaskFilters()
        return [task for task in self._store.snapshot.tasks if filters.matches(task)]

    def get_task(self, task_id: str) -> Task | None:
        return self._store.snapshot.find_task(task_id)

    def running_tasks(self) -> list[Task]:
        return self.list_tasks(TaskFilters(status=TaskStatus.IN_PROGRESS))

    def add_task(self, data: dict) -> Task:
        """Create a task from a draft; the caller is responsible for a non-empty title."""
        draft = self._normalize_data(data)
        check_fields(Task, draft, locked=_DRAFT_LOCKED)
        now = self._clock.now()
        task = Task(
            id=new_id(),
            title=draft.pop("title", ""),
            category=draft.pop("category", CATEGORIES[0]),
            priority=draft.pop("priority", Priority.MEDIUM),
            estimated_time=draft.pop("estimated_time", 0),
            actual_time=0,
            due_date=draft.pop("due_date", self._clock.today()),
            recurrence=draft.pop("recurrence", RecurrenceType.ONE_TIME),
            status=draft.pop("status", TaskStatus.PENDING),
            created_at=now,
            **draft,
        )
        if task.status == TaskStatus.COMPLETED and task.completed_at is None:
            task = replace(task, completed_at=now)
        elif task.status != TaskStatus.COMPLETED and task.completed_at is not None:
            task = replace(task, completed_at=None)
        if task.status == TaskStatus.IN_PROGRESS and task.start_time is None:
            task = replace(task, start_time=now)

        def mutate(state: AppState) -> AppState:
            state = replace(state, tasks=(task,) + state.tasks)
            return with_audit(state, now, f"Created task: {task.title}", MODULE)

        self._store.apply(mutate)
        logger.info("Task created id=%s title=%s", task.id, task.title)
        return task

    def update_task(self, task_id: str, data: dict) -> Task | None:
        changes = self._normalize_data(data)
        check_fields(Task, changes, locked=_UPDATE_LOCKED)
        return self._change(task_id, changes)

    def delete_task(self, task_id: str) -> None:
        now = self._clock.now()

        def mutate(state: AppState) -> AppState:
            task = state.find_task(task_id)
            if task is None:
                self._store.missing("Task", task_id)
                return state
            state = replace(
                state,
                tasks=tuple(t for t in state.tasks if t.id != task_id),
                active_task_id=None if state.active_task_id == task_id else state.active_task_id,
            )
            return with_audit(state, now, f"Deleted task: {task.title}", MODULE)

        self._store.apply(mutate)

    def clone_task(self, task_id: str) -> Task | None:
        source = self.get_task(task_id)
        if source is None:
            self._store.missing("Task", task_id)
            return None
        return self.add_task({
            "title": f"{source.title}{CLONE_SUFFIX}",
            "category": source.category,
            "priority": source.priority,
            "estimated_time": source.estimated_time,
            "due_date": source.due_date,
            "recurrence": source.recurrence,
            "status": TaskStatus.PENDING,
        })

    def start_task(self, task_id: str) -> Task | None:
        now = self._clock.now()
        return self._change(task_id, {"status": TaskStatus.IN_PROGRESS, "start_time": now}, now)

    def pause_task(self, task_id: str) -> Task | None:
        now = self._clock.now()
        return self._change(task_id, {"status": TaskStatus.PENDING, "last_paused_at": now}, now)

    def complete_task(self, task_id: str) -> Task | None:
        return self._change(task_id, {"status": TaskStatus.COMPLETED})

    def reopen_task(self, task_id: str) -> Task | None:
        return self._change(task_id, {"status": TaskStatus.PENDING})

    def _change(self, task_id: str, changes: dict, now: datetime | None = None) -> Task | None:
        now = now or self._clock.now()

        def mutate(state: AppState) -> AppState:
            task = state.find_task(task_id)
            if task is None:
                self._store.missing("Task", task_id)
                return state
            return self._apply_changes(state, task, changes, now)

        return self._store.apply(mutate).find_task(task_id)

    def _apply_changes(self, state: AppState, task: Task, changes: dict, now: datetime) -> AppState:
        status = changes.get("status")
        updated = replace(task, **changes)
        # completed_at is set exactly when the task is Completed
        if updated.status == TaskStatus.COMPLETED and updated.completed_at is None:
            updated = replace(updated, completed_at=now)
        elif updated.status != TaskStatus.COMPLETED and updated.completed_at is not None:
            updated = replace(updated, completed_at=None)
        if status == TaskStatus.IN_PROGRESS and task.status != TaskStatus.IN_PROGRESS and "start_time" not in changes:
            updated = replace(updated, start_time=now)

        tasks = replace_item(state.tasks, task.id, updated)
        active_task_id = state.active_task_id

        if status == TaskStatus.IN_PROGRESS:
            active_task_id = task.id
            if not state.settings.tracking.allow_concurrent_timers:
                tasks = tuple(
                    replace(t, status=TaskStatus.PENDING, last_paused_at=now)
                    if t.id != task.id and t.status == TaskStatus.IN_PROGRESS
                    else t
                    for t in tasks
                )
        elif status is not None and active_task_id == task.id:
            active_task_id = None

        state = replace(state, tasks=tasks, active_task_id=active_task_id)
        if status is not None and status != task.status:
            state = with_audit(state, now, f"Task '{task.title}' moved to {status.value}", MODULE)
        return state

    def _normalize_data(self, data: dict) -> dict:
        normalized = dict(data)
        if "status" in normalized:
            normalized["status"] = TaskStatus(normalized["status"])
        if "priority" in normalized:
            normalized["priority"] = Priority(normalized["priority"])
        if "recurrence" in normalized:
            normalized["recurrence"] = RecurrenceType(normalized["recurrence"])
        if isinstance(normalized.get("due_date"), str):
            normalized["due_date"] = date.fromisoformat(normalized["due_date"])
        return normalized
