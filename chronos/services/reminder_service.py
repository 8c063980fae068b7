from __future__ import annotations

import logging
from dataclasses import replace

from chronos.domain.defaults import CATEGORIES
from chronos.domain.entities import AppState, Reminder, Task
from chronos.domain.enums import Priority, RecurrenceType, ReminderCadence, TaskStatus

from .clock import Clock, SystemClock
from .store import StateStore, check_fields, new_id, replace_item
from .task_service import TaskService

logger = logging.getLogger(__name__)


def next_display_id(state: AppState, cadence: ReminderCadence) -> tuple[str, int]:
    """Number the next reminder of ``cadence``.

    Uses the stored per-cadence counter so deleted numbers are never handed out
    again; the existing count is the floor for states saved without counters.
    """
    existing = sum(1 for r in state.reminders if r.cadence == cadence)
    number = max(state.reminder_counters.get(cadence, 0), existing) + 1
    return f"{cadence.prefix}-{number:02d}", number


class ReminderService:
    def __init__(self, store: StateStore, tasks: TaskService, clock: Clock | None = None) -> None:
        self._store = store
        self._tasks = tasks
        self._clock = clock or SystemClock()

    def list_reminders(self, cadence: ReminderCadence | None = None) -> list[Reminder]:
        reminders = self._store.snapshot.reminders
        if cadence is None:
            return list(reminders)
        return [r for r in reminders if r.cadence == ReminderCadence(cadence)]

    def get_reminder(self, reminder_id: str) -> Reminder | None:
        return self._store.snapshot.find_reminder(reminder_id)

    def add_reminder(self, data: dict) -> Reminder:
        draft = self._normalize_data(data)
        check_fields(Reminder, draft, locked=("id", "display_id"))
        cadence = draft.pop("cadence", ReminderCadence.DAILY)
        created: list[Reminder] = []

        def mutate(state: AppState) -> AppState:
            display_id, number = next_display_id(state, cadence)
            reminder = Reminder(
                id=new_id(),
                display_id=display_id,
                title=draft.get("title", ""),
                category=draft.get("category", CATEGORIES[0]),
                priority=draft.get("priority", Priority.MEDIUM),
                estimated_time=draft.get("estimated_time", 0),
                cadence=cadence,
            )
            created.append(reminder)
            counters = dict(state.reminder_counters)
            counters[cadence] = number
            return replace(state, reminders=state.reminders + (reminder,), reminder_counters=counters)

        self._store.apply(mutate)
        logger.info("Reminder %s created", created[0].display_id)
        return created[0]

    def update_reminder(self, reminder_id: str, data: dict) -> Reminder | None:
        changes = self._normalize_data(data)
        check_fields(Reminder, changes, locked=("id", "display_id"))

        def mutate(state: AppState) -> AppState:
            reminder = state.find_reminder(reminder_id)
            if reminder is None:
                self._store.missing("Reminder", reminder_id)
                return state
            updated = replace(reminder, **changes)
            return replace(state, reminders=replace_item(state.reminders, reminder_id, updated))

        return self._store.apply(mutate).find_reminder(reminder_id)

    def delete_reminder(self, reminder_id: str) -> None:
        def mutate(state: AppState) -> AppState:
            if state.find_reminder(reminder_id) is None:
                self._store.missing("Reminder", reminder_id)
                return state
            return replace(state, reminders=tuple(r for r in state.reminders if r.id != reminder_id))

        self._store.apply(mutate)

    def instantiate(self, reminder_id: str) -> Task | None:
        """Spawn a Pending task due today from the reminder; the reminder is left untouched."""
        reminder = self.get_reminder(reminder_id)
        if reminder is None:
            self._store.missing("Reminder", reminder_id)
            return None
        return self._tasks.add_task({
            "title": reminder.title,
            "category": reminder.category,
            "priority": reminder.priority,
            "estimated_time": reminder.estimated_time,
            "recurrence": RecurrenceType(reminder.cadence.value),
            "due_date": self._clock.today(),
            "status": TaskStatus.PENDING,
        })

    @staticmethod
    def _normalize_data(data: dict) -> dict:
        normalized = dict(data)
        if "cadence" in normalized:
            normalized["cadence"] = ReminderCadence(normalized["cadence"])
        if "priority" in normalized:
            normalized["priority"] = Priority(normalized["priority"])
        return normalized
