from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .entities import Task
from .enums import RecurrenceType, TaskStatus


@dataclass(frozen=True)
class TaskFilters:
    recurrence: Optional[RecurrenceType] = None
    status: Optional[TaskStatus] = None
    search: str | None = None

    def matches(self, task: Task) -> bool:
        if self.recurrence is not None and task.recurrence != self.recurrence:
            return False
        if self.status is not None and task.status != self.status:
            return False
        if self.search:
            needle = self.search.lower()
            return needle in task.title.lower() or needle in task.category.lower()
        return True
