from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

from chronos.domain.entities import Task
from chronos.domain.enums import BillStatus, TaskStatus

from .clock import Clock, SystemClock
from .errors import ReportError
from .store import StateStore

logger = logging.getLogger(__name__)

CSV_HEADERS = ["title", "category", "status", "estimated", "actual", "recurrence", "due_date"]


@dataclass(frozen=True)
class ReportSummary:
    total_tasks: int
    completed: int
    pending: int
    total_tracked: float
    total_estimated: float
    efficiency: Optional[int]
    paid_bills_total: float
    pending_bills_total: float


@dataclass(frozen=True)
class DashboardStats:
    today_tasks: tuple[Task, ...]
    completed_today: int
    in_progress: tuple[Task, ...]
    pending_bills: int
    productivity: int
    status_breakdown: dict[TaskStatus, int]


def format_minutes(minutes: float = 0) -> str:
    safe = max(0.0, minutes or 0.0)
    hours = int(safe // 60)
    mins = int(safe % 60)
    secs = int((safe * 60) % 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    if mins > 0:
        return f"{mins}m {secs}s"
    return f"{secs}s"


class ReportService:
    """Read-only projections of the current snapshot."""

    def __init__(self, store: StateStore, clock: Clock | None = None) -> None:
        self._store = store
        self._clock = clock or SystemClock()

    def summary(self) -> ReportSummary:
        state = self._store.snapshot
        completed = [t for t in state.tasks if t.status == TaskStatus.COMPLETED]
        total_tracked = sum(t.actual_time for t in completed)
        total_estimated = sum(t.estimated_time for t in state.tasks)
        return ReportSummary(
            total_tasks=len(state.tasks),
            completed=len(completed),
            pending=len(state.tasks) - len(completed),
            total_tracked=total_tracked,
            total_estimated=total_estimated,
            efficiency=round(total_estimated / total_tracked * 100) if total_tracked > 0 else None,
            paid_bills_total=sum(b.amount for b in state.bills if b.status == BillStatus.PAID),
            pending_bills_total=sum(b.amount for b in state.bills if b.status == BillStatus.PENDING),
        )

    def dashboard(self, today: date | None = None) -> DashboardStats:
        state = self._store.snapshot
        today = today or self._clock.today()
        today_tasks = tuple(t for t in state.tasks if t.due_date == today)
        actual = sum(t.actual_time for t in today_tasks)
        estimated = sum(t.estimated_time for t in today_tasks)
        return DashboardStats(
            today_tasks=today_tasks,
            completed_today=sum(1 for t in today_tasks if t.status == TaskStatus.COMPLETED),
            in_progress=tuple(t for t in state.tasks if t.status == TaskStatus.IN_PROGRESS),
            pending_bills=sum(1 for b in state.bills if b.status == BillStatus.PENDING),
            productivity=round(actual / estimated * 100) if estimated > 0 else 0,
            status_breakdown={
                status: sum(1 for t in state.tasks if t.status == status) for status in TaskStatus
            },
        )

    def completed_per_day(self, days: int = 7) -> list[tuple[date, int]]:
        today = self._clock.today()
        start = today - timedelta(days=days - 1)
        counts: dict[date, int] = {}
        for task in self._store.snapshot.tasks:
            if task.completed_at is None:
                continue
            day = self._clock.local_date(task.completed_at)
            if start <= day <= today:
                counts[day] = counts.get(day, 0) + 1
        return [(start + timedelta(days=offset), counts.get(start + timedelta(days=offset), 0)) for offset in range(days)]

    def export_csv(self, path: str | Path) -> Path:
        path = Path(path)
        tasks = self._store.snapshot.tasks
        try:
            with open(path, "w", newline="", encoding="utf-8") as handle:
                writer = csv.DictWriter(handle, fieldnames=CSV_HEADERS)
                writer.writeheader()
                for task in tasks:
                    writer.writerow(
                        {
                            "title": task.title or "Untitled",
                            "category": task.category or "General",
                            "status": task.status.value,
                            "estimated": format_minutes(task.estimated_time),
                            "actual": format_minutes(task.actual_time),
                            "recurrence": task.recurrence.value,
                            "due_date": task.due_date.isoformat(),
                        }
                    )
        except OSError as exc:
            logger.exception("CSV export failed path=%s", path)
            raise ReportError(f"Could not write report to {path}: {exc}") from exc
        logger.info("Exported %s tasks to %s", len(tasks), path)
        return path
