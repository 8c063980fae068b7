from __future__ import annotations

from dataclasses import dataclass

from .access import AdminGate
from .bill_service import BillService
from .clock import Clock, SystemClock
from .reminder_service import ReminderService
from .report_service import ReportService
from .settings_service import SettingsService
from .store import StateStore
from .task_service import TaskService
from .timer_service import TimerService
from .user_service import UserService


@dataclass
class Services:
    store: StateStore
    tasks: TaskService
    timer: TimerService
    reminders: ReminderService
    bills: BillService
    users: UserService
    settings: SettingsService
    reports: ReportService
    admin: AdminGate


def build_services(store: StateStore, clock: Clock | None = None) -> Services:
    clock = clock or SystemClock()
    tasks = TaskService(store, clock)
    return Services(
        store=store,
        tasks=tasks,
        timer=TimerService(store),
        reminders=ReminderService(store, tasks, clock),
        bills=BillService(store, clock),
        users=UserService(store),
        settings=SettingsService(store),
        reports=ReportService(store, clock),
        admin=AdminGate(),
    )
