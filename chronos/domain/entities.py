from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Mapping, Optional

from .enums import BillStatus, Priority, RecurrenceType, ReminderCadence, Role, TaskStatus
from .permissions import ROLE_PERMISSIONS, Permission


def _require_non_negative(name: str, value: float) -> None:
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value!r}")


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    category: str
    priority: Priority
    estimated_time: float
    actual_time: float
    due_date: date
    recurrence: RecurrenceType
    status: TaskStatus
    created_at: datetime
    start_time: Optional[datetime] = None
    last_paused_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        _require_non_negative("estimated_time", self.estimated_time)
        _require_non_negative("actual_time", self.actual_time)


@dataclass(frozen=True)
class Reminder:
    """Reusable template that spawns concrete tasks; never tracks time itself."""

    id: str
    display_id: str
    title: str
    category: str
    priority: Priority
    estimated_time: float
    cadence: ReminderCadence

    def __post_init__(self) -> None:
        _require_non_negative("estimated_time", self.estimated_time)


@dataclass(frozen=True)
class UtilityBill:
    id: str
    bill_type: str
    location: str
    reference_number: str
    month: str
    due_date: date
    amount: float
    status: BillStatus = BillStatus.PENDING
    contact_number: Optional[str] = None

    def __post_init__(self) -> None:
        _require_non_negative("amount", self.amount)


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str
    role: Role
    suspended: bool = False


@dataclass(frozen=True)
class AuditLog:
    id: str
    timestamp: datetime
    user_id: str | None
    user_name: str
    action: str
    module: str


@dataclass(frozen=True)
class Branding:
    app_name: str = "Chronos"
    organization: str = ""
    primary_color: str = "#6366F1"
    logo_path: str | None = None


@dataclass(frozen=True)
class LayoutSettings:
    default_view: str = "dashboard"
    compact_sidebar: bool = False


@dataclass(frozen=True)
class ModuleToggles:
    dashboard: bool = True
    tasks: bool = True
    utilities: bool = True
    reminders: bool = True
    reports: bool = True


@dataclass(frozen=True)
class TrackingRules:
    allow_concurrent_timers: bool = True


@dataclass(frozen=True)
class AppSettings:
    branding: Branding = field(default_factory=Branding)
    layout: LayoutSettings = field(default_factory=LayoutSettings)
    modules: ModuleToggles = field(default_factory=ModuleToggles)
    tracking: TrackingRules = field(default_factory=TrackingRules)
    role_permissions: Mapping[Role, Permission] = field(
        default_factory=lambda: dict(ROLE_PERMISSIONS)
    )


@dataclass(frozen=True)
class AppState:
    tasks: tuple[Task, ...] = ()
    bills: tuple[UtilityBill, ...] = ()
    reminders: tuple[Reminder, ...] = ()
    users: tuple[User, ...] = ()
    audit_logs: tuple[AuditLog, ...] = ()
    settings: AppSettings = field(default_factory=AppSettings)
    is_dark_mode: bool = False
    current_user_id: str | None = None
    active_task_id: str | None = None
    reminder_counters: Mapping[ReminderCadence, int] = field(default_factory=dict)

    def find_task(self, task_id: str) -> Task | None:
        return next((t for t in self.tasks if t.id == task_id), None)

    def find_bill(self, bill_id: str) -> UtilityBill | None:
        return next((b for b in self.bills if b.id == bill_id), None)

    def find_reminder(self, reminder_id: str) -> Reminder | None:
        return next((r for r in self.reminders if r.id == reminder_id), None)

    def find_user(self, user_id: str | None) -> User | None:
        if user_id is None:
            return None
        return next((u for u in self.users if u.id == user_id), None)
