from __future__ import annotations

from datetime import date, datetime

from .entities import AppSettings, AppState, Task, User, UtilityBill
from .enums import BillStatus, Priority, RecurrenceType, Role, TaskStatus

CATEGORIES = ["Operations", "Finance", "Administration", "IT", "Maintenance", "HR"]
CAMPUSES = ["Main Campus", "Johar Campus", "Masjid Campus", "Maktab Campus"]

DEFAULT_USER_ID = "u1"


def _demo_tasks(today: date, now: datetime) -> tuple[Task, ...]:
    rows = [
        ("d1", "Donation & Receipt Management", "Finance", Priority.HIGH, 45, RecurrenceType.DAILY),
        ("d2", "Coin Box Management", "Operations", Priority.MEDIUM, 30, RecurrenceType.DAILY),
        ("w1", "Weekly Expense Review", "Finance", Priority.HIGH, 120, RecurrenceType.WEEKLY),
    ]
    return tuple(
        Task(
            id=task_id,
            title=title,
            category=category,
            priority=priority,
            estimated_time=estimated,
            actual_time=0,
            due_date=today,
            recurrence=recurrence,
            status=TaskStatus.PENDING,
            created_at=now,
        )
        for task_id, title, category, priority, estimated, recurrence in rows
    )


def _demo_bills() -> tuple[UtilityBill, ...]:
    return (
        UtilityBill("b1", "Storm Fiber", "Main Campus", "SF-MAIN-001", "May 2024",
                    date(2024, 5, 15), 3500, contact_number="0333-3265994"),
        UtilityBill("b2", "Storm Fiber", "Main Campus", "SF-MAIN-002", "May 2024",
                    date(2024, 5, 15), 4200, contact_number="0300-2225354"),
        UtilityBill("b3", "PTCL", "Main Campus", "02134613474", "May 2024",
                    date(2024, 5, 20), 2800, contact_number="021-34613474"),
        UtilityBill("b4", "K-Electric", "Main Campus", "0400030577440", "May 2024",
                    date(2024, 5, 18), 15400),
        UtilityBill("b5", "SSGC (Gas)", "Main Campus", "2490615583", "May 2024",
                    date(2024, 5, 12), 850, status=BillStatus.PAID),
    )


def default_users() -> tuple[User, ...]:
    return (
        User(
            id=DEFAULT_USER_ID,
            name="Admin User",
            email="ops-admin@organization.org",
            role=Role.SUPER_ADMIN,
        ),
    )


def default_state(today: date, now: datetime, *, seed_demo_data: bool = True) -> AppState:
    """State used on first start, after a reset, or when stored data is unreadable."""
    return AppState(
        tasks=_demo_tasks(today, now) if seed_demo_data else (),
        bills=_demo_bills() if seed_demo_data else (),
        users=default_users(),
        settings=AppSettings(),
        current_user_id=DEFAULT_USER_ID,
    )
