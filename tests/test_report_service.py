from __future__ import annotations

import csv
from datetime import date, datetime, timedelta, timezone

import pytest
from conftest import FakeClock

from chronos.domain.enums import TaskStatus
from chronos.services.container import build_services
from chronos.services.errors import ReportError
from chronos.services.report_service import format_minutes


def _bill(services, amount: float, status: str) -> None:
    services.bills.add_bill({
        "bill_type": "Storm Fiber",
        "location": "Main Campus",
        "reference_number": "SF-MAIN-001",
        "month": "May 2024",
        "due_date": "2024-05-15",
        "amount": amount,
        "status": status,
    })


def test_summary(services) -> None:
    done = services.tasks.add_task({"title": "Done", "estimated_time": 2})
    services.tasks.add_task({"title": "Open", "estimated_time": 1})
    services.tasks.update_task(done.id, {"actual_time": 2, "status": "Completed"})
    _bill(services, 3500, "Paid")
    _bill(services, 4200, "Pending")

    summary = services.reports.summary()

    assert summary.total_tasks == 2
    assert summary.completed == 1
    assert summary.pending == 1
    assert summary.total_tracked == 2
    assert summary.total_estimated == 3
    assert summary.efficiency == 150
    assert summary.paid_bills_total == 3500
    assert summary.pending_bills_total == 4200


def test_summary_without_tracked_time_has_no_efficiency(services) -> None:
    services.tasks.add_task({"title": "Open", "estimated_time": 30})

    assert services.reports.summary().efficiency is None


def test_dashboard_counts_todays_tasks(services, clock) -> None:
    today = services.tasks.add_task({"title": "Today", "estimated_time": 60})
    services.tasks.add_task({"title": "Later", "estimated_time": 60, "due_date": "2030-01-01"})
    services.tasks.update_task(today.id, {"actual_time": 30})
    services.tasks.complete_task(today.id)
    running = services.tasks.add_task({"title": "Running", "due_date": "2030-01-01"})
    services.tasks.start_task(running.id)
    _bill(services, 100, "Pending")

    stats = services.reports.dashboard()

    assert [t.title for t in stats.today_tasks] == ["Today"]
    assert stats.completed_today == 1
    assert stats.productivity == 50
    assert [t.title for t in stats.in_progress] == ["Running"]
    assert stats.pending_bills == 1
    assert stats.status_breakdown == {
        TaskStatus.PENDING: 1,
        TaskStatus.IN_PROGRESS: 1,
        TaskStatus.COMPLETED: 1,
    }


def test_completed_per_day(services, clock) -> None:
    task = services.tasks.add_task({"title": "A"})
    services.tasks.complete_task(task.id)

    series = services.reports.completed_per_day(days=3)

    assert [day for day, _ in series][-1] == clock.today()
    assert [count for _, count in series] == [0, 0, 1]


def test_completed_per_day_uses_local_calendar_day(store) -> None:
    clock = FakeClock(datetime(2026, 3, 2, 21, 30, tzinfo=timezone.utc), local_tz=timezone(timedelta(hours=5)))
    services = build_services(store, clock)
    task = services.tasks.add_task({"title": "Night shift close"})
    services.tasks.complete_task(task.id)

    assert clock.today() == date(2026, 3, 3)
    assert services.reports.completed_per_day(days=2) == [(date(2026, 3, 2), 0), (date(2026, 3, 3), 1)]


@pytest.mark.parametrize(
    "minutes, expected",
    [(0, "0s"), (0.75, "45s"), (5.5, "5m 30s"), (65, "1h 5m"), (-3, "0s")],
)
def test_format_minutes(minutes, expected) -> None:
    assert format_minutes(minutes) == expected


def test_export_csv(services, tmp_path) -> None:
    services.tasks.add_task({"title": "Coin Box Management", "estimated_time": 30})

    path = services.reports.export_csv(tmp_path / "report.csv")

    with open(path, newline="", encoding="utf-8") as handle:
        rows = list(csv.DictReader(handle))
    assert rows[0]["title"] == "Coin Box Management"
    assert rows[0]["estimated"] == "30m 0s"
    assert rows[0]["status"] == "Pending"


def test_export_failure_is_reported_and_state_untouched(services, tmp_path) -> None:
    before = services.store.snapshot

    with pytest.raises(ReportError):
        services.reports.export_csv(tmp_path / "missing" / "report.csv")

    assert services.store.snapshot is before
