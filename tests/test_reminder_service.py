from __future__ import annotations

from chronos.domain.enums import RecurrenceType, ReminderCadence, TaskStatus


def _reminder(title: str, cadence: str = "Daily") -> dict:
    return {
        "title": title,
        "cadence": cadence,
        "category": "Finance",
        "priority": "High",
        "estimated_time": 30,
    }


def test_fifth_daily_reminder_gets_d05(services) -> None:
    for index in range(4):
        services.reminders.add_reminder(_reminder(f"Daily {index}"))
    services.reminders.add_reminder(_reminder("Weekly", "Weekly"))

    reminder = services.reminders.add_reminder(_reminder("Daily Cash Reconciliation"))

    assert reminder.display_id == "D-05"
    assert reminder.cadence == ReminderCadence.DAILY


def test_display_ids_are_numbered_per_cadence(services) -> None:
    weekly = services.reminders.add_reminder(_reminder("Expense Review", "Weekly"))
    monthly = services.reminders.add_reminder(_reminder("Utility Audit", "Monthly"))
    daily = services.reminders.add_reminder(_reminder("Coin Box"))

    assert (weekly.display_id, monthly.display_id, daily.display_id) == ("W-01", "M-01", "D-01")


def test_deleted_numbers_are_not_reused(services) -> None:
    first = services.reminders.add_reminder(_reminder("One"))
    second = services.reminders.add_reminder(_reminder("Two"))
    services.reminders.delete_reminder(first.id)

    third = services.reminders.add_reminder(_reminder("Three"))

    assert second.display_id == "D-02"
    assert third.display_id == "D-03"


def test_instantiate_leaves_reminder_untouched(services, clock) -> None:
    reminder = services.reminders.add_reminder(_reminder("Daily Cash Reconciliation"))

    tasks = [services.reminders.instantiate(reminder.id) for _ in range(3)]

    assert services.reminders.get_reminder(reminder.id) == reminder
    assert len({t.id for t in tasks}) == 3
    for task in tasks:
        assert task.status == TaskStatus.PENDING
        assert task.actual_time == 0
        assert task.due_date == clock.today()
        assert task.recurrence == RecurrenceType.DAILY
        assert (task.title, task.category, task.priority, task.estimated_time) == (
            reminder.title,
            reminder.category,
            reminder.priority,
            reminder.estimated_time,
        )
    assert len(services.store.snapshot.tasks) == 3


def test_update_and_delete_reminder(services) -> None:
    reminder = services.reminders.add_reminder(_reminder("Coin Box"))

    updated = services.reminders.update_reminder(reminder.id, {"estimated_time": 15})
    assert updated.estimated_time == 15
    assert updated.display_id == reminder.display_id

    services.reminders.delete_reminder(reminder.id)
    assert services.reminders.list_reminders() == []


def test_instantiate_missing_reminder_is_ignored(services) -> None:
    before = services.store.snapshot

    assert services.reminders.instantiate("missing") is None
    assert services.reminders.update_reminder("missing", {"title": "x"}) is None
    assert services.store.snapshot is before


def test_reminder_operations_do_not_audit(services) -> None:
    reminder = services.reminders.add_reminder(_reminder("Coin Box"))
    services.reminders.update_reminder(reminder.id, {"title": "Coins"})
    services.reminders.delete_reminder(reminder.id)

    assert services.store.snapshot.audit_logs == ()
