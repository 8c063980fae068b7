from __future__ import annotations

from datetime import date

import pytest

from chronos.domain.entities import AppState
from chronos.domain.enums import Priority, RecurrenceType, TaskStatus
from chronos.domain.filters import TaskFilters
from chronos.services.errors import NotFoundError
from chronos.services.store import StateStore
from chronos.services.task_service import TaskService


def _draft(**overrides) -> dict:
    data = {
        "title": "Coin Box Management",
        "category": "Operations",
        "priority": "Medium",
        "estimated_time": 30,
        "due_date": "2026-03-02",
        "recurrence": "Daily",
    }
    data.update(overrides)
    return data


def test_add_task_assigns_identity_and_prepends(services, clock) -> None:
    first = services.tasks.add_task(_draft(title="First"))
    second = services.tasks.add_task(_draft(title="Second"))

    assert first.id != second.id
    assert second.actual_time == 0
    assert second.created_at == clock.now()
    assert second.status == TaskStatus.PENDING
    assert second.priority == Priority.MEDIUM
    assert second.recurrence == RecurrenceType.DAILY
    assert second.due_date == date(2026, 3, 2)
    assert [t.title for t in services.store.snapshot.tasks] == ["Second", "First"]


def test_add_task_writes_audit_entry(services) -> None:
    services.tasks.add_task(_draft(title="Weekly Expense Review"))

    entry = services.store.snapshot.audit_logs[0]
    assert entry.action == "Created task: Weekly Expense Review"
    assert entry.module == "Tasks"
    assert entry.user_id == "u1"
    assert entry.user_name == "Admin User"


def test_add_task_rejects_assigned_fields(services) -> None:
    with pytest.raises(ValueError):
        services.tasks.add_task(_draft(actual_time=10))
    with pytest.raises(ValueError):
        services.tasks.add_task(_draft(colour="red"))


def test_update_to_completed_stamps_completed_at(services, clock) -> None:
    task = services.tasks.add_task(_draft())
    clock.advance(minutes=5)

    updated = services.tasks.update_task(task.id, {"status": "Completed"})

    assert updated.status == TaskStatus.COMPLETED
    assert updated.completed_at == clock.now()


def test_update_away_from_completed_clears_completed_at(services) -> None:
    task = services.tasks.add_task(_draft())
    services.tasks.complete_task(task.id)

    updated = services.tasks.update_task(task.id, {"status": TaskStatus.PENDING})

    assert updated.completed_at is None


def test_update_missing_task_is_ignored(services) -> None:
    services.tasks.add_task(_draft())
    before = services.store.snapshot

    assert services.tasks.update_task("missing", {"title": "x"}) is None
    services.tasks.delete_task("missing")
    assert services.tasks.clone_task("missing") is None

    assert services.store.snapshot is before


def test_strict_store_reports_missing_task() -> None:
    tasks = TaskService(StateStore(AppState(), strict=True))

    with pytest.raises(NotFoundError):
        tasks.update_task("missing", {"title": "x"})
    with pytest.raises(NotFoundError):
        tasks.start_task("missing")


def test_update_rejects_immutable_fields(services) -> None:
    task = services.tasks.add_task(_draft())

    with pytest.raises(ValueError):
        services.tasks.update_task(task.id, {"created_at": None})
    with pytest.raises(ValueError):
        services.tasks.update_task(task.id, {"id": "other"})


def test_negative_times_are_rejected(services) -> None:
    with pytest.raises(ValueError):
        services.tasks.add_task(_draft(estimated_time=-1))
    task = services.tasks.add_task(_draft())
    with pytest.raises(ValueError):
        services.tasks.update_task(task.id, {"actual_time": -0.5})


def test_delete_clears_active_task(services) -> None:
    task = services.tasks.add_task(_draft())
    services.tasks.start_task(task.id)
    assert services.store.snapshot.active_task_id == task.id

    services.tasks.delete_task(task.id)

    state = services.store.snapshot
    assert state.active_task_id is None
    assert state.find_task(task.id) is None
    assert state.audit_logs[0].action == "Deleted task: Coin Box Management"


def test_clone_resets_progress(services) -> None:
    task = services.tasks.add_task(_draft(priority="High", estimated_time=45))
    services.tasks.start_task(task.id)
    services.timer.tick()
    services.tasks.complete_task(task.id)

    clone = services.tasks.clone_task(task.id)

    assert clone.id != task.id
    assert clone.title == "Coin Box Management (Clone)"
    assert clone.status == TaskStatus.PENDING
    assert clone.actual_time == 0
    assert clone.completed_at is None
    assert (clone.category, clone.priority, clone.estimated_time, clone.due_date, clone.recurrence) == (
        task.category,
        task.priority,
        task.estimated_time,
        task.due_date,
        task.recurrence,
    )


def test_start_pause_complete_reopen_cycle(services, clock) -> None:
    task = services.tasks.add_task(_draft())

    started = services.tasks.start_task(task.id)
    assert started.status == TaskStatus.IN_PROGRESS
    assert started.start_time == clock.now()

    clock.advance(minutes=1)
    paused = services.tasks.pause_task(task.id)
    assert paused.status == TaskStatus.PENDING
    assert paused.last_paused_at == clock.now()
    assert services.store.snapshot.active_task_id is None

    completed = services.tasks.complete_task(task.id)
    assert completed.status == TaskStatus.COMPLETED
    assert completed.completed_at is not None

    reopened = services.tasks.reopen_task(task.id)
    assert reopened.status == TaskStatus.PENDING
    assert reopened.completed_at is None

    actions = [entry.action for entry in services.store.snapshot.audit_logs]
    assert "Task 'Coin Box Management' moved to In Progress" in actions
    assert "Task 'Coin Box Management' moved to Completed" in actions


def test_multiple_tasks_may_run_concurrently(services) -> None:
    a = services.tasks.add_task(_draft(title="A"))
    b = services.tasks.add_task(_draft(title="B"))

    services.tasks.start_task(a.id)
    services.tasks.start_task(b.id)

    assert {t.title for t in services.tasks.running_tasks()} == {"A", "B"}


def test_update_to_in_progress_stamps_start_time(services, clock) -> None:
    task = services.tasks.add_task(_draft())
    clock.advance(minutes=2)

    updated = services.tasks.update_task(task.id, {"status": "In Progress"})

    assert updated.start_time == clock.now()
    assert services.store.snapshot.active_task_id == task.id

    clock.advance(minutes=2)
    again = services.tasks.update_task(task.id, {"status": "In Progress", "title": "Renamed"})
    assert again.start_time == updated.start_time


def test_single_timer_rule_pauses_other_tasks(services) -> None:
    services.settings.update_settings(tracking={"allow_concurrent_timers": False})
    a = services.tasks.add_task(_draft(title="A"))
    b = services.tasks.add_task(_draft(title="B"))

    services.tasks.start_task(a.id)
    services.tasks.start_task(b.id)

    assert services.tasks.get_task(a.id).status == TaskStatus.PENDING
    assert services.tasks.get_task(b.id).status == TaskStatus.IN_PROGRESS


def test_list_tasks_filters_by_type_and_search(services) -> None:
    services.tasks.add_task(_draft(title="Coin Box", category="Operations", recurrence="Daily"))
    services.tasks.add_task(_draft(title="Expense Review", category="Finance", recurrence="Weekly"))

    weekly = services.tasks.list_tasks(TaskFilters(recurrence=RecurrenceType.WEEKLY))
    finance = services.tasks.list_tasks(TaskFilters(search="fin"))

    assert [t.title for t in weekly] == ["Expense Review"]
    assert [t.title for t in finance] == ["Expense Review"]


def test_completed_at_set_iff_completed(services) -> None:
    task = services.tasks.add_task(_draft())
    services.tasks.start_task(task.id)
    services.tasks.complete_task(task.id)
    services.tasks.reopen_task(task.id)
    services.tasks.update_task(task.id, {"status": "Completed"})
    services.tasks.add_task(_draft(status="Completed"))

    for t in services.store.snapshot.tasks:
        assert (t.status == TaskStatus.COMPLETED) == (t.completed_at is not None)
