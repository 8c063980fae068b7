from __future__ import annotations

import json
from dataclasses import fields, is_dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import Any

from chronos.domain.entities import (
    AppSettings,
    AppState,
    AuditLog,
    Branding,
    LayoutSettings,
    ModuleToggles,
    Reminder,
    Task,
    TrackingRules,
    User,
    UtilityBill,
)
from chronos.domain.enums import BillStatus, Priority, RecurrenceType, ReminderCadence, Role, TaskStatus
from chronos.domain.permissions import Permission
from chronos.services.errors import StateDecodeError

FORMAT_VERSION = 1


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if is_dataclass(value):
        return {f.name: _plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, dict):
        return {_plain(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def state_to_dict(state: AppState) -> dict[str, Any]:
    payload = _plain(state)
    payload["version"] = FORMAT_VERSION
    return payload


def _opt_datetime(raw: str | None) -> datetime | None:
    return datetime.fromisoformat(raw) if raw else None


def _task(raw: dict) -> Task:
    return Task(
        id=str(raw["id"]),
        title=raw["title"],
        category=raw.get("category", ""),
        priority=Priority(raw["priority"]),
        estimated_time=raw.get("estimated_time", 0),
        actual_time=raw.get("actual_time", 0),
        due_date=date.fromisoformat(raw["due_date"]),
        recurrence=RecurrenceType(raw.get("recurrence", RecurrenceType.ONE_TIME.value)),
        status=TaskStatus(raw["status"]),
        created_at=datetime.fromisoformat(raw["created_at"]),
        start_time=_opt_datetime(raw.get("start_time")),
        last_paused_at=_opt_datetime(raw.get("last_paused_at")),
        completed_at=_opt_datetime(raw.get("completed_at")),
    )


def _reminder(raw: dict) -> Reminder:
    return Reminder(
        id=str(raw["id"]),
        display_id=raw["display_id"],
        title=raw["title"],
        category=raw.get("category", ""),
        priority=Priority(raw["priority"]),
        estimated_time=raw.get("estimated_time", 0),
        cadence=ReminderCadence(raw["cadence"]),
    )


def _bill(raw: dict) -> UtilityBill:
    return UtilityBill(
        id=str(raw["id"]),
        bill_type=raw["bill_type"],
        location=raw["location"],
        reference_number=raw["reference_number"],
        month=raw["month"],
        due_date=date.fromisoformat(raw["due_date"]),
        amount=raw["amount"],
        status=BillStatus(raw.get("status", BillStatus.PENDING.value)),
        contact_number=raw.get("contact_number"),
    )


def _user(raw: dict) -> User:
    return User(
        id=str(raw["id"]),
        name=raw["name"],
        email=raw.get("email", ""),
        role=Role(raw["role"]),
        suspended=bool(raw.get("suspended", False)),
    )


def _audit(raw: dict) -> AuditLog:
    return AuditLog(
        id=str(raw["id"]),
        timestamp=datetime.fromisoformat(raw["timestamp"]),
        user_id=raw.get("user_id"),
        user_name=raw.get("user_name", ""),
        action=raw["action"],
        module=raw["module"],
    )


def _settings(raw: dict, fallback: AppSettings) -> AppSettings:
    sections = {
        "branding": Branding,
        "layout": LayoutSettings,
        "modules": ModuleToggles,
        "tracking": TrackingRules,
    }
    changes: dict[str, Any] = {}
    for name, section_cls in sections.items():
        if name in raw:
            changes[name] = section_cls(**raw[name])
    if "role_permissions" in raw:
        table = dict(fallback.role_permissions)
        for role, flags in raw["role_permissions"].items():
            table[Role(role)] = Permission(**flags)
        changes["role_permissions"] = table
    return replace(fallback, **changes)


def state_from_dict(data: dict[str, Any], defaults: AppState) -> AppState:
    """Rebuild an AppState, keeping ``defaults`` for any top-level key not present."""
    if not isinstance(data, dict):
        raise StateDecodeError(f"expected a JSON object, got {type(data).__name__}")

    loaders = {
        "tasks": _task,
        "bills": _bill,
        "reminders": _reminder,
        "users": _user,
        "audit_logs": _audit,
    }
    try:
        changes: dict[str, Any] = {}
        for name, loader in loaders.items():
            items = data.get(name)
            if isinstance(items, list):
                changes[name] = tuple(loader(item) for item in items)
        if isinstance(data.get("settings"), dict):
            changes["settings"] = _settings(data["settings"], defaults.settings)
        if "is_dark_mode" in data:
            changes["is_dark_mode"] = bool(data["is_dark_mode"])
        if "current_user_id" in data:
            changes["current_user_id"] = data["current_user_id"]
        if "active_task_id" in data:
            changes["active_task_id"] = data["active_task_id"]
        if isinstance(data.get("reminder_counters"), dict):
            changes["reminder_counters"] = {
                ReminderCadence(k): int(v) for k, v in data["reminder_counters"].items()
            }
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise StateDecodeError(f"malformed state: {exc}") from exc
    return replace(defaults, **changes)


def dumps(state: AppState) -> str:
    return json.dumps(state_to_dict(state), ensure_ascii=False)


def loads(payload: str, defaults: AppState | None = None) -> AppState:
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise StateDecodeError(f"invalid JSON: {exc}") from exc
    return state_from_dict(data, defaults if defaults is not None else AppState())


__all__ = ["dumps", "loads", "state_to_dict", "state_from_dict"]
