from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from chronos.domain.entities import AppState, AuditLog

from .store import new_id

AUDIT_LIMIT = 100
SYSTEM_USER_NAME = "System"


def with_audit(state: AppState, now: datetime, action: str, module: str) -> AppState:
    """Return ``state`` with a new entry at the front of the audit log, oldest evicted past the cap."""
    user = state.find_user(state.current_user_id)
    entry = AuditLog(
        id=new_id(),
        timestamp=now,
        user_id=user.id if user else None,
        user_name=user.name if user else SYSTEM_USER_NAME,
        action=action,
        module=module,
    )
    return replace(state, audit_logs=(entry,) + state.audit_logs[: AUDIT_LIMIT - 1])
