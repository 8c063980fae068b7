from __future__ import annotations

from dataclasses import is_dataclass, replace
from typing import Any

from chronos.domain.entities import AppSettings, AppState
from chronos.domain.enums import Role
from chronos.domain.permissions import Permission

from .store import StateStore, check_fields


class SettingsService:
    def __init__(self, store: StateStore) -> None:
        self._store = store

    @property
    def settings(self) -> AppSettings:
        return self._store.snapshot.settings

    def update_settings(self, **sections: Any) -> AppSettings:
        """Replace or merge settings sections.

        A dataclass value replaces the section; a dict is merged into it.
        ``role_permissions`` entries are merged per role.
        """
        check_fields(AppSettings, sections, locked=())

        def mutate(state: AppState) -> AppState:
            current = state.settings
            changes: dict[str, Any] = {}
            for name, value in sections.items():
                section = getattr(current, name)
                if name == "role_permissions":
                    table = dict(section)
                    for role, perm in value.items():
                        table[Role(role)] = perm if isinstance(perm, Permission) else replace(
                            table.get(Role(role), Permission()), **perm
                        )
                    changes[name] = table
                elif isinstance(value, dict) and is_dataclass(section):
                    changes[name] = replace(section, **value)
                else:
                    changes[name] = value
            return replace(state, settings=replace(current, **changes))

        return self._store.apply(mutate).settings

    def toggle_dark_mode(self) -> bool:
        return self._store.apply(lambda state: replace(state, is_dark_mode=not state.is_dark_mode)).is_dark_mode
