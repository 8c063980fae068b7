from __future__ import annotations

import logging
from dataclasses import replace

from chronos.domain.entities import AppState, User
from chronos.domain.enums import Role
from chronos.domain.permissions import NO_ACCESS, Permission, permissions_for

from .store import StateStore, check_fields, new_id, replace_item

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, store: StateStore) -> None:
        self._store = store

    def list_users(self) -> list[User]:
        return list(self._store.snapshot.users)

    def get_user(self, user_id: str) -> User | None:
        return self._store.snapshot.find_user(user_id)

    def current_user(self) -> User | None:
        state = self._store.snapshot
        return state.find_user(state.current_user_id)

    def permissions_for(self, role: Role | str) -> Permission:
        return permissions_for(role, self._store.snapshot.settings.role_permissions)

    def current_permissions(self) -> Permission:
        user = self.current_user()
        if user is None or user.suspended:
            return NO_ACCESS
        return self.permissions_for(user.role)

    def add_user(self, data: dict) -> User:
        draft = self._normalize_data(data)
        check_fields(User, draft)
        user = User(id=new_id(), **draft)
        self._store.apply(lambda state: replace(state, users=state.users + (user,)))
        logger.info("User created id=%s role=%s", user.id, user.role.value)
        return user

    def update_user(self, user_id: str, data: dict) -> User | None:
        changes = self._normalize_data(data)
        check_fields(User, changes)

        def mutate(state: AppState) -> AppState:
            user = state.find_user(user_id)
            if user is None:
                self._store.missing("User", user_id)
                return state
            updated = replace(user, **changes)
            if updated.suspended and state.current_user_id == user_id:
                raise ValueError("The acting user cannot be suspended")
            return replace(state, users=replace_item(state.users, user_id, updated))

        return self._store.apply(mutate).find_user(user_id)

    def delete_user(self, user_id: str) -> None:
        def mutate(state: AppState) -> AppState:
            if state.find_user(user_id) is None:
                self._store.missing("User", user_id)
                return state
            if state.current_user_id == user_id:
                raise ValueError("The acting user cannot be deleted")
            return replace(state, users=tuple(u for u in state.users if u.id != user_id))

        self._store.apply(mutate)

    def switch_user(self, user_id: str) -> bool:
        """Make ``user_id`` the acting user. Suspended or unknown users are refused."""
        user = self.get_user(user_id)
        if user is None or user.suspended:
            logger.warning("Refusing to switch to user %s", user_id)
            return False
        self._store.apply(
            lambda state: state if state.current_user_id == user_id else replace(state, current_user_id=user_id)
        )
        return True

    @staticmethod
    def _normalize_data(data: dict) -> dict:
        normalized = dict(data)
        if "role" in normalized:
            normalized["role"] = Role(normalized["role"])
        return normalized
