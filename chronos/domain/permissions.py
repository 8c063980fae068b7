from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Mapping

from .enums import Role


@dataclass(frozen=True)
class Permission:
    view_tasks: bool = False
    edit_tasks: bool = False
    start_timer: bool = False
    edit_time: bool = False
    download_reports: bool = False
    manage_bills: bool = False
    manage_users: bool = False
    manage_settings: bool = False

    @classmethod
    def flag_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))


NO_ACCESS = Permission()

# Each role is authored independently; there is no inheritance between them.
ROLE_PERMISSIONS: Mapping[Role, Permission] = {
    Role.SUPER_ADMIN: Permission(
        view_tasks=True,
        edit_tasks=True,
        start_timer=True,
        edit_time=True,
        download_reports=True,
        manage_bills=True,
        manage_users=True,
        manage_settings=True,
    ),
    Role.ADMIN: Permission(
        view_tasks=True,
        edit_tasks=True,
        start_timer=True,
        edit_time=True,
        download_reports=True,
        manage_bills=True,
        manage_users=True,
        manage_settings=False,
    ),
    Role.MANAGER: Permission(
        view_tasks=True,
        edit_tasks=True,
        start_timer=True,
        edit_time=False,
        download_reports=True,
        manage_bills=True,
    ),
    Role.STAFF: Permission(
        view_tasks=True,
        start_timer=True,
    ),
}


def permissions_for(role: Role | str, table: Mapping[Role, Permission] = ROLE_PERMISSIONS) -> Permission:
    """Look up the capability record for ``role``.

    Unknown roles get ``NO_ACCESS``. The result only drives what the UI shows;
    nothing in the services layer enforces it.
    """
    try:
        role = Role(role)
    except ValueError:
        return NO_ACCESS
    return table.get(role, NO_ACCESS)
