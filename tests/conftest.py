from __future__ import annotations

import os
from datetime import date, datetime, timedelta, timezone

import pytest

from chronos.domain.defaults import default_state
from chronos.domain.entities import AppState
from chronos.services.container import Services, build_services
from chronos.services.store import StateStore


class FakeClock:
    def __init__(self, now: datetime | None = None, local_tz: timezone = timezone.utc) -> None:
        self.current = now or datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)
        self.local_tz = local_tz

    def now(self) -> datetime:
        return self.current

    def today(self) -> date:
        return self.local_date(self.current)

    def local_date(self, moment: datetime) -> date:
        return moment.astimezone(self.local_tz).date()

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class MemoryPersistence:
    """Records every saved snapshot instead of writing to a database."""

    def __init__(self, stored: AppState | None = None) -> None:
        self.stored = stored
        self.saves: list[AppState] = []
        self.cleared = 0

    def load(self) -> AppState | None:
        return self.stored

    def save(self, state: AppState) -> None:
        self.saves.append(state)
        self.stored = state

    def clear(self) -> None:
        self.cleared += 1
        self.stored = None


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def persistence() -> MemoryPersistence:
    return MemoryPersistence()


@pytest.fixture()
def store(clock: FakeClock, persistence: MemoryPersistence) -> StateStore:
    def defaults() -> AppState:
        return default_state(clock.today(), clock.now(), seed_demo_data=False)

    return StateStore(defaults(), persistence, defaults=defaults)


@pytest.fixture()
def services(store: StateStore, clock: FakeClock) -> Services:
    return build_services(store, clock)


@pytest.fixture(scope="session")
def qapp():
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    QtWidgets = pytest.importorskip("PySide6.QtWidgets")
    return QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
