from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...

    def today(self) -> date: ...

    def local_date(self, moment: datetime) -> date: ...


class SystemClock:
    """Stamps in UTC; calendar days are the user's local ones."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return date.today()

    def local_date(self, moment: datetime) -> date:
        return moment.astimezone().date()
