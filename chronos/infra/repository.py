from __future__ import annotations

import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from chronos.config import SETTINGS
from chronos.domain.entities import AppState
from chronos.services.errors import StateDecodeError

from .db import SessionLocal
from .models import StateBlobModel
from .serialization import dumps, loads

logger = logging.getLogger(__name__)


class StateRepository:
    """Stores the whole AppState as one JSON blob under a single key."""

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        key: str = SETTINGS.state_key,
        defaults: Optional[Callable[[], AppState]] = None,
    ) -> None:
        self._session_factory = session_factory
        self._key = key
        self._defaults = defaults or AppState

    def load(self) -> Optional[AppState]:
        with self._session_factory() as session:
            row = session.get(StateBlobModel, self._key)
            if row is None:
                return None
            payload = row.payload
        try:
            return loads(payload, self._defaults())
        except StateDecodeError as exc:
            logger.warning("Discarding stored state key=%s: %s", self._key, exc)
            return None

    def save(self, state: AppState) -> None:
        payload = dumps(state)
        with self._session_factory() as session:
            row = session.get(StateBlobModel, self._key)
            if row is None:
                session.add(StateBlobModel(key=self._key, payload=payload))
            else:
                row.payload = payload
            session.commit()

    def clear(self) -> None:
        with self._session_factory() as session:
            row = session.get(StateBlobModel, self._key)
            if row is None:
                return
            session.delete(row)
            session.commit()
