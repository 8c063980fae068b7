from __future__ import annotations

import hmac
import logging

logger = logging.getLogger(__name__)

# Shared secret for the admin area; not a per-user credential.
ADMIN_PASSCODE = "1234"


class AdminGate:
    """Passcode challenge in front of the admin area.

    The unlocked flag lives only on this object: it is never written into
    AppState, so it is gone after a restart. There is no lockout.
    """

    def __init__(self, passcode: str = ADMIN_PASSCODE) -> None:
        self._passcode = passcode
        self._unlocked = False

    @property
    def is_unlocked(self) -> bool:
        return self._unlocked

    def unlock(self, code: str) -> bool:
        if hmac.compare_digest(str(code).strip().encode("utf-8"), self._passcode.encode("utf-8")):
            self._unlocked = True
            logger.info("Admin area unlocked")
            return True
        logger.warning("Admin passcode rejected")
        return False

    def lock(self) -> None:
        self._unlocked = False
