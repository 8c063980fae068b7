from __future__ import annotations

from PySide6.QtCore import QObject, QTimer

from chronos.services.store import StateStore
from chronos.services.timer_service import TimerService


class AccrualTimer(QObject):
    """Drives TimerService.tick() from the Qt event loop.

    The QTimer runs only while some task is In Progress; every store change
    re-checks that condition.
    """

    def __init__(self, store: StateStore, timer_service: TimerService, parent=None):
        super().__init__(parent)
        self._timer_service = timer_service

        self.timer = QTimer(self)
        self.timer.setInterval(int(timer_service.interval_seconds * 1000))
        self.timer.timeout.connect(self.on_timeout)

        self._unsubscribe = store.subscribe(lambda _state: self.sync())
        self.sync()

    @property
    def is_running(self) -> bool:
        return self.timer.isActive()

    def sync(self) -> None:
        should_run = self._timer_service.should_run()
        if should_run and not self.timer.isActive():
            self.timer.start()
        elif not should_run and self.timer.isActive():
            self.timer.stop()

    def shutdown(self) -> None:
        self._unsubscribe()
        self.timer.stop()

    def on_timeout(self) -> None:
        self._timer_service.tick()
