from __future__ import annotations

import sys
from pathlib import Path

from PySide6.QtGui import QColor, QFont, QPalette
from PySide6.QtWidgets import QApplication, QMessageBox, QStyleFactory

from chronos.config import SETTINGS
from chronos.domain.defaults import default_state
from chronos.infra.db import init_db
from chronos.infra.logging import setup_logging
from chronos.infra.repository import StateRepository
from chronos.services.clock import SystemClock
from chronos.services.container import build_services
from chronos.services.store import StateStore
from chronos.ui.main_window import MainWindow


def _apply_palette(app: QApplication, dark: bool) -> None:
    if not dark:
        app.setPalette(app.style().standardPalette())
        return
    palette = QPalette()
    palette.setColor(QPalette.Window, QColor("#0F172A"))
    palette.setColor(QPalette.WindowText, QColor("#E6EDF3"))
    palette.setColor(QPalette.Base, QColor("#111827"))
    palette.setColor(QPalette.AlternateBase, QColor("#1B2230"))
    palette.setColor(QPalette.Text, QColor("#E6EDF3"))
    palette.setColor(QPalette.Button, QColor("#202A3B"))
    palette.setColor(QPalette.ButtonText, QColor("#E6EDF3"))
    palette.setColor(QPalette.Highlight, QColor("#6366F1"))
    palette.setColor(QPalette.HighlightedText, QColor("#FFFFFF"))
    app.setPalette(palette)


def load_styles(app: QApplication) -> None:
    qss_path = Path(__file__).resolve().parent / "ui" / "styles.qss"
    if qss_path.exists():
        app.setStyleSheet(qss_path.read_text(encoding="utf-8"))


def main() -> None:
    setup_logging()
    app = QApplication(sys.argv)
    try:
        init_db()
    except Exception as exc:  # noqa: BLE001
        QMessageBox.critical(None, "DB error", str(exc))
        return

    clock = SystemClock()

    def defaults():
        return default_state(clock.today(), clock.now(), seed_demo_data=SETTINGS.seed_demo_data)

    repository = StateRepository(defaults=defaults)
    store = StateStore.open(repository, defaults, strict=SETTINGS.strict_ids)
    services = build_services(store, clock)

    app.setStyle(QStyleFactory.create("Fusion"))
    app.setFont(QFont("Segoe UI", 10))
    _apply_palette(app, store.snapshot.is_dark_mode)
    load_styles(app)
    dark_mode = [store.snapshot.is_dark_mode]

    def on_state(state) -> None:
        if state.is_dark_mode != dark_mode[0]:
            dark_mode[0] = state.is_dark_mode
            _apply_palette(app, state.is_dark_mode)

    store.subscribe(on_state)

    window = MainWindow(services)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
