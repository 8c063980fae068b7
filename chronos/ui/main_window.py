from __future__ import annotations

import logging
from pathlib import Path

from PySide6.QtCore import Qt
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QComboBox,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMessageBox,
    QPushButton,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from chronos.domain.entities import AppState
from chronos.domain.enums import RecurrenceType, TaskStatus
from chronos.domain.filters import TaskFilters
from chronos.services.container import Services
from chronos.services.errors import ReportError
from chronos.services.report_service import format_minutes

from .accrual_timer import AccrualTimer
from .dialogs import BillDialog, PasscodeDialog, ReminderDialog, TaskDialog, clone_template

logger = logging.getLogger(__name__)

ALL_TYPES = "All"
ADMIN_TAB = 5


def _button(text: str, handler, variant: str | None = None) -> QPushButton:
    button = QPushButton(text)
    if variant:
        button.setProperty("variant", variant)
    button.clicked.connect(handler)
    return button


def _selected_id(list_widget: QListWidget) -> str | None:
    item = list_widget.currentItem()
    return item.data(Qt.UserRole) if item else None


class MainWindow(QWidget):
    def __init__(self, services: Services):
        super().__init__()
        self.services = services
        self.resize(1100, 720)

        self.accrual = AccrualTimer(services.store, services.timer, self)

        self.tabs = QTabWidget()
        self.tabs.addTab(self._build_dashboard(), "Dashboard")
        self.tabs.addTab(self._build_tasks(), "Tasks")
        self.tabs.addTab(self._build_bills(), "Utilities")
        self.tabs.addTab(self._build_reminders(), "Reminders")
        self.tabs.addTab(self._build_reports(), "Reports")
        self.tabs.addTab(self._build_admin(), "Admin")
        self.tabs.currentChanged.connect(self.on_tab_changed)
        self._last_tab = 0

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.addWidget(self.tabs)

        self._unsubscribe = services.store.subscribe(lambda state: self.refresh(state))
        self.refresh(services.store.snapshot)

        QShortcut(QKeySequence("Ctrl+N"), self, self.new_task)

    # ---- layout ----

    def _build_dashboard(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        self.dashboard_label = QLabel()
        self.dashboard_label.setObjectName("DashboardStats")
        self.active_list = QListWidget()
        layout.addWidget(self.dashboard_label)
        layout.addWidget(QLabel("In progress"))
        layout.addWidget(self.active_list)
        return page

    def _build_tasks(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)

        filters = QHBoxLayout()
        self.type_filter = QComboBox()
        self.type_filter.addItem(ALL_TYPES, None)
        for recurrence in RecurrenceType:
            self.type_filter.addItem(recurrence.value, recurrence)
        self.type_filter.currentIndexChanged.connect(lambda _index: self.refresh_tasks())
        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Search title or category")
        self.search_input.textChanged.connect(lambda _text: self.refresh_tasks())
        filters.addWidget(self.type_filter)
        filters.addWidget(self.search_input, 1)

        self.task_list = QListWidget()
        self.task_list.setObjectName("TaskList")

        buttons = QHBoxLayout()
        self.new_task_button = _button("New", self.new_task)
        self.start_button = _button("Start", self.start_task)
        self.pause_button = _button("Pause", self.pause_task, "secondary")
        self.complete_button = _button("Complete", self.complete_task)
        self.reopen_button = _button("Reopen", self.reopen_task, "secondary")
        self.clone_button = _button("Clone", self.clone_task, "ghost")
        self.delete_button = _button("Delete", self.delete_task, "danger")
        for button in (
            self.new_task_button,
            self.start_button,
            self.pause_button,
            self.complete_button,
            self.reopen_button,
            self.clone_button,
            self.delete_button,
        ):
            buttons.addWidget(button)

        layout.addLayout(filters)
        layout.addWidget(self.task_list)
        layout.addLayout(buttons)
        return page

    def _build_bills(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        self.bill_list = QListWidget()
        buttons = QHBoxLayout()
        self.add_bill_button = _button("Add bill", self.add_bill)
        self.toggle_bill_button = _button("Paid / Pending", self.toggle_bill)
        self.clone_bill_button = _button("Clone", self.clone_bill, "ghost")
        self.delete_bill_button = _button("Delete", self.delete_bill, "danger")
        for button in (
            self.add_bill_button,
            self.toggle_bill_button,
            self.clone_bill_button,
            self.delete_bill_button,
        ):
            buttons.addWidget(button)
        layout.addWidget(self.bill_list)
        layout.addLayout(buttons)
        return page

    def _build_reminders(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        self.reminder_list = QListWidget()
        buttons = QHBoxLayout()
        self.add_reminder_button = _button("New reminder", self.add_reminder)
        self.instantiate_button = _button("Create task", self.instantiate_reminder)
        self.delete_reminder_button = _button("Delete", self.delete_reminder, "danger")
        buttons.addWidget(self.add_reminder_button)
        buttons.addWidget(self.instantiate_button)
        buttons.addWidget(self.delete_reminder_button)
        layout.addWidget(self.reminder_list)
        layout.addLayout(buttons)
        return page

    def _build_reports(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        self.report_label = QLabel()
        self.export_button = _button("Export CSV", self.export_csv)
        layout.addWidget(self.report_label)
        layout.addWidget(self.export_button, alignment=Qt.AlignLeft)
        layout.addStretch()
        return page

    def _build_admin(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        self.user_list = QListWidget()
        self.audit_list = QListWidget()
        buttons = QHBoxLayout()
        self.switch_user_button = _button("Act as user", self.switch_user)
        self.suspend_button = _button("Suspend / Restore", self.toggle_suspended, "secondary")
        self.dark_mode_button = _button("Toggle dark mode", self.toggle_dark_mode, "ghost")
        self.reset_button = _button("Reset data", self.reset_data, "danger")
        self.lock_button = _button("Lock", self.lock_admin, "ghost")
        for button in (
            self.switch_user_button,
            self.suspend_button,
            self.dark_mode_button,
            self.reset_button,
            self.lock_button,
        ):
            buttons.addWidget(button)
        layout.addWidget(QLabel("Users"))
        layout.addWidget(self.user_list)
        layout.addWidget(QLabel("Audit trail"))
        layout.addWidget(self.audit_list)
        layout.addLayout(buttons)
        return page

    # ---- rendering ----

    def refresh(self, state: AppState) -> None:
        self.setWindowTitle(state.settings.branding.app_name)
        self.refresh_tasks()
        self._render_dashboard()
        self._render_bills(state)
        self._render_reminders(state)
        self._render_reports()
        self._render_admin(state)
        self._apply_permissions(state)

    def refresh_tasks(self) -> None:
        selected = _selected_id(self.task_list)
        filters = TaskFilters(
            recurrence=self.type_filter.currentData(),
            search=self.search_input.text().strip() or None,
        )
        self.task_list.clear()
        for task in self.services.tasks.list_tasks(filters):
            text = (
                f"{task.title} • {task.category} • {task.priority.value} • {task.status.value} • "
                f"{format_minutes(task.actual_time)} / {format_minutes(task.estimated_time)}"
            )
            item = QListWidgetItem(text)
            item.setData(Qt.UserRole, task.id)
            self.task_list.addItem(item)
            if task.id == selected:
                self.task_list.setCurrentItem(item)

    def _render_dashboard(self) -> None:
        stats = self.services.reports.dashboard()
        self.dashboard_label.setText(
            f"Today: {len(stats.today_tasks)} • Completed today: {stats.completed_today} • "
            f"Productivity: {stats.productivity}% • Pending bills: {stats.pending_bills}"
        )
        self.active_list.clear()
        for task in stats.in_progress:
            self.active_list.addItem(f"{task.title} • {format_minutes(task.actual_time)}")

    def _render_bills(self, state: AppState) -> None:
        selected = _selected_id(self.bill_list)
        self.bill_list.clear()
        for bill in state.bills:
            item = QListWidgetItem(
                f"{bill.bill_type} • {bill.reference_number} • {bill.location} • "
                f"{bill.due_date.strftime('%b %d, %Y')} • {bill.amount:,.0f} • {bill.status.value}"
            )
            item.setData(Qt.UserRole, bill.id)
            self.bill_list.addItem(item)
            if bill.id == selected:
                self.bill_list.setCurrentItem(item)

    def _render_reminders(self, state: AppState) -> None:
        selected = _selected_id(self.reminder_list)
        self.reminder_list.clear()
        for reminder in state.reminders:
            item = QListWidgetItem(
                f"{reminder.display_id} • {reminder.title} • {reminder.category} • "
                f"{format_minutes(reminder.estimated_time)}"
            )
            item.setData(Qt.UserRole, reminder.id)
            self.reminder_list.addItem(item)
            if reminder.id == selected:
                self.reminder_list.setCurrentItem(item)

    def _render_reports(self) -> None:
        summary = self.services.reports.summary()
        efficiency = f"{summary.efficiency}%" if summary.efficiency is not None else "N/A"
        self.report_label.setText(
            f"Total tasks: {summary.total_tasks}\n"
            f"Completed: {summary.completed}\n"
            f"Pending: {summary.pending}\n"
            f"Total tracked: {format_minutes(summary.total_tracked)}\n"
            f"Efficiency: {efficiency}\n"
            f"Paid utilities: {summary.paid_bills_total:,.0f}\n"
            f"Pending bills: {summary.pending_bills_total:,.0f}"
        )

    def _render_admin(self, state: AppState) -> None:
        selected = _selected_id(self.user_list)
        self.user_list.clear()
        for user in state.users:
            marker = " (current)" if user.id == state.current_user_id else ""
            suspended = " [suspended]" if user.suspended else ""
            item = QListWidgetItem(f"{user.name} • {user.email} • {user.role.value}{marker}{suspended}")
            item.setData(Qt.UserRole, user.id)
            self.user_list.addItem(item)
            if user.id == selected:
                self.user_list.setCurrentItem(item)
        self.audit_list.clear()
        for entry in state.audit_logs:
            self.audit_list.addItem(
                f"{entry.timestamp.astimezone():%Y-%m-%d %H:%M} • {entry.user_name} • {entry.module} • {entry.action}"
            )

    def _apply_permissions(self, state: AppState) -> None:
        perms = self.services.users.current_permissions()
        modules = state.settings.modules
        self.tabs.setTabVisible(0, modules.dashboard)
        self.tabs.setTabVisible(1, modules.tasks and perms.view_tasks)
        self.tabs.setTabVisible(2, modules.utilities and perms.manage_bills)
        self.tabs.setTabVisible(3, modules.reminders and perms.edit_tasks)
        self.tabs.setTabVisible(4, modules.reports)
        self.tabs.setTabVisible(ADMIN_TAB, perms.manage_users or perms.manage_settings)
        for button in (self.new_task_button, self.clone_button, self.delete_button, self.reopen_button):
            button.setEnabled(perms.edit_tasks)
        for button in (self.start_button, self.pause_button, self.complete_button):
            button.setEnabled(perms.start_timer)
        self.export_button.setEnabled(perms.download_reports)
        for button in (self.switch_user_button, self.suspend_button):
            button.setEnabled(perms.manage_users)
        self.reset_button.setEnabled(perms.manage_settings)

    # ---- task actions ----

    def new_task(self) -> None:
        dialog = TaskDialog(self)
        if dialog.exec():
            self.services.tasks.add_task(dialog.data())

    def start_task(self) -> None:
        if task_id := _selected_id(self.task_list):
            self.services.tasks.start_task(task_id)

    def pause_task(self) -> None:
        if task_id := _selected_id(self.task_list):
            self.services.tasks.pause_task(task_id)

    def complete_task(self) -> None:
        if task_id := _selected_id(self.task_list):
            self.services.tasks.complete_task(task_id)

    def reopen_task(self) -> None:
        task_id = _selected_id(self.task_list)
        task = self.services.tasks.get_task(task_id) if task_id else None
        if task and task.status == TaskStatus.COMPLETED:
            self.services.tasks.reopen_task(task_id)

    def clone_task(self) -> None:
        if task_id := _selected_id(self.task_list):
            self.services.tasks.clone_task(task_id)

    def delete_task(self) -> None:
        task_id = _selected_id(self.task_list)
        if task_id is None:
            return
        confirm = QMessageBox.question(self, "Confirm", "Delete this task?")
        if confirm != QMessageBox.Yes:
            return
        self.services.tasks.delete_task(task_id)

    # ---- bill actions ----

    def add_bill(self) -> None:
        dialog = BillDialog(parent=self)
        if dialog.exec():
            self.services.bills.add_bill(dialog.data())

    def toggle_bill(self) -> None:
        if bill_id := _selected_id(self.bill_list):
            self.services.bills.toggle_paid(bill_id)

    def clone_bill(self) -> None:
        bill_id = _selected_id(self.bill_list)
        bill = self.services.bills.get_bill(bill_id) if bill_id else None
        if bill is None:
            return
        dialog = BillDialog(clone_template(bill), self)
        if dialog.exec():
            self.services.bills.clone_bill(bill_id, dialog.data())

    def delete_bill(self) -> None:
        if bill_id := _selected_id(self.bill_list):
            self.services.bills.delete_bill(bill_id)

    # ---- reminder actions ----

    def add_reminder(self) -> None:
        dialog = ReminderDialog(self)
        if dialog.exec():
            self.services.reminders.add_reminder(dialog.data())

    def instantiate_reminder(self) -> None:
        if reminder_id := _selected_id(self.reminder_list):
            self.services.reminders.instantiate(reminder_id)

    def delete_reminder(self) -> None:
        if reminder_id := _selected_id(self.reminder_list):
            self.services.reminders.delete_reminder(reminder_id)

    # ---- reports ----

    def export_csv(self) -> None:
        path, _ = QFileDialog.getSaveFileName(
            self,
            "Export CSV",
            str(Path.home() / "chronos_report.csv"),
            "CSV Files (*.csv)",
        )
        if not path:
            return
        try:
            self.services.reports.export_csv(path)
        except ReportError as exc:
            QMessageBox.warning(self, "Export failed", str(exc))
            return
        QMessageBox.information(self, "Done", "CSV report saved.")

    # ---- admin ----

    def on_tab_changed(self, index: int) -> None:
        if index != ADMIN_TAB:
            self._last_tab = index
            return
        if self.services.admin.is_unlocked:
            return
        if not PasscodeDialog(self.services.admin, self).exec():
            self.tabs.setCurrentIndex(self._last_tab)

    def lock_admin(self) -> None:
        self.services.admin.lock()
        self.tabs.setCurrentIndex(self._last_tab)

    def switch_user(self) -> None:
        user_id = _selected_id(self.user_list)
        if user_id and not self.services.users.switch_user(user_id):
            QMessageBox.warning(self, "Not allowed", "This user is suspended.")

    def toggle_suspended(self) -> None:
        user_id = _selected_id(self.user_list)
        user = self.services.users.get_user(user_id) if user_id else None
        if user is None:
            return
        try:
            self.services.users.update_user(user.id, {"suspended": not user.suspended})
        except ValueError as exc:
            QMessageBox.warning(self, "Not allowed", str(exc))

    def toggle_dark_mode(self) -> None:
        self.services.settings.toggle_dark_mode()

    def reset_data(self) -> None:
        confirm = QMessageBox.question(self, "Confirm", "Reset all data?")
        if confirm != QMessageBox.Yes:
            return
        self.services.store.reset()
        logger.info("Data reset from admin screen")

    def closeEvent(self, event) -> None:
        self._unsubscribe()
        self.accrual.shutdown()
        super().closeEvent(event)
