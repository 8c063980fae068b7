from __future__ import annotations

from dataclasses import replace
from datetime import date

from PySide6.QtCore import QDate
from PySide6.QtWidgets import (
    QComboBox,
    QDateEdit,
    QDialog,
    QDialogButtonBox,
    QDoubleSpinBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QMessageBox,
    QSpinBox,
    QVBoxLayout,
)

from chronos.domain.defaults import CAMPUSES, CATEGORIES
from chronos.domain.entities import UtilityBill
from chronos.domain.enums import BillStatus, Priority, RecurrenceType, ReminderCadence
from chronos.services.access import AdminGate


def current_month(today: date | None = None) -> str:
    return (today or date.today()).strftime("%B %Y")


def clone_template(bill: UtilityBill, today: date | None = None) -> UtilityBill:
    """Pre-fill for a cloned bill: same payee, this month, unpaid."""
    return replace(bill, status=BillStatus.PENDING, month=current_month(today))


def _combo(values: list[str], current: str | None = None) -> QComboBox:
    combo = QComboBox()
    for value in values:
        combo.addItem(value, value)
    if current is not None:
        index = combo.findData(current)
        if index >= 0:
            combo.setCurrentIndex(index)
    return combo


def _date_edit(value: date) -> QDateEdit:
    edit = QDateEdit()
    edit.setCalendarPopup(True)
    edit.setDisplayFormat("dd.MM.yyyy")
    edit.setDate(QDate(value.year, value.month, value.day))
    return edit


class _FormDialog(QDialog):
    def __init__(self, title: str, parent=None):
        super().__init__(parent)
        self.setWindowTitle(title)
        self.form = QFormLayout()

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self._on_accept)
        buttons.rejected.connect(self.reject)

        layout = QVBoxLayout(self)
        layout.addLayout(self.form)
        layout.addWidget(buttons)

    def _validate(self) -> str | None:
        return None

    def _on_accept(self) -> None:
        problem = self._validate()
        if problem:
            QMessageBox.warning(self, "Missing data", problem)
            return
        self.accept()


class TaskDialog(_FormDialog):
    def __init__(self, parent=None):
        super().__init__("New Task", parent)
        self.title_input = QLineEdit()
        self.category_combo = _combo(CATEGORIES)
        self.priority_combo = _combo([p.value for p in Priority], Priority.MEDIUM.value)
        self.estimate_input = QSpinBox()
        self.estimate_input.setRange(0, 24 * 60)
        self.estimate_input.setValue(30)
        self.recurrence_combo = _combo([r.value for r in RecurrenceType])
        self.due_input = _date_edit(date.today())

        self.form.addRow("Title", self.title_input)
        self.form.addRow("Category", self.category_combo)
        self.form.addRow("Priority", self.priority_combo)
        self.form.addRow("Estimate (min)", self.estimate_input)
        self.form.addRow("Recurrence", self.recurrence_combo)
        self.form.addRow("Due date", self.due_input)

    def _validate(self) -> str | None:
        if not self.title_input.text().strip():
            return "Enter a task title."
        return None

    def data(self) -> dict:
        return {
            "title": self.title_input.text().strip(),
            "category": self.category_combo.currentData(),
            "priority": self.priority_combo.currentData(),
            "estimated_time": self.estimate_input.value(),
            "recurrence": self.recurrence_combo.currentData(),
            "due_date": self.due_input.date().toPython(),
        }


class ReminderDialog(_FormDialog):
    def __init__(self, parent=None):
        super().__init__("New Reminder", parent)
        self.title_input = QLineEdit()
        self.category_combo = _combo(CATEGORIES)
        self.priority_combo = _combo([p.value for p in Priority], Priority.MEDIUM.value)
        self.estimate_input = QSpinBox()
        self.estimate_input.setRange(0, 24 * 60)
        self.estimate_input.setValue(30)
        self.cadence_combo = _combo([c.value for c in ReminderCadence])

        self.form.addRow("Title", self.title_input)
        self.form.addRow("Category", self.category_combo)
        self.form.addRow("Priority", self.priority_combo)
        self.form.addRow("Estimate (min)", self.estimate_input)
        self.form.addRow("Cadence", self.cadence_combo)

    def _validate(self) -> str | None:
        if not self.title_input.text().strip():
            return "Enter a reminder title."
        return None

    def data(self) -> dict:
        return {
            "title": self.title_input.text().strip(),
            "category": self.category_combo.currentData(),
            "priority": self.priority_combo.currentData(),
            "estimated_time": self.estimate_input.value(),
            "cadence": self.cadence_combo.currentData(),
        }


class BillDialog(_FormDialog):
    def __init__(self, bill: UtilityBill | None = None, parent=None):
        super().__init__("Utility Bill", parent)
        self.type_input = QLineEdit(bill.bill_type if bill else "")
        self.location_combo = _combo(CAMPUSES, bill.location if bill else None)
        self.reference_input = QLineEdit(bill.reference_number if bill else "")
        self.contact_input = QLineEdit((bill.contact_number or "") if bill else "")
        self.month_input = QLineEdit(bill.month if bill else current_month())
        self.due_input = _date_edit(bill.due_date if bill else date.today())
        self.amount_input = QDoubleSpinBox()
        self.amount_input.setRange(0, 10_000_000)
        self.amount_input.setDecimals(2)
        self.amount_input.setValue(bill.amount if bill else 0)

        self.form.addRow("Utility type", self.type_input)
        self.form.addRow("Location", self.location_combo)
        self.form.addRow("Reference #", self.reference_input)
        self.form.addRow("Contact #", self.contact_input)
        self.form.addRow("Month", self.month_input)
        self.form.addRow("Due date", self.due_input)
        self.form.addRow("Amount", self.amount_input)

    def _validate(self) -> str | None:
        if not self.type_input.text().strip() or not self.reference_input.text().strip():
            return "Utility type and reference number are required."
        return None

    def data(self) -> dict:
        return {
            "bill_type": self.type_input.text().strip(),
            "location": self.location_combo.currentData(),
            "reference_number": self.reference_input.text().strip(),
            "contact_number": self.contact_input.text().strip() or None,
            "month": self.month_input.text().strip(),
            "due_date": self.due_input.date().toPython(),
            "amount": self.amount_input.value(),
        }


class PasscodeDialog(QDialog):
    """Asks for the admin passcode until it matches or the user cancels."""

    def __init__(self, gate: AdminGate, parent=None):
        super().__init__(parent)
        self.gate = gate
        self.setWindowTitle("Admin access")

        self.code_input = QLineEdit()
        self.code_input.setEchoMode(QLineEdit.Password)
        self.error_label = QLabel("")
        self.error_label.setObjectName("PasscodeError")

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self._try_unlock)
        buttons.rejected.connect(self.reject)

        layout = QVBoxLayout(self)
        layout.addWidget(QLabel("Enter admin passcode"))
        layout.addWidget(self.code_input)
        layout.addWidget(self.error_label)
        layout.addWidget(buttons)

    def _try_unlock(self) -> None:
        if self.gate.unlock(self.code_input.text()):
            self.accept()
            return
        self.error_label.setText("Incorrect passcode, try again.")
        self.code_input.clear()
        self.code_input.setFocus()
