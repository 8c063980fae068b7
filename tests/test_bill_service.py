from __future__ import annotations

from datetime import date

import pytest

from chronos.domain.enums import BillStatus


def _bill(**overrides) -> dict:
    data = {
        "bill_type": "K-Electric",
        "location": "Main Campus",
        "reference_number": "0400030577440",
        "month": "May 2024",
        "due_date": "2024-05-18",
        "amount": 15400,
    }
    data.update(overrides)
    return data


def test_add_bill_prepends_and_audits(services) -> None:
    services.bills.add_bill(_bill(bill_type="PTCL"))
    bill = services.bills.add_bill(_bill())

    state = services.store.snapshot
    assert state.bills[0] == bill
    assert bill.status == BillStatus.PENDING
    assert bill.due_date == date(2024, 5, 18)
    assert state.audit_logs[0].action == "Added bill: K-Electric (Main Campus)"
    assert state.audit_logs[0].module == "Utilities"


def test_clone_copies_fields_with_pending_status(services) -> None:
    bill = services.bills.add_bill(_bill(status="Paid", contact_number="021-34613474"))

    clone = services.bills.clone_bill(bill.id)

    assert clone.id != bill.id
    assert clone.status == BillStatus.PENDING
    assert (clone.bill_type, clone.location, clone.reference_number, clone.contact_number) == (
        bill.bill_type,
        bill.location,
        bill.reference_number,
        bill.contact_number,
    )
    assert (clone.month, clone.due_date, clone.amount) == (bill.month, bill.due_date, bill.amount)


def test_clone_accepts_overrides(services) -> None:
    bill = services.bills.add_bill(_bill())

    clone = services.bills.clone_bill(bill.id, {"month": "June 2024", "due_date": "2024-06-18"})

    assert clone.month == "June 2024"
    assert clone.due_date == date(2024, 6, 18)


def test_update_deleted_bill_is_a_no_op(services) -> None:
    bill = services.bills.add_bill(_bill())
    services.bills.delete_bill(bill.id)
    before = services.store.snapshot

    result = services.bills.update_bill(bill.id, {"status": "Paid"})

    assert result is None
    assert services.store.snapshot is before


def test_toggle_paid(services) -> None:
    bill = services.bills.add_bill(_bill())

    assert services.bills.toggle_paid(bill.id).status == BillStatus.PAID
    assert services.bills.toggle_paid(bill.id).status == BillStatus.PENDING


def test_only_add_is_audited(services) -> None:
    bill = services.bills.add_bill(_bill())
    services.bills.update_bill(bill.id, {"amount": 100})
    services.bills.clone_bill(bill.id)
    services.bills.delete_bill(bill.id)

    assert len(services.store.snapshot.audit_logs) == 1


def test_negative_amount_is_rejected(services) -> None:
    with pytest.raises(ValueError):
        services.bills.add_bill(_bill(amount=-1))


def test_list_bills_by_status(services) -> None:
    services.bills.add_bill(_bill(status="Paid"))
    services.bills.add_bill(_bill())

    assert len(services.bills.list_bills(BillStatus.PAID)) == 1
    assert len(services.bills.list_bills("Pending")) == 1
