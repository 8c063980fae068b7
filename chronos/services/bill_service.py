from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date

from chronos.domain.entities import AppState, UtilityBill
from chronos.domain.enums import BillStatus

from .audit import with_audit
from .clock import Clock, SystemClock
from .store import StateStore, check_fields, new_id, replace_item

logger = logging.getLogger(__name__)

MODULE = "Utilities"


class BillService:
    def __init__(self, store: StateStore, clock: Clock | None = None) -> None:
        self._store = store
        self._clock = clock or SystemClock()

    def list_bills(self, status: BillStatus | None = None) -> list[UtilityBill]:
        bills = self._store.snapshot.bills
        if status is None:
            return list(bills)
        return [b for b in bills if b.status == BillStatus(status)]

    def get_bill(self, bill_id: str) -> UtilityBill | None:
        return self._store.snapshot.find_bill(bill_id)

    def add_bill(self, data: dict) -> UtilityBill:
        draft = self._normalize_data(data)
        check_fields(UtilityBill, draft)
        bill = UtilityBill(id=new_id(), **draft)
        now = self._clock.now()

        def mutate(state: AppState) -> AppState:
            state = replace(state, bills=(bill,) + state.bills)
            return with_audit(state, now, f"Added bill: {bill.bill_type} ({bill.location})", MODULE)

        self._store.apply(mutate)
        logger.info("Bill created id=%s ref=%s", bill.id, bill.reference_number)
        return bill

    def update_bill(self, bill_id: str, data: dict) -> UtilityBill | None:
        changes = self._normalize_data(data)
        check_fields(UtilityBill, changes)

        def mutate(state: AppState) -> AppState:
            bill = state.find_bill(bill_id)
            if bill is None:
                self._store.missing("Bill", bill_id)
                return state
            return replace(state, bills=replace_item(state.bills, bill_id, replace(bill, **changes)))

        return self._store.apply(mutate).find_bill(bill_id)

    def toggle_paid(self, bill_id: str) -> UtilityBill | None:
        bill = self.get_bill(bill_id)
        if bill is None:
            self._store.missing("Bill", bill_id)
            return None
        status = BillStatus.PENDING if bill.status == BillStatus.PAID else BillStatus.PAID
        return self.update_bill(bill_id, {"status": status})

    def delete_bill(self, bill_id: str) -> None:
        def mutate(state: AppState) -> AppState:
            if state.find_bill(bill_id) is None:
                self._store.missing("Bill", bill_id)
                return state
            return replace(state, bills=tuple(b for b in state.bills if b.id != bill_id))

        self._store.apply(mutate)

    def clone_bill(self, bill_id: str, overrides: dict | None = None) -> UtilityBill | None:
        """Copy a bill under a new id with status reset to Pending; ``overrides`` e.g. a new month."""
        changes = self._normalize_data(overrides or {})
        check_fields(UtilityBill, changes)
        created: list[UtilityBill] = []

        def mutate(state: AppState) -> AppState:
            source = state.find_bill(bill_id)
            if source is None:
                self._store.missing("Bill", bill_id)
                return state
            clone = replace(source, **{**changes, "id": new_id(), "status": BillStatus.PENDING})
            created.append(clone)
            return replace(state, bills=(clone,) + state.bills)

        self._store.apply(mutate)
        return created[0] if created else None

    @staticmethod
    def _normalize_data(data: dict) -> dict:
        normalized = dict(data)
        if "status" in normalized:
            normalized["status"] = BillStatus(normalized["status"])
        if isinstance(normalized.get("due_date"), str):
            normalized["due_date"] = date.fromisoformat(normalized["due_date"])
        return normalized
