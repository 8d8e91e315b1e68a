"""
Till Projections — Sales Summary Read Model
==============================================
End-of-day sales summary built from ledger events.

Built from events:
- ledger.receipt.completed.v1
- ledger.receipt.duplicated.v1
- ledger.receipt.voided.v1
- ledger.receipt.refunded.v1

Voided receipts stay listed but do not count as sales. Refunded
receipts disappear, as they do from the ledger. Duplicates count
toward total_sales and sale_count but are kept out of cash_sales and
credit_sales and reported as duplicate_sales, so cash_sales
reconciles with the drawer.
"""

from __future__ import annotations

from collections import OrderedDict, defaultdict
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from threading import Lock
from typing import Any, Dict, Iterable, List, Optional

from core.events.dispatcher import DomainEvent, EventDispatcher
from core.primitives.money import ZERO, quantize_money
from engines.ledger.events import (
    LEDGER_RECEIPT_COMPLETED_V1,
    LEDGER_RECEIPT_DUPLICATED_V1,
    LEDGER_RECEIPT_REFUNDED_V1,
    LEDGER_RECEIPT_VOIDED_V1,
)

STATUS_ACTIVE = "ACTIVE"
STATUS_VOIDED = "VOIDED"


@dataclass
class ReceiptLine:
    receipt_id: str
    employee_id: str
    payment_method: str
    total: Decimal
    created_at: Optional[datetime]
    status: str = STATUS_ACTIVE
    voided_by: Optional[str] = None
    void_reason: Optional[str] = None
    duplicated_from: Optional[str] = None


@dataclass(frozen=True)
class SalesSummary:
    total_sales: Decimal
    cash_sales: Decimal
    credit_sales: Decimal
    duplicate_sales: Decimal
    sale_count: int
    sales_by_employee: Dict[str, Decimal]
    voided: List[ReceiptLine]
    sales_log: List[ReceiptLine]
    cash_in_register: Optional[Decimal] = None

    def to_dict(self) -> dict:
        return {
            "total_sales": str(quantize_money(self.total_sales)),
            "cash_sales": str(quantize_money(self.cash_sales)),
            "credit_sales": str(quantize_money(self.credit_sales)),
            "duplicate_sales": str(quantize_money(self.duplicate_sales)),
            "sale_count": self.sale_count,
            "cash_in_register": (
                None if self.cash_in_register is None
                else str(quantize_money(self.cash_in_register))
            ),
            "sales_by_employee": {
                employee_id: str(quantize_money(amount))
                for employee_id, amount in self.sales_by_employee.items()
            },
            "voided": [
                {
                    "receipt_id": line.receipt_id,
                    "total": str(quantize_money(line.total)),
                    "voided_by": line.voided_by,
                    "reason": line.void_reason,
                }
                for line in self.voided
            ],
            "sales_log": [
                {
                    "receipt_id": line.receipt_id,
                    "total": str(quantize_money(line.total)),
                    "created_at": (
                        line.created_at.isoformat() if line.created_at else None
                    ),
                    "employee_id": line.employee_id,
                    "payment_method": line.payment_method,
                    "duplicated_from": line.duplicated_from,
                }
                for line in self.sales_log
            ],
        }


class SalesSummaryProjection:
    """
    Usage:
        projection = SalesSummaryProjection()
        projection.subscribe(event_dispatcher)
        projection.summary(cash_in_register=drawer.balance)
    """

    projection_name = "sales_summary"

    def __init__(self) -> None:
        self._lock = Lock()
        self._receipts: "OrderedDict[str, ReceiptLine]" = OrderedDict()

    def subscribe(self, dispatcher: EventDispatcher) -> None:
        for event_type in (
            LEDGER_RECEIPT_COMPLETED_V1,
            LEDGER_RECEIPT_DUPLICATED_V1,
            LEDGER_RECEIPT_VOIDED_V1,
            LEDGER_RECEIPT_REFUNDED_V1,
        ):
            dispatcher.subscribe(event_type, self.handle, self.projection_name)

    def handle(self, event: DomainEvent) -> None:
        self.apply(event.event_type, event.payload)

    def apply(self, event_type: str, payload: Dict[str, Any]) -> None:
        receipt_id = payload.get("receipt_id", "")

        with self._lock:
            if event_type in (
                LEDGER_RECEIPT_COMPLETED_V1, LEDGER_RECEIPT_DUPLICATED_V1,
            ):
                self._receipts[receipt_id] = ReceiptLine(
                    receipt_id=receipt_id,
                    employee_id=payload.get("employee_id", ""),
                    payment_method=payload.get("payment_method", ""),
                    total=Decimal(str(payload.get("total", 0))),
                    created_at=payload.get("created_at"),
                    duplicated_from=payload.get("duplicated_from"),
                )

            elif event_type == LEDGER_RECEIPT_VOIDED_V1:
                line = self._receipts.get(receipt_id)
                if line is not None:
                    line.status = STATUS_VOIDED
                    line.voided_by = payload.get("voided_by")
                    line.void_reason = payload.get("reason")

            elif event_type == LEDGER_RECEIPT_REFUNDED_V1:
                self._receipts.pop(receipt_id, None)

    def rebuild(self, events: Iterable[DomainEvent]) -> None:
        """Truncate and replay, e.g. from EventDispatcher.events()."""
        self.truncate()
        for event in events:
            self.apply(event.event_type, event.payload)

    def truncate(self) -> None:
        with self._lock:
            self._receipts.clear()

    def summary(self, cash_in_register: Optional[Decimal] = None) -> SalesSummary:
        with self._lock:
            lines = list(self._receipts.values())

        sales = [line for line in lines if line.status == STATUS_ACTIVE]
        originals = [line for line in sales if line.duplicated_from is None]
        by_employee: Dict[str, Decimal] = defaultdict(lambda: ZERO)
        for line in sales:
            by_employee[line.employee_id] += line.total

        return SalesSummary(
            total_sales=sum((line.total for line in sales), ZERO),
            cash_sales=sum(
                (line.total for line in originals if line.payment_method == "cash"),
                ZERO,
            ),
            credit_sales=sum(
                (line.total for line in originals if line.payment_method == "credit"),
                ZERO,
            ),
            duplicate_sales=sum(
                (line.total for line in sales if line.duplicated_from is not None),
                ZERO,
            ),
            sale_count=len(sales),
            sales_by_employee=dict(by_employee),
            voided=[line for line in lines if line.status == STATUS_VOIDED],
            sales_log=sales,
            cash_in_register=cash_in_register,
        )
