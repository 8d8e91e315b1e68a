"""
Till Ledger Engine — Transaction Ledger
==========================================
Receipts and their post-sale corrections.

State per receipt:
    ACTIVE → VOIDED            void(): reverse stock and cash, annotate
    ACTIVE | VOIDED → removed  refund(): reverse (unless voided), remove

A duplicate never moved stock or cash, so voiding or refunding one
only annotates or removes the record.

RULES:
- complete() is the only path that creates a sale receipt
- duplicate() creates a record, never a sale: no stock, no cash
- A receipt is reversed at most once
- Locks are taken ledger → catalog → drawer
"""

from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from dataclasses import replace
from threading import RLock
from typing import Dict, List, Optional

from core.commands.errors import (
    AlreadyVoided,
    InsufficientDrawerBalance,
    NotAuthenticated,
    NotFound,
    ValidationError,
)
from core.events.dispatcher import EventDispatcher
from core.time.clock import Clock, SystemClock
from engines.cash.services import CashDrawer
from engines.catalog.services import Catalog
from engines.ledger.events import (
    LEDGER_RECEIPT_COMPLETED_V1,
    LEDGER_RECEIPT_DUPLICATED_V1,
    LEDGER_RECEIPT_REFUNDED_V1,
    LEDGER_RECEIPT_VOIDED_V1,
    build_receipt_completed_payload,
    build_receipt_duplicated_payload,
    build_receipt_refunded_payload,
    build_receipt_voided_payload,
)
from engines.ledger.models import (
    PaymentMethod,
    Receipt,
    ReceiptMethod,
    VoidInfo,
    parse_enum,
)
from engines.order.services import OrderAggregate
from engines.pricing.services import compute_breakdown

logger = logging.getLogger("till.ledger")


class TransactionLedger:
    """
    Usage:
        ledger = TransactionLedger(catalog, drawer)
        receipt = ledger.complete(order, employee_id="emp-1",
                                  payment_method="cash")
        ledger.void(receipt.receipt_id, employee_id="emp-1", reason="typo")
    """

    def __init__(
        self,
        catalog: Catalog,
        drawer: CashDrawer,
        *,
        clock: Clock | None = None,
        event_dispatcher: EventDispatcher | None = None,
    ):
        self._lock = RLock()
        self._catalog = catalog
        self._drawer = drawer
        self._clock = clock or SystemClock()
        self._event_dispatcher = event_dispatcher
        self._receipts: "OrderedDict[str, Receipt]" = OrderedDict()

    @property
    def lock(self) -> RLock:
        return self._lock

    # ── queries ───────────────────────────────────────────────

    def get(self, receipt_id: str) -> Receipt:
        with self._lock:
            receipt = self._receipts.get(receipt_id)
        if receipt is None:
            raise NotFound("Receipt", receipt_id)
        return receipt

    def receipts(self) -> List[Receipt]:
        with self._lock:
            return list(self._receipts.values())

    def to_dict(self) -> Dict[str, dict]:
        return {r.receipt_id: r.to_dict() for r in self.receipts()}

    # ── sale ──────────────────────────────────────────────────

    def complete(
        self,
        order: OrderAggregate,
        *,
        employee_id: Optional[str],
        payment_method="cash",
        signature: Optional[str] = None,
        receipt_method="none",
        contact_info: Optional[str] = None,
    ) -> Receipt:
        """
        Turn the open order into a receipt.

        Prices the order from its current lines and configuration,
        appends the receipt, credits the drawer for cash, and settles
        the order (lines dropped, stock stays sold).
        """
        if not employee_id:
            raise NotAuthenticated("Log in to complete the checkout.")

        payment = parse_enum(PaymentMethod, payment_method, "payment_method")
        delivery = parse_enum(ReceiptMethod, receipt_method, "receipt_method")
        if delivery != ReceiptMethod.NONE and not (contact_info or "").strip():
            raise ValidationError(
                f"contact_info is required to send a receipt by {delivery.value}."
            )

        with self._lock:
            if order.is_empty:
                raise ValidationError("Cannot check out an empty order.")

            lines, config = order.snapshot()
            breakdown = compute_breakdown(lines, config)
            receipt = Receipt(
                receipt_id=self._next_id(),
                lines=lines,
                subtotal=breakdown.subtotal,
                discount_amount=breakdown.discount_amount,
                tax=breakdown.tax,
                gratuity=breakdown.gratuity,
                extra_charges=breakdown.extra_charges,
                total=breakdown.total,
                created_at=self._clock.now_utc(),
                employee_id=employee_id,
                payment_method=payment,
                signature=signature or None,
                receipt_method=delivery,
                contact_info=contact_info or None,
            )

            with self._drawer.lock:
                self._receipts[receipt.receipt_id] = receipt
                if receipt.is_cash:
                    self._drawer.credit(
                        receipt.total,
                        reference=receipt.receipt_id,
                        employee_id=employee_id,
                    )
            order.settle()

        logger.info(
            f"Receipt {receipt.receipt_id} completed by {employee_id}: "
            f"{receipt.total} ({payment.value})"
        )
        self._emit(
            LEDGER_RECEIPT_COMPLETED_V1,
            build_receipt_completed_payload(receipt),
            employee_id,
        )
        return receipt

    def duplicate(
        self, receipt_id: str, *, employee_id: Optional[str] = None,
    ) -> Receipt:
        """Clone a receipt as a new ACTIVE record. No stock or cash change."""
        with self._lock:
            source = self.get(receipt_id)
            copy = replace(
                source,
                receipt_id=self._next_id(),
                created_at=self._clock.now_utc(),
                void_info=None,
                duplicated_from=source.receipt_id,
            )
            self._receipts[copy.receipt_id] = copy

        logger.info(f"Receipt {receipt_id} duplicated as {copy.receipt_id}")
        self._emit(
            LEDGER_RECEIPT_DUPLICATED_V1,
            build_receipt_duplicated_payload(copy),
            employee_id,
        )
        return copy

    # ── corrections ───────────────────────────────────────────

    def void(
        self, receipt_id: str, *, employee_id: Optional[str], reason: str = "",
    ) -> Receipt:
        """
        Reverse a sale and keep the receipt with a void annotation.

        Raises:
            NotFound, AlreadyVoided, InsufficientDrawerBalance.
            Nothing changes when any of these is raised.
        """
        if not employee_id:
            raise NotAuthenticated("Log in to void a receipt.")

        with self._lock, self._catalog.lock, self._drawer.lock:
            receipt = self.get(receipt_id)
            if receipt.is_voided:
                raise AlreadyVoided(receipt_id)

            if not receipt.is_duplicate:
                self._reverse(receipt, employee_id)
            voided = receipt.with_void(
                VoidInfo(
                    voided_by=employee_id,
                    reason=reason,
                    voided_at=self._clock.now_utc(),
                )
            )
            self._receipts[receipt_id] = voided

        logger.info(f"Receipt {receipt_id} voided by {employee_id}: {reason!r}")
        self._emit(
            LEDGER_RECEIPT_VOIDED_V1,
            build_receipt_voided_payload(voided),
            employee_id,
        )
        return voided

    def refund(self, receipt_id: str, *, employee_id: Optional[str]) -> Receipt:
        """
        Reverse a sale and remove its receipt. A voided receipt was
        already reversed and a duplicate never sold anything, so
        either is only removed.
        """
        if not employee_id:
            raise NotAuthenticated("Log in to refund a receipt.")

        with self._lock, self._catalog.lock, self._drawer.lock:
            receipt = self.get(receipt_id)
            reversed_effects = not (receipt.is_voided or receipt.is_duplicate)
            if reversed_effects:
                self._reverse(receipt, employee_id)
            del self._receipts[receipt_id]

        logger.info(
            f"Receipt {receipt_id} refunded by {employee_id}: {receipt.total}"
            + ("" if reversed_effects else " (record only)")
        )
        self._emit(
            LEDGER_RECEIPT_REFUNDED_V1,
            build_receipt_refunded_payload(receipt, employee_id, reversed_effects),
            employee_id,
        )
        return receipt

    # ── internals ─────────────────────────────────────────────

    def _reverse(self, receipt: Receipt, employee_id: str) -> None:
        # Caller holds ledger, catalog and drawer locks.
        if receipt.is_cash and not self._drawer.can_debit(receipt.total):
            raise InsufficientDrawerBalance(self._drawer.balance, receipt.total)

        self._catalog.release_lines(receipt.lines)
        if receipt.is_cash:
            self._drawer.debit(
                receipt.total,
                reference=receipt.receipt_id,
                employee_id=employee_id,
            )

    def _next_id(self) -> str:
        return str(uuid.uuid4())

    def _emit(self, event_type: str, payload: dict, actor_id: Optional[str]) -> None:
        if self._event_dispatcher is None:
            return
        self._event_dispatcher.emit(
            event_type,
            payload,
            occurred_at=self._clock.now_utc(),
            actor_id=actor_id,
        )
