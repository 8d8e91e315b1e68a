"""
Till Ledger Engine — Tests
=============================
Checkout, duplicate, void and refund against a shared catalog and
cash drawer.

Scenarios:
1. Cash checkout credits the drawer, credit checkout does not
2. Duplicate is a record only, and so are its void and refund
3. Void reverses once, annotates, and refuses a second void
4. Refund reverses (unless voided) and removes the receipt
5. A short drawer blocks a cash reversal without changing anything
6. Concurrent voids of one receipt reverse it once
"""

import threading
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from core.commands.errors import (
    AlreadyVoided,
    InsufficientDrawerBalance,
    NotAuthenticated,
    NotFound,
    ValidationError,
)
from core.events.dispatcher import EventDispatcher
from core.time.clock import FixedClock
from engines.cash.services import CashDrawer
from engines.catalog.models import Product
from engines.catalog.services import Catalog
from engines.ledger.events import (
    LEDGER_RECEIPT_COMPLETED_V1,
    LEDGER_RECEIPT_REFUNDED_V1,
    LEDGER_RECEIPT_VOIDED_V1,
)
from engines.ledger.models import PaymentMethod, Receipt, ReceiptMethod
from engines.ledger.services import TransactionLedger
from engines.order.services import OrderAggregate

NOW = datetime(2026, 3, 1, 9, 0, 0, tzinfo=timezone.utc)


class Register:
    """Catalog, drawer, ledger and order wired together."""

    def __init__(self, starting_float="1000"):
        self.clock = FixedClock(NOW)
        self.events = EventDispatcher()
        self.catalog = Catalog(
            [
                Product("apple", "Apple", "0.50", "grocery", stock=10),
                Product("a", "Burger", "5.00", "fastfood", stock=10),
                Product("c", "Soda", "1.50", "fastfood", stock=10),
            ],
            clock=self.clock,
        )
        self.catalog.add_bundle("Meal", "8.00", [("a", 2), ("c", 1)], product_id="b")
        self.drawer = CashDrawer(starting_float, clock=self.clock)
        self.ledger = TransactionLedger(
            self.catalog, self.drawer, clock=self.clock, event_dispatcher=self.events,
        )
        self.order = OrderAggregate(self.catalog)

    def sell(self, *product_ids, payment_method="cash") -> Receipt:
        for product_id in product_ids:
            self.order.add_item(product_id)
        return self.ledger.complete(
            self.order, employee_id="emp-1", payment_method=payment_method,
        )


# ══════════════════════════════════════════════════════════════
# CHECKOUT
# ══════════════════════════════════════════════════════════════

class TestCheckout:
    def test_cash_sale(self):
        register = Register()
        receipt = register.sell("apple")

        assert receipt.total == Decimal("0.55")
        assert receipt.tax == Decimal("0.05")
        assert receipt.created_at == NOW
        assert receipt.payment_method == PaymentMethod.CASH
        assert register.drawer.balance == Decimal("1000.55")
        assert register.catalog.stock_of("apple") == 9
        assert register.order.is_empty
        assert register.ledger.receipts() == [receipt]

    def test_credit_sale_leaves_drawer(self):
        register = Register()
        register.sell("apple", payment_method="credit")
        assert register.drawer.balance == Decimal("1000")

    def test_event_published(self):
        register = Register()
        receipt = register.sell("apple")
        [event] = register.events.events(LEDGER_RECEIPT_COMPLETED_V1)
        assert event.payload["receipt_id"] == receipt.receipt_id
        assert event.actor_id == "emp-1"

    def test_snapshot_of_settings(self):
        register = Register()
        register.order.set_discount("fixed_amount", "0.50")
        receipt = register.sell("a")
        assert receipt.discount_amount == Decimal("0.50")
        assert receipt.total == Decimal("4.95")
        assert register.order.config.discount_value == 0

    def test_empty_order_rejected(self):
        register = Register()
        with pytest.raises(ValidationError, match="empty"):
            register.ledger.complete(register.order, employee_id="emp-1")
        assert register.ledger.receipts() == []

    def test_requires_employee(self):
        register = Register()
        register.order.add_item("apple")
        with pytest.raises(NotAuthenticated):
            register.ledger.complete(register.order, employee_id=None)
        assert register.order.quantity_of("apple") == 1

    def test_receipt_delivery_needs_contact(self):
        register = Register()
        register.order.add_item("apple")
        with pytest.raises(ValidationError, match="contact_info"):
            register.ledger.complete(
                register.order, employee_id="emp-1", receipt_method="email",
            )

    def test_receipt_delivery_recorded(self):
        register = Register()
        register.order.add_item("apple")
        receipt = register.ledger.complete(
            register.order,
            employee_id="emp-1",
            payment_method="credit",
            signature="J. Doe",
            receipt_method="phone",
            contact_info="555-0100",
        )
        assert receipt.receipt_method == ReceiptMethod.PHONE
        assert receipt.contact_info == "555-0100"
        assert receipt.signature == "J. Doe"

    def test_unknown_payment_method(self):
        register = Register()
        register.order.add_item("apple")
        with pytest.raises(ValidationError, match="payment_method"):
            register.ledger.complete(
                register.order, employee_id="emp-1", payment_method="barter",
            )


class TestReceiptModel:
    def test_unbalanced_total_rejected(self):
        register = Register()
        receipt = register.sell("apple")
        with pytest.raises(ValueError, match="balance"):
            Receipt(**{**receipt.__dict__, "total": Decimal("0.56")})

    def test_to_dict_rounds_for_display(self):
        receipt = Register().sell("apple")
        data = receipt.to_dict()
        assert data["total"] == "0.55"
        assert data["void_info"] is None


# ══════════════════════════════════════════════════════════════
# DUPLICATE
# ══════════════════════════════════════════════════════════════

class TestDuplicate:
    def test_record_only(self):
        register = Register()
        original = register.sell("apple")

        copy = register.ledger.duplicate(original.receipt_id, employee_id="emp-1")

        assert copy.receipt_id != original.receipt_id
        assert copy.duplicated_from == original.receipt_id
        assert copy.lines == original.lines
        assert copy.total == original.total
        assert register.drawer.balance == Decimal("1000.55")
        assert register.catalog.stock_of("apple") == 9
        assert len(register.ledger.receipts()) == 2

    def test_duplicate_of_voided_is_active(self):
        register = Register()
        original = register.sell("apple")
        register.ledger.void(original.receipt_id, employee_id="emp-1")

        copy = register.ledger.duplicate(original.receipt_id)

        assert not copy.is_voided
        assert copy.is_duplicate

    def test_void_of_duplicate_is_record_only(self):
        register = Register()
        original = register.sell("apple")
        copy = register.ledger.duplicate(original.receipt_id)
        register.ledger.void(original.receipt_id, employee_id="emp-1")

        voided = register.ledger.void(copy.receipt_id, employee_id="emp-1")

        assert voided.is_voided
        assert register.catalog.stock_of("apple") == 10
        assert register.drawer.balance == Decimal("1000")

    def test_duplicate_of_voided_cannot_reverse_again(self):
        register = Register()
        original = register.sell("b")
        register.ledger.void(original.receipt_id, employee_id="emp-1")
        copy = register.ledger.duplicate(original.receipt_id)

        register.ledger.void(copy.receipt_id, employee_id="emp-1")

        assert register.catalog.stock_of("b") == 5
        assert register.catalog.stock_of("a") == 10
        assert register.drawer.balance == Decimal("1000")

    def test_refund_of_duplicate_is_record_only(self):
        register = Register()
        original = register.sell("apple")
        copy = register.ledger.duplicate(original.receipt_id)

        register.ledger.refund(copy.receipt_id, employee_id="emp-2")

        assert register.ledger.receipts() == [original]
        assert register.catalog.stock_of("apple") == 9
        assert register.drawer.balance == Decimal("1000.55")
        [event] = register.events.events(LEDGER_RECEIPT_REFUNDED_V1)
        assert event.payload["reversed_effects"] is False

    def test_unknown_receipt(self):
        with pytest.raises(NotFound):
            Register().ledger.duplicate("r-404")


# ══════════════════════════════════════════════════════════════
# VOID
# ══════════════════════════════════════════════════════════════

class TestVoid:
    def test_reverses_stock_and_cash(self):
        register = Register()
        receipt = register.sell("b", "apple")

        voided = register.ledger.void(
            receipt.receipt_id, employee_id="emp-2", reason="wrong item",
        )

        assert voided.void_info.voided_by == "emp-2"
        assert voided.void_info.reason == "wrong item"
        assert voided.void_info.voided_at == NOW
        assert register.drawer.balance == Decimal("1000")
        assert register.catalog.stock_of("b") == 5
        assert register.catalog.stock_of("a") == 10
        assert register.catalog.stock_of("apple") == 10
        assert register.ledger.get(receipt.receipt_id).is_voided
        assert len(register.events.events(LEDGER_RECEIPT_VOIDED_V1)) == 1

    def test_second_void_rejected(self):
        register = Register()
        receipt = register.sell("apple")
        register.ledger.void(receipt.receipt_id, employee_id="emp-1")

        with pytest.raises(AlreadyVoided):
            register.ledger.void(receipt.receipt_id, employee_id="emp-1")

        assert register.catalog.stock_of("apple") == 10
        assert register.drawer.balance == Decimal("1000")

    def test_credit_void_leaves_drawer(self):
        register = Register()
        receipt = register.sell("apple", payment_method="credit")
        register.ledger.void(receipt.receipt_id, employee_id="emp-1")
        assert register.drawer.balance == Decimal("1000")
        assert register.catalog.stock_of("apple") == 10

    def test_short_drawer_blocks_void(self):
        register = Register()
        receipt = register.sell("a")
        register.drawer.manual_removal(register.drawer.balance, employee_id="emp-2")

        with pytest.raises(InsufficientDrawerBalance):
            register.ledger.void(receipt.receipt_id, employee_id="emp-1")

        assert not register.ledger.get(receipt.receipt_id).is_voided
        assert register.catalog.stock_of("a") == 9

    def test_unknown_receipt(self):
        with pytest.raises(NotFound):
            Register().ledger.void("r-404", employee_id="emp-1")

    def test_concurrent_voids_reverse_once(self):
        register = Register()
        receipt = register.sell("b", "apple")
        barrier = threading.Barrier(8)
        outcomes = []

        def void():
            barrier.wait()
            try:
                register.ledger.void(receipt.receipt_id, employee_id="emp-1")
                outcomes.append("voided")
            except AlreadyVoided:
                outcomes.append("already")

        threads = [threading.Thread(target=void) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(outcomes) == ["already"] * 7 + ["voided"]
        assert register.catalog.stock_of("b") == 5
        assert register.catalog.stock_of("a") == 10
        assert register.catalog.stock_of("apple") == 10
        assert register.drawer.balance == Decimal("1000")
        assert len(register.events.events(LEDGER_RECEIPT_VOIDED_V1)) == 1


# ══════════════════════════════════════════════════════════════
# REFUND
# ══════════════════════════════════════════════════════════════

class TestRefund:
    def test_reverses_and_removes(self):
        register = Register()
        receipt = register.sell("apple")

        register.ledger.refund(receipt.receipt_id, employee_id="emp-2")

        assert register.ledger.receipts() == []
        assert register.drawer.balance == Decimal("1000")
        assert register.catalog.stock_of("apple") == 10
        [event] = register.events.events(LEDGER_RECEIPT_REFUNDED_V1)
        assert event.payload["reversed_effects"] is True

    def test_voided_receipt_not_reversed_twice(self):
        register = Register()
        receipt = register.sell("apple")
        register.ledger.void(receipt.receipt_id, employee_id="emp-1")

        register.ledger.refund(receipt.receipt_id, employee_id="emp-2")

        assert register.ledger.receipts() == []
        assert register.catalog.stock_of("apple") == 10
        assert register.drawer.balance == Decimal("1000")
        [event] = register.events.events(LEDGER_RECEIPT_REFUNDED_V1)
        assert event.payload["reversed_effects"] is False
        assert event.payload["was_voided"] is True

    def test_refunded_receipt_is_gone(self):
        register = Register()
        receipt = register.sell("apple")
        register.ledger.refund(receipt.receipt_id, employee_id="emp-2")
        with pytest.raises(NotFound):
            register.ledger.refund(receipt.receipt_id, employee_id="emp-2")

    def test_short_drawer_blocks_refund(self):
        register = Register(starting_float="0")
        receipt = register.sell("apple")
        register.drawer.manual_removal("0.55", employee_id="emp-2")

        with pytest.raises(InsufficientDrawerBalance):
            register.ledger.refund(receipt.receipt_id, employee_id="emp-2")

        assert register.ledger.get(receipt.receipt_id) == receipt
