"""
Till Ledger Engine — Receipt Model
=====================================
A Receipt is frozen. Voiding attaches a VoidInfo by replacing the
stored value with a new Receipt; refunding removes it from the ledger.

Invariant (checked on construction):
    total == subtotal - discount_amount + tax + gratuity + extra_charges
    every component >= 0, discount_amount <= subtotal
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple

from core.commands.errors import ValidationError
from core.primitives.money import ZERO, quantize_money
from engines.order.models import OrderLine


class PaymentMethod(Enum):
    CASH = "cash"
    CREDIT = "credit"


class ReceiptMethod(Enum):
    EMAIL = "email"
    PHONE = "phone"
    NONE = "none"


def parse_enum(enum_cls, value, field_name: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(
            f"{field_name} '{value}' not valid. Must be one of: "
            f"{[member.value for member in enum_cls]}"
        ) from None


@dataclass(frozen=True)
class VoidInfo:
    voided_by: str
    reason: str
    voided_at: datetime

    def to_dict(self) -> dict:
        return {
            "voided_by": self.voided_by,
            "reason": self.reason,
            "voided_at": self.voided_at.isoformat(),
        }


@dataclass(frozen=True)
class Receipt:
    receipt_id: str
    lines: Tuple[OrderLine, ...]
    subtotal: Decimal
    discount_amount: Decimal
    tax: Decimal
    gratuity: Decimal
    extra_charges: Decimal
    total: Decimal
    created_at: datetime
    employee_id: str
    payment_method: PaymentMethod
    signature: Optional[str] = None
    receipt_method: ReceiptMethod = ReceiptMethod.NONE
    contact_info: Optional[str] = None
    void_info: Optional[VoidInfo] = None
    duplicated_from: Optional[str] = None

    def __post_init__(self):
        if not self.receipt_id:
            raise ValueError("receipt_id must be non-empty.")
        if not self.lines:
            raise ValueError("A receipt needs at least one line.")
        object.__setattr__(self, "lines", tuple(self.lines))

        for name in ("subtotal", "discount_amount", "tax", "gratuity",
                     "extra_charges", "total"):
            value = getattr(self, name)
            if not isinstance(value, Decimal):
                raise ValueError(f"{name} must be Decimal.")
            if value < ZERO:
                raise ValueError(f"{name} must be >= 0, got {value}.")

        if self.discount_amount > self.subtotal:
            raise ValueError("discount_amount cannot exceed subtotal.")

        expected = (
            self.subtotal - self.discount_amount + self.tax
            + self.gratuity + self.extra_charges
        )
        if self.total != expected:
            raise ValueError(
                f"Receipt total {self.total} does not balance, "
                f"expected {expected}."
            )

        if not isinstance(self.payment_method, PaymentMethod):
            raise ValueError("payment_method must be PaymentMethod.")
        if not isinstance(self.receipt_method, ReceiptMethod):
            raise ValueError("receipt_method must be ReceiptMethod.")

    @property
    def is_voided(self) -> bool:
        return self.void_info is not None

    @property
    def is_cash(self) -> bool:
        return self.payment_method == PaymentMethod.CASH

    @property
    def is_duplicate(self) -> bool:
        return self.duplicated_from is not None

    def with_void(self, void_info: VoidInfo) -> "Receipt":
        return replace(self, void_info=void_info)

    def to_dict(self) -> dict:
        return {
            "receipt_id": self.receipt_id,
            "lines": [line.to_dict() for line in self.lines],
            "subtotal": str(quantize_money(self.subtotal)),
            "discount_amount": str(quantize_money(self.discount_amount)),
            "tax": str(quantize_money(self.tax)),
            "gratuity": str(quantize_money(self.gratuity)),
            "extra_charges": str(quantize_money(self.extra_charges)),
            "total": str(quantize_money(self.total)),
            "created_at": self.created_at.isoformat(),
            "employee_id": self.employee_id,
            "payment_method": self.payment_method.value,
            "signature": self.signature,
            "receipt_method": self.receipt_method.value,
            "contact_info": self.contact_info,
            "void_info": self.void_info.to_dict() if self.void_info else None,
            "duplicated_from": self.duplicated_from,
        }
