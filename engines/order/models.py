"""
Till Order Engine — Order Line
=================================
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from engines.catalog.models import Product, require_count


class CheckoutStage(Enum):
    BUILDING = "building"
    PAYMENT = "payment"


@dataclass(frozen=True)
class OrderLine:
    """A product as it was when added, and how many of it."""

    product: Product
    quantity: int

    def __post_init__(self):
        if not isinstance(self.product, Product):
            raise TypeError("product must be a Product.")
        require_count(self.quantity, "quantity", 1)

    @property
    def line_total(self) -> Decimal:
        return self.product.price * self.quantity

    def to_dict(self) -> dict:
        return {
            "product": self.product.to_dict(),
            "quantity": self.quantity,
            "line_total": str(self.line_total),
        }
