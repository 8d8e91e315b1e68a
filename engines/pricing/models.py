"""
Till Pricing Engine — Configuration and Breakdown Models
===========================================================
PricingConfig is the snapshot a breakdown is computed from. It is
frozen; the order replaces it wholesale when a setting changes, and
checkout captures whichever value is current.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from core.commands.errors import ValidationError
from core.primitives.money import HUNDRED, ZERO, quantize_money, to_non_negative


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"

    @classmethod
    def parse(cls, value) -> "DiscountType":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(
                f"discount_type '{value}' not valid. Must be one of: "
                f"{[member.value for member in cls]}"
            ) from None


def _require_flag(value, field_name: str) -> None:
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be true or false.")


def _require_percentage(value, field_name: str) -> Decimal:
    result = to_non_negative(value, field_name)
    if result > HUNDRED:
        raise ValidationError(f"{field_name} must be <= 100, got {result}.")
    return result


# ══════════════════════════════════════════════════════════════
# CLIENT SETTINGS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ClientSettings:
    """Register-wide settings managed by admins and owners."""

    free_lunch_enabled: bool = True
    discounted_to_go_enabled: bool = True
    discounted_to_go_percentage: Decimal = Decimal("20")

    def __post_init__(self):
        _require_flag(self.free_lunch_enabled, "free_lunch_enabled")
        _require_flag(self.discounted_to_go_enabled, "discounted_to_go_enabled")
        object.__setattr__(
            self,
            "discounted_to_go_percentage",
            _require_percentage(
                self.discounted_to_go_percentage, "discounted_to_go_percentage"
            ),
        )

    def to_dict(self) -> dict:
        return {
            "free_lunch_enabled": self.free_lunch_enabled,
            "discounted_to_go_enabled": self.discounted_to_go_enabled,
            "discounted_to_go_percentage": str(self.discounted_to_go_percentage),
        }


# ══════════════════════════════════════════════════════════════
# PRICING CONFIG
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PricingConfig:
    """
    Everything besides the lines that a price depends on.

    Rates are fractions (0.1 is 10%). Discount and to-go values
    are percentages (20 is 20%).
    """

    discount_type: DiscountType = DiscountType.PERCENTAGE
    discount_value: Decimal = ZERO
    tax_enabled: bool = True
    tax_rate: Decimal = Decimal("0.1")
    gratuity_enabled: bool = False
    gratuity_rate: Decimal = Decimal("0.15")
    extra_charges: Decimal = ZERO
    employee_order: bool = False
    client_settings: ClientSettings = field(default_factory=ClientSettings)

    def __post_init__(self):
        object.__setattr__(
            self, "discount_type", DiscountType.parse(self.discount_type)
        )
        if self.discount_type == DiscountType.PERCENTAGE:
            value = _require_percentage(self.discount_value, "discount_value")
        else:
            value = to_non_negative(self.discount_value, "discount_value")
        object.__setattr__(self, "discount_value", value)

        _require_flag(self.tax_enabled, "tax_enabled")
        _require_flag(self.gratuity_enabled, "gratuity_enabled")
        _require_flag(self.employee_order, "employee_order")

        object.__setattr__(
            self, "tax_rate", to_non_negative(self.tax_rate, "tax_rate")
        )
        object.__setattr__(
            self, "gratuity_rate", to_non_negative(self.gratuity_rate, "gratuity_rate")
        )
        object.__setattr__(
            self, "extra_charges", to_non_negative(self.extra_charges, "extra_charges")
        )

        if not isinstance(self.client_settings, ClientSettings):
            raise ValidationError("client_settings must be ClientSettings.")

    def to_dict(self) -> dict:
        return {
            "discount_type": self.discount_type.value,
            "discount_value": str(self.discount_value),
            "tax_enabled": self.tax_enabled,
            "tax_rate": str(self.tax_rate),
            "gratuity_enabled": self.gratuity_enabled,
            "gratuity_rate": str(self.gratuity_rate),
            "extra_charges": str(self.extra_charges),
            "employee_order": self.employee_order,
            "client_settings": self.client_settings.to_dict(),
        }


# ══════════════════════════════════════════════════════════════
# PRICING BREAKDOWN
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PricingBreakdown:
    """
    Full-precision result of compute_breakdown().

    discount_amount = base_discount + employee_discount, so
    total == subtotal - discount_amount + tax + gratuity + extra_charges.
    """

    subtotal: Decimal
    base_discount: Decimal
    employee_discount: Decimal
    discount_amount: Decimal
    tax: Decimal
    gratuity: Decimal
    extra_charges: Decimal
    total: Decimal

    def to_dict(self) -> dict:
        """Display values rounded to cents."""
        return {
            name: str(quantize_money(getattr(self, name)))
            for name in (
                "subtotal",
                "base_discount",
                "employee_discount",
                "discount_amount",
                "tax",
                "gratuity",
                "extra_charges",
                "total",
            )
        }
