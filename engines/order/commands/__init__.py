"""
Till Order Engine — Request Commands
=======================================
Typed order requests that convert into canonical Command objects.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.commands.base import Command


# ══════════════════════════════════════════════════════════════
# COMMAND TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

ORDER_CART_GET_REQUEST = "order.cart.get.request"
ORDER_PRICING_GET_REQUEST = "order.pricing.get.request"
ORDER_ITEM_ADD_REQUEST = "order.item.add.request"
ORDER_ITEM_REMOVE_REQUEST = "order.item.remove.request"
ORDER_CUSTOM_AMOUNT_ADD_REQUEST = "order.custom_amount.add.request"
ORDER_CART_CLEAR_REQUEST = "order.cart.clear.request"
ORDER_DISCOUNT_SET_REQUEST = "order.discount.set.request"
ORDER_TAX_SET_ENABLED_REQUEST = "order.tax.set_enabled.request"
ORDER_TAX_SET_RATE_REQUEST = "order.tax.set_rate.request"
ORDER_GRATUITY_SET_ENABLED_REQUEST = "order.gratuity.set_enabled.request"
ORDER_GRATUITY_SET_RATE_REQUEST = "order.gratuity.set_rate.request"
ORDER_EXTRA_CHARGES_SET_REQUEST = "order.extra_charges.set.request"
ORDER_EMPLOYEE_ORDER_SET_REQUEST = "order.employee_order.set.request"
ORDER_CHECKOUT_BEGIN_REQUEST = "order.checkout.begin.request"
ORDER_CHECKOUT_CANCEL_REQUEST = "order.checkout.cancel.request"

ORDER_COMMAND_TYPES = frozenset({
    ORDER_CART_GET_REQUEST,
    ORDER_PRICING_GET_REQUEST,
    ORDER_ITEM_ADD_REQUEST,
    ORDER_ITEM_REMOVE_REQUEST,
    ORDER_CUSTOM_AMOUNT_ADD_REQUEST,
    ORDER_CART_CLEAR_REQUEST,
    ORDER_DISCOUNT_SET_REQUEST,
    ORDER_TAX_SET_ENABLED_REQUEST,
    ORDER_TAX_SET_RATE_REQUEST,
    ORDER_GRATUITY_SET_ENABLED_REQUEST,
    ORDER_GRATUITY_SET_RATE_REQUEST,
    ORDER_EXTRA_CHARGES_SET_REQUEST,
    ORDER_EMPLOYEE_ORDER_SET_REQUEST,
    ORDER_CHECKOUT_BEGIN_REQUEST,
    ORDER_CHECKOUT_CANCEL_REQUEST,
})

# Setting commands that carry a single "value" payload field.
ORDER_SETTING_COMMAND_TYPES = frozenset({
    ORDER_TAX_SET_ENABLED_REQUEST,
    ORDER_TAX_SET_RATE_REQUEST,
    ORDER_GRATUITY_SET_ENABLED_REQUEST,
    ORDER_GRATUITY_SET_RATE_REQUEST,
    ORDER_EXTRA_CHARGES_SET_REQUEST,
    ORDER_EMPLOYEE_ORDER_SET_REQUEST,
})


def _order_command(
    command_type: str,
    payload: dict,
    *,
    actor_id: Optional[str],
    command_id: uuid.UUID,
    issued_at: datetime,
) -> Command:
    return Command(
        command_id=command_id,
        command_type=command_type,
        actor_id=actor_id,
        payload=payload,
        issued_at=issued_at,
        source_engine="order",
    )


# ══════════════════════════════════════════════════════════════
# REQUEST COMMANDS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class AddItemRequest:
    product_id: str

    def __post_init__(self):
        if not isinstance(self.product_id, str):
            raise TypeError("product_id must be a string.")

    def to_command(self, **kwargs) -> Command:
        return _order_command(
            ORDER_ITEM_ADD_REQUEST, {"product_id": self.product_id}, **kwargs,
        )


@dataclass(frozen=True)
class RemoveItemRequest:
    product_id: str

    def __post_init__(self):
        if not isinstance(self.product_id, str):
            raise TypeError("product_id must be a string.")

    def to_command(self, **kwargs) -> Command:
        return _order_command(
            ORDER_ITEM_REMOVE_REQUEST, {"product_id": self.product_id}, **kwargs,
        )


@dataclass(frozen=True)
class AddCustomAmountRequest:
    amount: object

    def to_command(self, **kwargs) -> Command:
        return _order_command(
            ORDER_CUSTOM_AMOUNT_ADD_REQUEST, {"amount": self.amount}, **kwargs,
        )


@dataclass(frozen=True)
class SetDiscountRequest:
    """discount_type is 'percentage' or 'fixed_amount'."""
    discount_type: object
    value: object

    def to_command(self, **kwargs) -> Command:
        return _order_command(
            ORDER_DISCOUNT_SET_REQUEST,
            {"discount_type": self.discount_type, "value": self.value},
            **kwargs,
        )


@dataclass(frozen=True)
class SetOrderValueRequest:
    """One of the single-value order settings (tax, gratuity, extras...)."""
    command_type: str
    value: object

    def __post_init__(self):
        if self.command_type not in ORDER_SETTING_COMMAND_TYPES:
            raise ValueError(
                f"'{self.command_type}' is not an order setting command."
            )

    def to_command(self, **kwargs) -> Command:
        return _order_command(self.command_type, {"value": self.value}, **kwargs)
