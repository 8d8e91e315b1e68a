"""
Till Pricing Engine — Breakdown Calculator
=============================================
Pure function of (order lines, PricingConfig). No state, no clock,
no rounding. Called from scratch on every query and at checkout.
"""

from __future__ import annotations

from typing import Iterable

from core.primitives.money import HUNDRED, ZERO
from engines.pricing.models import DiscountType, PricingBreakdown, PricingConfig


def compute_breakdown(lines: Iterable, config: PricingConfig) -> PricingBreakdown:
    """
    Price an order.

    Each line exposes .product.price and .quantity.

    Steps:
        1. subtotal = sum of price × quantity
        2. base discount: percentage of subtotal, or fixed capped at subtotal
        3. employee to-go reduction on what remains after the base discount
        4. tax and gratuity on the discounted subtotal
        5. total = discounted + tax + gratuity + extra charges
    """
    subtotal = sum(
        (line.product.price * line.quantity for line in lines), ZERO,
    )

    if config.discount_type == DiscountType.PERCENTAGE:
        base_discount = subtotal * config.discount_value / HUNDRED
    else:
        base_discount = min(config.discount_value, subtotal)

    employee_discount = ZERO
    settings = config.client_settings
    if config.employee_order and settings.discounted_to_go_enabled:
        employee_discount = (
            (subtotal - base_discount)
            * settings.discounted_to_go_percentage / HUNDRED
        )

    discount_amount = base_discount + employee_discount
    discounted = subtotal - discount_amount

    tax = discounted * config.tax_rate if config.tax_enabled else ZERO
    gratuity = discounted * config.gratuity_rate if config.gratuity_enabled else ZERO
    total = discounted + tax + gratuity + config.extra_charges

    return PricingBreakdown(
        subtotal=subtotal,
        base_discount=base_discount,
        employee_discount=employee_discount,
        discount_amount=discount_amount,
        tax=tax,
        gratuity=gratuity,
        extra_charges=config.extra_charges,
        total=total,
    )
