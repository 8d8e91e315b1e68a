"""
Till Order Engine — Order Aggregate
======================================
The in-progress transaction of the register session.

Adding an item reserves stock immediately. Removing a line or
clearing the order releases what the lines hold. settle() forgets
the lines without releasing them; the ledger calls it once the goods
are sold.
"""

from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from dataclasses import replace
from typing import Tuple

from core.commands.errors import (
    InvalidAmount,
    NotFound,
    OutOfStock,
    ValidationError,
)
from core.primitives.money import ZERO, to_decimal
from engines.catalog.models import CATEGORY_GROCERY, Product
from engines.catalog.services import Catalog
from engines.order.models import CheckoutStage, OrderLine
from engines.pricing.models import (
    ClientSettings,
    DiscountType,
    PricingBreakdown,
    PricingConfig,
)
from engines.pricing.services import compute_breakdown

logger = logging.getLogger("till.order")

CUSTOM_ITEM_NAME = "Custom Item"


class OrderAggregate:
    """
    Usage:
        order = OrderAggregate(catalog, defaults=PricingConfig())
        order.add_item("apple")
        order.breakdown().total
    """

    def __init__(
        self,
        catalog: Catalog,
        *,
        defaults: PricingConfig | None = None,
    ):
        self._catalog = catalog
        self._config = defaults or PricingConfig()
        self._lines: "OrderedDict[str, OrderLine]" = OrderedDict()
        self._stage = CheckoutStage.BUILDING

    # ── queries ───────────────────────────────────────────────

    @property
    def config(self) -> PricingConfig:
        return self._config

    @property
    def checkout_stage(self) -> CheckoutStage:
        return self._stage

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def lines(self) -> Tuple[OrderLine, ...]:
        return tuple(self._lines.values())

    def quantity_of(self, product_id: str) -> int:
        line = self._lines.get(product_id)
        return line.quantity if line else 0

    def breakdown(self) -> PricingBreakdown:
        return compute_breakdown(self._lines.values(), self._config)

    def snapshot(self) -> Tuple[Tuple[OrderLine, ...], PricingConfig]:
        """Lines and configuration as of now, for checkout."""
        return self.lines(), self._config

    def to_dict(self) -> dict:
        return {
            "lines": {
                product_id: line.to_dict()
                for product_id, line in self._lines.items()
            },
            "config": self._config.to_dict(),
            "checkout_stage": self._stage.value,
            "pricing": self.breakdown().to_dict(),
        }

    # ── lines ─────────────────────────────────────────────────

    def add_item(self, product_id: str) -> OrderLine:
        """Reserve one unit and add it to the order."""
        with self._catalog.lock:
            product = self._catalog.get(product_id)
            if product.stock == 0:
                raise OutOfStock(product_id)
            self._catalog.reserve(product_id, 1)

        existing = self._lines.get(product_id)
        if existing is None:
            line = OrderLine(product=product, quantity=1)
        else:
            line = replace(existing, quantity=existing.quantity + 1)
        self._lines[product_id] = line

        logger.info(f"Order line {product_id} -> qty {line.quantity}")
        return line

    def remove_item(self, product_id: str) -> OrderLine:
        """Drop the whole line and release everything it held."""
        line = self._lines.get(product_id)
        if line is None:
            raise NotFound("Order line", product_id)

        self._catalog.release(line.product, line.quantity)
        del self._lines[product_id]

        logger.info(f"Order line removed: {product_id} (qty {line.quantity})")
        return line

    def add_custom_amount(self, amount) -> OrderLine:
        """One-off line priced at `amount`; not backed by the catalog."""
        value = to_decimal(amount, "amount")
        if value <= ZERO:
            raise InvalidAmount(f"Custom amount must be > 0, got {value}.")

        product = Product(
            product_id=f"custom-{uuid.uuid4().hex}",
            name=CUSTOM_ITEM_NAME,
            price=value,
            category=CATEGORY_GROCERY,
            stock=1,
            custom=True,
        )
        line = OrderLine(product=product, quantity=1)
        self._lines[product.product_id] = line

        logger.info(f"Custom amount line added: {value}")
        return line

    def clear(self) -> None:
        """Abandon the order: release every line and reset per-order settings."""
        if self._lines:
            self._catalog.release_lines(self._lines.values())
            logger.info(f"Order cleared, released {len(self._lines)} lines")
        self._reset()

    def settle(self) -> None:
        """Forget the lines after a sale. Stock stays sold."""
        self._reset()

    # ── configuration ─────────────────────────────────────────

    def set_discount(self, discount_type, value) -> PricingConfig:
        return self._configure(
            discount_type=DiscountType.parse(discount_type),
            discount_value=value,
        )

    def set_tax_enabled(self, enabled: bool) -> PricingConfig:
        return self._configure(tax_enabled=enabled)

    def set_tax_rate(self, rate) -> PricingConfig:
        return self._configure(tax_rate=rate)

    def set_gratuity_enabled(self, enabled: bool) -> PricingConfig:
        return self._configure(gratuity_enabled=enabled)

    def set_gratuity_rate(self, rate) -> PricingConfig:
        return self._configure(gratuity_rate=rate)

    def set_extra_charges(self, amount) -> PricingConfig:
        return self._configure(extra_charges=amount)

    def set_employee_order(self, enabled: bool) -> PricingConfig:
        return self._configure(employee_order=enabled)

    def set_client_settings(self, settings: ClientSettings) -> PricingConfig:
        return self._configure(client_settings=settings)

    # ── checkout stage ────────────────────────────────────────

    def begin_checkout(self) -> CheckoutStage:
        if self.is_empty:
            raise ValidationError("Cannot check out an empty order.")
        self._stage = CheckoutStage.PAYMENT
        return self._stage

    def cancel_checkout(self) -> CheckoutStage:
        self._stage = CheckoutStage.BUILDING
        return self._stage

    # ── internals ─────────────────────────────────────────────

    def _configure(self, **changes) -> PricingConfig:
        # PricingConfig validates; a bad value leaves the old config in place.
        self._config = replace(self._config, **changes)
        return self._config

    def _reset(self) -> None:
        self._lines.clear()
        self._stage = CheckoutStage.BUILDING
        self._config = replace(
            self._config,
            discount_value=ZERO,
            extra_charges=ZERO,
            employee_order=False,
        )
