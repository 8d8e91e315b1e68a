"""
Till Catalog Engine — Request Commands
=========================================
Typed catalog requests that convert into canonical Command objects.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from core.commands.base import Command


# ══════════════════════════════════════════════════════════════
# COMMAND TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

CATALOG_PRODUCTS_LIST_REQUEST = "catalog.products.list.request"
CATALOG_INVENTORY_REPORT_REQUEST = "catalog.inventory.report.request"
CATALOG_STOCK_ADJUST_REQUEST = "catalog.stock.adjust.request"
CATALOG_PRODUCT_ADD_REQUEST = "catalog.product.add.request"
CATALOG_BUNDLE_ADD_REQUEST = "catalog.bundle.add.request"

CATALOG_COMMAND_TYPES = frozenset({
    CATALOG_PRODUCTS_LIST_REQUEST,
    CATALOG_INVENTORY_REPORT_REQUEST,
    CATALOG_STOCK_ADJUST_REQUEST,
    CATALOG_PRODUCT_ADD_REQUEST,
    CATALOG_BUNDLE_ADD_REQUEST,
})


def _catalog_command(
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
        source_engine="catalog",
    )


# ══════════════════════════════════════════════════════════════
# REQUEST COMMANDS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class AdjustStockRequest:
    """Supply in (positive delta) or out (negative delta)."""
    product_id: str
    delta: int

    def __post_init__(self):
        if not isinstance(self.product_id, str):
            raise TypeError("product_id must be a string.")

    def to_command(self, **kwargs) -> Command:
        return _catalog_command(
            CATALOG_STOCK_ADJUST_REQUEST,
            {"product_id": self.product_id, "delta": self.delta},
            **kwargs,
        )


@dataclass(frozen=True)
class AddProductRequest:
    name: str
    price: object
    category: str
    stock: int = 0
    product_id: Optional[str] = None

    def to_command(self, **kwargs) -> Command:
        return _catalog_command(
            CATALOG_PRODUCT_ADD_REQUEST,
            {
                "name": self.name,
                "price": self.price,
                "category": self.category,
                "stock": self.stock,
                "product_id": self.product_id,
            },
            **kwargs,
        )


@dataclass(frozen=True)
class AddBundleRequest:
    """
    Register a bundle built from existing catalog products.

    items is a sequence of (product_id, quantity) pairs.
    """
    name: str
    price: object
    items: Tuple[Tuple[str, int], ...]
    product_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(
            self, "items", tuple(tuple(pair) for pair in self.items)
        )
        for pair in self.items:
            if len(pair) != 2:
                raise ValueError(
                    "Bundle items must be (product_id, quantity) pairs."
                )

    def to_command(self, **kwargs) -> Command:
        return _catalog_command(
            CATALOG_BUNDLE_ADD_REQUEST,
            {
                "name": self.name,
                "price": self.price,
                "items": [list(pair) for pair in self.items],
                "product_id": self.product_id,
            },
            **kwargs,
        )
