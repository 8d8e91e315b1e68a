"""
Till Catalog Engine — Product Model
======================================
Products and bundle compositions.

A Product is a frozen value. Stock changes replace the stored value
with a new one; nothing mutates a Product in place, so an order line
or a receipt can hold the Product it was sold as.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Tuple

from core.commands.errors import InvalidBundle, ValidationError
from core.primitives.money import to_non_negative


# ══════════════════════════════════════════════════════════════
# CATEGORIES
# ══════════════════════════════════════════════════════════════

CATEGORY_GROCERY = "grocery"
CATEGORY_FASTFOOD = "fastfood"
CATEGORY_BUNDLE = "bundle"

VALID_CATEGORIES = frozenset({
    CATEGORY_GROCERY,
    CATEGORY_FASTFOOD,
    CATEGORY_BUNDLE,
})


def require_count(value, field_name: str, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field_name} must be an integer.")
    if value < minimum:
        raise ValidationError(f"{field_name} must be >= {minimum}, got {value}.")


# ══════════════════════════════════════════════════════════════
# BUNDLE ITEM
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BundleItem:
    """One component of a bundle: a product and how many of it."""

    product_id: str
    quantity: int

    def __post_init__(self):
        if not isinstance(self.product_id, str) or not self.product_id:
            raise InvalidBundle("Bundle component product_id must be non-empty.")
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise InvalidBundle("Bundle component quantity must be an integer.")
        if self.quantity < 1:
            raise InvalidBundle(
                f"Bundle component '{self.product_id}' quantity must be >= 1."
            )

    def to_dict(self) -> dict:
        return {"product_id": self.product_id, "quantity": self.quantity}


# ══════════════════════════════════════════════════════════════
# PRODUCT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Product:
    """
    Catalog product.

    Fields:
        product_id:    Catalog identity.
        name:          Display name.
        price:         Unit price, Decimal >= 0.
        category:      grocery | fastfood | bundle.
        stock:         Units on hand, integer >= 0.
        bundle_items:  Components, only for category 'bundle'.
        custom:        True for one-off custom-amount lines that are
                       not held in the catalog.
    """

    product_id: str
    name: str
    price: Decimal
    category: str
    stock: int = 0
    bundle_items: Tuple[BundleItem, ...] = ()
    custom: bool = False

    def __post_init__(self):
        if not isinstance(self.product_id, str) or not self.product_id.strip():
            raise ValidationError("product_id must be a non-empty string.")

        if not isinstance(self.name, str) or not self.name.strip():
            raise ValidationError("Product name must be non-empty.")

        object.__setattr__(self, "price", to_non_negative(self.price, "price"))

        if self.category not in VALID_CATEGORIES:
            raise ValidationError(
                f"category '{self.category}' not valid. "
                f"Must be one of: {sorted(VALID_CATEGORIES)}"
            )

        require_count(self.stock, "stock", 0)

        items = tuple(self.bundle_items)
        for item in items:
            if not isinstance(item, BundleItem):
                raise InvalidBundle("bundle_items must contain BundleItem values.")
        object.__setattr__(self, "bundle_items", items)

        if self.category == CATEGORY_BUNDLE and not items:
            raise InvalidBundle(f"Bundle '{self.name}' has no components.")
        if self.category != CATEGORY_BUNDLE and items:
            raise InvalidBundle(
                f"Only bundles carry components, '{self.name}' is "
                f"'{self.category}'."
            )

    @property
    def is_bundle(self) -> bool:
        return self.category == CATEGORY_BUNDLE

    def with_stock(self, stock: int) -> "Product":
        return replace(self, stock=stock)

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "price": str(self.price),
            "category": self.category,
            "stock": self.stock,
            "bundle_items": [item.to_dict() for item in self.bundle_items],
            "custom": self.custom,
        }
