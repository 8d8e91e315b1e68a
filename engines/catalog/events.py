"""
Till Catalog Engine — Event Types and Payload Builders
=========================================================
Catalog changes published to the event log. Reservations and
releases are not published; they travel inside the order and
ledger events that caused them.
"""

from __future__ import annotations

from engines.catalog.models import Product


# ══════════════════════════════════════════════════════════════
# EVENT TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

CATALOG_PRODUCT_ADDED_V1 = "catalog.product.added.v1"
CATALOG_BUNDLE_ADDED_V1 = "catalog.bundle.added.v1"
CATALOG_STOCK_ADJUSTED_V1 = "catalog.stock.adjusted.v1"

CATALOG_EVENT_TYPES = (
    CATALOG_PRODUCT_ADDED_V1,
    CATALOG_BUNDLE_ADDED_V1,
    CATALOG_STOCK_ADJUSTED_V1,
)


# ══════════════════════════════════════════════════════════════
# PAYLOAD BUILDERS
# ══════════════════════════════════════════════════════════════

def build_product_added_payload(product: Product) -> dict:
    return product.to_dict()


def build_bundle_added_payload(product: Product) -> dict:
    payload = product.to_dict()
    payload["initial_stock"] = product.stock
    return payload


def build_stock_adjusted_payload(
    product: Product, delta: int, previous_stock: int,
) -> dict:
    return {
        "product_id": product.product_id,
        "name": product.name,
        "delta": delta,
        "previous_stock": previous_stock,
        "stock": product.stock,
    }
