"""
Till Catalog Engine — Catalog Aggregate
==========================================
Owns product definitions and live stock levels, and performs
inventory reservation for orders.

RULES:
- Stock never goes below zero
- reserve() validates the whole bundle expansion before any decrement
- release() is the single inverse used by remove, clear, void, refund
- Every mutation runs under the catalog lock
"""

from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from threading import RLock
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from core.commands.errors import (
    InsufficientStock,
    InvalidBundle,
    NotFound,
    ValidationError,
)
from core.events.dispatcher import EventDispatcher
from core.time.clock import Clock, SystemClock
from engines.catalog.events import (
    CATALOG_BUNDLE_ADDED_V1,
    CATALOG_PRODUCT_ADDED_V1,
    CATALOG_STOCK_ADJUSTED_V1,
    build_bundle_added_payload,
    build_product_added_payload,
    build_stock_adjusted_payload,
)
from engines.catalog.models import (
    CATEGORY_BUNDLE,
    BundleItem,
    Product,
    require_count,
)

logger = logging.getLogger("till.catalog")


class Catalog:
    """
    Product catalog with atomic stock reservation.

    Usage:
        catalog = Catalog([apple, bread])
        catalog.reserve("apple", 1)
        catalog.release(apple, 1)
    """

    def __init__(
        self,
        products: Iterable[Product] = (),
        *,
        clock: Clock | None = None,
        event_dispatcher: EventDispatcher | None = None,
    ):
        self._lock = RLock()
        self._clock = clock or SystemClock()
        self._event_dispatcher = event_dispatcher
        self._products: "OrderedDict[str, Product]" = OrderedDict()
        for product in products:
            self._insert(product)

    @property
    def lock(self) -> RLock:
        return self._lock

    # ── queries ───────────────────────────────────────────────

    def get(self, product_id: str) -> Product:
        with self._lock:
            product = self._products.get(product_id)
        if product is None:
            raise NotFound("Product", product_id)
        return product

    def products(self) -> List[Product]:
        with self._lock:
            return list(self._products.values())

    def stock_of(self, product_id: str) -> int:
        return self.get(product_id).stock

    def inventory_report(self) -> List[dict]:
        """End-of-day stock listing, one row per product."""
        return [
            {
                "product_id": product.product_id,
                "name": product.name,
                "stock": product.stock,
            }
            for product in self.products()
        ]

    def to_dict(self) -> Dict[str, dict]:
        return {
            product.product_id: product.to_dict()
            for product in self.products()
        }

    # ── catalog management ────────────────────────────────────

    def add_product(
        self,
        name: str,
        price,
        category: str,
        stock: int = 0,
        *,
        product_id: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> Product:
        if category == CATEGORY_BUNDLE:
            raise InvalidBundle("Use add_bundle() to register bundles.")

        with self._lock:
            product = Product(
                product_id=product_id or self._next_id(),
                name=name,
                price=price,
                category=category,
                stock=stock,
            )
            self._insert(product)

        logger.info(
            f"Product added: {product.product_id} '{product.name}' "
            f"({product.category}, stock {product.stock})"
        )
        self._emit(
            CATALOG_PRODUCT_ADDED_V1,
            build_product_added_payload(product),
            actor_id,
        )
        return product

    def add_bundle(
        self,
        name: str,
        price,
        items: Sequence[Tuple[str, int]],
        *,
        product_id: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> Product:
        """
        Register a bundle. Initial stock is how many complete bundles
        the current component stock can build.
        """
        if not items:
            raise InvalidBundle("A bundle needs at least one component.")

        bundle_items = tuple(
            item if isinstance(item, BundleItem)
            else BundleItem(product_id=item[0], quantity=item[1])
            for item in items
        )

        with self._lock:
            seen = set()
            buildable = []
            for item in bundle_items:
                if item.product_id in seen:
                    raise InvalidBundle(
                        f"Component '{item.product_id}' listed twice."
                    )
                seen.add(item.product_id)

                component = self._products.get(item.product_id)
                if component is None:
                    raise InvalidBundle(
                        f"Component '{item.product_id}' is not in the catalog."
                    )
                if component.is_bundle:
                    raise InvalidBundle(
                        f"Component '{item.product_id}' is itself a bundle."
                    )
                buildable.append(component.stock // item.quantity)

            bundle = Product(
                product_id=product_id or self._next_id(),
                name=name,
                price=price,
                category=CATEGORY_BUNDLE,
                stock=min(buildable),
                bundle_items=bundle_items,
            )
            self._insert(bundle)

        logger.info(
            f"Bundle added: {bundle.product_id} '{bundle.name}' "
            f"with {len(bundle_items)} components, stock {bundle.stock}"
        )
        self._emit(
            CATALOG_BUNDLE_ADDED_V1,
            build_bundle_added_payload(bundle),
            actor_id,
        )
        return bundle

    def adjust_stock(
        self,
        product_id: str,
        delta: int,
        *,
        actor_id: Optional[str] = None,
    ) -> Product:
        """Supply in (delta > 0) or supply out (delta < 0)."""
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise ValidationError("delta must be an integer.")
        if delta == 0:
            raise ValidationError("delta must not be zero.")

        with self._lock:
            product = self.get(product_id)
            new_stock = product.stock + delta
            if new_stock < 0:
                raise InsufficientStock(product_id, product.stock, -delta)
            updated = product.with_stock(new_stock)
            self._products[product_id] = updated

        logger.info(
            f"Stock adjusted: {product_id} {product.stock} -> {new_stock}"
        )
        self._emit(
            CATALOG_STOCK_ADJUSTED_V1,
            build_stock_adjusted_payload(updated, delta, product.stock),
            actor_id,
        )
        return updated

    # ── reservation ───────────────────────────────────────────

    def reserve(self, product_id: str, quantity: int = 1) -> Product:
        """
        Take `quantity` units of a product out of stock. A bundle also
        takes component_qty × quantity of each component.

        Raises:
            NotFound: unknown product or component.
            InsufficientStock: any product in the expansion is short.
                Nothing is decremented in that case.
        """
        require_count(quantity, "quantity", 1)

        with self._lock:
            product = self.get(product_id)
            demand = self._expand(product, quantity)

            for demanded_id, demanded in demand.items():
                available = self.get(demanded_id).stock
                if available < demanded:
                    raise InsufficientStock(demanded_id, available, demanded)

            for demanded_id, demanded in demand.items():
                current = self._products[demanded_id]
                self._products[demanded_id] = current.with_stock(
                    current.stock - demanded
                )

            reserved = self._products[product_id]

        logger.debug(f"Reserved {quantity} x {product_id}")
        return reserved

    def release(self, product: Product, quantity: int) -> None:
        """
        Exact inverse of reserve(). Takes the product snapshot so the
        bundle composition at sale time is what gets restored.
        """
        self.release_lines([(product, quantity)])

    def release_lines(self, lines: Iterable) -> None:
        """
        Release several lines in one locked step.

        Each line is an OrderLine-like object (product, quantity) or a
        (product, quantity) pair. Custom lines are skipped.
        """
        pairs = [
            (line.product, line.quantity) if hasattr(line, "product") else line
            for line in lines
        ]

        with self._lock:
            credit: Dict[str, int] = {}
            for product, quantity in pairs:
                if product.custom:
                    continue
                require_count(quantity, "quantity", 1)
                for credited_id, credited in self._expand(product, quantity).items():
                    credit[credited_id] = credit.get(credited_id, 0) + credited

            for credited_id in credit:
                self.get(credited_id)

            for credited_id, credited in credit.items():
                current = self._products[credited_id]
                self._products[credited_id] = current.with_stock(
                    current.stock + credited
                )

        if credit:
            logger.debug(f"Released stock: {credit}")

    # ── internals ─────────────────────────────────────────────

    @staticmethod
    def _expand(product: Product, quantity: int) -> Dict[str, int]:
        """Demand per product id for `quantity` units, bundle-aware."""
        demand = {product.product_id: quantity}
        for item in product.bundle_items:
            demand[item.product_id] = (
                demand.get(item.product_id, 0) + item.quantity * quantity
            )
        return demand

    def _insert(self, product: Product) -> None:
        if not isinstance(product, Product):
            raise TypeError("Catalog only holds Product values.")
        if product.custom:
            raise ValidationError("Custom-amount products are not catalog items.")
        if product.product_id in self._products:
            raise ValidationError(
                f"Product id '{product.product_id}' already exists."
            )
        self._products[product.product_id] = product

    def _next_id(self) -> str:
        return str(uuid.uuid4())

    def _emit(self, event_type: str, payload: dict, actor_id: Optional[str]) -> None:
        if self._event_dispatcher is None:
            return
        self._event_dispatcher.emit(
            event_type,
            payload,
            occurred_at=self._clock.now_utc(),
            actor_id=actor_id,
        )
