"""
Till Permissions - Command to Permission Registry
=================================================
"""

from __future__ import annotations

from core.permissions.constants import (
    PERMISSION_CASH_REMOVE,
    PERMISSION_CATALOG_MANAGE,
    PERMISSION_POS_OPERATE,
    PERMISSION_PUBLIC,
    PERMISSION_REFUND_ISSUE,
    PERMISSION_SESSION_END,
    PERMISSION_SETTINGS_CONFIGURE,
    PERMISSION_STAFF_MANAGE,
)

COMMAND_PERMISSION_MAP = {
    # ── Session ───────────────────────────────────────────────
    "staff.session.login.request": PERMISSION_PUBLIC,
    "staff.session.current.request": PERMISSION_PUBLIC,
    "staff.session.logout.request": PERMISSION_SESSION_END,
    "staff.clock.in.request": PERMISSION_POS_OPERATE,
    "staff.clock.out.request": PERMISSION_POS_OPERATE,
    # ── Roster ────────────────────────────────────────────────
    "staff.employee.add.request": PERMISSION_STAFF_MANAGE,
    "staff.employee.update.request": PERMISSION_STAFF_MANAGE,
    "staff.employee.set_status.request": PERMISSION_STAFF_MANAGE,
    "staff.employee.list.request": PERMISSION_STAFF_MANAGE,
    # ── Catalog ───────────────────────────────────────────────
    "catalog.products.list.request": PERMISSION_POS_OPERATE,
    "catalog.inventory.report.request": PERMISSION_POS_OPERATE,
    "catalog.stock.adjust.request": PERMISSION_POS_OPERATE,
    "catalog.bundle.add.request": PERMISSION_POS_OPERATE,
    "catalog.product.add.request": PERMISSION_CATALOG_MANAGE,
    # ── Order ─────────────────────────────────────────────────
    "order.cart.get.request": PERMISSION_POS_OPERATE,
    "order.pricing.get.request": PERMISSION_POS_OPERATE,
    "order.item.add.request": PERMISSION_POS_OPERATE,
    "order.item.remove.request": PERMISSION_POS_OPERATE,
    "order.custom_amount.add.request": PERMISSION_POS_OPERATE,
    "order.cart.clear.request": PERMISSION_POS_OPERATE,
    "order.discount.set.request": PERMISSION_POS_OPERATE,
    "order.tax.set_enabled.request": PERMISSION_POS_OPERATE,
    "order.tax.set_rate.request": PERMISSION_POS_OPERATE,
    "order.gratuity.set_enabled.request": PERMISSION_POS_OPERATE,
    "order.gratuity.set_rate.request": PERMISSION_POS_OPERATE,
    "order.extra_charges.set.request": PERMISSION_POS_OPERATE,
    "order.employee_order.set.request": PERMISSION_POS_OPERATE,
    "order.checkout.begin.request": PERMISSION_POS_OPERATE,
    "order.checkout.cancel.request": PERMISSION_POS_OPERATE,
    # ── Ledger ────────────────────────────────────────────────
    "ledger.receipt.complete.request": PERMISSION_POS_OPERATE,
    "ledger.receipt.duplicate.request": PERMISSION_POS_OPERATE,
    "ledger.receipt.void.request": PERMISSION_POS_OPERATE,
    "ledger.receipt.refund.request": PERMISSION_REFUND_ISSUE,
    "ledger.receipts.list.request": PERMISSION_POS_OPERATE,
    "ledger.sales.summary.request": PERMISSION_POS_OPERATE,
    # ── Cash ──────────────────────────────────────────────────
    "cash.balance.get.request": PERMISSION_POS_OPERATE,
    "cash.movements.list.request": PERMISSION_POS_OPERATE,
    "cash.drawer.remove.request": PERMISSION_CASH_REMOVE,
    # ── Settings ──────────────────────────────────────────────
    "settings.client.update.request": PERMISSION_SETTINGS_CONFIGURE,
}


def resolve_required_permission(command_type: str) -> str | None:
    """Resolve required permission for a command type."""
    return COMMAND_PERMISSION_MAP.get(command_type)
