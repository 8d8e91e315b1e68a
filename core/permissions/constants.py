"""
Till Permissions - Constants
============================
Roles form an ordered capability hierarchy:
owner ⊇ admin ⊇ manager ⊇ cashier.
"""

from __future__ import annotations

# ── Roles ─────────────────────────────────────────────────────
ROLE_CASHIER = "cashier"
ROLE_MANAGER = "manager"
ROLE_ADMIN = "admin"
ROLE_OWNER = "owner"

ROLE_RANK = {
    ROLE_CASHIER: 0,
    ROLE_MANAGER: 1,
    ROLE_ADMIN: 2,
    ROLE_OWNER: 3,
}
VALID_ROLES = frozenset(ROLE_RANK)

# ── Permissions ───────────────────────────────────────────────
PERMISSION_PUBLIC = "session.public"
PERMISSION_SESSION_END = "session.end"
PERMISSION_POS_OPERATE = "pos.operate"
PERMISSION_REFUND_ISSUE = "ledger.refund.issue"
PERMISSION_CASH_REMOVE = "cash.drawer.remove"
PERMISSION_CATALOG_MANAGE = "catalog.manage"
PERMISSION_STAFF_MANAGE = "staff.manage"
PERMISSION_STAFF_SENSITIVE = "staff.sensitive.edit"
PERMISSION_SETTINGS_CONFIGURE = "settings.configure"

# Lowest role holding each permission. PUBLIC needs no session and
# SESSION_END needs any session, even one whose employee went inactive.
PERMISSION_MINIMUM_ROLE = {
    PERMISSION_POS_OPERATE: ROLE_CASHIER,
    PERMISSION_REFUND_ISSUE: ROLE_MANAGER,
    PERMISSION_CASH_REMOVE: ROLE_MANAGER,
    PERMISSION_CATALOG_MANAGE: ROLE_ADMIN,
    PERMISSION_STAFF_MANAGE: ROLE_ADMIN,
    PERMISSION_SETTINGS_CONFIGURE: ROLE_ADMIN,
    PERMISSION_STAFF_SENSITIVE: ROLE_OWNER,
}
VALID_PERMISSIONS = frozenset(PERMISSION_MINIMUM_ROLE) | {
    PERMISSION_PUBLIC,
    PERMISSION_SESSION_END,
}
