"""
Till Permissions - Public API
=============================
"""

from core.permissions.constants import (
    PERMISSION_CASH_REMOVE,
    PERMISSION_CATALOG_MANAGE,
    PERMISSION_POS_OPERATE,
    PERMISSION_PUBLIC,
    PERMISSION_REFUND_ISSUE,
    PERMISSION_SESSION_END,
    PERMISSION_SETTINGS_CONFIGURE,
    PERMISSION_STAFF_MANAGE,
    PERMISSION_STAFF_SENSITIVE,
    ROLE_ADMIN,
    ROLE_CASHIER,
    ROLE_MANAGER,
    ROLE_OWNER,
    ROLE_RANK,
    VALID_ROLES,
)
from core.permissions.evaluator import (
    PermissionEvaluationResult,
    PermissionEvaluator,
    has_permission,
    permission_policy,
)
from core.permissions.models import ROLES, Role, build_role
from core.permissions.registry import resolve_required_permission

__all__ = [
    "PERMISSION_PUBLIC",
    "PERMISSION_SESSION_END",
    "PERMISSION_POS_OPERATE",
    "PERMISSION_REFUND_ISSUE",
    "PERMISSION_CASH_REMOVE",
    "PERMISSION_CATALOG_MANAGE",
    "PERMISSION_STAFF_MANAGE",
    "PERMISSION_STAFF_SENSITIVE",
    "PERMISSION_SETTINGS_CONFIGURE",
    "ROLE_CASHIER",
    "ROLE_MANAGER",
    "ROLE_ADMIN",
    "ROLE_OWNER",
    "ROLE_RANK",
    "VALID_ROLES",
    "ROLES",
    "Role",
    "build_role",
    "PermissionEvaluator",
    "PermissionEvaluationResult",
    "has_permission",
    "permission_policy",
    "resolve_required_permission",
]
