"""
Till Permissions - Immutable Role Model
=======================================
"""

from __future__ import annotations

from dataclasses import dataclass

from core.permissions.constants import (
    PERMISSION_MINIMUM_ROLE,
    ROLE_RANK,
    VALID_PERMISSIONS,
    VALID_ROLES,
)


@dataclass(frozen=True)
class Role:
    role_id: str
    permissions: tuple[str, ...]

    def __post_init__(self):
        if self.role_id not in VALID_ROLES:
            raise ValueError(
                f"role_id '{self.role_id}' not valid. "
                f"Must be one of: {sorted(VALID_ROLES)}"
            )

        if not isinstance(self.permissions, tuple):
            raise ValueError("permissions must be a tuple.")

        normalized = tuple(sorted(set(self.permissions)))
        for permission in normalized:
            if permission not in VALID_PERMISSIONS:
                raise ValueError(
                    f"permission '{permission}' not valid. "
                    f"Must be one of: {sorted(VALID_PERMISSIONS)}"
                )

        object.__setattr__(self, "permissions", normalized)

    @property
    def rank(self) -> int:
        return ROLE_RANK[self.role_id]

    def has(self, permission: str) -> bool:
        return permission in self.permissions


def build_role(role_id: str) -> Role:
    """Derive a role's permissions from the rank hierarchy."""
    if role_id not in ROLE_RANK:
        raise ValueError(f"role_id '{role_id}' not valid.")
    rank = ROLE_RANK[role_id]
    granted = tuple(
        permission
        for permission, minimum in PERMISSION_MINIMUM_ROLE.items()
        if ROLE_RANK[minimum] <= rank
    )
    return Role(role_id=role_id, permissions=granted)


ROLES = {role_id: build_role(role_id) for role_id in sorted(VALID_ROLES)}
