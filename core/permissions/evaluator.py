"""
Till Permissions - Deterministic Permission Evaluator
=====================================================
Authorization is decided here, inside the engine, never by the
presentation layer. A command is allowed only when:

- its command_type has a permission mapping
- the mapping is PUBLIC, or an active employee is logged in
  (SESSION_END only needs someone logged in, so a deactivated
  employee can still end their session)
- that employee's role holds the required permission
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from core.commands.base import Command
from core.commands.rejection import ReasonCode, RejectionReason
from core.permissions.constants import PERMISSION_PUBLIC, PERMISSION_SESSION_END
from core.permissions.models import ROLES
from core.permissions.registry import resolve_required_permission


@dataclass(frozen=True)
class PermissionEvaluationResult:
    allowed: bool
    rejection_code: Optional[str] = None
    message: str = ""


class PermissionEvaluator:
    @staticmethod
    def _allow() -> PermissionEvaluationResult:
        return PermissionEvaluationResult(allowed=True)

    @staticmethod
    def _deny(code: str, message: str) -> PermissionEvaluationResult:
        return PermissionEvaluationResult(
            allowed=False,
            rejection_code=code,
            message=message,
        )

    @staticmethod
    def evaluate(command: Command, actor: Any) -> PermissionEvaluationResult:
        """
        Evaluate command authorization for the current actor.

        The actor is any object exposing employee_id, role and
        is_active (the logged-in Employee), or None.
        """
        required_permission = resolve_required_permission(command.command_type)
        if required_permission is None:
            return PermissionEvaluator._deny(
                ReasonCode.FORBIDDEN,
                (
                    "No permission mapping for command_type "
                    f"'{command.command_type}'."
                ),
            )

        if required_permission == PERMISSION_PUBLIC:
            return PermissionEvaluator._allow()

        if required_permission == PERMISSION_SESSION_END:
            if actor is None:
                return PermissionEvaluator._deny(
                    ReasonCode.NOT_AUTHENTICATED,
                    "No employee is logged in.",
                )
            return PermissionEvaluator._allow()

        if actor is None or not actor.is_active:
            return PermissionEvaluator._deny(
                ReasonCode.NOT_AUTHENTICATED,
                "An authenticated active employee is required.",
            )

        if not has_permission(actor.role, required_permission):
            return PermissionEvaluator._deny(
                ReasonCode.FORBIDDEN,
                (
                    f"Employee '{actor.employee_id}' with role "
                    f"'{actor.role}' is missing permission "
                    f"'{required_permission}'."
                ),
            )

        return PermissionEvaluator._allow()


def has_permission(role_id: str, permission: str) -> bool:
    role = ROLES.get(role_id)
    if role is None:
        return False
    return permission in (PERMISSION_PUBLIC, PERMISSION_SESSION_END) or role.has(
        permission
    )


def permission_policy(command: Command, actor: Any) -> Optional[RejectionReason]:
    """Dispatcher policy adapter around PermissionEvaluator."""
    result = PermissionEvaluator.evaluate(command, actor)
    if result.allowed:
        return None
    return RejectionReason(
        code=result.rejection_code,
        message=result.message,
        policy_name="permission_policy",
    )
