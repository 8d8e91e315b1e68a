"""
Tests for core.permissions — role hierarchy and command authorization.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

import pytest

from core.commands.base import Command, derive_source_engine
from core.commands.rejection import ReasonCode
from core.permissions import (
    PERMISSION_CASH_REMOVE,
    PERMISSION_CATALOG_MANAGE,
    PERMISSION_POS_OPERATE,
    PERMISSION_PUBLIC,
    PERMISSION_REFUND_ISSUE,
    PERMISSION_SESSION_END,
    PERMISSION_STAFF_SENSITIVE,
    ROLES,
    PermissionEvaluator,
    Role,
    build_role,
    has_permission,
    permission_policy,
    resolve_required_permission,
)
from core.permissions.registry import COMMAND_PERMISSION_MAP

NOW = datetime(2026, 3, 1, 9, 0, 0, tzinfo=timezone.utc)


@dataclass(frozen=True)
class StubActor:
    employee_id: str
    role: str
    is_active: bool = True


def make_command(command_type: str) -> Command:
    return Command(
        command_id=uuid.uuid4(),
        command_type=command_type,
        actor_id=None,
        payload={},
        issued_at=NOW,
        source_engine=derive_source_engine(command_type),
    )


# ══════════════════════════════════════════════════════════════
# ROLE HIERARCHY
# ══════════════════════════════════════════════════════════════

class TestRoleHierarchy:
    def test_ranks_are_ordered(self):
        ranks = [ROLES[r].rank for r in ("cashier", "manager", "admin", "owner")]
        assert ranks == sorted(ranks)
        assert len(set(ranks)) == 4

    def test_higher_role_includes_lower_permissions(self):
        order = ("cashier", "manager", "admin", "owner")
        for lower, higher in zip(order, order[1:]):
            assert set(ROLES[lower].permissions) <= set(ROLES[higher].permissions)

    def test_cashier_permissions(self):
        assert has_permission("cashier", PERMISSION_POS_OPERATE)
        assert not has_permission("cashier", PERMISSION_REFUND_ISSUE)
        assert not has_permission("cashier", PERMISSION_CASH_REMOVE)

    def test_manager_can_refund_and_remove_cash(self):
        assert has_permission("manager", PERMISSION_REFUND_ISSUE)
        assert has_permission("manager", PERMISSION_CASH_REMOVE)
        assert not has_permission("manager", PERMISSION_CATALOG_MANAGE)

    def test_only_owner_edits_sensitive_fields(self):
        assert not has_permission("admin", PERMISSION_STAFF_SENSITIVE)
        assert has_permission("owner", PERMISSION_STAFF_SENSITIVE)

    def test_public_for_everyone(self):
        assert has_permission("cashier", PERMISSION_PUBLIC)

    def test_unknown_role_has_nothing(self):
        assert not has_permission("janitor", PERMISSION_POS_OPERATE)

    def test_build_role_rejects_unknown(self):
        with pytest.raises(ValueError):
            build_role("janitor")

    def test_role_rejects_unknown_permission(self):
        with pytest.raises(ValueError, match="permission"):
            Role(role_id="cashier", permissions=("launch.rockets",))


# ══════════════════════════════════════════════════════════════
# REGISTRY
# ══════════════════════════════════════════════════════════════

class TestCommandPermissionRegistry:
    def test_login_is_public(self):
        assert (
            resolve_required_permission("staff.session.login.request")
            == PERMISSION_PUBLIC
        )

    def test_refund_needs_refund_permission(self):
        assert (
            resolve_required_permission("ledger.receipt.refund.request")
            == PERMISSION_REFUND_ISSUE
        )

    def test_unknown_command_unmapped(self):
        assert resolve_required_permission("order.rocket.launch.request") is None

    def test_every_entry_is_a_request(self):
        for command_type in COMMAND_PERMISSION_MAP:
            assert command_type.endswith(".request")


# ══════════════════════════════════════════════════════════════
# EVALUATOR
# ══════════════════════════════════════════════════════════════

class TestPermissionEvaluator:
    def test_public_without_actor(self):
        result = PermissionEvaluator.evaluate(
            make_command("staff.session.login.request"), None
        )
        assert result.allowed

    def test_no_actor_not_authenticated(self):
        result = PermissionEvaluator.evaluate(
            make_command("order.item.add.request"), None
        )
        assert not result.allowed
        assert result.rejection_code == ReasonCode.NOT_AUTHENTICATED

    def test_inactive_actor_not_authenticated(self):
        result = PermissionEvaluator.evaluate(
            make_command("order.item.add.request"),
            StubActor("emp-1", "owner", is_active=False),
        )
        assert result.rejection_code == ReasonCode.NOT_AUTHENTICATED

    def test_cashier_cannot_refund(self):
        result = PermissionEvaluator.evaluate(
            make_command("ledger.receipt.refund.request"),
            StubActor("emp-1", "cashier"),
        )
        assert result.rejection_code == ReasonCode.FORBIDDEN
        assert "emp-1" in result.message

    def test_manager_can_refund(self):
        result = PermissionEvaluator.evaluate(
            make_command("ledger.receipt.refund.request"),
            StubActor("emp-2", "manager"),
        )
        assert result.allowed

    def test_inactive_actor_can_end_session(self):
        command = make_command("staff.session.logout.request")
        assert resolve_required_permission(command.command_type) == PERMISSION_SESSION_END

        result = PermissionEvaluator.evaluate(
            command, StubActor("emp-1", "cashier", is_active=False)
        )

        assert result.allowed

    def test_end_session_needs_someone_logged_in(self):
        result = PermissionEvaluator.evaluate(
            make_command("staff.session.logout.request"), None
        )
        assert result.rejection_code == ReasonCode.NOT_AUTHENTICATED

    def test_unmapped_command_forbidden(self):
        result = PermissionEvaluator.evaluate(
            make_command("order.rocket.launch.request"),
            StubActor("emp-4", "owner"),
        )
        assert result.rejection_code == ReasonCode.FORBIDDEN


class TestPermissionPolicy:
    def test_allowed_returns_none(self):
        assert permission_policy(
            make_command("order.item.add.request"), StubActor("emp-1", "cashier")
        ) is None

    def test_denied_returns_reason(self):
        reason = permission_policy(
            make_command("cash.drawer.remove.request"), StubActor("emp-1", "cashier")
        )
        assert reason.code == ReasonCode.FORBIDDEN
        assert reason.policy_name == "permission_policy"
