"""
Till Staff Engine — Request Commands
=======================================
Typed session and roster requests that convert into canonical
Command objects. Secrets travel in the payload of login and roster
commands only; they are hashed by the roster and never logged.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from core.commands.base import Command


# ══════════════════════════════════════════════════════════════
# COMMAND TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

STAFF_SESSION_LOGIN_REQUEST = "staff.session.login.request"
STAFF_SESSION_LOGOUT_REQUEST = "staff.session.logout.request"
STAFF_SESSION_CURRENT_REQUEST = "staff.session.current.request"
STAFF_CLOCK_IN_REQUEST = "staff.clock.in.request"
STAFF_CLOCK_OUT_REQUEST = "staff.clock.out.request"
STAFF_EMPLOYEE_ADD_REQUEST = "staff.employee.add.request"
STAFF_EMPLOYEE_UPDATE_REQUEST = "staff.employee.update.request"
STAFF_EMPLOYEE_SET_STATUS_REQUEST = "staff.employee.set_status.request"
STAFF_EMPLOYEE_LIST_REQUEST = "staff.employee.list.request"

STAFF_COMMAND_TYPES = frozenset({
    STAFF_SESSION_LOGIN_REQUEST,
    STAFF_SESSION_LOGOUT_REQUEST,
    STAFF_SESSION_CURRENT_REQUEST,
    STAFF_CLOCK_IN_REQUEST,
    STAFF_CLOCK_OUT_REQUEST,
    STAFF_EMPLOYEE_ADD_REQUEST,
    STAFF_EMPLOYEE_UPDATE_REQUEST,
    STAFF_EMPLOYEE_SET_STATUS_REQUEST,
    STAFF_EMPLOYEE_LIST_REQUEST,
})

# Fields update_employee accepts. social_security needs the owner role.
EDITABLE_EMPLOYEE_FIELDS = frozenset({
    "username",
    "password",
    "role",
    "phone_number",
    "email",
    "address",
    "social_security",
})


def _staff_command(
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
        source_engine="staff",
    )


# ══════════════════════════════════════════════════════════════
# REQUEST COMMANDS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LoginRequest:
    username: str
    password: str = field(repr=False)

    def to_command(self, **kwargs) -> Command:
        return _staff_command(
            STAFF_SESSION_LOGIN_REQUEST,
            {"username": self.username, "password": self.password},
            **kwargs,
        )


@dataclass(frozen=True)
class AddEmployeeRequest:
    username: str
    password: str = field(repr=False)
    role: str = "cashier"
    phone_number: str = ""
    email: str = ""
    address: str = ""
    social_security: Optional[str] = field(default=None, repr=False)
    employee_id: Optional[str] = None

    def to_command(self, **kwargs) -> Command:
        return _staff_command(
            STAFF_EMPLOYEE_ADD_REQUEST,
            {
                "username": self.username,
                "password": self.password,
                "role": self.role,
                "phone_number": self.phone_number,
                "email": self.email,
                "address": self.address,
                "social_security": self.social_security,
                "employee_id": self.employee_id,
            },
            **kwargs,
        )


@dataclass(frozen=True)
class UpdateEmployeeRequest:
    """Partial edit: only the fields present in `changes` are applied."""
    employee_id: str
    changes: dict = field(repr=False)

    def __post_init__(self):
        if not isinstance(self.changes, dict):
            raise TypeError("changes must be a dict.")
        unknown = set(self.changes) - EDITABLE_EMPLOYEE_FIELDS
        if unknown:
            raise ValueError(
                f"Unknown employee fields: {sorted(unknown)}. "
                f"Editable: {sorted(EDITABLE_EMPLOYEE_FIELDS)}"
            )

    def to_command(self, **kwargs) -> Command:
        return _staff_command(
            STAFF_EMPLOYEE_UPDATE_REQUEST,
            {"employee_id": self.employee_id, "changes": dict(self.changes)},
            **kwargs,
        )


@dataclass(frozen=True)
class SetEmployeeStatusRequest:
    employee_id: str
    status: str

    def to_command(self, **kwargs) -> Command:
        return _staff_command(
            STAFF_EMPLOYEE_SET_STATUS_REQUEST,
            {"employee_id": self.employee_id, "status": self.status},
            **kwargs,
        )
