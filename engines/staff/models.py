"""
Till Staff Engine — Employee Model
=====================================
Employees are frozen values held by the roster. Clocking in, status
changes and edits replace the stored value.

Only 'active' employees authenticate. Password and social security
numbers are stored as bcrypt hashes and never leave to_dict().
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from core.commands.errors import ValidationError
from core.permissions.constants import ROLE_CASHIER, ROLE_RANK, VALID_ROLES
from core.primitives.money import ZERO

STATUS_ACTIVE = "active"
STATUS_FIRED = "fired"
STATUS_TERMINATED = "terminated"
STATUS_ELIGIBLE_FOR_REHIRE = "eligible_for_rehire"

VALID_STATUSES = frozenset({
    STATUS_ACTIVE,
    STATUS_FIRED,
    STATUS_TERMINATED,
    STATUS_ELIGIBLE_FOR_REHIRE,
})


def validate_role(role: str) -> str:
    if role not in VALID_ROLES:
        raise ValidationError(
            f"role '{role}' not valid. Must be one of: {sorted(VALID_ROLES)}"
        )
    return role


def validate_status(status: str) -> str:
    if status not in VALID_STATUSES:
        raise ValidationError(
            f"status '{status}' not valid. Must be one of: {sorted(VALID_STATUSES)}"
        )
    return status


@dataclass(frozen=True)
class Employee:
    employee_id: str
    username: str
    password_hash: str
    role: str = ROLE_CASHIER
    status: str = STATUS_ACTIVE
    clocked_in: bool = False
    last_clock_in: Optional[datetime] = None
    last_clock_out: Optional[datetime] = None
    total_hours: Decimal = ZERO
    phone_number: str = ""
    email: str = ""
    address: str = ""
    social_security_hash: str = ""

    def __post_init__(self):
        if not isinstance(self.employee_id, str) or not self.employee_id:
            raise ValidationError("employee_id must be a non-empty string.")
        if not isinstance(self.username, str) or not self.username.strip():
            raise ValidationError("username must be non-empty.")
        if not self.password_hash:
            raise ValidationError("password_hash must be non-empty.")
        validate_role(self.role)
        validate_status(self.status)
        if not isinstance(self.total_hours, Decimal) or self.total_hours < ZERO:
            raise ValidationError("total_hours must be a Decimal >= 0.")
        if self.clocked_in and self.last_clock_in is None:
            raise ValidationError("A clocked-in employee needs last_clock_in.")

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE

    @property
    def rank(self) -> int:
        return ROLE_RANK[self.role]

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "username": self.username,
            "role": self.role,
            "status": self.status,
            "clocked_in": self.clocked_in,
            "last_clock_in": (
                self.last_clock_in.isoformat() if self.last_clock_in else None
            ),
            "last_clock_out": (
                self.last_clock_out.isoformat() if self.last_clock_out else None
            ),
            "total_hours": str(self.total_hours),
            "phone_number": self.phone_number,
            "email": self.email,
            "address": self.address,
            "has_social_security": bool(self.social_security_hash),
        }
