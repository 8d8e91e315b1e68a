"""
Till Staff Engine — Roster and Register Session
==================================================
EmployeeRoster owns employee records and credential checks.
Session holds the one logged-in employee of the register.

The session stores an employee id, not an Employee. The actor the
command bus authorizes is re-read from the roster on every command,
so an employee whose status changes away from 'active' loses access
immediately.
"""

from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from dataclasses import replace
from decimal import Decimal
from threading import RLock
from typing import Callable, Dict, List, Optional

from core.commands.errors import (
    Forbidden,
    InvalidCredentials,
    NotAuthenticated,
    NotFound,
    ValidationError,
)
from core.events.dispatcher import EventDispatcher
from core.permissions.constants import PERMISSION_STAFF_SENSITIVE, ROLE_CASHIER
from core.permissions.evaluator import has_permission
from core.primitives.money import ZERO
from core.security.password import CredentialVerifier, BcryptCredentialVerifier
from core.time.clock import Clock, SystemClock
from engines.staff.events import (
    STAFF_CLOCK_CLOCKED_IN_V1,
    STAFF_CLOCK_CLOCKED_OUT_V1,
    STAFF_EMPLOYEE_ADDED_V1,
    STAFF_EMPLOYEE_STATUS_CHANGED_V1,
    STAFF_EMPLOYEE_UPDATED_V1,
    STAFF_SESSION_LOGGED_IN_V1,
    STAFF_SESSION_LOGGED_OUT_V1,
    build_clocked_in_payload,
    build_clocked_out_payload,
    build_employee_added_payload,
    build_employee_updated_payload,
    build_session_payload,
    build_status_changed_payload,
)
from engines.staff.models import (
    STATUS_ACTIVE,
    Employee,
    validate_role,
    validate_status,
)

logger = logging.getLogger("till.staff")

SECONDS_PER_HOUR = Decimal("3600")


def _require_secret(value, field_name: str) -> str:
    if not isinstance(value, str) or not value:
        raise ValidationError(f"{field_name} must be non-empty.")
    return value


class _Publisher:
    """Shared event plumbing for roster and session."""

    def __init__(self, clock: Clock | None, event_dispatcher: EventDispatcher | None):
        self._clock = clock or SystemClock()
        self._event_dispatcher = event_dispatcher

    def _emit(self, event_type: str, payload: dict, actor_id: Optional[str]) -> None:
        if self._event_dispatcher is None:
            return
        self._event_dispatcher.emit(
            event_type,
            payload,
            occurred_at=self._clock.now_utc(),
            actor_id=actor_id,
        )


# ══════════════════════════════════════════════════════════════
# EMPLOYEE ROSTER
# ══════════════════════════════════════════════════════════════

class EmployeeRoster(_Publisher):
    """Employee records keyed by employee_id. Usernames are unique."""

    def __init__(
        self,
        verifier: CredentialVerifier | None = None,
        *,
        clock: Clock | None = None,
        event_dispatcher: EventDispatcher | None = None,
    ):
        super().__init__(clock, event_dispatcher)
        self._lock = RLock()
        self._verifier = verifier or BcryptCredentialVerifier()
        self._employees: "OrderedDict[str, Employee]" = OrderedDict()

    # ── queries ───────────────────────────────────────────────

    def get(self, employee_id: str) -> Employee:
        with self._lock:
            employee = self._employees.get(employee_id)
        if employee is None:
            raise NotFound("Employee", employee_id)
        return employee

    def find(self, employee_id: Optional[str]) -> Optional[Employee]:
        if employee_id is None:
            return None
        with self._lock:
            return self._employees.get(employee_id)

    def find_by_username(self, username: str) -> Optional[Employee]:
        with self._lock:
            for employee in self._employees.values():
                if employee.username == username:
                    return employee
        return None

    def employees(self) -> List[Employee]:
        with self._lock:
            return list(self._employees.values())

    def to_dict(self) -> Dict[str, dict]:
        return {e.employee_id: e.to_dict() for e in self.employees()}

    # ── credentials ───────────────────────────────────────────

    def authenticate(self, username: str, password: str) -> Employee:
        """
        Unknown username, wrong password and non-active status all
        raise the same InvalidCredentials.
        """
        employee = self.find_by_username(username) if username else None
        if (
            employee is None
            or not employee.is_active
            or not isinstance(password, str)
            or not self._verifier.verify(password, employee.password_hash)
        ):
            logger.warning(f"Failed login attempt for username {username!r}")
            raise InvalidCredentials()
        return employee

    # ── roster management ─────────────────────────────────────

    def add(
        self,
        username: str,
        password: str,
        role: str = ROLE_CASHIER,
        *,
        employee_id: Optional[str] = None,
        phone_number: str = "",
        email: str = "",
        address: str = "",
        social_security: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> Employee:
        _require_secret(password, "password")
        validate_role(role)

        with self._lock:
            self._require_unique_username(username)

            new_id = employee_id or str(uuid.uuid4())
            if new_id in self._employees:
                raise ValidationError(f"Employee id '{new_id}' already exists.")

            employee = Employee(
                employee_id=new_id,
                username=username,
                password_hash=self._verifier.hash(password),
                role=role,
                phone_number=phone_number or "",
                email=email or "",
                address=address or "",
                social_security_hash=(
                    self._verifier.hash(social_security) if social_security else ""
                ),
            )
            self._employees[new_id] = employee

        logger.info(f"Employee added: {new_id} '{username}' as {role}")
        self._emit(
            STAFF_EMPLOYEE_ADDED_V1,
            build_employee_added_payload(employee),
            actor_id,
        )
        return employee

    def update(
        self,
        employee_id: str,
        changes: dict,
        *,
        editor: Optional[Employee] = None,
    ) -> Employee:
        """
        Apply a partial edit.

        Secrets (password, social_security) are hashed before storing.
        Editing social_security requires an editor holding the
        sensitive-edit permission (owner).
        """
        if not changes:
            raise ValidationError("No employee fields to update.")

        if "social_security" in changes and (
            editor is None
            or not has_permission(editor.role, PERMISSION_STAFF_SENSITIVE)
        ):
            raise Forbidden("Only an owner may edit social security numbers.")

        with self._lock:
            employee = self.get(employee_id)
            updates = {}
            for name, value in changes.items():
                if name == "password":
                    updates["password_hash"] = self._verifier.hash(
                        _require_secret(value, "password")
                    )
                elif name == "social_security":
                    updates["social_security_hash"] = (
                        self._verifier.hash(value) if value else ""
                    )
                elif name == "role":
                    updates["role"] = validate_role(value)
                elif name == "username":
                    if value != employee.username:
                        self._require_unique_username(value)
                    updates["username"] = value
                elif name in ("phone_number", "email", "address"):
                    updates[name] = value or ""
                else:
                    raise ValidationError(f"Employee field '{name}' is not editable.")

            updated = replace(employee, **updates)
            self._employees[employee_id] = updated

        logger.info(
            f"Employee {employee_id} updated: {sorted(changes)}"
        )
        self._emit(
            STAFF_EMPLOYEE_UPDATED_V1,
            build_employee_updated_payload(updated, changes.keys()),
            editor.employee_id if editor else None,
        )
        return updated

    def set_status(
        self,
        employee_id: str,
        status: str,
        *,
        actor_id: Optional[str] = None,
    ) -> Employee:
        validate_status(status)
        with self._lock:
            employee = self.get(employee_id)
            updated = replace(employee, status=status)
            self._employees[employee_id] = updated

        logger.info(
            f"Employee {employee_id} status {employee.status} -> {status}"
        )
        self._emit(
            STAFF_EMPLOYEE_STATUS_CHANGED_V1,
            build_status_changed_payload(updated, employee.status),
            actor_id,
        )
        return updated

    def store(self, employee: Employee) -> Employee:
        """Replace an existing record (clock state changes)."""
        with self._lock:
            self.get(employee.employee_id)
            self._employees[employee.employee_id] = employee
        return employee

    def _require_unique_username(self, username: str) -> None:
        if not isinstance(username, str) or not username.strip():
            raise ValidationError("username must be non-empty.")
        if self.find_by_username(username) is not None:
            raise ValidationError(f"Username '{username}' is already taken.")


# ══════════════════════════════════════════════════════════════
# REGISTER SESSION
# ══════════════════════════════════════════════════════════════

class Session(_Publisher):
    """
    At most one logged-in employee per register.

    Usage:
        session = Session(roster)
        session.login("johndoe", "password123")
        session.clock_in()
        session.logout(abandon_order=order.clear)
    """

    def __init__(
        self,
        roster: EmployeeRoster,
        *,
        clock: Clock | None = None,
        event_dispatcher: EventDispatcher | None = None,
    ):
        super().__init__(clock, event_dispatcher)
        self._roster = roster
        self._employee_id: Optional[str] = None

    @property
    def employee_id(self) -> Optional[str]:
        return self._employee_id

    def current_employee(self) -> Optional[Employee]:
        """The logged-in employee as the roster holds it now."""
        return self._roster.find(self._employee_id)

    def login(
        self,
        username: str,
        password: str,
        abandon_order: Optional[Callable[[], None]] = None,
    ) -> Employee:
        """
        Start a session. A leftover session of an employee who is no
        longer active is logged out first, once the new credentials
        have been accepted.
        """
        current = self.current_employee()
        if current is not None and current.is_active:
            raise ValidationError(
                f"Employee '{current.username}' is already logged in."
            )

        employee = self._roster.authenticate(username, password)
        if current is not None:
            self.logout(abandon_order=abandon_order)
        self._employee_id = employee.employee_id

        logger.info(f"Login: {employee.employee_id} ({employee.role})")
        self._emit(
            STAFF_SESSION_LOGGED_IN_V1,
            build_session_payload(employee),
            employee.employee_id,
        )
        return employee

    def logout(
        self, abandon_order: Optional[Callable[[], None]] = None,
    ) -> Employee:
        """
        Clock out if clocked in, abandon the open order, end the session.
        """
        self._require_employee(require_active=False)
        employee = self.clock_out()
        if abandon_order is not None:
            abandon_order()
        self._employee_id = None

        logger.info(f"Logout: {employee.employee_id}")
        self._emit(
            STAFF_SESSION_LOGGED_OUT_V1,
            build_session_payload(employee),
            employee.employee_id,
        )
        return employee

    def clock_in(self) -> Employee:
        """No-op when already clocked in."""
        employee = self._require_employee()
        if employee.clocked_in:
            return employee

        updated = self._roster.store(
            replace(employee, clocked_in=True, last_clock_in=self._clock.now_utc())
        )
        logger.info(f"Clock in: {updated.employee_id}")
        self._emit(
            STAFF_CLOCK_CLOCKED_IN_V1,
            build_clocked_in_payload(updated),
            updated.employee_id,
        )
        return updated

    def clock_out(self) -> Employee:
        """No-op when not clocked in. Accrues the shift into total_hours."""
        employee = self._require_employee(require_active=False)
        if not employee.clocked_in:
            return employee

        now = self._clock.now_utc()
        seconds = Decimal(str((now - employee.last_clock_in).total_seconds()))
        hours = max(seconds / SECONDS_PER_HOUR, ZERO)
        updated = self._roster.store(
            replace(
                employee,
                clocked_in=False,
                last_clock_out=now,
                total_hours=employee.total_hours + hours,
            )
        )
        logger.info(f"Clock out: {updated.employee_id} after {hours:.2f}h")
        self._emit(
            STAFF_CLOCK_CLOCKED_OUT_V1,
            build_clocked_out_payload(updated, hours),
            updated.employee_id,
        )
        return updated

    def _require_employee(self, require_active: bool = True) -> Employee:
        employee = self.current_employee()
        if employee is None:
            raise NotAuthenticated()
        if require_active and employee.status != STATUS_ACTIVE:
            raise NotAuthenticated()
        return employee
