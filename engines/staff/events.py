"""
Till Staff Engine — Event Types and Payload Builders
=======================================================
Payloads never carry password or social security hashes.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from engines.staff.models import Employee


# ══════════════════════════════════════════════════════════════
# EVENT TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

STAFF_SESSION_LOGGED_IN_V1 = "staff.session.logged_in.v1"
STAFF_SESSION_LOGGED_OUT_V1 = "staff.session.logged_out.v1"
STAFF_CLOCK_CLOCKED_IN_V1 = "staff.clock.clocked_in.v1"
STAFF_CLOCK_CLOCKED_OUT_V1 = "staff.clock.clocked_out.v1"
STAFF_EMPLOYEE_ADDED_V1 = "staff.employee.added.v1"
STAFF_EMPLOYEE_UPDATED_V1 = "staff.employee.updated.v1"
STAFF_EMPLOYEE_STATUS_CHANGED_V1 = "staff.employee.status_changed.v1"

STAFF_EVENT_TYPES = (
    STAFF_SESSION_LOGGED_IN_V1,
    STAFF_SESSION_LOGGED_OUT_V1,
    STAFF_CLOCK_CLOCKED_IN_V1,
    STAFF_CLOCK_CLOCKED_OUT_V1,
    STAFF_EMPLOYEE_ADDED_V1,
    STAFF_EMPLOYEE_UPDATED_V1,
    STAFF_EMPLOYEE_STATUS_CHANGED_V1,
)


# ══════════════════════════════════════════════════════════════
# PAYLOAD BUILDERS
# ══════════════════════════════════════════════════════════════

def build_session_payload(employee: Employee) -> dict:
    return {
        "employee_id": employee.employee_id,
        "username": employee.username,
        "role": employee.role,
    }


def build_clocked_in_payload(employee: Employee) -> dict:
    return {
        "employee_id": employee.employee_id,
        "clocked_in_at": employee.last_clock_in,
    }


def build_clocked_out_payload(employee: Employee, hours_worked: Decimal) -> dict:
    return {
        "employee_id": employee.employee_id,
        "clocked_out_at": employee.last_clock_out,
        "hours_worked": hours_worked,
        "total_hours": employee.total_hours,
    }


def build_employee_added_payload(employee: Employee) -> dict:
    return employee.to_dict()


def build_employee_updated_payload(
    employee: Employee, changed_fields: Iterable[str],
) -> dict:
    return {
        "employee_id": employee.employee_id,
        "changed_fields": sorted(changed_fields),
    }


def build_status_changed_payload(employee: Employee, previous_status: str) -> dict:
    return {
        "employee_id": employee.employee_id,
        "previous_status": previous_status,
        "status": employee.status,
    }
