"""
Till Cash Engine — Event Types and Payload Builders
======================================================
"""

from __future__ import annotations

from engines.cash.models import DrawerMovement, MovementKind


# ══════════════════════════════════════════════════════════════
# EVENT TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

CASH_DRAWER_CREDITED_V1 = "cash.drawer.credited.v1"
CASH_DRAWER_DEBITED_V1 = "cash.drawer.debited.v1"
CASH_DRAWER_REMOVED_V1 = "cash.drawer.removed.v1"

CASH_EVENT_TYPES = (
    CASH_DRAWER_CREDITED_V1,
    CASH_DRAWER_DEBITED_V1,
    CASH_DRAWER_REMOVED_V1,
)

MOVEMENT_TO_EVENT_TYPE = {
    MovementKind.CREDIT: CASH_DRAWER_CREDITED_V1,
    MovementKind.DEBIT: CASH_DRAWER_DEBITED_V1,
    MovementKind.REMOVAL: CASH_DRAWER_REMOVED_V1,
}


def resolve_cash_event_type(kind: MovementKind) -> str:
    return MOVEMENT_TO_EVENT_TYPE[kind]


# ══════════════════════════════════════════════════════════════
# PAYLOAD BUILDERS
# ══════════════════════════════════════════════════════════════

def build_movement_payload(movement: DrawerMovement) -> dict:
    return {
        "movement_id": movement.movement_id,
        "kind": movement.kind.value,
        "amount": movement.amount,
        "balance_after": movement.balance_after,
        "reference": movement.reference,
        "employee_id": movement.employee_id,
    }
