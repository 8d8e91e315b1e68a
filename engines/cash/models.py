"""
Till Cash Engine — Drawer Movement
=====================================
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class MovementKind(Enum):
    CREDIT = "credit"
    DEBIT = "debit"
    REMOVAL = "removal"


@dataclass(frozen=True)
class DrawerMovement:
    """One change to the drawer balance. The drawer keeps all of them."""

    kind: MovementKind
    amount: Decimal
    balance_after: Decimal
    occurred_at: datetime
    reference: Optional[str] = None
    employee_id: Optional[str] = None
    movement_id: uuid.UUID = field(default_factory=uuid.uuid4)

    def to_dict(self) -> dict:
        return {
            "movement_id": str(self.movement_id),
            "kind": self.kind.value,
            "amount": str(self.amount),
            "balance_after": str(self.balance_after),
            "occurred_at": self.occurred_at.isoformat(),
            "reference": self.reference,
            "employee_id": self.employee_id,
        }
