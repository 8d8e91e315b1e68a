"""
Till Cash Engine — Request Commands
======================================
Typed drawer requests that convert into canonical Command objects.
Credits and debits are not commands; they happen inside checkout,
void and refund.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.commands.base import Command


# ══════════════════════════════════════════════════════════════
# COMMAND TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

CASH_BALANCE_GET_REQUEST = "cash.balance.get.request"
CASH_MOVEMENTS_LIST_REQUEST = "cash.movements.list.request"
CASH_DRAWER_REMOVE_REQUEST = "cash.drawer.remove.request"

CASH_COMMAND_TYPES = frozenset({
    CASH_BALANCE_GET_REQUEST,
    CASH_MOVEMENTS_LIST_REQUEST,
    CASH_DRAWER_REMOVE_REQUEST,
})


# ══════════════════════════════════════════════════════════════
# REQUEST COMMANDS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RemoveCashRequest:
    """Manual removal of cash from the drawer (bank drop, safe transfer)."""
    amount: object

    def to_command(
        self,
        *,
        actor_id: Optional[str],
        command_id: uuid.UUID,
        issued_at: datetime,
    ) -> Command:
        return Command(
            command_id=command_id,
            command_type=CASH_DRAWER_REMOVE_REQUEST,
            actor_id=actor_id,
            payload={"amount": self.amount},
            issued_at=issued_at,
            source_engine="cash",
        )
