"""
Till Command Layer — Command Base Contract
=============================================
Every action against the register begins as a Command.

A Command is a frozen, auditable declaration of intent.
It carries identity, actor, and payload — nothing else.

Rules:
- Immutable once created (frozen dataclass)
- No business logic inside
- command_type must end with '.request'
- command_type follows engine.domain.action.request format
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


# ══════════════════════════════════════════════════════════════
# CANONICAL COMMAND
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Command:
    """
    Canonical Till Command — declaration of intent.

    Fields:
        command_id:     Unique identifier (UUID).
        command_type:   Namespaced type ending in '.request'
                        (e.g. 'ledger.receipt.void.request').
        actor_id:       Employee issuing the command, None when
                        nobody is logged in.
        payload:        Intent data (dict).
        issued_at:      When the command was issued.
        source_engine:  Engine that owns this command.

    Example:
        Command(
            command_id=uuid.uuid4(),
            command_type="order.item.add.request",
            actor_id="emp-1",
            payload={"product_id": "apple"},
            issued_at=datetime.now(timezone.utc),
            source_engine="order",
        )
    """

    command_id: uuid.UUID
    command_type: str
    actor_id: Optional[str]
    payload: dict
    issued_at: datetime
    source_engine: str

    def __post_init__(self):
        if not isinstance(self.command_id, uuid.UUID):
            raise ValueError(
                f"command_id must be UUID, got {type(self.command_id).__name__}"
            )

        if not self.command_type or not isinstance(self.command_type, str):
            raise ValueError("command_type must be a non-empty string.")

        if not self.command_type.endswith(".request"):
            raise ValueError(
                f"command_type '{self.command_type}' must end with "
                f"'.request' (e.g. 'order.item.add.request')."
            )

        parts = self.command_type.split(".")
        if len(parts) < 4:
            raise ValueError(
                f"command_type '{self.command_type}' must follow "
                f"engine.domain.action.request format (minimum 4 segments)."
            )

        if parts[0] != self.source_engine:
            raise ValueError(
                f"command_type namespace '{parts[0]}' does not match "
                f"source_engine '{self.source_engine}'."
            )

        if self.actor_id is not None and (
            not isinstance(self.actor_id, str) or not self.actor_id
        ):
            raise ValueError("actor_id must be None or a non-empty string.")

        if not isinstance(self.payload, dict):
            raise TypeError("payload must be a dict.")

        if not isinstance(self.issued_at, datetime):
            raise ValueError("issued_at must be a datetime.")


def derive_source_engine(command_type: str) -> str:
    """
    Extract source engine from command type.

    ledger.receipt.void.request → ledger
    """
    return command_type.split(".")[0]
