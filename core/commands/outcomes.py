"""
Till Command Layer — Command Outcome
=======================================
The register's decision on one command: who asked, what they asked
for, whether it went through, and which step refused it.

Two steps can refuse a command:
    PERMISSION  the dispatcher's policies (role, session) said no
    ENGINE      the engine raised a RegisterError while executing

Rules:
- Exactly one outcome per command, immutable
- REJECTED carries a RejectionReason whose code is a ReasonCode
- ACCEPTED carries no reason and is always a PERMISSION decision
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from core.commands.base import Command
from core.commands.rejection import KNOWN_REASON_CODES, RejectionReason


class CommandStatus(Enum):
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class DecisionStage(Enum):
    PERMISSION = "PERMISSION"
    ENGINE = "ENGINE"


@dataclass(frozen=True)
class CommandOutcome:
    command_id: uuid.UUID
    command_type: str
    status: CommandStatus
    reason: Optional[RejectionReason]
    occurred_at: datetime
    actor_id: Optional[str] = None
    stage: DecisionStage = DecisionStage.PERMISSION

    def __post_init__(self):
        if not isinstance(self.command_id, uuid.UUID):
            raise ValueError("command_id must be UUID.")
        if not self.command_type or not isinstance(self.command_type, str):
            raise ValueError("command_type must be a non-empty string.")
        if not isinstance(self.status, CommandStatus):
            raise ValueError(
                f"status must be CommandStatus, got {type(self.status).__name__}."
            )
        if not isinstance(self.stage, DecisionStage):
            raise ValueError("stage must be DecisionStage.")
        if not isinstance(self.occurred_at, datetime):
            raise ValueError("occurred_at must be a datetime.")

        if self.status == CommandStatus.ACCEPTED:
            if self.reason is not None:
                raise ValueError(
                    "ACCEPTED outcome must NOT include a RejectionReason."
                )
            if self.stage != DecisionStage.PERMISSION:
                raise ValueError("Only the permission step accepts commands.")
            return

        if self.reason is None:
            raise ValueError(
                f"REJECTED outcome for {self.command_type} must include "
                f"a RejectionReason."
            )
        if self.reason.code not in KNOWN_REASON_CODES:
            raise ValueError(
                f"Unknown rejection code '{self.reason.code}'. "
                f"Must be one of: {sorted(KNOWN_REASON_CODES)}"
            )

    @classmethod
    def accepted(
        cls, command: Command, *, occurred_at: datetime,
        actor_id: Optional[str] = None,
    ) -> "CommandOutcome":
        return cls(
            command_id=command.command_id,
            command_type=command.command_type,
            status=CommandStatus.ACCEPTED,
            reason=None,
            occurred_at=occurred_at,
            actor_id=actor_id,
        )

    @classmethod
    def rejected(
        cls,
        command: Command,
        reason: RejectionReason,
        *,
        occurred_at: datetime,
        actor_id: Optional[str] = None,
        stage: DecisionStage = DecisionStage.PERMISSION,
    ) -> "CommandOutcome":
        return cls(
            command_id=command.command_id,
            command_type=command.command_type,
            status=CommandStatus.REJECTED,
            reason=reason,
            occurred_at=occurred_at,
            actor_id=actor_id,
            stage=stage,
        )

    @property
    def is_accepted(self) -> bool:
        return self.status == CommandStatus.ACCEPTED

    @property
    def is_rejected(self) -> bool:
        return self.status == CommandStatus.REJECTED

    @property
    def rejected_by(self) -> Optional[str]:
        """Policy or engine that refused, e.g. 'ledger_engine'."""
        return None if self.reason is None else self.reason.policy_name

    def to_dict(self) -> dict:
        return {
            "command_id": str(self.command_id),
            "command_type": self.command_type,
            "status": self.status.value,
            "stage": self.stage.value,
            "actor_id": self.actor_id,
            "occurred_at": self.occurred_at.isoformat(),
            "reason": None if self.reason is None else self.reason.to_dict(),
        }
