"""
Till Ledger Engine — Request Commands
========================================
Typed ledger requests that convert into canonical Command objects.
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

LEDGER_RECEIPT_COMPLETE_REQUEST = "ledger.receipt.complete.request"
LEDGER_RECEIPT_DUPLICATE_REQUEST = "ledger.receipt.duplicate.request"
LEDGER_RECEIPT_VOID_REQUEST = "ledger.receipt.void.request"
LEDGER_RECEIPT_REFUND_REQUEST = "ledger.receipt.refund.request"
LEDGER_RECEIPTS_LIST_REQUEST = "ledger.receipts.list.request"
LEDGER_SALES_SUMMARY_REQUEST = "ledger.sales.summary.request"

LEDGER_COMMAND_TYPES = frozenset({
    LEDGER_RECEIPT_COMPLETE_REQUEST,
    LEDGER_RECEIPT_DUPLICATE_REQUEST,
    LEDGER_RECEIPT_VOID_REQUEST,
    LEDGER_RECEIPT_REFUND_REQUEST,
    LEDGER_RECEIPTS_LIST_REQUEST,
    LEDGER_SALES_SUMMARY_REQUEST,
})


def _ledger_command(
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
        source_engine="ledger",
    )


def _require_receipt_id(receipt_id) -> None:
    if not isinstance(receipt_id, str):
        raise TypeError("receipt_id must be a string.")


# ══════════════════════════════════════════════════════════════
# REQUEST COMMANDS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CheckoutRequest:
    """Complete the open order as a sale."""
    payment_method: object = "cash"
    signature: Optional[str] = None
    receipt_method: object = "none"
    contact_info: Optional[str] = None

    def to_command(self, **kwargs) -> Command:
        return _ledger_command(
            LEDGER_RECEIPT_COMPLETE_REQUEST,
            {
                "payment_method": self.payment_method,
                "signature": self.signature,
                "receipt_method": self.receipt_method,
                "contact_info": self.contact_info,
            },
            **kwargs,
        )


@dataclass(frozen=True)
class DuplicateReceiptRequest:
    receipt_id: str

    def __post_init__(self):
        _require_receipt_id(self.receipt_id)

    def to_command(self, **kwargs) -> Command:
        return _ledger_command(
            LEDGER_RECEIPT_DUPLICATE_REQUEST,
            {"receipt_id": self.receipt_id},
            **kwargs,
        )


@dataclass(frozen=True)
class VoidReceiptRequest:
    receipt_id: str
    reason: str = ""

    def __post_init__(self):
        _require_receipt_id(self.receipt_id)
        if not isinstance(self.reason, str):
            raise TypeError("reason must be a string.")

    def to_command(self, **kwargs) -> Command:
        return _ledger_command(
            LEDGER_RECEIPT_VOID_REQUEST,
            {"receipt_id": self.receipt_id, "reason": self.reason},
            **kwargs,
        )


@dataclass(frozen=True)
class RefundReceiptRequest:
    receipt_id: str

    def __post_init__(self):
        _require_receipt_id(self.receipt_id)

    def to_command(self, **kwargs) -> Command:
        return _ledger_command(
            LEDGER_RECEIPT_REFUND_REQUEST,
            {"receipt_id": self.receipt_id},
            **kwargs,
        )
