"""
Till Ledger Engine — Event Types and Payload Builders
========================================================
Consumed by the sales summary projection.
"""

from __future__ import annotations

from engines.ledger.models import Receipt


# ══════════════════════════════════════════════════════════════
# EVENT TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

LEDGER_RECEIPT_COMPLETED_V1 = "ledger.receipt.completed.v1"
LEDGER_RECEIPT_DUPLICATED_V1 = "ledger.receipt.duplicated.v1"
LEDGER_RECEIPT_VOIDED_V1 = "ledger.receipt.voided.v1"
LEDGER_RECEIPT_REFUNDED_V1 = "ledger.receipt.refunded.v1"

LEDGER_EVENT_TYPES = (
    LEDGER_RECEIPT_COMPLETED_V1,
    LEDGER_RECEIPT_DUPLICATED_V1,
    LEDGER_RECEIPT_VOIDED_V1,
    LEDGER_RECEIPT_REFUNDED_V1,
)


# ══════════════════════════════════════════════════════════════
# PAYLOAD BUILDERS
# ══════════════════════════════════════════════════════════════

def _receipt_payload(receipt: Receipt) -> dict:
    return {
        "receipt_id": receipt.receipt_id,
        "employee_id": receipt.employee_id,
        "payment_method": receipt.payment_method.value,
        "subtotal": receipt.subtotal,
        "discount_amount": receipt.discount_amount,
        "tax": receipt.tax,
        "gratuity": receipt.gratuity,
        "extra_charges": receipt.extra_charges,
        "total": receipt.total,
        "created_at": receipt.created_at,
    }


def build_receipt_completed_payload(receipt: Receipt) -> dict:
    payload = _receipt_payload(receipt)
    payload["line_count"] = len(receipt.lines)
    return payload


def build_receipt_duplicated_payload(receipt: Receipt) -> dict:
    payload = _receipt_payload(receipt)
    payload["duplicated_from"] = receipt.duplicated_from
    return payload


def build_receipt_voided_payload(receipt: Receipt) -> dict:
    payload = _receipt_payload(receipt)
    payload.update({
        "voided_by": receipt.void_info.voided_by,
        "reason": receipt.void_info.reason,
        "voided_at": receipt.void_info.voided_at,
    })
    return payload


def build_receipt_refunded_payload(
    receipt: Receipt, refunded_by: str, reversed_effects: bool,
) -> dict:
    payload = _receipt_payload(receipt)
    payload.update({
        "refunded_by": refunded_by,
        "was_voided": receipt.is_voided,
        "reversed_effects": reversed_effects,
    })
    return payload
