"""
Till Command Layer — Rejection Model
=======================================
Structured rejection reasons for denied commands.

This is NOT an exception. It is an explanation structure
returned to the presentation layer inside a CommandResult.

Every rejection must be:
- Deterministic (same input → same rejection)
- Auditable (code + message + policy)
- Machine-readable (reason_code)
- Human-readable (message)
"""

from __future__ import annotations

from dataclasses import dataclass


# ══════════════════════════════════════════════════════════════
# REJECTION REASON (frozen explanation structure)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for command rejection.

    Fields:
        code:        Machine-readable rejection code (e.g. 'ALREADY_VOIDED').
        message:     Human-readable explanation.
        policy_name: Name of the policy or engine step that rejected.
    """

    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
        }


# ══════════════════════════════════════════════════════════════
# STANDARD REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """
    Known rejection codes.

    Convention: SCREAMING_SNAKE_CASE.
    """

    # ── Input ─────────────────────────────────────────────────
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_AMOUNT = "INVALID_AMOUNT"

    # ── Session / authorization ───────────────────────────────
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    FORBIDDEN = "FORBIDDEN"

    # ── Lookup ────────────────────────────────────────────────
    NOT_FOUND = "NOT_FOUND"

    # ── Inventory ─────────────────────────────────────────────
    OUT_OF_STOCK = "OUT_OF_STOCK"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    INVALID_BUNDLE = "INVALID_BUNDLE"

    # ── Money ─────────────────────────────────────────────────
    INSUFFICIENT_DRAWER_BALANCE = "INSUFFICIENT_DRAWER_BALANCE"

    # ── Ledger ────────────────────────────────────────────────
    ALREADY_VOIDED = "ALREADY_VOIDED"


KNOWN_REASON_CODES = frozenset(
    value for name, value in vars(ReasonCode).items() if name.isupper()
)
