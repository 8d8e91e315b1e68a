"""
Till Command Layer
=====================
Every action begins as a Command.
Every Command produces exactly one CommandResult.
REJECTED commands carry a structured, auditable reason.
"""

from core.commands.base import (
    Command,
    derive_source_engine,
)
from core.commands.bus import (
    CommandBus,
    CommandBusError,
    CommandResult,
    NoHandlerRegistered,
)
from core.commands.dispatcher import (
    CommandDispatcher,
    PolicyEvaluator,
)
from core.commands.errors import (
    AlreadyVoided,
    Forbidden,
    InsufficientDrawerBalance,
    InsufficientStock,
    InvalidAmount,
    InvalidBundle,
    InvalidCredentials,
    NotAuthenticated,
    NotFound,
    OutOfStock,
    RegisterError,
    ValidationError,
)
from core.commands.outcomes import (
    CommandOutcome,
    CommandStatus,
    DecisionStage,
)
from core.commands.rejection import (
    KNOWN_REASON_CODES,
    ReasonCode,
    RejectionReason,
)

__all__ = [
    # ── Base ──────────────────────────────────────────────────
    "Command",
    "derive_source_engine",
    # ── Outcomes ──────────────────────────────────────────────
    "CommandOutcome",
    "CommandStatus",
    "DecisionStage",
    # ── Rejection ─────────────────────────────────────────────
    "KNOWN_REASON_CODES",
    "ReasonCode",
    "RejectionReason",
    # ── Errors ────────────────────────────────────────────────
    "RegisterError",
    "ValidationError",
    "InvalidAmount",
    "NotAuthenticated",
    "InvalidCredentials",
    "Forbidden",
    "NotFound",
    "OutOfStock",
    "InsufficientStock",
    "InvalidBundle",
    "InsufficientDrawerBalance",
    "AlreadyVoided",
    # ── Dispatcher ────────────────────────────────────────────
    "CommandDispatcher",
    "PolicyEvaluator",
    # ── Bus ───────────────────────────────────────────────────
    "CommandBus",
    "CommandBusError",
    "CommandResult",
    "NoHandlerRegistered",
]
