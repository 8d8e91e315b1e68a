"""
Till Command Layer — Tests
=============================
Command → Dispatcher → Bus → CommandResult.

Scenarios:
1. Valid command structure
2. Invalid structure → ValueError
3. Policy failure → REJECTED, engine not called
4. Engine RegisterError → REJECTED with its code
5. Programming errors propagate
6. Unregistered command type → NoHandlerRegistered
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import pytest

from core.commands.base import Command, derive_source_engine
from core.commands.bus import CommandBus, CommandResult, NoHandlerRegistered
from core.commands.dispatcher import CommandDispatcher
from core.commands.errors import (
    InsufficientStock,
    InvalidCredentials,
    NotFound,
    ValidationError,
)
from core.commands.outcomes import CommandOutcome, CommandStatus, DecisionStage
from core.commands.rejection import KNOWN_REASON_CODES, ReasonCode, RejectionReason
from core.time.clock import FixedClock

NOW = datetime(2026, 3, 1, 9, 0, 0, tzinfo=timezone.utc)


def make_command(**overrides) -> Command:
    fields = dict(
        command_id=uuid.uuid4(),
        command_type="order.item.add.request",
        actor_id="emp-1",
        payload={"product_id": "apple"},
        issued_at=NOW,
        source_engine="order",
    )
    fields.update(overrides)
    return Command(**fields)


class StubEngineHandler:
    def __init__(self, return_value: Any = "executed", raises=None):
        self.executed = []
        self.return_value = return_value
        self.raises = raises

    def execute(self, command: Command) -> Any:
        self.executed.append(command)
        if self.raises is not None:
            raise self.raises
        return self.return_value


def reject_everything(command, actor):
    return RejectionReason(
        code=ReasonCode.FORBIDDEN,
        message="No.",
        policy_name="reject_everything",
    )


def make_bus(*policies, actor=None):
    dispatcher = CommandDispatcher(clock=FixedClock(NOW))
    for policy in policies:
        dispatcher.register_policy(policy)
    return CommandBus(dispatcher=dispatcher, actor_provider=lambda: actor)


# ══════════════════════════════════════════════════════════════
# COMMAND STRUCTURE
# ══════════════════════════════════════════════════════════════

class TestCommandStructure:
    def test_valid_command(self):
        command = make_command()
        assert command.command_type == "order.item.add.request"
        assert command.source_engine == "order"

    def test_command_is_frozen(self):
        command = make_command()
        with pytest.raises(AttributeError):
            command.actor_id = "emp-2"

    def test_anonymous_command_allowed(self):
        assert make_command(actor_id=None).actor_id is None

    def test_type_must_end_with_request(self):
        with pytest.raises(ValueError, match=".request"):
            make_command(command_type="order.item.add")

    def test_type_needs_four_segments(self):
        with pytest.raises(ValueError, match="4 segments"):
            make_command(command_type="order.add.request")

    def test_namespace_must_match_source_engine(self):
        with pytest.raises(ValueError, match="does not match"):
            make_command(source_engine="ledger")

    def test_command_id_must_be_uuid(self):
        with pytest.raises(ValueError, match="UUID"):
            make_command(command_id="not-a-uuid")

    def test_empty_actor_id_rejected(self):
        with pytest.raises(ValueError, match="actor_id"):
            make_command(actor_id="")

    def test_payload_must_be_dict(self):
        with pytest.raises(TypeError):
            make_command(payload=["apple"])

    def test_derive_source_engine(self):
        assert derive_source_engine("ledger.receipt.void.request") == "ledger"


# ══════════════════════════════════════════════════════════════
# OUTCOMES
# ══════════════════════════════════════════════════════════════

class TestCommandOutcome:
    def test_rejected_requires_reason(self):
        with pytest.raises(ValueError, match="RejectionReason"):
            CommandOutcome(
                command_id=uuid.uuid4(),
                command_type="order.item.add.request",
                status=CommandStatus.REJECTED,
                reason=None,
                occurred_at=NOW,
            )

    def test_accepted_forbids_reason(self):
        with pytest.raises(ValueError):
            CommandOutcome(
                command_id=uuid.uuid4(),
                command_type="order.item.add.request",
                status=CommandStatus.ACCEPTED,
                reason=RejectionReason(ReasonCode.FORBIDDEN, "No.", "permission_policy"),
                occurred_at=NOW,
            )

    def test_engine_never_accepts(self):
        with pytest.raises(ValueError, match="permission step"):
            CommandOutcome(
                command_id=uuid.uuid4(),
                command_type="order.item.add.request",
                status=CommandStatus.ACCEPTED,
                reason=None,
                occurred_at=NOW,
                stage=DecisionStage.ENGINE,
            )

    def test_unknown_rejection_code(self):
        with pytest.raises(ValueError, match="Unknown rejection code"):
            CommandOutcome.rejected(
                make_command(),
                RejectionReason("TOO_EARLY", "Shop is closed.", "hours_policy"),
                occurred_at=NOW,
            )

    def test_every_domain_error_code_is_known(self):
        for error in (
            NotFound("Product", "x"), InsufficientStock("x", 1, 2),
            InvalidCredentials(), ValidationError("bad"),
        ):
            assert error.code in KNOWN_REASON_CODES

    def test_rejected_outcome_to_dict(self):
        command = make_command()
        outcome = CommandOutcome.rejected(
            command,
            RejectionReason(ReasonCode.OUT_OF_STOCK, "Apple is sold out.", "order_engine"),
            occurred_at=NOW,
            actor_id="emp-1",
            stage=DecisionStage.ENGINE,
        )

        assert outcome.rejected_by == "order_engine"
        assert outcome.to_dict() == {
            "command_id": str(command.command_id),
            "command_type": "order.item.add.request",
            "status": "REJECTED",
            "stage": "ENGINE",
            "actor_id": "emp-1",
            "occurred_at": NOW.isoformat(),
            "reason": {
                "code": "OUT_OF_STOCK",
                "message": "Apple is sold out.",
                "policy_name": "order_engine",
            },
        }

    def test_accepted_has_no_rejecter(self):
        outcome = CommandOutcome.accepted(make_command(), occurred_at=NOW)
        assert outcome.rejected_by is None
        assert outcome.stage == DecisionStage.PERMISSION

    def test_rejection_reason_to_dict(self):
        reason = RejectionReason(
            code=ReasonCode.NOT_FOUND,
            message="Receipt 'r-1' not found.",
            policy_name="ledger_engine",
        )
        assert reason.to_dict() == {
            "code": "NOT_FOUND",
            "message": "Receipt 'r-1' not found.",
            "policy_name": "ledger_engine",
        }


# ══════════════════════════════════════════════════════════════
# DOMAIN ERRORS
# ══════════════════════════════════════════════════════════════

class TestDomainErrors:
    def test_each_error_carries_its_code(self):
        assert NotFound("Product", "x").code == ReasonCode.NOT_FOUND
        assert InsufficientStock("x", 1, 2).code == ReasonCode.INSUFFICIENT_STOCK
        assert InvalidCredentials().code == ReasonCode.INVALID_CREDENTIALS

    def test_validation_error_is_value_error(self):
        assert isinstance(ValidationError("bad"), ValueError)

    def test_invalid_credentials_message_does_not_leak(self):
        assert InvalidCredentials().message == "Invalid username or password."


# ══════════════════════════════════════════════════════════════
# DISPATCHER
# ══════════════════════════════════════════════════════════════

class TestCommandDispatcher:
    def test_no_policies_accepts(self):
        outcome = CommandDispatcher(clock=FixedClock(NOW)).dispatch(make_command())
        assert outcome.is_accepted
        assert outcome.occurred_at == NOW

    def test_outcome_records_the_employee(self):
        @dataclass(frozen=True)
        class Cashier:
            employee_id: str = "emp-1"

        dispatcher = CommandDispatcher(clock=FixedClock(NOW))
        dispatcher.register_policy(reject_everything)

        outcome = dispatcher.dispatch(make_command(), Cashier())

        assert outcome.actor_id == "emp-1"
        assert outcome.rejected_by == "reject_everything"

    def test_first_rejection_wins(self):
        calls = []

        def second(command, actor):
            calls.append("second")
            return None

        dispatcher = CommandDispatcher(clock=FixedClock(NOW))
        dispatcher.register_policy(reject_everything)
        dispatcher.register_policy(second)

        outcome = dispatcher.dispatch(make_command())
        assert outcome.is_rejected
        assert outcome.reason.policy_name == "reject_everything"
        assert calls == []

    def test_policy_must_return_rejection_reason(self):
        dispatcher = CommandDispatcher(clock=FixedClock(NOW))
        dispatcher.register_policy(lambda command, actor: "nope")
        with pytest.raises(TypeError):
            dispatcher.dispatch(make_command())

    def test_non_callable_policy_rejected(self):
        with pytest.raises(TypeError):
            CommandDispatcher().register_policy("policy")


# ══════════════════════════════════════════════════════════════
# BUS
# ══════════════════════════════════════════════════════════════

class TestCommandBus:
    def test_accepted_command_executes_handler(self):
        bus = make_bus()
        handler = StubEngineHandler(return_value=42)
        bus.register_handler("order.item.add.request", handler)

        result = bus.handle(make_command())

        assert isinstance(result, CommandResult)
        assert result.is_accepted
        assert result.execution_result == 42
        assert result.code is None
        assert len(handler.executed) == 1

    def test_policy_rejection_skips_handler(self):
        bus = make_bus(reject_everything)
        handler = StubEngineHandler()
        bus.register_handler("order.item.add.request", handler)

        result = bus.handle(make_command())

        assert result.is_rejected
        assert result.code == ReasonCode.FORBIDDEN
        assert handler.executed == []
        assert result.outcome.stage == DecisionStage.PERMISSION

    def test_engine_error_becomes_rejection(self):
        bus = make_bus()
        bus.register_handler(
            "order.item.add.request",
            StubEngineHandler(raises=NotFound("Product", "kiwi")),
        )

        result = bus.handle(make_command())

        assert result.is_rejected
        assert result.code == ReasonCode.NOT_FOUND
        assert result.reason.policy_name == "order_engine"
        assert "kiwi" in result.reason.message
        assert result.execution_result is None
        assert result.outcome.stage == DecisionStage.ENGINE
        assert result.outcome.command_type == "order.item.add.request"

    def test_programming_error_propagates(self):
        bus = make_bus()
        bus.register_handler(
            "order.item.add.request",
            StubEngineHandler(raises=KeyError("product_id")),
        )
        with pytest.raises(KeyError):
            bus.handle(make_command())

    def test_no_handler_registered(self):
        with pytest.raises(NoHandlerRegistered):
            make_bus().handle(make_command())

    def test_actor_provider_is_consulted(self):
        seen = []

        def record_actor(command, actor):
            seen.append(actor)
            return None

        bus = make_bus(record_actor, actor="the-actor")
        bus.register_handler("order.item.add.request", StubEngineHandler())
        bus.handle(make_command())
        assert seen == ["the-actor"]

    def test_handler_needs_execute(self):
        with pytest.raises(TypeError):
            make_bus().register_handler("order.item.add.request", object())

    def test_handler_type_must_be_request(self):
        with pytest.raises(ValueError):
            make_bus().register_handler("order.item.added.v1", StubEngineHandler())

    def test_repr(self):
        bus = make_bus(reject_everything)
        bus.register_handler("order.item.add.request", StubEngineHandler())
        assert "REJECTED" in repr(bus.handle(make_command()))
