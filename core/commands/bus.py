"""
Till Command Layer — Command Bus
===================================
High-level orchestration of the command lifecycle.

Flow:
    1. Dispatch command with the current actor → get Outcome
    2. If ACCEPTED → call engine handler
    3. If the engine raises RegisterError → REJECTED with its code
    4. If REJECTED → return the reason untouched

The CommandBus:
- Orchestrates, does not decide
- Never lets a domain error escape as an exception
- Guarantees: every command produces exactly one CommandResult

The CommandBus does NOT:
- Modify engine state itself
- Contain engine-specific logic
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Protocol

from core.commands.base import Command
from core.commands.dispatcher import CommandDispatcher
from core.commands.errors import RegisterError
from core.commands.outcomes import CommandOutcome, DecisionStage
from core.commands.rejection import RejectionReason

logger = logging.getLogger("till.commands")


# ══════════════════════════════════════════════════════════════
# ENGINE HANDLER PROTOCOL
# ══════════════════════════════════════════════════════════════

class EngineHandlerProtocol(Protocol):
    """Each engine registers a handler that executes accepted commands."""

    def execute(self, command: Command) -> Any:
        ...


# ══════════════════════════════════════════════════════════════
# COMMAND BUS ERRORS
# ══════════════════════════════════════════════════════════════

class CommandBusError(Exception):
    """Base error for command bus operations."""
    pass


class NoHandlerRegistered(CommandBusError):
    """No engine handler registered for command type."""

    def __init__(self, command_type: str):
        self.command_type = command_type
        super().__init__(
            f"No engine handler registered for "
            f"command type '{command_type}'."
        )


# ══════════════════════════════════════════════════════════════
# COMMAND BUS RESULT
# ══════════════════════════════════════════════════════════════

class CommandResult:
    """
    Result of CommandBus.handle() — wraps outcome + execution result.
    """

    def __init__(
        self,
        outcome: CommandOutcome,
        execution_result: Any = None,
    ):
        self.outcome = outcome
        self.execution_result = execution_result

    @property
    def is_accepted(self) -> bool:
        return self.outcome.is_accepted

    @property
    def is_rejected(self) -> bool:
        return self.outcome.is_rejected

    @property
    def reason(self) -> Optional[RejectionReason]:
        return self.outcome.reason

    @property
    def code(self) -> Optional[str]:
        if self.outcome.reason is None:
            return None
        return self.outcome.reason.code

    def __repr__(self) -> str:
        if self.is_accepted:
            return f"CommandResult(ACCEPTED, {self.execution_result!r})"
        return f"CommandResult(REJECTED, {self.code})"


# ══════════════════════════════════════════════════════════════
# COMMAND BUS
# ══════════════════════════════════════════════════════════════

class CommandBus:
    """
    Orchestration layer for command lifecycle.

    Usage:
        bus = CommandBus(
            dispatcher=dispatcher,
            actor_provider=session.current_employee,
        )
        bus.register_handler("order.item.add.request", handler)
        result = bus.handle(command)
    """

    def __init__(
        self,
        dispatcher: CommandDispatcher,
        actor_provider: Callable[[], Any],
    ):
        self._dispatcher = dispatcher
        self._actor_provider = actor_provider
        self._handlers: Dict[str, Any] = {}

    def register_handler(self, command_type: str, handler: Any) -> None:
        """
        Register engine handler for a command type.

        Handler must implement EngineHandlerProtocol (have .execute()).
        """
        if not command_type.endswith(".request"):
            raise ValueError(
                f"command_type '{command_type}' must end with '.request'."
            )

        if not hasattr(handler, "execute") or not callable(handler.execute):
            raise TypeError("Handler must have callable .execute() method.")

        self._handlers[command_type] = handler
        logger.debug(f"Handler registered: {command_type}")

    def handle(self, command: Command) -> CommandResult:
        """
        Full command lifecycle. No silent paths.

        Raises:
            NoHandlerRegistered: wiring error, not a business rejection.
        """
        handler = self._handlers.get(command.command_type)
        if handler is None:
            raise NoHandlerRegistered(command.command_type)

        outcome = self._dispatcher.dispatch(command, self._actor_provider())
        if outcome.is_rejected:
            return CommandResult(outcome=outcome)

        try:
            execution_result = handler.execute(command)
        except RegisterError as exc:
            logger.warning(
                f"Command {command.command_type} rejected by engine "
                f"'{command.source_engine}': [{exc.code}] {exc.message}"
            )
            return CommandResult(
                outcome=CommandOutcome.rejected(
                    command,
                    RejectionReason(
                        code=exc.code,
                        message=exc.message,
                        policy_name=f"{command.source_engine}_engine",
                    ),
                    occurred_at=outcome.occurred_at,
                    actor_id=outcome.actor_id,
                    stage=DecisionStage.ENGINE,
                ),
            )

        return CommandResult(
            outcome=outcome,
            execution_result=execution_result,
        )
