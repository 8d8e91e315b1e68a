"""
Till Command Layer — Command Dispatcher
==========================================
Accept Command → Evaluate Policies → Produce Outcome.

The Dispatcher is the DECISION MAKER for authorization. It decides
ACCEPTED or REJECTED before any engine state is touched.

Policy evaluation is pluggable — policies are registered as callables
that return Optional[RejectionReason]. If any policy rejects, the
command is REJECTED with the first rejection reason.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from core.commands.base import Command
from core.commands.outcomes import CommandOutcome
from core.commands.rejection import RejectionReason
from core.time.clock import Clock, SystemClock

logger = logging.getLogger("till.commands")


# A policy is a callable:
#   (Command, actor) → Optional[RejectionReason]
#   Returns None if policy passes, RejectionReason if it rejects.
PolicyEvaluator = Callable[[Command, Any], Optional[RejectionReason]]


class CommandDispatcher:
    """
    Evaluate a command through registered policies.

    Usage:
        dispatcher = CommandDispatcher()
        dispatcher.register_policy(permission_policy)

        outcome = dispatcher.dispatch(command, actor)

    Policies are evaluated in registration order.
    First rejection wins — remaining policies are skipped.
    """

    def __init__(self, clock: Clock | None = None):
        self._clock = clock or SystemClock()
        self._policies: List[PolicyEvaluator] = []

    def register_policy(self, policy: PolicyEvaluator) -> None:
        if not callable(policy):
            raise TypeError(
                f"Policy must be callable, got {type(policy).__name__}."
            )
        self._policies.append(policy)

        policy_name = getattr(policy, "__qualname__", str(policy))
        logger.debug(f"Policy registered: {policy_name}")

    def dispatch(self, command: Command, actor: Any = None) -> CommandOutcome:
        """
        Evaluate command and produce outcome.

        Returns:
            CommandOutcome — never None, never ambiguous.
        """
        now = self._clock.now_utc()
        actor_id = getattr(actor, "employee_id", None)

        for policy in self._policies:
            rejection = policy(command, actor)
            if rejection is not None:
                if not isinstance(rejection, RejectionReason):
                    raise TypeError(
                        f"Policy must return RejectionReason or None, "
                        f"got {type(rejection).__name__}."
                    )

                logger.warning(
                    f"Command {command.command_type} rejected by "
                    f"policy '{rejection.policy_name}': "
                    f"[{rejection.code}] {rejection.message}"
                )
                return CommandOutcome.rejected(
                    command, rejection, occurred_at=now, actor_id=actor_id,
                )

        return CommandOutcome.accepted(
            command, occurred_at=now, actor_id=actor_id,
        )
