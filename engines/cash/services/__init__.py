"""
Till Cash Engine — Cash Drawer
=================================
The single cash balance of the register.

The balance starts at the configured float and changes only through
credit (cash sale), debit (void or refund of a cash sale) and
manual_removal. Each change is recorded as a DrawerMovement.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from threading import RLock
from typing import List, Optional

from core.commands.errors import (
    InsufficientDrawerBalance,
    InvalidAmount,
    ValidationError,
)
from core.events.dispatcher import EventDispatcher
from core.primitives.money import ZERO, to_decimal, to_non_negative
from core.time.clock import Clock, SystemClock
from engines.cash.events import build_movement_payload, resolve_cash_event_type
from engines.cash.models import DrawerMovement, MovementKind

logger = logging.getLogger("till.cash")


class CashDrawer:
    """
    Usage:
        drawer = CashDrawer(Decimal("1000"))
        drawer.credit(Decimal("0.55"), reference=receipt_id)
        drawer.manual_removal(Decimal("200"), employee_id="emp-2")
    """

    def __init__(
        self,
        starting_float=Decimal("1000"),
        *,
        clock: Clock | None = None,
        event_dispatcher: EventDispatcher | None = None,
    ):
        self._lock = RLock()
        self._clock = clock or SystemClock()
        self._event_dispatcher = event_dispatcher
        self._balance = to_non_negative(starting_float, "starting_float")
        self._movements: List[DrawerMovement] = []

    @property
    def lock(self) -> RLock:
        return self._lock

    @property
    def balance(self) -> Decimal:
        with self._lock:
            return self._balance

    def movements(self) -> List[DrawerMovement]:
        with self._lock:
            return list(self._movements)

    def can_debit(self, amount) -> bool:
        with self._lock:
            return to_non_negative(amount) <= self._balance

    def credit(
        self,
        amount,
        *,
        reference: Optional[str] = None,
        employee_id: Optional[str] = None,
    ) -> DrawerMovement:
        value = to_non_negative(amount, "amount")
        with self._lock:
            return self._apply(MovementKind.CREDIT, value, reference, employee_id)

    def debit(
        self,
        amount,
        *,
        reference: Optional[str] = None,
        employee_id: Optional[str] = None,
    ) -> DrawerMovement:
        value = to_non_negative(amount, "amount")
        with self._lock:
            if value > self._balance:
                raise InsufficientDrawerBalance(self._balance, value)
            return self._apply(MovementKind.DEBIT, value, reference, employee_id)

    def manual_removal(self, amount, employee_id: str) -> DrawerMovement:
        """
        Take cash out of the drawer. Role is checked by the command
        bus before this runs.

        Raises:
            InvalidAmount: amount <= 0 or more than the drawer holds.
        """
        if not employee_id:
            raise ValidationError("employee_id is required for a cash removal.")
        try:
            value = to_decimal(amount, "amount")
        except ValidationError as exc:
            raise InvalidAmount(exc.message) from None

        with self._lock:
            if value <= ZERO or value > self._balance:
                raise InvalidAmount(
                    f"Removal must be between 0 and {self._balance}, got {value}."
                )
            return self._apply(MovementKind.REMOVAL, value, None, employee_id)

    def _apply(
        self,
        kind: MovementKind,
        amount: Decimal,
        reference: Optional[str],
        employee_id: Optional[str],
    ) -> DrawerMovement:
        if kind == MovementKind.CREDIT:
            self._balance += amount
        else:
            self._balance -= amount

        movement = DrawerMovement(
            kind=kind,
            amount=amount,
            balance_after=self._balance,
            occurred_at=self._clock.now_utc(),
            reference=reference,
            employee_id=employee_id,
        )
        self._movements.append(movement)
        logger.info(
            f"Drawer {kind.value} {amount} -> balance {self._balance}"
            + (f" (ref {reference})" if reference else "")
        )

        if self._event_dispatcher is not None:
            self._event_dispatcher.emit(
                resolve_cash_event_type(kind),
                build_movement_payload(movement),
                occurred_at=movement.occurred_at,
                actor_id=employee_id,
            )
        return movement
