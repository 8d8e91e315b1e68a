"""
Till Event Bus — Subscriber Registry
=======================================
Controls which handlers receive which events.

Rules:
- Event types must follow engine.domain.action.vN format
- Multiple subscribers per event type allowed
- Duplicate handler for same event type forbidden
- Errors here are wiring mistakes, raised at register time
- In-memory only, thread-safe
"""

import logging
import re
from threading import Lock
from typing import Callable

logger = logging.getLogger("till.events")

_VERSION = re.compile(r"^v[1-9][0-9]*$")


class EventBusError(Exception):
    """Wiring mistake between an engine and its event subscribers."""


class InvalidEventTypeFormat(EventBusError):
    """
    Event types read engine.domain.action.vN, e.g.
    ledger.receipt.voided.v1. `problem` says which part is wrong.
    """

    def __init__(self, event_type: str, problem: str):
        self.event_type = event_type
        self.problem = problem
        super().__init__(f"Event type '{event_type}' is malformed: {problem}.")


class DuplicateSubscriberError(EventBusError):
    def __init__(self, event_type: str, handler_name: str, subscriber_name: str):
        self.event_type = event_type
        self.handler_name = handler_name
        self.subscriber_name = subscriber_name
        super().__init__(
            f"{subscriber_name} already listens to {event_type} "
            f"with {handler_name}."
        )


def validate_event_type_format(event_type: str) -> None:
    if not event_type or not isinstance(event_type, str):
        raise InvalidEventTypeFormat(str(event_type or ""), "empty")

    parts = event_type.strip().split(".")
    if len(parts) < 4 or not all(parts):
        raise InvalidEventTypeFormat(
            event_type, "expected engine.domain.action.vN"
        )
    if not _VERSION.match(parts[-1]):
        raise InvalidEventTypeFormat(
            event_type, f"version '{parts[-1]}' is not v1, v2, ..."
        )


class SubscriberRegistry:
    """
    In-memory registry of event subscribers.

    Each entry maps an event_type to a list of
    (handler, subscriber_name) tuples.
    """

    def __init__(self):
        self._subscribers: dict[str, list[tuple[Callable, str]]] = {}
        self._lock = Lock()

    def register_subscriber(
        self,
        event_type: str,
        handler: Callable,
        subscriber_name: str,
    ) -> None:
        """
        Register a handler for an event type.

        Raises:
            InvalidEventTypeFormat:   Bad event type format
            DuplicateSubscriberError: Handler already registered
        """
        validate_event_type_format(event_type)

        if not callable(handler):
            raise EventBusError(
                f"Handler must be callable, got {type(handler)}."
            )

        handler_name = getattr(handler, "__qualname__", str(handler))

        with self._lock:
            entries = self._subscribers.setdefault(event_type, [])
            for existing_handler, _ in entries:
                if existing_handler == handler:
                    raise DuplicateSubscriberError(
                        event_type, handler_name, subscriber_name,
                    )
            entries.append((handler, subscriber_name))

        logger.debug(
            f"Subscriber registered: {handler_name} → {event_type} "
            f"(from: {subscriber_name})"
        )

    def get_subscribers(self, event_type: str) -> list[tuple[Callable, str]]:
        """Empty list if no subscribers (not an error)."""
        with self._lock:
            return list(self._subscribers.get(event_type, []))
