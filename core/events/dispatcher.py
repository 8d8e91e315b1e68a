"""
Till Event Bus — Dispatcher
==============================
Records engine events in an in-memory log and routes
them to registered subscribers (read models such as the sales
summary).

Dispatch behavior:
1. Append event to the log
2. Look up subscribers by event_type
3. Execute handlers sequentially
4. Catch and log subscriber exceptions per handler
5. Continue to next subscriber

Subscriber failure must NOT undo the engine state change that
produced the event.

The log lives as long as the register and grows with every event.
Call truncate() once read models hold what they need (e.g. after the
end-of-day summary) to bound it. Subscribers are not affected.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from threading import Lock
from typing import List, Optional

from core.events.registry import SubscriberRegistry, validate_event_type_format

logger = logging.getLogger("till.events")


@dataclass(frozen=True)
class DomainEvent:
    """Immutable record of something that happened in an engine."""

    event_type: str
    payload: dict
    occurred_at: datetime
    actor_id: Optional[str] = None
    event_id: uuid.UUID = field(default_factory=uuid.uuid4)

    @property
    def source_engine(self) -> str:
        return self.event_type.split(".")[0]


class EventDispatcher:
    """In-memory event log plus subscriber fan-out."""

    def __init__(self, registry: SubscriberRegistry | None = None):
        self._registry = registry or SubscriberRegistry()
        self._log: List[DomainEvent] = []
        self._lock = Lock()

    @property
    def registry(self) -> SubscriberRegistry:
        return self._registry

    def subscribe(self, event_type: str, handler, subscriber_name: str) -> None:
        self._registry.register_subscriber(event_type, handler, subscriber_name)

    def publish(self, event: DomainEvent) -> dict:
        """
        Record and dispatch one event.

        Returns:
            dict with dispatch results:
            {
                'event_type': str,
                'subscribers_notified': int,
                'subscribers_failed': int,
                'failures': list[dict]
            }
        """
        validate_event_type_format(event.event_type)
        with self._lock:
            self._log.append(event)

        result = {
            "event_type": event.event_type,
            "subscribers_notified": 0,
            "subscribers_failed": 0,
            "failures": [],
        }

        for handler, subscriber_name in self._registry.get_subscribers(
            event.event_type
        ):
            handler_name = getattr(handler, "__qualname__", str(handler))
            try:
                handler(event)
                result["subscribers_notified"] += 1
            except Exception as exc:
                result["subscribers_failed"] += 1
                result["failures"].append({
                    "handler": handler_name,
                    "subscriber": subscriber_name,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                })
                logger.error(
                    f"Subscriber failed: {handler_name} for "
                    f"{event.event_type} (event_id: {event.event_id}): {exc}",
                    exc_info=True,
                )

        logger.debug(
            f"Dispatch complete: {event.event_type} — "
            f"{result['subscribers_notified']} notified, "
            f"{result['subscribers_failed']} failed"
        )
        return result

    def emit(
        self,
        event_type: str,
        payload: dict,
        *,
        occurred_at: datetime,
        actor_id: Optional[str] = None,
    ) -> DomainEvent:
        """Build a DomainEvent and publish it."""
        event = DomainEvent(
            event_type=event_type,
            payload=payload,
            occurred_at=occurred_at,
            actor_id=actor_id,
        )
        self.publish(event)
        return event

    def events(self, event_type: str | None = None) -> List[DomainEvent]:
        with self._lock:
            if event_type is None:
                return list(self._log)
            return [e for e in self._log if e.event_type == event_type]

    @property
    def event_count(self) -> int:
        with self._lock:
            return len(self._log)

    def truncate(self, keep_last: int = 0) -> int:
        """Drop all but the newest `keep_last` events. Returns how many went."""
        if keep_last < 0:
            raise ValueError(f"keep_last must be >= 0, got {keep_last}.")
        with self._lock:
            dropped = max(len(self._log) - keep_last, 0)
            del self._log[:dropped]
        if dropped:
            logger.info(f"Event log truncated: {dropped} dropped, {keep_last} kept")
        return dropped
