"""
Till Event Bus — Public API
==============================
Engines publish what happened. Read models listen.
"""

from core.events.dispatcher import DomainEvent, EventDispatcher
from core.events.registry import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
    SubscriberRegistry,
    validate_event_type_format,
)

__all__ = [
    "DomainEvent",
    "EventDispatcher",
    "SubscriberRegistry",
    "validate_event_type_format",
    "EventBusError",
    "InvalidEventTypeFormat",
    "DuplicateSubscriberError",
]
