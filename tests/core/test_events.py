"""
Tests for core.events — event log and subscriber fan-out.
"""

from datetime import datetime, timezone

import pytest

from core.events import (
    DomainEvent,
    DuplicateSubscriberError,
    EventBusError,
    EventDispatcher,
    InvalidEventTypeFormat,
    validate_event_type_format,
)

NOW = datetime(2026, 3, 1, 9, 0, 0, tzinfo=timezone.utc)
SOLD = "ledger.receipt.completed.v1"


class TestEventTypeFormat:
    def test_valid(self):
        validate_event_type_format(SOLD)

    @pytest.mark.parametrize(
        "event_type",
        [
            "",
            "ledger.receipt.v1",
            "ledger.receipt.completed.request",
            "ledger..completed.v1",
            "ledger.receipt.completed.v0",
        ],
    )
    def test_invalid(self, event_type):
        with pytest.raises(InvalidEventTypeFormat):
            validate_event_type_format(event_type)

    def test_error_names_the_problem(self):
        with pytest.raises(InvalidEventTypeFormat) as exc_info:
            validate_event_type_format("ledger.receipt.completed.vnext")
        assert exc_info.value.event_type == "ledger.receipt.completed.vnext"
        assert "vnext" in exc_info.value.problem


class TestEventDispatcher:
    def test_emit_records_event(self):
        dispatcher = EventDispatcher()
        event = dispatcher.emit(SOLD, {"receipt_id": "r-1"}, occurred_at=NOW, actor_id="emp-1")

        assert isinstance(event, DomainEvent)
        assert event.source_engine == "ledger"
        assert dispatcher.event_count == 1
        assert dispatcher.events() == [event]
        assert dispatcher.events("cash.drawer.credited.v1") == []

    def test_subscribers_receive_matching_events(self):
        dispatcher = EventDispatcher()
        received = []
        dispatcher.subscribe(SOLD, received.append, "test")

        dispatcher.emit(SOLD, {}, occurred_at=NOW)
        dispatcher.emit("cash.drawer.credited.v1", {}, occurred_at=NOW)

        assert [e.event_type for e in received] == [SOLD]

    def test_failing_subscriber_does_not_stop_others(self):
        dispatcher = EventDispatcher()
        received = []

        def broken(event):
            raise RuntimeError("boom")

        dispatcher.subscribe(SOLD, broken, "broken")
        dispatcher.subscribe(SOLD, received.append, "ok")

        result = dispatcher.publish(DomainEvent(event_type=SOLD, payload={}, occurred_at=NOW))

        assert result["subscribers_failed"] == 1
        assert result["subscribers_notified"] == 1
        assert result["failures"][0]["error_type"] == "RuntimeError"
        assert len(received) == 1
        assert dispatcher.event_count == 1

    def test_duplicate_subscriber_rejected(self):
        dispatcher = EventDispatcher()
        handler = lambda event: None
        dispatcher.subscribe(SOLD, handler, "a")
        with pytest.raises(DuplicateSubscriberError) as exc_info:
            dispatcher.subscribe(SOLD, handler, "sales_summary")
        assert exc_info.value.subscriber_name == "sales_summary"
        assert SOLD in str(exc_info.value)

    def test_non_callable_subscriber_rejected(self):
        with pytest.raises(EventBusError):
            EventDispatcher().subscribe(SOLD, "handler", "a")

    def test_publish_validates_type(self):
        with pytest.raises(InvalidEventTypeFormat):
            EventDispatcher().emit("ledger.sold", {}, occurred_at=NOW)


class TestEventLogTruncation:
    def test_truncate_drops_oldest(self):
        dispatcher = EventDispatcher()
        for index in range(5):
            dispatcher.emit(SOLD, {"receipt_id": f"r-{index}"}, occurred_at=NOW)

        assert dispatcher.truncate(keep_last=2) == 3

        assert [e.payload["receipt_id"] for e in dispatcher.events()] == ["r-3", "r-4"]

    def test_truncate_everything_keeps_subscribers(self):
        dispatcher = EventDispatcher()
        received = []
        dispatcher.subscribe(SOLD, received.append, "test")
        dispatcher.emit(SOLD, {}, occurred_at=NOW)

        assert dispatcher.truncate() == 1
        assert dispatcher.event_count == 0

        dispatcher.emit(SOLD, {}, occurred_at=NOW)
        assert len(received) == 2
        assert dispatcher.event_count == 1

    def test_negative_keep_rejected(self):
        with pytest.raises(ValueError):
            EventDispatcher().truncate(keep_last=-1)
