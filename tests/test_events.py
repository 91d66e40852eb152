"""
In-process event bus.
"""

import pytest

import mpay24_gateway.core.events as events_module
from mpay24_gateway.core.events import WILDCARD, EventBus, get_event_bus


class TestEventBus:

    def test_subscriber_receives_payload(self):
        bus = EventBus()
        received = []
        bus.subscribe("payment.order_added", received.append)

        bus.publish("payment.order_added", {"order_id": 1})

        assert len(received) == 1
        assert received[0].type == "payment.order_added"
        assert received[0].payload == {"order_id": 1}

    def test_other_types_not_delivered(self):
        bus = EventBus()
        received = []
        bus.subscribe("payment.failed", received.append)

        bus.publish("payment.successful", {})

        assert received == []

    def test_wildcard_receives_everything(self):
        bus = EventBus()
        received = []
        bus.subscribe(WILDCARD, received.append)

        bus.publish("payment.successful", {})
        bus.publish("payment.failed", {})

        assert [e.type for e in received] == ["payment.successful", "payment.failed"]

    def test_failing_handler_does_not_stop_delivery(self):
        bus = EventBus()
        received = []

        def broken(event):
            raise RuntimeError("boom")

        bus.subscribe("payment.successful", broken)
        bus.subscribe("payment.successful", received.append)

        event = bus.publish("payment.successful", {"order_id": 3})

        assert received == [event]

    def test_unsubscribe(self):
        bus = EventBus()
        received = []
        bus.subscribe("payment.failed", received.append)
        bus.unsubscribe("payment.failed", received.append)

        bus.publish("payment.failed", {})

        assert received == []


class TestGetEventBus:

    @pytest.fixture(autouse=True)
    def reset_bus(self, monkeypatch):
        monkeypatch.setattr(events_module, "_bus", None)

    def test_singleton(self, monkeypatch):
        monkeypatch.setenv("EVENT_BACKEND", "memory")
        assert get_event_bus() is get_event_bus()

    def test_unsupported_backend(self, monkeypatch):
        monkeypatch.setenv("EVENT_BACKEND", "kafka")
        with pytest.raises(RuntimeError, match="kafka"):
            get_event_bus()
