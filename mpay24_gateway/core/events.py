"""
Event Bus - in-process publish/subscribe for payment domain events.

Publishers do not know who consumes their events. Handlers subscribe to an
event type (or to ``"*"`` for every event). With EVENT_BACKEND=rabbitmq every
event is also forwarded to a topic exchange.

Usage:
    from mpay24_gateway.core.events import get_event_bus

    bus = get_event_bus()
    bus.subscribe("payment.order_added", handler)
    bus.publish("payment.order_added", {"objectid": 1, "orderid": "...", "userid": 7})
"""

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

EXCHANGE = os.getenv("EVENT_EXCHANGE", "mpay24.events")

WILDCARD = "*"


@dataclass
class Event:
    """A published domain event."""
    type: str
    payload: Dict[str, Any]
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


EventHandler = Callable[[Event], None]


class EventBus:
    """Synchronous fire-and-forget dispatcher."""

    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = {}

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event_type: str, payload: Dict[str, Any]) -> Event:
        """
        Deliver an event to its subscribers.

        A failing handler is logged and does not stop delivery to the others,
        nor does it fail the publisher.
        """
        event = Event(type=event_type, payload=dict(payload))
        handlers = self._handlers.get(event_type, []) + self._handlers.get(WILDCARD, [])
        logger.info(f"Event {event_type}: {event.payload}")
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(f"Handler {handler!r} failed for event {event_type}")
        return event


class RabbitMQForwarder:
    """Forwards events to a durable topic exchange, routing key = event type."""

    def __init__(self, url: Optional[str] = None, exchange: str = EXCHANGE):
        self.url = url or os.getenv("RABBITMQ_URL")
        if not self.url:
            raise RuntimeError("RABBITMQ_URL is not set")
        self.exchange = exchange

    def __call__(self, event: Event) -> None:
        # Imported here so deployments using the memory backend can omit pika
        import pika

        params = pika.URLParameters(self.url)
        params.heartbeat = int(os.getenv("RABBITMQ_HEARTBEAT", "30"))
        params.blocked_connection_timeout = float(os.getenv("RABBITMQ_BLOCKED_TIMEOUT", "5"))

        conn = pika.BlockingConnection(params)
        try:
            ch = conn.channel()
            ch.exchange_declare(exchange=self.exchange, exchange_type="topic", durable=True)
            body = json.dumps(
                {
                    "type": event.type,
                    "payload": event.payload,
                    "occurred_at": event.occurred_at.isoformat(),
                },
                default=str,
            ).encode("utf-8")
            ch.basic_publish(
                exchange=self.exchange,
                routing_key=event.type,
                body=body,
                properties=pika.BasicProperties(
                    delivery_mode=2,
                    content_type="application/json",
                ),
            )
        finally:
            conn.close()


_bus: Optional[EventBus] = None


def get_event_bus() -> EventBus:
    """Get or create the process-wide bus."""
    global _bus

    if _bus is None:
        _bus = EventBus()
        backend = os.getenv("EVENT_BACKEND", "memory").strip().lower()  # memory | rabbitmq
        if backend == "rabbitmq":
            _bus.subscribe(WILDCARD, RabbitMQForwarder())
            logger.info(f"Event bus forwarding to RabbitMQ exchange {EXCHANGE}")
        elif backend != "memory":
            raise RuntimeError(f"Unsupported EVENT_BACKEND={backend}")

    return _bus
