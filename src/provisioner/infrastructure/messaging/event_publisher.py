"""Event publisher implementations."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog

from provisioner.domain.ports.services import EventPublisher


logger = structlog.get_logger(__name__)

EventHandler = Callable[[dict[str, Any]], None]


class LoggingEventPublisher(EventPublisher):
    """Writes each workflow event to the structured log."""

    def publish(self, event_type: str, payload: dict[str, Any]) -> None:
        fields = {k: v for k, v in payload.items() if k not in ("event_type", "event_id")}
        logger.debug("workflow_event", event_type=event_type, **fields)

    def publish_batch(self, events: list[tuple[str, dict[str, Any]]]) -> None:
        for event_type, payload in events:
            self.publish(event_type, payload)


class InMemoryEventPublisher(EventPublisher):
    """Keeps published events in memory and dispatches to subscribers."""

    def __init__(self) -> None:
        self._events: list[tuple[str, dict[str, Any]]] = []
        self._handlers: dict[str, list[EventHandler]] = {}

    def publish(self, event_type: str, payload: dict[str, Any]) -> None:
        self._events.append((event_type, payload))
        for handler in self._handlers.get(event_type, []):
            handler(payload)

    def publish_batch(self, events: list[tuple[str, dict[str, Any]]]) -> None:
        for event_type, payload in events:
            self.publish(event_type, payload)

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    @property
    def published_events(self) -> list[tuple[str, dict[str, Any]]]:
        return list(self._events)

    @property
    def event_types(self) -> list[str]:
        return [event_type for event_type, _ in self._events]

    def clear(self) -> None:
        self._events.clear()
