# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""In-memory event bus.

Placement changes are announced here after they are committed. Subscribers
match either an exact event type ("placement.transfer.recorded") or an
fnmatch pattern ("placement.*"). Handler failures are logged and never
reach the publisher.

Example:
    from academia.infrastructure.events import get_event_bus, EventTypes

    bus = get_event_bus()
    bus.subscribe(EventTypes.Placement.ALL, on_placement_event)
    await bus.publish(
        EventTypes.Placement.TRANSFER_RECORDED,
        {"student_id": "stu-1", "to_section": "B"},
        school_id="school-1",
    )
"""

import asyncio
import fnmatch
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable
from uuid import uuid4

from academia.utils.datetime import utc_now

logger = logging.getLogger(__name__)

EventHandler = Callable[["EventData"], Awaitable[None]]


def _is_pattern(event_type: str) -> bool:
    return "*" in event_type or "?" in event_type


@dataclass
class EventData:
    """Published event with metadata.

    Attributes:
        event_type: The event type string.
        payload: JSON-compatible event payload.
        event_id: Unique event identifier.
        timestamp: When the event was published.
        school_id: School the event belongs to, if any.
    """

    event_type: str
    payload: dict[str, Any]
    event_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=utc_now)
    school_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "payload": self.payload,
            "timestamp": self.timestamp.isoformat(),
            "school_id": self.school_id,
        }


class EventBus:
    """Async publish/subscribe with wildcard subscriptions.

    Designed for single event loop use. Cross-process delivery is out of
    scope; subscribers that need durability must persist on their own.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}
        self._pattern_handlers: dict[str, list[EventHandler]] = {}
        self._event_count = 0

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """Subscribe a handler to an event type or wildcard pattern."""
        registry = self._pattern_handlers if _is_pattern(event_type) else self._handlers
        registry.setdefault(event_type, []).append(handler)
        logger.debug("Subscribed handler to: %s", event_type)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> bool:
        """Remove a handler.

        Returns:
            True if the handler was subscribed and has been removed.
        """
        registry = self._pattern_handlers if _is_pattern(event_type) else self._handlers
        handlers = registry.get(event_type)
        if not handlers or handler not in handlers:
            return False
        handlers.remove(handler)
        if not handlers:
            del registry[event_type]
        return True

    def _matching_handlers(self, event_type: str) -> list[EventHandler]:
        handlers = list(self._handlers.get(event_type, ()))
        for pattern, pattern_handlers in self._pattern_handlers.items():
            if fnmatch.fnmatch(event_type, pattern):
                handlers.extend(pattern_handlers)
        return handlers

    async def publish(
        self,
        event_type: str,
        payload: dict[str, Any],
        school_id: str | None = None,
    ) -> EventData:
        """Publish an event to every matching subscriber.

        Handlers run concurrently. A failing handler is logged and does not
        stop the others.

        Args:
            event_type: The event type string.
            payload: Event data dictionary.
            school_id: Optional school scope.

        Returns:
            The published EventData.
        """
        event = EventData(event_type=event_type, payload=payload, school_id=school_id)
        self._event_count += 1

        handlers = self._matching_handlers(event_type)
        if not handlers:
            logger.debug("No handlers for event: %s", event_type)
            return event

        async def safe_call(handler: EventHandler) -> None:
            try:
                await handler(event)
            except Exception as e:
                logger.error(
                    "Handler error for event %s: %s",
                    event_type,
                    str(e),
                    exc_info=True,
                )

        await asyncio.gather(*(safe_call(handler) for handler in handlers))
        return event

    def get_stats(self) -> dict[str, Any]:
        return {
            "event_types": sorted(self._handlers),
            "patterns": sorted(self._pattern_handlers),
            "total_handlers": sum(len(h) for h in self._handlers.values())
            + sum(len(h) for h in self._pattern_handlers.values()),
            "events_published": self._event_count,
        }


_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Get the process-wide event bus."""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus

