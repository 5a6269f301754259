"""In-memory event bus implementation."""

import asyncio
from typing import Dict, List

from localgraph.domain.interfaces import EventHandler, IEventBus
from localgraph.domain.schema import DomainEvent
from localgraph.utils.logger import get_logger

logger = get_logger(__name__)

WILDCARD = "*"


class InMemoryEventBus(IEventBus):
    """Simple in-memory async event bus.

    Handlers run concurrently per event. A failing handler is logged and
    does not affect the publisher or the other handlers.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[EventHandler]] = {}

    async def publish(self, event: DomainEvent) -> None:
        """Publish a single domain event."""
        handlers = self._handlers.get(event.event_type, []) + self._handlers.get(WILDCARD, [])
        if not handlers:
            return
        results = await asyncio.gather(
            *(handler(event) for handler in handlers),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, Exception):
                logger.error(
                    "event_bus.handler_failed",
                    event_type=event.event_type,
                    event_id=str(event.id),
                    error=str(result),
                )

    async def publish_many(self, events: List[DomainEvent]) -> None:
        """Publish multiple domain events."""
        for event in events:
            await self.publish(event)

    async def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """Subscribe a handler to an event type."""
        self._handlers.setdefault(event_type, []).append(handler)

    async def unsubscribe(self, event_type: str, handler: EventHandler) -> bool:
        """Remove a previously subscribed handler."""
        handlers = self._handlers.get(event_type, [])
        if handler not in handlers:
            return False
        handlers.remove(handler)
        return True
