"""
In-process event bus.

Delivers committed domain events to handlers registered per event class or
for every event.
"""
import asyncio
import logging
from collections import defaultdict
from typing import Callable, Dict, List, Optional, Type

from fulfillment.domain.event_bus import EventBus
from fulfillment.domain.events.base import DomainEvent


logger = logging.getLogger(__name__)

Handler = Callable[[DomainEvent], None]


class InMemoryEventBus(EventBus):
    """
    Dispatches events to in-process handlers, in publication order.

    Handlers may be plain functions or coroutines. A handler that raises is
    logged and skipped; the transaction that produced the event has already
    committed, so there is nothing to roll back.
    """

    def __init__(self):
        self._by_type: Dict[Type[DomainEvent], List[Handler]] = defaultdict(list)
        self._catch_all: List[Handler] = []

    def subscribe(self, event_type: Type[DomainEvent], handler: Handler) -> None:
        """Call ``handler`` for every published ``event_type`` instance."""
        self._by_type[event_type].append(handler)
        logger.info(f"Registered {handler.__name__} for {event_type.__name__}")

    def subscribe_all(self, handler: Handler) -> None:
        """Call ``handler`` for every published event."""
        self._catch_all.append(handler)
        logger.info(f"Registered {handler.__name__} for all events")

    def unsubscribe(self, handler: Handler) -> None:
        """Remove ``handler`` from every subscription it holds."""
        for handlers in [self._catch_all, *self._by_type.values()]:
            while handler in handlers:
                handlers.remove(handler)
        logger.info(f"Unregistered {handler.__name__}")

    async def publish(self, event: DomainEvent) -> None:
        logger.info(
            f"[{event.execution_id}] Publishing {event.event_type} "
            f"({event.aggregate_type} {event.aggregate_id})"
        )
        for handler in self._handlers_for(event):
            await self._dispatch(handler, event)

    async def publish_all(self, events: List[DomainEvent]) -> None:
        for event in events:
            await self.publish(event)

    def _handlers_for(self, event: DomainEvent) -> List[Handler]:
        return [*self._by_type.get(type(event), ()), *self._catch_all]

    async def _dispatch(self, handler: Handler, event: DomainEvent) -> None:
        try:
            if asyncio.iscoroutinefunction(handler):
                await handler(event)
            else:
                handler(event)
        except Exception as e:
            logger.error(f"Subscriber {handler.__name__} failed on {event.event_type}: {e}", exc_info=True)


_event_bus: Optional[InMemoryEventBus] = None


def get_event_bus() -> InMemoryEventBus:
    """Process-wide event bus used by the API."""
    global _event_bus

    if _event_bus is None:
        _event_bus = InMemoryEventBus()

    return _event_bus
