"""Event bus port. Implementations live in ``fulfillment.infrastructure``."""
from abc import ABC, abstractmethod
from typing import List

from .events.base import DomainEvent


class EventBus(ABC):
    """
    Receives domain events from the unit of work after commit.

    Subscribers therefore never see events from rolled-back work.
    """

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        """Deliver one event to its subscribers."""

    @abstractmethod
    async def publish_all(self, events: List[DomainEvent]) -> None:
        """Deliver events in the order given."""
