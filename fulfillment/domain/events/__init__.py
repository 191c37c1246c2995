"""Domain events."""
from .base import DomainEvent
from .order_events import (
    DeliveryPlansConfirmedEvent,
    DeliveryPlansShippedEvent,
    GiftItemClaimedEvent,
    OrderCancelledEvent,
    OrderCompletedEvent,
    OrderPaidEvent,
    OrderShippedEvent,
    OrderStatusOverriddenEvent,
)

__all__ = [
    "DeliveryPlansConfirmedEvent",
    "DeliveryPlansShippedEvent",
    "DomainEvent",
    "GiftItemClaimedEvent",
    "OrderCancelledEvent",
    "OrderCompletedEvent",
    "OrderPaidEvent",
    "OrderShippedEvent",
    "OrderStatusOverriddenEvent",
]
