"""
Status codes for orders, order items and delivery plans.

Values are persisted as integers and must not be renumbered.
"""
from enum import Enum, IntEnum


class OrderStatus(IntEnum):
    """Order lifecycle status."""

    PENDING_PAYMENT = 0
    PAID = 1
    SHIPPED = 2
    COMPLETED = 3
    CANCELLED = 4

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.COMPLETED, OrderStatus.CANCELLED)


class DeliveryPlanStatus(IntEnum):
    """Status of a single scheduled delivery."""

    PENDING_CONFIRMATION = 0
    CONFIRMED = 1
    SHIPPED = 2
    COMPLETED = 3
    CANCELLED = 4


class GiftStatus(IntEnum):
    """Claim state of an order item."""

    PENDING = 0
    CLAIMED = 1
    EXPIRED = 2


class GiftType(IntEnum):
    """How a gift order is distributed."""

    SINGLE_RECIPIENT = 1
    MULTI_RECIPIENT = 2


class DeliveryType(str, Enum):
    """Delivery cadence of an order item."""

    ONCE = "once"
    INTERVAL = "interval"
