"""Domain enums."""
from .statuses import (
    DeliveryPlanStatus,
    DeliveryType,
    GiftStatus,
    GiftType,
    OrderStatus,
)

__all__ = [
    "DeliveryPlanStatus",
    "DeliveryType",
    "GiftStatus",
    "GiftType",
    "OrderStatus",
]
