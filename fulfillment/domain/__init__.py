"""Domain layer - pure domain models and interfaces."""

from .entities import DeliveryPlan, Order, OrderItem, ReceiverSnapshot
from .enums import DeliveryPlanStatus, DeliveryType, GiftStatus, GiftType, OrderStatus
from .errors import (
    AlreadyClaimedError,
    ClaimConflictError,
    FulfillmentError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    TransactionFailedError,
)
from .repositories import DeliveryPlanRepository, OrderItemRepository, OrderRepository
from .value_objects import DeliveryNumber, ExecutionID, Money, OrderNumber

__all__ = [
    "AlreadyClaimedError",
    "ClaimConflictError",
    "DeliveryNumber",
    "DeliveryPlan",
    "DeliveryPlanRepository",
    "DeliveryPlanStatus",
    "DeliveryType",
    "ExecutionID",
    "FulfillmentError",
    "GiftStatus",
    "GiftType",
    "InvalidStateError",
    "Money",
    "NotFoundError",
    "Order",
    "OrderItem",
    "OrderItemRepository",
    "OrderNumber",
    "OrderRepository",
    "OrderStatus",
    "PermissionDeniedError",
    "ReceiverSnapshot",
    "TransactionFailedError",
]
