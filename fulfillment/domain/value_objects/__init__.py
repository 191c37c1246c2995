"""Domain value objects."""

from .value_objects import ExecutionID, Money
from .order_number import DeliveryNumber, OrderNumber

__all__ = [
    "DeliveryNumber",
    "ExecutionID",
    "Money",
    "OrderNumber",
]
