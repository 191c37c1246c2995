"""Repository interfaces."""
from .order_repository import OrderItemRepository, OrderRepository
from .delivery_plan_repository import DeliveryPlanRepository
from .product_repository import ProductRepository

__all__ = [
    "DeliveryPlanRepository",
    "OrderItemRepository",
    "OrderRepository",
    "ProductRepository",
]
