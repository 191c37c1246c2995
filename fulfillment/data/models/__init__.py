"""Database models."""

from .base import Base
from .order_model import DeliveryPlanModel, OrderItemModel, OrderModel, ProductModel

__all__ = ["Base", "DeliveryPlanModel", "OrderItemModel", "OrderModel", "ProductModel"]
