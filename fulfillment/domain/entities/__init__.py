"""Domain entities."""
from .order import Order, OrderItem
from .delivery_plan import DeliveryPlan, ReceiverSnapshot
from .product import Product

__all__ = ["DeliveryPlan", "Order", "OrderItem", "Product", "ReceiverSnapshot"]
