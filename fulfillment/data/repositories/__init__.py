"""SQLAlchemy repository implementations."""
from .order_repository_impl import SqlAlchemyOrderItemRepository, SqlAlchemyOrderRepository
from .delivery_plan_repository_impl import SqlAlchemyDeliveryPlanRepository
from .product_repository_impl import SqlAlchemyProductRepository

__all__ = [
    "SqlAlchemyDeliveryPlanRepository",
    "SqlAlchemyOrderItemRepository",
    "SqlAlchemyOrderRepository",
    "SqlAlchemyProductRepository",
]
