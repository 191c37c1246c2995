"""SQLAlchemy ORM models for orders, items, delivery plans and products."""

from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .base import Base


class ProductModel(Base):
    """Catalog product (lookup only)."""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_name = Column(String(255), nullable=False)
    is_subscription = Column(Boolean, default=False, nullable=False)
    delivery_type = Column(String(20), default="once", nullable=False)
    max_deliveries = Column(Integer, default=1, nullable=False)
    delivery_interval = Column(Integer, default=0, nullable=False)


class OrderModel(Base):
    """SQLAlchemy ORM model for orders table."""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_no = Column(String(32), unique=True, nullable=False, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), default="CNY", nullable=False)
    status = Column(Integer, default=0, nullable=False, index=True)
    is_gift = Column(Boolean, default=False, nullable=False)
    gift_type = Column(Integer, nullable=True)
    gift_card = Column(Text, nullable=True)
    address_snapshot = Column(JSON, nullable=True)
    paid_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
    )

    def __repr__(self):
        return f"<OrderModel(id={self.id}, order_no={self.order_no}, status={self.status})>"


class OrderItemModel(Base):
    """SQLAlchemy ORM model for order_items table."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    # Set once by a claim, never reassigned
    receiver_id = Column(Integer, nullable=True, index=True)
    gift_status = Column(Integer, default=0, nullable=False)
    gift_message = Column(Text, nullable=True)
    gift_receiver_name = Column(String(100), nullable=True)
    gift_relationship = Column(String(50), nullable=True)
    received_at = Column(DateTime, nullable=True)

    delivery_type = Column(String(20), default="once", nullable=False)
    total_deliveries = Column(Integer, default=1, nullable=False)
    delivery_interval = Column(Integer, default=0, nullable=False)
    delivered_count = Column(Integer, default=0, nullable=False)

    order = relationship("OrderModel", back_populates="items")
    product = relationship("ProductModel", lazy="joined")
    delivery_plans = relationship(
        "DeliveryPlanModel",
        back_populates="order_item",
        cascade="all, delete-orphan",
        order_by="DeliveryPlanModel.delivery_sequence",
    )


class DeliveryPlanModel(Base):
    """SQLAlchemy ORM model for delivery_plans table."""

    __tablename__ = "delivery_plans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_item_id = Column(Integer, ForeignKey("order_items.id"), nullable=False, index=True)
    receiver_id = Column(Integer, nullable=True)
    subscription_product_id = Column(Integer, nullable=True)
    delivery_no = Column(String(20), unique=True, nullable=True)

    receiver_name = Column(String(100), nullable=True)
    receiver_phone = Column(String(30), nullable=True)
    receiver_address = Column(String(500), nullable=True)
    receiver_province = Column(String(50), nullable=True)
    receiver_city = Column(String(50), nullable=True)
    receiver_area = Column(String(50), nullable=True)

    delivery_start_date = Column(DateTime, nullable=False)
    delivery_end_date = Column(DateTime, nullable=False)
    delivery_sequence = Column(Integer, default=1, nullable=False)
    status = Column(Integer, default=0, nullable=False)

    express_company = Column(String(50), nullable=True)
    express_number = Column(String(50), nullable=True)
    shipped_at = Column(DateTime, nullable=True)
    remark = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    order_item = relationship("OrderItemModel", back_populates="delivery_plans")

    __table_args__ = (
        Index("ix_delivery_plans_status_start", "status", "delivery_start_date"),
    )

    def __repr__(self):
        return (
            f"<DeliveryPlanModel(id={self.id}, item={self.order_item_id}, "
            f"seq={self.delivery_sequence}, status={self.status})>"
        )
