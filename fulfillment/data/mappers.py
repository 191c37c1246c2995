"""Static mappers for domain entities ↔ database models."""

from decimal import Decimal
from typing import List

from fulfillment.domain.entities import DeliveryPlan, Order, OrderItem, Product, ReceiverSnapshot
from fulfillment.domain.enums import DeliveryPlanStatus, GiftStatus, OrderStatus
from fulfillment.domain.value_objects import Money

from .models.order_model import DeliveryPlanModel, OrderItemModel, OrderModel, ProductModel


class DeliveryPlanMapper:
    """Static mapper for DeliveryPlan ↔ DeliveryPlanModel transformation."""

    @staticmethod
    def to_domain(model: DeliveryPlanModel) -> DeliveryPlan:
        receiver = None
        if model.receiver_name:
            receiver = ReceiverSnapshot(
                name=model.receiver_name,
                phone=model.receiver_phone or "",
                address=model.receiver_address or "",
                province=model.receiver_province,
                city=model.receiver_city,
                area=model.receiver_area,
            )
        return DeliveryPlan(
            id=model.id,
            order_item_id=model.order_item_id,
            delivery_start_date=model.delivery_start_date,
            delivery_end_date=model.delivery_end_date,
            delivery_sequence=model.delivery_sequence,
            status=DeliveryPlanStatus(model.status),
            receiver=receiver,
            receiver_id=model.receiver_id,
            subscription_product_id=model.subscription_product_id,
            delivery_no=model.delivery_no,
            express_company=model.express_company,
            express_number=model.express_number,
            shipped_at=model.shipped_at,
            remark=model.remark,
        )

    @staticmethod
    def to_persistence(entity: DeliveryPlan) -> DeliveryPlanModel:
        receiver = entity.receiver
        return DeliveryPlanModel(
            order_item_id=entity.order_item_id,
            receiver_id=entity.receiver_id,
            subscription_product_id=entity.subscription_product_id,
            delivery_no=entity.delivery_no,
            receiver_name=receiver.name if receiver else None,
            receiver_phone=receiver.phone if receiver else None,
            receiver_address=receiver.address if receiver else None,
            receiver_province=receiver.province if receiver else None,
            receiver_city=receiver.city if receiver else None,
            receiver_area=receiver.area if receiver else None,
            delivery_start_date=entity.delivery_start_date,
            delivery_end_date=entity.delivery_end_date,
            delivery_sequence=entity.delivery_sequence,
            status=int(entity.status),
            remark=entity.remark,
        )


class OrderItemMapper:
    """Static mapper for OrderItem ↔ OrderItemModel transformation."""

    @staticmethod
    def to_domain(model: OrderItemModel, currency: str = "CNY", include_plans: bool = False) -> OrderItem:
        """Convert ORM model to domain entity.

        Args:
            model: OrderItemModel instance
            currency: Currency of the owning order
            include_plans: Map ``delivery_plans`` (must be eagerly loaded)

        Returns:
            OrderItem domain entity
        """
        plans: List[DeliveryPlan] = []
        if include_plans:
            plans = sorted(
                (DeliveryPlanMapper.to_domain(p) for p in model.delivery_plans),
                key=lambda p: (p.delivery_sequence, p.delivery_start_date),
            )
        return OrderItem(
            id=model.id,
            order_id=model.order_id,
            product_id=model.product_id,
            product_name=model.product.product_name if model.product else None,
            quantity=model.quantity,
            price=Money(amount=Decimal(str(model.price)), currency=currency),
            receiver_id=model.receiver_id,
            gift_status=GiftStatus(model.gift_status),
            gift_message=model.gift_message,
            gift_receiver_name=model.gift_receiver_name,
            gift_relationship=model.gift_relationship,
            received_at=model.received_at,
            delivery_type=model.delivery_type,
            total_deliveries=model.total_deliveries,
            delivery_interval=model.delivery_interval,
            delivered_count=model.delivered_count,
            delivery_plans=plans,
        )

    @staticmethod
    def to_persistence(entity: OrderItem) -> OrderItemModel:
        return OrderItemModel(
            product_id=entity.product_id,
            quantity=entity.quantity,
            price=entity.price.amount,
            receiver_id=entity.receiver_id,
            gift_status=int(entity.gift_status),
            gift_message=entity.gift_message,
            gift_receiver_name=entity.gift_receiver_name,
            gift_relationship=entity.gift_relationship,
            delivery_type=entity.delivery_type,
            total_deliveries=entity.total_deliveries,
            delivery_interval=entity.delivery_interval,
            delivered_count=entity.delivered_count,
        )


class OrderMapper:
    """Static mapper for Order ↔ OrderModel transformation with nested items."""

    @staticmethod
    def to_domain(model: OrderModel, include_plans: bool = False) -> Order:
        """Convert ORM model to domain aggregate (with nested items).

        Args:
            model: OrderModel instance with items loaded
            include_plans: Map each item's plans as well

        Returns:
            Order domain aggregate
        """
        items = [
            OrderItemMapper.to_domain(item, model.currency, include_plans)
            for item in model.items
        ]
        return Order(
            id=model.id,
            order_no=model.order_no,
            user_id=model.user_id,
            amount=Money(amount=Decimal(str(model.amount)), currency=model.currency),
            status=OrderStatus(model.status),
            is_gift=model.is_gift,
            gift_type=model.gift_type,
            gift_card=model.gift_card,
            address_snapshot=model.address_snapshot,
            items=items,
            created_at=model.created_at,
            paid_at=model.paid_at,
        )

    @staticmethod
    def to_persistence(entity: Order) -> OrderModel:
        """Convert a new domain aggregate to an ORM model (with nested items)."""
        order_model = OrderModel(
            order_no=entity.order_no,
            user_id=entity.user_id,
            amount=entity.amount.amount,
            currency=entity.amount.currency,
            status=int(entity.status),
            is_gift=entity.is_gift,
            gift_type=int(entity.gift_type) if entity.gift_type is not None else None,
            gift_card=entity.gift_card,
            address_snapshot=entity.address_snapshot,
        )
        if entity.created_at is not None:
            order_model.created_at = entity.created_at
        order_model.items = [OrderItemMapper.to_persistence(item) for item in entity.items]
        return order_model


class ProductMapper:
    """Static mapper for Product ↔ ProductModel transformation."""

    @staticmethod
    def to_domain(model: ProductModel) -> Product:
        return Product(
            id=model.id,
            product_name=model.product_name,
            is_subscription=model.is_subscription,
            delivery_type=model.delivery_type,
            max_deliveries=model.max_deliveries,
            delivery_interval=model.delivery_interval,
        )

    @staticmethod
    def to_persistence(entity: Product) -> ProductModel:
        return ProductModel(
            product_name=entity.product_name,
            is_subscription=entity.is_subscription,
            delivery_type=entity.delivery_type,
            max_deliveries=entity.max_deliveries,
            delivery_interval=entity.delivery_interval,
        )
