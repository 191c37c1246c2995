"""Helpers shared by the application services."""

from datetime import datetime
from typing import Iterable, List, Optional

from fulfillment.application.dtos import DeliveryPlanDTO, OrderDTO, OrderItemDTO
from fulfillment.data.uow import UnitOfWork
from fulfillment.domain.entities import DeliveryPlan, Order, OrderItem, ReceiverSnapshot
from fulfillment.domain.errors import NotFoundError
from fulfillment.domain.policies import DeliverySchedule
from fulfillment.settings import FulfillmentSettings


def build_schedule(settings: FulfillmentSettings) -> DeliverySchedule:
    return DeliverySchedule(
        cutoff_hour=settings.same_day_cutoff_hour,
        once_due_days=settings.once_due_days,
        interval_due_days=settings.interval_due_days,
        default_interval_days=settings.default_interval_days,
    )


async def load_order(uow: UnitOfWork, order_id: int, with_plans: bool = False) -> Order:
    """Fetch an order or raise NotFoundError."""
    order = await uow.orders.get(order_id, with_plans=with_plans)
    if order is None:
        raise NotFoundError(f"Order {order_id} not found", details={"order_id": order_id})
    return order


async def materialize_plans(
    uow: UnitOfWork,
    schedule: DeliverySchedule,
    items: Iterable[OrderItem],
    receiver: ReceiverSnapshot,
    receiver_id: int,
    base_date: datetime,
) -> List[DeliveryPlan]:
    """Create and persist the delivery plans of ``items`` for one receiver."""
    plans: List[DeliveryPlan] = []
    for item in items:
        item_plans = schedule.plans_for_item(item, receiver, receiver_id, base_date=base_date)
        item.delivery_plans = item_plans
        plans.extend(item_plans)
    if plans:
        await uow.delivery_plans.add_all(plans)
    return plans


def plan_to_dto(plan: DeliveryPlan) -> DeliveryPlanDTO:
    receiver = plan.receiver
    return DeliveryPlanDTO(
        id=plan.id,
        order_item_id=plan.order_item_id,
        delivery_no=plan.delivery_no,
        delivery_start_date=plan.delivery_start_date,
        delivery_end_date=plan.delivery_end_date,
        delivery_sequence=plan.delivery_sequence,
        status=int(plan.status),
        receiver_id=plan.receiver_id,
        receiver_name=receiver.name if receiver else None,
        receiver_phone=receiver.phone if receiver else None,
        receiver_address=receiver.address if receiver else None,
        subscription_product_id=plan.subscription_product_id,
        express_company=plan.express_company,
        express_number=plan.express_number,
        shipped_at=plan.shipped_at,
        remark=plan.remark,
    )


def item_to_dto(item: OrderItem) -> OrderItemDTO:
    return OrderItemDTO(
        id=item.id,
        order_id=item.order_id,
        product_id=item.product_id,
        product_name=item.product_name,
        quantity=item.quantity,
        price=item.price.amount,
        receiver_id=item.receiver_id,
        gift_status=int(item.gift_status),
        gift_message=item.gift_message,
        gift_receiver_name=item.gift_receiver_name,
        gift_relationship=item.gift_relationship,
        received_at=item.received_at,
        delivery_type=item.delivery_type,
        total_deliveries=item.total_deliveries,
        delivery_interval=item.delivery_interval,
        delivered_count=item.delivered_count,
        delivery_plans=[plan_to_dto(p) for p in item.delivery_plans],
    )


def order_to_dto(order: Order, execution_id: Optional[str] = None) -> OrderDTO:
    """Transform Order domain entity to OrderDTO."""
    return OrderDTO(
        id=order.id,
        order_no=order.order_no,
        user_id=order.user_id,
        amount=order.amount.amount,
        currency=order.amount.currency,
        status=int(order.status),
        status_name=order.status.name.lower(),
        is_gift=order.is_gift,
        gift_type=int(order.gift_type) if order.gift_type is not None else None,
        gift_card=order.gift_card,
        address_snapshot=order.address_snapshot,
        created_at=order.created_at,
        paid_at=order.paid_at,
        items=[item_to_dto(item) for item in order.items],
        execution_id=execution_id,
    )
