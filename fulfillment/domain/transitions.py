"""
Transition tables for orders and delivery plans.

A pair missing from a table is a denied transition. Administrative overrides
bypass the table and are audited by the caller.
"""
from typing import Dict, Tuple

from .enums import DeliveryPlanStatus, OrderStatus


ORDER_TRANSITIONS: Dict[Tuple[OrderStatus, OrderStatus], bool] = {
    (OrderStatus.PENDING_PAYMENT, OrderStatus.PAID): True,
    (OrderStatus.PAID, OrderStatus.SHIPPED): True,
    (OrderStatus.SHIPPED, OrderStatus.COMPLETED): True,
    (OrderStatus.PENDING_PAYMENT, OrderStatus.CANCELLED): True,
    (OrderStatus.PAID, OrderStatus.CANCELLED): True,
    (OrderStatus.SHIPPED, OrderStatus.CANCELLED): True,
}

DELIVERY_PLAN_TRANSITIONS: Dict[Tuple[DeliveryPlanStatus, DeliveryPlanStatus], bool] = {
    (DeliveryPlanStatus.PENDING_CONFIRMATION, DeliveryPlanStatus.CONFIRMED): True,
    (DeliveryPlanStatus.CONFIRMED, DeliveryPlanStatus.SHIPPED): True,
    (DeliveryPlanStatus.SHIPPED, DeliveryPlanStatus.COMPLETED): True,
    (DeliveryPlanStatus.PENDING_CONFIRMATION, DeliveryPlanStatus.CANCELLED): True,
    (DeliveryPlanStatus.CONFIRMED, DeliveryPlanStatus.CANCELLED): True,
}


def is_order_transition_allowed(current: OrderStatus, requested: OrderStatus) -> bool:
    return ORDER_TRANSITIONS.get((OrderStatus(current), OrderStatus(requested)), False)


def is_plan_transition_allowed(
    current: DeliveryPlanStatus, requested: DeliveryPlanStatus
) -> bool:
    return DELIVERY_PLAN_TRANSITIONS.get(
        (DeliveryPlanStatus(current), DeliveryPlanStatus(requested)), False
    )


def plan_statuses_leading_to(target: DeliveryPlanStatus) -> Tuple[DeliveryPlanStatus, ...]:
    """Plan statuses from which ``target`` may be entered, in code order."""
    target = DeliveryPlanStatus(target)
    return tuple(sorted(
        current for (current, requested), allowed in DELIVERY_PLAN_TRANSITIONS.items()
        if allowed and requested == target
    ))
