"""Tests for the order and delivery plan transition tables."""

import itertools

import pytest

from fulfillment.domain.enums import DeliveryPlanStatus, OrderStatus
from fulfillment.domain.transitions import (
    ORDER_TRANSITIONS,
    is_order_transition_allowed,
    is_plan_transition_allowed,
    plan_statuses_leading_to,
)


@pytest.mark.parametrize(
    "current,requested",
    [
        (OrderStatus.PENDING_PAYMENT, OrderStatus.PAID),
        (OrderStatus.PAID, OrderStatus.SHIPPED),
        (OrderStatus.SHIPPED, OrderStatus.COMPLETED),
        (OrderStatus.PENDING_PAYMENT, OrderStatus.CANCELLED),
        (OrderStatus.PAID, OrderStatus.CANCELLED),
        (OrderStatus.SHIPPED, OrderStatus.CANCELLED),
    ],
)
def test_order_forward_transitions_allowed(current, requested):
    assert is_order_transition_allowed(current, requested)


@pytest.mark.parametrize(
    "current,requested",
    [
        (OrderStatus.COMPLETED, OrderStatus.PENDING_PAYMENT),
        (OrderStatus.PAID, OrderStatus.PENDING_PAYMENT),
        (OrderStatus.PENDING_PAYMENT, OrderStatus.SHIPPED),
        (OrderStatus.PAID, OrderStatus.COMPLETED),
    ],
)
def test_order_jumps_and_reversals_denied(current, requested):
    assert not is_order_transition_allowed(current, requested)


def test_terminal_order_states_have_no_exit():
    for terminal, requested in itertools.product(
        (OrderStatus.COMPLETED, OrderStatus.CANCELLED), OrderStatus
    ):
        assert not is_order_transition_allowed(terminal, requested)
    assert all(not current.is_terminal for current, _ in ORDER_TRANSITIONS)


def test_transitions_accept_raw_integers():
    assert is_order_transition_allowed(0, 1)
    assert not is_order_transition_allowed(3, 4)


def test_shipped_and_completed_plans_cannot_be_cancelled():
    assert is_plan_transition_allowed(DeliveryPlanStatus.PENDING_CONFIRMATION, DeliveryPlanStatus.CANCELLED)
    assert is_plan_transition_allowed(DeliveryPlanStatus.CONFIRMED, DeliveryPlanStatus.CANCELLED)
    assert not is_plan_transition_allowed(DeliveryPlanStatus.SHIPPED, DeliveryPlanStatus.CANCELLED)
    assert not is_plan_transition_allowed(DeliveryPlanStatus.COMPLETED, DeliveryPlanStatus.CANCELLED)
    assert plan_statuses_leading_to(DeliveryPlanStatus.CANCELLED) == (
        DeliveryPlanStatus.PENDING_CONFIRMATION,
        DeliveryPlanStatus.CONFIRMED,
    )


def test_plan_progression():
    assert is_plan_transition_allowed(DeliveryPlanStatus.PENDING_CONFIRMATION, DeliveryPlanStatus.CONFIRMED)
    assert is_plan_transition_allowed(DeliveryPlanStatus.CONFIRMED, DeliveryPlanStatus.SHIPPED)
    assert is_plan_transition_allowed(DeliveryPlanStatus.SHIPPED, DeliveryPlanStatus.COMPLETED)
    assert not is_plan_transition_allowed(DeliveryPlanStatus.PENDING_CONFIRMATION, DeliveryPlanStatus.SHIPPED)


def test_plan_status_filters_follow_the_table():
    assert plan_statuses_leading_to(DeliveryPlanStatus.CONFIRMED) == (DeliveryPlanStatus.PENDING_CONFIRMATION,)
    assert plan_statuses_leading_to(DeliveryPlanStatus.SHIPPED) == (DeliveryPlanStatus.CONFIRMED,)
    assert plan_statuses_leading_to(2) == (DeliveryPlanStatus.CONFIRMED,)
    assert plan_statuses_leading_to(DeliveryPlanStatus.PENDING_CONFIRMATION) == ()
