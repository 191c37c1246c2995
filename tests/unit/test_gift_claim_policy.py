"""Tests for gift claim eligibility precedence."""

from datetime import datetime, timedelta
from decimal import Decimal

from fulfillment.domain.entities import Order, OrderItem
from fulfillment.domain.enums import GiftType, OrderStatus
from fulfillment.domain.policies import ClaimRejection, evaluate_gift_claim
from fulfillment.domain.value_objects import Money


def make_order(
    status=OrderStatus.PAID, is_gift=True, receivers=(None, None), created_at=None, gift_type=None
):
    items = [
        OrderItem(id=i + 1, product_id=1, quantity=1, price=Money(Decimal("10")), receiver_id=r)
        for i, r in enumerate(receivers)
    ]
    return Order(
        id=1,
        order_no="UORD20250101000001",
        user_id=10,
        amount=Money(Decimal("20")),
        status=status,
        is_gift=is_gift,
        gift_type=gift_type,
        items=items,
        created_at=created_at,
    )


def test_eligible_when_unclaimed_item_remains():
    decision = evaluate_gift_claim(make_order(), 20)

    assert decision.can_receive is True
    assert decision.message == ""


def test_unpaid_order_rejected_first():
    # Also not a gift and own order: status wins
    decision = evaluate_gift_claim(make_order(status=OrderStatus.PENDING_PAYMENT, is_gift=False), 10)

    assert decision.can_receive is False
    assert decision.rejection is ClaimRejection.NOT_PAID
    assert decision.message == "order not in paid state"


def test_shipped_order_is_not_claimable():
    decision = evaluate_gift_claim(make_order(status=OrderStatus.SHIPPED), 20)
    assert decision.message == "order not in paid state"


def test_non_gift_rejected_before_ownership():
    decision = evaluate_gift_claim(make_order(is_gift=False), 10)
    assert decision.message == "not a gift order"


def test_owner_cannot_claim_own_gift():
    decision = evaluate_gift_claim(make_order(), 10)
    assert decision.message == "cannot claim your own gift"


def test_already_claimed_even_if_other_items_free():
    decision = evaluate_gift_claim(make_order(receivers=(20, None)), 20)

    assert decision.can_receive is False
    assert decision.message == "already claimed"


def test_fully_claimed_by_others():
    decision = evaluate_gift_claim(make_order(receivers=(30, 40)), 20)
    assert decision.message == "fully claimed"


def test_expiry_only_applies_with_ttl():
    created = datetime(2025, 1, 1, 12, 0)
    order = make_order(created_at=created)
    later = created + timedelta(days=3)

    assert evaluate_gift_claim(order, 20, now=later).can_receive is True
    expired = evaluate_gift_claim(order, 20, now=later, claim_ttl=timedelta(hours=48))
    assert expired.message == "gift expired"
    assert evaluate_gift_claim(order, 20, now=later, claim_ttl=timedelta(days=7)).can_receive


def test_ownership_checked_before_expiry():
    created = datetime(2025, 1, 1)
    decision = evaluate_gift_claim(
        make_order(created_at=created), 10,
        now=created + timedelta(days=30), claim_ttl=timedelta(hours=1),
    )
    assert decision.rejection is ClaimRejection.OWN_GIFT


def test_evaluation_does_not_mutate_order():
    order = make_order()
    before = [(i.receiver_id, i.gift_status) for i in order.items]

    evaluate_gift_claim(order, 20)
    evaluate_gift_claim(order, 20)

    assert [(i.receiver_id, i.gift_status) for i in order.items] == before
    assert order.pull_domain_events() == []


def test_single_recipient_order_stays_claimable_for_its_claimant():
    order = make_order(receivers=(20, None), gift_type=GiftType.SINGLE_RECIPIENT)

    assert order.is_single_recipient
    assert evaluate_gift_claim(order, 20).can_receive is True
    assert evaluate_gift_claim(order, 30).rejection is ClaimRejection.FULLY_CLAIMED


def test_single_recipient_order_fully_held():
    order = make_order(receivers=(20, 20), gift_type=GiftType.SINGLE_RECIPIENT)

    assert evaluate_gift_claim(order, 20).rejection is ClaimRejection.ALREADY_CLAIMED
    assert evaluate_gift_claim(order, 30).rejection is ClaimRejection.FULLY_CLAIMED


def test_gift_type_ignored_on_regular_orders():
    order = make_order(is_gift=False, gift_type=GiftType.SINGLE_RECIPIENT)
    assert not order.is_single_recipient
