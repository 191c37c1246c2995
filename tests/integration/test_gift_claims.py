"""Integration tests for GiftClaimService, including concurrent claims."""

import asyncio
from datetime import datetime, timedelta

import pytest

from fulfillment.application.services import GiftClaimService, OrderLifecycleService
from fulfillment.data.repositories import SqlAlchemyOrderItemRepository
from fulfillment.domain.enums import GiftStatus, GiftType, OrderStatus
from fulfillment.domain.errors import (
    AlreadyClaimedError,
    ClaimConflictError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
)
from fulfillment.domain.events import GiftItemClaimedEvent
from fulfillment.settings import FulfillmentSettings


@pytest.fixture
def service(session_factory, settings, event_bus):
    return GiftClaimService(session_factory, settings=settings, event_bus=event_bus)


@pytest.fixture
def lifecycle(session_factory, settings):
    return OrderLifecycleService(session_factory, settings=settings)


@pytest.fixture
def before_claim_write(monkeypatch):
    """Run one coroutine after a claim has read the order but before its conditional write."""
    def install(action):
        original = SqlAlchemyOrderItemRepository.claim
        pending = [action]

        async def claim(self, *args, **kwargs):
            if pending:
                await pending.pop()()
            return await original(self, *args, **kwargs)

        monkeypatch.setattr(SqlAlchemyOrderItemRepository, "claim", claim)

    return install


@pytest.mark.asyncio
async def test_gift_claim_end_to_end(service, seed, published):
    """Two recipients share a two-item gift; nobody gets a second item."""
    order = await seed.order(user_id=10, receivers=(None, None))
    first, second = order.items

    eligibility = await service.evaluate_claim(order.id, user_id=20)
    assert eligibility.can_receive
    assert eligibility.message == ""

    claimed = await service.claim_gift_item(order.id, first.id, user_id=20)
    assert claimed.receiver_id == 20
    assert claimed.gift_status == GiftStatus.CLAIMED
    assert claimed.received_at is not None

    eligibility = await service.evaluate_claim(order.id, user_id=20)
    assert not eligibility.can_receive
    assert eligibility.message == "already claimed"

    with pytest.raises(AlreadyClaimedError):
        await service.claim_gift_item(order.id, second.id, user_id=20)

    await service.claim_gift_item(order.id, second.id, user_id=30)

    eligibility = await service.evaluate_claim(order.id, user_id=40)
    assert not eligibility.can_receive
    assert eligibility.message == "fully claimed"

    assert [type(e) for e in published] == [GiftItemClaimedEvent, GiftItemClaimedEvent]
    assert [e.receiver_id for e in published] == [20, 30]


@pytest.mark.asyncio
async def test_purchaser_cannot_claim_own_gift(service, seed):
    order = await seed.order(user_id=10)

    eligibility = await service.evaluate_claim(order.id, user_id=10)
    assert eligibility.message == "cannot claim your own gift"

    with pytest.raises(PermissionDeniedError):
        await service.claim_gift_item(order.id, order.items[0].id, user_id=10)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status,is_gift,message",
    [
        (OrderStatus.PENDING_PAYMENT, True, "order not in paid state"),
        (OrderStatus.SHIPPED, True, "order not in paid state"),
        (OrderStatus.PAID, False, "not a gift order"),
    ],
)
async def test_claim_requires_paid_gift_order(service, seed, status, is_gift, message):
    order = await seed.order(status=status, is_gift=is_gift)

    eligibility = await service.evaluate_claim(order.id, user_id=20)
    assert eligibility.message == message

    with pytest.raises(InvalidStateError):
        await service.claim_gift_item(order.id, order.items[0].id, user_id=20)


@pytest.mark.asyncio
async def test_claim_unknown_order_or_foreign_item(service, seed):
    order = await seed.order()
    other = await seed.order()

    with pytest.raises(NotFoundError):
        await service.evaluate_claim(9999, user_id=20)
    with pytest.raises(NotFoundError):
        await service.claim_gift_item(9999, order.items[0].id, user_id=20)
    with pytest.raises(NotFoundError):
        await service.claim_gift_item(order.id, other.items[0].id, user_id=20)


@pytest.mark.asyncio
async def test_second_claim_on_same_item_conflicts(service, seed):
    order = await seed.order(receivers=(None, None))
    item = order.items[0]

    await service.claim_gift_item(order.id, item.id, user_id=20)

    with pytest.raises(ClaimConflictError):
        await service.claim_gift_item(order.id, item.id, user_id=30)


@pytest.mark.asyncio
async def test_concurrent_claims_have_exactly_one_winner(session_factory, settings, seed):
    order = await seed.order(receivers=(None, None))
    item = order.items[0]
    # Separate service instances, as two API workers would have
    first = GiftClaimService(session_factory, settings=settings)
    second = GiftClaimService(session_factory, settings=settings)

    results = await asyncio.gather(
        first.claim_gift_item(order.id, item.id, user_id=20),
        second.claim_gift_item(order.id, item.id, user_id=30),
        return_exceptions=True,
    )

    winners = [r for r in results if not isinstance(r, Exception)]
    losers = [r for r in results if isinstance(r, Exception)]
    assert len(winners) == 1
    assert len(losers) == 1
    assert isinstance(losers[0], ClaimConflictError)

    lifecycle = OrderLifecycleService(session_factory, settings=settings)
    reloaded = await lifecycle.get_order(order.id)
    assert reloaded.items[0].receiver_id == winners[0].receiver_id
    assert reloaded.items[1].receiver_id is None


@pytest.mark.asyncio
async def test_claim_with_address_creates_plans(service, seed, session_factory, settings, address):
    product = await seed.product("Weekly tulips", delivery_type="interval", max_deliveries=4, delivery_interval=7)
    order = await seed.order(product=product, receivers=(None,))
    now = datetime(2025, 5, 1, 9, 0)

    claimed = await service.claim_gift_item(
        order.id, order.items[0].id, user_id=20, address=address, now=now
    )

    assert [p.delivery_sequence for p in claimed.delivery_plans] == [1, 2, 3, 4]
    assert all(p.receiver_id == 20 for p in claimed.delivery_plans)
    assert all(p.subscription_product_id == product.id for p in claimed.delivery_plans)

    reloaded = await OrderLifecycleService(session_factory, settings=settings).get_order(order.id)
    assert len(reloaded.items[0].delivery_plans) == 4


@pytest.mark.asyncio
async def test_claim_with_incomplete_address_is_rejected(service, seed):
    order = await seed.order()

    with pytest.raises(ValueError):
        await service.claim_gift_item(
            order.id, order.items[0].id, user_id=20, address={"userName": "Li Hua"}
        )


@pytest.mark.asyncio
async def test_expired_gift_link(session_factory, seed):
    settings = FulfillmentSettings(_env_file=None, gift_claim_ttl_hours=48)
    service = GiftClaimService(session_factory, settings=settings)
    created = datetime(2025, 5, 1, 9, 0)
    order = await seed.order(created_at=created)

    fresh = await service.evaluate_claim(order.id, user_id=20, now=created + timedelta(hours=47))
    stale = await service.evaluate_claim(order.id, user_id=20, now=created + timedelta(hours=49))

    assert fresh.can_receive
    assert stale.message == "gift expired"


@pytest.mark.asyncio
async def test_update_gift_details(service, seed):
    order = await seed.order(user_id=10, receivers=(None, None))
    first = order.items[0]

    result = await service.update_gift_details(
        order.id, user_id=10, message="For you", relationship="friend"
    )
    assert all(item.gift_message == "For you" for item in result.items)
    assert all(item.gift_relationship == "friend" for item in result.items)

    result = await service.update_gift_details(
        order.id, user_id=10, receiver_name="Mei", order_item_id=first.id
    )
    assert [item.gift_receiver_name for item in result.items] == ["Mei", None]
    assert result.items[0].gift_message == "For you"


@pytest.mark.asyncio
async def test_update_gift_details_requires_owner_and_item(service, seed):
    order = await seed.order(user_id=10)
    other = await seed.order(user_id=10)

    with pytest.raises(PermissionDeniedError):
        await service.update_gift_details(order.id, user_id=20, message="hi")
    with pytest.raises(NotFoundError):
        await service.update_gift_details(
            order.id, user_id=10, message="hi", order_item_id=other.items[0].id
        )


@pytest.mark.asyncio
async def test_claim_after_concurrent_cancel_writes_nothing(
    service, seed, lifecycle, address, published, before_claim_write
):
    order = await seed.order(receivers=(None,))
    before_claim_write(lambda: lifecycle.cancel_order(order.id))

    with pytest.raises(InvalidStateError, match="order not in paid state"):
        await service.claim_gift_item(order.id, order.items[0].id, user_id=20, address=address)

    reloaded = await lifecycle.get_order(order.id)
    assert reloaded.status == OrderStatus.CANCELLED
    assert reloaded.items[0].receiver_id is None
    assert reloaded.items[0].gift_status == GiftStatus.PENDING
    assert reloaded.items[0].delivery_plans == []
    assert published == []


@pytest.mark.asyncio
async def test_recipient_racing_for_two_items_keeps_one(service, seed, lifecycle, before_claim_write):
    order = await seed.order(receivers=(None, None))
    first, second = order.items
    before_claim_write(lambda: service.claim_gift_item(order.id, second.id, user_id=20))

    with pytest.raises(AlreadyClaimedError):
        await service.claim_gift_item(order.id, first.id, user_id=20)

    reloaded = await lifecycle.get_order(order.id)
    receivers = {item.id: item.receiver_id for item in reloaded.items}
    assert receivers == {first.id: None, second.id: 20}


@pytest.mark.asyncio
async def test_single_recipient_gift_claims_every_item(service, seed, lifecycle, address, published):
    order = await seed.order(receivers=(None, None), gift_type=GiftType.SINGLE_RECIPIENT)
    first, second = order.items

    claimed = await service.claim_gift_item(
        order.id, second.id, user_id=20, address=address, now=datetime(2025, 5, 1, 9, 0)
    )

    assert claimed.id == second.id
    assert claimed.receiver_id == 20
    reloaded = await lifecycle.get_order(order.id)
    assert [item.receiver_id for item in reloaded.items] == [20, 20]
    assert all(item.gift_status == GiftStatus.CLAIMED for item in reloaded.items)
    assert all(len(item.delivery_plans) == 1 for item in reloaded.items)
    assert sorted(e.order_item_id for e in published) == sorted([first.id, second.id])
    assert all(e.plans_created == 1 for e in published)

    again = await service.evaluate_claim(order.id, user_id=20)
    assert again.message == "already claimed"
    with pytest.raises(AlreadyClaimedError):
        await service.claim_gift_item(order.id, first.id, user_id=20)

    stranger = await service.evaluate_claim(order.id, user_id=30)
    assert stranger.message == "fully claimed"
    with pytest.raises(ClaimConflictError):
        await service.claim_gift_item(order.id, first.id, user_id=30)


@pytest.mark.asyncio
async def test_single_recipient_gift_is_not_shared_under_race(service, seed, lifecycle, before_claim_write):
    order = await seed.order(receivers=(None, None), gift_type=GiftType.SINGLE_RECIPIENT)
    first, second = order.items
    before_claim_write(lambda: service.claim_gift_item(order.id, first.id, user_id=30))

    with pytest.raises(ClaimConflictError):
        await service.claim_gift_item(order.id, second.id, user_id=20)

    reloaded = await lifecycle.get_order(order.id)
    assert [item.receiver_id for item in reloaded.items] == [30, 30]


@pytest.mark.asyncio
async def test_expired_claim_marks_pending_items_expired(session_factory, seed, lifecycle):
    settings = FulfillmentSettings(_env_file=None, gift_claim_ttl_hours=48)
    service = GiftClaimService(session_factory, settings=settings)
    created = datetime(2025, 5, 1, 9, 0)
    order = await seed.order(created_at=created, receivers=(30, None))

    with pytest.raises(InvalidStateError, match="gift expired"):
        await service.claim_gift_item(
            order.id, order.items[1].id, user_id=20, now=created + timedelta(hours=49)
        )

    reloaded = await lifecycle.get_order(order.id)
    assert [item.gift_status for item in reloaded.items] == [GiftStatus.CLAIMED, GiftStatus.EXPIRED]
    assert reloaded.items[1].receiver_id is None
