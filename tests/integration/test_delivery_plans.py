"""Integration tests for DeliveryPlanService."""

from datetime import datetime, timedelta

import pytest

from fulfillment.application.services import DeliveryPlanService, OrderLifecycleService
from fulfillment.data.uow import create_uow
from fulfillment.domain.enums import DeliveryPlanStatus, OrderStatus
from fulfillment.domain.errors import InvalidStateError, NotFoundError
from fulfillment.domain.events import DeliveryPlansConfirmedEvent, DeliveryPlansShippedEvent


CONFIRM_DAY = datetime(2025, 4, 28, 10, 0)


@pytest.fixture
def service(session_factory, settings, event_bus):
    return DeliveryPlanService(session_factory, settings=settings, event_bus=event_bus)


@pytest.fixture
def lifecycle(session_factory, settings):
    return OrderLifecycleService(session_factory, settings=settings)


@pytest.mark.asyncio
async def test_confirm_assigns_daily_delivery_numbers(service, seed, published):
    order = await seed.order(receivers=(20,))
    plans = await seed.plans(order.items[0].id, [DeliveryPlanStatus.PENDING_CONFIRMATION] * 3)

    result = await service.confirm_plans([p.id for p in plans[:2]], now=CONFIRM_DAY)

    assert result.confirmed_count == 2
    assert result.delivery_numbers == ["2025042800001", "2025042800002"]

    # Continues the day's sequence
    later = await service.confirm_plans([plans[2].id], now=CONFIRM_DAY + timedelta(hours=3))
    assert later.delivery_numbers == ["2025042800003"]

    confirmed = await service.get_plan(plans[0].id)
    assert confirmed.status == DeliveryPlanStatus.CONFIRMED
    assert confirmed.delivery_no == "2025042800001"

    assert [type(e) for e in published] == [DeliveryPlansConfirmedEvent] * 2


@pytest.mark.asyncio
async def test_confirm_skips_plans_that_are_not_pending(service, seed):
    order = await seed.order(receivers=(20,))
    plans = await seed.plans(
        order.items[0].id,
        [DeliveryPlanStatus.CANCELLED, DeliveryPlanStatus.SHIPPED],
    )

    result = await service.confirm_plans([p.id for p in plans], now=CONFIRM_DAY)

    assert result.confirmed_count == 0
    assert result.delivery_numbers == []


@pytest.mark.asyncio
async def test_ship_advances_item_and_order(service, seed, lifecycle, published):
    order = await seed.order(status=OrderStatus.PAID, receivers=(20,))
    plans = await seed.plans(order.items[0].id, [DeliveryPlanStatus.PENDING_CONFIRMATION] * 2)
    plan_ids = [p.id for p in plans]
    await service.confirm_plans(plan_ids, now=CONFIRM_DAY)

    result = await service.ship_plans(plan_ids, "SF Express", "SF1234567890", remark="fragile")

    assert result.shipped_count == 2
    assert result.orders_advanced == 1

    reloaded = await lifecycle.get_order(order.id)
    assert reloaded.status == OrderStatus.SHIPPED
    [item] = reloaded.items
    assert item.delivered_count == 2
    assert all(p.status == DeliveryPlanStatus.SHIPPED for p in item.delivery_plans)
    assert all(p.express_number == "SF1234567890" for p in item.delivery_plans)
    assert all(p.shipped_at is not None for p in item.delivery_plans)

    assert isinstance(published[-1], DeliveryPlansShippedEvent)
    assert published[-1].express_company == "SF Express"


@pytest.mark.asyncio
async def test_ship_second_plan_of_shipped_order_leaves_status(service, seed, lifecycle):
    order = await seed.order(status=OrderStatus.SHIPPED, receivers=(20,))
    [plan] = await seed.plans(order.items[0].id, [DeliveryPlanStatus.CONFIRMED])

    result = await service.ship_plans([plan.id], "SF Express", "SF1")

    assert result.orders_advanced == 0
    assert (await lifecycle.get_order(order.id)).status == OrderStatus.SHIPPED


@pytest.mark.asyncio
async def test_ship_requires_confirmed_plans(service, seed):
    order = await seed.order(receivers=(20,))
    [plan] = await seed.plans(order.items[0].id, [DeliveryPlanStatus.PENDING_CONFIRMATION])

    with pytest.raises(InvalidStateError):
        await service.ship_plans([plan.id], "SF Express", "SF1")


@pytest.mark.asyncio
async def test_get_missing_plan(service):
    with pytest.raises(NotFoundError):
        await service.get_plan(12345)


@pytest.mark.asyncio
async def test_list_plans_by_status(service, seed):
    order = await seed.order(receivers=(20,))
    await seed.plans(
        order.items[0].id,
        [
            DeliveryPlanStatus.PENDING_CONFIRMATION,
            DeliveryPlanStatus.CONFIRMED,
            DeliveryPlanStatus.CANCELLED,
        ],
    )

    page = await service.list_plans(
        statuses=[DeliveryPlanStatus.PENDING_CONFIRMATION, DeliveryPlanStatus.CONFIRMED], limit=1
    )

    assert page.total == 2
    assert len(page.items) == 1


@pytest.mark.asyncio
async def test_stats(service, seed):
    now = datetime(2025, 5, 1, 8, 0)
    order = await seed.order(receivers=(20,))
    item_id = order.items[0].id
    await seed.plans(item_id, [DeliveryPlanStatus.PENDING_CONFIRMATION] * 2, start=now + timedelta(days=1))
    await seed.plans(item_id, [DeliveryPlanStatus.CONFIRMED], start=now + timedelta(days=20))
    await seed.plans(item_id, [DeliveryPlanStatus.SHIPPED], start=now + timedelta(days=2))

    stats = await service.stats(now=now)

    assert stats.by_status["pending_confirmation"] == 2
    assert stats.by_status["confirmed"] == 1
    assert stats.by_status["shipped"] == 1
    assert stats.by_status["cancelled"] == 0
    assert stats.upcoming == 2
    assert stats.horizon_days == 7


@pytest.mark.asyncio
async def test_plan_moves_outside_the_transition_table_are_refused(session_factory, seed):
    order = await seed.order(receivers=(20,))
    [plan] = await seed.plans(order.items[0].id, [DeliveryPlanStatus.PENDING_CONFIRMATION])

    async with create_uow(session_factory) as uow:
        with pytest.raises(ValueError):
            await uow.delivery_plans.advance_for_items(
                [order.items[0].id], DeliveryPlanStatus.PENDING_CONFIRMATION, DeliveryPlanStatus.COMPLETED
            )
        unchanged = await uow.delivery_plans.get(plan.id)

    assert unchanged.status == DeliveryPlanStatus.PENDING_CONFIRMATION
