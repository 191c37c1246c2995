"""Integration tests for UnitOfWork transaction handling."""

from decimal import Decimal

import pytest

from fulfillment.data.uow import create_uow
from fulfillment.domain.entities import Order
from fulfillment.domain.errors import TransactionFailedError
from fulfillment.domain.events import OrderPaidEvent
from fulfillment.domain.value_objects import Money


@pytest.mark.asyncio
async def test_uncommitted_work_is_rolled_back(session_factory, event_bus, published):
    async with create_uow(session_factory, event_bus) as uow:
        order = await uow.orders.add(
            Order(order_no="UORD20250428000001", user_id=10, amount=Money(Decimal("1")))
        )
        uow.collect([OrderPaidEvent(order_id=order.id)])

    async with create_uow(session_factory) as uow:
        assert await uow.orders.get(order.id) is None

    assert published == []


@pytest.mark.asyncio
async def test_commit_publishes_with_execution_id(session_factory, event_bus, published):
    uow = create_uow(session_factory, event_bus)
    async with uow:
        order = await uow.orders.add(
            Order(order_no="UORD20250428000002", user_id=10, amount=Money(Decimal("1")))
        )
        uow.collect([OrderPaidEvent(order_id=order.id)])
        await uow.commit()

    [event] = published
    assert event.execution_id == str(uow.execution_id)


@pytest.mark.asyncio
async def test_database_error_becomes_transaction_failed(session_factory):
    async with create_uow(session_factory) as uow:
        await uow.orders.add(Order(order_no="UORD20250428000003", user_id=10, amount=Money(Decimal("1"))))
        await uow.commit()

    with pytest.raises(TransactionFailedError) as exc_info:
        async with create_uow(session_factory) as uow:
            # order_no is unique
            await uow.orders.add(
                Order(order_no="UORD20250428000003", user_id=11, amount=Money(Decimal("1")))
            )

    assert "execution_id" in exc_info.value.details


@pytest.mark.asyncio
async def test_repositories_require_context(session_factory):
    with pytest.raises(RuntimeError):
        create_uow(session_factory).orders
