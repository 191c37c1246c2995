"""Shared fixtures: a file-backed SQLite database per test and seeding helpers."""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional, Sequence

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from fulfillment.data.models import Base
from fulfillment.data.uow import create_uow
from fulfillment.domain.entities import DeliveryPlan, Order, OrderItem, Product, ReceiverSnapshot
from fulfillment.domain.enums import DeliveryPlanStatus, GiftStatus, GiftType, OrderStatus
from fulfillment.domain.value_objects import Money, OrderNumber
from fulfillment.infrastructure.event_bus import InMemoryEventBus
from fulfillment.settings import FulfillmentSettings


ADDRESS = {
    "userName": "Li Hua",
    "telNumber": "13800000000",
    "detailInfo": "1 Garden Road",
    "provinceName": "Zhejiang",
    "cityName": "Hangzhou",
    "countyName": "Xihu",
}

RECEIVER = ReceiverSnapshot.from_address(ADDRESS)


def create_test_engine(url: str):
    """Engine without pooling so connections never outlive the loop that opened them."""
    return create_async_engine(url, poolclass=NullPool, connect_args={"timeout": 15})


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'fulfillment-test.db'}"


@pytest_asyncio.fixture
async def engine(database_url):
    """Create test database engine with all tables."""
    engine = create_test_engine(database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    """Create test session factory."""
    yield async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
def settings() -> FulfillmentSettings:
    return FulfillmentSettings(_env_file=None)


@pytest.fixture
def event_bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def published(event_bus) -> list:
    """Every event the bus delivers, in order."""
    events = []
    event_bus.subscribe_all(events.append)
    return events


class Seeder:
    """Writes products, orders and plans directly through the unit of work."""

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def product(
        self,
        name: str = "Rose bouquet",
        delivery_type: str = "once",
        max_deliveries: int = 1,
        delivery_interval: int = 0,
    ) -> Product:
        product = Product(
            product_name=name,
            is_subscription=delivery_type == "interval",
            delivery_type=delivery_type,
            max_deliveries=max_deliveries,
            delivery_interval=delivery_interval,
        )
        async with create_uow(self._session_factory) as uow:
            await uow.products.add(product)
            await uow.commit()
        return product

    async def order(
        self,
        user_id: int = 10,
        status: OrderStatus = OrderStatus.PAID,
        is_gift: bool = True,
        receivers: Sequence[Optional[int]] = (None, None),
        quantity: int = 1,
        product: Optional[Product] = None,
        created_at: Optional[datetime] = None,
        address_snapshot: Optional[dict] = None,
        gift_type: GiftType = GiftType.MULTI_RECIPIENT,
    ) -> Order:
        """One item per entry of ``receivers`` (None leaves the item unclaimed)."""
        product = product or await self.product()
        items = [
            OrderItem(
                product_id=product.id,
                product_name=product.product_name,
                quantity=quantity,
                price=Money(Decimal("99.00")),
                receiver_id=receiver_id,
                gift_status=GiftStatus.CLAIMED if receiver_id else GiftStatus.PENDING,
                delivery_type=product.delivery_type,
                total_deliveries=product.max_deliveries,
                delivery_interval=product.delivery_interval,
            )
            for receiver_id in receivers
        ]
        order = Order(
            order_no=str(OrderNumber.generate()),
            user_id=user_id,
            amount=Money(Decimal("99.00") * quantity * len(items)),
            status=status,
            is_gift=is_gift,
            gift_type=gift_type if is_gift else None,
            gift_card="Happy birthday" if is_gift else None,
            address_snapshot=address_snapshot,
            items=items,
            created_at=created_at,
        )
        async with create_uow(self._session_factory) as uow:
            await uow.orders.add(order)
            await uow.commit()
        return order

    async def plans(
        self,
        order_item_id: int,
        statuses: Sequence[DeliveryPlanStatus],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[DeliveryPlan]:
        """One plan per status, sequenced 1..N."""
        start = start or datetime.utcnow() + timedelta(days=1)
        end = end or start + timedelta(days=3)
        plans = [
            DeliveryPlan(
                order_item_id=order_item_id,
                delivery_start_date=start,
                delivery_end_date=end,
                delivery_sequence=sequence,
                status=status,
                receiver=RECEIVER,
            )
            for sequence, status in enumerate(statuses, start=1)
        ]
        async with create_uow(self._session_factory) as uow:
            await uow.delivery_plans.add_all(plans)
            await uow.commit()
        return plans


@pytest.fixture
def seed(session_factory) -> Seeder:
    return Seeder(session_factory)


@pytest.fixture
def address() -> dict:
    """Shipping address payload as sent by the mini-program."""
    return dict(ADDRESS)


@pytest.fixture
def make_engine():
    return create_test_engine


@pytest.fixture
def make_seeder():
    return Seeder
