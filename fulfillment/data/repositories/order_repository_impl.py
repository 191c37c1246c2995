"""SQLAlchemy implementation of the order and order item repositories."""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import and_, exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased, selectinload

from fulfillment.domain.entities import Order, OrderItem
from fulfillment.domain.enums import GiftStatus, OrderStatus
from fulfillment.domain.repositories import OrderItemRepository, OrderRepository

from ..mappers import OrderItemMapper, OrderMapper
from ..models.order_model import OrderItemModel, OrderModel


logger = logging.getLogger(__name__)


class SqlAlchemyOrderRepository(OrderRepository):
    """Concrete implementation of OrderRepository using SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with SQLAlchemy session.

        Args:
            session: SQLAlchemy async session
        """
        self._session = session

    async def add(self, order: Order) -> Order:
        order_model = OrderMapper.to_persistence(order)
        self._session.add(order_model)
        await self._session.flush()  # Propagate to DB without committing

        order.id = order_model.id
        order.created_at = order_model.created_at
        for item, item_model in zip(order.items, order_model.items):
            item.id = item_model.id
            item.order_id = order_model.id

        logger.info(f"✅ Created order {order.order_no} (id={order.id}, items={len(order.items)})")
        return order

    async def get(self, order_id: int, with_plans: bool = False) -> Optional[Order]:
        items_loader = selectinload(OrderModel.items)
        if with_plans:
            items_loader = items_loader.selectinload(OrderItemModel.delivery_plans)

        result = await self._session.execute(
            select(OrderModel)
            .options(items_loader)
            .where(OrderModel.id == order_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()

        if not model:
            logger.info(f"Order not found: {order_id}")
            return None

        return OrderMapper.to_domain(model, include_plans=with_plans)

    async def list(
        self,
        user_id: Optional[int] = None,
        status: Optional[OrderStatus] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Order]:
        query = select(OrderModel).options(selectinload(OrderModel.items))
        if user_id is not None:
            query = query.where(OrderModel.user_id == user_id)
        if status is not None:
            query = query.where(OrderModel.status == int(status))

        result = await self._session.execute(
            query.order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return [OrderMapper.to_domain(model) for model in result.scalars().all()]

    async def compare_and_set_status(
        self,
        order_id: int,
        expected: Iterable[OrderStatus],
        new_status: OrderStatus,
        **values: Any,
    ) -> bool:
        expected_codes = [int(s) for s in expected]
        result = await self._session.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.status.in_(expected_codes))
            .values(status=int(new_status), updated_at=datetime.utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        updated = result.rowcount == 1
        if not updated:
            logger.warning(
                f"Order {order_id} status CAS {expected_codes} -> {int(new_status)} matched no row"
            )
        return updated

    async def set_status(self, order_id: int, new_status: OrderStatus) -> bool:
        result = await self._session.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id)
            .values(status=int(new_status), updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def advance_paid_to_shipped(self, order_ids: Iterable[int]) -> int:
        ids = list(order_ids)
        if not ids:
            return 0
        result = await self._session.execute(
            update(OrderModel)
            .where(OrderModel.id.in_(ids), OrderModel.status == int(OrderStatus.PAID))
            .values(status=int(OrderStatus.SHIPPED), updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount


class SqlAlchemyOrderItemRepository(OrderItemRepository):
    """Concrete implementation of OrderItemRepository using SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, order_item_id: int) -> Optional[OrderItem]:
        result = await self._session.execute(
            select(OrderItemModel)
            .where(OrderItemModel.id == order_item_id)
            .execution_options(populate_existing=True)
        )
        model = result.unique().scalar_one_or_none()
        if not model:
            return None
        return OrderItemMapper.to_domain(model)

    async def claim(
        self,
        order_id: int,
        order_item_ids: List[int],
        receiver_id: int,
        claimed_at: datetime,
        single_recipient: bool = False,
    ) -> int:
        ids = list(order_item_ids)
        if not ids:
            return 0

        paid_order = select(OrderModel.id).where(
            OrderModel.id == order_id, OrderModel.status == int(OrderStatus.PAID)
        )
        # Row lock on the order so a concurrent cancel waits for this claim (no-op on SQLite)
        locked = await self._session.scalar(paid_order.with_for_update())
        if locked is None:
            return 0

        held = aliased(OrderItemModel)
        if single_recipient:
            held_condition = and_(held.receiver_id.is_not(None), held.receiver_id != receiver_id)
        else:
            held_condition = held.receiver_id == receiver_id

        result = await self._session.execute(
            update(OrderItemModel)
            .where(
                OrderItemModel.id.in_(ids),
                OrderItemModel.order_id == order_id,
                OrderItemModel.receiver_id.is_(None),
                OrderItemModel.order_id.in_(paid_order),
                ~exists().where(held.order_id == order_id, held_condition),
            )
            .values(
                receiver_id=receiver_id,
                gift_status=int(GiftStatus.CLAIMED),
                received_at=claimed_at,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def expire_pending(self, order_id: int) -> int:
        result = await self._session.execute(
            update(OrderItemModel)
            .where(
                OrderItemModel.order_id == order_id,
                OrderItemModel.receiver_id.is_(None),
                OrderItemModel.gift_status == int(GiftStatus.PENDING),
            )
            .values(gift_status=int(GiftStatus.EXPIRED))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def assign_owner_as_receiver(self, order_id: int, owner_id: int) -> int:
        result = await self._session.execute(
            update(OrderItemModel)
            .where(OrderItemModel.order_id == order_id, OrderItemModel.receiver_id.is_(None))
            .values(receiver_id=owner_id, gift_status=int(GiftStatus.CLAIMED))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def update_gift_details(
        self,
        order_id: int,
        fields: Dict[str, Any],
        order_item_id: Optional[int] = None,
    ) -> int:
        query = update(OrderItemModel).where(OrderItemModel.order_id == order_id)
        if order_item_id is not None:
            query = query.where(OrderItemModel.id == order_item_id)
        result = await self._session.execute(
            query.values(**fields).execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def increment_delivered(self, counts: Dict[int, int]) -> None:
        for order_item_id, increment in counts.items():
            await self._session.execute(
                update(OrderItemModel)
                .where(OrderItemModel.id == order_item_id)
                .values(delivered_count=OrderItemModel.delivered_count + increment)
                .execution_options(synchronize_session=False)
            )
