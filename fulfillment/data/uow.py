"""Transaction scope shared by the fulfillment services."""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fulfillment.domain.errors import TransactionFailedError
from fulfillment.domain.events.base import DomainEvent
from fulfillment.domain.value_objects import ExecutionID
from fulfillment.domain.event_bus import EventBus

from .repositories import (
    SqlAlchemyDeliveryPlanRepository,
    SqlAlchemyOrderItemRepository,
    SqlAlchemyOrderRepository,
    SqlAlchemyProductRepository,
)


logger = logging.getLogger(__name__)


class UnitOfWork:
    """
    One database session plus the repositories bound to it.

    Every scope gets a fresh execution id that is stamped on collected
    events and log lines. Events reach the bus only after a successful
    commit.

    Usage:
        async with create_uow(session_factory) as uow:
            order = await uow.orders.get(order_id)
            ...
            await uow.commit()

    Leaving the block without ``commit()`` rolls everything back.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self._session_factory = session_factory
        self._event_bus = event_bus
        self._session: Optional[AsyncSession] = None
        self._execution_id: Optional[ExecutionID] = None
        self._pending_events: List[DomainEvent] = []

        self._orders: Optional[SqlAlchemyOrderRepository] = None
        self._order_items: Optional[SqlAlchemyOrderItemRepository] = None
        self._delivery_plans: Optional[SqlAlchemyDeliveryPlanRepository] = None
        self._products: Optional[SqlAlchemyProductRepository] = None

    async def __aenter__(self) -> "UnitOfWork":
        self._session = self._session_factory()
        self._execution_id = ExecutionID.generate()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        """Roll back anything not committed, then close the session."""
        try:
            await self._session.rollback()
        finally:
            await self._session.close()
            self._pending_events.clear()

        if isinstance(exc_val, SQLAlchemyError):
            logger.error(f"[{self._execution_id}] Transaction failed: {exc_val}")
            raise TransactionFailedError(
                "Transaction failed and was rolled back",
                details={"execution_id": str(self._execution_id)},
            ) from exc_val
        return False

    def _require_session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("UnitOfWork used outside its async with block")
        return self._session

    @property
    def execution_id(self) -> ExecutionID:
        if self._execution_id is None:
            raise RuntimeError("UnitOfWork used outside its async with block")
        return self._execution_id

    @property
    def orders(self) -> SqlAlchemyOrderRepository:
        session = self._require_session()
        if self._orders is None:
            self._orders = SqlAlchemyOrderRepository(session)
        return self._orders

    @property
    def order_items(self) -> SqlAlchemyOrderItemRepository:
        session = self._require_session()
        if self._order_items is None:
            self._order_items = SqlAlchemyOrderItemRepository(session)
        return self._order_items

    @property
    def delivery_plans(self) -> SqlAlchemyDeliveryPlanRepository:
        session = self._require_session()
        if self._delivery_plans is None:
            self._delivery_plans = SqlAlchemyDeliveryPlanRepository(session)
        return self._delivery_plans

    @property
    def products(self) -> SqlAlchemyProductRepository:
        session = self._require_session()
        if self._products is None:
            self._products = SqlAlchemyProductRepository(session)
        return self._products

    def collect(self, events: List[DomainEvent]) -> None:
        """Queue domain events for publication after commit."""
        for event in events:
            event.execution_id = str(self.execution_id)
            self._pending_events.append(event)

    async def commit(self) -> None:
        """Commit all pending changes, then publish collected events."""
        session = self._require_session()
        try:
            await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"❌ [{self._execution_id}] Commit failed: {e}")
            await session.rollback()
            raise

        logger.debug(f"✅ [{self._execution_id}] Transaction committed")

        events, self._pending_events = self._pending_events, []
        if self._event_bus is not None and events:
            await self._event_bus.publish_all(events)

    async def rollback(self) -> None:
        """Discard session changes and queued events."""
        await self._require_session().rollback()
        self._pending_events.clear()
        logger.warning(f"[{self._execution_id}] Transaction rolled back")


def create_uow(
    session_factory: async_sessionmaker, event_bus: Optional[EventBus] = None
) -> UnitOfWork:
    return UnitOfWork(session_factory, event_bus)
