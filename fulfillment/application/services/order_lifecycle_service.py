"""Application service for order status transitions and their cascades."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from fulfillment.application.dtos import ConfirmReceiptResult, OrderDTO
from fulfillment.data.uow import UnitOfWork, create_uow
from fulfillment.domain.entities import Order, ReceiverSnapshot
from fulfillment.domain.enums import DeliveryPlanStatus, OrderStatus
from fulfillment.domain.errors import InvalidStateError
from fulfillment.domain.event_bus import EventBus
from fulfillment.domain.events import OrderCancelledEvent
from fulfillment.infrastructure.logging import get_audit_logger
from fulfillment.settings import FulfillmentSettings, get_settings

from .support import build_schedule, load_order, materialize_plans, order_to_dto


logger = logging.getLogger(__name__)
audit_logger = get_audit_logger()


class OrderLifecycleService:
    """
    Application service for orchestrating the order state machine.

    Responsibilities:
    - Validate transitions against the transition table
    - Apply each order update and its delivery plan cascade in one UoW
    - Route administrative overrides to the audit log
    - Transform domain entities into DTOs

    Every status write is a compare-and-set on the status the order was
    read in, so a concurrent transition makes the later one fail with
    InvalidStateError instead of overwriting it.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        settings: Optional[FulfillmentSettings] = None,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        """Initialize order lifecycle service.

        Args:
            session_factory: SQLAlchemy async session factory
            settings: Fulfillment settings (defaults to environment)
            event_bus: Receives domain events after commit
        """
        self._session_factory = session_factory
        self._settings = settings or get_settings()
        self._event_bus = event_bus
        self._schedule = build_schedule(self._settings)

    # =========================================================================
    # QUERIES
    # =========================================================================

    async def get_order(self, order_id: int) -> OrderDTO:
        """Get order by ID with items and delivery plans.

        Raises:
            NotFoundError: If the order does not exist
        """
        async with create_uow(self._session_factory) as uow:
            order = await load_order(uow, order_id, with_plans=True)
            return order_to_dto(order)

    async def list_orders(
        self,
        user_id: Optional[int] = None,
        status: Optional[OrderStatus] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[OrderDTO]:
        """List orders, newest first."""
        async with create_uow(self._session_factory) as uow:
            orders = await uow.orders.list(user_id=user_id, status=status, limit=limit, offset=offset)
            return [order_to_dto(order) for order in orders]

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    async def mark_paid(
        self,
        order_id: int,
        address_snapshot: Optional[Dict[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> OrderDTO:
        """Payment gateway confirmation (0 -> 1).

        Self-purchases are bound to their owner and, when a shipping address
        is known, get their delivery plans in the same transaction. Gift
        orders wait for recipients to claim.

        Repeated notifications for an order already past pending payment
        return the order unchanged.
        """
        now = now or datetime.utcnow()
        uow = create_uow(self._session_factory, self._event_bus)
        async with uow:
            order = await load_order(uow, order_id)
            if order.status != OrderStatus.PENDING_PAYMENT:
                logger.info(
                    f"[{uow.execution_id}] Duplicate payment notification for "
                    f"{order.order_no} (status={order.status.name})"
                )
                return order_to_dto(order, str(uow.execution_id))

            plans = await self._apply_paid(uow, order, address_snapshot, now)
            self._collect(uow, order)
            await uow.commit()

            logger.info(f"✅ [{uow.execution_id}] Order {order.order_no} paid ({plans} plan(s) created)")
            return await self._reload(uow, order_id)

    async def mark_shipped(self, order_id: int) -> OrderDTO:
        """Physical shipment started (1 -> 2)."""
        uow = create_uow(self._session_factory, self._event_bus)
        async with uow:
            order = await load_order(uow, order_id)
            previous = order.status
            order.mark_shipped()
            await self._persist_transition(uow, order, previous)
            self._collect(uow, order)
            await uow.commit()

            logger.info(f"✅ [{uow.execution_id}] Order {order.order_no} shipped")
            return await self._reload(uow, order_id)

    async def confirm_receipt(self, order_id: int, user_id: int) -> ConfirmReceiptResult:
        """Buyer confirms receipt of a shipped order (2 -> 3).

        All of the order's shipped plans complete with it.

        Raises:
            NotFoundError: If the order does not exist
            PermissionDeniedError: If ``user_id`` is not the purchaser
            InvalidStateError: If the order is not shipped
        """
        uow = create_uow(self._session_factory, self._event_bus)
        async with uow:
            order = await load_order(uow, order_id)
            previous = order.status
            order.confirm_receipt(user_id)
            completed = await self._persist_transition(uow, order, previous)
            self._collect(uow, order)
            await uow.commit()

            logger.info(
                f"✅ [{uow.execution_id}] Order {order.order_no} received by user {user_id} "
                f"({completed} plan(s) completed)"
            )
            return ConfirmReceiptResult(
                order_id=order.id, order_no=order.order_no, completed_plans=completed
            )

    async def cancel_order(self, order_id: int) -> OrderDTO:
        """Cancel an order and every plan of it that has not shipped yet.

        Raises:
            NotFoundError: If the order does not exist
            InvalidStateError: If the order is already completed or cancelled
        """
        uow = create_uow(self._session_factory, self._event_bus)
        async with uow:
            order = await load_order(uow, order_id)
            previous = order.cancel()
            cancelled = await self._persist_transition(uow, order, previous)
            self._collect(uow, order, cascaded=cancelled)
            await uow.commit()

            logger.info(
                f"✅ [{uow.execution_id}] Order {order.order_no} cancelled from {previous.name} "
                f"({cancelled} plan(s) cancelled)"
            )
            return await self._reload(uow, order_id)

    async def update_order_status(
        self,
        order_id: int,
        new_status: OrderStatus,
        override: bool = False,
        actor: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> OrderDTO:
        """Administrative status change.

        Without ``override`` the transition table applies and the change goes
        through the same path as the regular operation. With ``override`` any
        status can be written; the change is logged to the audit logger.
        Completion and cancellation cascade to delivery plans either way.

        Raises:
            NotFoundError: If the order does not exist
            InvalidStateError: If the transition is not allowed
        """
        try:
            new_status = OrderStatus(new_status)
        except ValueError:
            raise InvalidStateError(f"Unknown order status: {new_status}")

        uow = create_uow(self._session_factory, self._event_bus)
        async with uow:
            order = await load_order(uow, order_id)
            previous = order.status

            if override:
                cascaded = await self._apply_override(uow, order, new_status, actor, reason)
            else:
                order.ensure_transition(new_status)
                cascaded = await self._apply_transition(uow, order, new_status)

            self._collect(uow, order, cascaded=cascaded)
            await uow.commit()

            logger.info(
                f"✅ [{uow.execution_id}] Order {order.order_no} status "
                f"{previous.name} -> {new_status.name} (override={override})"
            )
            return await self._reload(uow, order_id)

    # =========================================================================
    # INTERNALS
    # =========================================================================

    async def _apply_transition(self, uow: UnitOfWork, order: Order, new_status: OrderStatus) -> int:
        previous = order.status
        if new_status == OrderStatus.PAID:
            return await self._apply_paid(uow, order, None, datetime.utcnow())
        if new_status == OrderStatus.SHIPPED:
            order.mark_shipped()
        elif new_status == OrderStatus.COMPLETED:
            order.complete()
        elif new_status == OrderStatus.CANCELLED:
            order.cancel()
        return await self._persist_transition(uow, order, previous)

    async def _apply_paid(
        self,
        uow: UnitOfWork,
        order: Order,
        address_snapshot: Optional[Dict[str, Any]],
        now: datetime,
    ) -> int:
        snapshot = address_snapshot if address_snapshot is not None else order.address_snapshot
        receiver = None
        if snapshot and not order.is_gift:
            receiver = ReceiverSnapshot.from_address(snapshot)

        previous = order.status
        order.mark_paid(now, address_snapshot)
        await self._persist_transition(
            uow, order, previous, paid_at=now, address_snapshot=order.address_snapshot
        )
        if order.is_gift:
            return 0

        await uow.order_items.assign_owner_as_receiver(order.id, order.user_id)
        if receiver is None:
            return 0
        plans = await materialize_plans(
            uow, self._schedule, order.items, receiver, order.user_id, base_date=now
        )
        return len(plans)

    async def _apply_override(
        self,
        uow: UnitOfWork,
        order: Order,
        new_status: OrderStatus,
        actor: Optional[str],
        reason: Optional[str],
    ) -> int:
        previous = order.override_status(new_status, actor=actor, reason=reason)
        await uow.orders.set_status(order.id, new_status)
        cascaded = await self._cascade(uow, order)
        audit_logger.warning(
            f"[{uow.execution_id}] STATUS OVERRIDE order={order.order_no} "
            f"{previous.name} -> {new_status.name} actor={actor or 'unknown'} "
            f"reason={reason or '-'} plans_cascaded={cascaded}"
        )
        return cascaded

    async def _persist_transition(
        self, uow: UnitOfWork, order: Order, previous: OrderStatus, **values: Any
    ) -> int:
        """Write ``order.status`` if the row is still in ``previous``, then cascade."""
        updated = await uow.orders.compare_and_set_status(order.id, [previous], order.status, **values)
        if not updated:
            raise InvalidStateError(
                f"Order {order.order_no} changed concurrently; expected {previous.name}",
                details={"expected": int(previous), "requested": int(order.status)},
            )
        return await self._cascade(uow, order)

    async def _cascade(self, uow: UnitOfWork, order: Order) -> int:
        """Bring the order's delivery plans in line with its new status."""
        item_ids = order.order_item_ids()
        if order.status == OrderStatus.CANCELLED:
            return await uow.delivery_plans.cancel_for_items(item_ids)
        if order.status == OrderStatus.COMPLETED:
            return await uow.delivery_plans.advance_for_items(
                item_ids, DeliveryPlanStatus.SHIPPED, DeliveryPlanStatus.COMPLETED
            )
        return 0

    def _collect(self, uow: UnitOfWork, order: Order, cascaded: int = 0) -> None:
        events = order.pull_domain_events()
        for event in events:
            if isinstance(event, OrderCancelledEvent):
                event.cancelled_plans = cascaded
        uow.collect(events)

    async def _reload(self, uow: UnitOfWork, order_id: int) -> OrderDTO:
        order = await load_order(uow, order_id, with_plans=True)
        return order_to_dto(order, str(uow.execution_id))
