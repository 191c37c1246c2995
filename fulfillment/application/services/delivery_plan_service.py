"""Application service for delivery plan administration."""

import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from fulfillment.application.dtos import (
    ConfirmPlansResult,
    DeliveryPlanDTO,
    PlanPageDTO,
    PlanStatsDTO,
    ShipPlansResult,
)
from fulfillment.data.uow import create_uow
from fulfillment.domain.enums import DeliveryPlanStatus
from fulfillment.domain.errors import InvalidStateError, NotFoundError
from fulfillment.domain.event_bus import EventBus
from fulfillment.domain.events import DeliveryPlansConfirmedEvent, DeliveryPlansShippedEvent
from fulfillment.domain.value_objects import DeliveryNumber
from fulfillment.settings import FulfillmentSettings, get_settings

from .support import plan_to_dto


logger = logging.getLogger(__name__)


class DeliveryPlanService:
    """
    Operations-side handling of delivery plans.

    Plans move 0 -> 1 when confirmed (receiving a delivery number) and
    1 -> 2 when handed to a courier. Both are batch operations applied in a
    single transaction.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        settings: Optional[FulfillmentSettings] = None,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings or get_settings()
        self._event_bus = event_bus

    async def get_plan(self, plan_id: int) -> DeliveryPlanDTO:
        """
        Raises:
            NotFoundError: If the plan does not exist
        """
        async with create_uow(self._session_factory) as uow:
            plan = await uow.delivery_plans.get(plan_id)
        if plan is None:
            raise NotFoundError(f"Delivery plan {plan_id} not found", details={"plan_id": plan_id})
        return plan_to_dto(plan)

    async def list_plans(
        self,
        statuses: Optional[Iterable[DeliveryPlanStatus]] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> PlanPageDTO:
        async with create_uow(self._session_factory) as uow:
            total, plans = await uow.delivery_plans.list(statuses=statuses, limit=limit, offset=offset)
        return PlanPageDTO(total=total, items=[plan_to_dto(p) for p in plans])

    async def confirm_plans(
        self, plan_ids: List[int], now: Optional[datetime] = None
    ) -> ConfirmPlansResult:
        """Confirm pending plans and give each a delivery number.

        Plans that are not pending or already numbered are skipped. Numbers
        continue the day's sequence: ``YYYYMMDD`` + 5 digits.

        Raises:
            InvalidStateError: If a selected plan changed while confirming
        """
        now = now or datetime.utcnow()
        uow = create_uow(self._session_factory, self._event_bus)
        async with uow:
            plans = await uow.delivery_plans.find_by_ids(
                plan_ids, DeliveryPlanStatus.PENDING_CONFIRMATION
            )
            plans = [p for p in plans if p.delivery_no is None]
            if not plans:
                logger.info(f"[{uow.execution_id}] No pending plans among {plan_ids}")
                return ConfirmPlansResult(confirmed_count=0, delivery_numbers=[])

            issued = await uow.delivery_plans.count_delivery_numbers(DeliveryNumber.day_prefix(now))
            numbers = [str(n) for n in DeliveryNumber.sequence(now, issued, len(plans))]
            numbers_by_plan = {plan.id: number for plan, number in zip(plans, numbers)}

            confirmed = await uow.delivery_plans.confirm(numbers_by_plan)
            if confirmed != len(numbers_by_plan):
                # Keep the day's numbering gap-free
                raise InvalidStateError(
                    "Delivery plans changed while confirming; retry",
                    details={"expected": len(numbers_by_plan), "confirmed": confirmed},
                )

            uow.collect([DeliveryPlansConfirmedEvent(
                plan_ids=list(numbers_by_plan), delivery_numbers=numbers,
            )])
            await uow.commit()

        logger.info(f"✅ Confirmed {confirmed} delivery plan(s): {numbers[0]}..{numbers[-1]}")
        return ConfirmPlansResult(confirmed_count=confirmed, delivery_numbers=numbers)

    async def ship_plans(
        self,
        plan_ids: List[int],
        express_company: str,
        express_number: str,
        remark: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ShipPlansResult:
        """Hand confirmed plans to a courier.

        Each owning item's ``delivered_count`` grows by its shipped plans, and
        owning orders still in PAID advance to SHIPPED.

        Raises:
            InvalidStateError: If none of the plans is confirmed
        """
        now = now or datetime.utcnow()
        uow = create_uow(self._session_factory, self._event_bus)
        async with uow:
            plans = await uow.delivery_plans.find_by_ids(plan_ids, DeliveryPlanStatus.CONFIRMED)
            if not plans:
                raise InvalidStateError(
                    "No confirmed delivery plans to ship", details={"plan_ids": list(plan_ids)}
                )

            shippable = [p.id for p in plans]
            shipped = await uow.delivery_plans.ship(
                shippable, express_company, express_number, shipped_at=now, remark=remark
            )
            if shipped != len(shippable):
                raise InvalidStateError(
                    "Delivery plans changed while shipping; retry",
                    details={"expected": len(shippable), "shipped": shipped},
                )

            await uow.order_items.increment_delivered(
                dict(Counter(p.order_item_id for p in plans))
            )
            order_ids = await uow.delivery_plans.order_ids_for_plans(shippable)
            advanced = await uow.orders.advance_paid_to_shipped(order_ids)

            uow.collect([DeliveryPlansShippedEvent(
                plan_ids=shippable,
                express_company=express_company,
                express_number=express_number,
            )])
            await uow.commit()

        logger.info(
            f"✅ Shipped {shipped} plan(s) via {express_company} {express_number}; "
            f"{advanced} order(s) advanced to SHIPPED"
        )
        return ShipPlansResult(shipped_count=shipped, orders_advanced=advanced)

    async def stats(self, now: Optional[datetime] = None) -> PlanStatsDTO:
        """Plan counts per status and the open plans starting soon."""
        now = now or datetime.utcnow()
        horizon = self._settings.stats_horizon_days
        async with create_uow(self._session_factory) as uow:
            counts = await uow.delivery_plans.count_by_status()
            upcoming = await uow.delivery_plans.count_upcoming(now, now + timedelta(days=horizon))

        return PlanStatsDTO(
            by_status={status.name.lower(): total for status, total in counts.items()},
            upcoming=upcoming,
            horizon_days=horizon,
        )
