"""SQLAlchemy implementation of DeliveryPlanRepository."""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fulfillment.domain.entities import DeliveryPlan
from fulfillment.domain.enums import DeliveryPlanStatus
from fulfillment.domain.policies.stock_forecast import ForecastLine
from fulfillment.domain.repositories import DeliveryPlanRepository
from fulfillment.domain.transitions import is_plan_transition_allowed, plan_statuses_leading_to

from ..mappers import DeliveryPlanMapper
from ..models.order_model import DeliveryPlanModel, OrderItemModel, ProductModel


logger = logging.getLogger(__name__)


def _sources(target: DeliveryPlanStatus) -> List[int]:
    return [int(status) for status in plan_statuses_leading_to(target)]


# Not yet shipped: still counted as demand and still cancellable
_OPEN_STATUSES = _sources(DeliveryPlanStatus.CANCELLED)


class SqlAlchemyDeliveryPlanRepository(DeliveryPlanRepository):
    """
    SQLAlchemy implementation of DeliveryPlanRepository.

    Status changes are set-based ``UPDATE`` statements filtered on the
    current status, so a plan that moved concurrently is simply not matched.
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self._session = session

    async def add_all(self, plans: List[DeliveryPlan]) -> List[DeliveryPlan]:
        models = [DeliveryPlanMapper.to_persistence(plan) for plan in plans]
        self._session.add_all(models)
        await self._session.flush()
        for plan, model in zip(plans, models):
            plan.id = model.id
        return plans

    async def get(self, plan_id: int) -> Optional[DeliveryPlan]:
        result = await self._session.execute(
            select(DeliveryPlanModel)
            .where(DeliveryPlanModel.id == plan_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return DeliveryPlanMapper.to_domain(model) if model else None

    async def list(
        self,
        statuses: Optional[Iterable[DeliveryPlanStatus]] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[int, List[DeliveryPlan]]:
        conditions = []
        if statuses:
            conditions.append(DeliveryPlanModel.status.in_([int(s) for s in statuses]))

        total = await self._session.scalar(
            select(func.count(DeliveryPlanModel.id)).where(*conditions)
        )
        result = await self._session.execute(
            select(DeliveryPlanModel)
            .where(*conditions)
            .order_by(
                DeliveryPlanModel.delivery_start_date.asc(),
                DeliveryPlanModel.delivery_sequence.asc(),
                DeliveryPlanModel.id.asc(),
            )
            .limit(limit)
            .offset(offset)
            .execution_options(populate_existing=True)
        )
        plans = [DeliveryPlanMapper.to_domain(m) for m in result.scalars().all()]
        return total or 0, plans

    async def list_for_items(self, order_item_ids: Iterable[int]) -> List[DeliveryPlan]:
        ids = list(order_item_ids)
        if not ids:
            return []
        result = await self._session.execute(
            select(DeliveryPlanModel)
            .where(DeliveryPlanModel.order_item_id.in_(ids))
            .order_by(DeliveryPlanModel.order_item_id, DeliveryPlanModel.delivery_sequence)
            .execution_options(populate_existing=True)
        )
        return [DeliveryPlanMapper.to_domain(m) for m in result.scalars().all()]

    async def cancel_for_items(self, order_item_ids: Iterable[int]) -> int:
        ids = list(order_item_ids)
        if not ids:
            return 0
        result = await self._session.execute(
            update(DeliveryPlanModel)
            .where(
                DeliveryPlanModel.order_item_id.in_(ids),
                DeliveryPlanModel.status.in_(_OPEN_STATUSES),
            )
            .values(status=int(DeliveryPlanStatus.CANCELLED))
            .execution_options(synchronize_session=False)
        )
        logger.info(f"Cancelled {result.rowcount} delivery plan(s) for items {ids}")
        return result.rowcount

    async def advance_for_items(
        self,
        order_item_ids: Iterable[int],
        from_status: DeliveryPlanStatus,
        to_status: DeliveryPlanStatus,
    ) -> int:
        if not is_plan_transition_allowed(from_status, to_status):
            raise ValueError(f"Plans cannot move from {from_status.name} to {to_status.name}")
        ids = list(order_item_ids)
        if not ids:
            return 0
        result = await self._session.execute(
            update(DeliveryPlanModel)
            .where(
                DeliveryPlanModel.order_item_id.in_(ids),
                DeliveryPlanModel.status == int(from_status),
            )
            .values(status=int(to_status))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def find_by_ids(
        self, plan_ids: Iterable[int], status: DeliveryPlanStatus
    ) -> List[DeliveryPlan]:
        ids = list(plan_ids)
        if not ids:
            return []
        result = await self._session.execute(
            select(DeliveryPlanModel)
            .where(DeliveryPlanModel.id.in_(ids), DeliveryPlanModel.status == int(status))
            .order_by(DeliveryPlanModel.id)
            .execution_options(populate_existing=True)
        )
        return [DeliveryPlanMapper.to_domain(m) for m in result.scalars().all()]

    async def count_delivery_numbers(self, prefix: str) -> int:
        total = await self._session.scalar(
            select(func.count(DeliveryPlanModel.id)).where(
                DeliveryPlanModel.delivery_no.like(f"{prefix}%")
            )
        )
        return total or 0

    async def confirm(self, numbers_by_plan: Dict[int, str]) -> int:
        confirmed = 0
        for plan_id, delivery_no in numbers_by_plan.items():
            result = await self._session.execute(
                update(DeliveryPlanModel)
                .where(
                    DeliveryPlanModel.id == plan_id,
                    DeliveryPlanModel.status.in_(_sources(DeliveryPlanStatus.CONFIRMED)),
                    DeliveryPlanModel.delivery_no.is_(None),
                )
                .values(delivery_no=delivery_no, status=int(DeliveryPlanStatus.CONFIRMED))
                .execution_options(synchronize_session=False)
            )
            confirmed += result.rowcount
        return confirmed

    async def ship(
        self,
        plan_ids: Iterable[int],
        express_company: str,
        express_number: str,
        shipped_at: datetime,
        remark: Optional[str] = None,
    ) -> int:
        ids = list(plan_ids)
        if not ids:
            return 0
        result = await self._session.execute(
            update(DeliveryPlanModel)
            .where(
                DeliveryPlanModel.id.in_(ids),
                DeliveryPlanModel.status.in_(_sources(DeliveryPlanStatus.SHIPPED)),
            )
            .values(
                status=int(DeliveryPlanStatus.SHIPPED),
                express_company=express_company,
                express_number=express_number,
                shipped_at=shipped_at,
                remark=remark,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def order_ids_for_plans(self, plan_ids: Iterable[int]) -> List[int]:
        ids = list(plan_ids)
        if not ids:
            return []
        result = await self._session.execute(
            select(OrderItemModel.order_id)
            .join(DeliveryPlanModel, DeliveryPlanModel.order_item_id == OrderItemModel.id)
            .where(DeliveryPlanModel.id.in_(ids))
            .distinct()
        )
        return sorted(result.scalars().all())

    async def forecast_lines(self, start: datetime, end: datetime) -> List[ForecastLine]:
        result = await self._session.execute(
            select(
                ProductModel.id,
                ProductModel.product_name,
                OrderItemModel.quantity,
                DeliveryPlanModel.delivery_start_date,
                DeliveryPlanModel.delivery_end_date,
            )
            .select_from(DeliveryPlanModel)
            .join(OrderItemModel, DeliveryPlanModel.order_item_id == OrderItemModel.id)
            .join(ProductModel, OrderItemModel.product_id == ProductModel.id)
            .where(
                DeliveryPlanModel.status.in_(_OPEN_STATUSES),
                DeliveryPlanModel.delivery_start_date >= start,
                DeliveryPlanModel.delivery_start_date <= end,
            )
        )
        return [
            ForecastLine(
                product_id=row[0],
                product_name=row[1],
                quantity=row[2],
                delivery_start_date=row[3],
                delivery_end_date=row[4],
            )
            for row in result.all()
        ]

    async def count_by_status(self) -> Dict[DeliveryPlanStatus, int]:
        result = await self._session.execute(
            select(DeliveryPlanModel.status, func.count(DeliveryPlanModel.id))
            .group_by(DeliveryPlanModel.status)
        )
        counts = {status: 0 for status in DeliveryPlanStatus}
        for status, total in result.all():
            counts[DeliveryPlanStatus(status)] = total
        return counts

    async def count_upcoming(self, start: datetime, end: datetime) -> int:
        total = await self._session.scalar(
            select(func.count(DeliveryPlanModel.id)).where(
                DeliveryPlanModel.status.in_(_OPEN_STATUSES),
                DeliveryPlanModel.delivery_start_date >= start,
                DeliveryPlanModel.delivery_start_date <= end,
            )
        )
        return total or 0
