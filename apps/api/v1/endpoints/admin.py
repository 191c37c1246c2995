"""Administrative endpoints: order status overrides and delivery plans."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Query

from fulfillment.application.dtos import (
    ConfirmPlansRequest,
    ConfirmPlansResult,
    DeliveryPlanDTO,
    OrderDTO,
    PlanPageDTO,
    PlanStatsDTO,
    ProductForecastDTO,
    ShipPlansRequest,
    ShipPlansResult,
    UpdateOrderStatusRequest,
)
from fulfillment.application.services import (
    DeliveryPlanService,
    OrderLifecycleService,
    StockForecastService,
)
from fulfillment.domain.enums import DeliveryPlanStatus, OrderStatus

from apps.api.deps import (
    get_delivery_plan_service,
    get_lifecycle_service,
    get_stock_forecast_service,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin", tags=["admin"])


@router.put("/orders/{order_id}/status", response_model=OrderDTO)
async def update_order_status(
    order_id: int,
    request: UpdateOrderStatusRequest,
    x_admin_id: Optional[str] = Header(default=None, alias="X-Admin-ID"),
    service: OrderLifecycleService = Depends(get_lifecycle_service),
) -> OrderDTO:
    """Change an order's status.

    Illegal transitions are rejected unless ``override`` is set; overrides
    are written to the audit log with the admin id and reason.
    """
    return await service.update_order_status(
        order_id,
        OrderStatus(request.status),
        override=request.override,
        actor=x_admin_id,
        reason=request.reason,
    )


# Fixed paths are declared before /{plan_id}


@router.get("/delivery-plans/stats", response_model=PlanStatsDTO)
async def plan_stats(
    service: DeliveryPlanService = Depends(get_delivery_plan_service),
) -> PlanStatsDTO:
    """Counts per plan status and plans starting within the stats horizon."""
    return await service.stats()


@router.get("/delivery-plans/stock-forecast", response_model=List[ProductForecastDTO])
async def stock_forecast(
    days: Optional[int] = Query(default=None, ge=1, description="Window in days (capped)"),
    service: StockForecastService = Depends(get_stock_forecast_service),
) -> List[ProductForecastDTO]:
    """Per-product, per-day demand of pending and confirmed plans."""
    return await service.forecast(days)


@router.get("/delivery-plans", response_model=PlanPageDTO)
async def list_plans(
    status: Optional[List[int]] = Query(default=None, description="Filter by plan status"),
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    service: DeliveryPlanService = Depends(get_delivery_plan_service),
) -> PlanPageDTO:
    """List plans by start date."""
    statuses = [DeliveryPlanStatus(s) for s in status] if status else None
    return await service.list_plans(statuses=statuses, limit=limit, offset=offset)


@router.get("/delivery-plans/{plan_id}", response_model=DeliveryPlanDTO)
async def get_plan(
    plan_id: int,
    service: DeliveryPlanService = Depends(get_delivery_plan_service),
) -> DeliveryPlanDTO:
    return await service.get_plan(plan_id)


@router.post("/delivery-plans/confirm", response_model=ConfirmPlansResult)
async def confirm_plans(
    request: ConfirmPlansRequest,
    service: DeliveryPlanService = Depends(get_delivery_plan_service),
) -> ConfirmPlansResult:
    """Confirm pending plans and assign delivery numbers."""
    logger.info(f"API: confirm delivery plans {request.plan_ids}")
    return await service.confirm_plans(request.plan_ids)


@router.post("/delivery-plans/ship", response_model=ShipPlansResult)
async def ship_plans(
    request: ShipPlansRequest,
    service: DeliveryPlanService = Depends(get_delivery_plan_service),
) -> ShipPlansResult:
    """Mark confirmed plans as shipped with courier details."""
    logger.info(f"API: ship delivery plans {request.plan_ids} via {request.express_company}")
    return await service.ship_plans(
        request.plan_ids,
        request.express_company,
        request.express_number,
        remark=request.remark,
    )
