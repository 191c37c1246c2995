"""Application DTOs for delivery plan administration and stock forecasts."""

import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .order_dto import DeliveryPlanDTO


class PlanPageDTO(BaseModel):
    """Page of delivery plans."""

    total: int = Field(..., ge=0)
    items: List[DeliveryPlanDTO] = Field(default_factory=list)

    model_config = {"frozen": True}


class ConfirmPlansRequest(BaseModel):
    plan_ids: List[int] = Field(..., min_length=1)


class ConfirmPlansResult(BaseModel):
    confirmed_count: int
    delivery_numbers: List[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class ShipPlansRequest(BaseModel):
    plan_ids: List[int] = Field(..., min_length=1)
    express_company: str = Field(..., min_length=1, max_length=50)
    express_number: str = Field(..., min_length=1, max_length=50)
    remark: Optional[str] = Field(None, max_length=255)


class ShipPlansResult(BaseModel):
    shipped_count: int
    orders_advanced: int = 0

    model_config = {"frozen": True}


class PlanStatsDTO(BaseModel):
    """Counts per plan status plus the upcoming workload."""

    by_status: Dict[str, int]
    upcoming: int = Field(..., ge=0, description="Open plans starting within the horizon")
    horizon_days: int

    model_config = {"frozen": True}


class DailyDemandDTO(BaseModel):
    date: datetime.date
    quantity: int
    urgent_count: int

    model_config = {"frozen": True}


class ProductForecastDTO(BaseModel):
    """Projected demand of one product."""

    product_id: int
    product_name: Optional[str] = None
    total_quantity: int
    daily_breakdown: List[DailyDemandDTO] = Field(default_factory=list)

    model_config = {"frozen": True}
