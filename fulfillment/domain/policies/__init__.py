"""Pure domain policies (no I/O)."""
from .gift_claim import ClaimDecision, ClaimRejection, evaluate_gift_claim
from .delivery_schedule import DeliverySchedule, ScheduledDelivery
from .stock_forecast import (
    DailyDemand,
    ForecastLine,
    ProductForecast,
    aggregate_stock_forecast,
    is_urgent,
)

__all__ = [
    "ClaimDecision",
    "ClaimRejection",
    "DailyDemand",
    "DeliverySchedule",
    "ForecastLine",
    "ProductForecast",
    "ScheduledDelivery",
    "aggregate_stock_forecast",
    "evaluate_gift_claim",
    "is_urgent",
]
