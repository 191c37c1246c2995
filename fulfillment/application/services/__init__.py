"""Application services."""

from .checkout_service import CheckoutService
from .delivery_plan_service import DeliveryPlanService
from .gift_claim_service import GiftClaimService
from .order_lifecycle_service import OrderLifecycleService
from .stock_forecast_service import StockForecastService

__all__ = [
    "CheckoutService",
    "DeliveryPlanService",
    "GiftClaimService",
    "OrderLifecycleService",
    "StockForecastService",
]
