"""Application DTOs."""

from .delivery_plan_dto import (
    ConfirmPlansRequest,
    ConfirmPlansResult,
    DailyDemandDTO,
    PlanPageDTO,
    PlanStatsDTO,
    ProductForecastDTO,
    ShipPlansRequest,
    ShipPlansResult,
)
from .gift_dto import ClaimGiftRequest, GiftClaimEligibility, UpdateGiftDetailsRequest
from .order_dto import (
    ConfirmReceiptResult,
    DeliveryPlanDTO,
    MarkPaidRequest,
    OrderDTO,
    OrderItemDTO,
    PlaceOrderItem,
    PlaceOrderRequest,
    UpdateOrderStatusRequest,
)

__all__ = [
    "ClaimGiftRequest",
    "ConfirmPlansRequest",
    "ConfirmPlansResult",
    "ConfirmReceiptResult",
    "DailyDemandDTO",
    "DeliveryPlanDTO",
    "GiftClaimEligibility",
    "MarkPaidRequest",
    "OrderDTO",
    "OrderItemDTO",
    "PlaceOrderItem",
    "PlaceOrderRequest",
    "PlanPageDTO",
    "PlanStatsDTO",
    "ProductForecastDTO",
    "ShipPlansRequest",
    "ShipPlansResult",
    "UpdateGiftDetailsRequest",
    "UpdateOrderStatusRequest",
]
