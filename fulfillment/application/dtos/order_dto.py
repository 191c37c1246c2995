"""Application DTOs for Order operations."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class DeliveryPlanDTO(BaseModel):
    """DTO for a scheduled delivery."""

    id: int = Field(..., description="Delivery plan ID")
    order_item_id: int = Field(..., description="Owning order item")
    delivery_no: Optional[str] = Field(None, description="Assigned on confirmation")
    delivery_start_date: datetime
    delivery_end_date: datetime = Field(..., description="Due-by date")
    delivery_sequence: int = Field(..., ge=1, description="Ordinal within the series")
    status: int = Field(..., ge=0, le=4, description="0 pending .. 4 cancelled")
    receiver_id: Optional[int] = None
    receiver_name: Optional[str] = None
    receiver_phone: Optional[str] = None
    receiver_address: Optional[str] = None
    subscription_product_id: Optional[int] = None
    express_company: Optional[str] = None
    express_number: Optional[str] = None
    shipped_at: Optional[datetime] = None
    remark: Optional[str] = None

    model_config = {"frozen": True}


class OrderItemDTO(BaseModel):
    """DTO for order item."""

    id: int = Field(..., description="Order item ID")
    order_id: int = Field(..., description="Owning order ID")
    product_id: int
    product_name: Optional[str] = None
    quantity: int = Field(..., gt=0, description="Quantity ordered")
    price: Decimal = Field(..., ge=0, description="Unit price snapshot")
    receiver_id: Optional[int] = Field(None, description="Bound recipient, set once")
    gift_status: int = Field(default=0, description="0 pending, 1 claimed, 2 expired")
    gift_message: Optional[str] = None
    gift_receiver_name: Optional[str] = None
    gift_relationship: Optional[str] = None
    received_at: Optional[datetime] = None
    delivery_type: str = "once"
    total_deliveries: int = 1
    delivery_interval: int = 0
    delivered_count: int = 0
    delivery_plans: List[DeliveryPlanDTO] = Field(default_factory=list)

    model_config = {"frozen": True}


class OrderDTO(BaseModel):
    """Response DTO for order details."""

    id: int = Field(..., description="Order ID")
    order_no: str = Field(..., description="Human-readable order number")
    user_id: int = Field(..., description="Purchaser")
    amount: Decimal = Field(..., ge=0)
    currency: str = "CNY"
    status: int = Field(..., ge=0, le=4)
    status_name: str
    is_gift: bool = False
    gift_type: Optional[int] = None
    gift_card: Optional[str] = None
    address_snapshot: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    items: List[OrderItemDTO] = Field(default_factory=list)
    execution_id: Optional[str] = Field(None, description="Execution ID for tracing")

    model_config = {"frozen": True}


class PlaceOrderItem(BaseModel):
    """Line requested at checkout."""

    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0)
    price: Decimal = Field(..., ge=0, description="Unit price snapshot from pricing")

    model_config = {"frozen": True}


class PlaceOrderRequest(BaseModel):
    """Request DTO for checkout."""

    items: List[PlaceOrderItem] = Field(..., min_length=1)
    gift_card: Optional[str] = Field(None, description="Gift card text; marks a gift order")
    gift_type: Optional[int] = Field(None, ge=1, le=2, description="1 single, 2 multi recipient")

    model_config = {"frozen": True}


class MarkPaidRequest(BaseModel):
    """Payment-gateway confirmation payload."""

    address: Optional[Dict[str, Any]] = Field(None, description="Shipping address snapshot")


class UpdateOrderStatusRequest(BaseModel):
    """Administrative status change."""

    status: int = Field(..., ge=0, le=4)
    override: bool = Field(False, description="Bypass the transition table (audited)")
    reason: Optional[str] = Field(None, max_length=255)


class ConfirmReceiptResult(BaseModel):
    """Result of a buyer confirming receipt."""

    order_id: int
    order_no: str
    completed_plans: int = 0

    model_config = {"frozen": True}
