"""Order endpoints for REST API."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from fulfillment.application.dtos import (
    ConfirmReceiptResult,
    MarkPaidRequest,
    OrderDTO,
    PlaceOrderRequest,
)
from fulfillment.application.services import CheckoutService, OrderLifecycleService
from fulfillment.domain.enums import OrderStatus

from apps.api.deps import get_checkout_service, get_current_user_id, get_lifecycle_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=OrderDTO, status_code=201)
async def place_order(
    request: PlaceOrderRequest,
    user_id: int = Depends(get_current_user_id),
    service: CheckoutService = Depends(get_checkout_service),
) -> OrderDTO:
    """Create a new order.

    Args:
        request: PlaceOrderRequest DTO
        user_id: Purchaser from ``X-User-ID``
        service: CheckoutService instance

    Returns:
        OrderDTO with created order details
    """
    return await service.place_order(
        user_id=user_id,
        items=request.items,
        gift_card=request.gift_card,
        gift_type=request.gift_type,
    )


@router.get("/{order_id}", response_model=OrderDTO)
async def get_order(
    order_id: int,
    service: OrderLifecycleService = Depends(get_lifecycle_service),
) -> OrderDTO:
    """Get order by ID, with items and delivery plans."""
    return await service.get_order(order_id)


@router.get("", response_model=List[OrderDTO])
async def list_orders(
    status: Optional[int] = Query(default=None, ge=0, le=4, description="Filter by status"),
    limit: int = Query(default=100, ge=1, le=1000, description="Maximum number of orders"),
    offset: int = Query(default=0, ge=0),
    user_id: int = Depends(get_current_user_id),
    service: OrderLifecycleService = Depends(get_lifecycle_service),
) -> List[OrderDTO]:
    """List the caller's orders, newest first."""
    return await service.list_orders(
        user_id=user_id,
        status=OrderStatus(status) if status is not None else None,
        limit=limit,
        offset=offset,
    )


@router.post("/{order_id}/pay", response_model=OrderDTO)
async def mark_paid(
    order_id: int,
    request: Optional[MarkPaidRequest] = None,
    service: OrderLifecycleService = Depends(get_lifecycle_service),
) -> OrderDTO:
    """Payment gateway callback.

    Duplicate notifications return the order unchanged.
    """
    logger.info(f"API: payment notification for order {order_id}")
    address = request.address if request is not None else None
    return await service.mark_paid(order_id, address_snapshot=address)


@router.post("/{order_id}/ship", response_model=OrderDTO)
async def mark_shipped(
    order_id: int,
    service: OrderLifecycleService = Depends(get_lifecycle_service),
) -> OrderDTO:
    """Fulfillment callback: the order left the warehouse."""
    return await service.mark_shipped(order_id)


@router.post("/{order_id}/confirm", response_model=ConfirmReceiptResult)
async def confirm_receipt(
    order_id: int,
    user_id: int = Depends(get_current_user_id),
    service: OrderLifecycleService = Depends(get_lifecycle_service),
) -> ConfirmReceiptResult:
    """Buyer confirms receipt.

    Args:
        order_id: Order ID
        user_id: Caller from ``X-User-ID``; must be the purchaser
        service: OrderLifecycleService instance

    Returns:
        Order id and number of the completed order
    """
    return await service.confirm_receipt(order_id, user_id)


@router.post("/{order_id}/cancel", response_model=OrderDTO)
async def cancel_order(
    order_id: int,
    service: OrderLifecycleService = Depends(get_lifecycle_service),
) -> OrderDTO:
    """Cancel the order and its not-yet-shipped delivery plans."""
    return await service.cancel_order(order_id)
