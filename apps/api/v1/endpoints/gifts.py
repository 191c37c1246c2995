"""Gift claim endpoints for REST API."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from fulfillment.application.dtos import (
    ClaimGiftRequest,
    GiftClaimEligibility,
    OrderDTO,
    OrderItemDTO,
    UpdateGiftDetailsRequest,
)
from fulfillment.application.services import GiftClaimService

from apps.api.deps import get_current_user_id, get_gift_claim_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/gifts", tags=["gifts"])


@router.get("/{order_id}/eligibility", response_model=GiftClaimEligibility)
async def evaluate_claim(
    order_id: int,
    user_id: int = Depends(get_current_user_id),
    service: GiftClaimService = Depends(get_gift_claim_service),
) -> GiftClaimEligibility:
    """Whether the caller can claim an item of this gift order."""
    return await service.evaluate_claim(order_id, user_id)


@router.post("/{order_id}/items/{item_id}/claim", response_model=OrderItemDTO)
async def claim_gift_item(
    order_id: int,
    item_id: int,
    request: Optional[ClaimGiftRequest] = None,
    user_id: int = Depends(get_current_user_id),
    service: GiftClaimService = Depends(get_gift_claim_service),
) -> OrderItemDTO:
    """Claim a gift item for the caller.

    On a single-recipient gift the caller receives every unclaimed item;
    the response still describes ``item_id``.

    Args:
        order_id: Gift order ID
        item_id: Order item to claim
        request: Optional receiver address
        user_id: Claimant from ``X-User-ID``
        service: GiftClaimService instance

    Returns:
        The claimed item, with delivery plans when an address was given
    """
    logger.info(f"API: user {user_id} claims item {item_id} of order {order_id}")
    address = request.address if request is not None else None
    return await service.claim_gift_item(order_id, item_id, user_id, address=address)


@router.put("/{order_id}", response_model=OrderDTO)
async def update_gift_details(
    order_id: int,
    request: UpdateGiftDetailsRequest,
    user_id: int = Depends(get_current_user_id),
    service: GiftClaimService = Depends(get_gift_claim_service),
) -> OrderDTO:
    """Purchaser edits the gift message, receiver name or relationship."""
    return await service.update_gift_details(
        order_id,
        user_id,
        message=request.message,
        receiver_name=request.receiver_name,
        relationship=request.relationship,
        order_item_id=request.order_item_id,
    )
