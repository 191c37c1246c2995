"""Application DTOs for gift claims."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class GiftClaimEligibility(BaseModel):
    """Whether a prospective recipient may claim an item."""

    can_receive: bool
    message: str = ""

    model_config = {"frozen": True}


class ClaimGiftRequest(BaseModel):
    """Optional receiver address; plans are created when present."""

    address: Optional[Dict[str, Any]] = None


class UpdateGiftDetailsRequest(BaseModel):
    """Purchaser-editable gift metadata."""

    message: Optional[str] = Field(None, max_length=500)
    receiver_name: Optional[str] = Field(None, max_length=100)
    relationship: Optional[str] = Field(None, max_length=50)
    order_item_id: Optional[int] = Field(None, description="Single item; all items when omitted")
