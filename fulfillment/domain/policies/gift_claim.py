"""
Gift claim eligibility.

The checks run in a fixed precedence; the first failing check decides the
outcome. This module only reads the order it is given.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from ..entities.order import Order
from ..enums import OrderStatus


class ClaimRejection(str, Enum):
    """Reasons a recipient cannot claim, with their caller-facing message."""

    NOT_PAID = "order not in paid state"
    NOT_GIFT = "not a gift order"
    OWN_GIFT = "cannot claim your own gift"
    EXPIRED = "gift expired"
    ALREADY_CLAIMED = "already claimed"
    FULLY_CLAIMED = "fully claimed"


@dataclass(frozen=True)
class ClaimDecision:
    can_receive: bool
    rejection: Optional[ClaimRejection] = None

    @property
    def message(self) -> str:
        return self.rejection.value if self.rejection else ""

    @classmethod
    def eligible(cls) -> "ClaimDecision":
        return cls(can_receive=True)

    @classmethod
    def rejected(cls, rejection: ClaimRejection) -> "ClaimDecision":
        return cls(can_receive=False, rejection=rejection)


def evaluate_gift_claim(
    order: Order,
    requesting_user_id: int,
    now: Optional[datetime] = None,
    claim_ttl: Optional[timedelta] = None,
) -> ClaimDecision:
    """
    Decide whether ``requesting_user_id`` may claim an item of ``order``.

    Args:
        order: Order with its items loaded
        requesting_user_id: Prospective recipient
        now: Evaluation time (only used with ``claim_ttl``)
        claim_ttl: Optional lifetime of a gift link, counted from order creation

    Returns:
        ClaimDecision
    """
    if order.status != OrderStatus.PAID:
        return ClaimDecision.rejected(ClaimRejection.NOT_PAID)

    if not order.is_gift:
        return ClaimDecision.rejected(ClaimRejection.NOT_GIFT)

    if order.is_owned_by(requesting_user_id):
        return ClaimDecision.rejected(ClaimRejection.OWN_GIFT)

    if claim_ttl is not None and order.created_at is not None:
        now = now or datetime.utcnow()
        if now > order.created_at + claim_ttl:
            return ClaimDecision.rejected(ClaimRejection.EXPIRED)

    if order.is_single_recipient:
        # The whole gift belongs to its first claimant
        if order.items_claimed_by_others(requesting_user_id):
            return ClaimDecision.rejected(ClaimRejection.FULLY_CLAIMED)
        if order.unclaimed_items():
            return ClaimDecision.eligible()
        return ClaimDecision.rejected(ClaimRejection.ALREADY_CLAIMED)

    # One claim per recipient per order, even while other items remain free
    if order.items_claimed_by(requesting_user_id):
        return ClaimDecision.rejected(ClaimRejection.ALREADY_CLAIMED)

    if order.unclaimed_items():
        return ClaimDecision.eligible()

    return ClaimDecision.rejected(ClaimRejection.FULLY_CLAIMED)
