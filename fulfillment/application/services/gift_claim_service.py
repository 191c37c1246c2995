"""Application service for gift eligibility and claims."""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from fulfillment.application.dtos import GiftClaimEligibility, OrderDTO, OrderItemDTO
from fulfillment.data.uow import UnitOfWork, create_uow
from fulfillment.domain.entities import ReceiverSnapshot
from fulfillment.domain.enums import GiftStatus
from fulfillment.domain.errors import (
    AlreadyClaimedError,
    ClaimConflictError,
    FulfillmentError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
)
from fulfillment.domain.event_bus import EventBus
from fulfillment.domain.events import GiftItemClaimedEvent
from fulfillment.domain.policies import ClaimDecision, ClaimRejection, evaluate_gift_claim
from fulfillment.settings import FulfillmentSettings, get_settings

from .support import build_schedule, item_to_dto, load_order, materialize_plans, order_to_dto


logger = logging.getLogger(__name__)


_REJECTION_ERRORS = {
    ClaimRejection.NOT_PAID: InvalidStateError,
    ClaimRejection.NOT_GIFT: InvalidStateError,
    ClaimRejection.EXPIRED: InvalidStateError,
    ClaimRejection.OWN_GIFT: PermissionDeniedError,
    ClaimRejection.ALREADY_CLAIMED: AlreadyClaimedError,
    ClaimRejection.FULLY_CLAIMED: ClaimConflictError,
}


def rejection_error(decision: ClaimDecision, order_id: int) -> FulfillmentError:
    """Error raised when a claim is attempted despite a negative decision."""
    error_class = _REJECTION_ERRORS[decision.rejection]
    return error_class(decision.message, details={"order_id": order_id})


class GiftClaimService:
    """
    Application service for the gift claim protocol.

    ``evaluate_claim`` is a pure read. ``claim_gift_item`` binds the caller to
    an item with one conditional UPDATE; the database decides the winner when
    two recipients claim the same item at once.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        settings: Optional[FulfillmentSettings] = None,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings or get_settings()
        self._event_bus = event_bus
        self._schedule = build_schedule(self._settings)

    @property
    def claim_ttl(self) -> Optional[timedelta]:
        hours = self._settings.gift_claim_ttl_hours
        return timedelta(hours=hours) if hours else None

    async def evaluate_claim(
        self, order_id: int, user_id: int, now: Optional[datetime] = None
    ) -> GiftClaimEligibility:
        """Tell a prospective recipient whether they can claim from this order.

        Raises:
            NotFoundError: If the order does not exist
        """
        async with create_uow(self._session_factory) as uow:
            order = await load_order(uow, order_id)
            decision = evaluate_gift_claim(order, user_id, now=now, claim_ttl=self.claim_ttl)

        logger.debug(f"Claim evaluation order={order_id} user={user_id}: {decision}")
        return GiftClaimEligibility(can_receive=decision.can_receive, message=decision.message)

    async def claim_gift_item(
        self,
        order_id: int,
        order_item_id: int,
        user_id: int,
        address: Optional[Dict[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> OrderItemDTO:
        """Bind ``user_id`` as the receiver of a gift item.

        On a single-recipient order the caller receives every unclaimed item
        at once; on a multi-recipient order only ``order_item_id``. With an
        ``address`` the delivery plans of the claimed items are created in the
        same transaction.

        Raises:
            NotFoundError: Order or item (within that order) absent
            InvalidStateError: Order not paid, not a gift, or expired
            PermissionDeniedError: The purchaser tried to claim their own gift
            AlreadyClaimedError: Caller already holds an item of this order
            ClaimConflictError: Another recipient holds the item
            ValueError: The address is incomplete
        """
        now = now or datetime.utcnow()
        receiver = ReceiverSnapshot.from_address(address) if address else None

        uow = create_uow(self._session_factory, self._event_bus)
        async with uow:
            order = await load_order(uow, order_id)
            item = order.find_item(order_item_id)
            if item is None:
                raise NotFoundError(
                    f"Item {order_item_id} not found in order {order_id}",
                    details={"order_id": order_id, "order_item_id": order_item_id},
                )

            decision = evaluate_gift_claim(order, user_id, now=now, claim_ttl=self.claim_ttl)
            if not decision.can_receive:
                logger.warning(
                    f"[{uow.execution_id}] Claim rejected order={order_id} "
                    f"item={order_item_id} user={user_id}: {decision.message}"
                )
                if decision.rejection is ClaimRejection.EXPIRED:
                    await self._expire(uow, order.id)
                raise rejection_error(decision, order_id)

            targets = order.unclaimed_items() if order.is_single_recipient else [item]
            bound = await uow.order_items.claim(
                order.id,
                [target.id for target in targets],
                user_id,
                now,
                single_recipient=order.is_single_recipient,
            )
            if bound != len(targets):
                if bound:
                    await uow.rollback()
                raise await self._lost_claim(uow, order_id, order_item_id, user_id, now)

            for target in targets:
                target.receiver_id = user_id
                target.gift_status = GiftStatus.CLAIMED
                target.received_at = now

            plans = []
            if receiver is not None:
                plans = await materialize_plans(
                    uow, self._schedule, targets, receiver, user_id, base_date=now
                )

            uow.collect([
                GiftItemClaimedEvent(
                    order_id=order.id,
                    order_no=order.order_no,
                    order_item_id=target.id,
                    receiver_id=user_id,
                    plans_created=len(target.delivery_plans) if receiver is not None else 0,
                )
                for target in targets
            ])
            await uow.commit()

            logger.info(
                f"✅ [{uow.execution_id}] {len(targets)} gift item(s) of {order.order_no} "
                f"claimed by user {user_id} ({len(plans)} plan(s))"
            )
            return item_to_dto(item)

    async def _expire(self, uow: UnitOfWork, order_id: int) -> None:
        expired = await uow.order_items.expire_pending(order_id)
        if expired:
            await uow.commit()
            logger.info(f"[{uow.execution_id}] Marked {expired} item(s) of order {order_id} expired")

    async def _lost_claim(
        self,
        uow: UnitOfWork,
        order_id: int,
        order_item_id: int,
        user_id: int,
        now: datetime,
    ) -> FulfillmentError:
        """Explain why the conditional update did not bind the caller."""
        order = await load_order(uow, order_id)
        current = order.find_item(order_item_id)
        if current is None:
            return NotFoundError(f"Item {order_item_id} not found in order {order_id}")

        decision = evaluate_gift_claim(order, user_id, now=now, claim_ttl=self.claim_ttl)
        if not decision.can_receive and decision.rejection is not ClaimRejection.FULLY_CLAIMED:
            logger.warning(
                f"[{uow.execution_id}] Claim on item {order_item_id} lost to a concurrent "
                f"change: {decision.message}"
            )
            return rejection_error(decision, order_id)

        logger.warning(
            f"[{uow.execution_id}] Claim conflict on item {order_item_id}: "
            f"user {user_id} lost to user {current.receiver_id}"
        )
        return ClaimConflictError(
            "item was claimed by another recipient",
            details={"order_item_id": order_item_id},
        )

    async def update_gift_details(
        self,
        order_id: int,
        user_id: int,
        message: Optional[str] = None,
        receiver_name: Optional[str] = None,
        relationship: Optional[str] = None,
        order_item_id: Optional[int] = None,
    ) -> OrderDTO:
        """Purchaser edits gift message, receiver name or relationship.

        Applies to one item when ``order_item_id`` is given, else to all items.

        Raises:
            NotFoundError: Order or item absent
            PermissionDeniedError: Caller is not the purchaser
        """
        fields = {
            key: value
            for key, value in (
                ("gift_message", message),
                ("gift_receiver_name", receiver_name),
                ("gift_relationship", relationship),
            )
            if value is not None
        }

        uow = create_uow(self._session_factory, self._event_bus)
        async with uow:
            order = await load_order(uow, order_id)
            if not order.is_owned_by(user_id):
                raise PermissionDeniedError(f"User {user_id} does not own order {order.order_no}")
            if order_item_id is not None and order.find_item(order_item_id) is None:
                raise NotFoundError(f"Item {order_item_id} not found in order {order_id}")

            if fields:
                updated = await uow.order_items.update_gift_details(order.id, fields, order_item_id)
                await uow.commit()
                logger.info(f"Gift details updated on {updated} item(s) of {order.order_no}")

            order = await load_order(uow, order_id, with_plans=True)
            return order_to_dto(order, str(uow.execution_id))
