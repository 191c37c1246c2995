"""
Order aggregate root.

CRITICAL: This file must contain ZERO imports from:
- sqlalchemy
- pydantic
- fastapi
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..enums import GiftStatus, GiftType, OrderStatus
from ..errors import InvalidStateError, PermissionDeniedError
from ..events.base import DomainEvent
from ..transitions import is_order_transition_allowed
from ..value_objects import Money
from .delivery_plan import DeliveryPlan


@dataclass
class OrderItem:
    """Line item within an order, optionally a gift for a third party."""
    product_id: int
    quantity: int
    price: Money
    id: Optional[int] = None
    order_id: Optional[int] = None
    product_name: Optional[str] = None
    receiver_id: Optional[int] = None
    gift_status: GiftStatus = GiftStatus.PENDING
    gift_message: Optional[str] = None
    gift_receiver_name: Optional[str] = None
    gift_relationship: Optional[str] = None
    received_at: Optional[datetime] = None
    delivery_type: str = "once"
    total_deliveries: int = 1
    delivery_interval: int = 0
    delivered_count: int = 0
    delivery_plans: List[DeliveryPlan] = field(default_factory=list)

    def __post_init__(self):
        self.gift_status = GiftStatus(self.gift_status)
        if self.quantity < 1:
            raise ValueError("Item quantity must be at least 1")

    @property
    def is_claimed(self) -> bool:
        return self.receiver_id is not None

    @property
    def line_total(self) -> Money:
        return self.price.times(self.quantity)


@dataclass
class Order:
    """
    Order aggregate root.

    Owns its items, which own their delivery plans. Status changes go through
    the transition table; the aggregate records domain events that the unit
    of work publishes after commit.
    """
    order_no: str
    user_id: int
    amount: Money
    status: OrderStatus = OrderStatus.PENDING_PAYMENT
    id: Optional[int] = None
    is_gift: bool = False
    gift_type: Optional[GiftType] = None
    gift_card: Optional[str] = None
    address_snapshot: Optional[Dict[str, Any]] = None
    items: List[OrderItem] = field(default_factory=list)
    created_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None

    _domain_events: List[DomainEvent] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self):
        self.status = OrderStatus(self.status)
        if self.gift_type is not None:
            self.gift_type = GiftType(self.gift_type)

    # =========================================================================
    # QUERIES
    # =========================================================================

    def is_owned_by(self, user_id: int) -> bool:
        return self.user_id == user_id

    @property
    def is_single_recipient(self) -> bool:
        """One claimant receives every item of the gift."""
        return self.is_gift and self.gift_type == GiftType.SINGLE_RECIPIENT

    def find_item(self, order_item_id: int) -> Optional[OrderItem]:
        for item in self.items:
            if item.id == order_item_id:
                return item
        return None

    def unclaimed_items(self) -> List[OrderItem]:
        return [item for item in self.items if item.receiver_id is None]

    def items_claimed_by(self, user_id: int) -> List[OrderItem]:
        return [item for item in self.items if item.receiver_id == user_id]

    def items_claimed_by_others(self, user_id: int) -> List[OrderItem]:
        return [item for item in self.items if item.is_claimed and item.receiver_id != user_id]

    def order_item_ids(self) -> List[int]:
        return [item.id for item in self.items if item.id is not None]

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    def ensure_transition(self, requested: OrderStatus) -> None:
        """
        Raise unless ``status -> requested`` is in the transition table.

        Raises:
            InvalidStateError: If the transition is not allowed
        """
        requested = OrderStatus(requested)
        if not is_order_transition_allowed(self.status, requested):
            raise InvalidStateError(
                f"Order {self.order_no} cannot move from "
                f"{self.status.name} to {requested.name}",
                details={"current": int(self.status), "requested": int(requested)},
            )

    def mark_paid(self, paid_at: datetime, address_snapshot: Optional[Dict[str, Any]] = None) -> None:
        """Business rule: payment confirmed by the gateway."""
        self.ensure_transition(OrderStatus.PAID)
        previous = self.status
        self.status = OrderStatus.PAID
        self.paid_at = paid_at
        if address_snapshot is not None:
            self.address_snapshot = address_snapshot

        # Purchases for oneself are received by the owner on payment
        if not self.is_gift:
            for item in self.items:
                item.receiver_id = self.user_id
                item.gift_status = GiftStatus.CLAIMED

        from ..events.order_events import OrderPaidEvent
        self._record_event(OrderPaidEvent(
            order_id=self.id, order_no=self.order_no,
            previous_status=int(previous), is_gift=self.is_gift,
        ))

    def mark_shipped(self) -> None:
        """Business rule: physical shipment started."""
        self.ensure_transition(OrderStatus.SHIPPED)
        self.status = OrderStatus.SHIPPED

        from ..events.order_events import OrderShippedEvent
        self._record_event(OrderShippedEvent(order_id=self.id, order_no=self.order_no))

    def confirm_receipt(self, requesting_user_id: int) -> None:
        """
        Buyer confirms receipt of a shipped order.

        Raises:
            PermissionDeniedError: If the requester is not the purchaser
            InvalidStateError: If the order is not shipped
        """
        if not self.is_owned_by(requesting_user_id):
            raise PermissionDeniedError(
                f"User {requesting_user_id} does not own order {self.order_no}"
            )
        if self.status != OrderStatus.SHIPPED:
            raise InvalidStateError(
                f"Order {self.order_no} is {self.status.name}; only shipped orders "
                f"can be confirmed",
                details={"current": int(self.status)},
            )
        self.complete(confirmed_by=requesting_user_id)

    def complete(self, confirmed_by: Optional[int] = None) -> None:
        """Shipped -> completed, without the ownership check of ``confirm_receipt``."""
        self.ensure_transition(OrderStatus.COMPLETED)
        self.status = OrderStatus.COMPLETED

        from ..events.order_events import OrderCompletedEvent
        self._record_event(OrderCompletedEvent(
            order_id=self.id, order_no=self.order_no, confirmed_by=confirmed_by,
        ))

    def cancel(self) -> OrderStatus:
        """
        Cancel the order.

        Returns:
            The status the order was cancelled from

        Raises:
            InvalidStateError: If the order is already completed or cancelled
        """
        if self.status.is_terminal:
            raise InvalidStateError(
                f"Order {self.order_no} is {self.status.name} and cannot be cancelled",
                details={"current": int(self.status)},
            )
        previous = self.status
        self.status = OrderStatus.CANCELLED

        from ..events.order_events import OrderCancelledEvent
        self._record_event(OrderCancelledEvent(
            order_id=self.id, order_no=self.order_no, previous_status=int(previous),
        ))
        return previous

    def override_status(
        self,
        requested: OrderStatus,
        actor: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> OrderStatus:
        """
        Administrative status change that bypasses the transition table.

        Returns:
            The previous status
        """
        requested = OrderStatus(requested)
        previous = self.status
        self.status = requested

        from ..events.order_events import OrderStatusOverriddenEvent
        self._record_event(OrderStatusOverriddenEvent(
            order_id=self.id,
            order_no=self.order_no,
            previous_status=int(previous),
            new_status=int(requested),
            actor=actor,
            reason=reason,
        ))
        return previous

    # =========================================================================
    # EVENT COLLECTION
    # =========================================================================

    def pull_domain_events(self) -> List[DomainEvent]:
        """Return and clear collected domain events."""
        events = list(self._domain_events)
        self._domain_events.clear()
        return events

    def _record_event(self, event: DomainEvent) -> None:
        self._domain_events.append(event)
