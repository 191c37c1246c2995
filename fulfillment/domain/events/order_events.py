"""
Order and delivery domain events.

Consumers: audit log, notification collaborators (outside this package).
"""
from dataclasses import dataclass, field
from typing import ClassVar, List, Optional

from .base import DomainEvent


@dataclass
class _OrderEvent(DomainEvent):
    aggregate_type: ClassVar[str] = "Order"

    order_id: Optional[int] = None
    order_no: str = ""

    def __post_init__(self):
        if not self.aggregate_id and self.order_id is not None:
            self.aggregate_id = str(self.order_id)


@dataclass
class OrderPaidEvent(_OrderEvent):
    """Payment gateway confirmed the order (0 -> 1)."""

    previous_status: int = 0
    is_gift: bool = False


@dataclass
class OrderShippedEvent(_OrderEvent):
    """Order left the warehouse (1 -> 2)."""


@dataclass
class OrderCompletedEvent(_OrderEvent):
    """Buyer confirmed receipt (2 -> 3)."""

    confirmed_by: Optional[int] = None


@dataclass
class OrderCancelledEvent(_OrderEvent):
    """Order cancelled; pending plans were cancelled with it."""

    previous_status: int = 0
    cancelled_plans: int = 0


@dataclass
class OrderStatusOverriddenEvent(_OrderEvent):
    """
    Administrative status change outside the transition table.

    Always written to the audit log.
    """

    previous_status: int = 0
    new_status: int = 0
    actor: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class GiftItemClaimedEvent(_OrderEvent):
    """A recipient bound themselves to a gift item."""

    order_item_id: Optional[int] = None
    receiver_id: Optional[int] = None
    plans_created: int = 0


@dataclass
class DeliveryPlansConfirmedEvent(DomainEvent):
    """Operations confirmed a batch of plans (0 -> 1)."""

    aggregate_type: ClassVar[str] = "DeliveryPlan"

    plan_ids: List[int] = field(default_factory=list)
    delivery_numbers: List[str] = field(default_factory=list)


@dataclass
class DeliveryPlansShippedEvent(DomainEvent):
    """A batch of plans was handed to the courier (1 -> 2)."""

    aggregate_type: ClassVar[str] = "DeliveryPlan"

    plan_ids: List[int] = field(default_factory=list)
    express_company: str = ""
    express_number: str = ""
