"""DeliveryPlan entity: one scheduled physical delivery of an order item."""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..enums import DeliveryPlanStatus


@dataclass(frozen=True)
class ReceiverSnapshot:
    """Receiver contact captured when the plan is created."""
    name: str
    phone: str
    address: str
    province: Optional[str] = None
    city: Optional[str] = None
    area: Optional[str] = None

    @classmethod
    def from_address(cls, address: Dict[str, Any]) -> "ReceiverSnapshot":
        """
        Build a snapshot from a shipping address payload.

        Accepts both the mini-program field names (``userName``, ``telNumber``,
        ``detailInfo``...) and plain ``name``/``phone``/``address`` keys.

        Raises:
            ValueError: If name, phone or address line is missing
        """
        name = address.get("userName") or address.get("name")
        phone = address.get("telNumber") or address.get("phone")
        line = address.get("detailInfo") or address.get("address")
        if not (name and phone and line):
            raise ValueError("Shipping address is incomplete")
        return cls(
            name=name,
            phone=phone,
            address=line,
            province=address.get("provinceName") or address.get("province"),
            city=address.get("cityName") or address.get("city"),
            area=address.get("countyName") or address.get("area"),
        )


@dataclass
class DeliveryPlan:
    """
    A single delivery event derived from an OrderItem.

    Subscription items own N plans with ``delivery_sequence`` 1..N; single
    shipments own exactly one per unit.
    """
    order_item_id: int
    delivery_start_date: datetime
    delivery_end_date: datetime
    delivery_sequence: int = 1
    status: DeliveryPlanStatus = DeliveryPlanStatus.PENDING_CONFIRMATION
    id: Optional[int] = None
    receiver: Optional[ReceiverSnapshot] = None
    receiver_id: Optional[int] = None
    subscription_product_id: Optional[int] = None
    delivery_no: Optional[str] = None
    express_company: Optional[str] = None
    express_number: Optional[str] = None
    shipped_at: Optional[datetime] = None
    remark: Optional[str] = None

    def __post_init__(self):
        self.status = DeliveryPlanStatus(self.status)
        if self.delivery_end_date < self.delivery_start_date:
            raise ValueError("delivery_end_date must not precede delivery_start_date")
        if self.delivery_sequence < 1:
            raise ValueError("delivery_sequence starts at 1")
