"""
Delivery schedule generation.

Every purchased unit gets its own series of plans. ``once`` items ship a
single plan per unit; ``interval`` items are pre-materialized as
``max_deliveries`` plans at a fixed cadence.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from ..entities.delivery_plan import DeliveryPlan, ReceiverSnapshot
from ..entities.order import OrderItem
from ..enums import DeliveryType


@dataclass(frozen=True)
class ScheduledDelivery:
    delivery_start_date: datetime
    delivery_end_date: datetime
    delivery_sequence: int
    remark: Optional[str] = None


class DeliverySchedule:
    """
    Generates delivery windows for an order item.

    Args:
        cutoff_hour: Orders placed at or after this hour start the next day
        once_due_days: Days allowed to ship a single delivery
        interval_due_days: Days allowed to ship each recurring delivery
        default_interval_days: Cadence used when an item has none
    """

    def __init__(
        self,
        cutoff_hour: int = 16,
        once_due_days: int = 3,
        interval_due_days: int = 7,
        default_interval_days: int = 30,
    ):
        self.cutoff_hour = cutoff_hour
        self.once_due_days = once_due_days
        self.interval_due_days = interval_due_days
        self.default_interval_days = default_interval_days

    @staticmethod
    def validate(
        delivery_type: str,
        max_deliveries: int,
        interval_days: Optional[int],
        quantity: int,
    ) -> None:
        """
        Raises:
            ValueError: If the configuration cannot produce a schedule
        """
        if delivery_type not in (DeliveryType.ONCE.value, DeliveryType.INTERVAL.value):
            raise ValueError(f"Unknown delivery type: {delivery_type}")
        if not max_deliveries or max_deliveries < 1:
            raise ValueError("max_deliveries must be at least 1")
        if delivery_type == DeliveryType.INTERVAL.value and (not interval_days or interval_days < 1):
            raise ValueError("interval deliveries need a positive interval")
        if not quantity or quantity < 1:
            raise ValueError("quantity must be at least 1")

    def generate(
        self,
        delivery_type: str,
        max_deliveries: int,
        interval_days: Optional[int],
        quantity: int,
        base_date: Optional[datetime] = None,
    ) -> List[ScheduledDelivery]:
        """
        Build the plans for ``quantity`` units.

        Unknown delivery types are treated as ``once``.

        Returns:
            Scheduled deliveries, unit by unit, in sequence order
        """
        if quantity < 1:
            raise ValueError("quantity must be at least 1")
        base_date = base_date or datetime.utcnow()

        plans: List[ScheduledDelivery] = []
        for unit in range(quantity):
            if delivery_type == DeliveryType.INTERVAL.value:
                plans.extend(self._interval(
                    base_date,
                    max(max_deliveries or 1, 1),
                    interval_days or self.default_interval_days,
                    unit,
                ))
            else:
                plans.extend(self._once(base_date, unit))
        return plans

    def _once(self, base_date: datetime, unit: int) -> List[ScheduledDelivery]:
        start = base_date
        if base_date.hour >= self.cutoff_hour:
            start = base_date + timedelta(days=1)
        end = base_date + timedelta(days=self.once_due_days)
        return [ScheduledDelivery(
            delivery_start_date=start,
            delivery_end_date=end,
            delivery_sequence=1,
            remark=f"unit {unit + 1} - single delivery",
        )]

    def _interval(
        self, base_date: datetime, count: int, interval_days: int, unit: int
    ) -> List[ScheduledDelivery]:
        plans = []
        for n in range(count):
            start = base_date + timedelta(days=n * interval_days)
            plans.append(ScheduledDelivery(
                delivery_start_date=start,
                delivery_end_date=start + timedelta(days=self.interval_due_days),
                delivery_sequence=n + 1,
                remark=f"unit {unit + 1} - delivery {n + 1} every {interval_days} days",
            ))
        return plans

    def plans_for_item(
        self,
        item: OrderItem,
        receiver: Optional[ReceiverSnapshot],
        receiver_id: Optional[int],
        base_date: Optional[datetime] = None,
    ) -> List[DeliveryPlan]:
        """
        Materialize the delivery plans of one order item.

        Subscription items keep their product as ``subscription_product_id``.
        """
        is_interval = item.delivery_type == DeliveryType.INTERVAL.value
        scheduled = self.generate(
            delivery_type=item.delivery_type,
            max_deliveries=item.total_deliveries,
            interval_days=item.delivery_interval,
            quantity=item.quantity,
            base_date=base_date,
        )
        return [
            DeliveryPlan(
                order_item_id=item.id,
                delivery_start_date=s.delivery_start_date,
                delivery_end_date=s.delivery_end_date,
                delivery_sequence=s.delivery_sequence,
                receiver=receiver,
                receiver_id=receiver_id,
                subscription_product_id=item.product_id if is_interval else None,
                remark=s.remark,
            )
            for s in scheduled
        ]
