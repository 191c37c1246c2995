"""Catalog product as seen by fulfillment (lookup only)."""
from dataclasses import dataclass
from typing import Optional

from ..enums import DeliveryType


@dataclass
class Product:
    product_name: str
    id: Optional[int] = None
    is_subscription: bool = False
    delivery_type: str = DeliveryType.ONCE.value
    max_deliveries: int = 1
    delivery_interval: int = 0

    def __post_init__(self):
        if self.delivery_type not in (DeliveryType.ONCE.value, DeliveryType.INTERVAL.value):
            raise ValueError(f"Unknown delivery type: {self.delivery_type}")
        if self.max_deliveries < 1:
            raise ValueError("max_deliveries must be at least 1")
