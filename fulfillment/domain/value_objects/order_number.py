"""Human-readable order and delivery numbers."""
import random
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


_ORDER_NO_RE = re.compile(r"^UORD\d{8}\d{6}$")
_DELIVERY_NO_RE = re.compile(r"^\d{8}\d{5}$")


@dataclass(frozen=True)
class OrderNumber:
    """
    Customer-facing order number.

    Format: ``UORD`` + ``YYYYMMDD`` + 6 random digits,
    e.g. ``UORD20250428004213``.
    """
    value: str

    def __post_init__(self):
        if not self.value:
            raise ValueError("Order number cannot be empty")
        if not _ORDER_NO_RE.match(self.value):
            raise ValueError(f"Invalid order number format: {self.value}")

    @classmethod
    def generate(cls, when: Optional[datetime] = None) -> "OrderNumber":
        when = when or datetime.utcnow()
        return cls(f"UORD{when:%Y%m%d}{random.randint(0, 999999):06d}")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class DeliveryNumber:
    """
    Delivery number assigned when a plan is confirmed.

    Format: ``YYYYMMDD`` + 5-digit sequence within that day.
    """
    value: str

    def __post_init__(self):
        if not _DELIVERY_NO_RE.match(self.value or ""):
            raise ValueError(f"Invalid delivery number format: {self.value}")

    @classmethod
    def day_prefix(cls, when: datetime) -> str:
        return f"{when:%Y%m%d}"

    @classmethod
    def sequence(cls, when: datetime, start: int, count: int) -> list:
        """
        Build ``count`` consecutive numbers after ``start`` already issued today.

        Args:
            when: Issue date
            start: Numbers already issued for that day
            count: How many numbers to build

        Returns:
            List of DeliveryNumber
        """
        prefix = cls.day_prefix(when)
        return [cls(f"{prefix}{start + i + 1:05d}") for i in range(count)]

    def __str__(self) -> str:
        return self.value
