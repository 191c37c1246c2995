"""Repository interfaces for the Order aggregate and its items."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from ..entities.order import Order, OrderItem
from ..enums import OrderStatus


class OrderRepository(ABC):
    """Abstract repository for Order aggregate persistence."""

    @abstractmethod
    async def add(self, order: Order) -> Order:
        """Insert a new order with its items; assigns database ids.

        Args:
            order: Order aggregate without ids

        Returns:
            The same order with ``id`` fields populated
        """

    @abstractmethod
    async def get(self, order_id: int, with_plans: bool = False) -> Optional[Order]:
        """Retrieve an order with its items.

        Args:
            order_id: Order primary key
            with_plans: Also load each item's delivery plans

        Returns:
            Order if found, None otherwise
        """

    @abstractmethod
    async def list(
        self,
        user_id: Optional[int] = None,
        status: Optional[OrderStatus] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Order]:
        """List orders, newest first."""

    @abstractmethod
    async def compare_and_set_status(
        self,
        order_id: int,
        expected: Iterable[OrderStatus],
        new_status: OrderStatus,
        **values: Any,
    ) -> bool:
        """Set ``status`` only if the stored status is one of ``expected``.

        Args:
            order_id: Order primary key
            expected: Statuses the row must currently be in
            new_status: Status to write
            **values: Extra columns written in the same statement

        Returns:
            True if exactly one row was updated
        """

    @abstractmethod
    async def set_status(self, order_id: int, new_status: OrderStatus) -> bool:
        """Unconditional status write (administrative override only)."""

    @abstractmethod
    async def advance_paid_to_shipped(self, order_ids: Iterable[int]) -> int:
        """Move the given orders from PAID to SHIPPED; others untouched.

        Returns:
            Number of orders advanced
        """


class OrderItemRepository(ABC):
    """Abstract repository for order items."""

    @abstractmethod
    async def get(self, order_item_id: int) -> Optional[OrderItem]:
        """Retrieve a single item (without plans)."""

    @abstractmethod
    async def claim(
        self,
        order_id: int,
        order_item_ids: List[int],
        receiver_id: int,
        claimed_at: datetime,
        single_recipient: bool = False,
    ) -> int:
        """Bind ``receiver_id`` to unclaimed items in one conditional write.

        The write only lands while the order is paid. For a multi-recipient
        order it also requires that ``receiver_id`` holds no item of the order
        yet; for a single-recipient order, that nobody else does.

        Returns:
            Number of items bound (0 when any condition failed)
        """

    @abstractmethod
    async def expire_pending(self, order_id: int) -> int:
        """Mark the order's unclaimed, still pending items as expired."""

    @abstractmethod
    async def assign_owner_as_receiver(self, order_id: int, owner_id: int) -> int:
        """Mark every unclaimed item of a self-purchase as received by its owner."""

    @abstractmethod
    async def update_gift_details(
        self,
        order_id: int,
        fields: Dict[str, Any],
        order_item_id: Optional[int] = None,
    ) -> int:
        """Write gift metadata on one item or on all items of an order."""

    @abstractmethod
    async def increment_delivered(self, counts: Dict[int, int]) -> None:
        """Add shipped plan counts to each item's ``delivered_count``."""
