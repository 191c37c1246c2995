"""Repository interface for delivery plans."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from ..entities.delivery_plan import DeliveryPlan
from ..enums import DeliveryPlanStatus
from ..policies.stock_forecast import ForecastLine


class DeliveryPlanRepository(ABC):
    """Abstract repository for DeliveryPlan persistence."""

    @abstractmethod
    async def add_all(self, plans: List[DeliveryPlan]) -> List[DeliveryPlan]:
        """Insert plans; assigns database ids."""

    @abstractmethod
    async def get(self, plan_id: int) -> Optional[DeliveryPlan]:
        """Retrieve a plan by id."""

    @abstractmethod
    async def list(
        self,
        statuses: Optional[Iterable[DeliveryPlanStatus]] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[int, List[DeliveryPlan]]:
        """List plans ordered by start date then sequence.

        Returns:
            (total matching, page of plans)
        """

    @abstractmethod
    async def list_for_items(self, order_item_ids: Iterable[int]) -> List[DeliveryPlan]:
        """All plans belonging to the given items."""

    @abstractmethod
    async def cancel_for_items(self, order_item_ids: Iterable[int]) -> int:
        """Cancel every not-yet-shipped plan of the given items in one statement.

        Returns:
            Number of plans cancelled
        """

    @abstractmethod
    async def advance_for_items(
        self,
        order_item_ids: Iterable[int],
        from_status: DeliveryPlanStatus,
        to_status: DeliveryPlanStatus,
    ) -> int:
        """Move plans of the given items from one status to another in one statement."""

    @abstractmethod
    async def find_by_ids(
        self, plan_ids: Iterable[int], status: DeliveryPlanStatus
    ) -> List[DeliveryPlan]:
        """Plans among ``plan_ids`` currently in ``status``."""

    @abstractmethod
    async def count_delivery_numbers(self, prefix: str) -> int:
        """How many delivery numbers start with ``prefix``."""

    @abstractmethod
    async def confirm(self, numbers_by_plan: Dict[int, str]) -> int:
        """Move pending, unnumbered plans to CONFIRMED with their numbers."""

    @abstractmethod
    async def ship(
        self,
        plan_ids: Iterable[int],
        express_company: str,
        express_number: str,
        shipped_at: datetime,
        remark: Optional[str] = None,
    ) -> int:
        """Move confirmed plans to SHIPPED with courier details."""

    @abstractmethod
    async def order_ids_for_plans(self, plan_ids: Iterable[int]) -> List[int]:
        """Distinct owning order ids of the given plans."""

    @abstractmethod
    async def forecast_lines(self, start: datetime, end: datetime) -> List[ForecastLine]:
        """Pending or confirmed plans starting within ``[start, end]``."""

    @abstractmethod
    async def count_by_status(self) -> Dict[DeliveryPlanStatus, int]:
        """Plan counts per status."""

    @abstractmethod
    async def count_upcoming(self, start: datetime, end: datetime) -> int:
        """Pending or confirmed plans starting within ``[start, end]``."""
