"""Application service for the stock forecast."""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from fulfillment.application.dtos import DailyDemandDTO, ProductForecastDTO
from fulfillment.data.uow import create_uow
from fulfillment.domain.policies import aggregate_stock_forecast
from fulfillment.settings import FulfillmentSettings, get_settings


logger = logging.getLogger(__name__)


class StockForecastService:
    """
    Projects near-term demand from pending and confirmed delivery plans.

    Read-only: the query and the aggregation never write, and urgency is
    computed against ``now`` on every call.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        settings: Optional[FulfillmentSettings] = None,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings or get_settings()

    def clamp_window(self, window_days: Optional[int]) -> int:
        """Default, validate and cap the forecast window.

        Raises:
            ValueError: If ``window_days`` is less than 1
        """
        if window_days is None:
            window_days = self._settings.forecast_default_days
        if window_days < 1:
            raise ValueError("window_days must be at least 1")
        return min(window_days, self._settings.forecast_max_days)

    async def forecast(
        self, window_days: Optional[int] = None, now: Optional[datetime] = None
    ) -> List[ProductForecastDTO]:
        """Per-product, per-day demand for plans starting in ``[now, now + window]``.

        Args:
            window_days: Days ahead to scan, capped at ``forecast_max_days``
            now: Evaluation time (defaults to the current UTC time)

        Returns:
            Forecasts sorted by product id
        """
        window_days = self.clamp_window(window_days)
        now = now or datetime.utcnow()

        async with create_uow(self._session_factory) as uow:
            lines = await uow.delivery_plans.forecast_lines(now, now + timedelta(days=window_days))

        forecasts = aggregate_stock_forecast(
            lines,
            now=now,
            urgent_threshold=timedelta(hours=self._settings.urgent_threshold_hours),
        )
        logger.info(f"Stock forecast over {window_days} day(s): {len(lines)} plan(s), {len(forecasts)} product(s)")

        return [
            ProductForecastDTO(
                product_id=f.product_id,
                product_name=f.product_name,
                total_quantity=f.total_quantity,
                daily_breakdown=[
                    DailyDemandDTO(date=d.date, quantity=d.quantity, urgent_count=d.urgent_count)
                    for d in f.daily_breakdown
                ],
            )
            for f in sorted(forecasts, key=lambda f: f.product_id)
        ]
