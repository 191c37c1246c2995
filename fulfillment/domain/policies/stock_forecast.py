"""
Stock forecast aggregation.

Groups pending and confirmed delivery plans by product and start day. Urgency
is evaluated against the ``now`` passed in, never cached.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional


@dataclass(frozen=True)
class ForecastLine:
    """One delivery plan as seen by the aggregator."""
    product_id: int
    product_name: Optional[str]
    quantity: int
    delivery_start_date: datetime
    delivery_end_date: datetime


@dataclass
class DailyDemand:
    date: date
    quantity: int = 0
    urgent_count: int = 0


@dataclass
class ProductForecast:
    product_id: int
    product_name: Optional[str]
    total_quantity: int = 0
    daily_breakdown: List[DailyDemand] = field(default_factory=list)


def is_urgent(
    delivery_end_date: datetime,
    now: datetime,
    threshold: timedelta = timedelta(hours=24),
) -> bool:
    """Overdue, or due within ``threshold``."""
    return delivery_end_date <= now or delivery_end_date - now <= threshold


def aggregate_stock_forecast(
    lines: Iterable[ForecastLine],
    now: datetime,
    urgent_threshold: timedelta = timedelta(hours=24),
) -> List[ProductForecast]:
    """
    Aggregate plan lines into per-product, per-day demand.

    Args:
        lines: Plans already filtered to the forecast window and status
        now: Wall-clock time for the urgency rule
        urgent_threshold: How close to the due date a plan becomes urgent

    Returns:
        ProductForecast list in first-seen product order; each
        ``daily_breakdown`` is sorted by date
    """
    products: Dict[int, ProductForecast] = {}
    days: Dict[int, Dict[date, DailyDemand]] = {}

    for line in lines:
        forecast = products.get(line.product_id)
        if forecast is None:
            forecast = ProductForecast(
                product_id=line.product_id, product_name=line.product_name
            )
            products[line.product_id] = forecast
            days[line.product_id] = {}

        forecast.total_quantity += line.quantity

        day_key = line.delivery_start_date.date()
        day = days[line.product_id].get(day_key)
        if day is None:
            day = DailyDemand(date=day_key)
            days[line.product_id][day_key] = day

        day.quantity += line.quantity
        if is_urgent(line.delivery_end_date, now, urgent_threshold):
            day.urgent_count += line.quantity

    for product_id, forecast in products.items():
        forecast.daily_breakdown = sorted(days[product_id].values(), key=lambda d: d.date)

    return list(products.values())
