"""FastAPI dependencies for dependency injection."""

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fulfillment.application.services import (
    CheckoutService,
    DeliveryPlanService,
    GiftClaimService,
    OrderLifecycleService,
    StockForecastService,
)
from fulfillment.infrastructure import database
from fulfillment.infrastructure.event_bus import InMemoryEventBus, get_event_bus
from fulfillment.settings import FulfillmentSettings, get_settings


_session_factory: async_sessionmaker[AsyncSession] = None


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get SQLAlchemy session factory bound to the configured database.

    Returns:
        async_sessionmaker instance
    """
    global _session_factory

    if _session_factory is None:
        _session_factory = database.get_session_factory()

    return _session_factory


def get_current_user_id(x_user_id: int = Header(..., alias="X-User-ID")) -> int:
    """Authenticated user id, resolved upstream and forwarded as a header."""
    return x_user_id


def get_checkout_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> CheckoutService:
    return CheckoutService(session_factory)


def get_lifecycle_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    settings: FulfillmentSettings = Depends(get_settings),
    event_bus: InMemoryEventBus = Depends(get_event_bus),
) -> OrderLifecycleService:
    """Get OrderLifecycleService instance.

    Returns:
        OrderLifecycleService instance
    """
    return OrderLifecycleService(session_factory, settings=settings, event_bus=event_bus)


def get_gift_claim_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    settings: FulfillmentSettings = Depends(get_settings),
    event_bus: InMemoryEventBus = Depends(get_event_bus),
) -> GiftClaimService:
    return GiftClaimService(session_factory, settings=settings, event_bus=event_bus)


def get_delivery_plan_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    settings: FulfillmentSettings = Depends(get_settings),
    event_bus: InMemoryEventBus = Depends(get_event_bus),
) -> DeliveryPlanService:
    return DeliveryPlanService(session_factory, settings=settings, event_bus=event_bus)


def get_stock_forecast_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    settings: FulfillmentSettings = Depends(get_settings),
) -> StockForecastService:
    return StockForecastService(session_factory, settings=settings)
