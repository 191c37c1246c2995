"""Fixtures for API tests: the FastAPI app wired to a throwaway database."""

import asyncio
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker

from apps.api.deps import get_session_factory
from apps.api.main import app
from fulfillment.data.models import Base
from fulfillment.infrastructure.event_bus import InMemoryEventBus, get_event_bus
from fulfillment.settings import FulfillmentSettings, get_settings


async def _create_schema(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def api_session_factory(tmp_path, make_engine) -> Generator[async_sessionmaker, None, None]:
    """Session factory usable from both the test thread and the TestClient loop."""
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'fulfillment-api.db'}")
    asyncio.run(_create_schema(engine))

    yield async_sessionmaker(engine, expire_on_commit=False, autoflush=False)

    asyncio.run(engine.dispose())


@pytest.fixture
def api_seed(api_session_factory, make_seeder):
    """Run a Seeder coroutine to completion from a sync test."""
    seeder = make_seeder(api_session_factory)

    def run(method: str, *args, **kwargs):
        return asyncio.run(getattr(seeder, method)(*args, **kwargs))

    return run


@pytest.fixture
def test_client(api_session_factory) -> Generator[TestClient, None, None]:
    """Create FastAPI test client with dependency overrides.

    The lifespan is not entered, so the configured database is never touched.
    """
    settings = FulfillmentSettings(_env_file=None)
    event_bus = InMemoryEventBus()

    app.dependency_overrides[get_session_factory] = lambda: api_session_factory
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_event_bus] = lambda: event_bus

    yield TestClient(app)

    app.dependency_overrides.clear()
