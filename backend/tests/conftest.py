"""Shared fixtures: the AggieTime client wired to a fake service."""
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from api.dependencies import set_aggietime_client
from api.main import app
from core.config import Settings
from fakes import NOW, FakeAggieTime
from services.aggietime import AggieTimeClient


@pytest.fixture
def settings() -> Settings:
    """Default settings, ignoring any local .env file."""
    return Settings(
        _env_file=None,
        retry_attempts=3,
        retry_base_delay_seconds=0,
    )


@pytest.fixture
def fake_aggietime() -> FakeAggieTime:
    """Fake AggieTime service."""
    return FakeAggieTime()


@pytest.fixture
def fake_sleep() -> AsyncMock:
    """Replacement for asyncio.sleep in retry loops."""
    return AsyncMock()


@pytest.fixture
async def http_client(
    settings: Settings, fake_aggietime: FakeAggieTime,
) -> AsyncGenerator[httpx.AsyncClient]:
    """HTTP client wired to the fake service."""
    async with httpx.AsyncClient(
        base_url=settings.aggietime_uri,
        transport=httpx.MockTransport(fake_aggietime.handler),
    ) as http:
        yield http


@pytest.fixture
def aggietime(
    settings: Settings, http_client: httpx.AsyncClient, fake_sleep: AsyncMock,
) -> AggieTimeClient:
    """AggieTime client talking to the fake service at a fixed point in time."""
    return AggieTimeClient(
        settings,
        http_client=http_client,
        clock=lambda: NOW,
        sleep=fake_sleep,
    )


@pytest.fixture
async def client(aggietime: AggieTimeClient) -> AsyncGenerator[AsyncClient]:
    """Client for the FastAPI app, backed by the fake service."""
    set_aggietime_client(aggietime)
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test",
        ) as ac:
            yield ac
    finally:
        set_aggietime_client(None)
