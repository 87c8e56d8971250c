"""HTTP client fixtures for API tests."""

from collections.abc import AsyncGenerator
from decimal import Decimal
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from stockledger.api.main import create_app
from stockledger.config import get_settings
from stockledger.infrastructure.storage.sqlite import close_pool


@pytest.fixture
def temp_db_path(isolated_settings: None) -> Path:
    """The app's own database file, so fixtures and routes share data."""
    return get_settings().storage.db_path


@pytest.fixture
async def client(pool) -> AsyncGenerator[AsyncClient, None]:
    """Async client against a fresh app on the migrated test database."""
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    await close_pool()


def dec(value) -> Decimal:
    """Decimal from a JSON number or string."""
    return Decimal(str(value))


@pytest.fixture
def as_decimal():
    return dec
