"""
Shared test fixtures for the top-lists test suite.

Provides:
- in-memory variable store and static account provider
- report fetcher mock keyed by dataset
- async FastAPI test client with the refresher injected (no Redis, no host API)
"""

import os
from typing import Any
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

# Ensure test env vars before any app imports
os.environ.setdefault("TOPLISTS_ENVIRONMENT", "development")
os.environ.setdefault("TOPLISTS_REDIS_URL", "")
os.environ.setdefault("TOPLISTS_SENTRY_DSN", "")
os.environ.setdefault("TOPLISTS_ACCOUNT_ID", "")

from services.toplists.collaborators.account import StaticAccountProvider  # noqa: E402
from services.toplists.collaborators.variables import InMemoryVariableStore  # noqa: E402
from services.toplists.datasets import DatasetSpec  # noqa: E402
from services.toplists.pipeline import RefreshFence, TopListRefresher  # noqa: E402


# ---------------------------------------------------------------------------
# Collaborator fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def store():
    return InMemoryVariableStore()


@pytest.fixture
def account():
    return StaticAccountProvider("acc-123")


@pytest.fixture
def reports() -> dict[str, Any]:
    """dataset key -> rows list, or an Exception instance to raise."""
    return {"materials": [], "customers": []}


@pytest.fixture
def fetcher(reports):
    async def _fetch(account_id: str, dataset: DatasetSpec, date_range) -> list[dict]:
        result = reports[dataset.key]
        if isinstance(result, Exception):
            raise result
        return result

    mock = AsyncMock()
    mock.fetch = AsyncMock(side_effect=_fetch)
    return mock


@pytest.fixture
def refresher(account, fetcher, store):
    return TopListRefresher(
        account=account,
        fetcher=fetcher,
        store=store,
        account_timeout_s=0.05,
        fence=RefreshFence(),
    )


# ---------------------------------------------------------------------------
# FastAPI test client
# ---------------------------------------------------------------------------

@pytest.fixture
async def app(refresher, store):
    """Test app with injected refresher; lifespan is not run."""
    from services.toplists.main import app as _app
    from services.toplists.config import settings

    _app.state.settings = settings
    _app.state.redis = None
    _app.state.store = store
    _app.state.refresher = refresher
    return _app


@pytest.fixture
async def client(app):
    """Async HTTP client bound to the test app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
