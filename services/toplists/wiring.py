"""
Builds collaborators and the refresher from Settings.

Shared by the FastAPI lifespan and the standalone refresh job so both run
the same pipeline against the same stores.
"""

from __future__ import annotations

import logging

import httpx
import redis.asyncio as aioredis

from services.toplists.collaborators.account import (
    AccountProvider,
    DeferredAccountProvider,
    StaticAccountProvider,
)
from services.toplists.collaborators.reports import HttpReportFetcher
from services.toplists.collaborators.variables import (
    InMemoryVariableStore,
    RedisVariableStore,
    VariableStore,
)
from services.toplists.config import Settings
from services.toplists.pipeline import RefreshFence, TopListRefresher

logger = logging.getLogger(__name__)


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=settings.host_api_base_url,
        timeout=settings.report_timeout_s,
    )


async def connect_redis(settings: Settings):
    """Return a connected redis.asyncio client, or None when unset/unreachable."""
    if not settings.redis_url:
        return None
    try:
        client = aioredis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=5,
        )
        await client.ping()
    except Exception:
        logger.warning("Redis unavailable at startup; using in-memory variable store", exc_info=True)
        return None
    return client


def build_store(settings: Settings, redis_client) -> VariableStore:
    if redis_client is None:
        return InMemoryVariableStore()
    return RedisVariableStore(redis_client, namespace=settings.variable_namespace)


def build_account_provider(settings: Settings) -> AccountProvider:
    if settings.account_id:
        return StaticAccountProvider(settings.account_id)
    return DeferredAccountProvider()


def build_refresher(
    settings: Settings,
    client: httpx.AsyncClient,
    store: VariableStore,
    account: AccountProvider | None = None,
) -> TopListRefresher:
    return TopListRefresher(
        account=account or build_account_provider(settings),
        fetcher=HttpReportFetcher(client, token=settings.host_api_token),
        store=store,
        account_timeout_s=settings.account_wait_timeout_s,
        fence=RefreshFence() if settings.fence_stale_refreshes else None,
    )
