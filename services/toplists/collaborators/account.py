"""
Account providers - resolve the host account id a refresh runs against.

The host platform attaches the account asynchronously after page load.
Instead of polling, a provider exposes one awaitable that resolves once
to the account id or raises AccountNotReadyError after a timeout.

  StaticAccountProvider    - account id known up front (config / CLI)
  DeferredAccountProvider  - host calls resolve(account_id) when it is ready
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol, runtime_checkable

from services.toplists.errors import AccountNotReadyError

logger = logging.getLogger(__name__)


@runtime_checkable
class AccountProvider(Protocol):
    async def wait_for_account(self, timeout: float) -> str: ...


class StaticAccountProvider:
    def __init__(self, account_id: str) -> None:
        self._account_id = account_id

    async def wait_for_account(self, timeout: float) -> str:
        if not self._account_id:
            raise AccountNotReadyError(0.0)
        return self._account_id


class DeferredAccountProvider:
    """
    Account id that arrives later.

    The first resolve() wins; later calls with a different id are ignored
    and logged. Waiters that time out can call wait_for_account() again.
    """

    def __init__(self) -> None:
        self._ready = asyncio.Event()
        self._account_id: str | None = None

    @property
    def account_id(self) -> str | None:
        return self._account_id

    def resolve(self, account_id: str) -> None:
        if not account_id:
            raise ValueError("account_id must be non-empty")
        if self._account_id is not None:
            if account_id != self._account_id:
                logger.warning(
                    "Ignoring account id %r; already resolved to %r",
                    account_id,
                    self._account_id,
                )
            return
        self._account_id = account_id
        self._ready.set()

    async def wait_for_account(self, timeout: float) -> str:
        if self._account_id is not None:
            return self._account_id
        try:
            await asyncio.wait_for(self._ready.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            raise AccountNotReadyError(timeout) from None
        if self._account_id is None:
            raise AccountNotReadyError(timeout)
        return self._account_id
