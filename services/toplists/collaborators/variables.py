"""
Variable stores - where published slot values live.

The host platform exposes a flat key/value store of string variables. Two
implementations:

  InMemoryVariableStore  - process-local dict (tests, local dev)
  RedisVariableStore     - redis.asyncio client, keys "{namespace}:{name}"

Both raise VariableStoreError on failure; callers decide whether a failed
write is fatal. Missing variables read back as "".
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from services.toplists.errors import VariableStoreError

logger = logging.getLogger(__name__)


@runtime_checkable
class VariableStore(Protocol):
    async def get(self, name: str) -> str: ...

    async def set(self, name: str, value: str) -> None: ...


class InMemoryVariableStore:
    """Dict-backed store. Not shared across processes."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    async def get(self, name: str) -> str:
        return self._values.get(name, "")

    async def set(self, name: str, value: str) -> None:
        self._values[name] = value

    def as_dict(self) -> dict[str, str]:
        return dict(self._values)


class RedisVariableStore:
    """
    Redis-backed variable store.

    Usage:
        store = RedisVariableStore(redis_client, namespace="toplists:var")
        await store.set("Top_1_Material_Name", "Copper")
        await store.get("Top_1_Material_Name")  # -> "Copper"
    """

    def __init__(self, redis, namespace: str = "toplists:var") -> None:
        """
        Args:
            redis:     An async Redis client (redis.asyncio compatible).
            namespace: Key prefix shared by all variables of this service.
        """
        self._redis = redis
        self._namespace = namespace

    def _key(self, name: str) -> str:
        return f"{self._namespace}:{name}"

    async def get(self, name: str) -> str:
        key = self._key(name)
        try:
            raw = await self._redis.get(key)
        except Exception as exc:
            raise VariableStoreError(name, f"GET failed: {exc}") from exc
        if raw is None:
            return ""
        if isinstance(raw, bytes):
            return raw.decode("utf-8")
        return str(raw)

    async def set(self, name: str, value: str) -> None:
        key = self._key(name)
        try:
            await self._redis.set(key, value)
        except Exception as exc:
            raise VariableStoreError(name, f"SET failed: {exc}") from exc
        logger.debug("Variable stored: key=%s", key)
