"""
SlotPublisher - writes a ranked top-N list into the host's named slots.

Slot names: Top_{i}_{Kind}_Name for i in 1..TOP_N, e.g. Top_3_Customer_Name.

Every publish writes all TOP_N slots, padding with "" past the end of the
ranking. Clearing is a publish of an empty ranking. Nothing is diffed
against the previous state, so repeating a publish is harmless.

A failed slot write is logged and skipped; the remaining slots are still
written.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from services.toplists.collaborators.variables import VariableStore
from services.toplists.extraction.extractor import TOP_N, MatchEntry

logger = logging.getLogger(__name__)


def slot_name(kind: str, index: int) -> str:
    """Top_{index}_{kind}_Name, index is 1-based."""
    return f"Top_{index}_{kind}_Name"


def slot_names(kind: str, size: int = TOP_N) -> list[str]:
    return [slot_name(kind, i) for i in range(1, size + 1)]


@dataclass
class PublishReport:
    kind: str
    written: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class SlotPublisher:
    """
    Usage:
        publisher = SlotPublisher(store)
        await publisher.publish("Material", ranked)
        await publisher.clear("Customer")
    """

    def __init__(self, store: VariableStore, size: int = TOP_N) -> None:
        self._store = store
        self._size = size

    async def publish(self, kind: str, ranked: Sequence[MatchEntry]) -> PublishReport:
        """Write all slots for `kind` in order 1..size."""
        report = PublishReport(kind=kind)

        for index, name in enumerate(slot_names(kind, self._size)):
            value = ranked[index].label if index < len(ranked) else ""
            try:
                await self._store.set(name, value)
            except Exception:
                logger.exception("Slot write failed: %s", name)
                report.failed.append(name)
                continue
            report.written.append(name)

        if report.failed:
            logger.warning(
                "Published %s slots with %d failed writes: %s",
                kind,
                len(report.failed),
                report.failed,
            )
        return report

    async def clear(self, kind: str) -> PublishReport:
        return await self.publish(kind, [])

    async def snapshot(self, kind: str) -> dict[str, str]:
        """Read back what is currently stored in every slot for `kind`."""
        values: dict[str, str] = {}
        for name in slot_names(kind, self._size):
            values[name] = await self._store.get(name) or ""
        return values
