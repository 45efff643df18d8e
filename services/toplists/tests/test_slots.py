"""
Tests for services.toplists.slots

Covers:
  1. Slot naming Top_{i}_{Kind}_Name
  2. publish writes all TOP_N slots in order, padding with ""
  3. clear writes TOP_N empty strings
  4. A failing write is logged and does not stop the others
  5. Idempotence and full overwrite of stale values
"""

import logging
from unittest.mock import AsyncMock, call

import pytest

from services.toplists.collaborators.variables import InMemoryVariableStore
from services.toplists.errors import VariableStoreError
from services.toplists.extraction.extractor import TOP_N, MatchEntry
from services.toplists.slots import SlotPublisher, slot_name, slot_names


def _ranked(*labels: str) -> list[MatchEntry]:
    return [MatchEntry(label, float(len(labels) - i)) for i, label in enumerate(labels)]


class TestSlotNames:
    def test_slot_name(self):
        assert slot_name("Material", 1) == "Top_1_Material_Name"
        assert slot_name("Customer", 5) == "Top_5_Customer_Name"

    def test_slot_names_cover_top_n(self):
        names = slot_names("Material")
        assert len(names) == TOP_N
        assert names[0] == "Top_1_Material_Name"
        assert names[-1] == f"Top_{TOP_N}_Material_Name"


@pytest.mark.asyncio
class TestPublish:
    async def test_pads_missing_ranks_with_empty_string(self):
        store = InMemoryVariableStore()
        report = await SlotPublisher(store).publish("Material", _ranked("Y", "X"))

        assert store.as_dict() == {
            "Top_1_Material_Name": "Y",
            "Top_2_Material_Name": "X",
            "Top_3_Material_Name": "",
            "Top_4_Material_Name": "",
            "Top_5_Material_Name": "",
        }
        assert report.ok
        assert len(report.written) == TOP_N

    async def test_writes_in_slot_order(self):
        store = AsyncMock()
        await SlotPublisher(store).publish("Customer", _ranked("a", "b", "c", "d", "e"))

        assert store.set.await_args_list == [
            call("Top_1_Customer_Name", "a"),
            call("Top_2_Customer_Name", "b"),
            call("Top_3_Customer_Name", "c"),
            call("Top_4_Customer_Name", "d"),
            call("Top_5_Customer_Name", "e"),
        ]

    async def test_clear_writes_every_slot(self):
        store = InMemoryVariableStore({f"Top_{i}_Customer_Name": f"old{i}" for i in range(1, 6)})
        await SlotPublisher(store).clear("Customer")
        assert set(store.as_dict().values()) == {""}
        assert len(store.as_dict()) == TOP_N

    async def test_overwrites_stale_values(self):
        store = InMemoryVariableStore()
        publisher = SlotPublisher(store)
        await publisher.publish("Material", _ranked("a", "b", "c", "d", "e"))
        await publisher.publish("Material", _ranked("z"))

        assert await publisher.snapshot("Material") == {
            "Top_1_Material_Name": "z",
            "Top_2_Material_Name": "",
            "Top_3_Material_Name": "",
            "Top_4_Material_Name": "",
            "Top_5_Material_Name": "",
        }

    async def test_idempotent(self):
        store = InMemoryVariableStore()
        publisher = SlotPublisher(store)
        ranked = _ranked("a", "b", "c")
        await publisher.publish("Material", ranked)
        first = store.as_dict()
        await publisher.publish("Material", ranked)
        assert store.as_dict() == first

    async def test_does_not_touch_other_kinds(self):
        store = InMemoryVariableStore({"Top_1_Customer_Name": "keep"})
        await SlotPublisher(store).publish("Material", _ranked("a"))
        assert store.as_dict()["Top_1_Customer_Name"] == "keep"

    async def test_failed_write_does_not_abort_remaining(self, caplog):
        store = AsyncMock()

        async def _set(name, value):
            if name == "Top_2_Material_Name":
                raise VariableStoreError(name, "SET failed: boom")

        store.set = AsyncMock(side_effect=_set)

        with caplog.at_level(logging.WARNING):
            report = await SlotPublisher(store).publish("Material", _ranked("a", "b", "c"))

        assert store.set.await_count == TOP_N
        assert report.failed == ["Top_2_Material_Name"]
        assert "Top_2_Material_Name" not in report.written
        assert len(report.written) == TOP_N - 1
        assert not report.ok
        assert "Slot write failed" in caplog.text


@pytest.mark.asyncio
class TestSnapshot:
    async def test_missing_slots_read_as_empty(self):
        store = InMemoryVariableStore({"Top_1_Material_Name": "x"})
        snapshot = await SlotPublisher(store).snapshot("Material")
        assert snapshot["Top_1_Material_Name"] == "x"
        assert snapshot["Top_5_Material_Name"] == ""

    async def test_none_from_store_reads_as_empty(self):
        store = AsyncMock()
        store.get = AsyncMock(return_value=None)
        snapshot = await SlotPublisher(store).snapshot("Customer")
        assert set(snapshot.values()) == {""}
