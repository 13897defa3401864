from __future__ import annotations

from datetime import date

import pytest

from attendance_tracker.client import HolidayCollectionBackend, OptimisticCollection, holiday_collection
from attendance_tracker.core.exceptions import StoreError, ValidationError
from attendance_tracker.holidays.model import Holiday
from attendance_tracker.holidays.service import HolidayService

from fakes import InMemoryHolidays


def _holidays() -> InMemoryHolidays:
    return InMemoryHolidays([
        Holiday(holiday_id=1, date=date(2024, 1, 1), name="New Year"),
        Holiday(holiday_id=2, date=date(2024, 5, 1), name="Labour Day"),
    ])


class PeekingBackend(HolidayCollectionBackend):
    """Captures the local list at the moment the backend is called."""

    collection = None
    seen = None

    def create(self, values):
        self.seen = self.collection.items
        return super().create(values)


def test_create_shows_temp_placeholder_then_swaps_in_server_id():
    backend = PeekingBackend(HolidayService(_holidays()))
    collection = OptimisticCollection(
        backend,
        id_of=lambda h: h.holiday_id,
        build=lambda temp_id, v: Holiday(holiday_id=temp_id, date=v["date"], name=v["name"]),
        merge=lambda h, v: h,
    )
    backend.collection = collection
    collection.load()

    created = collection.create({"date": date(2024, 9, 2), "name": "National Day"})

    assert str(backend.seen[-1].holiday_id).startswith("temp_")
    assert created.holiday_id == 3
    assert [h.holiday_id for h in collection.items] == [1, 2, 3]


def test_failed_create_is_rolled_back():
    collection = holiday_collection(HolidayService(_holidays()))
    collection.load()

    with pytest.raises(ValidationError):
        collection.create({"date": "2024-01-01", "name": "Duplicate"})

    assert [h.holiday_id for h in collection.items] == [1, 2]


def test_failed_delete_restores_item_in_place():
    repo = _holidays()
    collection = holiday_collection(HolidayService(repo))
    collection.load()
    repo.fail_writes = True

    with pytest.raises(StoreError):
        collection.delete(1)

    assert [h.holiday_id for h in collection.items] == [1, 2]


def test_update_applies_and_failed_update_restores():
    repo = _holidays()
    collection = holiday_collection(HolidayService(repo))
    collection.load()

    collection.update(2, {"name": "May Day"})
    assert collection.items[1].name == "May Day"

    repo.fail_writes = True
    with pytest.raises(StoreError):
        collection.update(2, {"name": "Workers Day"})
    assert collection.items[1].name == "May Day"


def test_delete_removes_item():
    collection = holiday_collection(HolidayService(_holidays()))
    collection.load()

    collection.delete(1)

    assert [h.name for h in collection.items] == ["Labour Day"]
