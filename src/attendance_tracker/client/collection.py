from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Callable, Generic, Mapping, Protocol, Sequence, TypeVar
from uuid import uuid4

from ..common.datetime_utils import parse_iso_date
from ..core.constants import TEMP_ID_PREFIX
from ..core.exceptions import DomainError, NotFoundError
from ..holidays.model import Holiday
from ..holidays.service import HolidayService

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CollectionBackend(Protocol[T]):
    def list(self) -> Sequence[T]:
        raise NotImplementedError

    def create(self, values: Mapping[str, Any]) -> T:
        raise NotImplementedError

    def update(self, item_id: Any, values: Mapping[str, Any]) -> T:
        raise NotImplementedError

    def delete(self, item_id: Any) -> None:
        raise NotImplementedError


def is_temp_id(item_id: Any) -> bool:
    return isinstance(item_id, str) and item_id.startswith(TEMP_ID_PREFIX)


class OptimisticCollection(Generic[T]):
    """Local list that applies create/update/delete before the backend confirms.

    Created items carry a ``temp_`` id until the backend returns the real one.
    Any backend failure restores the list as it was and re-raises.
    """

    def __init__(
        self,
        backend: CollectionBackend[T],
        *,
        id_of: Callable[[T], Any],
        build: Callable[[str, Mapping[str, Any]], T],
        merge: Callable[[T, Mapping[str, Any]], T],
    ):
        self._backend = backend
        self._id_of = id_of
        self._build = build
        self._merge = merge
        self._items: list[T] = []

    @property
    def items(self) -> tuple[T, ...]:
        return tuple(self._items)

    def load(self) -> tuple[T, ...]:
        self._items = list(self._backend.list())
        return self.items

    def _index(self, item_id: Any) -> int:
        for i, item in enumerate(self._items):
            if self._id_of(item) == item_id:
                return i
        raise NotFoundError(f"Item {item_id} not found")

    def create(self, values: Mapping[str, Any]) -> T:
        temp_id = f"{TEMP_ID_PREFIX}{uuid4().hex}"
        placeholder = self._build(temp_id, values)
        self._items.append(placeholder)
        try:
            created = self._backend.create(values)
        except DomainError:
            self._items.remove(placeholder)
            logger.info("Rolled back create of %s", temp_id)
            raise
        self._items[self._index(temp_id)] = created
        return created

    def update(self, item_id: Any, values: Mapping[str, Any]) -> T:
        if is_temp_id(item_id):
            raise NotFoundError("Item is not saved yet")
        i = self._index(item_id)
        previous = self._items[i]
        self._items[i] = self._merge(previous, values)
        try:
            updated = self._backend.update(item_id, values)
        except DomainError:
            self._items[i] = previous
            logger.info("Rolled back update of %s", item_id)
            raise
        self._items[i] = updated
        return updated

    def delete(self, item_id: Any) -> None:
        if is_temp_id(item_id):
            raise NotFoundError("Item is not saved yet")
        i = self._index(item_id)
        removed = self._items.pop(i)
        try:
            self._backend.delete(item_id)
        except DomainError:
            self._items.insert(i, removed)
            logger.info("Rolled back delete of %s", item_id)
            raise


def _holiday_date(value: Any) -> date:
    return value if isinstance(value, date) else parse_iso_date(str(value))


class HolidayCollectionBackend(CollectionBackend[Holiday]):
    def __init__(self, service: HolidayService):
        self._service = service

    def list(self) -> Sequence[Holiday]:
        return self._service.list_holidays()

    def create(self, values: Mapping[str, Any]) -> Holiday:
        return self._service.create(
            holiday_date=_holiday_date(values.get("date")),
            name=values.get("name", ""),
            description=values.get("description"),
        )

    def update(self, item_id: Any, values: Mapping[str, Any]) -> Holiday:
        return self._service.update(item_id, name=values.get("name", ""), description=values.get("description"))

    def delete(self, item_id: Any) -> None:
        self._service.delete(item_id)


def holiday_collection(service: HolidayService) -> OptimisticCollection[Holiday]:
    def build(temp_id: str, values: Mapping[str, Any]) -> Holiday:
        return Holiday(
            holiday_id=temp_id,
            date=_holiday_date(values.get("date")),
            name=values.get("name", ""),
            description=values.get("description"),
        )

    def merge(current: Holiday, values: Mapping[str, Any]) -> Holiday:
        return replace(current, name=values.get("name", current.name),
                       description=values.get("description", current.description))

    return OptimisticCollection(
        HolidayCollectionBackend(service),
        id_of=lambda h: h.holiday_id,
        build=build,
        merge=merge,
    )
