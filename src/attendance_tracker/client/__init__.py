from .collection import CollectionBackend, HolidayCollectionBackend, OptimisticCollection, holiday_collection
from .status_client import ActionResult, AttendanceApi, AttendanceStatusClient

__all__ = [
    "ActionResult",
    "AttendanceApi",
    "AttendanceStatusClient",
    "CollectionBackend",
    "HolidayCollectionBackend",
    "OptimisticCollection",
    "holiday_collection",
]
