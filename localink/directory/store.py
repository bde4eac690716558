from __future__ import annotations

import threading
from typing import Any, Protocol

from pydantic import BaseModel

BUSINESSES = "businesses"
REVIEWS = "reviews"
BOOKMARKS = "bookmarks"
DEALS = "deals"

# collection -> index name -> record attribute
INDEXES: dict[str, dict[str, str]] = {
    BUSINESSES: {},
    REVIEWS: {"by-business": "business_id", "by-user": "user_id"},
    BOOKMARKS: {"by-user": "user_id"},
    DEALS: {"by-business": "business_id"},
}


class UnknownCollection(KeyError):
    pass


class UnknownIndex(KeyError):
    pass


class RecordStore(Protocol):
    """Key/value record store with secondary indexes, keyed by ``record.id``."""

    def get(self, collection: str, key: str) -> Any | None: ...

    def put(self, collection: str, record: BaseModel) -> None: ...

    def delete(self, collection: str, key: str) -> None: ...

    def get_all(self, collection: str) -> list[Any]: ...

    def query_by_index(self, collection: str, index: str, value: Any) -> list[Any]: ...

    def count(self, collection: str) -> int: ...


class InMemoryStore:
    """Dict-backed ``RecordStore``.

    Records keep insertion order; ``put`` on an existing key replaces the
    record in place.
    """

    def __init__(self, indexes: dict[str, dict[str, str]] | None = None) -> None:
        self._indexes = indexes if indexes is not None else INDEXES
        self._data: dict[str, dict[str, Any]] = {name: {} for name in self._indexes}
        self._lock = threading.RLock()

    def _collection(self, collection: str) -> dict[str, Any]:
        try:
            return self._data[collection]
        except KeyError:
            raise UnknownCollection(collection) from None

    def get(self, collection: str, key: str) -> Any | None:
        with self._lock:
            return self._collection(collection).get(key)

    def put(self, collection: str, record: BaseModel) -> None:
        with self._lock:
            self._collection(collection)[record.id] = record

    def delete(self, collection: str, key: str) -> None:
        with self._lock:
            self._collection(collection).pop(key, None)

    def get_all(self, collection: str) -> list[Any]:
        with self._lock:
            return list(self._collection(collection).values())

    def query_by_index(self, collection: str, index: str, value: Any) -> list[Any]:
        with self._lock:
            records = self._collection(collection)
            attribute = self._indexes[collection].get(index)
            if attribute is None:
                raise UnknownIndex(f"{collection}.{index}")
            return [r for r in records.values() if getattr(r, attribute) == value]

    def count(self, collection: str) -> int:
        with self._lock:
            return len(self._collection(collection))
