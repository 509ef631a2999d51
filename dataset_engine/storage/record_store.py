"""
Record store contract.

Every backend the query engine reads from or writes to implements
RecordStore. The engine only ever passes canonical dataset names.

Required operations:

    save(dataset_name, document)              -> Record
    save_all(dataset_name, documents)         -> list[Record]
    fetch_all(dataset_name)                   -> list[Record]   (ascending id)
    iter_records(dataset_name)                -> Iterator[Record] (same order, lazy)
    count(dataset_name)                       -> int
    list_distinct_dataset_names()             -> list[str]      (sorted)

Optional push-down ordering:

    supports_field_ordering(field_name)       -> bool
    fetch_sorted_by_field(dataset_name, field_name, direction) -> list[Record]

A store that advertises push-down must order by the raw field value
(numbers numerically, strings by code point, false < true) and break
ties by ascending record id, in both directions. Records where the field
is missing or null may be dropped by the store; the engine drops them
anyway.

Backends wrap their driver errors in StoreError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List

from dataset_engine.analysis.sorting import SortDirection
from dataset_engine.storage.record import Record


class RecordStore(ABC):
    """Abstract base class for record storage backends."""

    def connect(self) -> None:
        """Open connections. Stores without connections do nothing."""

    def disconnect(self) -> None:
        """Release connections. Stores without connections do nothing."""

    @abstractmethod
    def save(self, dataset_name: str, document: Dict[str, Any]) -> Record:
        raise NotImplementedError

    @abstractmethod
    def save_all(self, dataset_name: str, documents: List[Dict[str, Any]]) -> List[Record]:
        raise NotImplementedError

    @abstractmethod
    def fetch_all(self, dataset_name: str) -> List[Record]:
        raise NotImplementedError

    def iter_records(self, dataset_name: str) -> Iterator[Record]:
        """
        Yield a dataset's records in fetch_all order.

        Backends that can stream override this so a caller that stops
        early never loads the whole dataset.
        """
        yield from self.fetch_all(dataset_name)

    @abstractmethod
    def count(self, dataset_name: str) -> int:
        raise NotImplementedError

    @abstractmethod
    def list_distinct_dataset_names(self) -> List[str]:
        raise NotImplementedError

    def supports_field_ordering(self, field_name: str) -> bool:
        return False

    def fetch_sorted_by_field(
        self,
        dataset_name: str,
        field_name: str,
        direction: SortDirection,
    ) -> List[Record]:
        raise NotImplementedError(
            f"{type(self).__name__} cannot order records by field"
        )

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
