# ==============================================
# MemoryRecordStore
# ==============================================
#
# PURPOSE:
#   In-process record store. Used by the test suite and for
#   throwaway sessions (STORE_BACKEND=memory).
#
# BEHAVIOUR:
#   - Ids come from one counter shared by all datasets, starting at 1.
#   - Documents are deep-copied on the way in and on the way out, so
#     callers can never mutate stored payloads.
#   - No push-down ordering: the engine sorts in memory.
#
# ==============================================

import copy
import threading
from typing import Any, Dict, List

from .record import Record, utc_now
from .record_store import RecordStore


class MemoryRecordStore(RecordStore):

    def __init__(self):
        self._datasets: Dict[str, List[Record]] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def save(self, dataset_name: str, document: Dict[str, Any]) -> Record:
        return self.save_all(dataset_name, [document])[0]

    def save_all(self, dataset_name: str, documents: List[Dict[str, Any]]) -> List[Record]:
        saved = []
        with self._lock:
            records = self._datasets.setdefault(dataset_name, [])
            for document in documents:
                now = utc_now()
                record = Record(
                    id=self._next_id,
                    dataset_name=dataset_name,
                    document=copy.deepcopy(document),
                    created_at=now,
                    updated_at=now,
                )
                self._next_id += 1
                records.append(record)
                saved.append(self._copy(record))
        return saved

    def fetch_all(self, dataset_name: str) -> List[Record]:
        with self._lock:
            return [self._copy(record) for record in self._datasets.get(dataset_name, [])]

    def count(self, dataset_name: str) -> int:
        with self._lock:
            return len(self._datasets.get(dataset_name, []))

    def list_distinct_dataset_names(self) -> List[str]:
        with self._lock:
            return sorted(name for name, records in self._datasets.items() if records)

    def _copy(self, record: Record) -> Record:
        return Record(
            id=record.id,
            dataset_name=record.dataset_name,
            document=copy.deepcopy(record.document),
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
