import hashlib
import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from dataset_engine.errors import StoreError
from .record import Record, decode_document, encode_document, utc_now
from .record_store import RecordStore

logger = logging.getLogger(__name__)


# ==============================================
# JsonFileRecordStore
# ==============================================
#
# PURPOSE:
#   Persist records to plain files so that datasets survive process
#   restarts without a database server (STORE_BACKEND=file, the CLI
#   default).
#
# FILE STRUCTURE:
# ---------------
#   data/
#   ├── state.json              → {"next_id": 42, "version": "1.0"}
#   └── datasets/
#       ├── 3f9a...c2.jsonl      → one record per line
#       └── 71be...0d.jsonl      → file name = sha256 of the dataset name,
#                                   so any accepted name fits the file
#                                   system; the name itself is in each row
#
#   Each line:
#     {"id": 1, "dataset_name": "sales", "record_data": "{...}",
#      "created_at": "2026-01-01T00:00:00+00:00", "updated_at": "..."}
#
#   record_data holds the document as JSON text. A damaged payload
#   yields document=None for that record; the rest of the file still
#   loads.
#
class JsonFileRecordStore(RecordStore):
    """
    Record store backed by one JSON-lines file per dataset.
    """

    def __init__(self, storage_dir: str = "data/"):
        """
        Initialize the file store.

        Args:
            storage_dir: Directory to store dataset files in
        """
        self.storage_dir = Path(storage_dir)
        self.datasets_dir = self.storage_dir / "datasets"
        self.state_file = self.storage_dir / "state.json"
        self._lock = threading.Lock()

    def connect(self) -> None:
        try:
            self.datasets_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(
                f"Cannot create storage directory {self.datasets_dir}: {e}",
                operation="connect",
            ) from e

#   SAVING:
#   - save(dataset_name, document) -> Record
#   - save_all(dataset_name, documents) -> list[Record]
#       Reserve ids in state.json, then append lines to the dataset file.
#
    def save(self, dataset_name: str, document: Dict[str, Any]) -> Record:
        return self.save_all(dataset_name, [document])[0]

    def save_all(self, dataset_name: str, documents: List[Dict[str, Any]]) -> List[Record]:
        with self._lock:
            try:
                self.connect()
                first_id = self._reserve_ids(len(documents))
                records = []
                lines = []
                for offset, document in enumerate(documents):
                    now = utc_now()
                    record = Record(
                        id=first_id + offset,
                        dataset_name=dataset_name,
                        document=json.loads(encode_document(document)),
                        created_at=now,
                        updated_at=now,
                    )
                    records.append(record)
                    lines.append(self._to_line(record, document))

                with open(self._dataset_file(dataset_name), "a", encoding="utf-8") as f:
                    f.writelines(lines)
            except (OSError, ValueError) as e:
                raise StoreError(
                    f"Failed to write records: {e}",
                    dataset=dataset_name,
                    operation="save",
                ) from e

        logger.debug("Saved %d records to %s", len(records), self._dataset_file(dataset_name))
        return records

#   LOADING:
#   - iter_records(dataset_name) -> Iterator[Record]
#       Lazy, one line at a time, in file (= id) order.
#   - fetch_all(dataset_name) -> list[Record]
#   - count(dataset_name) -> int
#   - list_distinct_dataset_names() -> list[str]
#       Names are read back from the rows, not from file names.
#
    def iter_records(self, dataset_name: str) -> Iterator[Record]:
        path = self._dataset_file(dataset_name)
        if not path.exists():
            return

        try:
            with open(path, "r", encoding="utf-8") as f:
                for line_number, line in enumerate(f, start=1):
                    if not line.strip():
                        continue
                    record = self._from_line(line, dataset_name, line_number)
                    if record is not None:
                        yield record
        except OSError as e:
            raise StoreError(
                f"Failed to read {path}: {e}", dataset=dataset_name, operation="fetch_all"
            ) from e

    def fetch_all(self, dataset_name: str) -> List[Record]:
        return sorted(self.iter_records(dataset_name), key=lambda record: record.id)

    def count(self, dataset_name: str) -> int:
        path = self._dataset_file(dataset_name)
        if not path.exists():
            return 0
        try:
            with open(path, "r", encoding="utf-8") as f:
                return sum(1 for line in f if line.strip())
        except OSError as e:
            raise StoreError(
                f"Failed to read {path}: {e}", dataset=dataset_name, operation="count"
            ) from e

    def list_distinct_dataset_names(self) -> List[str]:
        if not self.datasets_dir.exists():
            return []
        names = set()
        for path in self.datasets_dir.glob("*.jsonl"):
            name = self._stored_name(path)
            if name is not None:
                names.add(name)
        return sorted(names)

#   UTILITY:
#   - exists() -> bool
#       Check if any dataset has been written yet.
#
#   - clear() -> None
#       Delete every dataset file and the id counter (for testing or reset).
#
    def exists(self) -> bool:
        return self.state_file.exists()

    def clear(self) -> None:
        with self._lock:
            if self.datasets_dir.exists():
                for path in self.datasets_dir.glob("*.jsonl"):
                    path.unlink()
            if self.state_file.exists():
                self.state_file.unlink()
        logger.info("Cleared all datasets under %s", self.storage_dir)

    # ======================================
    # Internal helpers
    # ======================================
    def _dataset_file(self, dataset_name: str) -> Path:
        digest = hashlib.sha256(dataset_name.encode("utf-8")).hexdigest()
        return self.datasets_dir / f"{digest}.jsonl"

    def _stored_name(self, path: Path) -> Optional[str]:
        """Dataset name from the first parseable row, None for an empty file."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    if not line.strip():
                        continue
                    try:
                        name = json.loads(line)["dataset_name"]
                    except (ValueError, KeyError, TypeError):
                        continue
                    if isinstance(name, str):
                        return name
        except OSError as e:
            raise StoreError(
                f"Failed to read {path}: {e}", operation="list_datasets"
            ) from e
        return None

    def _reserve_ids(self, count: int) -> int:
        state = self._load_state()
        first_id = state["next_id"]
        state["next_id"] = first_id + count
        with open(self.state_file, "w", encoding="utf-8") as f:
            json.dump(state, f, indent=2)
        return first_id

    def _load_state(self) -> Dict[str, Any]:
        if not self.state_file.exists():
            return {"next_id": 1, "version": "1.0"}
        with open(self.state_file, "r", encoding="utf-8") as f:
            return json.load(f)

    def _to_line(self, record: Record, document: Dict[str, Any]) -> str:
        row = {
            "id": record.id,
            "dataset_name": record.dataset_name,
            "record_data": encode_document(document),
            "created_at": record.created_at.isoformat(),
            "updated_at": record.updated_at.isoformat(),
        }
        return json.dumps(row, ensure_ascii=False) + "\n"

    def _from_line(self, line: str, dataset_name: str, line_number: int) -> Optional[Record]:
        try:
            row = json.loads(line)
            record_id = int(row["id"])
            created_at = datetime.fromisoformat(row["created_at"])
            updated_at = datetime.fromisoformat(row["updated_at"])
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(
                "Skipping unreadable line %d in dataset '%s': %s",
                line_number, dataset_name, e,
            )
            return None

        return Record(
            id=record_id,
            dataset_name=row.get("dataset_name", dataset_name),
            document=decode_document(row.get("record_data"), record_id, dataset_name),
            created_at=created_at,
            updated_at=updated_at,
        )
