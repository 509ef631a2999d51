# ==============================================
# DatasetQuery: Query Facade
# ==============================================
#
# PURPOSE:
#   This is the MAIN CLASS that ties the topics together into the
#   single entry point callers use. Everything else is internal.
#
# HOW IT CONNECTS THE TOPICS:
#
#   ┌──────────────────────────────────────────────────────────┐
#   │                      DatasetQuery                        │
#   │                                                          │
#   │  ┌──────────────────────────────────────────────┐        │
#   │  │ TOPIC 1: DOCUMENTS                           │        │
#   │  │  DatasetNamer → canonical name, field check  │        │
#   │  │  TypeClassifier → reject non-JSON documents  │        │
#   │  └──────────────┬───────────────────────────────┘        │
#   │                 │ canonical name                         │
#   │                 ▼                                        │
#   │  ┌──────────────────────────────────────────────┐        │
#   │  │ TOPIC 3: STORAGE                             │        │
#   │  │  RecordStore.save / fetch_all / count / ...  │        │
#   │  └──────────────┬───────────────────────────────┘        │
#   │                 │ records                                │
#   │                 ▼                                        │
#   │  ┌──────────────────────────────────────────────┐        │
#   │  │ TOPIC 2: ANALYSIS                            │        │
#   │  │  group_by / sort_documents / StatsEngine     │        │
#   │  └──────────────────────────────────────────────┘        │
#   └──────────────────────────────────────────────────────────┘
#
#
# CLASS: DatasetQuery
# -------------------
#
#   Constructor:
#   ------------
#   - __init__(store: RecordStore, config: AppConfig | None = None)
#
#   Public Methods:
#   ---------------
#   - insert(dataset_name, document) -> Record
#   - insert_batch(dataset_name, documents) -> list[Record]
#   - get_all(dataset_name) -> list[dict]
#   - group_by(dataset_name, field_name) -> dict[str, list[dict]]
#   - sort_by(dataset_name, field_name, direction="asc") -> list[dict]
#   - stats(dataset_name) -> DatasetStats
#   - list_datasets() -> list[tuple[str, int]]
#   - distinct_values(dataset_name, field_name) -> list
#   - find_by_value(dataset_name, field_name, value) -> list[dict]
#
#   Errors:
#   -------
#   - ValidationError for bad names, blank fields, empty documents.
#     Raised before the store is touched.
#   - StoreError from the store, re-raised with operation / dataset /
#     field filled in.
#
#   The facade keeps no state between calls.
#
# ==============================================

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Tuple

from dataset_engine.config import AppConfig, get_config
from dataset_engine.errors import StoreError, ValidationError
from dataset_engine.documents.dataset_namer import DatasetNamer
from dataset_engine.documents.type_classifier import TypeClassifier
from dataset_engine.analysis import grouping, sorting
from dataset_engine.analysis.field_stats import DatasetStats
from dataset_engine.analysis.sorting import SortDirection
from dataset_engine.analysis.stats_engine import StatsEngine
from dataset_engine.storage.record import Record
from dataset_engine.storage.record_store import RecordStore

logger = logging.getLogger(__name__)


class DatasetQuery:
    """
    Query facade over a record store:
    1. Validate and canonicalize input
    2. Read or write through the store
    3. Group, sort or summarize the documents
    """

    def __init__(self, store: RecordStore, config: Optional[AppConfig] = None):
        """
        Initialize the facade.

        Args:
            store: Connected record store
            config: Application configuration. If None, loads from environment.
        """
        self._config = config or get_config()
        self._store = store
        self._namer = DatasetNamer(self._config.engine.max_name_length)
        self._stats_engine = StatsEngine(self._config.engine.sample_size)

    # ======================================
    # Writes
    # ======================================
    def insert(self, dataset_name: str, document: Dict[str, Any]) -> Record:
        """
        Insert one document into a dataset.

        Args:
            dataset_name: Dataset name in any casing / padding
            document: Non-empty JSON object

        Returns:
            The persisted Record with its id and timestamps
        """
        logger.info("Starting record insertion for dataset: %s", dataset_name)
        name = self._namer.canonicalize(dataset_name, operation="insert")
        self._validate_document(document, name, "insert")

        with self._store_errors("insert", name):
            record = self._store.save(name, document)

        logger.info(
            "Inserted record ID: %s into dataset: %s with %d fields",
            record.id, name, len(document),
        )
        return record

    def insert_batch(self, dataset_name: str, documents: List[Dict[str, Any]]) -> List[Record]:
        """
        Insert several documents into a dataset.

        Every document is validated before anything is written; one bad
        document fails the whole batch. Once the store is called there is
        no atomicity beyond what the store itself provides.

        Args:
            dataset_name: Dataset name in any casing / padding
            documents: Non-empty list of non-empty JSON objects

        Returns:
            The persisted Records, in input order
        """
        logger.info(
            "Starting batch insert of %d records for dataset: %s",
            len(documents) if isinstance(documents, (list, tuple)) else 0, dataset_name,
        )
        name = self._namer.canonicalize(dataset_name, operation="insert_batch")

        if not isinstance(documents, (list, tuple)) or not documents:
            raise ValidationError(
                "Records data cannot be null or empty",
                dataset=name,
                operation="insert_batch",
            )
        for index, document in enumerate(documents):
            self._validate_document(document, name, "insert_batch", index=index)

        with self._store_errors("insert_batch", name):
            records = self._store.save_all(name, list(documents))

        logger.info("Batch inserted %d records into dataset: %s", len(records), name)
        return records

    # ======================================
    # Reads
    # ======================================
    def get_all(self, dataset_name: str) -> List[Dict[str, Any]]:
        """Return every readable document of a dataset in retrieval order."""
        logger.info("Retrieving all records for dataset: %s", dataset_name)
        name = self._namer.canonicalize(dataset_name, operation="get_all")
        documents = self._documents(name, "get_all")
        logger.info("Retrieved %d records for dataset: %s", len(documents), name)
        return documents

    def group_by(self, dataset_name: str, field_name: str) -> grouping.GroupResult:
        """
        Group a dataset's documents by a field.

        Args:
            dataset_name: Dataset name in any casing / padding
            field_name: Exact top-level field name

        Returns:
            Group key -> documents, keys in first-seen order
        """
        logger.info("Grouping records by field '%s' for dataset: %s", field_name, dataset_name)
        name = self._namer.canonicalize(dataset_name, operation="group_by")
        field_name = self._namer.validate_field_name(field_name, dataset=name, operation="group_by")

        documents = self._documents(name, "group_by", field_name)
        if not documents:
            logger.warning("No records found for dataset: %s", name)
            return {}

        groups = grouping.group_by(documents, field_name)
        logger.info(
            "Grouped %d records into %d groups for dataset: %s",
            len(documents), len(groups), name,
        )
        return groups

    def sort_by(self, dataset_name: str, field_name: str, direction: Any = "asc") -> List[Dict[str, Any]]:
        """
        Sort a dataset's documents by a field.

        Uses the store's own ordering when it supports the field, and
        the in-memory comparator otherwise. Both give the same result.

        Args:
            dataset_name: Dataset name in any casing / padding
            field_name: Exact top-level field name
            direction: "asc"/"desc"/"descending" in any case, or SortDirection.
                Unknown tokens mean ascending.

        Returns:
            Documents holding an orderable value for the field, in order
        """
        direction = SortDirection.parse(direction)
        logger.info(
            "Sorting records by field '%s' (%s) for dataset: %s",
            field_name, direction.value, dataset_name,
        )
        name = self._namer.canonicalize(dataset_name, operation="sort_by")
        field_name = self._namer.validate_field_name(field_name, dataset=name, operation="sort_by")

        if self._store.supports_field_ordering(field_name):
            with self._store_errors("sort_by", name, field_name):
                records = self._store.fetch_sorted_by_field(name, field_name, direction)
            result = sorting.order_presorted(_readable(records), field_name)
        else:
            documents = self._documents(name, "sort_by", field_name)
            result = sorting.sort_documents(documents, field_name, direction)

        logger.info(
            "Sorted %d records by field '%s' for dataset: %s",
            len(result), field_name, name,
        )
        return result

    def stats(self, dataset_name: str) -> DatasetStats:
        """
        Summarize a dataset: record count, field names and value kinds.

        USES:
            - Topic 2 (analysis/): StatsEngine.compute()
        """
        logger.info("Generating statistics for dataset: %s", dataset_name)
        name = self._namer.canonicalize(dataset_name, operation="stats")

        with self._store_errors("stats", name):
            stats = self._stats_engine.compute(name, self._store)

        logger.info(
            "Generated stats for dataset: %s (%d records, %d fields)",
            name, stats.total_records, stats.field_count,
        )
        return stats

    def list_datasets(self) -> List[Tuple[str, int]]:
        """Every dataset currently holding records, with its live count."""
        logger.info("Retrieving all datasets with metadata")
        with self._store_errors("list_datasets", None):
            datasets = []
            for name in self._store.list_distinct_dataset_names():
                total = self._store.count(name)
                if total > 0:
                    datasets.append((name, total))

        logger.info("Retrieved %d datasets", len(datasets))
        return datasets

    def distinct_values(self, dataset_name: str, field_name: str) -> List[Any]:
        """Distinct orderable values of a field, ascending."""
        name = self._namer.canonicalize(dataset_name, operation="distinct_values")
        field_name = self._namer.validate_field_name(field_name, dataset=name, operation="distinct_values")
        return sorting.distinct_values(self._documents(name, "distinct_values", field_name), field_name)

    def find_by_value(self, dataset_name: str, field_name: str, value: Any) -> List[Dict[str, Any]]:
        """Documents whose field is JSON-equal to value (null matches explicit nulls)."""
        name = self._namer.canonicalize(dataset_name, operation="find_by_value")
        field_name = self._namer.validate_field_name(field_name, dataset=name, operation="find_by_value")
        if not TypeClassifier.is_json_value(value):
            raise ValidationError(
                "Search value must be a JSON value",
                dataset=name,
                field=field_name,
                operation="find_by_value",
            )
        documents = self._documents(name, "find_by_value", field_name)
        return grouping.find_by_value(documents, field_name, value)

    # ======================================
    # Internal helpers
    # ======================================
    def _documents(self, name: str, operation: str, field_name: Optional[str] = None) -> List[Dict[str, Any]]:
        with self._store_errors(operation, name, field_name):
            records = self._store.fetch_all(name)
        return _readable(records)

    def _validate_document(self, document: Any, name: str, operation: str, index: Optional[int] = None) -> None:
        where = "" if index is None else f" at position {index}"
        if not isinstance(document, dict) or not document:
            raise ValidationError(
                f"Record data{where} cannot be null or empty",
                dataset=name,
                operation=operation,
            )
        if not TypeClassifier.is_json_value(document):
            raise ValidationError(
                f"Record data{where} is not a valid JSON object",
                dataset=name,
                operation=operation,
            )

    @contextmanager
    def _store_errors(self, operation: str, name: Optional[str], field_name: Optional[str] = None):
        try:
            yield
        except StoreError as e:
            e.operation = e.operation or operation
            e.dataset = e.dataset or name
            e.field = e.field or field_name
            logger.error("%s failed: %s", operation, e)
            raise


def _readable(records: List[Record]) -> List[Dict[str, Any]]:
    return [record.document for record in records if record.is_readable]
