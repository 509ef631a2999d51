# ==============================================
# MongoRecordStore
# ==============================================
#
# PURPOSE:
#   Record store on MongoDB. Documents are stored as native BSON
#   sub-documents, so nested objects and arrays keep their structure.
#
# COLLECTIONS:
# ------------
#   records   → {_id: <int id>, dataset_name, document, created_at, updated_at}
#               indexes: dataset_name, (dataset_name, _id)
#   counters  → {_id: "records", seq: <last id handed out>}
#
# CLASS: MongoRecordStore
# -----------------------
#   Stateful, holds the connection to MongoDB.
#
#   Constructor:
#   ------------
#   - __init__(host, port, database, user=None, password=None)
#       Store connection params. Don't connect yet.
#
#   Methods:
#   --------
#   - connect() / disconnect()
#   - ensure_indexes() -> None
#   - save / save_all / fetch_all / count / list_distinct_dataset_names
#       Stored documents are decoded copies of the caller's; values BSON
#       cannot hold (ints beyond 64 bits, NaN) surface as StoreError.
#   - iter_records(dataset_name)
#       Streams the _id-ordered cursor; closing the generator closes it.
#   - supports_field_ordering(field_name) -> bool
#       True for plain top-level names. Names containing "." or
#       starting with "$" would be read as paths/operators by the
#       query language, so those fall back to in-memory sorting.
#   - fetch_sorted_by_field(dataset_name, field_name, direction)
#       Server-side sort on document.<field>, ties broken by _id.
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with MongoRecordStore(...) as store:` usage.
#
# ==============================================

import json
import logging
from typing import Any, Dict, Iterator, List

from bson.errors import BSONError
import pymongo
from pymongo import MongoClient as PyMongoClient
from pymongo import ReturnDocument
from pymongo.errors import ConnectionFailure, OperationFailure, PyMongoError

from dataset_engine.analysis.sorting import SortDirection
from dataset_engine.errors import StoreError
from .record import Record, as_utc, encode_document, utc_now
from .record_store import RecordStore

logger = logging.getLogger(__name__)

RECORDS_COLLECTION = "records"
COUNTERS_COLLECTION = "counters"


class MongoRecordStore(RecordStore):
    def __init__(self, host, port, database, user=None, password=None):
        # Store connection params. Don't connect yet.
        self.host = host
        self.port = port
        self.database = database
        self.user = user
        self.password = password
        self.client = None  # Will hold the actual MongoDB client connection

    def connect(self):
        # Establish connection to MongoDB.
        if self.user and self.password:
            uri = f"mongodb://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"
        else:
            uri = f"mongodb://{self.host}:{self.port}/{self.database}"
        try:
            self.client = PyMongoClient(uri, tz_aware=True)
            # Test connection
            self.client.admin.command('ping')
            logger.info("Connected to MongoDB at %s:%s", self.host, self.port)
        except ConnectionFailure as e:
            logger.error("Could not connect to MongoDB: %s", e)
            raise StoreError(f"Could not connect to MongoDB: {e}", operation="connect") from e
        except OperationFailure as e:
            logger.error("MongoDB authentication failed: %s", e)
            raise StoreError(f"Authentication failed: {e}", operation="connect") from e
        self.ensure_indexes()

    def disconnect(self):
        # Close connection.
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB.")
            self.client = None

    def ensure_indexes(self):
        try:
            records = self._records()
            records.create_index("dataset_name")
            records.create_index([("dataset_name", pymongo.ASCENDING), ("_id", pymongo.ASCENDING)])
        except PyMongoError as e:
            raise StoreError(f"Failed to create indexes: {e}", operation="connect") from e

    def save(self, dataset_name: str, document: Dict[str, Any]) -> Record:
        return self.save_all(dataset_name, [document])[0]

    def save_all(self, dataset_name: str, documents: List[Dict[str, Any]]) -> List[Record]:
        try:
            last_id = self._reserve_ids(len(documents))
            first_id = last_id - len(documents) + 1
            # BSON dates keep milliseconds only
            now = utc_now()
            now = now.replace(microsecond=now.microsecond // 1000 * 1000)
            rows = [
                {
                    "_id": first_id + offset,
                    "dataset_name": dataset_name,
                    "document": json.loads(encode_document(document)),
                    "created_at": now,
                    "updated_at": now,
                }
                for offset, document in enumerate(documents)
            ]
            self._records().insert_many(rows, ordered=True)
        except (PyMongoError, BSONError, OverflowError, ValueError) as e:
            raise StoreError(
                f"MongoDB insert failed: {e}", dataset=dataset_name, operation="save"
            ) from e

        logger.debug("Inserted %d documents into '%s'", len(rows), dataset_name)
        return [self._to_record(row) for row in rows]

    def fetch_all(self, dataset_name: str) -> List[Record]:
        try:
            cursor = self._records().find({"dataset_name": dataset_name}).sort("_id", pymongo.ASCENDING)
            return [self._to_record(row) for row in cursor]
        except PyMongoError as e:
            raise StoreError(
                f"MongoDB query failed: {e}", dataset=dataset_name, operation="fetch_all"
            ) from e

    def iter_records(self, dataset_name: str) -> Iterator[Record]:
        try:
            cursor = self._records().find({"dataset_name": dataset_name}).sort("_id", pymongo.ASCENDING)
            try:
                for row in cursor:
                    yield self._to_record(row)
            finally:
                cursor.close()
        except PyMongoError as e:
            raise StoreError(
                f"MongoDB query failed: {e}", dataset=dataset_name, operation="fetch_all"
            ) from e

    def supports_field_ordering(self, field_name: str) -> bool:
        return bool(field_name) and "." not in field_name and not field_name.startswith("$")

    def fetch_sorted_by_field(
        self,
        dataset_name: str,
        field_name: str,
        direction: SortDirection,
    ) -> List[Record]:
        path = f"document.{field_name}"
        order = pymongo.DESCENDING if direction.is_descending else pymongo.ASCENDING
        query = {"dataset_name": dataset_name, path: {"$exists": True, "$ne": None}}
        try:
            cursor = self._records().find(query).sort([(path, order), ("_id", pymongo.ASCENDING)])
            return [self._to_record(row) for row in cursor]
        except PyMongoError as e:
            raise StoreError(
                f"MongoDB sorted query failed: {e}",
                dataset=dataset_name,
                field=field_name,
                operation="fetch_sorted_by_field",
            ) from e

    def count(self, dataset_name: str) -> int:
        try:
            return self._records().count_documents({"dataset_name": dataset_name})
        except PyMongoError as e:
            raise StoreError(
                f"MongoDB count failed: {e}", dataset=dataset_name, operation="count"
            ) from e

    def list_distinct_dataset_names(self) -> List[str]:
        try:
            return sorted(self._records().distinct("dataset_name"))
        except PyMongoError as e:
            raise StoreError(f"MongoDB distinct failed: {e}", operation="list_datasets") from e

    def _database(self):
        if not self.client:
            raise StoreError("Not connected to MongoDB.")
        return self.client[self.database]

    def _records(self):
        return self._database()[RECORDS_COLLECTION]

    def _reserve_ids(self, count: int) -> int:
        # Atomically bump the counter and return the last id reserved
        counters = self._database()[COUNTERS_COLLECTION]
        counter = counters.find_one_and_update(
            {"_id": RECORDS_COLLECTION},
            {"$inc": {"seq": count}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return counter["seq"]

    def _to_record(self, row: Dict[str, Any]) -> Record:
        document = row.get("document")
        if not isinstance(document, dict):
            logger.warning(
                "Record %s in dataset '%s' has no readable document",
                row.get("_id"), row.get("dataset_name"),
            )
            document = None
        return Record(
            id=row["_id"],
            dataset_name=row["dataset_name"],
            document=dict(document) if document is not None else None,
            created_at=as_utc(row["created_at"]),
            updated_at=as_utc(row["updated_at"]),
        )
