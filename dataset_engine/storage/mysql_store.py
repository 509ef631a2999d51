# ==============================================
# MySQLRecordStore
# ==============================================
#
# PURPOSE:
#   Record store on MySQL 8. Every record is one row of a single
#   table; the document itself lives in a JSON column, so no schema
#   is needed per dataset.
#
# TABLE:
# ------
#   dataset_records
#     id           BIGINT AUTO_INCREMENT PRIMARY KEY
#     dataset_name VARCHAR(100) NOT NULL        (indexed)
#     record_data  JSON NOT NULL
#     created_at   DATETIME(6) NOT NULL         (UTC, indexed)
#     updated_at   DATETIME(6) NOT NULL         (UTC)
#
# CLASS: MySQLRecordStore
# -----------------------
#   Stateful, holds the connection to MySQL.
#
#   Constructor:
#   ------------
#   - __init__(host, port, user, password, database)
#       Store connection params. Don't connect yet.
#
#   Methods:
#   --------
#   - connect() -> None
#       Establish connection. Create database and table if missing.
#
#   - disconnect() -> None
#       Close connection cleanly.
#
#   - save / save_all / fetch_all / count / list_distinct_dataset_names
#       Returned records hold the decoded copy of what was written.
#       A document JSON cannot encode rolls the batch back as StoreError.
#
#   - iter_records(dataset_name)
#       Pages through the dataset by id, FETCH_BATCH_SIZE rows at a time.
#
#   - fetch_sorted_by_field(dataset_name, field_name, direction)
#       ORDER BY JSON_EXTRACT(record_data, '$."field"'), then id.
#       MySQL compares JSON numbers numerically, JSON strings by their
#       utf8mb4 bytes (code point order) and false < true, which is
#       what the in-memory comparator does within one value class.
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with MySQLRecordStore(...) as store:` usage.
#
# ==============================================

import json
import logging
from typing import Any, Dict, Iterator, List

import pymysql
import pymysql.cursors

from dataset_engine.analysis.sorting import SortDirection
from dataset_engine.errors import StoreError
from .record import Record, as_utc, decode_document, encode_document, utc_now
from .record_store import RecordStore

logger = logging.getLogger(__name__)

TABLE_NAME = "dataset_records"

CREATE_TABLE = f"""
CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
    id BIGINT NOT NULL AUTO_INCREMENT PRIMARY KEY,
    dataset_name VARCHAR(100) NOT NULL,
    record_data JSON NOT NULL,
    created_at DATETIME(6) NOT NULL,
    updated_at DATETIME(6) NOT NULL,
    INDEX idx_dataset_name (dataset_name),
    INDEX idx_created_at (created_at)
)
"""

SELECT_COLUMNS = "id, dataset_name, record_data, created_at, updated_at"

FETCH_BATCH_SIZE = 500

# Direction keywords can't be bound as parameters
ORDER_KEYWORDS = {
    SortDirection.ASCENDING: "ASC",
    SortDirection.DESCENDING: "DESC",
}


def json_path(field_name: str) -> str:
    """Build a JSON path for one top-level key, quoting it so any name works."""
    escaped = field_name.replace("\\", "\\\\").replace('"', '\\"')
    return f'$."{escaped}"'


class MySQLRecordStore(RecordStore):
    def __init__(self, host, port, user, password, database):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database
        self.connection = None

    def connect(self) -> None:
        # Establish connection to MySQL, create database and table if they don't exist
        try:
            self.connection = pymysql.connect(
                host=self.host,
                port=self.port,
                user=self.user,
                password=self.password,
                charset="utf8mb4",
            )
            cursor = self.connection.cursor()
            cursor.execute(f"CREATE DATABASE IF NOT EXISTS `{self.database}`")
            cursor.execute(f"USE `{self.database}`")
            cursor.execute(CREATE_TABLE)
            self.connection.commit()
            cursor.close()
        except pymysql.MySQLError as e:
            logger.error("Could not connect to MySQL: %s", e)
            raise StoreError(f"Could not connect to MySQL: {e}", operation="connect") from e
        logger.info("Connected to MySQL at %s:%s", self.host, self.port)

    def disconnect(self) -> None:
        # Close connection cleanly
        if self.connection:
            self.connection.close()
            self.connection = None
            logger.info("Disconnected from MySQL.")

    def save(self, dataset_name: str, document: Dict[str, Any]) -> Record:
        return self.save_all(dataset_name, [document])[0]

    def save_all(self, dataset_name: str, documents: List[Dict[str, Any]]) -> List[Record]:
        # One transaction per batch; ids come from AUTO_INCREMENT
        connection = self._connection()
        records = []
        try:
            cursor = connection.cursor()
            for document in documents:
                now = utc_now()
                payload = encode_document(document)
                cursor.execute(
                    f"INSERT INTO {TABLE_NAME} "
                    "(dataset_name, record_data, created_at, updated_at) "
                    "VALUES (%s, %s, %s, %s)",
                    (dataset_name, payload,
                     now.replace(tzinfo=None), now.replace(tzinfo=None)),
                )
                records.append(Record(
                    id=cursor.lastrowid,
                    dataset_name=dataset_name,
                    document=json.loads(payload),
                    created_at=now,
                    updated_at=now,
                ))
            connection.commit()
            cursor.close()
        except (pymysql.MySQLError, ValueError) as e:
            connection.rollback()
            logger.error("MySQL insert failed for dataset '%s': %s", dataset_name, e)
            raise StoreError(
                f"MySQL insert failed: {e}", dataset=dataset_name, operation="save"
            ) from e
        return records

    def fetch_all(self, dataset_name: str) -> List[Record]:
        rows = self._fetch(
            f"SELECT {SELECT_COLUMNS} FROM {TABLE_NAME} WHERE dataset_name = %s ORDER BY id",
            (dataset_name,),
            dataset_name=dataset_name,
            operation="fetch_all",
        )
        return [self._to_record(row) for row in rows]

    def iter_records(self, dataset_name: str) -> Iterator[Record]:
        last_id = 0
        while True:
            rows = self._fetch(
                f"SELECT {SELECT_COLUMNS} FROM {TABLE_NAME} "
                "WHERE dataset_name = %s AND id > %s ORDER BY id LIMIT %s",
                (dataset_name, last_id, FETCH_BATCH_SIZE),
                dataset_name=dataset_name,
                operation="fetch_all",
            )
            for row in rows:
                yield self._to_record(row)
            if len(rows) < FETCH_BATCH_SIZE:
                return
            last_id = int(rows[-1]["id"])

    def supports_field_ordering(self, field_name: str) -> bool:
        return bool(field_name)

    def fetch_sorted_by_field(
        self,
        dataset_name: str,
        field_name: str,
        direction: SortDirection,
    ) -> List[Record]:
        order = ORDER_KEYWORDS[direction]
        path = json_path(field_name)
        query = (
            f"SELECT {SELECT_COLUMNS} FROM {TABLE_NAME} "
            "WHERE dataset_name = %s "
            "AND JSON_TYPE(JSON_EXTRACT(record_data, %s)) <> 'NULL' "
            f"ORDER BY JSON_EXTRACT(record_data, %s) {order}, id ASC"
        )
        rows = self._fetch(
            query,
            (dataset_name, path, path),
            dataset_name=dataset_name,
            field_name=field_name,
            operation="fetch_sorted_by_field",
        )
        return [self._to_record(row) for row in rows]

    def count(self, dataset_name: str) -> int:
        rows = self._fetch(
            f"SELECT COUNT(*) AS total FROM {TABLE_NAME} WHERE dataset_name = %s",
            (dataset_name,),
            dataset_name=dataset_name,
            operation="count",
        )
        return int(rows[0]["total"]) if rows else 0

    def list_distinct_dataset_names(self) -> List[str]:
        rows = self._fetch(
            f"SELECT DISTINCT dataset_name FROM {TABLE_NAME} ORDER BY dataset_name",
            None,
            operation="list_datasets",
        )
        return [row["dataset_name"] for row in rows]

    def _connection(self):
        if self.connection is None:
            raise StoreError("Not connected to MySQL")
        return self.connection

    def _fetch(self, query: str, params, dataset_name=None, field_name=None, operation=None) -> List[dict]:
        # Execute SELECT and return rows as dicts
        connection = self._connection()
        try:
            cursor = connection.cursor(pymysql.cursors.DictCursor)
            if params is not None:
                cursor.execute(query, params)
            else:
                cursor.execute(query)
            results = list(cursor.fetchall())
            cursor.close()
            return results
        except pymysql.MySQLError as e:
            logger.error("MySQL query failed (%s): %s", operation, e)
            raise StoreError(
                f"MySQL query failed: {e}",
                dataset=dataset_name,
                field=field_name,
                operation=operation,
            ) from e

    def _to_record(self, row: Dict[str, Any]) -> Record:
        return Record(
            id=int(row["id"]),
            dataset_name=row["dataset_name"],
            document=decode_document(row["record_data"], row["id"], row["dataset_name"]),
            created_at=as_utc(row["created_at"]),
            updated_at=as_utc(row["updated_at"]),
        )
