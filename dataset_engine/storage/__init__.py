# ==============================================
# TOPIC 3: STORAGE (Record Stores)
# ==============================================
#
# This package handles all persistence of records. The query
# engine talks to the RecordStore contract only; the backend is
# picked from configuration by build_store().
#
# Modules:
# --------
# - record.py           → Record dataclass, JSON payload encode/decode
# - record_store.py     → RecordStore abstract base class
# - memory_store.py     → In-process store (tests, throwaway sessions)
# - json_file_store.py  → JSON-lines files on disk (CLI default)
# - mongo_store.py      → MongoDB, with push-down ordering
# - mysql_store.py      → MySQL JSON column, with push-down ordering
#
# ==============================================

from .record import Record
from .record_store import RecordStore
from .memory_store import MemoryRecordStore
from .json_file_store import JsonFileRecordStore
from .mongo_store import MongoRecordStore
from .mysql_store import MySQLRecordStore


def build_store(config) -> RecordStore:
    """
    Create the record store selected by config.engine.store_backend.

    The store is returned unconnected; call connect() or use it as a
    context manager.
    """
    backend = config.engine.store_backend
    if backend == "memory":
        return MemoryRecordStore()
    if backend == "file":
        return JsonFileRecordStore(config.engine.data_dir)
    if backend == "mongo":
        return MongoRecordStore(
            host=config.mongo.host,
            port=config.mongo.port,
            database=config.mongo.database,
            user=config.mongo.user,
            password=config.mongo.password
        )
    if backend == "mysql":
        return MySQLRecordStore(
            host=config.mysql.host,
            port=config.mysql.port,
            user=config.mysql.user,
            password=config.mysql.password,
            database=config.mysql.database
        )
    raise ValueError(f"Unknown store backend: {backend}")


__all__ = [
    "Record",
    "RecordStore",
    "MemoryRecordStore",
    "JsonFileRecordStore",
    "MongoRecordStore",
    "MySQLRecordStore",
    "build_store",
]
