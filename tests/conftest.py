# ==============================================
# Pytest Configuration and Fixtures
# ==============================================
#
# This file contains shared fixtures for all tests.
#
# FIXTURES:
# ---------
# - config            → AppConfig using the in-memory store
# - memory_store      → Fresh MemoryRecordStore
# - file_store        → JsonFileRecordStore under tmp_path
# - ordering_store    → MemoryRecordStore that also orders records itself,
#                       the way a database would (push-down path)
# - query             → DatasetQuery over memory_store
# - sample_records    → Heterogeneous employee documents
#
# NOTES:
# ------
# - No test needs a running MySQL or MongoDB server; the database
#   stores are tested against mocked drivers.
# ==============================================

import json

import pytest

from dataset_engine.config import AppConfig, EngineConfig
from dataset_engine.dataset_query import DatasetQuery
from dataset_engine.documents.type_classifier import JsonKind, TypeClassifier
from dataset_engine.storage import JsonFileRecordStore, MemoryRecordStore


class OrderingMemoryStore(MemoryRecordStore):
    """
    Memory store with push-down ordering.

    Orders like a database would: by kind rank first, then by value,
    ties by id. It does NOT exclude mixed kinds; the engine must do that.
    """

    KIND_RANK = {
        JsonKind.INTEGER: 1,
        JsonKind.FLOAT: 1,
        JsonKind.STRING: 2,
        JsonKind.OBJECT: 3,
        JsonKind.ARRAY: 4,
        JsonKind.BOOLEAN: 5,
    }

    def __init__(self):
        super().__init__()
        self.pushdown_calls = 0

    def supports_field_ordering(self, field_name):
        return True

    def fetch_sorted_by_field(self, dataset_name, field_name, direction):
        self.pushdown_calls += 1
        records = [
            record for record in self.fetch_all(dataset_name)
            if record.document is not None and record.document.get(field_name) is not None
        ]

        def key(record):
            value = record.document[field_name]
            kind = TypeClassifier.classify(value)
            if kind.is_container:
                value = json.dumps(value, sort_keys=True)
            return self.KIND_RANK[kind], value

        return sorted(records, key=key, reverse=direction.is_descending)


@pytest.fixture
def config():
    """Configuration that never touches a real backend."""
    return AppConfig(engine=EngineConfig(store_backend="memory"))


@pytest.fixture
def memory_store():
    return MemoryRecordStore()


@pytest.fixture
def file_store(tmp_path):
    store = JsonFileRecordStore(str(tmp_path / "data"))
    store.connect()
    return store


@pytest.fixture
def ordering_store():
    return OrderingMemoryStore()


@pytest.fixture
def query(memory_store, config):
    return DatasetQuery(memory_store, config)


@pytest.fixture
def sample_records():
    """Employee records with drifting fields and types."""
    return [
        {"name": "Asha", "dept": "Eng", "age": 31, "salary": 120000.5, "remote": True},
        {"name": "Ben", "dept": "Mktg", "age": 27, "skills": ["seo", "copy"]},
        {"name": "Chen", "dept": "Eng", "age": "unknown", "manager": None},
        {"name": "Dara", "dept": None, "age": 45, "address": {"city": "Oslo"}},
        {"name": "Eli", "age": 27, "remote": False},
    ]
