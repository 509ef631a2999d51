# ==============================================
# Tests for Stats Engine
# ==============================================

from datetime import datetime, timedelta, timezone

import pytest

from dataset_engine.analysis.field_stats import DatasetStats
from dataset_engine.analysis.stats_engine import StatsEngine
from dataset_engine.storage import MemoryRecordStore
from dataset_engine.storage.record import Record

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


def make_record(record_id, document):
    created_at = BASE_TIME + timedelta(seconds=record_id)
    return Record(
        id=record_id,
        dataset_name="sales",
        document=document,
        created_at=created_at,
        updated_at=created_at,
    )


class TestSummarize:
    """Tests for folding sampled records into DatasetStats."""

    @pytest.fixture
    def engine(self):
        return StatsEngine()

    def test_field_types_keep_every_kind(self, engine):
        records = [
            make_record(1, {"age": 31, "name": "Asha", "tags": ["a"]}),
            make_record(2, {"age": "unknown", "dept": None}),
            make_record(3, {"age": 27.5, "address": {"city": "Oslo"}, "remote": True}),
        ]
        stats = engine.summarize("sales", 3, records)

        assert stats.total_records == 3
        assert stats.sampled_records == 3
        assert stats.available_fields == {"age", "name", "tags", "dept", "address", "remote"}
        assert stats.field_types["age"] == {"integer", "string", "float"}
        assert stats.field_types["dept"] == {"null"}
        assert stats.field_types["tags"] == {"array"}
        assert stats.field_types["address"] == {"object"}
        assert stats.field_types["remote"] == {"boolean"}

    def test_sample_is_capped(self, engine):
        records = [make_record(i, {"n": i}) for i in range(1, 151)]
        records[119] = make_record(120, {"n": 120, "late": True})

        stats = engine.summarize("sales", 150, records)

        assert stats.total_records == 150
        assert stats.sampled_records == 100
        assert "late" not in stats.available_fields

    def test_unreadable_records_do_not_use_up_the_sample(self, engine):
        records = [make_record(i, None) for i in range(1, 11)]
        records += [make_record(i, {"n": i}) for i in range(11, 110)]
        records.append(make_record(110, {"n": 110, "tail": "x"}))

        stats = engine.summarize("sales", 110, records)

        assert stats.sampled_records == 100
        assert "tail" in stats.available_fields

    def test_custom_sample_size(self):
        records = [make_record(1, {"a": 1}), make_record(2, {"b": 2})]
        stats = StatsEngine(sample_size=1).summarize("sales", 2, records)
        assert stats.available_fields == {"a"}

    def test_all_unreadable(self, engine):
        records = [make_record(1, None), make_record(2, None)]
        stats = engine.summarize("sales", 2, records)

        assert stats.exists
        assert stats.to_dict() == {"dataset": "sales", "totalRecords": 2, "exists": True}

    def test_time_range(self, engine):
        records = [make_record(5, {"a": 1}), make_record(2, {"a": 2}), make_record(9, {"a": 3})]
        stats = engine.summarize("sales", 3, records)
        assert stats.first_record_at == BASE_TIME + timedelta(seconds=2)
        assert stats.last_record_at == BASE_TIME + timedelta(seconds=9)


class CountingStore(MemoryRecordStore):
    """Memory store that streams records and refuses full loads."""

    def __init__(self):
        super().__init__()
        self.yielded = 0
        self.closed = False

    def fetch_all(self, dataset_name):
        raise AssertionError("stats must not load the whole dataset")

    def iter_records(self, dataset_name):
        try:
            for record in super().fetch_all(dataset_name):
                self.yielded += 1
                yield record
        finally:
            self.closed = True


class TestCompute:
    """Tests for StatsEngine.compute() against a store."""

    def test_empty_dataset(self, memory_store):
        stats = StatsEngine().compute("ghost", memory_store)
        assert stats.to_dict() == {"dataset": "ghost", "totalRecords": 0, "exists": False}

    def test_calls_share_nothing(self, memory_store):
        memory_store.save("a", {"x": 1})
        memory_store.save("b", {"y": "z"})
        engine = StatsEngine()

        first = engine.compute("a", memory_store)
        second = engine.compute("b", memory_store)

        assert first.available_fields == {"x"}
        assert second.available_fields == {"y"}

    def test_reads_only_as_far_as_the_sample(self):
        store = CountingStore()
        store.save_all("big", [{"n": n} for n in range(50)])

        stats = StatsEngine(sample_size=5).compute("big", store)

        assert stats.total_records == 50
        assert stats.sampled_records == 5
        assert store.yielded == 5
        assert store.closed


class TestDatasetStatsToDict:

    def test_shape(self):
        stats = DatasetStats(dataset="sales", total_records=2)
        stats.observe(make_record(1, {"b": 1, "a": "x"}))
        stats.observe(make_record(2, {"a": 2}))

        result = stats.to_dict()

        assert result["availableFields"] == ["a", "b"]
        assert result["fieldCount"] == 2
        assert result["fieldTypes"] == {"a": ["integer", "string"], "b": ["integer"]}
        assert result["sampledRecords"] == 2
        assert result["firstRecordAt"] == (BASE_TIME + timedelta(seconds=1)).isoformat()
        assert result["lastRecordAt"] == (BASE_TIME + timedelta(seconds=2)).isoformat()
