# ==============================================
# Tests for DatasetGateway
# ==============================================
#
# Status codes and payload shapes for every entry point.
# ==============================================

import pytest

from dataset_engine.dataset_query import DatasetQuery
from dataset_engine.errors import StoreError
from dataset_engine.gateway import DatasetGateway
from dataset_engine.storage import MemoryRecordStore


@pytest.fixture
def gateway(query):
    return DatasetGateway(query)


class BrokenStore(MemoryRecordStore):
    def fetch_all(self, dataset_name):
        raise StoreError("connection reset")


class ExplodingStore(MemoryRecordStore):
    def count(self, dataset_name):
        raise RuntimeError("unexpected")


class TestInsertEndpoints:

    def test_insert_record(self, gateway):
        status, payload = gateway.insert_record(" Sales ", {"region": "EU"})
        assert status == 201
        assert payload["message"] == "Record added successfully"
        assert payload["dataset"] == "sales"
        assert payload["recordId"] == 1
        assert "timestamp" in payload

    def test_insert_record_validation(self, gateway):
        status, payload = gateway.insert_record("sales", {})
        assert status == 400
        assert payload["error"] == "Validation failed"
        assert "cannot be null or empty" in payload["message"]

    def test_insert_records(self, gateway):
        status, payload = gateway.insert_records("Sales", [{"n": 1}, {"n": 2}])
        assert status == 201
        assert payload["recordIds"] == [1, 2]
        assert payload["count"] == 2
        assert payload["dataset"] == "sales"

    def test_insert_records_empty(self, gateway):
        status, payload = gateway.insert_records("sales", [])
        assert status == 400
        assert payload["error"] == "Validation failed"


class TestQueryEndpoint:

    @pytest.fixture(autouse=True)
    def seed(self, gateway):
        gateway.insert_records("staff", [
            {"dept": "Eng", "age": 31},
            {"dept": "Mktg", "age": 27},
            {"dept": "Eng", "age": 45},
        ])

    def test_get_all(self, gateway):
        status, payload = gateway.query("staff")
        assert status == 200
        assert payload["operation"] == "getAll"
        assert len(payload["records"]) == 3

    def test_group_by(self, gateway):
        status, payload = gateway.query("staff", group_by="dept")
        assert status == 200
        assert payload["operation"] == "groupBy"
        assert payload["field"] == "dept"
        assert list(payload["groupedRecords"]) == ["Eng", "Mktg"]

    def test_sort_by(self, gateway):
        status, payload = gateway.query("staff", sort_by="age", order="DESC")
        assert status == 200
        assert payload["operation"] == "sortBy"
        assert payload["order"] == "DESC"
        assert [doc["age"] for doc in payload["sortedRecords"]] == [45, 31, 27]

    def test_group_by_wins_over_sort_by(self, gateway):
        _, payload = gateway.query("staff", group_by="dept", sort_by="age")
        assert payload["operation"] == "groupBy"

    def test_blank_parameters_are_unset(self, gateway):
        _, payload = gateway.query("staff", group_by="  ", sort_by="")
        assert payload["operation"] == "getAll"

    def test_bad_dataset_name(self, gateway):
        status, payload = gateway.query("   ")
        assert status == 400
        assert payload["error"] == "Validation failed"


class TestInfoAndList:

    def test_info_missing_dataset(self, gateway):
        status, payload = gateway.info("Ghost")
        assert status == 200
        assert payload == {"dataset": "ghost", "totalRecords": 0, "exists": False}

    def test_info(self, gateway):
        gateway.insert_record("staff", {"age": 31, "name": "Asha"})
        status, payload = gateway.info("staff")
        assert status == 200
        assert payload["totalRecords"] == 1
        assert payload["availableFields"] == ["age", "name"]
        assert payload["fieldTypes"] == {"age": ["integer"], "name": ["string"]}

    def test_list_datasets(self, gateway):
        gateway.insert_records("b", [{"n": 1}, {"n": 2}])
        gateway.insert_record("a", {"n": 1})
        status, payload = gateway.list_datasets()
        assert status == 200
        assert payload == {
            "datasets": [{"name": "a", "recordCount": 1}, {"name": "b", "recordCount": 2}],
            "count": 2,
        }


class TestServerErrors:

    def test_store_error_is_500(self, config):
        gateway = DatasetGateway(DatasetQuery(BrokenStore(), config))
        status, payload = gateway.query("sales")
        assert status == 500
        assert payload["error"] == "Failed to query records"
        assert "connection reset" in payload["message"]

    def test_unexpected_error_is_500(self, config):
        gateway = DatasetGateway(DatasetQuery(ExplodingStore(), config))
        status, payload = gateway.info("sales")
        assert status == 500
        assert payload["error"] == "Failed to get dataset info"
