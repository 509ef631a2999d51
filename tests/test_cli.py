# ==============================================
# Tests for CLI
# ==============================================
#
# Runs main() against a file store under tmp_path and checks the
# printed JSON and the exit code.
# ==============================================

import json

import pytest
import requests

from dataset_engine import cli
from dataset_engine.config import reset_config


@pytest.fixture(autouse=True)
def cli_env(monkeypatch, tmp_path):
    monkeypatch.setenv("STORE_BACKEND", "file")
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    reset_config()
    yield
    reset_config()


def run(capsys, *argv):
    code = cli.main(list(argv))
    return code, json.loads(capsys.readouterr().out)


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


class TestInsertCommands:

    def test_insert_then_query(self, capsys):
        code, payload = run(capsys, "insert", "Sales", '{"region": "EU", "amount": 12}')
        assert code == 0
        assert payload["recordId"] == 1

        code, payload = run(capsys, "query", "sales")
        assert code == 0
        assert payload["records"] == [{"region": "EU", "amount": 12}]

    def test_insert_invalid_json(self, capsys):
        code, payload = run(capsys, "insert", "sales", "{oops")
        assert code == 1
        assert payload["error"] == "Validation failed"

    def test_insert_batch_from_file(self, capsys, tmp_path):
        path = tmp_path / "records.json"
        path.write_text(json.dumps([{"n": 2}, {"n": 1}]), encoding="utf-8")

        code, payload = run(capsys, "insert-batch", "nums", str(path))
        assert code == 0
        assert payload["count"] == 2

        code, payload = run(capsys, "query", "nums", "--sort-by", "n", "--order", "desc")
        assert [doc["n"] for doc in payload["sortedRecords"]] == [2, 1]

    def test_insert_batch_missing_file(self, capsys, tmp_path):
        code, payload = run(capsys, "insert-batch", "nums", str(tmp_path / "missing.json"))
        assert code == 1
        assert payload["error"] == "Validation failed"


class TestFetchCommand:

    def test_fetch_inserts_downloaded_records(self, capsys, monkeypatch):
        monkeypatch.setattr(
            cli.requests, "get",
            lambda url, timeout: FakeResponse([{"id": 1}, {"id": 2}]),
        )
        code, payload = run(capsys, "fetch", "events", "http://example.test/records")
        assert code == 0
        assert payload["recordIds"] == [1, 2]

    def test_fetch_single_object(self, capsys, monkeypatch):
        monkeypatch.setattr(cli.requests, "get", lambda url, timeout: FakeResponse({"id": 1}))
        code, payload = run(capsys, "fetch", "events", "http://example.test/one")
        assert code == 0
        assert payload["count"] == 1

    def test_fetch_failure(self, capsys, monkeypatch):
        monkeypatch.setattr(cli.requests, "get", lambda url, timeout: FakeResponse(None, 503))
        code, payload = run(capsys, "fetch", "events", "http://example.test/down")
        assert code == 1
        assert payload["error"] == "Failed to fetch records"


class TestReadCommands:

    def test_group_by(self, capsys):
        run(capsys, "insert", "staff", '{"dept": "Eng"}')
        run(capsys, "insert", "staff", '{"dept": null}')
        code, payload = run(capsys, "query", "staff", "--group-by", "dept")
        assert code == 0
        assert list(payload["groupedRecords"]) == ["Eng", "null"]

    def test_info_and_list(self, capsys):
        run(capsys, "insert", "staff", '{"age": 31}')

        code, payload = run(capsys, "info", "Staff")
        assert code == 0
        assert payload["totalRecords"] == 1
        assert payload["fieldTypes"] == {"age": ["integer"]}

        code, payload = run(capsys, "list")
        assert payload == {"datasets": [{"name": "staff", "recordCount": 1}], "count": 1}

    def test_blank_dataset_name(self, capsys):
        code, payload = run(capsys, "info", "  ")
        assert code == 1
        assert payload["error"] == "Validation failed"
