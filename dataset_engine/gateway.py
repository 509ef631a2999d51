# ==============================================
# DatasetGateway: Response Shaping
# ==============================================
#
# PURPOSE:
#   Translate external requests into DatasetQuery calls and results
#   into (status, payload) pairs any transport can send as-is
#   (the CLI prints them; an HTTP layer would serialize them).
#
# STATUS MAPPING:
# ---------------
#   ValidationError          → 400  {"error": "Validation failed", "message": ...}
#   StoreError / anything    → 500  {"error": "Failed to ...", "message": ...}
#   insert_record(s)         → 201
#   everything else          → 200
#
# QUERY DISPATCH:
# ---------------
#   query(dataset, group_by=None, sort_by=None, order="asc")
#     group_by set  → groupedRecords  (group_by wins if both are set)
#     sort_by set   → sortedRecords
#     neither       → records
#   Blank parameters count as unset.
#
# ==============================================

import logging
from http import HTTPStatus
from typing import Any, Callable, Dict, List, Optional, Tuple

from dataset_engine.dataset_query import DatasetQuery
from dataset_engine.errors import ValidationError

logger = logging.getLogger(__name__)

Response = Tuple[int, Dict[str, Any]]


class DatasetGateway:

    def __init__(self, query: DatasetQuery):
        self._query = query

    def insert_record(self, dataset_name: str, document: Any) -> Response:
        def run():
            record = self._query.insert(dataset_name, document)
            return HTTPStatus.CREATED, {
                "message": "Record added successfully",
                "dataset": record.dataset_name,
                "recordId": record.id,
                "timestamp": record.created_at.isoformat(),
            }
        return self._handle("insert record", dataset_name, run)

    def insert_records(self, dataset_name: str, documents: Any) -> Response:
        def run():
            records = self._query.insert_batch(dataset_name, documents)
            return HTTPStatus.CREATED, {
                "message": "Records added successfully",
                "dataset": records[0].dataset_name,
                "recordIds": [record.id for record in records],
                "count": len(records),
            }
        return self._handle("insert records", dataset_name, run)

    def query(
        self,
        dataset_name: str,
        group_by: Optional[str] = None,
        sort_by: Optional[str] = None,
        order: str = "asc",
    ) -> Response:
        def run():
            payload: Dict[str, Any] = {}
            if _is_set(group_by):
                payload["groupedRecords"] = self._query.group_by(dataset_name, group_by)
                payload["operation"] = "groupBy"
                payload["field"] = group_by
            elif _is_set(sort_by):
                payload["sortedRecords"] = self._query.sort_by(dataset_name, sort_by, order)
                payload["operation"] = "sortBy"
                payload["field"] = sort_by
                payload["order"] = order
            else:
                payload["records"] = self._query.get_all(dataset_name)
                payload["operation"] = "getAll"
            payload["dataset"] = dataset_name
            return HTTPStatus.OK, payload
        return self._handle("query records", dataset_name, run)

    def info(self, dataset_name: str) -> Response:
        def run():
            return HTTPStatus.OK, self._query.stats(dataset_name).to_dict()
        return self._handle("get dataset info", dataset_name, run)

    def list_datasets(self) -> Response:
        def run():
            datasets: List[Dict[str, Any]] = [
                {"name": name, "recordCount": total}
                for name, total in self._query.list_datasets()
            ]
            return HTTPStatus.OK, {"datasets": datasets, "count": len(datasets)}
        return self._handle("get datasets", None, run)

    def _handle(self, action: str, dataset_name: Optional[str], run: Callable[[], Response]) -> Response:
        try:
            status, payload = run()
            return int(status), payload
        except ValidationError as e:
            logger.error("Validation error for dataset: %s: %s", dataset_name, e)
            return int(HTTPStatus.BAD_REQUEST), {
                "error": "Validation failed",
                "message": str(e),
            }
        except Exception as e:
            logger.exception("Failed to %s for dataset: %s", action, dataset_name)
            return int(HTTPStatus.INTERNAL_SERVER_ERROR), {
                "error": f"Failed to {action}",
                "message": str(e),
            }


def _is_set(value: Optional[str]) -> bool:
    return value is not None and bool(value.strip())
