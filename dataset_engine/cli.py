# ==============================================
# CLI: Command Line Entry Point
# ==============================================
#
# PURPOSE:
#   Provides command-line interface to the query engine.
#   This is how users interact with the system.
#
# COMMANDS:
# ---------
# 1. Insert one record (JSON object on the command line):
#    python -m dataset_engine.cli insert sales '{"region": "EU", "amount": 12}'
#
# 2. Insert many records from a file holding a JSON array:
#    python -m dataset_engine.cli insert-batch sales records.json
#
# 3. Fetch records from an HTTP endpoint and insert them:
#    python -m dataset_engine.cli fetch sales http://127.0.0.1:8000/records
#
# 4. Query a dataset:
#    python -m dataset_engine.cli query sales
#    python -m dataset_engine.cli query sales --group-by region
#    python -m dataset_engine.cli query sales --sort-by amount --order desc
#
# 5. Show dataset statistics:
#    python -m dataset_engine.cli info sales
#
# 6. List datasets:
#    python -m dataset_engine.cli list
#
# OUTPUT:
# -------
#   Every command prints the gateway payload as JSON. The exit code is
#   0 on success and 1 on any 4xx/5xx status.
#
# ==============================================

import argparse
import json
import logging
import sys
from typing import Any, List, Optional, Tuple

import requests

from dataset_engine.config import get_config
from dataset_engine.dataset_query import DatasetQuery
from dataset_engine.errors import StoreError
from dataset_engine.gateway import DatasetGateway
from dataset_engine.storage import build_store


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dataset_engine",
        description="Store schema-free JSON records and query them by any field.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    insert = commands.add_parser("insert", help="Insert one JSON record")
    insert.add_argument("dataset")
    insert.add_argument("record", help="JSON object")

    batch = commands.add_parser("insert-batch", help="Insert records from a JSON file")
    batch.add_argument("dataset")
    batch.add_argument("path", help="File holding a JSON array of objects")

    fetch = commands.add_parser("fetch", help="Download records over HTTP and insert them")
    fetch.add_argument("dataset")
    fetch.add_argument("url")
    fetch.add_argument("--timeout", type=float, default=10.0)

    query = commands.add_parser("query", help="Get, group or sort a dataset's records")
    query.add_argument("dataset")
    query.add_argument("--group-by", dest="group_by")
    query.add_argument("--sort-by", dest="sort_by")
    query.add_argument("--order", default="asc")

    info = commands.add_parser("info", help="Show dataset statistics")
    info.add_argument("dataset")

    commands.add_parser("list", help="List datasets and record counts")

    return parser


def fetch_records(url: str, timeout: float = 10.0) -> List[Any]:
    """
    Download records from an HTTP endpoint.

    The endpoint may return a single JSON object or an array of objects.
    """
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    payload = response.json()
    if isinstance(payload, dict):
        return [payload]
    return payload


def run_command(args: argparse.Namespace, gateway: DatasetGateway) -> Tuple[int, Any]:
    if args.command == "insert":
        try:
            record = json.loads(args.record)
        except ValueError as e:
            return 400, {"error": "Validation failed", "message": f"Record is not valid JSON: {e}"}
        return gateway.insert_record(args.dataset, record)

    if args.command == "insert-batch":
        try:
            with open(args.path, "r", encoding="utf-8") as f:
                records = json.load(f)
        except (OSError, ValueError) as e:
            return 400, {"error": "Validation failed", "message": f"Cannot read {args.path}: {e}"}
        return gateway.insert_records(args.dataset, records)

    if args.command == "fetch":
        try:
            records = fetch_records(args.url, args.timeout)
        except (requests.RequestException, ValueError) as e:
            return 502, {"error": "Failed to fetch records", "message": str(e)}
        return gateway.insert_records(args.dataset, records)

    if args.command == "query":
        return gateway.query(args.dataset, args.group_by, args.sort_by, args.order)

    if args.command == "info":
        return gateway.info(args.dataset)

    return gateway.list_datasets()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = get_config()
    logging.basicConfig(
        level=config.engine.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        with build_store(config) as store:
            gateway = DatasetGateway(DatasetQuery(store, config))
            status, payload = run_command(args, gateway)
    except StoreError as e:
        status, payload = 500, {"error": "Record store unavailable", "message": str(e)}

    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))
    return 0 if status < 400 else 1


if __name__ == "__main__":
    sys.exit(main())
