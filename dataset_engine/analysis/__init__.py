# ==============================================
# TOPIC 2: ANALYSIS (GROUP / SORT / STATS)
# ==============================================
#
# This package holds the query logic that runs over documents
# fetched from a record store. Nothing here touches storage
# except StatsEngine, which asks the store for a count and a
# sample.
#
# Modules:
# --------
# - sorting.py       → SortDirection, type-aware ordering, distinct values
# - grouping.py      → Group documents by the string form of a field
# - field_stats.py   → DatasetStats result class
# - stats_engine.py  → Sample a dataset and build DatasetStats
#
# ==============================================

from .sorting import SortDirection, sort_documents, order_presorted, distinct_values
from .grouping import GroupResult, group_by, group_key, find_by_value
from .field_stats import DatasetStats
from .stats_engine import StatsEngine

__all__ = [
    "SortDirection",
    "sort_documents",
    "order_presorted",
    "distinct_values",
    "GroupResult",
    "group_by",
    "group_key",
    "find_by_value",
    "DatasetStats",
    "StatsEngine",
]
