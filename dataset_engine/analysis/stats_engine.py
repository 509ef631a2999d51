# ==============================================
# StatsEngine
# ==============================================
#
# PURPOSE:
#   Produce a DatasetStats summary for one dataset from a bounded,
#   deterministic sample of its records.
#
# PROCESS:
# --------
#   1. Count the dataset's records (always, even when it is empty).
#   2. If the count is zero → return totals only (exists = False).
#   3. Stream records in retrieval order (store.iter_records), drop the
#      ones whose payload could not be decoded, keep the first
#      `sample_size` (default 100). Reading stops once the sample is full.
#   4. Fold each sampled record into a fresh DatasetStats.
#
#   A dataset whose records are all unreadable reports its count but no
#   field data. That is a normal result, not an error.
#
#   All accumulation happens on the DatasetStats created for the call;
#   nothing is shared between calls.
#
# ==============================================

import logging
from contextlib import closing
from itertools import islice
from typing import TYPE_CHECKING, Iterable, List

from .field_stats import DatasetStats
from dataset_engine.storage.record import Record

if TYPE_CHECKING:
    from dataset_engine.storage.record_store import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_SIZE = 100


class StatsEngine:
    """
    Computes per-dataset field statistics over a bounded sample.
    """

    def __init__(self, sample_size: int = DEFAULT_SAMPLE_SIZE):
        """
        Initialize the StatsEngine.

        Args:
            sample_size: Maximum number of readable records to examine
        """
        self.sample_size = sample_size

    def compute(self, dataset_name: str, store: "RecordStore") -> DatasetStats:
        """
        Compute statistics for a dataset.

        Args:
            dataset_name: Canonical dataset name
            store: Record store holding the dataset

        Returns:
            DatasetStats for the dataset
        """
        total = store.count(dataset_name)
        if total == 0:
            return DatasetStats(dataset=dataset_name, total_records=0)

        with closing(store.iter_records(dataset_name)) as records:
            return self.summarize(dataset_name, total, records)

    def summarize(
        self,
        dataset_name: str,
        total_records: int,
        records: Iterable[Record],
    ) -> DatasetStats:
        """
        Build DatasetStats from records in retrieval order.

        Args:
            dataset_name: Canonical dataset name
            total_records: Live record count reported by the store
            records: Records in retrieval order

        Returns:
            DatasetStats over the first sample_size readable records
        """
        stats = DatasetStats(dataset=dataset_name, total_records=total_records)

        sample = self.sample(records)
        for record in sample:
            stats.observe(record)

        if not sample:
            logger.warning(
                "Dataset '%s' has %d records but none could be sampled",
                dataset_name, total_records,
            )

        return stats

    def sample(self, records: Iterable[Record]) -> List[Record]:
        readable = (record for record in records if record.is_readable)
        return list(islice(readable, self.sample_size))
