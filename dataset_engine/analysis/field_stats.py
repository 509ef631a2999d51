# ==============================================
# DatasetStats
# ==============================================
#
# PURPOSE:
#   Data class holding the statistical summary of one dataset: how many
#   records it has, which field names appear in the sample, and which
#   value kinds each field was seen with.
#
# WHY THIS CLASS EXISTS:
#   No schema is enforced, so the only way to describe a dataset is to
#   look at what is actually stored. The same field can legitimately
#   show up as "integer" in one record and "string" in another; this
#   class keeps every kind seen rather than picking a winner.
#
# CLASS: DatasetStats (dataclass)
# -------------------------------
#   Attributes:
#   -----------
#   - dataset: str                       → Canonical dataset name
#   - total_records: int                 → Live record count (whole dataset)
#   - sampled_records: int               → Readable records examined
#   - available_fields: set[str]         → Every field name seen in the sample
#   - field_types: dict[str, set[str]]   → {"age": {"integer", "string"}}
#   - first_record_at / last_record_at   → created_at range over the sample
#
#   Computed Properties:
#   --------------------
#   - exists -> bool          (total_records > 0)
#   - field_count -> int      (len(available_fields))
#   - has_field_data -> bool  (at least one record was sampled)
#
#   Methods:
#   --------
#   - observe(record: Record) -> None
#       Fold one readable record into the summary.
#
#   - to_dict() -> dict
#       Serialize for API responses. Field data is omitted when nothing
#       was sampled.
#
# ==============================================

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Set

from dataset_engine.documents.type_classifier import TypeClassifier
from dataset_engine.storage.record import Record


@dataclass
class DatasetStats:
    """Field inventory and per-field value kinds for one dataset."""

    # --- Core identity ---
    dataset: str
    total_records: int = 0

    # --- Sample ---
    sampled_records: int = 0
    available_fields: Set[str] = field(default_factory=set)
    field_types: Dict[str, Set[str]] = field(default_factory=dict)

    # --- Time range of the sample ---
    first_record_at: Optional[datetime] = None
    last_record_at: Optional[datetime] = None

    # ======================================
    # Update logic
    # ======================================
    def observe(self, record: Record) -> None:
        """
        Update the summary with one sampled record.

        Args:
            record: A record whose document is readable
        """
        self.sampled_records += 1

        for name, value in record.document.items():
            self.available_fields.add(name)
            kind = TypeClassifier.classify(value)
            self.field_types.setdefault(name, set()).add(kind.value)

        if self.first_record_at is None or record.created_at < self.first_record_at:
            self.first_record_at = record.created_at
        if self.last_record_at is None or record.created_at > self.last_record_at:
            self.last_record_at = record.created_at

    # ======================================
    # Computed properties
    # ======================================
    @property
    def exists(self) -> bool:
        return self.total_records > 0

    @property
    def field_count(self) -> int:
        return len(self.available_fields)

    @property
    def has_field_data(self) -> bool:
        return self.sampled_records > 0

    # ======================================
    # Serialization
    # ======================================
    def to_dict(self) -> Dict[str, Any]:
        """
        Convert stats to a JSON-ready dictionary.

        Sets become sorted lists so the output is stable between calls.

        Returns:
            A dictionary with dataset, totalRecords and exists, plus field
            data when at least one record was sampled.
        """
        result: Dict[str, Any] = {
            "dataset": self.dataset,
            "totalRecords": self.total_records,
            "exists": self.exists,
        }

        if not self.has_field_data:
            return result

        result["sampledRecords"] = self.sampled_records
        result["availableFields"] = sorted(self.available_fields)
        result["fieldCount"] = self.field_count
        result["fieldTypes"] = {
            name: sorted(kinds)
            for name, kinds in sorted(self.field_types.items())
        }
        result["firstRecordAt"] = self.first_record_at.isoformat()
        result["lastRecordAt"] = self.last_record_at.isoformat()
        return result
