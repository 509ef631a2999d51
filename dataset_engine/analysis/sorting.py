# ==============================================
# Sorting Engine
# ==============================================
#
# PURPOSE:
#   Order a dataset's documents by one top-level field, ascending or
#   descending, without knowing the field's type in advance.
#
# COMPARISON RULES:
# -----------------
#   - Only three classes of values are orderable:
#       number  → compared numerically (int and float mix freely)
#       string  → compared by code point
#       boolean → false < true
#   - Objects and arrays are never orderable.
#   - A field can hold different classes in different documents. The
#     sort runs over the DOMINANT class: the class with the most values
#     (ties: number, then string, then boolean). Documents holding any
#     other class are excluded, as are documents where the field is
#     missing or null. Exclusion is silent; it is not an error.
#   - Ties keep retrieval order (Python's sort is stable, and stays
#     stable with reverse=True).
#
# PUSH-DOWN:
# ----------
#   A record store may order raw values itself (see
#   RecordStore.supports_field_ordering). Stores order by value, then
#   by record id. order_presorted() applies the same exclusion filter
#   to that output and keeps its order, so both paths give identical
#   results.
#
# ==============================================

import logging
from collections import Counter
from enum import Enum
from typing import Any, Iterable, List, Optional, Tuple

from dataset_engine.documents import field_accessor
from dataset_engine.documents.type_classifier import JsonKind, TypeClassifier

logger = logging.getLogger(__name__)


class SortDirection(Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"

    @classmethod
    def parse(cls, token: Any) -> "SortDirection":
        """
        Parse a direction token.

        "desc" and "descending" (any case) mean DESCENDING; every other
        token, including None, falls back to ASCENDING.
        """
        if isinstance(token, SortDirection):
            return token
        if isinstance(token, str) and token.strip().lower() in ("desc", "descending"):
            return cls.DESCENDING
        return cls.ASCENDING

    @property
    def is_descending(self) -> bool:
        return self is SortDirection.DESCENDING


class OrderClass(Enum):
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"


# Tie-break order when two classes hold the same number of values
CLASS_PRECEDENCE = (OrderClass.NUMBER, OrderClass.STRING, OrderClass.BOOLEAN)


def order_class(value: Any) -> Optional[OrderClass]:
    """Return the orderable class of a value, or None if it can't be ordered."""
    kind = TypeClassifier.classify(value)
    if kind.is_number:
        return OrderClass.NUMBER
    if kind is JsonKind.STRING:
        return OrderClass.STRING
    if kind is JsonKind.BOOLEAN:
        return OrderClass.BOOLEAN
    return None


def dominant_class(classes: Iterable[Optional[OrderClass]]) -> Optional[OrderClass]:
    counts = Counter(c for c in classes if c is not None)
    if not counts:
        return None
    return max(
        CLASS_PRECEDENCE,
        key=lambda c: (counts.get(c, 0), -CLASS_PRECEDENCE.index(c)),
    )


def _orderable(documents: List[dict], field_name: str) -> List[Tuple[dict, Any]]:
    present = [
        (doc, doc[field_name])
        for doc in documents
        if field_accessor.is_present_for_ordering(doc, field_name)
    ]
    classes = [order_class(value) for _, value in present]
    target = dominant_class(classes)
    if target is None:
        return []

    kept = [pair for pair, cls in zip(present, classes) if cls is target]
    excluded = len(documents) - len(kept)
    if excluded:
        logger.debug(
            "Excluded %d of %d documents from ordering by '%s' (sorting as %s)",
            excluded, len(documents), field_name, target.value,
        )
    return kept


def sort_documents(
    documents: List[dict],
    field_name: str,
    direction: Any = SortDirection.ASCENDING,
) -> List[dict]:
    """
    Sort documents by a field in memory.

    Args:
        documents: Documents in retrieval order
        field_name: Exact top-level field to sort by
        direction: SortDirection or a direction token ("asc", "DESC", ...)

    Returns:
        Orderable documents in the requested order. Documents without
        the field, with a null, or with a value outside the dominant
        class are left out.
    """
    direction = SortDirection.parse(direction)
    ordered = sorted(
        _orderable(documents, field_name),
        key=lambda pair: pair[1],
        reverse=direction.is_descending,
    )
    return [doc for doc, _ in ordered]


def order_presorted(documents: List[dict], field_name: str) -> List[dict]:
    """Filter documents a store has already ordered, keeping that order."""
    return [doc for doc, _ in _orderable(documents, field_name)]


def distinct_values(documents: List[dict], field_name: str) -> List[Any]:
    """
    Distinct orderable values of a field, ascending.

    Values are compared with the sort rules, so 1 and 1.0 collapse into
    one entry (the first one seen).
    """
    values = [value for _, value in sorted(_orderable(documents, field_name), key=lambda pair: pair[1])]
    distinct: List[Any] = []
    for value in values:
        if not distinct or distinct[-1] != value:
            distinct.append(value)
    return distinct
