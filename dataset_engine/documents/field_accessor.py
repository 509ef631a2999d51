# ==============================================
# FieldAccessor
# ==============================================
#
# PURPOSE:
#   Extract a named top-level value from a document, or report that
#   it is absent. Every higher-level operation goes through here.
#
# RULES:
# ------
#   1. Exact top-level key match only. No dot paths, no case folding.
#   2. A missing key returns the ABSENT sentinel, which is distinct
#      from None (an explicit JSON null).
#   3. Grouping and ordering use two different presence predicates:
#        is_present_for_grouping → key exists (null counts as present)
#        is_present_for_ordering → key exists AND value is not null
#      The two must stay separate. Grouping buckets nulls under "null",
#      ordering drops them together with absent fields.
#
# ==============================================

from typing import Any


class _Absent:
    """Marker for a field that is not in the document at all."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()


def get(document: dict, field_name: str) -> Any:
    """
    Return the value stored under field_name, or ABSENT.

    Args:
        document: A decoded JSON object
        field_name: Exact top-level key

    Returns:
        The stored value (which may be None for a JSON null) or ABSENT
    """
    return document.get(field_name, ABSENT)


def has(document: dict, field_name: str) -> bool:
    """True when the field exists and holds a non-null value."""
    value = get(document, field_name)
    return value is not ABSENT and value is not None


def is_present_for_grouping(document: dict, field_name: str) -> bool:
    """True when the key exists, even if its value is null."""
    return field_name in document


def is_present_for_ordering(document: dict, field_name: str) -> bool:
    """True when the key exists with a non-null value."""
    return has(document, field_name)
