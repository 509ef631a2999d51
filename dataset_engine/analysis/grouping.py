# ==============================================
# Grouping Engine
# ==============================================
#
# PURPOSE:
#   Partition documents into buckets keyed by the string form of one
#   top-level field.
#
# RULES:
# ------
#   1. A document joins a bucket when the key is present, even if the
#      value is null. Nulls go to the bucket "null".
#   2. Documents without the key are left out of every bucket.
#   3. Bucket order = order in which each key was first seen.
#      Document order inside a bucket = input order.
#   4. Empty input gives an empty result, never an error.
#
# GROUP KEYS:
# -----------
#   None          → "null"
#   True / False  → "true" / "false"
#   int           → str(value)          (no locale formatting)
#   float         → repr(value)         (2.0 → "2.0", 0.1 → "0.1")
#   str           → the string itself
#   dict / list   → compact JSON text, key order kept
#
#   Different kinds can share a key ("1" and 1 both map to "1").
#   That is accepted: keys are display strings, not typed values.
#
# ==============================================

import json
from typing import Any, Dict, List

from dataset_engine.documents import field_accessor
from dataset_engine.documents.type_classifier import JsonKind, TypeClassifier

GroupResult = Dict[str, List[dict]]


def group_key(value: Any) -> str:
    kind = TypeClassifier.classify(value)

    if kind is JsonKind.NULL:
        return "null"
    if kind is JsonKind.BOOLEAN:
        return "true" if value else "false"
    if kind is JsonKind.INTEGER:
        return str(value)
    if kind is JsonKind.FLOAT:
        return repr(value)
    if kind is JsonKind.STRING:
        return value
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def group_by(documents: List[dict], field_name: str) -> GroupResult:
    """
    Group documents by the string form of a field's value.

    Args:
        documents: Documents in retrieval order
        field_name: Exact top-level field to group by

    Returns:
        Dict of group key -> documents, keys in first-seen order
    """
    groups: GroupResult = {}
    for document in documents:
        if not field_accessor.is_present_for_grouping(document, field_name):
            continue
        key = group_key(document[field_name])
        groups.setdefault(key, []).append(document)
    return groups


def find_by_value(documents: List[dict], field_name: str, value: Any) -> List[dict]:
    """Documents whose field holds a value JSON-equal to `value`."""
    return [
        document
        for document in documents
        if field_accessor.is_present_for_grouping(document, field_name)
        and TypeClassifier.same_value(document[field_name], value)
    ]
