# ==============================================
# TOPIC 1: DOCUMENTS
# ==============================================
#
# This package handles everything about a single schema-free
# document and the names used to address it.
#
# Modules:
# --------
# - type_classifier.py → Map JSON values to coarse kinds (JsonKind)
# - field_accessor.py  → Top-level field lookup and presence predicates
# - dataset_namer.py   → Canonical dataset names, field name checks
#
# ==============================================

from .type_classifier import JsonKind, TypeClassifier
from .dataset_namer import DatasetNamer
from . import field_accessor
from .field_accessor import ABSENT

__all__ = ["JsonKind", "TypeClassifier", "DatasetNamer", "field_accessor", "ABSENT"]
