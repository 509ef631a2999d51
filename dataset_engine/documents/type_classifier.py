# ==============================================
# TypeClassifier
# ==============================================
#
# PURPOSE:
#   Map a decoded JSON value to one of a fixed set of coarse kinds.
#   The stats engine reports these kinds per field, and the sorting
#   engine uses them to decide which values can be compared.
#
# KINDS (JsonKind):
# -----------------
#   string, integer, float, boolean, null, object, array
#
#   bool is checked before int because bool is a subclass of int
#   in Python: True must classify as "boolean", never "integer".
#
# CLASS: TypeClassifier
# ---------------------
#   Stateless. All methods are classmethods.
#
#   - classify(value) -> JsonKind
#       Raise TypeError for anything json.loads could not have produced.
#
#   - is_json_value(value) -> bool
#       Recursively check that a value is a valid JSON tree.
#
#   - same_value(left, right) -> bool
#       JSON equality (True != 1, 1 == 1.0).
#
# ==============================================

import math
from enum import Enum
from typing import Any


class JsonKind(Enum):
    """Coarse kind of a JSON value."""
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    NULL = "null"
    OBJECT = "object"
    ARRAY = "array"

    @property
    def is_number(self) -> bool:
        return self in (JsonKind.INTEGER, JsonKind.FLOAT)

    @property
    def is_container(self) -> bool:
        return self in (JsonKind.OBJECT, JsonKind.ARRAY)


class TypeClassifier:

    @classmethod
    def classify(cls, value: Any) -> JsonKind:
        if value is None:
            return JsonKind.NULL

        if isinstance(value, bool):
            return JsonKind.BOOLEAN

        if isinstance(value, int):
            return JsonKind.INTEGER

        if isinstance(value, float):
            return JsonKind.FLOAT

        if isinstance(value, str):
            return JsonKind.STRING

        if isinstance(value, list):
            return JsonKind.ARRAY

        if isinstance(value, dict):
            return JsonKind.OBJECT

        raise TypeError(f"Not a JSON value: {type(value).__name__}")

    @classmethod
    def is_json_value(cls, value: Any) -> bool:
        try:
            kind = cls.classify(value)
        except TypeError:
            return False

        if kind is JsonKind.FLOAT and not math.isfinite(value):
            # NaN and the infinities have no JSON representation
            return False

        if kind is JsonKind.ARRAY:
            return all(cls.is_json_value(item) for item in value)

        if kind is JsonKind.OBJECT:
            return all(
                isinstance(key, str) and cls.is_json_value(item)
                for key, item in value.items()
            )

        return True

    @classmethod
    def same_value(cls, left: Any, right: Any) -> bool:
        """
        JSON equality: kinds must agree (integer and float count as one
        numeric kind), so True never equals 1 and "1" never equals 1.
        """
        left_kind = cls.classify(left)
        right_kind = cls.classify(right)

        if left_kind.is_number and right_kind.is_number:
            return left == right

        if left_kind is not right_kind:
            return False

        if left_kind is JsonKind.ARRAY:
            return len(left) == len(right) and all(
                cls.same_value(a, b) for a, b in zip(left, right)
            )

        if left_kind is JsonKind.OBJECT:
            return left.keys() == right.keys() and all(
                cls.same_value(left[key], right[key]) for key in left
            )

        return left == right
