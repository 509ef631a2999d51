# ==============================================
# DatasetNamer
# ==============================================
#
# PURPOSE:
#   Convert a user-supplied dataset name to its canonical key so that
#   "Sales", " sales " and "SALES" all address the same dataset.
#
# WHY THIS CLASS EXISTS:
#   Dataset names arrive from URLs, CLI arguments and scripts with
#   arbitrary whitespace and casing. If we don't canonicalize once at
#   the edge, the same logical dataset ends up split across several
#   storage keys. Everything downstream receives canonical names only
#   and never re-normalizes.
#
# CLASS: DatasetNamer
# -------------------
#   Stateless apart from the configured length limit.
#
#   Methods:
#   --------
#   - canonicalize(name: str) -> str
#       Trim, check length, lowercase. Raise InvalidName on failure.
#
#   - validate_field_name(name: str) -> str
#       Reject blank field names. Field names are returned untouched:
#       they are matched exactly, never trimmed or case-folded.
#
#   - are_same(name_a: str, name_b: str) -> bool
#       True if both names resolve to the same dataset.
#
# ==============================================

from typing import Any, Optional

from dataset_engine.errors import InvalidName, ValidationError

DEFAULT_MAX_NAME_LENGTH = 100


class DatasetNamer:

    def __init__(self, max_length: int = DEFAULT_MAX_NAME_LENGTH):
        self.max_length = max_length

    def canonicalize(self, name: Any, operation: Optional[str] = None) -> str:
        """
        Return the canonical form of a dataset name.

        Args:
            name: Raw dataset name (e.g., " Sales ")
            operation: Operation name recorded on the error, if any

        Returns:
            Canonical dataset name (e.g., "sales")

        Raises:
            InvalidName: If the name is not a string, is blank after
                trimming, or is longer than max_length characters
        """
        if not isinstance(name, str):
            raise InvalidName(
                "Dataset name cannot be null or empty", operation=operation
            )

        trimmed = name.strip()
        if not trimmed:
            raise InvalidName(
                "Dataset name cannot be null or empty", operation=operation
            )

        if len(trimmed) > self.max_length:
            raise InvalidName(
                f"Dataset name must be at most {self.max_length} characters",
                dataset=trimmed[:self.max_length] + "...",
                operation=operation,
            )

        return trimmed.lower()

    def validate_field_name(
        self,
        field_name: Any,
        dataset: Optional[str] = None,
        operation: Optional[str] = None,
    ) -> str:
        if not isinstance(field_name, str) or not field_name.strip():
            raise ValidationError(
                "Field name cannot be null or empty",
                dataset=dataset,
                operation=operation,
            )
        return field_name

    def are_same(self, name_a: str, name_b: str) -> bool:
        return self.canonicalize(name_a) == self.canonicalize(name_b)
