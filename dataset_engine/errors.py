# ==============================================
# Error Taxonomy
# ==============================================
#
# - ValidationError  → caller-fixable input problems (bad dataset name,
#                      blank field name, empty document or batch).
#                      Never retried.
# - InvalidName      → ValidationError raised by the dataset namer.
# - StoreError       → a record store call failed. Propagated as-is,
#                      the engine never retries.
#
# Records excluded from a sort (missing field, incomparable value) are
# NOT errors and never raise.
#
# ==============================================

from typing import Optional


class DatasetEngineError(Exception):
    """Base class for every error raised by the engine."""

    def __init__(
        self,
        message: str,
        dataset: Optional[str] = None,
        field: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.dataset = dataset
        self.field = field
        self.operation = operation

    def context(self) -> dict:
        """Return the diagnostic context that is set on this error."""
        ctx = {
            "operation": self.operation,
            "dataset": self.dataset,
            "field": self.field,
        }
        return {key: value for key, value in ctx.items() if value is not None}

    def __str__(self) -> str:
        ctx = self.context()
        if not ctx:
            return self.message
        details = ", ".join(f"{key}={value}" for key, value in ctx.items())
        return f"{self.message} ({details})"


class ValidationError(DatasetEngineError):
    """Input rejected before anything reaches the record store."""


class InvalidName(ValidationError):
    """Dataset name is blank or too long."""


class StoreError(DatasetEngineError):
    """Persistence or retrieval failure reported by a record store."""
