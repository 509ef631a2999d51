# ==============================================
# Record
# ==============================================
#
# PURPOSE:
#   A persisted document plus its identity metadata.
#
# CLASS: Record (dataclass)
# -------------------------
#   Attributes:
#   -----------
#   - id: int                   → Monotonically assigned by the store
#   - dataset_name: str         → Canonical dataset name
#   - document: dict | None     → The JSON payload. None when the stored
#                                 payload could not be decoded.
#   - created_at: datetime      → UTC, set once at insert
#   - updated_at: datetime      → UTC, never earlier than created_at
#
# HELPERS:
# --------
#   - encode_document(document) -> str
#   - decode_document(text, record_id, dataset_name) -> dict | None
#       Stores that keep documents as JSON text use these so every
#       backend round-trips payloads the same way.
#
# ==============================================

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from a database."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class Record:
    """A stored document and its metadata."""

    id: int
    dataset_name: str
    document: Optional[Dict[str, Any]]
    created_at: datetime
    updated_at: datetime

    def __post_init__(self):
        if self.updated_at < self.created_at:
            raise ValueError(
                f"Record {self.id}: updated_at ({self.updated_at}) is earlier "
                f"than created_at ({self.created_at})"
            )

    @property
    def is_readable(self) -> bool:
        return self.document is not None


def encode_document(document: Dict[str, Any]) -> str:
    return json.dumps(document, ensure_ascii=False, allow_nan=False)


def decode_document(text: Any, record_id: Any, dataset_name: str) -> Optional[Dict[str, Any]]:
    """
    Decode a stored JSON payload.

    Returns None (and logs a warning) when the payload is missing, is
    not valid JSON, or is not a JSON object.
    """
    if text is None:
        logger.warning("Record %s in dataset '%s' has no payload", record_id, dataset_name)
        return None

    if isinstance(text, (bytes, bytearray)):
        text = text.decode("utf-8", errors="replace")

    try:
        document = json.loads(text)
    except (TypeError, ValueError) as e:
        logger.warning(
            "Failed to parse JSON payload for record %s in dataset '%s': %s",
            record_id, dataset_name, e,
        )
        return None

    if not isinstance(document, dict):
        logger.warning(
            "Payload for record %s in dataset '%s' is not a JSON object",
            record_id, dataset_name,
        )
        return None

    return document
