from __future__ import annotations

from typing import Any, Optional


class BatchRejected(ValueError):
    """A submission failed structural or field validation.

    ``str(exc)`` is the short client-facing reason; ``index`` and ``record``
    identify the offending entry for server-side logging only.
    """

    def __init__(self, reason: str, *, index: Optional[int] = None, record: Any = None, detail: Optional[str] = None):
        super().__init__(reason)
        self.reason = reason
        self.index = index
        self.record = record
        self.detail = detail


class InvalidLookup(ValueError):
    """A lookup carried no recognized, non-empty filter."""


class StoreError(Exception):
    """Persisting a batch failed; the transaction was rolled back."""


class DuplicateTrackError(StoreError):
    def __init__(self, track_id: int):
        super().__init__(f"track {track_id} already exists")
        self.track_id = track_id


__all__ = ["BatchRejected", "InvalidLookup", "StoreError", "DuplicateTrackError"]
