"""Track ingestion: submission validation and the persistent track store."""

from .errors import (
    BatchRejected,
    DuplicateTrackError,
    InvalidLookup,
    StoreError,
)
from .store import LookupField, TrackStore
from .validation import TrackSubmission, validate_batch

__all__ = [
    "BatchRejected",
    "DuplicateTrackError",
    "InvalidLookup",
    "StoreError",
    "LookupField",
    "TrackStore",
    "TrackSubmission",
    "validate_batch",
]
