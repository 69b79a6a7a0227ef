from __future__ import annotations

import re
from typing import Annotated, Any, List, Optional

from pydantic import ConfigDict, Field, StrictInt, StrictStr, ValidationError, field_validator

from bandscrape.models.dto import TrackDTO

from .errors import BatchRejected

MAX_TRACK_ID = 2**32 - 1
MAX_TITLE_LENGTH = 300
MAX_ALBUM_LENGTH = 300
MAX_BAND_NAME_LENGTH = 100
DEFAULT_MAX_BATCH_SIZE = 100

# Secure absolute URL ending in a lowercase track slug
TRACK_URL_PATTERN = re.compile(r"https://.+/track/[a-z0-9_-]{1,300}")


class TrackSubmission(TrackDTO):
    """One inbound track record, checked before it may reach the store."""

    model_config = ConfigDict(extra="ignore")

    track_id: Annotated[StrictInt, Field(ge=1, le=MAX_TRACK_ID)]
    track_title: Annotated[StrictStr, Field(min_length=1, max_length=MAX_TITLE_LENGTH)]
    album_title: Annotated[StrictStr, Field(max_length=MAX_ALBUM_LENGTH)] = ""
    band_name: Annotated[StrictStr, Field(min_length=1, max_length=MAX_BAND_NAME_LENGTH)]
    track_url: StrictStr

    @field_validator("album_title", mode="before")
    @classmethod
    def _null_album_is_empty(cls, value: Optional[object]) -> object:
        return "" if value is None else value

    @field_validator("track_url")
    @classmethod
    def _check_track_url(cls, value: str) -> str:
        if not TRACK_URL_PATTERN.fullmatch(value):
            raise ValueError("not a track page URL")
        return value


def validate_batch(payload: Any, *, max_size: int = DEFAULT_MAX_BATCH_SIZE) -> List[TrackSubmission]:
    """Validate a decoded submission body, all or nothing.

    Raises ``BatchRejected`` on the first problem found; no partial result is
    ever returned.
    """
    if not isinstance(payload, list):
        raise BatchRejected("Submission must be a JSON array")
    if len(payload) < 1:
        raise BatchRejected("Too little tracks!")
    if len(payload) > max_size:
        raise BatchRejected("Too many tracks!")

    accepted: List[TrackSubmission] = []
    for index, record in enumerate(payload):
        if not isinstance(record, dict):
            raise BatchRejected("Sanity check failed!", index=index, record=record, detail="not an object")
        try:
            accepted.append(TrackSubmission.model_validate(record))
        except ValidationError as exc:
            raise BatchRejected("Sanity check failed!", index=index, record=record, detail=str(exc)) from exc
    return accepted


__all__ = [
    "MAX_TRACK_ID",
    "TRACK_URL_PATTERN",
    "TrackSubmission",
    "validate_batch",
]
