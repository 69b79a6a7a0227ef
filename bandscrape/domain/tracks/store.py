from __future__ import annotations

import enum
import logging
import threading
from typing import Dict, Iterable, List, Mapping, Optional, Union

from sqlalchemy import and_, func, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from bandscrape.database.db_manager import Track, now_micros
from bandscrape.models.dto import StoredTrackDTO, TrackDTO
from bandscrape.utils.cancellation import CancelToken

from .errors import DuplicateTrackError, InvalidLookup, StoreError


logger = logging.getLogger(__name__)

_tracks = Track.__table__

# Driver messages for a primary key / unique violation (SQLite, PostgreSQL, MySQL)
_DUPLICATE_KEY_MARKERS = ("UNIQUE constraint failed", "duplicate key value", "Duplicate entry")


def _is_duplicate_key(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return any(marker in message for marker in _DUPLICATE_KEY_MARKERS)


class LookupField(str, enum.Enum):
    """Track fields a lookup may filter on. Identifier and timestamp are not filterable."""

    TRACK_TITLE = "track_title"
    ALBUM_TITLE = "album_title"
    BAND_NAME = "band_name"
    TRACK_URL = "track_url"

    @property
    def column(self):
        return _LOOKUP_COLUMNS[self]

    @classmethod
    def parse(cls, key: Union[str, "LookupField"]) -> Optional["LookupField"]:
        try:
            return cls(key)
        except ValueError:
            return None


_LOOKUP_COLUMNS = {field: _tracks.c[field.value] for field in LookupField}


class TrackStore:
    """Durable track table with atomic batch inserts and filtered reads.

    Constructed once by the collector app around its engine and handed to
    whoever needs it; there is no module-level instance.
    """

    def __init__(self, engine: Engine, *, lookup_limit: Optional[int] = None):
        self._engine = engine
        self.lookup_limit = lookup_limit
        self._stamp_lock = threading.Lock()
        self._last_stamp = 0

    def _next_created(self) -> int:
        # Strictly increasing within this process so lookups order by insert time
        with self._stamp_lock:
            stamp = max(now_micros(), self._last_stamp + 1)
            self._last_stamp = stamp
            return stamp

    def insert_batch(self, tracks: Iterable[TrackDTO], *, cancel: Optional[CancelToken] = None) -> int:
        """Persist every track or none of them.

        One transaction, one parameterized INSERT executed per record. Any
        failure, including an expired ``cancel`` token, rolls the whole batch
        back. Returns the number of rows written.
        """
        stmt = insert(_tracks)
        written = 0
        try:
            with self._engine.begin() as conn:
                for track in tracks:
                    if cancel is not None:
                        cancel.raise_if_cancelled()
                    params = track.to_wire()
                    params["created"] = self._next_created()
                    try:
                        conn.execute(stmt, params)
                    except IntegrityError as exc:
                        if _is_duplicate_key(exc):
                            raise DuplicateTrackError(params["track_id"]) from exc
                        raise StoreError(f"write track {params['track_id']}: {exc.orig}") from exc
                    written += 1
                if cancel is not None:
                    cancel.raise_if_cancelled()
        except SQLAlchemyError as exc:
            raise StoreError(f"write batch: {exc}") from exc
        return written

    def lookup(self, filters: Mapping[Union[str, LookupField], Optional[str]]) -> List[StoredTrackDTO]:
        """Return tracks matching every recognized, non-empty filter, newest first."""
        criteria: Dict[LookupField, str] = {}
        for key, value in filters.items():
            field = LookupField.parse(key)
            if field is None or not value:
                continue
            criteria[field] = value

        if not criteria:
            raise InvalidLookup("not enough data")

        stmt = (
            select(_tracks)
            .where(and_(*(field.column == value for field, value in criteria.items())))
            .order_by(_tracks.c.created.desc(), _tracks.c.track_id.desc())
        )
        if self.lookup_limit:
            stmt = stmt.limit(self.lookup_limit)

        with self._engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [StoredTrackDTO.model_validate(dict(row)) for row in rows]

    def count(self) -> int:
        with self._engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(_tracks)).scalar_one()


__all__ = ["LookupField", "TrackStore"]
