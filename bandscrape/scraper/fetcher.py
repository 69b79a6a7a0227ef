"""
Bandcamp tralbum-details client.

Looks up one track id per call. Rate limiting is absorbed here: a 429 moves
the fetcher into BACKOFF for the server's Retry-After hint, then back to
REQUESTING for the same id. The loop has no retry cap; only the cancel token
ends it early.
"""

from __future__ import annotations

import enum
import logging
from typing import Callable, Optional

import requests
from pydantic import ValidationError

from bandscrape.models.dto import TrackDTO
from bandscrape.utils.cancellation import CancelToken, pause

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://bandcamp.com/api/mobile/26/tralbum_details"
DEFAULT_RETRY_AFTER_SECONDS = 3
NOT_FOUND_PREFIX = "No such tralbum"
USER_AGENT = "bandscrape/1.0"


class FetchError(Exception):
    """A lookup failed for a reason other than rate limiting or a missing track."""


class FetchState(enum.Enum):
    REQUESTING = "requesting"
    BACKOFF = "backoff"


def parse_retry_after(value: Optional[str], default_seconds: int = DEFAULT_RETRY_AFTER_SECONDS) -> int:
    if not value:
        return default_seconds
    try:
        seconds = int(value.strip())
    except ValueError:
        return default_seconds
    if seconds < 0:
        return default_seconds
    return seconds


class TralbumFetcher:
    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        *,
        band_id: int = 1,
        default_retry_after: int = DEFAULT_RETRY_AFTER_SECONDS,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.api_url = api_url
        self.band_id = band_id
        self.default_retry_after = default_retry_after
        self.timeout = timeout
        self._sleep = sleep
        if session is None:
            session = requests.Session()
            session.headers.update({"User-Agent": USER_AGENT})
        self._session = session

    def fetch(self, track_id: int, cancel: Optional[CancelToken] = None) -> Optional[TrackDTO]:
        """Look up ``track_id``.

        Returns the track, or None when the platform reports no such tralbum.
        Raises ``FetchError`` for any other failure and ``CancellationRequested``
        if ``cancel`` fires while backing off.
        """
        cancel = cancel or CancelToken()
        state = FetchState.REQUESTING
        delay = 0

        while True:
            if state is FetchState.BACKOFF:
                logger.info("%s - WAIT - %s s", track_id, delay)
                pause(delay, cancel, self._sleep)
                state = FetchState.REQUESTING
                continue

            cancel.raise_if_cancelled()
            response = self._request(track_id)
            if response.status_code == 429:
                delay = parse_retry_after(response.headers.get("retry-after"), self.default_retry_after)
                state = FetchState.BACKOFF
                continue

            return self._parse(track_id, response)

    def _request(self, track_id: int) -> requests.Response:
        payload = {
            "tralbum_type": "t",
            "band_id": self.band_id,
            "tralbum_id": track_id,
        }
        try:
            return self._session.post(self.api_url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            raise FetchError(f"send POST request: {exc}") from exc

    def _parse(self, track_id: int, response: requests.Response) -> Optional[TrackDTO]:
        if response.status_code != 200:
            raise FetchError(f"non-200 response status code: {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            raise FetchError(f"decode response JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise FetchError("decode response JSON: expected an object")

        if data.get("error"):
            message = str(data.get("error_message") or "")
            if message.startswith(NOT_FOUND_PREFIX):
                return None
            raise FetchError(f"error true in response: {message}")

        try:
            return TrackDTO(
                track_id=track_id,
                track_title=data.get("title") or "",
                album_title=data.get("album_title") or "",
                band_name=data.get("tralbum_artist") or "",
                track_url=data.get("bandcamp_url") or "",
            )
        except ValidationError as exc:
            raise FetchError(f"unexpected response fields: {exc}") from exc


__all__ = [
    "DEFAULT_API_URL",
    "FetchError",
    "FetchState",
    "TralbumFetcher",
    "parse_retry_after",
]
