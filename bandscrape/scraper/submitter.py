from __future__ import annotations

import gzip
import json
import logging
from typing import Optional, Sequence

import requests

from bandscrape.models.dto import TrackDTO

logger = logging.getLogger(__name__)


class SubmissionError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class Submitter:
    """Ships one batch to the collector's ingestion endpoint per call. No retries."""

    def __init__(self, submit_url: str, *, timeout: float = 15.0, session: Optional[requests.Session] = None):
        self.submit_url = submit_url
        self.timeout = timeout
        self._session = session or requests.Session()

    @staticmethod
    def encode(tracks: Sequence[TrackDTO]) -> bytes:
        body = json.dumps([track.to_wire() for track in tracks], ensure_ascii=False)
        return gzip.compress(body.encode("utf-8"))

    def submit(self, tracks: Sequence[TrackDTO]) -> None:
        try:
            response = self._session.post(
                self.submit_url,
                data=self.encode(tracks),
                headers={
                    "Content-Type": "application/json",
                    "Content-Encoding": "gzip",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise SubmissionError(f"send POST request: {exc}") from exc

        if response.status_code != 201:
            raise SubmissionError(
                f"non-201 response code {response.status_code}: {response.text.strip()}",
                status_code=response.status_code,
            )
        logger.debug("Collector accepted %d track(s)", len(tracks))


__all__ = ["Submitter", "SubmissionError"]
