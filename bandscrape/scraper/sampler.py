from __future__ import annotations

import logging
import random
import time
from dataclasses import asdict, dataclass
from typing import Callable, List, Optional

from bandscrape.models.dto import TrackDTO
from bandscrape.utils.cancellation import CancellationRequested, CancelToken, pause

from .fetcher import FetchError, TralbumFetcher
from .submitter import SubmissionError, Submitter

logger = logging.getLogger(__name__)

MAX_SAMPLE_ID = 2**32 - 1
DEFAULT_BATCH_SIZE = 100
DEFAULT_PACING_MS = 1000


@dataclass
class SamplerStats:
    attempts: int = 0
    found: int = 0
    not_found: int = 0
    errors: int = 0
    batches_submitted: int = 0
    batches_failed: int = 0
    tracks_submitted: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


class Sampler:
    """Drives the fetcher over random ids at a fixed cadence and ships batches.

    A batch always spans ``batch_size`` attempts; only found tracks end up in
    it. Pacing measures the whole fetch call, so backoff sleeps inside the
    fetcher count toward the budget.
    """

    def __init__(
        self,
        fetcher: TralbumFetcher,
        submitter: Submitter,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        pacing_ms: int = DEFAULT_PACING_MS,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.fetcher = fetcher
        self.submitter = submitter
        self.batch_size = batch_size
        self.pacing_ms = pacing_ms
        self._rng = rng or random.Random()
        self._clock = clock
        self._sleep = sleep
        self.stats = SamplerStats()

    def next_id(self) -> int:
        return self._rng.randint(0, MAX_SAMPLE_ID)

    def _pace(self, track_id: int, started: float, cancel: CancelToken) -> None:
        elapsed_ms = (self._clock() - started) * 1000
        remaining_ms = self.pacing_ms - elapsed_ms
        if remaining_ms > 0:
            logger.debug("%s - WAIT - %d ms", track_id, remaining_ms)
            pause(remaining_ms / 1000, cancel, self._sleep)

    def attempt(self, cancel: CancelToken) -> Optional[TrackDTO]:
        """Sample one id; return the track if found, None otherwise."""
        track_id = self.next_id()
        started = self._clock()
        error: Optional[FetchError] = None
        track: Optional[TrackDTO] = None
        try:
            track = self.fetcher.fetch(track_id, cancel)
        except FetchError as exc:
            error = exc

        self.stats.attempts += 1
        self._pace(track_id, started, cancel)

        if error is not None:
            self.stats.errors += 1
            logger.warning("%s - ERR - %s", track_id, error)
            return None
        if track is None:
            self.stats.not_found += 1
            logger.debug("%s - NOK", track_id)
            return None

        self.stats.found += 1
        logger.info("%s - OK", track_id)
        return track

    def collect_batch(self, cancel: Optional[CancelToken] = None) -> List[TrackDTO]:
        cancel = cancel or CancelToken()
        batch: List[TrackDTO] = []
        for _ in range(self.batch_size):
            track = self.attempt(cancel)
            if track is not None:
                batch.append(track)
        return batch

    def submit_batch(self, batch: List[TrackDTO]) -> bool:
        try:
            self.submitter.submit(batch)
        except SubmissionError as exc:
            # No retry queue; the batch is lost
            self.stats.batches_failed += 1
            logger.error("Failed to submit %d track(s): %s", len(batch), exc)
            return False
        self.stats.batches_submitted += 1
        self.stats.tracks_submitted += len(batch)
        logger.info("Submitted %d track(s)!", len(batch))
        return True

    def run_batch(self, cancel: Optional[CancelToken] = None) -> bool:
        batch = self.collect_batch(cancel)
        return self.submit_batch(batch)

    def run_forever(self, cancel: Optional[CancelToken] = None) -> SamplerStats:
        cancel = cancel or CancelToken()
        logger.info(
            "Sampler started: batch_size=%s, pacing=%sms, endpoint=%s",
            self.batch_size, self.pacing_ms, self.submitter.submit_url,
        )
        while not cancel.cancelled:
            try:
                self.run_batch(cancel)
            except CancellationRequested:
                logger.info("Sampler stopping; in-progress batch discarded")
                break
            logger.info("Sampler totals: %s", self.stats.to_dict())
        return self.stats


__all__ = ["Sampler", "SamplerStats", "MAX_SAMPLE_ID"]
