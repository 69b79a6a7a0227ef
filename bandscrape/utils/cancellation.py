from __future__ import annotations

import threading
import time
from typing import Callable, Optional


class CancellationRequested(Exception):
    """Raised to cooperatively abort long-running tasks on request or deadline."""
    pass


class CancelToken:
    """Cooperative cancellation flag with an optional monotonic deadline.

    The scraper shares one token between its loop and the fetcher's backoff so a
    stop request interrupts a long Retry-After sleep. The collector creates one
    per request with ``timeout`` set to enforce the handling deadline.
    """

    def __init__(self, timeout: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self._event = threading.Event()
        self._clock = clock
        self.deadline = None if timeout is None else clock() + timeout

    def cancel(self) -> None:
        self._event.set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and self._clock() >= self.deadline

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self.expired

    def remaining(self) -> Optional[float]:
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - self._clock())

    def wait(self, seconds: float) -> bool:
        """Block for up to ``seconds``; return True if cancelled meanwhile."""
        remaining = self.remaining()
        if remaining is not None:
            seconds = min(seconds, remaining)
        if seconds > 0:
            self._event.wait(seconds)
        return self.cancelled

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancellationRequested("cancelled")
        if self.expired:
            raise CancellationRequested("deadline exceeded")


def pause(seconds: float, token: CancelToken, sleep: Optional[Callable[[float], None]] = None) -> None:
    """Sleep for ``seconds`` unless ``token`` fires first.

    ``sleep`` replaces the token's own wait, which keeps tests instantaneous.
    """
    if seconds > 0:
        if sleep is None:
            token.wait(seconds)
        else:
            sleep(seconds)
    token.raise_if_cancelled()


__all__ = ["CancellationRequested", "CancelToken", "pause"]
