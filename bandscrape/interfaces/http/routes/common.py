"""Helpers shared by the collector blueprints."""

from __future__ import annotations

from typing import Optional

from flask import Response, current_app, g

from bandscrape.domain.tracks import TrackStore
from bandscrape.utils.cancellation import CancelToken


def get_track_store() -> TrackStore:
    return current_app.extensions['track_store']


def request_deadline() -> Optional[CancelToken]:
    return g.get('request_deadline')


def check_deadline() -> None:
    """Raise ``CancellationRequested`` once the current request is out of time."""
    deadline = request_deadline()
    if deadline is not None:
        deadline.raise_if_cancelled()


def plain_text(message: str, status: int) -> Response:
    return Response(message + "\n", status=status, mimetype="text/plain")


def timed_out() -> Response:
    return plain_text("Timed out", 408)
