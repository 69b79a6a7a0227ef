"""Ingestion endpoint: validates a batch of tracks and stores it atomically."""

from __future__ import annotations

import gzip
import io
import json
import logging
import zlib

from flask import Blueprint, Response, current_app, request
from werkzeug.exceptions import RequestEntityTooLarge

from bandscrape.domain.tracks import (
    BatchRejected,
    DuplicateTrackError,
    StoreError,
    validate_batch,
)
from bandscrape.observability import record_submission_accepted, record_submission_rejected
from bandscrape.utils.cancellation import CancellationRequested

from .common import check_deadline, get_track_store, plain_text, request_deadline, timed_out


logger = logging.getLogger(__name__)

submit_bp = Blueprint('submit_bp', __name__)


class _BodyError(Exception):
    def __init__(self, message: str, status: int):
        super().__init__(message)
        self.status = status


def _read_body() -> bytes:
    """Return the request body, inflating gzip and capping its expanded size."""
    try:
        raw = request.get_data(cache=False)
    except RequestEntityTooLarge as exc:
        raise _BodyError("Request body too large", 413) from exc

    encoding = (request.headers.get('Content-Encoding') or '').strip().lower()
    if encoding in ('', 'identity'):
        return raw
    if encoding != 'gzip':
        raise _BodyError(f"Unsupported content encoding: {encoding}", 415)

    limit = int(current_app.config.get('MAX_DECOMPRESSED_BYTES', 1000000))
    try:
        with gzip.GzipFile(fileobj=io.BytesIO(raw)) as reader:
            data = reader.read(limit + 1)
    except (OSError, EOFError, zlib.error) as exc:
        # Bad magic raises OSError; a valid header over corrupt deflate data raises zlib.error
        raise _BodyError(f"Failed to read gzip body: {exc}", 400) from exc
    if len(data) > limit:
        raise _BodyError("Request body too large", 413)
    return data


def _ingest() -> Response:
    try:
        body = _read_body()
    except _BodyError as exc:
        record_submission_rejected("body")
        return plain_text(str(exc), exc.status)
    check_deadline()

    try:
        payload = json.loads(body)
    except RecursionError:
        record_submission_rejected("json")
        return plain_text("Failed to decode JSON: nesting too deep", 400)
    except ValueError as exc:
        record_submission_rejected("json")
        return plain_text(f"Failed to decode JSON: {exc}", 400)
    check_deadline()

    try:
        tracks = validate_batch(payload, max_size=int(current_app.config.get('MAX_BATCH_SIZE', 100)))
    except BatchRejected as exc:
        record_submission_rejected("validation")
        if exc.record is not None:
            logger.warning(
                "Received invalid track in submission at index %s: %r (%s)",
                exc.index, exc.record, exc.detail,
                extra={"record_index": exc.index},
            )
        else:
            logger.warning("Rejected submission: %s", exc.reason)
        return plain_text(exc.reason, 400)
    check_deadline()

    try:
        written = get_track_store().insert_batch(tracks, cancel=request_deadline())
    except DuplicateTrackError as exc:
        record_submission_rejected("duplicate")
        logger.warning("Rejected submission of %d track(s): %s", len(tracks), exc, extra={"track_id": exc.track_id})
        return plain_text(f"Failed to write to database: {exc}", 409)
    except StoreError as exc:
        record_submission_rejected("storage")
        logger.error("Failed to write submission to database: %s", exc, exc_info=True)
        return plain_text("Failed to write to database", 500)

    record_submission_accepted(written)
    logger.info("Received submission with %d track(s)!", written, extra={"track_count": written})
    return Response(status=201)


@submit_bp.route('/submit', methods=['POST'])
def submit_tracks():
    try:
        return _ingest()
    except CancellationRequested:
        record_submission_rejected("timeout")
        logger.warning("Submission timed out; nothing was stored")
        return timed_out()
