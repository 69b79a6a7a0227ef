from __future__ import annotations

from flask import Blueprint, Response
from prometheus_client import Counter, generate_latest

metrics_blueprint = Blueprint("metrics_bp", __name__)

CONTENT_TYPE_LATEST = "text/plain; version=0.0.4; charset=utf-8"

SUBMISSIONS_ACCEPTED = Counter(
    "bandscrape_submissions_accepted_total",
    "Submissions persisted by the collector.",
)
SUBMISSIONS_REJECTED = Counter(
    "bandscrape_submissions_rejected_total",
    "Submissions refused by the collector, by reason.",
    ["reason"],
)
TRACKS_STORED = Counter(
    "bandscrape_tracks_stored_total",
    "Track rows written to the store.",
)
LOOKUPS_SERVED = Counter(
    "bandscrape_lookups_total",
    "Lookups answered by the collector.",
)


def record_submission_accepted(track_count: int) -> None:
    SUBMISSIONS_ACCEPTED.inc()
    TRACKS_STORED.inc(track_count)


def record_submission_rejected(reason: str) -> None:
    SUBMISSIONS_REJECTED.labels(reason=reason).inc()


def record_lookup() -> None:
    LOOKUPS_SERVED.inc()


@metrics_blueprint.route("/metrics")
def metrics_endpoint() -> Response:
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
