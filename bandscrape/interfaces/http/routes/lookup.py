"""Lookup page: exact-match search over the four textual track fields."""

from __future__ import annotations

import logging

from flask import Blueprint, render_template, request
from sqlalchemy.exc import SQLAlchemyError

from bandscrape.domain.tracks import InvalidLookup, LookupField
from bandscrape.observability import record_lookup
from bandscrape.utils.cancellation import CancellationRequested

from .common import check_deadline, get_track_store, plain_text, timed_out


logger = logging.getLogger(__name__)

lookup_bp = Blueprint('lookup_bp', __name__)


@lookup_bp.route('/lookup', methods=['GET', 'POST'])
def lookup_tracks():
    tracks = None
    filters = {field.value: '' for field in LookupField}

    if request.method == 'POST':
        filters = {field.value: request.form.get(field.value, '') for field in LookupField}
        try:
            check_deadline()
            tracks = get_track_store().lookup(filters)
            check_deadline()
        except CancellationRequested:
            logger.warning("Lookup timed out")
            return timed_out()
        except InvalidLookup as exc:
            return plain_text(f"Failed to get tracks: {exc}", 400)
        except SQLAlchemyError as exc:
            logger.error("Lookup query failed: %s", exc, exc_info=True)
            return plain_text("Failed to get tracks", 500)

        logger.info("Lookup completed and returned %d tracks!", len(tracks), extra={"track_count": len(tracks)})
        record_lookup()

    return render_template('lookup.html', tracks=tracks, filters=filters)
