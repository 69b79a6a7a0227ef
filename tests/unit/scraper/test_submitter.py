import gzip
import json

import pytest
import requests

from tests.support.factories import TrackDTOFactory
from tests.support.stubs import FakeResponse, FakeSession


def _submitter(session):
    from bandscrape.scraper.submitter import Submitter

    return Submitter("http://collector.test/submit", session=session)


@pytest.mark.unit
def test_submit_posts_gzipped_json_array():
    session = FakeSession([FakeResponse(201, text="")])
    tracks = TrackDTOFactory.build_batch(3)

    _submitter(session).submit(tracks)

    call = session.calls[0]
    assert call["url"] == "http://collector.test/submit"
    assert call["headers"]["Content-Encoding"] == "gzip"
    assert call["headers"]["Content-Type"] == "application/json"
    body = json.loads(gzip.decompress(call["data"]).decode("utf-8"))
    assert [row["track_id"] for row in body] == [t.track_id for t in tracks]
    assert set(body[0]) == {"track_id", "track_title", "album_title", "band_name", "track_url"}


@pytest.mark.unit
def test_empty_batch_is_sent_as_empty_array():
    session = FakeSession([FakeResponse(400, text="Too little tracks!\n")])
    from bandscrape.scraper.submitter import SubmissionError

    with pytest.raises(SubmissionError):
        _submitter(session).submit([])
    assert json.loads(gzip.decompress(session.calls[0]["data"])) == []


@pytest.mark.unit
@pytest.mark.parametrize("status", [200, 400, 409, 500])
def test_any_status_other_than_201_fails_the_batch(status):
    from bandscrape.scraper.submitter import SubmissionError

    session = FakeSession([FakeResponse(status, text="  nope \n")])
    with pytest.raises(SubmissionError) as excinfo:
        _submitter(session).submit(TrackDTOFactory.build_batch(2))
    assert excinfo.value.status_code == status
    assert str(excinfo.value).endswith("nope")
    assert len(session.calls) == 1


@pytest.mark.unit
def test_transport_error_is_submission_error():
    from bandscrape.scraper.submitter import SubmissionError

    session = FakeSession([requests.exceptions.Timeout("slow")])
    with pytest.raises(SubmissionError, match="send POST request"):
        _submitter(session).submit(TrackDTOFactory.build_batch(1))
