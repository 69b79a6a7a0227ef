import pytest

from tests.support.stubs import FakeClock


@pytest.mark.unit
def test_token_without_deadline_only_stops_on_cancel():
    from bandscrape.utils.cancellation import CancellationRequested, CancelToken

    token = CancelToken()
    assert token.remaining() is None
    assert token.cancelled is False
    token.raise_if_cancelled()

    token.cancel()
    assert token.cancelled is True
    with pytest.raises(CancellationRequested, match="cancelled"):
        token.raise_if_cancelled()


@pytest.mark.unit
def test_deadline_expires_with_the_clock():
    from bandscrape.utils.cancellation import CancellationRequested, CancelToken

    clock = FakeClock()
    token = CancelToken(timeout=5, clock=clock)
    assert token.remaining() == pytest.approx(5)

    clock.advance(4.5)
    assert not token.expired
    clock.advance(0.5)
    assert token.expired and token.cancelled
    assert token.remaining() == 0.0
    with pytest.raises(CancellationRequested, match="deadline exceeded"):
        token.raise_if_cancelled()


@pytest.mark.unit
def test_zero_timeout_is_already_expired():
    from bandscrape.utils.cancellation import CancelToken

    assert CancelToken(timeout=0).expired


@pytest.mark.unit
def test_wait_returns_immediately_once_cancelled():
    from bandscrape.utils.cancellation import CancelToken

    token = CancelToken()
    token.cancel()
    # Would block for an hour if the event were not set
    assert token.wait(3600) is True


@pytest.mark.unit
def test_pause_uses_injected_sleep_then_checks_token():
    from bandscrape.utils.cancellation import CancellationRequested, CancelToken, pause

    clock = FakeClock()
    token = CancelToken()
    pause(1.5, token, clock.sleep)
    assert clock.sleeps == [1.5]

    pause(0, token, clock.sleep)
    assert clock.sleeps == [1.5]

    token.cancel()
    with pytest.raises(CancellationRequested):
        pause(2, token, clock.sleep)
