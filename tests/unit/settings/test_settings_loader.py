import importlib

import pytest
from pydantic import ValidationError


@pytest.fixture
def reload_settings(monkeypatch):
    """Reload config and settings so class attributes pick up the patched env."""
    import config as _config
    import bandscrape.settings as settings

    def _reload():
        importlib.reload(_config)
        importlib.reload(settings)
        return _config, settings

    yield _reload
    # Restore module state from the unpatched environment
    monkeypatch.undo()
    importlib.reload(_config)
    importlib.reload(settings)


@pytest.mark.unit
def test_env_precedence_for_scraper_fields(monkeypatch, reload_settings):
    monkeypatch.setenv("BANDCAMP_API_URL", "https://api.test/tralbum_details")
    monkeypatch.setenv("BANDCAMP_BAND_ID", "7")
    monkeypatch.setenv("BANDSCRAPE_SUBMIT_URL", "http://collector.test:9000/submit")
    monkeypatch.setenv("SCRAPER_BATCH_SIZE", "25")
    monkeypatch.setenv("SCRAPER_PACING_MS", "250")
    monkeypatch.setenv("SCRAPER_DEFAULT_RETRY_AFTER", "9")
    monkeypatch.setenv("SCRAPER_HTTP_TIMEOUT", "2.5")

    _config, settings = reload_settings()
    s = settings.load_scraper_settings()

    assert s.api_url == _config.Config.BANDCAMP_API_URL == "https://api.test/tralbum_details"
    assert s.band_id == 7
    assert s.submit_url == "http://collector.test:9000/submit"
    assert s.batch_size == 25
    assert s.pacing_ms == 250
    assert s.default_retry_after == 9
    assert s.http_timeout == 2.5


@pytest.mark.unit
def test_defaults_when_env_is_unset(monkeypatch, reload_settings):
    for name in (
        "BANDCAMP_API_URL",
        "BANDSCRAPE_SUBMIT_URL",
        "SCRAPER_BATCH_SIZE",
        "SCRAPER_PACING_MS",
        "SCRAPER_DEFAULT_RETRY_AFTER",
    ):
        monkeypatch.delenv(name, raising=False)

    _config, settings = reload_settings()
    s = settings.load_scraper_settings()

    assert s.api_url.endswith("/api/mobile/26/tralbum_details")
    assert s.submit_url == "http://127.0.0.1:8585/submit"
    assert s.batch_size == 100
    assert s.pacing_ms == 1000
    assert s.default_retry_after == 3


@pytest.mark.unit
def test_unparsable_numbers_fall_back_to_defaults(monkeypatch, reload_settings):
    monkeypatch.setenv("SCRAPER_BATCH_SIZE", "lots")
    monkeypatch.setenv("MAX_BATCH_SIZE", "-3")

    _config, settings = reload_settings()

    assert _config.Config.SCRAPER_BATCH_SIZE == 100
    assert _config.Config.MAX_BATCH_SIZE == 1


@pytest.mark.unit
def test_data_dir_controls_default_database_location(monkeypatch, reload_settings, tmp_path):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("BANDSCRAPE_DATA_DIR", str(tmp_path / "archive"))

    _config, _ = reload_settings()

    uri = _config.Config.SQLALCHEMY_DATABASE_URI
    assert uri.startswith("sqlite:///")
    assert uri.replace("\\", "/").endswith("/archive/bs.db")


@pytest.mark.unit
def test_overrides_win_and_none_is_ignored():
    from bandscrape.settings import load_scraper_settings

    s = load_scraper_settings({"submit_url": "http://other.test/submit", "batch_size": None, "pacing_ms": 0})
    assert s.submit_url == "http://other.test/submit"
    assert s.pacing_ms == 0
    assert s.batch_size >= 1


@pytest.mark.unit
@pytest.mark.parametrize(
    "overrides",
    [
        {"submit_url": "collector.test/submit"},
        {"api_url": "ftp://api.test/x"},
        {"batch_size": 0},
        {"pacing_ms": -1},
        {"http_timeout": 0},
    ],
)
def test_invalid_overrides_are_rejected(overrides):
    from bandscrape.settings import load_scraper_settings

    with pytest.raises(ValidationError):
        load_scraper_settings(overrides)


@pytest.mark.unit
def test_build_sampler_wires_components_from_settings():
    from bandscrape.scraper import Sampler, Submitter, TralbumFetcher
    from bandscrape.settings import build_sampler, load_scraper_settings

    s = load_scraper_settings({
        "api_url": "https://api.test/t",
        "submit_url": "http://collector.test/submit",
        "batch_size": 5,
        "pacing_ms": 10,
        "default_retry_after": 4,
    })
    sampler = build_sampler(s)

    assert isinstance(sampler, Sampler)
    assert isinstance(sampler.fetcher, TralbumFetcher)
    assert isinstance(sampler.submitter, Submitter)
    assert sampler.batch_size == 5
    assert sampler.fetcher.api_url == "https://api.test/t"
    assert sampler.fetcher.default_retry_after == 4
    assert sampler.submitter.submit_url == "http://collector.test/submit"
