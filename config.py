#!/usr/bin/env python
# config.py
import os

# This assumes config.py is at the root of your project
basedir = os.path.abspath(os.path.dirname(__file__))


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


class Config:
    # Collector storage. The SQLite file always lives inside the data directory
    # unless DATABASE_URL points somewhere else explicitly.
    DATA_DIR = os.getenv('BANDSCRAPE_DATA_DIR', 'bs_data')
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(os.path.abspath(DATA_DIR), 'bs.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLITE_BUSY_TIMEOUT_SECONDS = _get_float('SQLITE_BUSY_TIMEOUT_SECONDS', 5.0)

    # Collector listen address (development server only; gunicorn binds on its own)
    HOST = os.getenv('BANDSCRAPE_HOST', '0.0.0.0')
    PORT = _get_int('BANDSCRAPE_PORT', 8585)

    # Request limits
    MAX_CONTENT_LENGTH = _get_int('MAX_CONTENT_LENGTH', 100000)
    MAX_DECOMPRESSED_BYTES = _get_int('MAX_DECOMPRESSED_BYTES', 1000000)
    REQUEST_TIMEOUT_SECONDS = _get_float('REQUEST_TIMEOUT_SECONDS', 5.0)

    # Ingestion and lookup
    MAX_BATCH_SIZE = max(1, _get_int('MAX_BATCH_SIZE', 100))
    LOOKUP_LIMIT = max(1, _get_int('LOOKUP_LIMIT', 1000))

    # Scraper client
    BANDCAMP_API_URL = os.getenv(
        'BANDCAMP_API_URL', 'https://bandcamp.com/api/mobile/26/tralbum_details'
    )
    BANDCAMP_BAND_ID = _get_int('BANDCAMP_BAND_ID', 1)
    SUBMIT_URL = os.getenv('BANDSCRAPE_SUBMIT_URL', 'http://127.0.0.1:8585/submit')
    SCRAPER_BATCH_SIZE = max(1, _get_int('SCRAPER_BATCH_SIZE', 100))
    SCRAPER_PACING_MS = max(0, _get_int('SCRAPER_PACING_MS', 1000))
    SCRAPER_DEFAULT_RETRY_AFTER = max(0, _get_int('SCRAPER_DEFAULT_RETRY_AFTER', 3))
    SCRAPER_HTTP_TIMEOUT = _get_float('SCRAPER_HTTP_TIMEOUT', 15.0)

    # Runtime behavior
    DEBUG = _get_bool('DEBUG', False)
    # Control console logging; when disabled, logs go only to file and JSON stdout
    ENABLE_CONSOLE_LOGS = _get_bool('ENABLE_CONSOLE_LOGS', False)
    LOG_DIR = os.getenv('LOG_DIR', os.path.join(basedir, 'log'))
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
