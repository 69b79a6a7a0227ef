#!/usr/bin/env python
"""
Scraper configuration schema.

Merges defaults from config.Config with optional runtime overrides and
provides a helper that wires the discovery pipeline from those settings.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config import Config


class ScraperSettings(BaseModel):
    """Settings for the discovery client."""

    model_config = ConfigDict(extra="ignore")

    api_url: str
    band_id: int = 1
    submit_url: str
    batch_size: int = Field(default=100, ge=1)
    pacing_ms: int = Field(default=1000, ge=0)
    default_retry_after: int = Field(default=3, ge=0)
    http_timeout: float = Field(default=15.0, gt=0)

    @field_validator("submit_url", "api_url")
    @classmethod
    def _require_http_url(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("must be an absolute http(s) URL")
        return value


def load_scraper_settings(overrides: Optional[Dict[str, Any]] = None) -> ScraperSettings:
    """Load settings merging config defaults with optional runtime overrides."""
    data: Dict[str, Any] = {
        "api_url": Config.BANDCAMP_API_URL,
        "band_id": Config.BANDCAMP_BAND_ID,
        "submit_url": Config.SUBMIT_URL,
        "batch_size": Config.SCRAPER_BATCH_SIZE,
        "pacing_ms": Config.SCRAPER_PACING_MS,
        "default_retry_after": Config.SCRAPER_DEFAULT_RETRY_AFTER,
        "http_timeout": Config.SCRAPER_HTTP_TIMEOUT,
    }
    if overrides:
        data.update({key: value for key, value in overrides.items() if value is not None})
    return ScraperSettings.model_validate(data)


def build_sampler(settings: ScraperSettings, **kwargs):
    """Wire fetcher, submitter and sampler from settings.

    Extra keyword arguments (``rng``, ``clock``, ``sleep``) go to the sampler.
    """
    from bandscrape.scraper import Sampler, Submitter, TralbumFetcher

    fetcher = TralbumFetcher(
        settings.api_url,
        band_id=settings.band_id,
        default_retry_after=settings.default_retry_after,
        timeout=settings.http_timeout,
    )
    submitter = Submitter(settings.submit_url, timeout=settings.http_timeout)
    return Sampler(
        fetcher,
        submitter,
        batch_size=settings.batch_size,
        pacing_ms=settings.pacing_ms,
        **kwargs,
    )


__all__ = [
    "ScraperSettings",
    "load_scraper_settings",
    "build_sampler",
]
