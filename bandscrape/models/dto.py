#!/usr/bin/env python
"""
Pydantic DTOs for the track records exchanged between scraper and collector.

The wire format is a flat JSON object per track; ``TrackDTO`` mirrors it
exactly so both ends serialize through the same model.
"""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class TrackDTO(BaseModel):
    """A discovered track as produced by the fetcher and sent for submission."""

    model_config = ConfigDict(extra="ignore")

    track_id: int
    track_title: str
    album_title: str = ""
    band_name: str
    track_url: str

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(include={"track_id", "track_title", "album_title", "band_name", "track_url"})


class StoredTrackDTO(TrackDTO):
    """A persisted track, carrying the store-assigned creation marker."""

    created: int

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


__all__ = ["TrackDTO", "StoredTrackDTO"]
