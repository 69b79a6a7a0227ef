"""Factory Boy factories for database models and wire records used in tests."""

import factory
from factory.alchemy import SQLAlchemyModelFactory

from bandscrape.database.db_manager import Track
from bandscrape.models.dto import TrackDTO


class _BaseFactory(SQLAlchemyModelFactory):
    class Meta:
        abstract = True
        sqlalchemy_session = None
        sqlalchemy_session_persistence = "flush"


class TrackRowFactory(_BaseFactory):
    class Meta:
        model = Track

    track_id = factory.Sequence(lambda n: 1000 + n)
    track_title = factory.Sequence(lambda n: f"Track {n}")
    album_title = "Album"
    band_name = factory.Sequence(lambda n: f"Band {n}")
    track_url = factory.LazyAttribute(lambda obj: f"https://band.bandcamp.com/track/track-{obj.track_id}")


class TrackDTOFactory(factory.Factory):
    class Meta:
        model = TrackDTO

    track_id = factory.Sequence(lambda n: 5000 + n)
    track_title = factory.Sequence(lambda n: f"Song {n}")
    album_title = "Record"
    band_name = "The Samplers"
    track_url = factory.LazyAttribute(lambda obj: f"https://samplers.bandcamp.com/track/song-{obj.track_id}")


_FACTORIES = [TrackRowFactory]


def set_session(session):
    for factory_cls in _FACTORIES:
        factory_cls._meta.sqlalchemy_session = session


def reset_session():
    for factory_cls in _FACTORIES:
        factory_cls._meta.sqlalchemy_session = None


__all__ = [
    "TrackRowFactory",
    "TrackDTOFactory",
    "set_session",
    "reset_session",
]
