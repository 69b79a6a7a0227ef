# database/db_manager.py
import logging
import os
import time

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.engine import make_url

# Initialize the SQLAlchemy object
db = SQLAlchemy()
logger = logging.getLogger(__name__)


def now_micros() -> int:
    return time.time_ns() // 1000


class Track(db.Model):
    """Append-only archive of discovered tracks, keyed by the platform's track id."""

    __tablename__ = 'tracks'

    track_id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    track_title = db.Column(db.Text, nullable=False, index=True)
    album_title = db.Column(db.Text, nullable=False, default='', server_default='', index=True)
    band_name = db.Column(db.Text, nullable=False, index=True)
    track_url = db.Column(db.Text, nullable=False, index=True)
    # Microseconds since the epoch, assigned by the store at insert time
    created = db.Column(db.BigInteger, nullable=False, default=now_micros, index=True)

    def to_dict(self) -> dict:
        return {
            'track_id': self.track_id,
            'track_title': self.track_title,
            'album_title': self.album_title,
            'band_name': self.band_name,
            'track_url': self.track_url,
            'created': self.created,
        }

    def __repr__(self) -> str:
        return f'<Track {self.track_id}: {self.track_title} by {self.band_name}>'


def _ensure_sqlite_directory(uri: str) -> None:
    url = make_url(uri)
    # Only handle file-based SQLite (not :memory:)
    if url.get_backend_name() == 'sqlite' and url.database and url.database != ':memory:':
        db_dir = os.path.dirname(url.database)
        if db_dir and not os.path.exists(db_dir):
            os.makedirs(db_dir, exist_ok=True)
            logger.info("Created data directory: %s", db_dir)


def initialize_database(app):
    """
    Initializes the SQLAlchemy extension with the Flask app instance
    and creates the tracks table if it doesn't already exist.

    Safe to run against an existing database file.
    """
    uri = app.config.get('SQLALCHEMY_DATABASE_URI')
    if uri:
        _ensure_sqlite_directory(uri)

    db.init_app(app)

    with app.app_context():
        db.create_all()
        logger.info("Database tables created or already exist.")
