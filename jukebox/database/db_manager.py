# jukebox/database/db_manager.py
from flask_sqlalchemy import SQLAlchemy
import os
import logging
from datetime import datetime
from sqlalchemy import ForeignKey, Index
from sqlalchemy.engine import make_url
from sqlalchemy.orm import relationship

from jukebox.models.dto import ArtistDTO, PlaylistDTO, TrackDTO
from jukebox.support.identity import derive_artist_id

# Initialize the SQLAlchemy object
db = SQLAlchemy()
logger = logging.getLogger(__name__)

ADDED_AT_FORMAT = "%Y-%m-%d %H:%M:%S"


def _format_timestamp(value):
    return value.strftime(ADDED_AT_FORMAT) if value else ""


def _artist_id_from(column: str):
    """Column default deriving the artist id from the row's name column."""
    def _default(context):
        return derive_artist_id(context.get_current_parameters()[column])
    return _default


class Artist(db.Model):
    __tablename__ = 'artists'

    # artist.{fnv1a64 of the normalized name}
    id = db.Column(db.String(64), primary_key=True, default=_artist_id_from('name'))
    name = db.Column(db.String(255), nullable=False)
    # Comma separated aliases matched by voice search
    keywords = db.Column(db.String(500), nullable=False, default='')

    def to_dto(self, track_count: int = 0) -> ArtistDTO:
        return ArtistDTO(id=self.id, name=self.name, keywords=self.keywords or '', track_count=track_count)

    def to_dict(self, track_count: int = 0) -> dict:
        dto = self.to_dto(track_count)
        return {
            'id': dto.id,
            'name': dto.name,
            'keywords': dto.keywords,
            'trackCount': dto.track_count,
        }

    def __repr__(self) -> str:
        return f"<Artist {self.name}>"


class Track(db.Model):
    __tablename__ = 'tracks'

    id = db.Column(db.String(64), primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    artist = db.Column(db.String(255), nullable=False)
    artist_id = db.Column(db.String(64), nullable=False, default=_artist_id_from('artist'), index=True)
    album = db.Column(db.String(255), nullable=False, default='')
    duration = db.Column(db.Integer, nullable=False, default=0)  # seconds
    added_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index('idx_tracks_added_at', 'added_at'),
    )

    def to_dto(self) -> TrackDTO:
        return TrackDTO(
            id=self.id,
            title=self.title,
            artist=self.artist,
            artist_id=self.artist_id or '',
            album=self.album or '',
            duration=self.duration or 0,
            added_at=_format_timestamp(self.added_at),
        )

    def to_dict(self) -> dict:
        """Converts the Track to the camelCase shape served by the catalog API."""
        dto = self.to_dto()
        return {
            'id': dto.id,
            'title': dto.title,
            'artist': dto.artist,
            'artistId': dto.artist_id,
            'album': dto.album,
            'duration': dto.duration,
            'addedAt': dto.added_at,
        }

    def __repr__(self):
        return f'<Track {self.title} by {self.artist}>'


class Playlist(db.Model):
    __tablename__ = 'playlists'

    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    entries = relationship(
        'PlaylistTrack',
        back_populates='playlist',
        order_by='PlaylistTrack.position',
        cascade='all, delete-orphan',
        lazy='selectin',
    )

    def to_dto(self) -> PlaylistDTO:
        return PlaylistDTO(
            id=self.id,
            name=self.name,
            track_ids=[entry.track_id for entry in self.entries],
            created_at=_format_timestamp(self.created_at),
            updated_at=_format_timestamp(self.updated_at),
        )

    def to_dict(self, *, include_tracks: bool = False) -> dict:
        dto = self.to_dto()
        data = {
            'id': dto.id,
            'name': dto.name,
            'createdAt': dto.created_at,
            'updatedAt': dto.updated_at,
            'trackCount': len(dto.track_ids),
        }
        if include_tracks:
            data['trackIds'] = list(dto.track_ids)
        return data


class PlaylistTrack(db.Model):
    __tablename__ = 'playlist_tracks'

    playlist_id = db.Column(
        db.String(64),
        ForeignKey('playlists.id', ondelete='CASCADE'),
        primary_key=True,
    )
    track_id = db.Column(
        db.String(64),
        ForeignKey('tracks.id', ondelete='CASCADE'),
        primary_key=True,
    )
    position = db.Column(db.Integer, nullable=False, default=0)

    playlist = relationship('Playlist', back_populates='entries')
    track = relationship('Track')

    __table_args__ = (
        Index('idx_playlist_tracks_order', 'playlist_id', 'position'),
    )


def initialize_database(app):
    """
    Initializes the SQLAlchemy extension with the Flask app instance
    and creates all database tables if they don't already exist.
    """
    db.init_app(app)
    # Ensure the instance folder exists for SQLite database file
    instance_path = app.instance_path
    if not os.path.exists(instance_path):
        os.makedirs(instance_path)
        logger.info("Created instance folder: %s", instance_path)

    # Ensure the directory for the configured SQLite file exists
    try:
        uri = app.config.get('SQLALCHEMY_DATABASE_URI')
        if uri:
            url = make_url(uri)
            # Only handle file-based SQLite (not :memory:)
            if url.get_backend_name() == 'sqlite' and url.database and url.database != ':memory:':
                db_dir = os.path.dirname(url.database)
                if db_dir and not os.path.exists(db_dir):
                    os.makedirs(db_dir, exist_ok=True)
                    logger.info("Created SQLite DB directory: %s", db_dir)
    except Exception as e:
        # Don't block app startup on path parsing issues; log and continue
        logger.warning("Could not ensure SQLite directory exists: %s", e)

    # Create database tables within the application context
    with app.app_context():
        db.create_all()
        logger.info("Database tables created or already exist.")
