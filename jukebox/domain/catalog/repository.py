from __future__ import annotations

import logging
import re
import time
from typing import Callable, List, Optional, TypeVar

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError

from jukebox.database.db_manager import db, Artist, Playlist, PlaylistTrack, Track
from jukebox.errors import CatalogUnavailable
from jukebox.models.dto import PlaylistDTO, TrackDTO
from jukebox.settings import AppSettings


logger = logging.getLogger(__name__)

T = TypeVar("T")

_WHITESPACE = re.compile(r"\s+")


def _strip_spaces(value: str) -> str:
    return _WHITESPACE.sub("", value or "")


class CatalogRepository:
    """Read interface the navigation core consumes.

    Id lists come back in navigation order and are empty for unknown
    artists or playlists. Implementations raise CatalogUnavailable when the
    backing store cannot answer.
    """

    def list_all_track_ids(self) -> List[str]:  # pragma: no cover - interface
        raise NotImplementedError

    def list_track_ids_by_artist(self, artist_id: str) -> List[str]:  # pragma: no cover - interface
        raise NotImplementedError

    def list_track_ids_for_playlist(self, playlist_id: str) -> List[str]:  # pragma: no cover - interface
        raise NotImplementedError

    def get_track(self, track_id: str) -> Optional[TrackDTO]:  # pragma: no cover - interface
        raise NotImplementedError

    def get_playlist(self, playlist_id: str) -> Optional[PlaylistDTO]:  # pragma: no cover - interface
        raise NotImplementedError

    def search_tracks_by_title(self, query: str) -> List[TrackDTO]:  # pragma: no cover - interface
        raise NotImplementedError

    def search_tracks_by_artist(self, query: str) -> List[TrackDTO]:  # pragma: no cover - interface
        raise NotImplementedError

    def search_playlists_by_name(self, query: str) -> List[PlaylistDTO]:  # pragma: no cover - interface
        raise NotImplementedError


class SqlCatalogRepository(CatalogRepository):
    """Flask-SQLAlchemy backed catalog with bounded retries."""

    def __init__(self, settings: AppSettings, *, sleep: Callable[[float], None] = time.sleep):
        self.max_retries = settings.catalog_max_retries
        self.backoff_seconds = settings.catalog_retry_backoff_seconds
        self._sleep = sleep

    def _run(self, operation: str, query: Callable[[], T]) -> T:
        last_error: Optional[SQLAlchemyError] = None
        for attempt in range(self.max_retries):
            try:
                return query()
            except SQLAlchemyError as exc:
                last_error = exc
                db.session.rollback()
                logger.warning(
                    "Catalog query %s failed (attempt %s/%s): %s",
                    operation, attempt + 1, self.max_retries, exc,
                )
            if attempt < self.max_retries - 1:
                self._sleep(self.backoff_seconds * (2 ** attempt))
        raise CatalogUnavailable(operation, self.max_retries, last_error)

    # --- ordered id sequences ---

    def list_all_track_ids(self) -> List[str]:
        def _query():
            rows = (
                db.session.query(Track.id)
                .order_by(Track.added_at.desc(), Track.id.desc())
                .all()
            )
            return [row[0] for row in rows]

        return self._run("list_all_track_ids", _query)

    def list_track_ids_by_artist(self, artist_id: str) -> List[str]:
        def _query():
            rows = (
                db.session.query(Track.id)
                .filter(Track.artist_id == artist_id)
                .order_by(Track.added_at.desc(), Track.id.desc())
                .all()
            )
            return [row[0] for row in rows]

        return self._run("list_track_ids_by_artist", _query)

    def list_track_ids_for_playlist(self, playlist_id: str) -> List[str]:
        def _query():
            rows = (
                db.session.query(PlaylistTrack.track_id)
                .join(Track, Track.id == PlaylistTrack.track_id)
                .filter(PlaylistTrack.playlist_id == playlist_id)
                .order_by(PlaylistTrack.position.asc())
                .all()
            )
            return [row[0] for row in rows]

        return self._run("list_track_ids_for_playlist", _query)

    # --- lookups ---

    def get_track(self, track_id: str) -> Optional[TrackDTO]:
        def _query():
            row = db.session.get(Track, track_id)
            return row.to_dto() if row else None

        return self._run("get_track", _query)

    def get_playlist(self, playlist_id: str) -> Optional[PlaylistDTO]:
        def _query():
            row = db.session.get(Playlist, playlist_id)
            return row.to_dto() if row else None

        return self._run("get_playlist", _query)

    # --- voice search (first match wins) ---

    def search_tracks_by_title(self, query: str) -> List[TrackDTO]:
        needle = _strip_spaces(query)
        if not needle:
            return []

        def _query():
            title = func.replace(Track.title, ' ', '', type_=db.String)
            rows = (
                Track.query.filter(title.contains(needle, autoescape=True))
                .order_by(Track.added_at.desc(), Track.id.desc())
                .all()
            )
            return [row.to_dto() for row in rows]

        return self._run("search_tracks_by_title", _query)

    def search_tracks_by_artist(self, query: str) -> List[TrackDTO]:
        needle = _strip_spaces(query)
        if not needle:
            return []

        def _query():
            name = func.replace(Artist.name, ' ', '', type_=db.String)
            keywords = func.replace(Artist.keywords, ' ', '', type_=db.String)
            rows = (
                Track.query.join(Artist, Track.artist_id == Artist.id)
                .filter(
                    or_(
                        name.contains(needle, autoescape=True),
                        keywords.contains(needle, autoescape=True),
                    )
                )
                .order_by(Track.added_at.desc(), Track.id.desc())
                .all()
            )
            return [row.to_dto() for row in rows]

        return self._run("search_tracks_by_artist", _query)

    def search_playlists_by_name(self, query: str) -> List[PlaylistDTO]:
        needle = (query or "").strip()
        if not needle:
            return []

        def _query():
            rows = (
                Playlist.query.filter(Playlist.name.contains(needle, autoescape=True))
                .order_by(Playlist.created_at.desc(), Playlist.id.desc())
                .all()
            )
            return [row.to_dto() for row in rows]

        return self._run("search_playlists_by_name", _query)


__all__ = ["CatalogRepository", "SqlCatalogRepository"]
