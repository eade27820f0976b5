"""In-memory stand-ins for the catalog storage collaborator."""

from typing import Dict, Iterable, List, Optional

from jukebox.domain.catalog.repository import CatalogRepository
from jukebox.errors import CatalogUnavailable
from jukebox.models.dto import PlaylistDTO, TrackDTO
from jukebox.support.identity import derive_artist_id


def make_track(track_id: str, title: str, artist: str = "Artist", *, minute: int = 0) -> TrackDTO:
    """Track snapshot; a larger ``minute`` means more recently added."""
    return TrackDTO(
        id=track_id,
        title=title,
        artist=artist,
        artist_id=derive_artist_id(artist),
        album="Album",
        duration=200,
        added_at=f"2024-01-01 12:{minute:02d}:00",
    )


def _squash(value: str) -> str:
    return "".join((value or "").split()).lower()


class InMemoryCatalog(CatalogRepository):
    """Catalog over plain dicts, ordered the same way as the SQL implementation."""

    def __init__(
        self,
        tracks: Iterable[TrackDTO] = (),
        playlists: Iterable[PlaylistDTO] = (),
        artist_keywords: Optional[Dict[str, str]] = None,
    ):
        self.tracks: Dict[str, TrackDTO] = {t.id: t for t in tracks}
        self.playlists: Dict[str, PlaylistDTO] = {p.id: p for p in playlists}
        self.artist_keywords = dict(artist_keywords or {})
        self.calls: List[str] = []

    def remove_track(self, track_id: str) -> None:
        self.tracks.pop(track_id, None)

    def _ordered(self) -> List[TrackDTO]:
        return sorted(self.tracks.values(), key=lambda t: (t.added_at, t.id), reverse=True)

    def list_all_track_ids(self) -> List[str]:
        self.calls.append("list_all_track_ids")
        return [t.id for t in self._ordered()]

    def list_track_ids_by_artist(self, artist_id: str) -> List[str]:
        self.calls.append("list_track_ids_by_artist")
        return [t.id for t in self._ordered() if t.artist_id == artist_id]

    def list_track_ids_for_playlist(self, playlist_id: str) -> List[str]:
        self.calls.append("list_track_ids_for_playlist")
        playlist = self.playlists.get(playlist_id)
        if playlist is None:
            return []
        return [track_id for track_id in playlist.track_ids if track_id in self.tracks]

    def get_track(self, track_id: str) -> Optional[TrackDTO]:
        self.calls.append("get_track")
        return self.tracks.get(track_id)

    def get_playlist(self, playlist_id: str) -> Optional[PlaylistDTO]:
        self.calls.append("get_playlist")
        return self.playlists.get(playlist_id)

    def search_tracks_by_title(self, query: str) -> List[TrackDTO]:
        needle = _squash(query)
        if not needle:
            return []
        return [t for t in self._ordered() if needle in _squash(t.title)]

    def search_tracks_by_artist(self, query: str) -> List[TrackDTO]:
        needle = _squash(query)
        if not needle:
            return []
        return [
            t for t in self._ordered()
            if needle in _squash(t.artist) or needle in _squash(self.artist_keywords.get(t.artist_id, ""))
        ]

    def search_playlists_by_name(self, query: str) -> List[PlaylistDTO]:
        needle = (query or "").strip().lower()
        if not needle:
            return []
        return [p for p in self.playlists.values() if needle in p.name.lower()]


class UnavailableCatalog(CatalogRepository):
    """Every query fails as if storage stayed down through all retries."""

    def _fail(self, operation: str):
        raise CatalogUnavailable(operation, 3, RuntimeError("connection refused"))

    def list_all_track_ids(self):
        self._fail("list_all_track_ids")

    def list_track_ids_by_artist(self, artist_id):
        self._fail("list_track_ids_by_artist")

    def list_track_ids_for_playlist(self, playlist_id):
        self._fail("list_track_ids_for_playlist")

    def get_track(self, track_id):
        self._fail("get_track")

    def get_playlist(self, playlist_id):
        self._fail("get_playlist")

    def search_tracks_by_title(self, query):
        self._fail("search_tracks_by_title")

    def search_tracks_by_artist(self, query):
        self._fail("search_tracks_by_artist")

    def search_playlists_by_name(self, query):
        self._fail("search_playlists_by_name")


__all__ = ["InMemoryCatalog", "UnavailableCatalog", "make_track"]
