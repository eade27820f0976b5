"""Playback contexts: the ordered collection that bounds navigation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ContextKind(str, Enum):
    ALL = "all"
    ARTIST = "artist"
    PLAYLIST = "playlist"
    SINGLE = "single"


_SCOPED_KINDS = (ContextKind.ARTIST, ContextKind.PLAYLIST)


@dataclass(frozen=True)
class PlaybackContext:
    """Tagged variant: All, Artist(artist_id), Playlist(playlist_id) or Single.

    Only the Artist and Playlist variants carry an entity id; constructing
    any other combination raises ValueError. Use the classmethods rather
    than the constructor.
    """

    kind: ContextKind
    entity_id: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.kind, ContextKind):
            object.__setattr__(self, "kind", ContextKind(self.kind))
        if self.kind in _SCOPED_KINDS:
            if not self.entity_id:
                raise ValueError(f"{self.kind.value} context requires an entity id")
        elif self.entity_id is not None:
            raise ValueError(f"{self.kind.value} context does not take an entity id")

    @classmethod
    def all(cls) -> "PlaybackContext":
        return cls(ContextKind.ALL)

    @classmethod
    def artist(cls, artist_id: str) -> "PlaybackContext":
        return cls(ContextKind.ARTIST, artist_id)

    @classmethod
    def playlist(cls, playlist_id: str) -> "PlaybackContext":
        return cls(ContextKind.PLAYLIST, playlist_id)

    @classmethod
    def single(cls) -> "PlaybackContext":
        return cls(ContextKind.SINGLE)

    @property
    def is_single(self) -> bool:
        return self.kind is ContextKind.SINGLE

    def __str__(self) -> str:
        if self.entity_id:
            return f"{self.kind.value}:{self.entity_id}"
        return self.kind.value


__all__ = ["ContextKind", "PlaybackContext"]
