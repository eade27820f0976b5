#!/usr/bin/env python
"""
Pydantic DTOs for catalog snapshots handed to the navigation core.

Rows are converted to these frozen models at the repository boundary so the
core never touches ORM instances and never mutates what storage returned.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class TrackDTO(BaseModel):
    """Immutable track snapshot."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    artist: str
    artist_id: str
    album: str = ""
    duration: int = Field(default=0, ge=0)
    added_at: str = ""


class ArtistDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    keywords: str = ""
    track_count: int = Field(default=0, ge=0)


class PlaylistDTO(BaseModel):
    """Playlist with its track ids in stored position order."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    track_ids: List[str] = Field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""


__all__ = ["TrackDTO", "ArtistDTO", "PlaylistDTO"]
