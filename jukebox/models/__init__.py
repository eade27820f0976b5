"""Immutable catalog snapshots handed to the domain layer."""

from .dto import ArtistDTO, PlaylistDTO, TrackDTO

__all__ = ["ArtistDTO", "PlaylistDTO", "TrackDTO"]
