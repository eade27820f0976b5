#!/usr/bin/env python
"""
Adjacency over a context's ordered track sequence.

This is the only place that computes queue positions and lookahead flags.
Both protocol adapters read ``has_next`` / ``has_previous`` off the Step they
get back instead of doing index arithmetic of their own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from jukebox.domain.catalog.repository import CatalogRepository
from jukebox.errors import CatalogUnavailable
from jukebox.models.dto import TrackDTO
from jukebox.observability.metrics import record_navigation

from .context import PlaybackContext
from .resolver import ContextResolver
from .results import Lookup
from .tokens import NavigationToken

logger = logging.getLogger(__name__)


class Direction(str, Enum):
    NEXT = "next"
    PREVIOUS = "previous"


@dataclass(frozen=True)
class Position:
    """A track id at ``index`` within a sequence of ``length`` ids."""

    track_id: str
    index: int
    length: int

    @property
    def has_next(self) -> bool:
        return self.index + 1 < self.length

    @property
    def has_previous(self) -> bool:
        return self.index > 0


def locate(sequence: Sequence[str], track_id: str) -> Optional[Position]:
    try:
        index = list(sequence).index(track_id)
    except ValueError:
        return None
    return Position(track_id, index, len(sequence))


def step(sequence: Sequence[str], track_id: str, direction: Direction) -> Optional[Position]:
    """Neighbour of ``track_id`` in ``direction``, or None at the boundary or when absent.

    After NEXT from index i the result's has_next equals ``i + 2 < N``; after
    PREVIOUS it equals ``i - 1 < N - 1``.
    """
    current = locate(sequence, track_id)
    if current is None:
        return None
    target = current.index + 1 if direction is Direction.NEXT else current.index - 1
    if target < 0 or target >= current.length:
        return None
    return Position(sequence[target], target, current.length)


@dataclass(frozen=True)
class Step:
    """A resolved track plus where it sits in its context."""

    track: TrackDTO
    context: PlaybackContext
    position: Position

    @property
    def has_next(self) -> bool:
        return self.position.has_next

    @property
    def has_previous(self) -> bool:
        return self.position.has_previous

    @property
    def token(self) -> NavigationToken:
        return NavigationToken(self.track.id, self.context)


class AdjacencyEngine:
    def __init__(self, resolver: ContextResolver, repository: CatalogRepository):
        self.resolver = resolver
        self.repository = repository

    def _get_track(self, track_id: str) -> Optional[TrackDTO]:
        try:
            return self.repository.get_track(track_id)
        except CatalogUnavailable as exc:
            logger.error("Track lookup for %s failed; treating as missing: %s", track_id, exc)
            return None

    def first(self, context: PlaybackContext, anchor_track_id: Optional[str] = None) -> Lookup[Step]:
        """Head of the context's sequence; ``has_next`` is ``length > 1``."""
        sequence = self.resolver.resolve(context, anchor_track_id)
        if not sequence:
            record_navigation("first", "not_found")
            return Lookup.not_found(f"{context} is empty")
        track = self._get_track(sequence[0])
        if track is None:
            record_navigation("first", "not_found")
            return Lookup.not_found(f"{sequence[0]} vanished")
        record_navigation("first", "found")
        return Lookup.found(Step(track, context, Position(track.id, 0, len(sequence))))

    def current(self, context: PlaybackContext, track_id: str) -> Lookup[Step]:
        """Re-resolve ``track_id`` itself and refresh its lookahead flags.

        Only a track that no longer exists is NOT_FOUND. A track that still
        exists but has left its context comes back with no neighbours.
        """
        track = self._get_track(track_id)
        if track is None:
            record_navigation("current", "not_found")
            return Lookup.not_found(f"{track_id} does not exist")
        position = None
        if not context.is_single:
            position = locate(self.resolver.resolve(context), track_id)
        if position is None:
            position = Position(track_id, 0, 1)
        record_navigation("current", "found")
        return Lookup.found(Step(track, context, position))

    def next(self, context: PlaybackContext, track_id: str) -> Lookup[Step]:
        return self._step(context, track_id, Direction.NEXT)

    def previous(self, context: PlaybackContext, track_id: str) -> Lookup[Step]:
        return self._step(context, track_id, Direction.PREVIOUS)

    def _step(self, context: PlaybackContext, track_id: str, direction: Direction) -> Lookup[Step]:
        if context.is_single:
            record_navigation(direction.value, "not_found")
            return Lookup.not_found("single context has no neighbours")
        position = step(self.resolver.resolve(context), track_id, direction)
        if position is None:
            record_navigation(direction.value, "not_found")
            return Lookup.not_found(f"no {direction.value} track for {track_id} in {context}")
        track = self._get_track(position.track_id)
        if track is None:
            record_navigation(direction.value, "not_found")
            return Lookup.not_found(f"{position.track_id} vanished")
        record_navigation(direction.value, "found")
        return Lookup.found(Step(track, context, position))


__all__ = ["Direction", "Position", "Step", "AdjacencyEngine", "locate", "step"]
