from __future__ import annotations

import logging
from typing import List, Optional

from jukebox.domain.catalog.repository import CatalogRepository
from jukebox.errors import CatalogUnavailable

from .context import ContextKind, PlaybackContext

logger = logging.getLogger(__name__)


class ContextResolver:
    """Turns a PlaybackContext into its ordered track-id sequence.

    All and Artist sequences are newest-added first; Playlist sequences
    follow stored position. Unknown artists or playlists, and storage that
    stays unavailable after the repository's retries, resolve to an empty
    sequence.
    """

    def __init__(self, repository: CatalogRepository):
        self.repository = repository

    def resolve(self, context: PlaybackContext, anchor_track_id: Optional[str] = None) -> List[str]:
        """Return the ordered ids for ``context``.

        Single is the one-element sequence ``[anchor_track_id]`` while that
        track still exists, and empty otherwise.
        """
        try:
            if context.kind is ContextKind.ALL:
                return list(self.repository.list_all_track_ids())
            if context.kind is ContextKind.ARTIST:
                return list(self.repository.list_track_ids_by_artist(context.entity_id))
            if context.kind is ContextKind.PLAYLIST:
                return list(self.repository.list_track_ids_for_playlist(context.entity_id))
            if anchor_track_id and self.repository.get_track(anchor_track_id) is not None:
                return [anchor_track_id]
            return []
        except CatalogUnavailable as exc:
            logger.error("Resolving %s context failed; treating as empty: %s", context, exc)
            return []


__all__ = ["ContextResolver"]
