"""Stateless navigation: contexts, opaque tokens, sequence resolution and adjacency."""

from .adjacency import AdjacencyEngine, Direction, Position, Step, locate, step
from .context import ContextKind, PlaybackContext
from .resolver import ContextResolver
from .results import Lookup, LookupStatus
from .tokens import (
    ContentKind,
    ContentReference,
    NavigationToken,
    decode_content_reference,
    decode_navigation_token,
    decode_queue_item_id,
    encode_content_reference,
    encode_legacy_content_reference,
    encode_navigation_token,
)

__all__ = [
    "AdjacencyEngine",
    "Direction",
    "Position",
    "Step",
    "locate",
    "step",
    "ContextKind",
    "PlaybackContext",
    "ContextResolver",
    "Lookup",
    "LookupStatus",
    "ContentKind",
    "ContentReference",
    "NavigationToken",
    "decode_content_reference",
    "decode_navigation_token",
    "decode_queue_item_id",
    "encode_content_reference",
    "encode_legacy_content_reference",
    "encode_navigation_token",
]
