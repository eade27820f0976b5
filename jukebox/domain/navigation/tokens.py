#!/usr/bin/env python
"""
Opaque continuation state exchanged with the voice platform.

Two encodings live here and nowhere else:

- ContentReference (remote-resolution flow): ``content::<kind>::<entityId>``.
  Older clients still hold ``content-<kind>-<entityId>`` ids and the
  ``content-all`` sentinel, so the decoder tries the current separator first
  and then falls back to the hyphen split.
- NavigationToken (directive flow, and queue item ids of the
  remote-resolution flow): ``{"trackId", "context"}`` JSON wrapped in
  URL-safe unpadded base64. Tokens minted with the standard alphabet and
  padding still decode.

Decoders never raise; they return ``Lookup.invalid`` for anything malformed.
"""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .context import ContextKind, PlaybackContext
from .results import Lookup

logger = logging.getLogger(__name__)

CONTENT_PREFIX = "content"
CONTENT_SEPARATOR = "::"
LEGACY_SEPARATOR = "-"
LEGACY_ALL_SENTINEL = "content-all"

CONTEXT_SEPARATOR = "::"


class ContentKind(str, Enum):
    ALL = "all"
    TRACK = "track"
    ARTIST = "artist"
    PLAYLIST = "playlist"


@dataclass(frozen=True)
class ContentReference:
    """What the user asked for during selection; resolved again at initiation."""

    kind: ContentKind
    entity_id: str = ""

    def __post_init__(self):
        if not isinstance(self.kind, ContentKind):
            object.__setattr__(self, "kind", ContentKind(self.kind))
        if self.kind is ContentKind.ALL:
            if self.entity_id:
                raise ValueError("'all' content reference does not take an entity id")
        elif not self.entity_id:
            raise ValueError(f"{self.kind.value} content reference requires an entity id")

    @classmethod
    def everything(cls) -> "ContentReference":
        return cls(ContentKind.ALL)

    def to_context(self) -> PlaybackContext:
        if self.kind is ContentKind.ARTIST:
            return PlaybackContext.artist(self.entity_id)
        if self.kind is ContentKind.PLAYLIST:
            return PlaybackContext.playlist(self.entity_id)
        if self.kind is ContentKind.TRACK:
            return PlaybackContext.single()
        return PlaybackContext.all()


@dataclass(frozen=True)
class NavigationToken:
    track_id: str
    context: PlaybackContext


# --- ContentReference ---

def encode_content_reference(reference: ContentReference) -> str:
    return CONTENT_SEPARATOR.join((CONTENT_PREFIX, reference.kind.value, reference.entity_id))


def encode_legacy_content_reference(reference: ContentReference) -> str:
    """Hyphen format issued by earlier versions; kept for compatibility tests and tooling."""
    if reference.kind is ContentKind.ALL:
        return LEGACY_ALL_SENTINEL
    return LEGACY_SEPARATOR.join((CONTENT_PREFIX, reference.kind.value, reference.entity_id))


def _build_reference(prefix: str, kind_text: str, entity_id: str) -> Lookup[ContentReference]:
    if prefix != CONTENT_PREFIX:
        return Lookup.invalid(f"unexpected prefix {prefix!r}")
    try:
        kind = ContentKind(kind_text.lower())
    except ValueError:
        return Lookup.invalid(f"unknown content kind {kind_text!r}")
    if kind is ContentKind.ALL:
        return Lookup.found(ContentReference.everything())
    if not entity_id:
        return Lookup.invalid(f"{kind.value} reference without entity id")
    return Lookup.found(ContentReference(kind, entity_id))


def decode_content_reference(raw: object) -> Lookup[ContentReference]:
    """Parse a content id: current separator first, then the legacy hyphen form."""
    if not isinstance(raw, str) or not raw:
        return Lookup.invalid("empty content id")

    if CONTENT_SEPARATOR in raw:
        segments = raw.split(CONTENT_SEPARATOR)
        if len(segments) < 2:
            return Lookup.invalid("truncated content id")
        return _build_reference(segments[0], segments[1], CONTENT_SEPARATOR.join(segments[2:]))

    if raw == LEGACY_ALL_SENTINEL:
        return Lookup.found(ContentReference.everything())

    parts = raw.split(LEGACY_SEPARATOR)
    if len(parts) < 2:
        return Lookup.invalid("unrecognized content id format")
    return _build_reference(parts[0], parts[1], LEGACY_SEPARATOR.join(parts[2:]))


# --- PlaybackContext strings (token payload only) ---

def format_context(context: PlaybackContext) -> str:
    if context.entity_id:
        return f"{context.kind.value}{CONTEXT_SEPARATOR}{context.entity_id}"
    return context.kind.value


def parse_context(raw: object) -> Optional[PlaybackContext]:
    if not isinstance(raw, str) or not raw:
        return None
    if raw == ContextKind.ALL.value:
        return PlaybackContext.all()
    if raw == ContextKind.SINGLE.value:
        return PlaybackContext.single()
    kind_text, separator, entity_id = raw.partition(CONTEXT_SEPARATOR)
    if not separator or not entity_id:
        return None
    if kind_text == ContextKind.ARTIST.value:
        return PlaybackContext.artist(entity_id)
    if kind_text == ContextKind.PLAYLIST.value:
        return PlaybackContext.playlist(entity_id)
    return None


# --- NavigationToken ---

def encode_navigation_token(token: NavigationToken) -> str:
    envelope = json.dumps(
        {"trackId": token.track_id, "context": format_context(token.context)},
        separators=(",", ":"),
    )
    return base64.urlsafe_b64encode(envelope.encode("ascii")).decode("ascii").rstrip("=")


def decode_navigation_token(raw: object) -> Lookup[NavigationToken]:
    if not isinstance(raw, str) or not raw.strip():
        return Lookup.invalid("empty token")

    # Accept the standard alphabet with padding from the first token generation.
    text = raw.strip().replace("+", "-").replace("/", "_").rstrip("=")
    padded = text + "=" * (-len(text) % 4)
    try:
        payload = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8"))
    except (ValueError, TypeError) as exc:
        logger.debug("Undecodable navigation token %r: %s", raw[:64], exc)
        return Lookup.invalid("undecodable token")

    if not isinstance(payload, dict):
        return Lookup.invalid("token payload is not an object")
    track_id = payload.get("trackId")
    if not isinstance(track_id, str) or not track_id:
        return Lookup.invalid("token without track id")
    context = parse_context(payload.get("context"))
    if context is None:
        return Lookup.invalid(f"token with unknown context {payload.get('context')!r}")
    return Lookup.found(NavigationToken(track_id, context))


def decode_queue_item_id(raw: object, default_context: PlaybackContext) -> Lookup[NavigationToken]:
    """Recover (track, context) from a queue item id.

    Item ids are navigation tokens; a bare track id from an older queue is
    taken as-is and navigates within ``default_context``.
    """
    decoded = decode_navigation_token(raw)
    if decoded.ok:
        return decoded
    if isinstance(raw, str) and raw.strip():
        return Lookup.found(NavigationToken(raw.strip(), default_context))
    return decoded


__all__ = [
    "CONTENT_PREFIX",
    "CONTENT_SEPARATOR",
    "LEGACY_ALL_SENTINEL",
    "ContentKind",
    "ContentReference",
    "NavigationToken",
    "encode_content_reference",
    "encode_legacy_content_reference",
    "decode_content_reference",
    "format_context",
    "parse_context",
    "encode_navigation_token",
    "decode_navigation_token",
    "decode_queue_item_id",
]
