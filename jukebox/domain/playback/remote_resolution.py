#!/usr/bin/env python
"""
Remote-resolution flow: selection, initiation and queue lifecycle.

Selection only validates that the requested entity exists and hands back a
content id; nothing is chosen until initiation resolves that id again.
Queue items are identified by navigation tokens so later GetItem,
GetNextItem and GetPreviousItem calls recover their context without any
server-side queue state.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Mapping, Optional

from jukebox.domain.catalog.repository import CatalogRepository
from jukebox.domain.navigation import (
    AdjacencyEngine,
    ContentKind,
    ContentReference,
    Lookup,
    PlaybackContext,
    Step,
    decode_content_reference,
    decode_queue_item_id,
    encode_content_reference,
    encode_navigation_token,
)
from jukebox.errors import CatalogUnavailable
from jukebox.observability.metrics import (
    UNSUPPORTED_OPERATION,
    record_invalid_token,
    record_skill_failure,
    record_skill_request,
)
from jukebox.settings import AppSettings

from . import remote_responses as responses
from .media import MediaUrlBuilder

logger = logging.getLogger(__name__)

PROTOCOL = "music_skill"

_SELECTION_TYPES = {
    "TRACK": ContentKind.TRACK,
    "ARTIST": ContentKind.ARTIST,
    "PLAYLIST": ContentKind.PLAYLIST,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_message_id() -> str:
    return str(uuid.uuid4())


def _new_queue_id() -> str:
    return f"queue-{uuid.uuid4().hex}"


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


class RemoteResolutionAdapter:
    """Answers music skill API requests from the catalog."""

    def __init__(
        self,
        repository: CatalogRepository,
        engine: AdjacencyEngine,
        media: MediaUrlBuilder,
        settings: AppSettings,
        *,
        clock: Callable[[], datetime] = _utcnow,
        message_ids: Callable[[], str] = _new_message_id,
        queue_ids: Callable[[], str] = _new_queue_id,
    ):
        self.repository = repository
        self.engine = engine
        self.media = media
        self.stream_ttl = timedelta(seconds=settings.stream_url_ttl_seconds)
        self._clock = clock
        self._message_ids = message_ids
        self._queue_ids = queue_ids
        self._routes: Dict[tuple, Callable[[Mapping[str, Any]], Dict[str, Any]]] = {
            (responses.SEARCH_NAMESPACE, "GetPlayableContent"): self.get_playable_content,
            (responses.PLAYBACK_NAMESPACE, "Initiate"): self.initiate,
            (responses.PLAY_QUEUE_NAMESPACE, "GetItem"): self.get_item,
            (responses.PLAY_QUEUE_NAMESPACE, "GetNextItem"): self.get_next_item,
            (responses.PLAY_QUEUE_NAMESPACE, "GetPreviousItem"): self.get_previous_item,
        }

    # --- dispatch ---

    def handle(self, body: Any) -> Dict[str, Any]:
        """Route one request; never raises."""
        envelope = _as_mapping(body)
        header = _as_mapping(envelope.get("header"))
        namespace = _text(header.get("namespace"))
        name = _text(header.get("name"))
        message_id = _text(header.get("messageId"))

        handler = self._routes.get((namespace, name))
        if handler is None:
            record_skill_request(PROTOCOL, UNSUPPORTED_OPERATION)
            logger.warning("Unsupported music skill request %s.%s", namespace, name)
            return responses.internal_error_response(
                namespace, message_id, f"{namespace}.{name} is not supported."
            )
        record_skill_request(PROTOCOL, f"{namespace}.{name}")
        try:
            return handler(_as_mapping(envelope.get("payload")))
        except Exception:
            logger.exception("Music skill request %s.%s failed", namespace, name)
            record_skill_failure(PROTOCOL)
            return responses.internal_error_response(namespace, message_id)

    # --- selection ---

    def get_playable_content(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        reference = self._selection_reference(payload)
        try:
            exists = self._exists(reference)
        except CatalogUnavailable as exc:
            logger.error("Selection of %s failed: %s", reference, exc)
            exists = False
        if not exists:
            logger.info("Nothing playable for %s", reference)
            return responses.content_not_found_response(self._message_ids())
        return responses.playable_content_response(
            encode_content_reference(reference), self._message_ids()
        )

    def _selection_reference(self, payload: Mapping[str, Any]) -> ContentReference:
        """First TRACK, ARTIST or PLAYLIST attribute; everything when none names an entity."""
        criteria = _as_mapping(payload.get("selectionCriteria"))
        attributes = criteria.get("attributes")
        for attribute in attributes if isinstance(attributes, list) else []:
            attribute = _as_mapping(attribute)
            kind = _SELECTION_TYPES.get(attribute.get("type"))
            if kind is None:
                continue
            entity_id = attribute.get("entityId")
            if not isinstance(entity_id, str) or not entity_id:
                return ContentReference.everything()
            return ContentReference(kind, entity_id)
        return ContentReference.everything()

    def _exists(self, reference: ContentReference) -> bool:
        if reference.kind is ContentKind.TRACK:
            return self.repository.get_track(reference.entity_id) is not None
        if reference.kind is ContentKind.ARTIST:
            return bool(self.repository.list_track_ids_by_artist(reference.entity_id))
        if reference.kind is ContentKind.PLAYLIST:
            return self.repository.get_playlist(reference.entity_id) is not None
        return bool(self.repository.list_all_track_ids())

    # --- initiation ---

    def initiate(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        decoded = decode_content_reference(payload.get("contentId"))
        if not decoded.ok:
            record_invalid_token("content_id")
            logger.info("Initiate with unusable content id %r: %s", payload.get("contentId"), decoded.reason)
            return responses.content_not_found_response(self._message_ids(), responses.PLAYBACK_NAMESPACE)

        reference = decoded.value
        context = reference.to_context()
        anchor = reference.entity_id if reference.kind is ContentKind.TRACK else None
        first = self.engine.first(context, anchor)
        if not first.ok:
            logger.info("Initiate found nothing for %s: %s", context, first.reason)
            return responses.content_not_found_response(self._message_ids(), responses.PLAYBACK_NAMESPACE)

        return responses.initiate_response(self._queue_ids(), self._item(first.value), self._message_ids())

    # --- queue lifecycle ---

    def get_item(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Refresh the current item's stream; only a vanished track ends the queue."""
        return self._queue_step(payload, self.engine.current)

    def get_next_item(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        return self._queue_step(payload, self.engine.next)

    def get_previous_item(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        return self._queue_step(payload, self.engine.previous)

    def _queue_step(
        self,
        payload: Mapping[str, Any],
        navigate: Callable[[PlaybackContext, str], Lookup[Step]],
    ) -> Dict[str, Any]:
        reference = _as_mapping(_as_mapping(payload.get("currentItemReference")).get("value"))
        token = decode_queue_item_id(reference.get("id"), self._default_context(reference.get("contentId")))
        if not token.ok:
            record_invalid_token("queue_item")
            return responses.queue_finished_response(self._message_ids())

        result = navigate(token.value.context, token.value.track_id)
        if not result.ok:
            return responses.queue_finished_response(self._message_ids())
        return responses.item_response(self._item(result.value), self._message_ids())

    @staticmethod
    def _default_context(content_id: Any) -> PlaybackContext:
        if content_id is None:
            return PlaybackContext.all()
        decoded = decode_content_reference(content_id)
        if not decoded.ok:
            return PlaybackContext.all()
        return decoded.value.to_context()

    def _item(self, step: Step) -> Dict[str, Any]:
        track = step.track
        return responses.build_item(
            item_id=encode_navigation_token(step.token),
            track_id=track.id,
            title=track.title,
            stream_url=self.media.stream_url(track.id),
            art_url=self.media.art_url(track.id),
            valid_until=self._clock() + self.stream_ttl,
            has_next=step.has_next,
            has_previous=step.has_previous,
        )


__all__ = ["RemoteResolutionAdapter", "PROTOCOL"]
