#!/usr/bin/env python
"""
Directive flow: one call per intent or player event.

Every answer is built from the catalog at call time plus the navigation
token the player echoes back; no session state is kept between calls.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from jukebox.domain.catalog.repository import CatalogRepository
from jukebox.domain.navigation import (
    AdjacencyEngine,
    Direction,
    Lookup,
    NavigationToken,
    PlaybackContext,
    Step,
    decode_navigation_token,
    encode_navigation_token,
)
from jukebox.errors import CatalogUnavailable
from jukebox.models.dto import TrackDTO
from jukebox.observability.metrics import (
    UNSUPPORTED_OPERATION,
    record_invalid_token,
    record_skill_failure,
    record_skill_request,
)

from . import directive_responses as responses
from . import speech
from .media import MediaUrlBuilder

logger = logging.getLogger(__name__)

PROTOCOL = "alexa"

STOP_INTENTS = ("AMAZON.PauseIntent", "AMAZON.StopIntent", "AMAZON.CancelIntent")

REQUEST_TYPES = (
    "LaunchRequest",
    "SessionEndedRequest",
    "IntentRequest",
    "AudioPlayer.PlaybackStarted",
    "AudioPlayer.PlaybackNearlyFinished",
    "AudioPlayer.PlaybackFinished",
    "AudioPlayer.PlaybackStopped",
    "AudioPlayer.PlaybackFailed",
    "PlaybackController.NextCommandIssued",
    "PlaybackController.PreviousCommandIssued",
    "PlaybackController.PlayCommandIssued",
    "PlaybackController.PauseCommandIssued",
)


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _slot_value(intent: Mapping[str, Any], slot: str) -> str:
    slots = _as_mapping(intent.get("slots"))
    value = _as_mapping(slots.get(slot)).get("value")
    return value.strip() if isinstance(value, str) else ""


def _offset(audio_player: Mapping[str, Any]) -> int:
    try:
        return max(0, int(audio_player.get("offsetInMilliseconds") or 0))
    except (TypeError, ValueError, OverflowError):
        return 0


class DirectiveAdapter:
    """Answers custom-skill requests with AudioPlayer directives."""

    def __init__(self, repository: CatalogRepository, engine: AdjacencyEngine, media: MediaUrlBuilder):
        self.repository = repository
        self.engine = engine
        self.media = media
        self._intents: Dict[str, Callable[[Mapping[str, Any], Mapping[str, Any]], Dict[str, Any]]] = {
            "PlaySongIntent": lambda intent, player: self.play_by_title(_slot_value(intent, "songName")),
            "PlayArtistIntent": lambda intent, player: self.play_by_artist(_slot_value(intent, "artistName")),
            "PlayPlaylistIntent": lambda intent, player: self.play_by_playlist(_slot_value(intent, "playlistName")),
            "PlayAllIntent": lambda intent, player: self.play_everything(),
            "AMAZON.ResumeIntent": lambda intent, player: self.resume(player),
            "AMAZON.NextIntent": lambda intent, player: self.navigate(player, Direction.NEXT, spoken=True),
            "AMAZON.PreviousIntent": lambda intent, player: self.navigate(player, Direction.PREVIOUS, spoken=True),
            "AMAZON.HelpIntent": lambda intent, player: responses.speech_response(speech.HELP),
        }

    # --- dispatch ---

    def handle(self, body: Any) -> Dict[str, Any]:
        """Answer one request; never raises."""
        envelope = _as_mapping(body)
        request = _as_mapping(envelope.get("request"))
        player = _as_mapping(_as_mapping(envelope.get("context")).get("AudioPlayer"))
        request_type = request.get("type") if isinstance(request.get("type"), str) else ""
        intent = _as_mapping(request.get("intent"))
        logger.info("Directive request %s %s", request_type, intent.get("name") or "")
        record_skill_request(PROTOCOL, self._operation(request_type, intent.get("name")))

        try:
            return self._dispatch(request_type, request, intent, player)
        except Exception:
            logger.exception("Directive request %s failed", request_type)
            record_skill_failure(PROTOCOL)
            if request_type == "IntentRequest":
                return responses.speech_response(speech.FALLBACK)
            return responses.empty_response()

    def _operation(self, request_type: str, intent_name: Any) -> str:
        if isinstance(intent_name, str) and (intent_name in self._intents or intent_name in STOP_INTENTS):
            return intent_name
        if request_type in REQUEST_TYPES:
            return request_type
        return UNSUPPORTED_OPERATION

    def _dispatch(
        self,
        request_type: str,
        request: Mapping[str, Any],
        intent: Mapping[str, Any],
        player: Mapping[str, Any],
    ) -> Dict[str, Any]:
        if request_type == "LaunchRequest":
            return responses.speech_response(speech.WELCOME)
        if request_type == "SessionEndedRequest":
            return responses.empty_response()
        if request_type.startswith("AudioPlayer."):
            return self.player_event(request_type, request)
        if request_type.startswith("PlaybackController."):
            return self.playback_control(request_type, player)
        if request_type == "IntentRequest" and intent:
            return self.intent(intent, player)
        logger.warning("Unrecognized directive request %r", request_type)
        return responses.empty_response()

    def intent(self, intent: Mapping[str, Any], player: Mapping[str, Any]) -> Dict[str, Any]:
        name = intent.get("name")
        if not isinstance(name, str):
            name = ""
        if name in STOP_INTENTS:
            return responses.stop_response()
        handler = self._intents.get(name)
        if handler is None:
            logger.info("No handler for intent %r", name)
            return responses.speech_response(speech.FALLBACK)
        return handler(intent, player)

    # --- play by name ---

    def _search(self, search: Callable[[str], List[Any]], query: str) -> List[Any]:
        try:
            return search(query)
        except CatalogUnavailable as exc:
            logger.error("Voice search for %r failed: %s", query, exc)
            return []

    def play_by_title(self, title: str) -> Dict[str, Any]:
        if not title:
            return self.play_everything()
        matches = self._search(self.repository.search_tracks_by_title, title)
        if not matches:
            return responses.speech_response(speech.song_not_found(title))
        track = matches[0]
        return self._play(
            track,
            NavigationToken(track.id, PlaybackContext.single()),
            speech_text=speech.playing_track(track.title),
        )

    def play_by_artist(self, artist: str) -> Dict[str, Any]:
        if not artist:
            return self.play_everything()
        matches = self._search(self.repository.search_tracks_by_artist, artist)
        if not matches:
            return responses.speech_response(speech.artist_not_found(artist))
        track = matches[0]
        return self._play(
            track,
            NavigationToken(track.id, PlaybackContext.artist(track.artist_id)),
            speech_text=speech.playing_artist(track.artist),
        )

    def play_by_playlist(self, name: str) -> Dict[str, Any]:
        if not name:
            return self.play_everything()
        matches = self._search(self.repository.search_playlists_by_name, name)
        if not matches:
            return responses.speech_response(speech.playlist_not_found(name))
        playlist = matches[0]
        first = self.engine.first(PlaybackContext.playlist(playlist.id))
        if not first.ok:
            return responses.speech_response(speech.playlist_not_found(name))
        return self._play_step(first.value, speech_text=speech.playing_playlist(playlist.name))

    def play_everything(self, speak: bool = True) -> Dict[str, Any]:
        first = self.engine.first(PlaybackContext.all())
        if not first.ok:
            return responses.speech_response(speech.NOTHING_TO_PLAY)
        text = speech.playing_track(first.value.track.title) if speak else None
        return self._play_step(first.value, speech_text=text)

    # --- transport ---

    def resume(self, player: Mapping[str, Any]) -> Dict[str, Any]:
        """Resume the echoed token at its offset, or start everything over."""
        raw_token = player.get("token")
        decoded = self._decode(raw_token)
        if decoded.ok:
            track = self._get_track(decoded.value.track_id)
            if track is not None:
                return responses.play_response(
                    track,
                    stream_url=self.media.stream_url(track.id),
                    art_url=self.media.art_url(track.id),
                    token=raw_token,
                    offset_ms=_offset(player),
                )
        return self.play_everything(speak=False)

    def navigate(self, player: Mapping[str, Any], direction: Direction, *, spoken: bool) -> Dict[str, Any]:
        decoded = self._decode(player.get("token"))
        if not decoded.ok:
            return responses.speech_response(speech.NOTHING_PLAYING) if spoken else responses.empty_response()

        token = decoded.value
        if direction is Direction.NEXT:
            result = self.engine.next(token.context, token.track_id)
        else:
            result = self.engine.previous(token.context, token.track_id)
        if not result.ok:
            if not spoken:
                return responses.empty_response()
            return responses.speech_response(speech.NO_NEXT if direction is Direction.NEXT else speech.NO_PREVIOUS)
        return self._play_step(result.value)

    def playback_control(self, request_type: str, player: Mapping[str, Any]) -> Dict[str, Any]:
        command = request_type.split(".", 1)[1]
        if command == "NextCommandIssued":
            return self.navigate(player, Direction.NEXT, spoken=False)
        if command == "PreviousCommandIssued":
            return self.navigate(player, Direction.PREVIOUS, spoken=False)
        if command == "PlayCommandIssued":
            return self.resume(player)
        if command == "PauseCommandIssued":
            return responses.stop_response()
        return responses.empty_response()

    def player_event(self, request_type: str, request: Mapping[str, Any]) -> Dict[str, Any]:
        if request_type == "AudioPlayer.PlaybackNearlyFinished":
            return self.enqueue_next(request.get("token"))
        if request_type == "AudioPlayer.PlaybackFailed":
            logger.error("Playback failed for token %r: %s", request.get("token"), request.get("error"))
        return responses.empty_response()

    def enqueue_next(self, raw_token: Any) -> Dict[str, Any]:
        """Queue the successor of the track that is about to finish."""
        decoded = self._decode(raw_token)
        if not decoded.ok:
            return responses.empty_response()
        token = decoded.value
        result = self.engine.next(token.context, token.track_id)
        if not result.ok:
            return responses.empty_response()
        return self._play_step(
            result.value,
            behavior=responses.ENQUEUE,
            expected_previous_token=raw_token,
        )

    # --- helpers ---

    def _decode(self, raw_token: Any) -> Lookup[NavigationToken]:
        if raw_token is None or raw_token == "":
            return Lookup.not_found("no token")
        decoded = decode_navigation_token(raw_token)
        if decoded.is_invalid:
            record_invalid_token("navigation")
            logger.info("Ignoring navigation token: %s", decoded.reason)
        return decoded

    def _get_track(self, track_id: str) -> Optional[TrackDTO]:
        try:
            return self.repository.get_track(track_id)
        except CatalogUnavailable as exc:
            logger.error("Track lookup for %s failed: %s", track_id, exc)
            return None

    def _play_step(self, step: Step, **kwargs: Any) -> Dict[str, Any]:
        return self._play(step.track, step.token, **kwargs)

    def _play(
        self,
        track: TrackDTO,
        token: NavigationToken,
        *,
        behavior: str = responses.REPLACE_ALL,
        expected_previous_token: Optional[str] = None,
        speech_text: Optional[str] = None,
    ) -> Dict[str, Any]:
        return responses.play_response(
            track,
            stream_url=self.media.stream_url(track.id),
            art_url=self.media.art_url(track.id),
            token=encode_navigation_token(token),
            behavior=behavior,
            offset_ms=0,
            expected_previous_token=expected_previous_token,
            speech=speech_text,
        )


__all__ = ["DirectiveAdapter", "PROTOCOL"]
