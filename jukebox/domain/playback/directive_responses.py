"""AudioPlayer response envelopes for the directive flow."""

from __future__ import annotations

from typing import Any, Dict, Optional

from jukebox.models.dto import TrackDTO

RESPONSE_VERSION = "1.0"

REPLACE_ALL = "REPLACE_ALL"
ENQUEUE = "ENQUEUE"


def play_response(
    track: TrackDTO,
    *,
    stream_url: str,
    art_url: str,
    token: str,
    behavior: str = REPLACE_ALL,
    offset_ms: int = 0,
    expected_previous_token: Optional[str] = None,
    speech: Optional[str] = None,
) -> Dict[str, Any]:
    stream: Dict[str, Any] = {
        "url": stream_url,
        "token": token,
        "offsetInMilliseconds": offset_ms,
    }
    if behavior == ENQUEUE and expected_previous_token:
        stream["expectedPreviousToken"] = expected_previous_token

    response: Dict[str, Any] = {
        "directives": [
            {
                "type": "AudioPlayer.Play",
                "playBehavior": behavior,
                "audioItem": {
                    "stream": stream,
                    "metadata": {
                        "title": track.title,
                        "subtitle": track.artist,
                        "art": {"sources": [{"url": art_url}]},
                    },
                },
            }
        ],
        "shouldEndSession": True,
    }
    if speech:
        response["outputSpeech"] = {"type": "PlainText", "text": speech}
    return {"version": RESPONSE_VERSION, "response": response}


def stop_response() -> Dict[str, Any]:
    return {
        "version": RESPONSE_VERSION,
        "response": {
            "directives": [{"type": "AudioPlayer.Stop"}],
            "shouldEndSession": True,
        },
    }


def speech_response(text: str, end_session: bool = False) -> Dict[str, Any]:
    return {
        "version": RESPONSE_VERSION,
        "response": {
            "outputSpeech": {"type": "PlainText", "text": text},
            "shouldEndSession": end_session,
        },
    }


def empty_response() -> Dict[str, Any]:
    return {"version": RESPONSE_VERSION, "response": {}}


__all__ = [
    "ENQUEUE",
    "REPLACE_ALL",
    "play_response",
    "stop_response",
    "speech_response",
    "empty_response",
]
