"""Wire payloads for the remote-resolution (music skill) flow."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

SEARCH_NAMESPACE = "Alexa.Media.Search"
PLAYBACK_NAMESPACE = "Alexa.Media.Playback"
PLAY_QUEUE_NAMESPACE = "Alexa.Audio.PlayQueue"
PAYLOAD_VERSION = "1.0"

CONTENT_NOT_FOUND = "CONTENT_NOT_FOUND"
INTERNAL_ERROR = "INTERNAL_ERROR"


def _header(namespace: str, name: str, message_id: str) -> Dict[str, str]:
    return {
        "namespace": namespace,
        "name": name,
        "messageId": message_id,
        "payloadVersion": PAYLOAD_VERSION,
    }


def format_valid_until(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def build_item(
    *,
    item_id: str,
    track_id: str,
    title: str,
    stream_url: str,
    art_url: str,
    valid_until: datetime,
    has_next: bool,
    has_previous: bool,
) -> Dict[str, Any]:
    return {
        "id": item_id,
        "playbackInfo": {"type": "DEFAULT"},
        "metadata": {
            "type": "TRACK",
            "name": {
                "speech": {"type": "PLAIN_TEXT", "text": title},
                "display": title,
            },
            "art": {"sources": [{"url": art_url}]},
        },
        "controls": [
            {"type": "COMMAND", "name": "NEXT", "enabled": has_next},
            {"type": "COMMAND", "name": "PREVIOUS", "enabled": has_previous},
        ],
        "rules": {"feedbackEnabled": False},
        "stream": {
            "id": f"stream-{track_id}",
            "uri": stream_url,
            "offsetInMilliseconds": 0,
            "validUntil": format_valid_until(valid_until),
        },
    }


def playable_content_response(content_id: str, message_id: str) -> Dict[str, Any]:
    return {
        "header": _header(SEARCH_NAMESPACE, "GetPlayableContent.Response", message_id),
        "payload": {"content": {"id": content_id}},
    }


def content_not_found_response(message_id: str, namespace: str = SEARCH_NAMESPACE) -> Dict[str, Any]:
    return {
        "header": _header(namespace, "ErrorResponse", message_id),
        "payload": {
            "type": CONTENT_NOT_FOUND,
            "message": "The requested content could not be found.",
        },
    }


def initiate_response(queue_id: str, first_item: Dict[str, Any], message_id: str) -> Dict[str, Any]:
    return {
        "header": _header(PLAYBACK_NAMESPACE, "Initiate.Response", message_id),
        "payload": {
            "playbackMethod": {
                "type": "ALEXA_AUDIO_PLAYER_QUEUE",
                "id": queue_id,
                "rules": {"feedbackEnabled": False},
                "firstItem": first_item,
            }
        },
    }


def item_response(item: Dict[str, Any], message_id: str) -> Dict[str, Any]:
    """Every response that carries an item leaves the queue open."""
    return {
        "header": _header(PLAY_QUEUE_NAMESPACE, "GetItem.Response", message_id),
        "payload": {"item": item, "isQueueFinished": False},
    }


def queue_finished_response(message_id: str) -> Dict[str, Any]:
    return {
        "header": _header(PLAY_QUEUE_NAMESPACE, "GetItem.Response", message_id),
        "payload": {"isQueueFinished": True},
    }


def internal_error_response(
    namespace: Optional[str],
    message_id: Optional[str],
    message: str = "The request could not be handled.",
) -> Dict[str, Any]:
    return {
        "header": _header(namespace or "Alexa", "ErrorResponse", message_id or "unknown"),
        "payload": {"type": INTERNAL_ERROR, "message": message},
    }


__all__ = [
    "SEARCH_NAMESPACE",
    "PLAYBACK_NAMESPACE",
    "PLAY_QUEUE_NAMESPACE",
    "CONTENT_NOT_FOUND",
    "INTERNAL_ERROR",
    "build_item",
    "playable_content_response",
    "content_not_found_response",
    "initiate_response",
    "item_response",
    "queue_finished_response",
    "internal_error_response",
]
