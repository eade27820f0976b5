"""Stream and artwork URL formatting."""

from __future__ import annotations

from urllib.parse import quote


class MediaUrlBuilder:
    """Pure formatting from a configured base URL; performs no I/O."""

    def __init__(self, base_url: str):
        self.base_url = (base_url or "").rstrip("/")

    def stream_url(self, track_id: str) -> str:
        return f"{self.base_url}/api/mp3/{quote(track_id, safe='')}.mp3"

    def art_url(self, track_id: str) -> str:
        return f"{self.base_url}/api/art/{quote(track_id, safe='')}.jpg"


__all__ = ["MediaUrlBuilder"]
