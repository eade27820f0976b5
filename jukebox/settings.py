#!/usr/bin/env python
"""
Centralized configuration schema for the skill adapters and catalog.

Merges defaults from config.Config with optional runtime overrides. The
resulting AppSettings instance is passed explicitly into the repository,
resolver and protocol adapters; nothing reads it as a global.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config import Config


class AppSettings(BaseModel):
    """Settings consumed by the navigation core and its collaborators."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    # Media URL builder
    media_base_url: str = "http://localhost:5000"
    stream_url_ttl_seconds: int = Field(default=3600, ge=60)

    # Storage retries
    catalog_max_retries: int = 3
    catalog_retry_backoff_seconds: float = 0.2

    @field_validator("media_base_url", mode="before")
    @classmethod
    def _strip_trailing_slash(cls, value: object) -> str:
        text = str(value or "").strip()
        if not text:
            return "http://localhost:5000"
        return text.rstrip("/")

    @field_validator("catalog_max_retries", mode="before")
    @classmethod
    def _coerce_retries(cls, value: object) -> int:
        try:
            retries = int(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 1
        return max(1, min(retries, 10))

    @field_validator("catalog_retry_backoff_seconds", mode="before")
    @classmethod
    def _coerce_backoff(cls, value: object) -> float:
        try:
            backoff = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 0.0
        return max(0.0, min(backoff, 5.0))


def load_app_settings(overrides: Optional[Dict[str, Any]] = None) -> AppSettings:
    """Load settings merging config defaults with optional runtime overrides."""
    data: Dict[str, Any] = {
        "media_base_url": Config.MEDIA_BASE_URL,
        "stream_url_ttl_seconds": Config.STREAM_URL_TTL_SECONDS,
        "catalog_max_retries": Config.CATALOG_MAX_RETRIES,
        "catalog_retry_backoff_seconds": Config.CATALOG_RETRY_BACKOFF_SECONDS,
    }
    if overrides:
        data.update(overrides)
    return AppSettings.model_validate(data)


__all__ = [
    "AppSettings",
    "load_app_settings",
]
