#!/usr/bin/env python
# config.py
import os
from typing import List

# This assumes config.py is at the root of your project
basedir = os.path.abspath(os.path.dirname(__file__))


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _get_csv_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name)
    source = raw if raw is not None else default
    return [token.strip() for token in source.split(",") if token and token.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'change-me-jukebox'

    # Catalog database
    # The app creates the sqlite file and tables at startup.
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'jukebox', 'database', 'instance', 'jukebox.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Catalog query retries (storage transport failures)
    CATALOG_MAX_RETRIES = max(1, _get_int('CATALOG_MAX_RETRIES', 3))
    CATALOG_RETRY_BACKOFF_SECONDS = max(0.0, _get_float('CATALOG_RETRY_BACKOFF_SECONDS', 0.2))

    # Media delivery: public origin that serves /api/mp3/<id>.mp3 and /api/art/<id>.jpg
    MEDIA_BASE_URL = os.getenv('MEDIA_BASE_URL', 'http://localhost:5000')
    # How long a stream URL handed to the voice platform is advertised as valid
    STREAM_URL_TTL_SECONDS = max(60, _get_int('STREAM_URL_TTL_SECONDS', 3600))

    # HTTP
    CORS_ALLOWED_ORIGINS = _get_csv_list('CORS_ALLOWED_ORIGINS', 'http://localhost:3000')

    # Observability
    OTEL_EXPORTER_OTLP_ENDPOINT = os.getenv('OTEL_EXPORTER_OTLP_ENDPOINT')
    OTEL_EXPORTER_OTLP_HEADERS = os.getenv('OTEL_EXPORTER_OTLP_HEADERS')
    OTEL_EXPORTER_OTLP_INSECURE = _get_bool('OTEL_EXPORTER_OTLP_INSECURE', True)
    OTEL_SERVICE_NAME = os.getenv('OTEL_SERVICE_NAME', 'jukebox')

    # Runtime behavior
    # Turn Flask debug on/off from env; default off to avoid noisy console
    DEBUG = _get_bool('DEBUG', False)
    # Control console logging; when disabled, logs go only to file
    ENABLE_CONSOLE_LOGS = _get_bool('ENABLE_CONSOLE_LOGS', False)
