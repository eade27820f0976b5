import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from flask import g, has_app_context, has_request_context, request

try:
    from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
    from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
    from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
    from opentelemetry.sdk.resources import Resource
except ImportError:  # pragma: no cover - OpenTelemetry optional
    LoggerProvider = None  # type: ignore
    LoggingHandler = None  # type: ignore

# Set on every record by RequestContextFilter; None outside a request
CONTEXT_FIELDS = ("request_id", "method", "path", "endpoint")


def _utc_timestamp(created: float) -> str:
    return datetime.fromtimestamp(created, tz=timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class RequestContextFilter(logging.Filter):
    """Copy the request id, method, path and endpoint onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        values = dict.fromkeys(CONTEXT_FIELDS)
        if has_app_context():
            values["request_id"] = g.get("request_id")
        if has_request_context():
            values["method"] = request.method
            values["path"] = request.path
            values["endpoint"] = request.endpoint
        for name, value in values.items():
            setattr(record, name, value)
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line; request fields are always present."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": _utc_timestamp(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update({name: getattr(record, name, None) for name in CONTEXT_FIELDS})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _otlp_endpoint(app) -> Optional[str]:
    return app.config.get("OTEL_EXPORTER_OTLP_ENDPOINT") or os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")


def _build_otlp_handler(app) -> Optional[logging.Handler]:
    endpoint = _otlp_endpoint(app)
    if LoggerProvider is None or not endpoint:
        return None

    provider = LoggerProvider(
        resource=Resource.create({"service.name": app.config.get("OTEL_SERVICE_NAME", "jukebox")})
    )
    provider.add_log_record_processor(BatchLogRecordProcessor(OTLPLogExporter(endpoint=endpoint)))
    return LoggingHandler(level=logging.INFO, logger_provider=provider)


def _attach(root: logging.Logger, handler: logging.Handler) -> None:
    handler.setFormatter(JsonFormatter())
    handler.addFilter(RequestContextFilter())
    root.addHandler(handler)


def configure_structured_logging(app) -> None:
    """Send JSON records to stdout, and to OTLP when an endpoint is configured.

    The stdout handler is added once per process.
    """
    root = logging.getLogger()

    streams = [h for h in root.handlers if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)]
    if not any(isinstance(h.formatter, JsonFormatter) for h in streams):
        _attach(root, logging.StreamHandler(sys.stdout))

    otlp_handler = _build_otlp_handler(app)
    if otlp_handler is not None:
        _attach(root, otlp_handler)
