import json
import logging
import os

import pytest

from jukebox.observability import init_tracing
from jukebox.observability.logging import JsonFormatter, RequestContextFilter


@pytest.mark.unit
def test_json_formatter_outside_request_context():
    record = logging.LogRecord("jukebox.test", logging.WARNING, __file__, 1, "queue %s", ("q-1",), None)
    RequestContextFilter().filter(record)
    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "queue q-1"
    assert payload["level"] == "WARNING"
    assert payload["timestamp"].endswith("Z")
    assert payload["request_id"] is None
    assert payload["path"] is None


@pytest.mark.unit
def test_request_context_is_attached(app):
    with app.test_request_context("/api/alexa", method="POST"):
        from flask import g

        g.request_id = "rid-7"
        record = logging.LogRecord("jukebox.test", logging.INFO, __file__, 1, "hello", (), None)
        RequestContextFilter().filter(record)

    assert (record.request_id, record.path, record.method) == ("rid-7", "/api/alexa", "POST")


@pytest.mark.unit
def test_tracing_is_off_without_endpoint(app):
    assert init_tracing(app) is False


@pytest.mark.unit
def test_configure_logging_writes_json_file(tmp_path):
    import app as app_module

    log_path = app_module.configure_logging(str(tmp_path / "log"))
    root = logging.getLogger()
    handler = next(h for h in root.handlers if getattr(h, "baseFilename", None) == os.path.abspath(log_path))
    try:
        logging.getLogger("jukebox.test").warning("queue %s finished", "q-2")
        handler.flush()
        with open(log_path, encoding="utf-8") as fh:
            lines = fh.read().splitlines()
        assert json.loads(lines[-1])["message"] == "queue q-2 finished"
    finally:
        root.removeHandler(handler)
        handler.close()
