import os
import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path so 'app', 'config', and 'jukebox' import correctly
_TESTS_DIR = os.path.dirname(__file__)
_ROOT_DIR = os.path.abspath(os.path.join(_TESTS_DIR, os.pardir))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

from tests.support import factories as test_factories
from tests.support import stubs as test_stubs

MEDIA_BASE_URL = "https://media.example.test"


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path_factory):
    """Ensure a clean env for tests with per-test sqlite files."""
    db_dir = tmp_path_factory.mktemp("db")
    db_path = Path(db_dir) / "test.sqlite"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_path.as_posix()}")
    monkeypatch.delenv("OTEL_EXPORTER_OTLP_ENDPOINT", raising=False)
    yield


@pytest.fixture
def app():
    import app as app_module

    application = app_module.create_app(
        {
            "TESTING": True,
            "media_base_url": MEDIA_BASE_URL,
            "catalog_retry_backoff_seconds": 0,
        }
    )
    yield application


@pytest.fixture
def app_context(app):
    with app.app_context():
        yield app


@pytest.fixture
def db_session(app_context):
    from jukebox.database.db_manager import db

    test_factories.set_session(db.session)
    try:
        yield db.session
    finally:
        db.session.rollback()
        db.session.remove()
        test_factories.reset_session()


@pytest.fixture
def factories(db_session):
    yield test_factories


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def catalog():
    """In-memory catalog with three tracks, T1 newest."""
    return test_stubs.InMemoryCatalog(
        tracks=[
            test_stubs.make_track("T3", "Third Song", "Band", minute=1),
            test_stubs.make_track("T2", "Second Song", "Band", minute=2),
            test_stubs.make_track("T1", "First Song", "Solo Act", minute=3),
        ]
    )
