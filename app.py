import os
import logging
from datetime import datetime
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from flask import Flask, request, g
from flask_cors import CORS

from config import Config
from jukebox.database.db_manager import initialize_database
from jukebox.domain.catalog import SqlCatalogRepository
from jukebox.domain.navigation import AdjacencyEngine, ContextResolver
from jukebox.domain.playback import DirectiveAdapter, MediaUrlBuilder, RemoteResolutionAdapter
from jukebox.interfaces.http.routes import catalog_bp, health_bp, skill_bp
from jukebox.observability import configure_structured_logging, metrics_blueprint, init_tracing
from jukebox.observability.logging import JsonFormatter, RequestContextFilter
from jukebox.settings import load_app_settings


logger = logging.getLogger(__name__)


def configure_logging(log_dir: str) -> str:
    """Write INFO+ records to a fresh ``jukebox-<timestamp>.log`` in ``log_dir``.

    File records use the same JSON shape as stdout. Werkzeug and Flask
    loggers propagate to the root logger instead of printing on their own.
    Returns the log file path.
    """
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, datetime.now().strftime("jukebox-%Y%m%d-%H%M%S.log"))

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    for handler in [h for h in root.handlers if isinstance(h, logging.FileHandler)]:
        root.removeHandler(handler)
        handler.close()

    file_handler = logging.FileHandler(log_path, encoding='utf-8')
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(JsonFormatter())
    file_handler.addFilter(RequestContextFilter())
    root.addHandler(file_handler)

    if Config.ENABLE_CONSOLE_LOGS:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter('%(levelname)s %(name)s: %(message)s'))
        root.addHandler(console_handler)

    for name in ("werkzeug", "flask.app"):
        framework_logger = logging.getLogger(name)
        framework_logger.handlers = []
        framework_logger.propagate = True

    return log_path


def create_app(overrides=None):
    """Build the Flask app and one instance of each navigation collaborator.

    ``overrides`` updates ``app.config`` after the environment has been read;
    keys in lower case are also passed through to ``AppSettings``.
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    # Re-read so each app picks up the current environment
    app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('DATABASE_URL') or Config.SQLALCHEMY_DATABASE_URI
    overrides = dict(overrides or {})
    app.config.update({k: v for k, v in overrides.items() if k.isupper()})

    configure_structured_logging(app)
    init_tracing(app)

    @app.before_request
    def _assign_request_id():
        g.request_id = request.headers.get('X-Request-ID') or uuid4().hex

    @app.after_request
    def _inject_request_id(response):
        if getattr(g, 'request_id', None):
            response.headers.setdefault('X-Request-ID', g.request_id)
        return response

    allowed_origins = sorted({
        origin.strip()
        for origin in app.config['CORS_ALLOWED_ORIGINS']
        if origin and origin.strip() and origin.strip() != "*"
    })
    CORS(app, resources={r"/api/*": {"origins": allowed_origins}})

    initialize_database(app)

    settings = load_app_settings({k: v for k, v in overrides.items() if k.islower()})
    app.extensions['app_settings'] = settings

    repository = SqlCatalogRepository(settings)
    resolver = ContextResolver(repository)
    engine = AdjacencyEngine(resolver, repository)
    media = MediaUrlBuilder(settings.media_base_url)

    app.extensions['catalog_repository'] = repository
    app.extensions['context_resolver'] = resolver
    app.extensions['adjacency_engine'] = engine
    app.extensions['remote_resolution_adapter'] = RemoteResolutionAdapter(repository, engine, media, settings)
    app.extensions['directive_adapter'] = DirectiveAdapter(repository, engine, media)
    app.logger.info(
        "Skill adapters ready: media_base_url=%s, catalog_max_retries=%s",
        settings.media_base_url,
        settings.catalog_max_retries,
    )

    app.register_blueprint(skill_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(health_bp)
    app.register_blueprint(metrics_blueprint)

    return app


if __name__ == '__main__':
    # With the reloader, only the child process writes a log file
    debug_mode = bool(Config.DEBUG)
    log_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'jukebox', 'log')
    if not debug_mode or os.environ.get('WERKZEUG_RUN_MAIN') == 'true':
        log_file_path = configure_logging(log_dir)
        logger.info("File logging initialized at %s", log_file_path)

    app = create_app()
    app.logger.handlers = []
    app.logger.setLevel(logging.INFO)
    app.logger.propagate = True
    logger.info("Starting Flask application...")
    app.run(debug=Config.DEBUG, host='0.0.0.0', port=5000, threaded=True)
