import logging
import os
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from flask import Flask, g, request
from sqlalchemy.engine import make_url

from config import Config
from bandscrape.database.db_manager import db, initialize_database
from bandscrape.domain.tracks import TrackStore
from bandscrape.interfaces.http.routes import health_bp, lookup_bp, root_bp, submit_bp
from bandscrape.observability import configure_logging, configure_structured_logging, metrics_blueprint
from bandscrape.utils.cancellation import CancelToken


logger = logging.getLogger(__name__)

_PACKAGE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'bandscrape')


def _sqlite_engine_options(uri: str, busy_timeout: float) -> dict:
    if not uri or make_url(uri).get_backend_name() != 'sqlite':
        return {}
    # Concurrent submissions queue on the write lock instead of failing fast
    return {'connect_args': {'timeout': busy_timeout}}


def create_app(config_overrides=None):
    app = Flask(
        __name__,
        template_folder=os.path.join(_PACKAGE_DIR, 'templates'),
        static_folder=os.path.join(_PACKAGE_DIR, 'static'),
        static_url_path='/static',
    )
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)
    app.config.setdefault(
        'SQLALCHEMY_ENGINE_OPTIONS',
        _sqlite_engine_options(
            app.config['SQLALCHEMY_DATABASE_URI'],
            app.config['SQLITE_BUSY_TIMEOUT_SECONDS'],
        ),
    )
    configure_structured_logging(app)

    @app.before_request
    def _assign_request_context():
        g.request_id = request.headers.get('X-Request-ID') or uuid4().hex
        g.request_deadline = CancelToken(timeout=app.config['REQUEST_TIMEOUT_SECONDS'])

    @app.after_request
    def _inject_request_id(response):
        if getattr(g, 'request_id', None):
            response.headers.setdefault('X-Request-ID', g.request_id)
        return response

    # Initialize database and the store that owns it
    initialize_database(app)
    with app.app_context():
        engine = db.engine
    app.extensions['track_store'] = TrackStore(engine, lookup_limit=app.config.get('LOOKUP_LIMIT'))

    # --- Register Blueprints ---
    app.register_blueprint(root_bp)
    app.register_blueprint(submit_bp)
    app.register_blueprint(lookup_bp)
    app.register_blueprint(health_bp)
    app.register_blueprint(metrics_blueprint)

    app.logger.info("Collector ready: database=%s", app.config['SQLALCHEMY_DATABASE_URI'])
    return app


if __name__ == '__main__':
    log_file_path = configure_logging(
        Config.LOG_DIR,
        level=Config.LOG_LEVEL,
        enable_console=Config.ENABLE_CONSOLE_LOGS,
    )
    logger.info("File logging initialized at %s", log_file_path)

    app = create_app()
    # Route app.logger through root handlers, keep levels consistent
    app.logger.handlers = []
    app.logger.propagate = True
    logger.info("Listening on %s:%s", Config.HOST, Config.PORT)
    app.run(debug=Config.DEBUG, host=Config.HOST, port=Config.PORT, threaded=True)
