# Future annotations for forward reference typing compatibility
from __future__ import annotations

import logging
import os
from typing import Any, Optional

from flask import Flask, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

# Import configuration object
from .config import Config

# Import shared Flask extensions (SQLAlchemy and SocketIO)
from .extensions import db, socketio
from .helpers.auth import decode_user_id
from .helpers.registry import ConnectionRegistry, RedisConnectionRegistry
from .lib.utils import get_redis_client

# Configure a standard log format for console handlers
log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
# Create a logger specific to this module
logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    # basicConfig is a no-op when the root logger already has handlers (e.g. under gunicorn)
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=log_format)
    # Reduce noisy third-party loggers so we only see our explicit INFO logs and exceptions
    for noisy_name in (
        "engineio",
        "engineio.server",
        "socketio",
        "socketio.server",
    ):
        logging.getLogger(noisy_name).setLevel(logging.WARNING)


# SQLite pragmas: WAL and a generous busy timeout keep concurrent socket
# handlers from tripping over "database is locked"
def configure_sqlite_pragmas() -> None:
    eng = db.engine
    # Only apply these for sqlite dialect
    if eng.dialect.name != "sqlite":
        return
    with eng.begin() as conn:
        conn.execute(db.text("PRAGMA journal_mode=WAL"))
        conn.execute(db.text("PRAGMA synchronous=NORMAL"))
        conn.execute(db.text("PRAGMA busy_timeout=15000"))


def get_user_id_from_auth_header() -> Optional[int]:
    auth = request.headers.get("Authorization", "")
    if auth.lower().startswith("bearer "):
        return decode_user_id(auth.split(" ", 1)[1].strip())
    return None


def build_connection_registry(app: Flask) -> ConnectionRegistry | RedisConnectionRegistry:
    """Share the registry through Redis when a Redis message queue is configured."""
    with app.app_context():
        client = get_redis_client()
    if client is not None:
        return RedisConnectionRegistry(client)
    return ConnectionRegistry()


# Application factory returning a configured Flask app
def create_app(
    config: object = Config,
    registry: ConnectionRegistry | RedisConnectionRegistry | None = None,
    **overrides: Any,
) -> Flask:
    app = Flask(__name__)
    # Load configuration from the Config class, then apply per-instance overrides
    app.config.from_object(config)
    app.config.update(overrides)
    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Bind SQLAlchemy to the app
    db.init_app(app)
    # Resolve allowed origins from configuration for both Flask and Socket.IO
    origins_cfg = app.config["CORS_ORIGINS"]
    # A single '*' means allow all origins
    if origins_cfg.strip() == "*":
        allowed_origins = "*"
    else:
        # Split comma-separated list into an array of origins
        allowed_origins = [o.strip() for o in origins_cfg.split(",") if o.strip()]
    # Enable CORS for all routes using the allowed origins
    CORS(app, resources={r"/*": {"origins": allowed_origins}})
    # Initialize Socket.IO with the same CORS policy and optional message queue
    socketio.init_app(
        app,
        cors_allowed_origins=allowed_origins,
        message_queue=app.config.get("SOCKETIO_MESSAGE_QUEUE") or None,
        async_mode=app.config.get("SOCKETIO_ASYNC_MODE") or "gevent",
        max_http_buffer_size=app.config["MAX_FILE_SIZE"] * 2,
        ping_timeout=30,
        ping_interval=10,
    )
    logger.info(
        "SocketIO configured: async_mode=%s, message_queue=%s",
        socketio.async_mode,
        app.config.get("SOCKETIO_MESSAGE_QUEUE") or "(none)",
    )

    # The connection registry belongs to this app instance
    app.extensions["connection_registry"] = (
        registry if registry is not None else build_connection_registry(app)
    )

    # File-backed SQLite needs its directory (instance/ by default)
    db_uri = app.config["SQLALCHEMY_DATABASE_URI"]
    if db_uri.startswith("sqlite:///"):
        os.makedirs(os.path.dirname(db_uri[len("sqlite:///"):]) or ".", exist_ok=True)

    # Perform database setup inside app context
    with app.app_context():
        # Import models to register metadata with SQLAlchemy
        from . import models  # noqa: F401

        db.create_all()
        configure_sqlite_pragmas()

    # Register HTTP routes, blueprints and socket handlers
    register_routes(app)

    return app


# Helper to bind routes, socket handlers, and error handlers
def register_routes(app: Flask) -> None:

    @app.route("/api/health")
    def index():
        return "WorkFlowConnect API is running"

    # Global error handler to ensure stacktraces get logged
    @app.errorhandler(Exception)
    def _log_unhandled_error(e):
        # Plain HTTP errors (404, 405, ...) keep their own response
        if isinstance(e, HTTPException):
            return e
        # Log both method and path for context
        logger.exception("UNHANDLED %s %s", request.method, request.path)
        # Re-raise after logging to let Flask generate the default response
        raise e

    @socketio.on_error_default
    def _default_socket_error(e):
        logger.exception("SOCK error sid=%s", request.sid)

    from .views.api import register_blueprints
    from .views.ws import register_socket_handlers

    register_blueprints(app)
    register_socket_handlers()
