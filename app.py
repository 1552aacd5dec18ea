"""Application factory."""

import json
import logging
import os
import uuid

from flask import Flask, jsonify, g, request, send_from_directory
from flask.logging import default_handler
from flask_cors import CORS
from flask_jwt_extended import JWTManager, verify_jwt_in_request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import Forbidden, HTTPException

from config import Config
from models import db
from routes.admin import admin_bp
from routes.access import require_account
from routes.auth import auth_bp
from routes.campaigns import IMAGE_PREFIX, campaigns_bp
from services.context import build_services
from services.errors import ServiceError

migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)

PUBLIC_UPLOAD_PREFIX = f"{IMAGE_PREFIX}-"


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)

    _configure_logging(app)

    # Core subsystems
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    # CORS
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )

    # Rate limiting
    storage_uri = app.config.get("RATELIMIT_STORAGE_URI", "memory://")
    headers_enabled = app.config.get("RATELIMIT_HEADERS_ENABLED", True)
    key_prefix = app.config.get("RATELIMIT_KEY_PREFIX") or str(uuid.uuid4())

    global limiter
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[lambda: app.config.get("RATE_LIMIT", "60 per minute")],
        storage_uri=storage_uri,
        headers_enabled=headers_enabled,
        key_prefix=key_prefix,
    )
    limiter.init_app(app)
    app.config["RATELIMIT_KEY_PREFIX"] = key_prefix

    # Ensure uploads directory exists
    upload_dir = app.config.get("UPLOAD_DIR")
    if upload_dir:
        os.makedirs(upload_dir, exist_ok=True)

    services = build_services(app)

    # Blueprints
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(campaigns_bp, url_prefix="/campaigns")
    app.register_blueprint(admin_bp, url_prefix="/admin")

    # Health
    @app.route("/health", methods=["GET"])
    def health_check():
        return jsonify({"status": "ok"})

    @app.route("/uploads/<path:reference>", methods=["GET"])
    def uploaded_file(reference: str):
        if not reference.startswith(PUBLIC_UPLOAD_PREFIX):
            _require_document_access(reference)
        return send_from_directory(services.storage.base_directory.resolve(), reference)

    _register_cli(app)

    # Errors
    _register_error_handlers(app)

    return app


def _require_document_access(reference: str) -> None:
    """Verification documents are visible to admins and to their owner only."""

    verify_jwt_in_request()
    account = require_account()
    if account.role == "admin":
        return
    profile = account.profile
    field = getattr(profile, "DOCUMENT_FIELD", None)
    if field is None or getattr(profile, field) != reference:
        raise Forbidden("Not authorized to view this document.")


def _configure_logging(app: Flask) -> None:
    """Apply LOG_LEVEL and route service loggers through Flask's handler."""

    level = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    app.logger.setLevel(level)
    services_logger = logging.getLogger("services")
    services_logger.setLevel(level)
    if default_handler not in services_logger.handlers:
        services_logger.addHandler(default_handler)


def init_database(app: Flask) -> None:
    """Create missing tables; failing to reach the database is fatal."""

    with app.app_context():
        try:
            db.create_all()
        except SQLAlchemyError:
            app.logger.critical(
                "Could not initialise database at %s",
                app.config.get("SQLALCHEMY_DATABASE_URI"),
                exc_info=True,
            )
            raise SystemExit(1)
    app.logger.info("Database initialised")


def _register_cli(app: Flask) -> None:
    @app.cli.command("init-db")
    def init_db_command():
        """Create the database tables."""
        init_database(app)


def _register_error_handlers(app: Flask) -> None:
    """Register JSON error handlers with request IDs."""

    @app.before_request
    def _assign_request_id():  # pragma: no cover
        g.request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    @app.after_request
    def _add_request_id_header(response):  # pragma: no cover
        request_id = g.get("request_id")
        if request_id:
            response.headers.setdefault("X-Request-ID", request_id)
        return response

    def _error_response(status_code: int, error: str, detail: str):
        request_id = g.get("request_id") or str(uuid.uuid4())
        response = jsonify(
            {"error": error, "detail": detail, "request_id": request_id}
        )
        response.status_code = status_code
        response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(HTTPException)
    def _handle_http_exception(error: HTTPException):
        request_id = g.get("request_id") or str(uuid.uuid4())
        response = error.get_response()
        payload = {
            "error": getattr(error, "name", "Error"),
            "detail": error.description,
            "request_id": request_id,
        }
        response.data = json.dumps(payload)
        response.content_type = "application/json"
        response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(ServiceError)
    def _handle_service_error(error: ServiceError):
        return _error_response(int(error.status_code), error.error, error.detail)

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):  # pragma: no cover
        app.logger.exception("Unhandled application error", exc_info=error)
        return _error_response(500, "Internal Server Error", "An unexpected error occurred.")


if __name__ == "__main__":
    application = create_app()
    init_database(application)
    application.run(host="0.0.0.0", port=int(os.environ.get("PORT", 4000)))
