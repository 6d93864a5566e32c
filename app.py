import logging
import re
from datetime import timedelta
from pathlib import Path
from typing import Optional

from flask import Flask, jsonify, redirect, request
from sqlalchemy import event
from werkzeug.exceptions import HTTPException

from board import board_bp
from config import build_config, load_secret_key
from extensions import db
from goguma import goguma_bp
from goguma.service import GogumaServiceError

APP_PAGE = "goguma-app.html"
MSG_INTERNAL_ERROR = "서버 오류가 발생했습니다. 잠시 후 다시 시도해 주세요."


def create_app(overrides: Optional[dict] = None) -> Flask:
    """Build the Flask app; the database handle lives and dies with it."""
    app = Flask(
        __name__,
        instance_relative_config=True,
        static_folder="static",
        static_url_path="",
    )
    instance_path = Path(app.instance_path)
    instance_path.mkdir(parents=True, exist_ok=True)

    app.config.update(build_config(instance_path))
    if overrides:
        app.config.update(overrides)
    if not app.config.get("SECRET_KEY"):
        app.secret_key = load_secret_key(instance_path)
    app.permanent_session_lifetime = timedelta(days=app.config["SESSION_DAYS"])
    app.logger.setLevel(getattr(logging, str(app.config["LOG_LEVEL"]), logging.INFO))

    db.init_app(app)
    app.register_blueprint(goguma_bp)
    app.register_blueprint(board_bp)
    _register_error_handlers(app)

    @app.route("/")
    def home():
        return redirect(f"/{APP_PAGE}")

    @app.route("/healthz")
    def healthz():
        return jsonify({"status": "ok"})

    with app.app_context():
        if db.engine.dialect.name == "sqlite":
            event.listen(db.engine, "connect", _enable_sqlite_foreign_keys)
        db.create_all()

    return app


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(GogumaServiceError)
    def handle_service_error(exc: GogumaServiceError):
        return jsonify(exc.payload), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        if not request.path.startswith("/api/"):
            return exc.get_response()
        code = re.sub(r"[^a-z0-9]+", "_", (exc.name or "error").lower()).strip("_")
        return jsonify({"error": exc.description, "code": code}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc: Exception):
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        db.session.rollback()
        return jsonify({"error": MSG_INTERNAL_ERROR, "code": "internal_error"}), 500


# ====== Entrypoint ======
if __name__ == "__main__":
    application = create_app()
    print(f"고구마 전도 서버: http://localhost:{application.config['PORT']}")
    application.run(host="0.0.0.0", port=application.config["PORT"])
