import os
import logging
import traceback

from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy

from config import Config

db = SQLAlchemy()

_startup_errors = []


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger(__name__)

    # Chinese rubric text stays readable in JSON responses
    app.json.ensure_ascii = False

    os.makedirs(app.instance_path, exist_ok=True)

    # HTTPS support behind a reverse proxy
    if os.environ.get("BEHIND_PROXY"):
        from werkzeug.middleware.proxy_fix import ProxyFix
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)

    db.init_app(app)

    # Gzip compression for JSON responses
    from flask_compress import Compress
    Compress(app)

    from app.assessment.routes import assessment_bp
    from app.dashboard.routes import dashboard_bp
    from app.chat.routes import chat_bp

    app.register_blueprint(assessment_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(chat_bp)

    @app.route("/health")
    def health():
        """Health check: app status, DB connectivity and AI key presence."""
        from app.rubric import RUBRIC_VERSION

        ai_key = bool(os.environ.get("ANTHROPIC_API_KEY", ""))
        db_url = app.config["SQLALCHEMY_DATABASE_URI"]
        db_type = db_url.split("://")[0] if "://" in db_url else "sqlite"

        db_ok = False
        db_error = None
        tables = []
        try:
            from sqlalchemy import inspect, text
            db.session.execute(text("SELECT 1"))
            db_ok = True
            tables = inspect(db.engine).get_table_names()
        except Exception as e:
            db_error = str(e)

        return jsonify({
            "status": "ok" if db_ok else "db_error",
            "rubric_version": RUBRIC_VERSION,
            "ai_key_set": ai_key,
            "database_type": db_type,
            "database_connected": db_ok,
            "database_error": db_error,
            "tables": tables,
            "startup_errors": _startup_errors,
        })

    from app.normalizer import MalformedInputError

    @app.errorhandler(MalformedInputError)
    def malformed_input(error):
        logger.info(f"Rejected malformed input: {error}")
        return jsonify({"error": str(error)}), 400

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(413)
    def payload_too_large(error):
        max_kb = app.config.get("MAX_CONTENT_LENGTH", 0) // 1024
        return jsonify({"error": f"Request too large. Maximum size is {max_kb} KB."}), 413

    @app.errorhandler(500)
    def internal_error(error):
        try:
            db.session.rollback()
        except Exception:
            logger.exception("Session rollback failed")
        original = getattr(error, "original_exception", None) or error
        error_detail = f"{type(original).__name__}: {original}"
        logger.error(f"500 error: {error_detail}\n{traceback.format_exc()}")
        return jsonify({"error": "Internal server error", "detail": error_detail}), 500

    with app.app_context():
        try:
            db.create_all()
            logger.info("Database tables created/verified.")
        except Exception as e:
            msg = f"db.create_all() failed: {e}"
            logger.error(msg)
            _startup_errors.append(msg)

    return app
