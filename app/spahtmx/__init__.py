import atexit
import logging

from dotenv import load_dotenv
from flask import Flask, request
from flask_compress import Compress

from app.spahtmx.config import load_config
from app.spahtmx.errors import AppError
from app.spahtmx.logging_config import setup_logging
from app.spahtmx.rendering import render_page
from app.spahtmx.routes import bp as routes_bp
from app.spahtmx.auth import bp as auth_bp, load_current_user
from app.spahtmx.admin import bp as admin_bp
from app.spahtmx.prizes import bp as prizes_bp
from app.spahtmx.service import build_services
from app.spahtmx.storage import repositories_from_config


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__, template_folder="templates", static_folder="static")
    app.config.from_mapping(load_config())
    setup_logging(app.config["LOG_LEVEL"])

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")
        if app.config["STORE_BACKEND"] == "sql" and str(app.config["DATABASE_URL"]).startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")

    try:
        repos = repositories_from_config(app.config)
    except Exception:
        app.logger.exception("Storage initialisation failed (backend=%s)", app.config.get("STORE_BACKEND"))
        raise
    atexit.register(repos.close)
    app.extensions["spahtmx_repositories"] = repos
    app.extensions["spahtmx_services"] = build_services(repos.users, repos.prizes)

    if app.config.get("SEED_DB"):
        from app.spahtmx.seed import seed_database

        app.logger.info("SEED_DB set; seeding %s store", repos.backend)
        seed_database(repos.users, repos.prizes, app.config["PRIZE_SEED_PATH"])

    app.register_blueprint(routes_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(prizes_bp)

    app.before_request(load_current_user)

    # Compress text responses per Accept-Encoding.
    Compress(app)

    @app.after_request
    def _log_request(response):  # type: ignore[no-redef]
        app.logger.info("request method=%s uri=%s status=%s", request.method, request.full_path.rstrip("?"), response.status_code)
        return response

    @app.errorhandler(AppError)
    def _err_app(e: AppError):  # type: ignore[no-redef]
        if e.status_code >= 500:
            app.logger.error("%s %s failed: %s", request.method, request.path, e, exc_info=e)
        else:
            app.logger.warning("%s %s -> %s: %s", request.method, request.path, e.status_code, e)
        return render_page(request.path, "errors/error.html", status=e.status_code, message=e.public_message)

    @app.errorhandler(404)
    def _err_404(e):  # type: ignore[no-redef]
        return render_page(request.path, "errors/error.html", status=404, message="Page not found.")

    @app.errorhandler(500)
    def _err_500(e):  # type: ignore[no-redef]
        # Flask has already logged the traceback via log_exception.
        return render_page(request.path, "errors/error.html", status=500, message="Internal server error.")

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app
