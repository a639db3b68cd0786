# aibuilder/__init__.py
import logging
import os
from flask import Flask, g
from dotenv import load_dotenv
from flask_cors import CORS
from flask import current_app

from .db.engine import make_engine, make_session_factory, init_db
from .db.sql_store import SqlStore
from .services.generation import TemplateCodeGenerator
from .services.deployment import StubDeployer


def create_app(overrides: dict | None = None):
    load_dotenv()
    overrides = overrides or {}
    app = Flask(__name__)

    # ---- Config ----
    dsn = overrides.get("DATABASE_URL") or os.environ.get("DATABASE_URL")
    if not dsn:
        raise RuntimeError("DATABASE_URL is not set. Put it in your .env")
    app.config["DATABASE_URL"] = dsn

    # Auth config (used by registerUser / loginUser and require_auth)
    app.config["JWT_SECRET"] = os.environ.get("JWT_SECRET", "dev-secret-change-me")
    app.config["JWT_EXPIRES_HOURS"] = int(os.environ.get("JWT_EXPIRES_HOURS", "24"))

    # Simulated latency for the AI / deploy placeholders
    app.config["STUB_DELAY_MS"] = int(os.environ.get("STUB_DELAY_MS", "0"))
    app.config["STUB_DELAY_MAX_MS"] = int(os.environ.get("STUB_DELAY_MAX_MS", "2000"))

    app.config["CORS_ORIGINS"] = os.environ.get("CORS_ORIGINS", "*")
    app.config["LOG_LEVEL"] = os.environ.get("LOG_LEVEL", "INFO").upper()
    app.config["CREATE_TABLES"] = os.environ.get("CREATE_TABLES", "1") not in {"0", "false", "no"}

    app.config["CODE_GENERATOR"] = TemplateCodeGenerator()
    app.config["DEPLOYER"] = StubDeployer()

    app.config.update(overrides)

    logging.basicConfig(level=app.config["LOG_LEVEL"])
    app.logger.setLevel(app.config["LOG_LEVEL"])

    engine = make_engine(app.config["DATABASE_URL"])
    app.config["DB_ENGINE"] = engine
    app.config["DB_SESSION_FACTORY"] = make_session_factory(engine)
    if app.config["CREATE_TABLES"]:
        init_db(engine)

    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})

    # ---- Per-request store management ----
    @app.teardown_appcontext
    def _close_request_store(exc):
        store = g.pop("_store", None)
        if store is not None:
            store.close()

    # ---- Blueprints ----
    from .routes.rpc import rpc_bp
    from .routes.health import health_bp

    app.register_blueprint(rpc_bp, url_prefix="/api")
    app.register_blueprint(health_bp, url_prefix="/api")

    return app


def get_store() -> SqlStore:
    """One SqlStore (one Session) per request, closed on teardown."""
    store = g.get("_store")
    if store is None:
        factory = current_app.config["DB_SESSION_FACTORY"]
        store = g._store = SqlStore(factory())
    return store
