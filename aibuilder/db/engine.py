# aibuilder/db/engine.py
import logging

from sqlalchemy import create_engine, event, pool
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import sessionmaker

from .base import Base

log = logging.getLogger(__name__)


def _is_sqlite_memory(url) -> bool:
    return url.database in (None, "", ":memory:") or url.query.get("mode") == "memory"


def make_engine(database_url: str) -> Engine:
    """
    Build an engine for DATABASE_URL.
    SQLite always enforces foreign keys so the ON DELETE CASCADE rules behave
    like PostgreSQL. Only an in-memory SQLite database (tests) shares a single
    connection; file databases get a normal pool so each request keeps its own
    transaction.
    """
    url = make_url(database_url)
    dialect_name = url.get_dialect().name

    engine_kwargs = {"pool_pre_ping": True}
    if dialect_name == "sqlite":
        engine_kwargs = {"connect_args": {"check_same_thread": False}}
        if _is_sqlite_memory(url):
            engine_kwargs["poolclass"] = pool.StaticPool

    engine = create_engine(database_url, **engine_kwargs)

    if dialect_name == "sqlite":
        @event.listens_for(engine, "connect")
        def _sqlite_fk_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    log.info("Database engine configured for %s", dialect_name)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False)


def init_db(engine: Engine) -> None:
    """
    Import all models so they register with Base.metadata, then create tables.
    """
    from ..models import register_models  # noqa: F401
    Base.metadata.create_all(bind=engine)
