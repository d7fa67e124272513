from pathlib import Path

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool

from groupchat.config.settings import Settings


def _is_memory_database(database) -> bool:
    return database in (None, "", ":memory:")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create the database engine for a URL.

    SQLite connections get foreign key enforcement switched on. In-memory
    databases share a single connection so every caller sees the same data.
    """
    url = make_url(database_url)
    kwargs = {"echo": echo}

    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if _is_memory_database(url.database):
            kwargs["poolclass"] = StaticPool

    engine = create_engine(url, **kwargs)
    if url.get_backend_name() == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def ensure_database_directory(engine: Engine) -> None:
    """Create the parent directory of a file-backed SQLite database"""
    url = engine.url
    if url.get_backend_name() == "sqlite" and not _is_memory_database(url.database):
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)


def create_engine_from_settings(settings: Settings) -> Engine:
    return build_engine(settings.database_url, echo=settings.database_echo)


def get_engine(request: Request) -> Engine:
    """Database engine owned by the running application"""
    return request.app.state.engine
