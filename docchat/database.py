"""Database utilities for the DocChat service."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy.engine import Engine, make_url
from sqlmodel import SQLModel, create_engine

from . import config as config_module
from .config import PROJECT_ROOT

_engine: Engine | None = None


def get_engine() -> Engine:
    """Return a SQLModel engine using configured settings."""

    global _engine
    if _engine is None:
        settings = config_module.get_settings()
        database_url = settings.database_url
        url = make_url(database_url)
        connect_args = {"check_same_thread": False} if url.get_backend_name() == "sqlite" else {}

        if url.get_backend_name() == "sqlite":
            database = url.database
            if database and database != ":memory:":
                db_path = Path(database)
                if not db_path.is_absolute():
                    db_path = (PROJECT_ROOT / db_path).resolve()
                db_path.parent.mkdir(parents=True, exist_ok=True)
                url = url.set(database=str(db_path))
                database_url = url.render_as_string(hide_password=False)

        _engine = create_engine(database_url, connect_args=connect_args)
    return _engine


def init_db(engine: Engine | None = None) -> None:
    """Initialise database tables."""

    from .models import kv_entry  # noqa: F401  Registers the table with SQLModel metadata.

    SQLModel.metadata.create_all(engine or get_engine())


def reset_database_state() -> None:
    """Dispose and forget the cached engine (useful for tests)."""

    global _engine
    if _engine is not None:
        _engine.dispose()
    _engine = None
