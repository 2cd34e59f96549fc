"""SQLite engine construction.

Every backend operation runs in one short ``engine.begin()`` block, so
Core connections are enough. WAL lets CLI readers proceed while a write
is in flight; ``busy_timeout`` absorbs brief writer contention.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, Engine

from fieldnote.infrastructure.database.schema import metadata

_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA foreign_keys=ON",
    "PRAGMA busy_timeout=5000",
)


def create_db_engine(db_path: Path) -> Engine:
    engine = create_engine(URL.create("sqlite", database=str(db_path)))

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_conn: Any, _record: Any) -> None:
        cursor = dbapi_conn.cursor()
        try:
            for pragma in _PRAGMAS:
                cursor.execute(pragma)
        finally:
            cursor.close()

    return engine


def init_database(db_path: Path) -> Engine:
    """Return an engine for *db_path*, creating the file and tables if needed.

    Existing tables are left untouched.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_db_engine(db_path)
    metadata.create_all(engine, checkfirst=True)
    return engine
