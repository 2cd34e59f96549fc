"""SQLite database engine and schema via SQLAlchemy Core."""

from fieldnote.infrastructure.database.engine import create_db_engine, init_database
from fieldnote.infrastructure.database.schema import (
    accounts,
    metadata,
    notes,
    sections,
    template_fields,
    templates,
)

__all__ = [
    "accounts",
    "create_db_engine",
    "init_database",
    "metadata",
    "notes",
    "sections",
    "template_fields",
    "templates",
]
