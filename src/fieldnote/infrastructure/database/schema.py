"""SQLAlchemy Core table definitions for the fieldnote database.

Timestamps are stored as ISO 8601 UTC strings so they sort lexically.
Note and section rows carry snapshot columns (template name, owner
summary, field label, required flag) copied at write time.
"""

from __future__ import annotations

from sqlalchemy import (
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

accounts = Table(
    "accounts",
    metadata,
    Column("id", Text, primary_key=True),
    Column("email", Text, nullable=False, unique=True),
    Column("first_name", Text, nullable=False),
    Column("last_name", Text, nullable=False),
    Column("provider", Text, nullable=False),
    Column("provider_account_id", Text, nullable=False),
    Column("thumbnail", Text),
    Column("is_active", Integer, nullable=False, default=1, server_default="1"),
    Column("last_login_at", Text),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
    UniqueConstraint("provider", "provider_account_id"),
)

templates = Table(
    "templates",
    metadata,
    Column("id", Text, primary_key=True),
    Column("name", Text, nullable=False),
    Column("owner_id", Text, ForeignKey("accounts.id"), nullable=False),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
)

template_fields = Table(
    "template_fields",
    metadata,
    Column("id", Text, primary_key=True),
    Column("template_id", Text, ForeignKey("templates.id"), nullable=False),
    Column("label", Text, nullable=False),
    Column("field_order", Integer, nullable=False),
    Column("is_required", Integer, nullable=False, default=0, server_default="0"),
)

notes = Table(
    "notes",
    metadata,
    Column("id", Text, primary_key=True),
    Column("title", Text, nullable=False),
    Column("template_id", Text, ForeignKey("templates.id"), nullable=False),
    Column("owner_id", Text, ForeignKey("accounts.id"), nullable=False),
    Column("status", Text, nullable=False),
    # Snapshots
    Column("template_name", Text, nullable=False),
    Column("owner_first_name", Text, nullable=False),
    Column("owner_last_name", Text, nullable=False),
    Column("owner_thumbnail", Text),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
)

sections = Table(
    "sections",
    metadata,
    Column("id", Text, primary_key=True),
    Column("note_id", Text, ForeignKey("notes.id"), nullable=False),
    Column("field_id", Text, ForeignKey("template_fields.id"), nullable=False),
    Column("position", Integer, nullable=False),
    Column("content", Text, nullable=False, default="", server_default=""),
    # Snapshots
    Column("field_label", Text, nullable=False),
    Column("is_required", Integer, nullable=False, default=0, server_default="0"),
)

# ---------------------------------------------------------------------------
# Indexes for frequently filtered columns
# ---------------------------------------------------------------------------

Index("ix_templates_owner", templates.c.owner_id)
Index("ix_template_fields_template", template_fields.c.template_id)
Index("ix_notes_owner", notes.c.owner_id)
Index("ix_notes_template", notes.c.template_id)
Index("ix_notes_status", notes.c.status)
Index("ix_sections_note", sections.c.note_id)
Index("ix_sections_field", sections.c.field_id)
