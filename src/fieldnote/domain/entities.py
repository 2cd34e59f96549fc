"""Entity models returned by services and handlers.

Snapshot fields (``Note.template_name``, ``Note.owner``,
``Section.field_label``, ``Section.is_required``) are copied by the backend
at write time and never recomputed on read.

Optional upstream values that are missing are always materialised as
``None`` so callers can rely on presence tests.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from fieldnote.domain.lifecycle import NoteStatus
from fieldnote.domain.schemas import EntityId


class Entity(BaseModel):
    """Base for response entities; serialises with camelCase aliases."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Owner(Entity):
    """Display summary of an account, embedded in templates and notes."""

    id: EntityId
    first_name: str
    last_name: str
    thumbnail: str | None = None


class Account(Entity):
    id: EntityId
    email: str
    first_name: str
    last_name: str
    full_name: str
    thumbnail: str | None = None
    last_login_at: datetime | None = None
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class TemplateField(Entity):
    id: EntityId
    label: str
    order: int
    is_required: bool


class Template(Entity):
    id: EntityId
    name: str
    owner_id: EntityId
    owner: Owner | None = None
    fields: list[TemplateField] = Field(default_factory=list)
    updated_at: datetime
    is_used: bool = False


class Section(Entity):
    id: EntityId
    field_id: EntityId
    field_label: str
    content: str
    is_required: bool


class Note(Entity):
    id: EntityId
    title: str
    template_id: EntityId
    template_name: str
    owner_id: EntityId
    owner: Owner
    status: NoteStatus
    sections: list[Section] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class Ack(Entity):
    """Acknowledgement for commands without a natural return value."""

    success: bool = True
