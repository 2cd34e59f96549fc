"""Request schemas — untrusted input in, typed request values out.

Every handler parses its raw input through :func:`parse_request` before
doing anything else. Schemas accept snake_case or camelCase keys and ignore
unknown keys, so a caller-supplied ``ownerId`` on a "my" listing simply
disappears.

Constraints:

- identifiers are canonical UUID strings
- ``title`` / ``name`` / ``label`` are 1-100 characters
- ``order`` is a strictly positive integer, ``page`` an integer >= 1
- ``status`` is ``Draft`` or ``Publish``
- update requests require only ``id``; omitted fields stay absent, and
  fields that may be omitted may still not be sent as ``null`` unless the
  field itself is nullable (``thumbnail``, an http(s) URL)
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, TypeVar

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    AfterValidator,
    EmailStr,
    Field,
    HttpUrl,
    StrictInt,
    StringConstraints,
    TypeAdapter,
    conlist,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from fieldnote.domain.errors import ValidationError
from fieldnote.domain.ids import UUID_PATTERN
from fieldnote.domain.lifecycle import NoteStatus

MAX_TEXT_LENGTH = 100


def _reject_null(value: Any) -> Any:
    if value is None:
        raise ValueError("Value may be omitted but not null")
    return value


_http_url = TypeAdapter(HttpUrl)


def _check_http_url(value: str) -> str:
    try:
        _http_url.validate_python(value)
    except PydanticValidationError as exc:
        raise ValueError("must be an http(s) URL") from exc
    return value


EntityId = Annotated[str, StringConstraints(pattern=UUID_PATTERN)]
Title = Annotated[str, StringConstraints(min_length=1, max_length=MAX_TEXT_LENGTH)]
NonEmpty = Annotated[str, StringConstraints(min_length=1)]
Order = Annotated[StrictInt, Field(gt=0)]
Page = Annotated[StrictInt, Field(ge=1)]

OptionalTitle = Annotated[Title | None, BeforeValidator(_reject_null)]
OptionalName = Annotated[NonEmpty | None, BeforeValidator(_reject_null)]
# Validated as a URL but kept as the string the caller sent.
ThumbnailUrl = Annotated[str, AfterValidator(_check_http_url)]


class RequestModel(BaseModel):
    """Base for every request schema."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def provided(self) -> dict[str, Any]:
        """Fields explicitly present in the input (``null`` included)."""
        return self.model_dump(exclude_unset=True)


def format_errors(exc: PydanticValidationError) -> list[str]:
    """Flatten pydantic errors into ``"location: message"`` strings."""
    messages: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"])
        msg = err["msg"].removeprefix("Value error, ")
        messages.append(f"{loc}: {msg}" if loc else msg)
    return messages


M = TypeVar("M", bound=RequestModel)


def parse_request(model_cls: type[M], raw: Mapping[str, Any] | M | None) -> M:
    """Validate *raw* against *model_cls*.

    ``None`` is treated as an empty mapping so filter-only requests may be
    omitted entirely.

    Raises:
        ValidationError: *raw* violates the schema.
    """
    if isinstance(raw, model_cls):
        return raw
    try:
        return model_cls.model_validate(raw if raw is not None else {})
    except PydanticValidationError as exc:
        raise ValidationError(format_errors(exc)) from exc


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


class GetAccountByIdRequest(RequestModel):
    id: EntityId


class GetAccountByEmailRequest(RequestModel):
    email: EmailStr


class CreateAccountRequest(RequestModel):
    """Login payload from the identity provider."""

    email: EmailStr
    name: NonEmpty
    provider: NonEmpty
    provider_account_id: NonEmpty
    thumbnail: ThumbnailUrl | None = None


class UpdateAccountRequest(RequestModel):
    first_name: OptionalName = None
    last_name: OptionalName = None
    thumbnail: ThumbnailUrl | None = None


class UpdateAccountByIdRequest(UpdateAccountRequest):
    id: EntityId


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


class FieldInput(RequestModel):
    """A template field as submitted; ``id`` is absent for new fields."""

    id: EntityId | None = None
    label: Title
    order: Order
    is_required: bool = False


def _check_unique_orders(fields: list[FieldInput] | None) -> None:
    if not fields:
        return
    orders = [f.order for f in fields]
    if len(orders) != len(set(orders)):
        raise ValueError("fields: order values must be unique within a template")


class GetTemplateByIdRequest(RequestModel):
    id: EntityId


class ListTemplatesRequest(RequestModel):
    q: str | None = None
    only_my_templates: bool = False


class ListMyTemplatesRequest(RequestModel):
    q: str | None = None


class CreateTemplateRequest(RequestModel):
    name: Title
    fields: Annotated[list[FieldInput], Field(min_length=1)]

    @model_validator(mode="after")
    def _unique_orders(self) -> CreateTemplateRequest:
        _check_unique_orders(self.fields)
        return self


class UpdateTemplateRequest(RequestModel):
    id: EntityId
    name: OptionalTitle = None
    fields: Annotated[
        conlist(FieldInput, min_length=1) | None,
        BeforeValidator(_reject_null),
    ] = None

    @model_validator(mode="after")
    def _unique_orders(self) -> UpdateTemplateRequest:
        _check_unique_orders(self.fields)
        return self


class DeleteTemplateRequest(RequestModel):
    id: EntityId


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------


class SectionInput(RequestModel):
    """A note section as submitted; ``id`` is absent for new sections."""

    id: EntityId | None = None
    field_id: EntityId
    content: str


class GetNoteByIdRequest(RequestModel):
    id: EntityId


class NoteFilter(RequestModel):
    q: str | None = None
    status: NoteStatus | None = None
    template_id: EntityId | None = None
    page: Page | None = None


class ListNotesRequest(NoteFilter):
    only_my_notes: bool = False


class ListMyNotesRequest(NoteFilter):
    pass


class CreateNoteRequest(RequestModel):
    title: Title
    template_id: EntityId
    sections: list[SectionInput] = Field(default_factory=list)


class UpdateNoteRequest(RequestModel):
    id: EntityId
    title: OptionalTitle = None
    sections: Annotated[list[SectionInput] | None, BeforeValidator(_reject_null)] = None


class PublishNoteRequest(RequestModel):
    id: EntityId


class UnpublishNoteRequest(RequestModel):
    id: EntityId


class DeleteNoteRequest(RequestModel):
    id: EntityId
