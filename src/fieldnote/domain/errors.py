"""Error taxonomy shared by services, handlers and the CLI.

Not-found is deliberately absent: read operations return ``None`` for a
missing entity instead of raising.
"""

from __future__ import annotations

from typing import Any

# Backend condition codes
NOT_FOUND = "NOT_FOUND"
FORBIDDEN = "FORBIDDEN"
TEMPLATE_STRUCTURE_LOCKED = "TEMPLATE_STRUCTURE_LOCKED"
TEMPLATE_FIELD_IN_USE = "TEMPLATE_FIELD_IN_USE"
TEMPLATE_IN_USE = "TEMPLATE_IN_USE"
NOT_IMPLEMENTED = "NOT_IMPLEMENTED"

# Both backend codes describe the same condition.
STRUCTURE_LOCK_CODES: frozenset[str] = frozenset(
    {TEMPLATE_STRUCTURE_LOCKED, TEMPLATE_FIELD_IN_USE}
)

TEMPLATE_LOCKED_MESSAGE = (
    "This template's fields are in use by notes and cannot be changed or removed"
)
SELF_UPDATE_ONLY_MESSAGE = "Forbidden: Can only update your own account"
NO_SESSION_MESSAGE = "Unauthorized: No active session"
ACCOUNT_UPDATE_UNIMPLEMENTED_MESSAGE = (
    "Account update API is not implemented on the backend yet."
)


class FieldnoteError(Exception):
    """Base class for every error raised by the fieldnote core."""

    code = "ERROR"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


class ValidationError(FieldnoteError):
    """Input failed a schema constraint. Raised before any backend call."""

    code = "VALIDATION_FAILED"

    def __init__(self, messages: list[str]) -> None:
        super().__init__("; ".join(messages) or "Invalid input")
        self.messages = list(messages)

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "messages": self.messages}


class ForbiddenError(FieldnoteError):
    """The acting identity may not touch the addressed entity."""

    code = "FORBIDDEN"


class UnauthenticatedError(ForbiddenError):
    """A session is required but none is present."""

    code = "UNAUTHENTICATED"

    def __init__(self, message: str = NO_SESSION_MESSAGE) -> None:
        super().__init__(message)


class TemplateStructureLockedError(FieldnoteError):
    """The template's field set cannot change while notes use it."""

    code = TEMPLATE_STRUCTURE_LOCKED


class TemplateInUseError(FieldnoteError):
    """The template cannot be deleted while notes use it."""

    code = TEMPLATE_IN_USE


class UnimplementedError(FieldnoteError):
    """The backend does not support the requested operation."""

    code = NOT_IMPLEMENTED


class UpstreamError(FieldnoteError):
    """Any other backend failure. The message is kept verbatim."""

    code = "UPSTREAM_ERROR"
