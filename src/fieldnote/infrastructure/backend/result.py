"""BackendResult and BackendError — the persistence collaborator's answer.

INVARIANT: every Backend operation returns a BackendResult; failures are
tagged with an ``error.code`` instead of being raised, so services never
have to sniff exception shapes to tell "not found" from a real fault.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from fieldnote.domain.errors import NOT_FOUND


class BackendError(BaseModel):
    """Structured error payload within a BackendResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class BackendResult(BaseModel):
    """Universal return type for all backend operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"get_note_by_id"``).
        data: Operation-specific payload on success. Collections are
            returned under ``items``.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    error: BackendError | None = None

    @property
    def not_found(self) -> bool:
        return self.error is not None and self.error.code == NOT_FOUND

    @classmethod
    def success(cls, op: str, data: dict[str, Any] | None = None) -> BackendResult:
        return cls(ok=True, op=op, data=data or {})

    @classmethod
    def failure(cls, op: str, code: str, message: str, **detail: Any) -> BackendResult:
        return cls(ok=False, op=op, error=BackendError(code=code, message=message, detail=detail))
