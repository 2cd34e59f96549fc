"""BaseService — shared foundation for the domain services.

Every service receives a :class:`Backend` at construction time and makes
exactly one backend call per operation. The helpers here translate the
tagged :class:`BackendResult` into a plain payload or a typed exception:

- reads: ``NOT_FOUND`` collapses to ``None``
- writes: every failure raises
- named conditions map to their exception class; anything else becomes
  :class:`UpstreamError` carrying the backend message unchanged
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from fieldnote.domain.errors import (
    FORBIDDEN,
    NOT_IMPLEMENTED,
    STRUCTURE_LOCK_CODES,
    TEMPLATE_IN_USE,
    FieldnoteError,
    ForbiddenError,
    TemplateInUseError,
    TemplateStructureLockedError,
    UnimplementedError,
    UpstreamError,
)

if TYPE_CHECKING:
    from fieldnote.infrastructure.backend import Backend, BackendResult

logger = structlog.get_logger(__name__)


def error_for(result: BackendResult) -> FieldnoteError:
    """Map a failed result to the exception the service should raise."""
    error = result.error
    if error is None:
        return UpstreamError(f"{result.op} failed without an error payload")
    if error.code == FORBIDDEN:
        return ForbiddenError(error.message)
    if error.code in STRUCTURE_LOCK_CODES:
        return TemplateStructureLockedError(error.message, code=error.code)
    if error.code == TEMPLATE_IN_USE:
        return TemplateInUseError(error.message)
    if error.code == NOT_IMPLEMENTED:
        return UnimplementedError(error.message)
    return UpstreamError(error.message, code=error.code)


class BaseService:
    """Base for all service classes.

    Usage::

        class NoteService(BaseService):
            def get_by_id(self, note_id: str) -> Note | None:
                data = self._read(self._backend.get_note_by_id(note_id))
                return None if data is None else Note.model_validate(data)
    """

    def __init__(self, backend: Backend) -> None:
        self._backend = backend

    def _read(self, result: BackendResult) -> dict[str, Any] | None:
        if result.ok:
            return result.data
        if result.not_found:
            logger.debug("not_found", op=result.op)
            return None
        raise self._fail(result)

    def _write(self, result: BackendResult) -> dict[str, Any]:
        if result.ok:
            return result.data
        raise self._fail(result)

    def _items(self, result: BackendResult) -> list[dict[str, Any]]:
        return list(self._write(result).get("items", []))

    @staticmethod
    def _fail(result: BackendResult) -> FieldnoteError:
        exc = error_for(result)
        logger.warning("backend_rejected", op=result.op, code=exc.code, message=exc.message)
        return exc
