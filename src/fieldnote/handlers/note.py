"""Note commands and queries.

The cross-owner listing only ever shows published notes. Asking that view
for drafts yields an empty list without touching the backend.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

import structlog

from fieldnote.domain.lifecycle import NoteStatus
from fieldnote.domain.schemas import (
    CreateNoteRequest,
    DeleteNoteRequest,
    GetNoteByIdRequest,
    ListMyNotesRequest,
    ListNotesRequest,
    NoteFilter,
    PublishNoteRequest,
    UnpublishNoteRequest,
    UpdateNoteRequest,
    parse_request,
)
from fieldnote.handlers.base import BaseHandler
from fieldnote.services.note import NoteService

if TYPE_CHECKING:
    from fieldnote.domain.entities import Ack, Note

logger = structlog.get_logger(__name__)

Raw = Mapping[str, Any] | None


class NoteCommands(BaseHandler[NoteService]):
    def create_note(self, raw: Raw) -> Note:
        req = parse_request(CreateNoteRequest, raw)
        owner_id = self._require_account_id("create_note")
        return self._service.create(owner_id, req.title, req.template_id, req.sections)

    def update_note(self, raw: Raw) -> Note:
        req = parse_request(UpdateNoteRequest, raw)
        owner_id = self._require_account_id("update_note")
        return self._service.update(req.id, owner_id, title=req.title, sections=req.sections)

    def publish_note(self, raw: Raw) -> Note:
        req = parse_request(PublishNoteRequest, raw)
        owner_id = self._require_account_id("publish_note")
        return self._service.publish(req.id, owner_id)

    def unpublish_note(self, raw: Raw) -> Note:
        req = parse_request(UnpublishNoteRequest, raw)
        owner_id = self._require_account_id("unpublish_note")
        return self._service.unpublish(req.id, owner_id)

    def delete_note(self, raw: Raw) -> Ack:
        req = parse_request(DeleteNoteRequest, raw)
        owner_id = self._require_account_id("delete_note")
        return self._service.delete(req.id, owner_id)


class NoteQueries(BaseHandler[NoteService]):
    def get_note_by_id(self, raw: Raw) -> Note | None:
        req = parse_request(GetNoteByIdRequest, raw)
        self._require_account_id("get_note_by_id")
        return self._service.get_by_id(req.id)

    def list_notes(self, raw: Raw = None) -> Sequence[Note]:
        """Public listing; ``onlyMyNotes`` narrows it to the caller's notes.

        Without the toggle only ``Publish`` notes are returned.
        """
        req = parse_request(ListNotesRequest, raw)
        acting = self._require_account_id("list_notes")
        if req.only_my_notes:
            return self._list(req, owner_id=acting, status=req.status)
        if req.status is not None and req.status != NoteStatus.PUBLISH:
            logger.debug("public_listing_drafts_hidden", status=str(req.status))
            return []
        return self._list(req, owner_id=None, status=NoteStatus.PUBLISH)

    def list_my_notes(self, raw: Raw = None) -> Sequence[Note]:
        req = parse_request(ListMyNotesRequest, raw)
        acting = self._require_account_id("list_my_notes")
        return self._list(req, owner_id=acting, status=req.status)

    def _list(
        self, req: NoteFilter, *, owner_id: str | None, status: NoteStatus | None
    ) -> Sequence[Note]:
        return self._service.list(
            status=None if status is None else str(status),
            template_id=req.template_id,
            q=req.q,
            owner_id=owner_id,
            page=req.page,
        )
