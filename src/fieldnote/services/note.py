"""NoteService — note CRUD and the Draft/Publish lifecycle.

Snapshots (template name, owner summary, field labels) are copied by the
backend on every write; this service never recomputes them.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import structlog

from fieldnote.domain.entities import Ack, Note
from fieldnote.domain.schemas import SectionInput
from fieldnote.services.base import BaseService

logger = structlog.get_logger(__name__)


def _section_payload(section: SectionInput | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(section, SectionInput):
        return section.model_dump()
    return dict(section)


class NoteService(BaseService):
    def create(
        self,
        owner_id: str,
        title: str,
        template_id: str,
        sections: Sequence[SectionInput | Mapping[str, Any]] = (),
    ) -> Note:
        data = self._write(
            self._backend.create_note(
                owner_id=owner_id,
                title=title,
                template_id=template_id,
                sections=[_section_payload(s) for s in sections],
            )
        )
        note = Note.model_validate(data)
        logger.info("note_created", note_id=note.id, template_id=template_id)
        return note

    def get_by_id(self, note_id: str) -> Note | None:
        data = self._read(self._backend.get_note_by_id(note_id))
        return None if data is None else Note.model_validate(data)

    def update(
        self,
        note_id: str,
        owner_id: str,
        title: str | None = None,
        sections: Sequence[SectionInput | Mapping[str, Any]] | None = None,
    ) -> Note:
        """Update the title and/or merge sections by id.

        Sections carrying an id replace that section's content; sections
        without one are appended.
        """
        data = self._write(
            self._backend.update_note(
                note_id,
                owner_id=owner_id,
                title=title,
                sections=None if sections is None else [_section_payload(s) for s in sections],
            )
        )
        logger.info("note_updated", note_id=note_id)
        return Note.model_validate(data)

    def publish(self, note_id: str, owner_id: str) -> Note:
        note = Note.model_validate(
            self._write(self._backend.publish_note(note_id, owner_id=owner_id))
        )
        logger.info("note_status", note_id=note_id, status=str(note.status))
        return note

    def unpublish(self, note_id: str, owner_id: str) -> Note:
        note = Note.model_validate(
            self._write(self._backend.unpublish_note(note_id, owner_id=owner_id))
        )
        logger.info("note_status", note_id=note_id, status=str(note.status))
        return note

    def delete(self, note_id: str, owner_id: str) -> Ack:
        self._write(self._backend.delete_note(note_id, owner_id=owner_id))
        logger.info("note_deleted", note_id=note_id)
        return Ack()

    def list(
        self,
        status: str | None = None,
        template_id: str | None = None,
        q: str | None = None,
        owner_id: str | None = None,
        page: int | None = None,
    ) -> Sequence[Note]:
        items = self._items(
            self._backend.list_notes(
                status=status, template_id=template_id, q=q, owner_id=owner_id, page=page
            )
        )
        return [Note.model_validate(item) for item in items]
