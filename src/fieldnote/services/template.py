"""TemplateService — template CRUD over the backend.

The structure lock itself is decided by the backend; this service only
maps its answer (``TEMPLATE_STRUCTURE_LOCKED`` or ``TEMPLATE_FIELD_IN_USE``)
to :class:`TemplateStructureLockedError`.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import structlog

from fieldnote.domain.entities import Ack, Template
from fieldnote.domain.errors import ValidationError
from fieldnote.domain.schemas import FieldInput
from fieldnote.services.base import BaseService

logger = structlog.get_logger(__name__)


def _field_payload(field: FieldInput | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(field, FieldInput):
        return field.model_dump()
    return dict(field)


class TemplateService(BaseService):
    def create(
        self, owner_id: str, name: str, fields: Sequence[FieldInput | Mapping[str, Any]]
    ) -> Template:
        if not fields:
            raise ValidationError(["fields: a template needs at least one field"])
        data = self._write(
            self._backend.create_template(
                owner_id=owner_id,
                name=name,
                fields=[_field_payload(f) for f in fields],
            )
        )
        template = Template.model_validate(data)
        logger.info("template_created", template_id=template.id, fields=len(template.fields))
        return template

    def get_by_id(self, template_id: str) -> Template | None:
        data = self._read(self._backend.get_template_by_id(template_id))
        return None if data is None else Template.model_validate(data)

    def update(
        self,
        template_id: str,
        owner_id: str,
        name: str | None = None,
        fields: Sequence[FieldInput | Mapping[str, Any]] | None = None,
    ) -> Template:
        data = self._write(
            self._backend.update_template(
                template_id,
                owner_id=owner_id,
                name=name,
                fields=None if fields is None else [_field_payload(f) for f in fields],
            )
        )
        logger.info("template_updated", template_id=template_id, fields_changed=fields is not None)
        return Template.model_validate(data)

    def delete(self, template_id: str, owner_id: str) -> Ack:
        self._write(self._backend.delete_template(template_id, owner_id=owner_id))
        logger.info("template_deleted", template_id=template_id)
        return Ack()

    def list(self, owner_id: str | None = None, q: str | None = None) -> Sequence[Template]:
        items = self._items(self._backend.list_templates(owner_id=owner_id, q=q))
        return [Template.model_validate(item) for item in items]
