"""Template commands and queries.

Ownership of the addressed template is checked by the backend inside the
single service call, so a cross-owner update or delete surfaces as
:class:`ForbiddenError` without a separate lookup.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

import structlog

from fieldnote.domain.errors import TEMPLATE_LOCKED_MESSAGE, TemplateStructureLockedError
from fieldnote.domain.schemas import (
    CreateTemplateRequest,
    DeleteTemplateRequest,
    GetTemplateByIdRequest,
    ListMyTemplatesRequest,
    ListTemplatesRequest,
    UpdateTemplateRequest,
    parse_request,
)
from fieldnote.handlers.base import BaseHandler
from fieldnote.services.template import TemplateService

if TYPE_CHECKING:
    from fieldnote.domain.entities import Ack, Template

logger = structlog.get_logger(__name__)

Raw = Mapping[str, Any] | None


class TemplateCommands(BaseHandler[TemplateService]):
    def create_template(self, raw: Raw) -> Template:
        req = parse_request(CreateTemplateRequest, raw)
        owner_id = self._require_account_id("create_template")
        return self._service.create(owner_id, req.name, req.fields)

    def update_template(self, raw: Raw) -> Template:
        """Rename and/or replace the field list.

        Raises:
            TemplateStructureLockedError: fields were added or removed on a
                template that notes already use; the message is replaced
                with the user-facing wording and the backend code is kept.
        """
        req = parse_request(UpdateTemplateRequest, raw)
        owner_id = self._require_account_id("update_template")
        try:
            return self._service.update(req.id, owner_id, name=req.name, fields=req.fields)
        except TemplateStructureLockedError as exc:
            logger.warning("template_locked", template_id=req.id, code=exc.code)
            raise TemplateStructureLockedError(TEMPLATE_LOCKED_MESSAGE, code=exc.code) from exc

    def delete_template(self, raw: Raw) -> Ack:
        req = parse_request(DeleteTemplateRequest, raw)
        owner_id = self._require_account_id("delete_template")
        return self._service.delete(req.id, owner_id)


class TemplateQueries(BaseHandler[TemplateService]):
    def get_template_by_id(self, raw: Raw) -> Template | None:
        req = parse_request(GetTemplateByIdRequest, raw)
        return self._service.get_by_id(req.id)

    def list_templates(self, raw: Raw = None) -> Sequence[Template]:
        """All templates, or only the caller's when ``onlyMyTemplates`` is set.

        A session is required either way.
        """
        req = parse_request(ListTemplatesRequest, raw)
        acting = self._require_account_id("list_templates")
        owner_id = acting if req.only_my_templates else None
        return self._service.list(owner_id=owner_id, q=req.q)

    def list_my_templates(self, raw: Raw = None) -> Sequence[Template]:
        req = parse_request(ListMyTemplatesRequest, raw)
        acting = self._require_account_id("list_my_templates")
        return self._service.list(owner_id=acting, q=req.q)
