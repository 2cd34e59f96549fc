"""Backend protocol — one typed operation per service method.

Implementations own consistency for each operation (the structure lock,
the in-use delete guard, ownership of templates and notes, account
dedupe) and must apply it atomically relative to concurrent writers.

Payload conventions: snake_case keys, timestamps as ISO 8601 strings,
optional values may be omitted. Collections come back as
``data["items"]``; deletes return ``{"success": True}``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from fieldnote.infrastructure.backend.result import BackendResult


class Backend(Protocol):
    # --- accounts -------------------------------------------------------

    def create_or_get_account(
        self,
        *,
        email: str,
        first_name: str,
        last_name: str,
        provider: str,
        provider_account_id: str,
        thumbnail: str | None = None,
    ) -> BackendResult: ...

    def get_account_by_id(self, account_id: str) -> BackendResult: ...

    def get_account_by_email(self, email: str) -> BackendResult: ...

    def update_account(self, account_id: str, changes: dict[str, Any]) -> BackendResult: ...

    def deactivate_accounts_before(self, cutoff: datetime) -> BackendResult: ...

    # --- templates ------------------------------------------------------

    def create_template(
        self, *, owner_id: str, name: str, fields: list[dict[str, Any]]
    ) -> BackendResult: ...

    def get_template_by_id(self, template_id: str) -> BackendResult: ...

    def list_templates(
        self, *, owner_id: str | None = None, q: str | None = None
    ) -> BackendResult: ...

    def update_template(
        self,
        template_id: str,
        *,
        owner_id: str,
        name: str | None = None,
        fields: list[dict[str, Any]] | None = None,
    ) -> BackendResult: ...

    def delete_template(self, template_id: str, *, owner_id: str) -> BackendResult: ...

    # --- notes ----------------------------------------------------------

    def create_note(
        self,
        *,
        owner_id: str,
        title: str,
        template_id: str,
        sections: list[dict[str, Any]],
    ) -> BackendResult: ...

    def get_note_by_id(self, note_id: str) -> BackendResult: ...

    def list_notes(
        self,
        *,
        status: str | None = None,
        template_id: str | None = None,
        q: str | None = None,
        owner_id: str | None = None,
        page: int | None = None,
    ) -> BackendResult: ...

    def update_note(
        self,
        note_id: str,
        *,
        owner_id: str,
        title: str | None = None,
        sections: list[dict[str, Any]] | None = None,
    ) -> BackendResult: ...

    def publish_note(self, note_id: str, *, owner_id: str) -> BackendResult: ...

    def unpublish_note(self, note_id: str, *, owner_id: str) -> BackendResult: ...

    def delete_note(self, note_id: str, *, owner_id: str) -> BackendResult: ...
