"""SqlBackend — reference persistence collaborator on SQLite.

Each public method runs inside one ``engine.begin()`` transaction and
returns a :class:`BackendResult`. Business-rule checks (ownership,
structure lock, in-use guard) always run before the first write of an
operation, so an early failure never leaves partial state behind.

Structure lock rule: once any note references a template, fields may not
be added or removed. Edits to existing fields (label, order, required
flag) stay allowed. Removing a field that sections still point at
reports ``TEMPLATE_FIELD_IN_USE``; any other add/remove on a used
template reports ``TEMPLATE_STRUCTURE_LOCKED``.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Concatenate, ParamSpec

from sqlalchemy import delete, exists, func, insert, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from fieldnote.domain.errors import (
    FORBIDDEN,
    NOT_FOUND,
    TEMPLATE_FIELD_IN_USE,
    TEMPLATE_IN_USE,
    TEMPLATE_STRUCTURE_LOCKED,
)
from fieldnote.domain.ids import new_id
from fieldnote.domain.lifecycle import INITIAL_STATUS, apply_transition
from fieldnote.infrastructure.backend.result import BackendResult
from fieldnote.infrastructure.database.schema import (
    accounts,
    notes,
    sections,
    template_fields,
    templates,
)

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, Connection, Row
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

CONFLICT = "CONFLICT"
INVALID_REFERENCE = "INVALID_REFERENCE"
BACKEND_ERROR = "BACKEND_ERROR"

DEFAULT_PAGE_SIZE = 50

_ACCOUNT_MUTABLE = ("first_name", "last_name", "thumbnail")


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    """Drop ``None`` values, the way a JSON API omits unset fields."""
    return {k: v for k, v in data.items() if v is not None}


def _contains(column: ColumnElement[str], q: str) -> ColumnElement[bool]:
    """Case-insensitive substring match; ``%`` and ``_`` in *q* are literal."""
    escaped = q.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return column.ilike(f"%{escaped}%", escape="\\")


_P = ParamSpec("_P")


def _guarded(
    method: Callable[Concatenate[SqlBackend, _P], BackendResult],
) -> Callable[Concatenate[SqlBackend, _P], BackendResult]:
    """Turn database exceptions into tagged failures.

    Integrity violations (unique keys, foreign keys) become ``CONFLICT``;
    anything else SQLAlchemy raises becomes ``BACKEND_ERROR``.
    """
    op = method.__name__

    @functools.wraps(method)
    def wrapper(self: SqlBackend, *args: _P.args, **kwargs: _P.kwargs) -> BackendResult:
        try:
            return method(self, *args, **kwargs)
        except IntegrityError as exc:
            logger.warning("Integrity violation in %s: %s", op, exc.orig)
            return BackendResult.failure(op, CONFLICT, str(exc.orig))
        except SQLAlchemyError as exc:
            logger.error("Database failure in %s", op, exc_info=True)
            return BackendResult.failure(op, BACKEND_ERROR, str(exc))

    return wrapper


class SqlBackend:
    """Backend implementation over a SQLAlchemy engine."""

    def __init__(self, engine: Engine, *, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self._engine = engine
        self._page_size = page_size

    @property
    def engine(self) -> Engine:
        return self._engine

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Commit on normal exit, roll back on exception."""
        with self._engine.begin() as conn:
            yield conn

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    @_guarded
    def create_or_get_account(
        self,
        *,
        email: str,
        first_name: str,
        last_name: str,
        provider: str,
        provider_account_id: str,
        thumbnail: str | None = None,
    ) -> BackendResult:
        """Return the account for the provider key, creating it on first login.

        The insert is ``ON CONFLICT DO NOTHING`` on the provider key, so a
        concurrent first login that commits between lookup and insert is
        picked up as the existing account instead of failing.
        """
        op = "create_or_get_account"
        key = (provider, provider_account_id)
        now = _now_iso()
        with self.transaction() as conn:
            row = self._find_account_by_provider(conn, provider, provider_account_id)
            if row is None:
                taken = conn.execute(
                    select(accounts.c.provider, accounts.c.provider_account_id).where(
                        accounts.c.email == email
                    )
                ).first()
                if taken is not None and tuple(taken) != key:
                    return BackendResult.failure(
                        op, CONFLICT, f"Email already registered: {email}", email=email
                    )

                account_id = new_id()
                inserted = conn.execute(
                    sqlite_insert(accounts)
                    .values(
                        id=account_id,
                        email=email,
                        first_name=first_name,
                        last_name=last_name,
                        provider=provider,
                        provider_account_id=provider_account_id,
                        thumbnail=thumbnail,
                        is_active=1,
                        last_login_at=now,
                        created_at=now,
                        updated_at=now,
                    )
                    .on_conflict_do_nothing(
                        index_elements=[accounts.c.provider, accounts.c.provider_account_id]
                    )
                )
                if inserted.rowcount:
                    logger.info("Created account %s for %s/%s", account_id, *key)
                    return BackendResult.success(op, self._account_payload(conn, account_id))

                row = self._find_account_by_provider(conn, provider, provider_account_id)
                if row is None:
                    msg = f"Account vanished during login: {provider}/{provider_account_id}"
                    return BackendResult.failure(op, BACKEND_ERROR, msg)
                logger.info("Lost first-login race for %s/%s; using %s", *key, row.id)

            # Login bookkeeping only; profile fields are left alone.
            conn.execute(
                update(accounts)
                .where(accounts.c.id == row.id)
                .values(last_login_at=now, is_active=1)
            )
            logger.debug("Existing account %s for %s/%s", row.id, *key)
            return BackendResult.success(op, self._account_payload(conn, row.id))

    def _find_account_by_provider(
        self, conn: Connection, provider: str, provider_account_id: str
    ) -> Row[Any] | None:
        return conn.execute(
            select(accounts.c.id).where(
                accounts.c.provider == provider,
                accounts.c.provider_account_id == provider_account_id,
            )
        ).first()

    @_guarded
    def get_account_by_id(self, account_id: str) -> BackendResult:
        op = "get_account_by_id"
        with self.transaction() as conn:
            payload = self._account_payload(conn, account_id)
        if payload is None:
            return BackendResult.failure(op, NOT_FOUND, f"Account not found: {account_id}")
        return BackendResult.success(op, payload)

    @_guarded
    def get_account_by_email(self, email: str) -> BackendResult:
        op = "get_account_by_email"
        with self.transaction() as conn:
            row = conn.execute(select(accounts.c.id).where(accounts.c.email == email)).first()
            payload = self._account_payload(conn, row.id) if row is not None else None
        if payload is None:
            return BackendResult.failure(op, NOT_FOUND, f"Account not found: {email}")
        return BackendResult.success(op, payload)

    @_guarded
    def update_account(self, account_id: str, changes: dict[str, Any]) -> BackendResult:
        op = "update_account"
        values = {k: v for k, v in changes.items() if k in _ACCOUNT_MUTABLE}
        with self.transaction() as conn:
            exists_row = conn.execute(
                select(accounts.c.id).where(accounts.c.id == account_id)
            ).first()
            if exists_row is None:
                return BackendResult.failure(op, NOT_FOUND, f"Account not found: {account_id}")
            if values:
                values["updated_at"] = _now_iso()
                conn.execute(update(accounts).where(accounts.c.id == account_id).values(**values))
            return BackendResult.success(op, self._account_payload(conn, account_id))

    @_guarded
    def deactivate_accounts_before(self, cutoff: datetime) -> BackendResult:
        op = "deactivate_accounts_before"
        with self.transaction() as conn:
            result = conn.execute(
                update(accounts)
                .where(
                    accounts.c.is_active == 1,
                    accounts.c.last_login_at.is_not(None),
                    accounts.c.last_login_at < cutoff.astimezone(UTC).isoformat(),
                )
                .values(is_active=0, updated_at=_now_iso())
            )
            count = result.rowcount or 0
        logger.info("Deactivated %d account(s) inactive since %s", count, cutoff.isoformat())
        return BackendResult.success(op, {"count": count})

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    @_guarded
    def create_template(
        self, *, owner_id: str, name: str, fields: list[dict[str, Any]]
    ) -> BackendResult:
        op = "create_template"
        now = _now_iso()
        with self.transaction() as conn:
            if self._owner_row(conn, owner_id) is None:
                return BackendResult.failure(op, NOT_FOUND, f"Account not found: {owner_id}")
            template_id = new_id()
            conn.execute(
                insert(templates).values(
                    id=template_id, name=name, owner_id=owner_id, created_at=now, updated_at=now
                )
            )
            for f in fields:
                self._insert_field(conn, template_id, f)
            logger.info("Created template %s with %d field(s)", template_id, len(fields))
            return BackendResult.success(op, self._template_payload(conn, template_id))

    @_guarded
    def get_template_by_id(self, template_id: str) -> BackendResult:
        op = "get_template_by_id"
        with self.transaction() as conn:
            payload = self._template_payload(conn, template_id)
        if payload is None:
            return BackendResult.failure(op, NOT_FOUND, f"Template not found: {template_id}")
        return BackendResult.success(op, payload)

    @_guarded
    def list_templates(self, *, owner_id: str | None = None, q: str | None = None) -> BackendResult:
        stmt = select(templates.c.id).order_by(templates.c.updated_at.desc(), templates.c.id)
        if owner_id is not None:
            stmt = stmt.where(templates.c.owner_id == owner_id)
        if q:
            stmt = stmt.where(_contains(templates.c.name, q))
        with self.transaction() as conn:
            ids = [r.id for r in conn.execute(stmt)]
            items = [self._template_payload(conn, tid) for tid in ids]
        return BackendResult.success("list_templates", {"items": items})

    @_guarded
    def update_template(
        self,
        template_id: str,
        *,
        owner_id: str,
        name: str | None = None,
        fields: list[dict[str, Any]] | None = None,
    ) -> BackendResult:
        op = "update_template"
        with self.transaction() as conn:
            row = conn.execute(select(templates).where(templates.c.id == template_id)).first()
            if row is None:
                return BackendResult.failure(op, NOT_FOUND, f"Template not found: {template_id}")
            if row.owner_id != owner_id:
                return BackendResult.failure(
                    op, FORBIDDEN, "Forbidden: Can only update your own template"
                )

            if fields is not None:
                failure = self._check_field_changes(conn, template_id, fields)
                if failure is not None:
                    return failure
                self._apply_field_changes(conn, template_id, fields)

            values: dict[str, Any] = {"updated_at": _now_iso()}
            if name is not None:
                values["name"] = name
            conn.execute(update(templates).where(templates.c.id == template_id).values(**values))
            return BackendResult.success(op, self._template_payload(conn, template_id))

    @_guarded
    def delete_template(self, template_id: str, *, owner_id: str) -> BackendResult:
        op = "delete_template"
        with self.transaction() as conn:
            row = conn.execute(select(templates).where(templates.c.id == template_id)).first()
            if row is None:
                return BackendResult.failure(op, NOT_FOUND, f"Template not found: {template_id}")
            if row.owner_id != owner_id:
                return BackendResult.failure(
                    op, FORBIDDEN, "Forbidden: Can only delete your own template"
                )
            if self._template_is_used(conn, template_id):
                return BackendResult.failure(
                    op, TEMPLATE_IN_USE, "Template is used by notes and cannot be deleted"
                )
            conn.execute(
                delete(template_fields).where(template_fields.c.template_id == template_id)
            )
            conn.execute(delete(templates).where(templates.c.id == template_id))
        logger.info("Deleted template %s", template_id)
        return BackendResult.success(op, {"success": True})

    # ------------------------------------------------------------------
    # Notes
    # ------------------------------------------------------------------

    @_guarded
    def create_note(
        self,
        *,
        owner_id: str,
        title: str,
        template_id: str,
        sections: list[dict[str, Any]],
    ) -> BackendResult:
        op = "create_note"
        now = _now_iso()
        with self.transaction() as conn:
            tpl = conn.execute(select(templates).where(templates.c.id == template_id)).first()
            if tpl is None:
                return BackendResult.failure(op, NOT_FOUND, f"Template not found: {template_id}")
            owner = self._owner_row(conn, owner_id)
            if owner is None:
                return BackendResult.failure(op, NOT_FOUND, f"Account not found: {owner_id}")

            field_rows = self._field_rows(conn, template_id)
            for s in sections:
                if s["field_id"] not in field_rows:
                    return BackendResult.failure(
                        op,
                        INVALID_REFERENCE,
                        f"Field {s['field_id']} does not belong to template {template_id}",
                    )

            note_id = new_id()
            conn.execute(
                insert(notes).values(
                    id=note_id,
                    title=title,
                    template_id=template_id,
                    owner_id=owner_id,
                    status=str(INITIAL_STATUS),
                    template_name=tpl.name,
                    owner_first_name=owner.first_name,
                    owner_last_name=owner.last_name,
                    owner_thumbnail=owner.thumbnail,
                    created_at=now,
                    updated_at=now,
                )
            )
            for position, s in enumerate(sections):
                self._insert_section(conn, note_id, position, s, field_rows[s["field_id"]])
            logger.info("Created note %s on template %s", note_id, template_id)
            return BackendResult.success(op, self._note_payload(conn, note_id))

    @_guarded
    def get_note_by_id(self, note_id: str) -> BackendResult:
        op = "get_note_by_id"
        with self.transaction() as conn:
            payload = self._note_payload(conn, note_id)
        if payload is None:
            return BackendResult.failure(op, NOT_FOUND, f"Note not found: {note_id}")
        return BackendResult.success(op, payload)

    @_guarded
    def list_notes(
        self,
        *,
        status: str | None = None,
        template_id: str | None = None,
        q: str | None = None,
        owner_id: str | None = None,
        page: int | None = None,
    ) -> BackendResult:
        stmt = select(notes.c.id).order_by(notes.c.updated_at.desc(), notes.c.id)
        if status is not None:
            stmt = stmt.where(notes.c.status == status)
        if template_id is not None:
            stmt = stmt.where(notes.c.template_id == template_id)
        if owner_id is not None:
            stmt = stmt.where(notes.c.owner_id == owner_id)
        if q:
            stmt = stmt.where(_contains(notes.c.title, q))
        if page is not None:
            stmt = stmt.limit(self._page_size).offset((page - 1) * self._page_size)
        with self.transaction() as conn:
            ids = [r.id for r in conn.execute(stmt)]
            items = [self._note_payload(conn, nid) for nid in ids]
        return BackendResult.success("list_notes", {"items": items})

    @_guarded
    def update_note(
        self,
        note_id: str,
        *,
        owner_id: str,
        title: str | None = None,
        sections: list[dict[str, Any]] | None = None,
    ) -> BackendResult:
        op = "update_note"
        with self.transaction() as conn:
            row = conn.execute(select(notes).where(notes.c.id == note_id)).first()
            if row is None:
                return BackendResult.failure(op, NOT_FOUND, f"Note not found: {note_id}")
            if row.owner_id != owner_id:
                msg = "Forbidden: Can only update your own note"
                return BackendResult.failure(op, FORBIDDEN, msg)

            field_rows = self._field_rows(conn, row.template_id)
            existing = {
                r.id: r
                for r in conn.execute(select(sections).where(sections.c.note_id == note_id))
            }
            for s in sections or []:
                if s["field_id"] not in field_rows:
                    return BackendResult.failure(
                        op,
                        INVALID_REFERENCE,
                        f"Field {s['field_id']} does not belong to template {row.template_id}",
                    )
                if s.get("id") and s["id"] not in existing:
                    return BackendResult.failure(
                        op,
                        INVALID_REFERENCE,
                        f"Section {s['id']} does not belong to note {note_id}",
                    )

            next_position = max((r.position for r in existing.values()), default=-1) + 1
            for s in sections or []:
                field = field_rows[s["field_id"]]
                if s.get("id"):
                    conn.execute(
                        update(sections)
                        .where(sections.c.id == s["id"])
                        .values(
                            field_id=field.id,
                            content=s["content"],
                            field_label=field.label,
                            is_required=field.is_required,
                        )
                    )
                else:
                    self._insert_section(conn, note_id, next_position, s, field)
                    next_position += 1

            tpl = conn.execute(
                select(templates.c.name).where(templates.c.id == row.template_id)
            ).one()
            owner = self._owner_row(conn, row.owner_id)
            values: dict[str, Any] = {
                "updated_at": _now_iso(),
                "template_name": tpl.name,
            }
            if owner is not None:
                values.update(
                    owner_first_name=owner.first_name,
                    owner_last_name=owner.last_name,
                    owner_thumbnail=owner.thumbnail,
                )
            if title is not None:
                values["title"] = title
            conn.execute(update(notes).where(notes.c.id == note_id).values(**values))
            return BackendResult.success(op, self._note_payload(conn, note_id))

    @_guarded
    def publish_note(self, note_id: str, *, owner_id: str) -> BackendResult:
        return self._transition(note_id, owner_id, "publish")

    @_guarded
    def unpublish_note(self, note_id: str, *, owner_id: str) -> BackendResult:
        return self._transition(note_id, owner_id, "unpublish")

    @_guarded
    def delete_note(self, note_id: str, *, owner_id: str) -> BackendResult:
        op = "delete_note"
        with self.transaction() as conn:
            row = conn.execute(select(notes.c.owner_id).where(notes.c.id == note_id)).first()
            if row is None:
                return BackendResult.failure(op, NOT_FOUND, f"Note not found: {note_id}")
            if row.owner_id != owner_id:
                msg = "Forbidden: Can only delete your own note"
                return BackendResult.failure(op, FORBIDDEN, msg)
            conn.execute(delete(sections).where(sections.c.note_id == note_id))
            conn.execute(delete(notes).where(notes.c.id == note_id))
        logger.info("Deleted note %s", note_id)
        return BackendResult.success(op, {"success": True})

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _transition(self, note_id: str, owner_id: str, transition: str) -> BackendResult:
        op = f"{transition}_note"
        with self.transaction() as conn:
            row = conn.execute(
                select(notes.c.owner_id, notes.c.status).where(notes.c.id == note_id)
            ).first()
            if row is None:
                return BackendResult.failure(op, NOT_FOUND, f"Note not found: {note_id}")
            if row.owner_id != owner_id:
                msg = f"Forbidden: Can only {transition} your own note"
                return BackendResult.failure(op, FORBIDDEN, msg)
            target = apply_transition(row.status, transition)
            if target != row.status:
                conn.execute(
                    update(notes)
                    .where(notes.c.id == note_id)
                    .values(status=str(target), updated_at=_now_iso())
                )
                logger.info("Note %s: %s -> %s", note_id, row.status, target)
            return BackendResult.success(op, self._note_payload(conn, note_id))

    def _check_field_changes(
        self, conn: Connection, template_id: str, fields: list[dict[str, Any]]
    ) -> BackendResult | None:
        """Validate a replacement field list; return a failure or None."""
        op = "update_template"
        current = self._field_rows(conn, template_id)
        incoming_ids = [f["id"] for f in fields if f.get("id")]

        if len(incoming_ids) != len(set(incoming_ids)):
            return BackendResult.failure(op, INVALID_REFERENCE, "Duplicate field ids in update")
        unknown = [fid for fid in incoming_ids if fid not in current]
        if unknown:
            return BackendResult.failure(
                op,
                INVALID_REFERENCE,
                f"Field {unknown[0]} does not belong to template {template_id}",
            )

        removed = set(current) - set(incoming_ids)
        added = len(fields) - len(incoming_ids)
        if not removed and not added:
            return None

        if removed:
            referenced = sorted(
                r.field_id
                for r in conn.execute(
                    select(sections.c.field_id).distinct().where(sections.c.field_id.in_(removed))
                )
            )
            if referenced:
                return BackendResult.failure(
                    op,
                    TEMPLATE_FIELD_IN_USE,
                    "Template fields are referenced by note sections",
                    field_ids=referenced,
                )
        if self._template_is_used(conn, template_id):
            return BackendResult.failure(
                op,
                TEMPLATE_STRUCTURE_LOCKED,
                "Template is used by notes; fields cannot be added or removed",
                added=added,
                removed=sorted(removed),
            )
        return None

    def _apply_field_changes(
        self, conn: Connection, template_id: str, fields: list[dict[str, Any]]
    ) -> None:
        current = self._field_rows(conn, template_id)
        keep = {f["id"] for f in fields if f.get("id")}
        removed = set(current) - keep
        if removed:
            conn.execute(delete(template_fields).where(template_fields.c.id.in_(removed)))
        for f in fields:
            if f.get("id"):
                conn.execute(
                    update(template_fields)
                    .where(template_fields.c.id == f["id"])
                    .values(
                        label=f["label"],
                        field_order=f["order"],
                        is_required=int(bool(f.get("is_required", False))),
                    )
                )
            else:
                self._insert_field(conn, template_id, f)

    def _insert_field(self, conn: Connection, template_id: str, f: dict[str, Any]) -> None:
        conn.execute(
            insert(template_fields).values(
                id=new_id(),
                template_id=template_id,
                label=f["label"],
                field_order=f["order"],
                is_required=int(bool(f.get("is_required", False))),
            )
        )

    def _insert_section(
        self, conn: Connection, note_id: str, position: int, s: dict[str, Any], field: Row[Any]
    ) -> None:
        conn.execute(
            insert(sections).values(
                id=new_id(),
                note_id=note_id,
                field_id=field.id,
                position=position,
                content=s.get("content", ""),
                field_label=field.label,
                is_required=field.is_required,
            )
        )

    def _field_rows(self, conn: Connection, template_id: str) -> dict[str, Row[Any]]:
        rows = conn.execute(
            select(template_fields)
            .where(template_fields.c.template_id == template_id)
            .order_by(template_fields.c.field_order)
        )
        return {r.id: r for r in rows}

    def _owner_row(self, conn: Connection, account_id: str) -> Row[Any] | None:
        return conn.execute(
            select(
                accounts.c.id, accounts.c.first_name, accounts.c.last_name, accounts.c.thumbnail
            ).where(accounts.c.id == account_id)
        ).first()

    def _template_is_used(self, conn: Connection, template_id: str) -> bool:
        return bool(
            conn.execute(select(exists().where(notes.c.template_id == template_id))).scalar()
        )

    def _account_payload(self, conn: Connection, account_id: str) -> dict[str, Any] | None:
        row = conn.execute(select(accounts).where(accounts.c.id == account_id)).first()
        if row is None:
            return None
        return _compact(
            {
                "id": row.id,
                "email": row.email,
                "first_name": row.first_name,
                "last_name": row.last_name,
                "full_name": f"{row.first_name} {row.last_name}",
                "thumbnail": row.thumbnail,
                "last_login_at": row.last_login_at,
                "is_active": bool(row.is_active),
                "created_at": row.created_at,
                "updated_at": row.updated_at,
            }
        )

    def _template_payload(self, conn: Connection, template_id: str) -> dict[str, Any] | None:
        row = conn.execute(select(templates).where(templates.c.id == template_id)).first()
        if row is None:
            return None
        owner = self._owner_row(conn, row.owner_id)
        fields = [
            {
                "id": f.id,
                "label": f.label,
                "order": f.field_order,
                "is_required": bool(f.is_required),
            }
            for f in self._field_rows(conn, template_id).values()
        ]
        return _compact(
            {
                "id": row.id,
                "name": row.name,
                "owner_id": row.owner_id,
                "owner": _compact(owner._asdict()) if owner is not None else None,
                "fields": fields,
                "updated_at": row.updated_at,
                "is_used": self._template_is_used(conn, template_id),
            }
        )

    def _note_payload(self, conn: Connection, note_id: str) -> dict[str, Any] | None:
        row = conn.execute(select(notes).where(notes.c.id == note_id)).first()
        if row is None:
            return None
        section_rows = conn.execute(
            select(sections).where(sections.c.note_id == note_id).order_by(sections.c.position)
        )
        return {
            "id": row.id,
            "title": row.title,
            "template_id": row.template_id,
            "template_name": row.template_name,
            "owner_id": row.owner_id,
            "owner": _compact(
                {
                    "id": row.owner_id,
                    "first_name": row.owner_first_name,
                    "last_name": row.owner_last_name,
                    "thumbnail": row.owner_thumbnail,
                }
            ),
            "status": row.status,
            "sections": [
                {
                    "id": s.id,
                    "field_id": s.field_id,
                    "field_label": s.field_label,
                    "content": s.content,
                    "is_required": bool(s.is_required),
                }
                for s in section_rows
            ],
            "created_at": row.created_at,
            "updated_at": row.updated_at,
        }

    def count_rows(self, table_name: str) -> int:
        """Row count for *table_name* (diagnostics and tests)."""
        table = {
            t.name: t for t in (accounts, templates, template_fields, notes, sections)
        }[table_name]
        with self.transaction() as conn:
            return int(conn.execute(select(func.count()).select_from(table)).scalar_one())
