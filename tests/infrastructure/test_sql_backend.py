"""Tests for SqlBackend — the SQLite persistence collaborator."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from sqlalchemy import update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError

from fieldnote.infrastructure.backend import SqlBackend
from fieldnote.infrastructure.database import accounts
from tests.conftest import MISSING_ID


def _account(backend: SqlBackend, handle: str, **kwargs: Any) -> dict[str, Any]:
    result = backend.create_or_get_account(
        email=kwargs.pop("email", f"{handle}@example.com"),
        first_name=kwargs.pop("first_name", handle.title()),
        last_name=kwargs.pop("last_name", "Example"),
        provider="github",
        provider_account_id=kwargs.pop("provider_account_id", f"gh-{handle}"),
        **kwargs,
    )
    assert result.ok, result.error
    return result.data


def _template(
    backend: SqlBackend, owner_id: str, labels: tuple[str, ...] = ("Summary", "Details"), name: str = "Daily log"
) -> dict[str, Any]:
    fields = [{"label": label, "order": i, "is_required": i == 1} for i, label in enumerate(labels, 1)]
    result = backend.create_template(owner_id=owner_id, name=name, fields=fields)
    assert result.ok, result.error
    return result.data


def _note(
    backend: SqlBackend, owner_id: str, template: dict[str, Any], title: str = "Monday"
) -> dict[str, Any]:
    sections = [{"field_id": f["id"], "content": f"{f['label']} text"} for f in template["fields"]]
    result = backend.create_note(
        owner_id=owner_id, title=title, template_id=template["id"], sections=sections
    )
    assert result.ok, result.error
    return result.data


def _fields(template: dict[str, Any]) -> list[dict[str, Any]]:
    return [dict(f) for f in template["fields"]]


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


class TestCreateOrGetAccount:
    def test_creates(self, backend: SqlBackend) -> None:
        data = _account(backend, "ada", first_name="Ada", last_name="Lovelace")
        assert data["full_name"] == "Ada Lovelace"
        assert data["is_active"] is True
        assert data["last_login_at"]
        assert "thumbnail" not in data

    def test_repeat_login_returns_existing(self, backend: SqlBackend) -> None:
        first = _account(backend, "ada", first_name="Ada")
        again = _account(backend, "ada", first_name="Changed", email="other@example.com")
        assert again["id"] == first["id"]
        assert again["first_name"] == "Ada"
        assert again["email"] == "ada@example.com"
        assert again["last_login_at"] >= first["last_login_at"]
        assert backend.count_rows("accounts") == 1

    def test_email_taken_by_other_identity(self, backend: SqlBackend) -> None:
        _account(backend, "ada")
        result = backend.create_or_get_account(
            email="ada@example.com",
            first_name="Ada",
            last_name="Other",
            provider="google",
            provider_account_id="g-1",
        )
        assert not result.ok
        assert result.error is not None and result.error.code == "CONFLICT"

    def test_repeat_login_reactivates(self, backend: SqlBackend, db_engine: Engine) -> None:
        data = _account(backend, "ada")
        with db_engine.begin() as conn:
            conn.execute(update(accounts).where(accounts.c.id == data["id"]).values(is_active=0))
        assert _account(backend, "ada")["is_active"] is True

    def test_concurrent_first_login_returns_winner(
        self, backend: SqlBackend, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        winner = _account(backend, "ada")
        lookup = SqlBackend._find_account_by_provider
        calls: list[str] = []

        def stale_then_real(self: SqlBackend, conn: Any, provider: str, key: str) -> Any:
            # The first lookup runs before the other login committed.
            calls.append(key)
            return None if len(calls) == 1 else lookup(self, conn, provider, key)

        monkeypatch.setattr(SqlBackend, "_find_account_by_provider", stale_then_real)
        result = backend.create_or_get_account(
            email="ada.work@example.com",
            first_name="Ada",
            last_name="Example",
            provider="github",
            provider_account_id="gh-ada",
        )
        assert result.ok, result.error
        assert result.data["id"] == winner["id"]
        assert calls == ["gh-ada", "gh-ada"]


class TestAccountLookups:
    def test_by_id_and_email(self, backend: SqlBackend) -> None:
        data = _account(backend, "ada")
        assert backend.get_account_by_id(data["id"]).data["id"] == data["id"]
        assert backend.get_account_by_email("ada@example.com").data["id"] == data["id"]

    def test_not_found(self, backend: SqlBackend) -> None:
        assert backend.get_account_by_id(MISSING_ID).not_found
        assert backend.get_account_by_email("nobody@example.com").not_found


class TestUpdateAccount:
    def test_updates_profile_fields_only(self, backend: SqlBackend) -> None:
        data = _account(backend, "ada")
        result = backend.update_account(
            data["id"], {"first_name": "Augusta", "email": "hijack@example.com"}
        )
        assert result.ok
        assert result.data["first_name"] == "Augusta"
        assert result.data["full_name"] == "Augusta Example"
        assert result.data["email"] == "ada@example.com"

    def test_clear_thumbnail(self, backend: SqlBackend) -> None:
        data = _account(backend, "ada", thumbnail="https://img/a.png")
        assert data["thumbnail"] == "https://img/a.png"
        result = backend.update_account(data["id"], {"thumbnail": None})
        assert "thumbnail" not in result.data

    def test_missing(self, backend: SqlBackend) -> None:
        assert backend.update_account(MISSING_ID, {"first_name": "X"}).not_found


class TestDeactivateAccounts:
    def _set_login(self, engine: Engine, account_id: str, when: datetime | None) -> None:
        value = when.isoformat() if when is not None else None
        with engine.begin() as conn:
            conn.execute(
                update(accounts).where(accounts.c.id == account_id).values(last_login_at=value)
            )

    def test_deactivates_stale_accounts(self, backend: SqlBackend, db_engine: Engine) -> None:
        now = datetime.now(UTC)
        stale = _account(backend, "stale")
        fresh = _account(backend, "fresh")
        never = _account(backend, "never")
        self._set_login(db_engine, stale["id"], now - timedelta(days=120))
        self._set_login(db_engine, fresh["id"], now - timedelta(days=10))
        self._set_login(db_engine, never["id"], None)

        result = backend.deactivate_accounts_before(now - timedelta(days=90))
        assert result.data == {"count": 1}
        assert backend.get_account_by_id(stale["id"]).data["is_active"] is False
        assert backend.get_account_by_id(fresh["id"]).data["is_active"] is True
        assert backend.get_account_by_id(never["id"]).data["is_active"] is True

    def test_already_inactive_not_counted(self, backend: SqlBackend, db_engine: Engine) -> None:
        now = datetime.now(UTC)
        stale = _account(backend, "stale")
        self._set_login(db_engine, stale["id"], now - timedelta(days=120))
        backend.deactivate_accounts_before(now - timedelta(days=90))
        assert backend.deactivate_accounts_before(now - timedelta(days=90)).data == {"count": 0}


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


class TestCreateTemplate:
    def test_creates_with_ordered_fields(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        data = _template(backend, owner["id"], ("A", "B", "C"))
        assert [f["label"] for f in data["fields"]] == ["A", "B", "C"]
        assert [f["order"] for f in data["fields"]] == [1, 2, 3]
        assert data["fields"][0]["is_required"] is True
        assert data["owner"]["first_name"] == "Ada"
        assert data["is_used"] is False

    def test_unknown_owner(self, backend: SqlBackend) -> None:
        result = backend.create_template(
            owner_id=MISSING_ID, name="T", fields=[{"label": "A", "order": 1}]
        )
        assert result.not_found


class TestListTemplates:
    def test_owner_scope_and_search(self, backend: SqlBackend) -> None:
        ada = _account(backend, "ada")
        bob = _account(backend, "bob")
        _template(backend, ada["id"], name="Daily log")
        _template(backend, ada["id"], name="Reading notes")
        _template(backend, bob["id"], name="DAILY standup")

        assert len(backend.list_templates().data["items"]) == 3
        mine = backend.list_templates(owner_id=ada["id"]).data["items"]
        assert {t["name"] for t in mine} == {"Daily log", "Reading notes"}
        daily = backend.list_templates(q="daily").data["items"]
        assert {t["name"] for t in daily} == {"Daily log", "DAILY standup"}
        both = backend.list_templates(owner_id=bob["id"], q="daily").data["items"]
        assert [t["name"] for t in both] == ["DAILY standup"]

    def test_search_wildcards_are_literal(self, backend: SqlBackend) -> None:
        ada = _account(backend, "ada")
        for name in ("Daily log", "100% focus", "snake_case notes", "C:\\drafts"):
            _template(backend, ada["id"], name=name)

        def names(q: str) -> set[str]:
            return {t["name"] for t in backend.list_templates(q=q).data["items"]}

        assert names("%") == {"100% focus"}
        assert names("_") == {"snake_case notes"}
        assert names("\\") == {"C:\\drafts"}


class TestUpdateTemplate:
    def test_rename_used_template(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        tpl = _template(backend, owner["id"])
        _note(backend, owner["id"], tpl)
        result = backend.update_template(tpl["id"], owner_id=owner["id"], name="Renamed")
        assert result.ok
        assert result.data["name"] == "Renamed"
        assert result.data["is_used"] is True

    def test_add_and_remove_on_unused(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        tpl = _template(backend, owner["id"])
        fields = _fields(tpl)[:1] + [{"label": "New", "order": 5}]
        result = backend.update_template(tpl["id"], owner_id=owner["id"], fields=fields)
        assert result.ok
        assert [f["label"] for f in result.data["fields"]] == ["Summary", "New"]
        assert backend.count_rows("template_fields") == 2

    def test_add_field_on_used_is_locked(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        tpl = _template(backend, owner["id"])
        _note(backend, owner["id"], tpl)
        fields = _fields(tpl) + [{"label": "New", "order": 9}]
        result = backend.update_template(tpl["id"], owner_id=owner["id"], fields=fields)
        assert result.error is not None and result.error.code == "TEMPLATE_STRUCTURE_LOCKED"
        assert backend.count_rows("template_fields") == 2

    def test_remove_referenced_field(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        tpl = _template(backend, owner["id"])
        _note(backend, owner["id"], tpl)
        result = backend.update_template(
            tpl["id"], owner_id=owner["id"], fields=_fields(tpl)[:1]
        )
        assert result.error is not None and result.error.code == "TEMPLATE_FIELD_IN_USE"
        assert result.error.detail["field_ids"] == [tpl["fields"][1]["id"]]

    def test_remove_unreferenced_field_on_used(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        tpl = _template(backend, owner["id"])
        backend.create_note(
            owner_id=owner["id"],
            title="Sparse",
            template_id=tpl["id"],
            sections=[{"field_id": tpl["fields"][0]["id"], "content": ""}],
        )
        result = backend.update_template(
            tpl["id"], owner_id=owner["id"], fields=_fields(tpl)[:1]
        )
        assert result.error is not None and result.error.code == "TEMPLATE_STRUCTURE_LOCKED"

    def test_relabel_and_reorder_on_used(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        tpl = _template(backend, owner["id"])
        _note(backend, owner["id"], tpl)
        first, second = _fields(tpl)
        first.update(label="Headline", order=2, is_required=False)
        second.update(order=1)
        result = backend.update_template(tpl["id"], owner_id=owner["id"], fields=[first, second])
        assert result.ok
        assert [f["label"] for f in result.data["fields"]] == ["Details", "Headline"]

    def test_unknown_field_id(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        tpl = _template(backend, owner["id"])
        fields = _fields(tpl)
        fields[0]["id"] = MISSING_ID
        result = backend.update_template(tpl["id"], owner_id=owner["id"], fields=fields)
        assert result.error is not None and result.error.code == "INVALID_REFERENCE"

    def test_other_owner_forbidden(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        other = _account(backend, "bob")
        tpl = _template(backend, owner["id"])
        result = backend.update_template(tpl["id"], owner_id=other["id"], name="Mine now")
        assert result.error is not None and result.error.code == "FORBIDDEN"
        assert backend.get_template_by_id(tpl["id"]).data["name"] == "Daily log"

    def test_missing(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        assert backend.update_template(MISSING_ID, owner_id=owner["id"], name="x").not_found


class TestDeleteTemplate:
    def test_delete_unused(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        tpl = _template(backend, owner["id"])
        assert backend.delete_template(tpl["id"], owner_id=owner["id"]).data == {"success": True}
        assert backend.get_template_by_id(tpl["id"]).not_found
        assert backend.count_rows("template_fields") == 0

    def test_delete_used(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        tpl = _template(backend, owner["id"])
        _note(backend, owner["id"], tpl)
        result = backend.delete_template(tpl["id"], owner_id=owner["id"])
        assert result.error is not None and result.error.code == "TEMPLATE_IN_USE"

    def test_delete_forbidden(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        other = _account(backend, "bob")
        tpl = _template(backend, owner["id"])
        result = backend.delete_template(tpl["id"], owner_id=other["id"])
        assert result.error is not None and result.error.code == "FORBIDDEN"


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------


class TestCreateNote:
    def test_draft_with_snapshots(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada", first_name="Ada", last_name="Lovelace")
        tpl = _template(backend, owner["id"])
        note = _note(backend, owner["id"], tpl)
        assert note["status"] == "Draft"
        assert note["template_name"] == "Daily log"
        assert note["owner"] == {"id": owner["id"], "first_name": "Ada", "last_name": "Lovelace"}
        assert [s["field_label"] for s in note["sections"]] == ["Summary", "Details"]
        assert [s["is_required"] for s in note["sections"]] == [True, False]

    def test_snapshots_not_recomputed_on_read(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        tpl = _template(backend, owner["id"])
        note = _note(backend, owner["id"], tpl)
        fields = _fields(tpl)
        fields[0]["label"] = "Headline"
        backend.update_template(tpl["id"], owner_id=owner["id"], name="Journal", fields=fields)

        stored = backend.get_note_by_id(note["id"]).data
        assert stored["template_name"] == "Daily log"
        assert stored["sections"][0]["field_label"] == "Summary"

    def test_field_from_other_template(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        tpl = _template(backend, owner["id"])
        other = _template(backend, owner["id"], name="Other")
        result = backend.create_note(
            owner_id=owner["id"],
            title="Bad",
            template_id=tpl["id"],
            sections=[{"field_id": other["fields"][0]["id"], "content": ""}],
        )
        assert result.error is not None and result.error.code == "INVALID_REFERENCE"
        assert backend.count_rows("notes") == 0

    def test_missing_template(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        result = backend.create_note(
            owner_id=owner["id"], title="x", template_id=MISSING_ID, sections=[]
        )
        assert result.not_found


class TestUpdateNote:
    def test_merge_by_section_id(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        tpl = _template(backend, owner["id"])
        note = _note(backend, owner["id"], tpl)
        first = note["sections"][0]
        result = backend.update_note(
            note["id"],
            owner_id=owner["id"],
            title="Tuesday",
            sections=[
                {"id": first["id"], "field_id": first["field_id"], "content": "edited"},
                {"field_id": tpl["fields"][1]["id"], "content": "appended"},
            ],
        )
        assert result.ok
        contents = [s["content"] for s in result.data["sections"]]
        assert contents == ["edited", "Details text", "appended"]
        assert result.data["title"] == "Tuesday"

    def test_refreshes_snapshots(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        tpl = _template(backend, owner["id"])
        note = _note(backend, owner["id"], tpl)
        fields = _fields(tpl)
        fields[0]["label"] = "Headline"
        backend.update_template(tpl["id"], owner_id=owner["id"], name="Journal", fields=fields)

        first = note["sections"][0]
        result = backend.update_note(
            note["id"],
            owner_id=owner["id"],
            sections=[{"id": first["id"], "field_id": first["field_id"], "content": "x"}],
        )
        assert result.data["template_name"] == "Journal"
        assert result.data["sections"][0]["field_label"] == "Headline"

    def test_foreign_section_id(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        tpl = _template(backend, owner["id"])
        note = _note(backend, owner["id"], tpl)
        other = _note(backend, owner["id"], tpl, title="Other")
        stray = other["sections"][0]
        result = backend.update_note(
            note["id"],
            owner_id=owner["id"],
            sections=[{"id": stray["id"], "field_id": stray["field_id"], "content": "x"}],
        )
        assert result.error is not None and result.error.code == "INVALID_REFERENCE"

    def test_other_owner_forbidden(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        other = _account(backend, "bob")
        tpl = _template(backend, owner["id"])
        note = _note(backend, owner["id"], tpl)
        result = backend.update_note(note["id"], owner_id=other["id"], title="Hijacked")
        assert result.error is not None and result.error.code == "FORBIDDEN"
        assert backend.get_note_by_id(note["id"]).data["title"] == "Monday"


class TestTransitions:
    def test_publish_unpublish_round_trip(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        tpl = _template(backend, owner["id"])
        note = _note(backend, owner["id"], tpl)

        published = backend.publish_note(note["id"], owner_id=owner["id"]).data
        assert published["status"] == "Publish"
        drafted = backend.unpublish_note(note["id"], owner_id=owner["id"]).data
        assert drafted["status"] == "Draft"
        assert drafted["sections"] == note["sections"]

    def test_repeat_publish_is_noop(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        tpl = _template(backend, owner["id"])
        note = _note(backend, owner["id"], tpl)
        first = backend.publish_note(note["id"], owner_id=owner["id"]).data
        again = backend.publish_note(note["id"], owner_id=owner["id"])
        assert again.ok
        assert again.data["updated_at"] == first["updated_at"]

    def test_forbidden(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        other = _account(backend, "bob")
        tpl = _template(backend, owner["id"])
        note = _note(backend, owner["id"], tpl)
        result = backend.publish_note(note["id"], owner_id=other["id"])
        assert result.error is not None and result.error.code == "FORBIDDEN"
        assert result.op == "publish_note"

    def test_missing(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        assert backend.unpublish_note(MISSING_ID, owner_id=owner["id"]).not_found

    @pytest.mark.parametrize("op", ["publish_note", "unpublish_note"])
    def test_database_failure_tagged_with_public_op(
        self, backend: SqlBackend, monkeypatch: pytest.MonkeyPatch, op: str
    ) -> None:
        owner = _account(backend, "ada")
        note = _note(backend, owner["id"], _template(backend, owner["id"]))

        def broken(*_args: Any) -> Any:
            raise OperationalError("SELECT notes", {}, Exception("disk I/O error"))

        monkeypatch.setattr(backend, "_note_payload", broken)
        result = getattr(backend, op)(note["id"], owner_id=owner["id"])
        assert result.op == op
        assert result.error is not None and result.error.code == "BACKEND_ERROR"


class TestListNotes:
    @pytest.fixture
    def seeded(self, backend: SqlBackend) -> dict[str, Any]:
        ada = _account(backend, "ada")
        bob = _account(backend, "bob")
        daily = _template(backend, ada["id"])
        reading = _template(backend, bob["id"], name="Reading")
        a1 = _note(backend, ada["id"], daily, title="Ada draft")
        a2 = _note(backend, ada["id"], daily, title="Ada published")
        b1 = _note(backend, bob["id"], reading, title="Bob published")
        backend.publish_note(a2["id"], owner_id=ada["id"])
        backend.publish_note(b1["id"], owner_id=bob["id"])
        return {"ada": ada, "bob": bob, "daily": daily, "notes": [a1, a2, b1]}

    def _titles(self, result: Any) -> set[str]:
        return {n["title"] for n in result.data["items"]}

    def test_filters(self, backend: SqlBackend, seeded: dict[str, Any]) -> None:
        assert self._titles(backend.list_notes(status="Publish")) == {
            "Ada published",
            "Bob published",
        }
        assert self._titles(backend.list_notes(owner_id=seeded["ada"]["id"])) == {
            "Ada draft",
            "Ada published",
        }
        assert self._titles(backend.list_notes(template_id=seeded["daily"]["id"])) == {
            "Ada draft",
            "Ada published",
        }
        assert self._titles(backend.list_notes(q="BOB")) == {"Bob published"}

    def test_search_wildcards_are_literal(
        self, backend: SqlBackend, seeded: dict[str, Any]
    ) -> None:
        _note(backend, seeded["ada"]["id"], seeded["daily"], title="50% done")
        assert self._titles(backend.list_notes(q="%")) == {"50% done"}
        assert self._titles(backend.list_notes(q="_")) == set()

    def test_paging(self, db_engine: Engine, seeded: dict[str, Any]) -> None:
        paged = SqlBackend(db_engine, page_size=2)
        first = paged.list_notes(page=1).data["items"]
        second = paged.list_notes(page=2).data["items"]
        assert len(first) == 2
        assert len(second) == 1
        assert {n["id"] for n in first}.isdisjoint({n["id"] for n in second})


class TestDeleteNote:
    def test_delete(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        tpl = _template(backend, owner["id"])
        note = _note(backend, owner["id"], tpl)
        assert backend.delete_note(note["id"], owner_id=owner["id"]).ok
        assert backend.get_note_by_id(note["id"]).not_found
        assert backend.count_rows("sections") == 0
        # Template becomes deletable again
        assert backend.delete_template(tpl["id"], owner_id=owner["id"]).ok

    def test_forbidden(self, backend: SqlBackend) -> None:
        owner = _account(backend, "ada")
        other = _account(backend, "bob")
        tpl = _template(backend, owner["id"])
        note = _note(backend, owner["id"], tpl)
        result = backend.delete_note(note["id"], owner_id=other["id"])
        assert result.error is not None and result.error.code == "FORBIDDEN"
        assert backend.count_rows("notes") == 1
