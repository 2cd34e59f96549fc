"""Shared pytest fixtures and test helpers for fieldnote tests."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from fieldnote.domain.entities import Account, Template
from fieldnote.infrastructure.backend import Backend, BackendResult, SqlBackend
from fieldnote.infrastructure.database.engine import init_database
from fieldnote.infrastructure.session import StaticSessionProvider
from fieldnote.services.account import AccountService
from fieldnote.services.note import NoteService
from fieldnote.services.template import TemplateService

MISSING_ID = "00000000-0000-4000-8000-000000000000"


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Generator[Engine]:
    """Initialized SQLite engine with all tables created."""
    engine = init_database(tmp_path / "fieldnote.db")
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def backend(db_engine: Engine) -> SqlBackend:
    return SqlBackend(db_engine)


@pytest.fixture
def stub_backend() -> MagicMock:
    """A Backend double for tests that control every answer."""
    return MagicMock(spec=Backend)


@pytest.fixture
def account_service(backend: SqlBackend) -> AccountService:
    return AccountService(backend)


@pytest.fixture
def template_service(backend: SqlBackend) -> TemplateService:
    return TemplateService(backend)


@pytest.fixture
def note_service(backend: SqlBackend) -> NoteService:
    return NoteService(backend)


@pytest.fixture
def alice(account_service: AccountService) -> Account:
    return make_account(account_service, "alice")


@pytest.fixture
def bob(account_service: AccountService) -> Account:
    return make_account(account_service, "bob")


@pytest.fixture
def alice_template(template_service: TemplateService, alice: Account) -> Template:
    return make_template(template_service, alice.id)


@pytest.fixture
def _isolated_workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run CLI tests from an empty temp directory with no config in scope.

    Use via ``@pytest.mark.usefixtures("_isolated_workspace")`` on command
    test classes.
    """
    monkeypatch.chdir(tmp_path)
    for var in ("FIELDNOTE_CONFIG", "FIELDNOTE_SESSION__ACCOUNT_ID", "FIELDNOTE_JSON_OUTPUT"):
        monkeypatch.delenv(var, raising=False)
    (tmp_path / "fieldnote.toml").write_text('[database]\npath = "fieldnote.db"\n')


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def sessions(account_id: str | None = None) -> StaticSessionProvider:
    return StaticSessionProvider(account_id)


def make_account(service: AccountService, handle: str, **kwargs: Any) -> Account:
    """Create an account keyed on *handle* via AccountService."""
    return service.create_or_get(
        email=kwargs.pop("email", f"{handle}@example.com"),
        name=kwargs.pop("name", f"{handle.title()} Example"),
        provider=kwargs.pop("provider", "github"),
        provider_account_id=kwargs.pop("provider_account_id", f"gh-{handle}"),
        **kwargs,
    )


def make_template(
    service: TemplateService,
    owner_id: str,
    name: str = "Daily log",
    labels: tuple[str, ...] = ("Summary", "Details"),
) -> Template:
    fields = [
        {"label": label, "order": i, "is_required": i == 1}
        for i, label in enumerate(labels, start=1)
    ]
    return service.create(owner_id, name, fields)


def ok(op: str, data: dict[str, Any] | None = None) -> BackendResult:
    return BackendResult.success(op, data)


def fail(op: str, code: str, message: str = "boom") -> BackendResult:
    return BackendResult.failure(op, code, message)


ACCOUNT_PAYLOAD: dict[str, Any] = {
    "id": "6f1c2a4e-9b7d-4e1a-8c3f-2d5e7a9b1c3d",
    "email": "ada@example.com",
    "first_name": "Ada",
    "last_name": "Lovelace",
    "full_name": "Ada Lovelace",
    "is_active": True,
    "created_at": "2024-01-01T00:00:00+00:00",
    "updated_at": "2024-01-01T00:00:00+00:00",
}

TEMPLATE_PAYLOAD: dict[str, Any] = {
    "id": "1b2c3d4e-5f60-4a1b-9c2d-3e4f5a6b7c8d",
    "name": "Daily log",
    "owner_id": ACCOUNT_PAYLOAD["id"],
    "fields": [
        {
            "id": "9a8b7c6d-5e4f-4a3b-8c2d-1e0f9a8b7c6d",
            "label": "Summary",
            "order": 1,
            "is_required": True,
        }
    ],
    "updated_at": "2024-01-01T00:00:00+00:00",
    "is_used": False,
}

NOTE_PAYLOAD: dict[str, Any] = {
    "id": "3c4d5e6f-7a8b-4c9d-8e0f-1a2b3c4d5e6f",
    "title": "Monday",
    "template_id": TEMPLATE_PAYLOAD["id"],
    "template_name": "Daily log",
    "owner_id": ACCOUNT_PAYLOAD["id"],
    "owner": {"id": ACCOUNT_PAYLOAD["id"], "first_name": "Ada", "last_name": "Lovelace"},
    "status": "Draft",
    "sections": [],
    "created_at": "2024-01-01T00:00:00+00:00",
    "updated_at": "2024-01-01T00:00:00+00:00",
}
