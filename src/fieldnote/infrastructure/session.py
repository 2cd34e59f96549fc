"""Session collaborator — who is acting on this request.

A provider answers ``None`` when there is no session at all; a session
whose ``account_id`` is ``None`` counts as unauthenticated too.
"""

from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel


class Session(BaseModel):
    """The authenticated identity for one request."""

    model_config = {"frozen": True}

    account_id: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.account_id)


class SessionProvider(Protocol):
    def get_session(self) -> Session | None: ...


class StaticSessionProvider:
    """Always returns the same session (CLI invocations and tests)."""

    def __init__(self, account_id: str | None = None) -> None:
        self._session = Session(account_id=account_id) if account_id else None

    def get_session(self) -> Session | None:
        return self._session
