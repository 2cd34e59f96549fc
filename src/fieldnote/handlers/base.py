"""BaseHandler — session resolution shared by every handler class."""

from __future__ import annotations

from typing import TYPE_CHECKING, Generic, TypeVar

import structlog

from fieldnote.domain.errors import UnauthenticatedError

if TYPE_CHECKING:
    from fieldnote.infrastructure.session import SessionProvider

logger = structlog.get_logger(__name__)

S = TypeVar("S")


class BaseHandler(Generic[S]):
    """Holds one service and the session provider.

    The session is looked up at most once per handler call.
    """

    def __init__(self, service: S, sessions: SessionProvider) -> None:
        self._service = service
        self._sessions = sessions

    def _optional_account_id(self) -> str | None:
        session = self._sessions.get_session()
        if session is None or not session.account_id:
            return None
        return session.account_id

    def _require_account_id(self, op: str) -> str:
        account_id = self._optional_account_id()
        if account_id is None:
            logger.warning("unauthenticated", op=op)
            raise UnauthenticatedError()
        return account_id
