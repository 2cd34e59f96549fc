"""Account commands and queries."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog

from fieldnote.domain.errors import SELF_UPDATE_ONLY_MESSAGE, ForbiddenError
from fieldnote.domain.schemas import (
    CreateAccountRequest,
    GetAccountByEmailRequest,
    GetAccountByIdRequest,
    UpdateAccountByIdRequest,
    parse_request,
)
from fieldnote.handlers.base import BaseHandler
from fieldnote.services.account import DEFAULT_INACTIVE_DAYS, AccountService

if TYPE_CHECKING:
    from fieldnote.domain.entities import Account
    from fieldnote.infrastructure.session import SessionProvider

logger = structlog.get_logger(__name__)

Raw = Mapping[str, Any] | None


class AccountCommands(BaseHandler[AccountService]):
    def __init__(
        self,
        service: AccountService,
        sessions: SessionProvider,
        *,
        inactive_days: int = DEFAULT_INACTIVE_DAYS,
    ) -> None:
        super().__init__(service, sessions)
        self._inactive_days = inactive_days

    def create_or_get_account(self, raw: Raw) -> Account:
        """Login flow: no session is consulted."""
        req = parse_request(CreateAccountRequest, raw)
        return self._service.create_or_get(
            email=req.email,
            name=req.name,
            provider=req.provider,
            provider_account_id=req.provider_account_id,
            thumbnail=req.thumbnail,
        )

    def update_account(self, raw: Raw) -> Account:
        """Update the caller's own profile; any other id is forbidden."""
        req = parse_request(UpdateAccountByIdRequest, raw)
        acting = self._require_account_id("update_account")
        if req.id != acting:
            logger.warning("cross_account_update", acting=acting, target=req.id)
            raise ForbiddenError(SELF_UPDATE_ONLY_MESSAGE)
        changes = req.provided()
        changes.pop("id", None)
        return self._service.update(req.id, changes)

    def deactivate_inactive_accounts(self, inactive_days: int | None = None) -> int:
        """System job; runs without a session."""
        days = self._inactive_days if inactive_days is None else inactive_days
        return self._service.deactivate_inactive(days)


class AccountQueries(BaseHandler[AccountService]):
    def get_current_account(self) -> Account | None:
        account_id = self._optional_account_id()
        if account_id is None:
            return None
        return self._service.get_by_id(account_id)

    def get_account_by_id(self, raw: Raw) -> Account | None:
        req = parse_request(GetAccountByIdRequest, raw)
        return self._service.get_by_id(req.id)

    def get_account_by_email(self, raw: Raw) -> Account | None:
        req = parse_request(GetAccountByEmailRequest, raw)
        return self._service.get_by_email(req.email)
