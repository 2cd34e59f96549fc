"""AccountService — login create-or-get, lookups, profile update, deactivation."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

from fieldnote.domain.entities import Account
from fieldnote.domain.errors import (
    ACCOUNT_UPDATE_UNIMPLEMENTED_MESSAGE,
    NOT_IMPLEMENTED,
    UnimplementedError,
    ValidationError,
)
from fieldnote.services._helpers import inactivity_cutoff, split_name
from fieldnote.services.base import BaseService

logger = structlog.get_logger(__name__)

DEFAULT_INACTIVE_DAYS = 90


class AccountService(BaseService):
    """Account operations.

    Accounts are keyed by ``(provider, provider_account_id)``; a repeat
    login with the same key returns the stored record and only refreshes
    login bookkeeping.
    """

    def create_or_get(
        self,
        email: str,
        name: str,
        provider: str,
        provider_account_id: str,
        thumbnail: str | None = None,
    ) -> Account:
        first_name, last_name = split_name(name)
        data = self._write(
            self._backend.create_or_get_account(
                email=email,
                first_name=first_name,
                last_name=last_name,
                provider=provider,
                provider_account_id=provider_account_id,
                thumbnail=thumbnail,
            )
        )
        account = Account.model_validate(data)
        logger.info("account_login", account_id=account.id, provider=provider)
        return account

    def get_by_id(self, account_id: str) -> Account | None:
        data = self._read(self._backend.get_account_by_id(account_id))
        return None if data is None else Account.model_validate(data)

    def get_by_email(self, email: str) -> Account | None:
        data = self._read(self._backend.get_account_by_email(email))
        return None if data is None else Account.model_validate(data)

    def update(self, account_id: str, changes: Mapping[str, Any]) -> Account:
        """Apply only the fields present in *changes*.

        Raises:
            UnimplementedError: the backend has no account update operation.
        """
        result = self._backend.update_account(account_id, dict(changes))
        if not result.ok and result.error is not None and result.error.code == NOT_IMPLEMENTED:
            logger.warning("account_update_unimplemented", account_id=account_id)
            raise UnimplementedError(ACCOUNT_UPDATE_UNIMPLEMENTED_MESSAGE)
        account = Account.model_validate(self._write(result))
        logger.info("account_updated", account_id=account_id, fields=sorted(changes))
        return account

    def deactivate_inactive(self, inactive_days: int = DEFAULT_INACTIVE_DAYS) -> int:
        """Deactivate active accounts whose last login predates the cut-off.

        Returns the number of accounts deactivated.

        Raises:
            ValidationError: *inactive_days* is below 1; a cut-off at or
                after now would catch accounts that just logged in.
        """
        if inactive_days < 1:
            raise ValidationError([f"inactive_days: must be at least 1, got {inactive_days}"])
        cutoff = inactivity_cutoff(inactive_days)
        data = self._write(self._backend.deactivate_accounts_before(cutoff))
        count = int(data.get("count", 0))
        logger.info("accounts_deactivated", count=count, cutoff=cutoff.isoformat())
        return count
