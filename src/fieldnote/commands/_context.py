"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Provides lazy backend initialization, handler
construction, and centralized result emission (stdout/stderr routing +
exit codes).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import click

from fieldnote.domain.errors import FieldnoteError
from fieldnote.infrastructure.session import StaticSessionProvider
from fieldnote.output.formatters import format_error, format_result

if TYPE_CHECKING:
    from fieldnote.config.settings import FieldnoteSettings
    from fieldnote.handlers import (
        AccountCommands,
        AccountQueries,
        NoteCommands,
        NoteQueries,
        TemplateCommands,
        TemplateQueries,
    )
    from fieldnote.infrastructure.backend import Backend


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The backend is created on first use so ``--help`` and ``--version``
    never touch the database.
    """

    def __init__(self, settings: FieldnoteSettings, *, backend: Backend | None = None) -> None:
        self.settings = settings
        self._backend = backend
        self.sessions = StaticSessionProvider(settings.session.account_id)

        from fieldnote.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def backend(self) -> Backend:
        if self._backend is None:
            from fieldnote.infrastructure.backend import SqlBackend
            from fieldnote.infrastructure.database import init_database

            engine = init_database(self.settings.database_path)
            self._backend = SqlBackend(engine, page_size=self.settings.listing.page_size)
        return self._backend

    # --- handler factories -------------------------------------------------

    def account_commands(self) -> AccountCommands:
        from fieldnote.handlers import AccountCommands
        from fieldnote.services.account import AccountService

        return AccountCommands(
            AccountService(self.backend),
            self.sessions,
            inactive_days=self.settings.accounts.inactive_days,
        )

    def account_queries(self) -> AccountQueries:
        from fieldnote.handlers import AccountQueries
        from fieldnote.services.account import AccountService

        return AccountQueries(AccountService(self.backend), self.sessions)

    def template_commands(self) -> TemplateCommands:
        from fieldnote.handlers import TemplateCommands
        from fieldnote.services.template import TemplateService

        return TemplateCommands(TemplateService(self.backend), self.sessions)

    def template_queries(self) -> TemplateQueries:
        from fieldnote.handlers import TemplateQueries
        from fieldnote.services.template import TemplateService

        return TemplateQueries(TemplateService(self.backend), self.sessions)

    def note_commands(self) -> NoteCommands:
        from fieldnote.handlers import NoteCommands
        from fieldnote.services.note import NoteService

        return NoteCommands(NoteService(self.backend), self.sessions)

    def note_queries(self) -> NoteQueries:
        from fieldnote.handlers import NoteQueries
        from fieldnote.services.note import NoteService

        return NoteQueries(NoteService(self.backend), self.sessions)

    # --- emission ----------------------------------------------------------

    def run(self, op: str, call: Callable[[], Any]) -> None:
        """Invoke *call* and emit its result.

        * Success: writes to stdout, returns normally.
        * :class:`FieldnoteError`: writes to stderr, exits with code 1.
        """
        from fieldnote.config.logging import bind_operation

        try:
            with bind_operation(op):
                value = call()
        except FieldnoteError as exc:
            click.echo(format_error(op, exc, json_output=self.settings.json_output), err=True)
            raise SystemExit(1) from exc
        click.echo(format_result(op, value, json_output=self.settings.json_output))
