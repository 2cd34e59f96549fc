"""Command group: account login, lookup, profile update, deactivation job."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from fieldnote.commands._base import FnGroup

if TYPE_CHECKING:
    from fieldnote.commands._context import AppContext


@click.group(
    cls=FnGroup,
    examples="""\
  fieldnote account login --email ada@example.com --name "Ada Lovelace" \\
      --provider github --provider-account-id 1815
  fieldnote account me
  fieldnote account show --email ada@example.com
  fieldnote --as <id> account update <id> --first-name Augusta
  fieldnote account deactivate-inactive --days 30""",
)
def account() -> None:
    """Manage accounts."""


@account.command()
@click.option("--email", required=True)
@click.option("--name", required=True, help="Display name from the identity provider.")
@click.option("--provider", required=True)
@click.option("--provider-account-id", required=True)
@click.option("--thumbnail", default=None)
@click.pass_obj
def login(
    app: AppContext,
    email: str,
    name: str,
    provider: str,
    provider_account_id: str,
    thumbnail: str | None,
) -> None:
    """Create the account for a provider identity, or return the existing one."""
    raw = {
        "email": email,
        "name": name,
        "provider": provider,
        "providerAccountId": provider_account_id,
        "thumbnail": thumbnail,
    }
    app.run("create_or_get_account", lambda: app.account_commands().create_or_get_account(raw))


@account.command()
@click.pass_obj
def me(app: AppContext) -> None:
    """Show the account the CLI is acting as."""
    app.run("get_current_account", lambda: app.account_queries().get_current_account())


@account.command()
@click.argument("account_id", required=False)
@click.option("--email", default=None, help="Look up by email instead of id.")
@click.pass_obj
def show(app: AppContext, account_id: str | None, email: str | None) -> None:
    """Show an account by id or email."""
    if email is not None:
        app.run(
            "get_account_by_email",
            lambda: app.account_queries().get_account_by_email({"email": email}),
        )
        return
    if account_id is None:
        raise click.UsageError("Provide ACCOUNT_ID or --email.")
    app.run("get_account_by_id", lambda: app.account_queries().get_account_by_id({"id": account_id}))


@account.command()
@click.argument("account_id")
@click.option("--first-name", default=None)
@click.option("--last-name", default=None)
@click.option("--thumbnail", default=None)
@click.option("--clear-thumbnail", is_flag=True, help="Remove the thumbnail.")
@click.pass_obj
def update(
    app: AppContext,
    account_id: str,
    first_name: str | None,
    last_name: str | None,
    thumbnail: str | None,
    clear_thumbnail: bool,
) -> None:
    """Update your own profile."""
    raw: dict[str, object] = {"id": account_id}
    if first_name is not None:
        raw["firstName"] = first_name
    if last_name is not None:
        raw["lastName"] = last_name
    if clear_thumbnail:
        raw["thumbnail"] = None
    elif thumbnail is not None:
        raw["thumbnail"] = thumbnail
    app.run("update_account", lambda: app.account_commands().update_account(raw))


@account.command("deactivate-inactive")
@click.option(
    "--days",
    type=click.IntRange(min=1),
    default=None,
    help="Override [accounts] inactive_days.",
)
@click.pass_obj
def deactivate_inactive(app: AppContext, days: int | None) -> None:
    """Deactivate accounts with no login in the configured window."""
    app.run(
        "deactivate_inactive_accounts",
        lambda: {"deactivated": app.account_commands().deactivate_inactive_accounts(days)},
    )
