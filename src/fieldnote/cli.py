"""Root CLI group for fieldnote with global flags and command registration."""

from __future__ import annotations

import click

from fieldnote import __version__
from fieldnote.commands import register_commands
from fieldnote.commands._context import AppContext
from fieldnote.config.settings import FieldnoteSettings
from fieldnote.domain.ids import is_valid_id


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="fieldnote")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging to stderr.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "--as",
    "account_id",
    default=None,
    metavar="ACCOUNT_ID",
    help="Act as this account (overrides [session] account_id).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    account_id: str | None,
) -> None:
    """fieldnote — structured notes built from reusable templates."""
    ctx.ensure_object(dict)
    overrides: dict[str, object] = {}
    if account_id:
        if not is_valid_id(account_id):
            raise click.BadParameter("not a valid account id", param_hint="'--as'")
        overrides["session"] = {"account_id": account_id}
    settings = FieldnoteSettings.from_cli(
        config_path=config_path,
        json_output=json_output or None,
        verbose=verbose or None,
        log_json=log_json or None,
        **overrides,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
