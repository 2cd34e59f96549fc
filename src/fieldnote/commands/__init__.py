"""Subcommand modules for fieldnote.

Provides register_commands() which uses deferred imports to keep
``fieldnote --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from fieldnote.commands.account import account
    from fieldnote.commands.note import note
    from fieldnote.commands.template import template

    cli.add_command(account)
    cli.add_command(template)
    cli.add_command(note)

    # --- Standalone commands ---
    from fieldnote.commands.init_cmd import init_cmd

    cli.add_command(init_cmd)
