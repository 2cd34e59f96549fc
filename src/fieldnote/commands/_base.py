"""Click command classes shared by every fieldnote command.

Commands and groups accept an ``examples=`` string. When given, an eager
``--examples`` flag prints it and exits before argument validation, so
required arguments never get in the way.
"""

from __future__ import annotations

from typing import Any

import click


class _ExamplesMixin:
    examples: str | None

    def _install_examples(self, examples: str | None) -> None:
        self.examples = examples
        if not examples:
            return
        params: list[click.Parameter] = self.params  # type: ignore[attr-defined]
        params.append(
            click.Option(
                ["--examples"],
                is_flag=True,
                is_eager=True,
                expose_value=False,
                callback=_print_examples,
                help="Show usage examples and exit.",
            )
        )


def _print_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    examples = getattr(ctx.command, "examples", None) or ""
    click.echo(f"Examples for '{ctx.command_path}':\n\n{examples.strip()}")
    ctx.exit(0)


class FnCommand(_ExamplesMixin, click.Command):
    """Command with optional ``--examples``."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._install_examples(examples)


class FnGroup(_ExamplesMixin, click.Group):
    """Group with optional ``--examples``; subcommands are :class:`FnCommand`."""

    command_class = FnCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._install_examples(examples)
