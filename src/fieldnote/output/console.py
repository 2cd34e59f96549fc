"""Buffered rich console and the ``fn.*`` style theme.

Formatters render into an in-memory console and return the text, so the
CLI decides where it goes (stdout or stderr). Colour is dropped
automatically when the buffer is not a terminal.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

DEFAULT_WIDTH = 120

FIELDNOTE_THEME = Theme(
    {
        "fn.ok": "bold green",
        "fn.error": "bold red",
        "fn.op": "bold cyan",
        "fn.key": "dim",
        "fn.id": "bold blue",
        "fn.title": "bold",
        "fn.status.draft": "yellow",
        "fn.status.publish": "green",
    }
)


def create_console(*, no_color: bool = False, width: int = DEFAULT_WIDTH) -> Console:
    return Console(
        file=StringIO(),
        theme=FIELDNOTE_THEME,
        no_color=no_color,
        highlight=False,
        width=width,
    )


def get_output(console: Console) -> str:
    buffer = console.file
    if not isinstance(buffer, StringIO):
        raise TypeError("console was not created by create_console()")
    return buffer.getvalue()


def style_for_status(status: str) -> str:
    """Theme style for a note status cell, or ``""`` for unknown values."""
    style = f"fn.status.{status.lower()}"
    return style if style in FIELDNOTE_THEME.styles else ""
