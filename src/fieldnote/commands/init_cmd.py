"""Command: workspace initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from fieldnote.commands._base import FnCommand
from fieldnote.config.discovery import CONFIG_FILENAME

if TYPE_CHECKING:
    from fieldnote.commands._context import AppContext

_INIT_EXAMPLES = """\
  fieldnote init
  fieldnote init /path/to/workspace --db data/notes.db
  fieldnote init . --page-size 20"""

_CONFIG_TEMPLATE = """\
[database]
path = "{db}"

[listing]
page_size = {page_size}
"""


@click.command("init", cls=FnCommand, examples=_INIT_EXAMPLES)
@click.argument("path", required=False, default=".")
@click.option("--db", "db_path", default=".fieldnote/fieldnote.db", help="Database file path.")
@click.option("--page-size", type=int, default=50, help="Notes per listing page.")
@click.pass_obj
def init_cmd(app: AppContext, path: str, db_path: str, page_size: int) -> None:
    """Create fieldnote.toml and an empty database in PATH."""
    from fieldnote.infrastructure.database import init_database

    root = Path(path).resolve()
    config_file = root / CONFIG_FILENAME

    def _init() -> dict[str, str]:
        root.mkdir(parents=True, exist_ok=True)
        if not config_file.exists():
            config_file.write_text(
                _CONFIG_TEMPLATE.format(db=db_path, page_size=page_size), encoding="utf-8"
            )
        db_file = Path(db_path) if Path(db_path).is_absolute() else root / db_path
        init_database(db_file).dispose()
        return {"config": str(config_file), "database": str(db_file)}

    app.run("init", _init)
