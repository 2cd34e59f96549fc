"""Rich/JSON output helpers.

Handlers return entities, lists of entities, acknowledgements, counts or
``None``. The formatter turns any of those into text for the requested
output mode. Human output lists collections as a table; JSON output wraps
the camelCase payload in ``{"ok", "op", "data"}``.
"""

from __future__ import annotations

import json as _json
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel
from rich.markup import escape
from rich.table import Table

from fieldnote.output.console import create_console, get_output, style_for_status

if TYPE_CHECKING:
    from fieldnote.domain.errors import FieldnoteError

_LIST_COLUMNS = ("id", "title", "name", "status", "templateName", "email")


def to_jsonable(value: Any) -> Any:
    """Convert handler output into plain JSON-compatible data."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, Sequence) and not isinstance(value, str):
        return [to_jsonable(v) for v in value]
    return value


def _format_data_human(data: dict[str, Any]) -> list[str]:
    lines: list[str] = []
    for key, value in data.items():
        if isinstance(value, (dict, list)):
            rendered = _json.dumps(value, separators=(",", ":"))
        else:
            rendered = str(value)
        lines.append(f"  [fn.key]{key}:[/] {escape(rendered)}")
    return lines


def _items_table(items: list[dict[str, Any]]) -> Table:
    columns = [c for c in _LIST_COLUMNS if any(c in item for item in items)]
    table = Table(show_header=True, header_style="fn.key", box=None)
    for column in columns:
        table.add_column(column)
    for item in items:
        cells = []
        for column in columns:
            raw = str(item.get(column, ""))
            style = style_for_status(raw) if column == "status" else ""
            cells.append(f"[{style}]{escape(raw)}[/]" if style else escape(raw))
        table.add_row(*cells)
    return table


def format_result(op: str, value: Any, *, json_output: bool = False) -> str:
    """Format a successful handler result for display."""
    payload = to_jsonable(value)
    if json_output:
        return _json.dumps({"ok": True, "op": op, "data": payload}, indent=2)

    console = create_console()
    console.print(f"[fn.ok]OK:[/] [fn.op]{op}[/]")
    if payload is None:
        console.print("  (none)")
    elif isinstance(payload, list):
        if payload:
            console.print(_items_table(payload))
        else:
            console.print("  (no results)")
    elif isinstance(payload, dict):
        for line in _format_data_human(payload):
            console.print(line)
    else:
        console.print(f"  {escape(str(payload))}")
    return get_output(console).rstrip("\n")


def format_error(op: str, exc: FieldnoteError, *, json_output: bool = False) -> str:
    """Format a failure as ``ERROR: <op> — <message>`` (or JSON)."""
    if json_output:
        return _json.dumps({"ok": False, "op": op, "error": exc.to_dict()}, indent=2)
    return f"ERROR: {op} — {exc.message}"
