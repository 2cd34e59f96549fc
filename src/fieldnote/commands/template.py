"""Command group: template CRUD.

Fields on ``create`` are given as repeated ``--field LABEL`` options; a
trailing ``*`` marks the field required and order follows the option
order. ``update`` takes the full replacement field list as JSON so that
existing field ids can be kept.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import click

from fieldnote.commands._base import FnGroup

if TYPE_CHECKING:
    from fieldnote.commands._context import AppContext


def parse_field_specs(specs: tuple[str, ...]) -> list[dict[str, Any]]:
    """Turn ``("Summary*", "Details")`` into field input mappings."""
    fields: list[dict[str, Any]] = []
    for order, spec in enumerate(specs, start=1):
        label = spec.rstrip()
        required = label.endswith("*")
        fields.append(
            {"label": label.removesuffix("*").rstrip(), "order": order, "isRequired": required}
        )
    return fields


def _load_json_list(text: str) -> list[Any]:
    try:
        value = json.loads(text)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"not valid JSON: {exc}") from exc
    if not isinstance(value, list):
        raise click.BadParameter("expected a JSON array")
    return value


@click.group(
    cls=FnGroup,
    examples="""\
  fieldnote template create "Daily log" --field "Summary*" --field Details
  fieldnote template list --mine -q daily
  fieldnote template update <id> --name "Daily journal"
  fieldnote template update <id> --fields '[{"id": "<fid>", "label": "Summary", "order": 1}]'
  fieldnote template delete <id>""",
)
def template() -> None:
    """Manage templates."""


@template.command()
@click.argument("name")
@click.option("-f", "--field", "field_specs", multiple=True, help="Field label; '*' = required.")
@click.pass_obj
def create(app: AppContext, name: str, field_specs: tuple[str, ...]) -> None:
    """Create a template owned by the acting account."""
    raw = {"name": name, "fields": parse_field_specs(field_specs)}
    app.run("create_template", lambda: app.template_commands().create_template(raw))


@template.command()
@click.argument("template_id")
@click.pass_obj
def show(app: AppContext, template_id: str) -> None:
    """Show a template by id."""
    app.run(
        "get_template_by_id",
        lambda: app.template_queries().get_template_by_id({"id": template_id}),
    )


@template.command("list")
@click.option("-q", "--query", "q", default=None, help="Case-insensitive name search.")
@click.option("--mine", is_flag=True, help="Only templates you own.")
@click.pass_obj
def list_cmd(app: AppContext, q: str | None, mine: bool) -> None:
    """List templates."""
    raw = {"q": q, "onlyMyTemplates": mine}
    app.run("list_templates", lambda: app.template_queries().list_templates(raw))


@template.command()
@click.argument("template_id")
@click.option("--name", default=None)
@click.option("--fields", "fields_json", default=None, help="Replacement field list as JSON.")
@click.pass_obj
def update(app: AppContext, template_id: str, name: str | None, fields_json: str | None) -> None:
    """Rename a template and/or replace its fields."""
    raw: dict[str, Any] = {"id": template_id}
    if name is not None:
        raw["name"] = name
    if fields_json is not None:
        raw["fields"] = _load_json_list(fields_json)
    app.run("update_template", lambda: app.template_commands().update_template(raw))


@template.command()
@click.argument("template_id")
@click.pass_obj
def delete(app: AppContext, template_id: str) -> None:
    """Delete an unused template you own."""
    app.run(
        "delete_template",
        lambda: app.template_commands().delete_template({"id": template_id}),
    )
