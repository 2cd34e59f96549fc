"""Command group: note CRUD and publishing.

Sections are given as ``FIELD_ID=content``; on ``update`` an existing
section is addressed as ``SECTION_ID:FIELD_ID=content``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from fieldnote.commands._base import FnGroup
from fieldnote.domain.lifecycle import NoteStatus

if TYPE_CHECKING:
    from fieldnote.commands._context import AppContext


def parse_section_specs(specs: tuple[str, ...]) -> list[dict[str, Any]]:
    sections: list[dict[str, Any]] = []
    for spec in specs:
        target, sep, content = spec.partition("=")
        if not sep:
            raise click.BadParameter(f"expected FIELD_ID=content, got {spec!r}")
        section_id, colon, field_id = target.partition(":")
        if colon:
            sections.append({"id": section_id, "fieldId": field_id, "content": content})
        else:
            sections.append({"fieldId": target, "content": content})
    return sections


@click.group(
    cls=FnGroup,
    examples="""\
  fieldnote note create "Monday" --template <tid> -s <fid>=Shipped the release
  fieldnote note update <id> --title "Monday recap" -s <sid>:<fid>=Shipped v2
  fieldnote note publish <id>
  fieldnote note list --mine --status Draft
  fieldnote note list -q recap --page 2""",
)
def note() -> None:
    """Manage notes."""


@note.command()
@click.argument("title")
@click.option("-t", "--template", "template_id", required=True, help="Template id.")
@click.option("-s", "--section", "section_specs", multiple=True, help="FIELD_ID=content")
@click.pass_obj
def create(app: AppContext, title: str, template_id: str, section_specs: tuple[str, ...]) -> None:
    """Create a draft note from a template."""
    raw = {"title": title, "templateId": template_id, "sections": parse_section_specs(section_specs)}
    app.run("create_note", lambda: app.note_commands().create_note(raw))


@note.command()
@click.argument("note_id")
@click.pass_obj
def show(app: AppContext, note_id: str) -> None:
    """Show a note by id."""
    app.run("get_note_by_id", lambda: app.note_queries().get_note_by_id({"id": note_id}))


@note.command("list")
@click.option("-q", "--query", "q", default=None, help="Case-insensitive title search.")
@click.option("--status", type=click.Choice([s.value for s in NoteStatus]), default=None)
@click.option("-t", "--template", "template_id", default=None)
@click.option("--page", type=int, default=None)
@click.option("--mine", is_flag=True, help="Only your notes, drafts included.")
@click.pass_obj
def list_cmd(
    app: AppContext,
    q: str | None,
    status: str | None,
    template_id: str | None,
    page: int | None,
    mine: bool,
) -> None:
    """List notes; without --mine only published notes are shown."""
    raw: dict[str, Any] = {"q": q, "status": status, "templateId": template_id, "page": page}
    raw = {k: v for k, v in raw.items() if v is not None}
    if mine:
        app.run("list_my_notes", lambda: app.note_queries().list_my_notes(raw))
    else:
        app.run("list_notes", lambda: app.note_queries().list_notes(raw))


@note.command()
@click.argument("note_id")
@click.option("--title", default=None)
@click.option("-s", "--section", "section_specs", multiple=True, help="[SECTION_ID:]FIELD_ID=content")
@click.pass_obj
def update(
    app: AppContext, note_id: str, title: str | None, section_specs: tuple[str, ...]
) -> None:
    """Retitle a note and/or merge sections into it."""
    raw: dict[str, Any] = {"id": note_id}
    if title is not None:
        raw["title"] = title
    if section_specs:
        raw["sections"] = parse_section_specs(section_specs)
    app.run("update_note", lambda: app.note_commands().update_note(raw))


@note.command()
@click.argument("note_id")
@click.pass_obj
def publish(app: AppContext, note_id: str) -> None:
    """Publish a draft note."""
    app.run("publish_note", lambda: app.note_commands().publish_note({"id": note_id}))


@note.command()
@click.argument("note_id")
@click.pass_obj
def unpublish(app: AppContext, note_id: str) -> None:
    """Return a published note to draft."""
    app.run("unpublish_note", lambda: app.note_commands().unpublish_note({"id": note_id}))


@note.command()
@click.argument("note_id")
@click.pass_obj
def delete(app: AppContext, note_id: str) -> None:
    """Delete a note you own."""
    app.run("delete_note", lambda: app.note_commands().delete_note({"id": note_id}))
