"""Command/query handlers — the authorisation and orchestration boundary.

Each handler method validates raw input, resolves the acting account from
the session provider, and calls exactly one service operation. Handlers
may import from domain, infrastructure and services; never from commands
or output.
"""

from fieldnote.handlers.account import AccountCommands, AccountQueries
from fieldnote.handlers.note import NoteCommands, NoteQueries
from fieldnote.handlers.template import TemplateCommands, TemplateQueries

__all__ = [
    "AccountCommands",
    "AccountQueries",
    "NoteCommands",
    "NoteQueries",
    "TemplateCommands",
    "TemplateQueries",
]
