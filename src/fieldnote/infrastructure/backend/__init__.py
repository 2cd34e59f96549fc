"""Persistence collaborator: protocol, tagged result and SQL implementation."""

from fieldnote.infrastructure.backend.protocol import Backend
from fieldnote.infrastructure.backend.result import BackendError, BackendResult
from fieldnote.infrastructure.backend.sql import SqlBackend

__all__ = [
    "Backend",
    "BackendError",
    "BackendResult",
    "SqlBackend",
]
