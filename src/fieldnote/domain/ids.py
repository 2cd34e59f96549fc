"""Identifier patterns and generation.

Every entity (account, template, field, note, section) is keyed by a
canonical UUID string. The backend generates ids; the schema layer only
checks their shape.
"""

from __future__ import annotations

import re
import uuid

UUID_PATTERN = r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"

_UUID_RE = re.compile(UUID_PATTERN)


def new_id() -> str:
    """Generate a fresh random identifier."""
    return str(uuid.uuid4())


def is_valid_id(value: object) -> bool:
    """Check whether *value* is a canonical ``8-4-4-4-12`` UUID string."""
    if not isinstance(value, str):
        return False
    return _UUID_RE.match(value) is not None
