"""Note status lifecycle.

Two states, no terminal state:

- ``publish``: Draft -> Publish
- ``unpublish``: Publish -> Draft

Requesting a transition into the state a note is already in is accepted
as a no-op rather than rejected.
"""

from __future__ import annotations

from enum import StrEnum


class NoteStatus(StrEnum):
    """Visibility status of a note."""

    DRAFT = "Draft"
    PUBLISH = "Publish"


INITIAL_STATUS = NoteStatus.DRAFT

NOTE_TRANSITIONS: dict[str, list[str]] = {
    "Draft": ["Publish"],
    "Publish": ["Draft"],
}

# Transition name -> target status
TRANSITION_TARGETS: dict[str, NoteStatus] = {
    "publish": NoteStatus.PUBLISH,
    "unpublish": NoteStatus.DRAFT,
}


def is_valid_transition(
    current: str,
    target: str,
    transitions: dict[str, list[str]] = NOTE_TRANSITIONS,
) -> bool:
    """Check if moving from *current* to *target* is allowed.

    Staying in the current state always counts as valid.
    """
    if current == target:
        return current in transitions
    return target in transitions.get(current, [])


def apply_transition(current: str, transition: str) -> NoteStatus:
    """Return the status reached by applying *transition* to *current*.

    Raises:
        KeyError: *transition* is not a known transition name.
        ValueError: *current* is not a known status.
    """
    target = TRANSITION_TARGETS[transition]
    if not is_valid_transition(current, target):
        msg = f"Invalid status transition: {current} -> {target}"
        raise ValueError(msg)
    return target
