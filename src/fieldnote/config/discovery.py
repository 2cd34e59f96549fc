"""Locate the ``fieldnote.toml`` in effect for the current directory."""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

CONFIG_FILENAME = "fieldnote.toml"
CONFIG_ENV_VAR = "FIELDNOTE_CONFIG"


def _candidates(start: Path) -> Iterator[Path]:
    here = start.resolve()
    for directory in (here, *here.parents):
        yield directory / CONFIG_FILENAME


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file for *start* (default: cwd), or None.

    ``FIELDNOTE_CONFIG`` wins when set. If it names a file that does not
    exist, no config is used at all rather than falling back to the
    directory search.
    """
    pinned = os.environ.get(CONFIG_ENV_VAR)
    if pinned:
        path = Path(pinned)
        return path if path.is_file() else None
    return next((p for p in _candidates(start or Path.cwd()) if p.is_file()), None)
