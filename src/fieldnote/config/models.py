"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults live here, ``fieldnote.toml`` only holds
overrides. An empty file is a valid configuration.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class DatabaseConfig(BaseModel):
    """[database] section."""

    model_config = {"frozen": True}

    path: Path = Path(".fieldnote/fieldnote.db")


class ListingConfig(BaseModel):
    """[listing] section."""

    model_config = {"frozen": True}

    page_size: int = Field(default=50, ge=1)


class AccountsConfig(BaseModel):
    """[accounts] section."""

    model_config = {"frozen": True}

    inactive_days: int = Field(default=90, ge=1)


class SessionConfig(BaseModel):
    """[session] section.

    ``account_id`` is the identity CLI commands act as.
    """

    model_config = {"frozen": True}

    account_id: str | None = None
