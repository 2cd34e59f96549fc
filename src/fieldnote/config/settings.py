"""FieldnoteSettings: one frozen object for CLI flags, env vars and TOML.

Precedence, highest first:

1. values passed by the CLI (``None`` means "not given")
2. ``FIELDNOTE_*`` environment variables, ``__`` for nesting
   (``FIELDNOTE_LISTING__PAGE_SIZE=20``)
3. the discovered ``fieldnote.toml``
4. section model defaults
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from fieldnote.config.discovery import find_config
from fieldnote.config.models import (
    AccountsConfig,
    DatabaseConfig,
    ListingConfig,
    SessionConfig,
)


def _load_toml(path: Path | None) -> dict[str, Any]:
    if path is None or not path.is_file():
        return {}
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise click.ClickException(f"Invalid TOML in {path}: {exc}") from exc


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by a parsed ``fieldnote.toml``."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data = _load_toml(toml_path)

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return dict(self._data)


# pydantic-settings builds sources from a classmethod, so the TOML path for
# the settings object under construction is handed over per thread.
_pending = threading.local()


class FieldnoteSettings(BaseSettings):
    """Resolved configuration for one CLI invocation.

    ``root`` is the directory holding the config file (or the cwd when
    there is none); relative paths in the config resolve against it.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        env_prefix="FIELDNOTE_",
        env_nested_delimiter="__",
    )

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    verbose: bool = False
    log_json: bool = False

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    listing: ListingConfig = Field(default_factory=ListingConfig)
    accounts: AccountsConfig = Field(default_factory=AccountsConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)

    @property
    def database_path(self) -> Path:
        path = self.database.path.expanduser()
        return path if path.is_absolute() else self.root / path

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml = TomlSettingsSource(settings_cls, getattr(_pending, "toml_path", None))
        return init_settings, env_settings, toml

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        **cli_flags: Any,
    ) -> FieldnoteSettings:
        """Build settings for a CLI run.

        An explicit *config_path* must exist; otherwise the config is
        discovered from *root* (or the cwd). Flags left at ``None`` do not
        override lower-precedence sources.
        """
        if config_path:
            toml_path: Path | None = Path(config_path)
            if not toml_path.is_file():
                raise click.ClickException(f"Config file not found: {config_path}")
        else:
            toml_path = find_config(root)

        if root is None:
            root = toml_path.parent if toml_path else Path.cwd()

        given = {name: value for name, value in cli_flags.items() if value is not None}
        _pending.toml_path = toml_path
        try:
            return cls(root=root, config_path=toml_path, **given)
        finally:
            _pending.toml_path = None
