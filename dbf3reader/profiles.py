"""Named reading profiles: which table to open and how to decode its text.

A profile may carry any of a path, an encoding and a decode error
handler. Each setting is resolved on its own: command-line option first,
then the selected profile, then the built-in default. So `--dbf other.dbf
--profile cp437-tables` reads another file with a profile's encoding.
"""
from __future__ import annotations

import codecs
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import click

from dbf3reader.config import (
    APP_NAME,
    DECODE_ERROR_HANDLERS,
    DEFAULT_DECODE_ERRORS,
    DEFAULT_ENCODING,
)

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

_PROFILE_KEYS = ("dbf", "encoding", "errors")


@dataclass
class Profile:
    name: str
    dbf: Optional[Path] = None
    encoding: Optional[str] = None
    errors: Optional[str] = None

    def as_toml(self) -> list[str]:
        lines = [f"[profiles.{self.name}]"]
        if self.dbf is not None:
            # Literal string: backslashes in Windows paths stay as-is
            lines.append(f"dbf = '{self.dbf}'")
        if self.encoding is not None:
            lines.append(f'encoding = "{self.encoding}"')
        if self.errors is not None:
            lines.append(f'errors = "{self.errors}"')
        return lines


@dataclass
class Config:
    default_profile: Optional[str] = None
    profiles: dict[str, Profile] = field(default_factory=dict)

    def to_toml(self) -> str:
        blocks = []
        if self.default_profile:
            blocks.append(f'default_profile = "{self.default_profile}"')
        blocks.extend("\n".join(p.as_toml()) for p in self.profiles.values())
        return "\n\n".join(blocks) + "\n"


@dataclass(frozen=True)
class ReaderSettings:
    """Everything needed to open one table."""
    dbf: Path
    encoding: str = DEFAULT_ENCODING
    errors: str = DEFAULT_DECODE_ERRORS
    profile: Optional[str] = None


def get_config_path() -> Path:
    """Return the TOML config file path via click.get_app_dir."""
    return Path(click.get_app_dir(APP_NAME)) / "config.toml"


def check_encoding(encoding: str) -> str:
    """Return the codec's canonical name, or raise click.BadParameter."""
    try:
        return codecs.lookup(encoding).name
    except LookupError:
        raise click.BadParameter(f"Unknown encoding '{encoding}'") from None


def _profile_from_table(name: str, table: dict, source: Path) -> Profile:
    unknown = sorted(set(table) - set(_PROFILE_KEYS))
    if unknown:
        raise click.UsageError(f"{source}: profile '{name}' has unknown keys: {', '.join(unknown)}")
    errors = table.get("errors")
    if errors is not None and errors not in DECODE_ERROR_HANDLERS:
        raise click.UsageError(
            f"{source}: profile '{name}' has errors = '{errors}' "
            f"(expected one of {', '.join(DECODE_ERROR_HANDLERS)})"
        )
    return Profile(
        name=name,
        dbf=Path(table["dbf"]) if "dbf" in table else None,
        encoding=table.get("encoding"),
        errors=errors,
    )


def load_config() -> Config:
    """Read the TOML config; an absent file is an empty Config."""
    path = get_config_path()
    if not path.exists():
        return Config()

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise click.UsageError(f"Cannot parse {path}: {e}") from e

    profiles = {
        name: _profile_from_table(name, table, path)
        for name, table in data.get("profiles", {}).items()
    }
    return Config(default_profile=data.get("default_profile"), profiles=profiles)


def save_config(config: Config) -> Path:
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(config.to_toml(), encoding="utf-8")
    return path


def resolve_settings(dbf: Optional[Path] = None, profile_name: Optional[str] = None,
                     encoding: Optional[str] = None, errors: Optional[str] = None,
                     config: Optional[Config] = None) -> ReaderSettings:
    """Combine options, the selected profile and defaults into ReaderSettings.

    The profile is the one named, else the config's default (if any).
    Raises click.UsageError when no table path can be found or the
    resolved path does not exist.
    """
    if config is None:
        config = load_config()

    name = profile_name or config.default_profile
    profile = None
    if name is not None:
        profile = config.profiles.get(name)
        if profile is None:
            available = ", ".join(config.profiles) or "(none)"
            raise click.UsageError(f"Profile '{name}' not found. Available profiles: {available}")

    if profile is None:
        profile = Profile(name="")

    path = dbf or profile.dbf
    if path is None:
        raise click.UsageError(
            "No DBF path provided. Pass --dbf <path>, or save one with\n"
            "  dbf3 profile set <name> --path <file.dbf> --default"
        )
    if not path.exists():
        where = f" (from profile '{profile.name}')" if dbf is None else ""
        raise click.UsageError(f"DBF file not found{where}: {path}")

    return ReaderSettings(
        dbf=path,
        encoding=encoding or profile.encoding or DEFAULT_ENCODING,
        errors=errors or profile.errors or DEFAULT_DECODE_ERRORS,
        profile=profile.name or None,
    )
