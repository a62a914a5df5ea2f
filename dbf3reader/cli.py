"""Click CLI for the dBase III table reader."""
from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Optional

import click

from dbf3reader.config import (
    DECODE_ERROR_HANDLERS,
    DEFAULT_EXPORT_FORMAT,
    EXPORT_FORMATS,
    derive_export_path,
)
from dbf3reader.dbf.constants import FIELD_TYPE_NAMES
from dbf3reader.dbf.errors import DBFError, DeletedRecordError
from dbf3reader.dbf.reader import DBFReader
from dbf3reader.export.json_export import json_values
from dbf3reader.profiles import (
    Profile,
    ReaderSettings,
    check_encoding,
    load_config,
    resolve_settings,
    save_config,
)
from dbf3reader.utils.logging import configure_logging

# Profile names become TOML bare keys
_PROFILE_NAME_RE = re.compile(r"^[a-zA-Z0-9_-]+$")

# Errors a single read can raise once the table is open
_READ_ERRORS = (DBFError, EOFError, OSError)


class Context:
    """Holds the reader settings resolved from options, profile and config."""

    def __init__(self, dbf: Path | None = None, profile: str | None = None,
                 encoding: str | None = None, errors: str | None = None):
        self._options = dict(dbf=dbf, profile_name=profile, encoding=encoding, errors=errors)
        self._settings: ReaderSettings | None = None

    @property
    def settings(self) -> ReaderSettings:
        if self._settings is None:
            self._settings = resolve_settings(**self._options)
        return self._settings

    @property
    def dbf(self) -> Path:
        return self.settings.dbf

    def open_reader(self) -> DBFReader:
        """Open the resolved table, turning parse failures into CLI errors."""
        s = self.settings
        try:
            return DBFReader.open(s.dbf, encoding=s.encoding, errors=s.errors)
        except _READ_ERRORS as e:
            raise click.ClickException(f"Cannot read {s.dbf}: {e}") from e


pass_ctx = click.make_pass_decorator(Context)


def _format_record(index: int, rec: dict) -> str:
    values = ", ".join(f"{name}={value!r}" for name, value in rec.items())
    return f"#{index}: {values}"


def _encoding_option(ctx, param, value: Optional[str]) -> Optional[str]:
    return None if value is None else check_encoding(value)


def _profile_name(ctx, param, value: str) -> str:
    if not _PROFILE_NAME_RE.match(value):
        raise click.BadParameter("use letters, digits, hyphens and underscores only")
    return value


@click.group()
@click.option(
    "--dbf", required=False, default=None,
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    help="Path to a .dbf file (optional if a profile supplies one)",
)
@click.option(
    "--profile", "-p", default=None, type=str,
    help="Named profile to use (see 'dbf3 profile list')",
)
@click.option("--encoding", default=None, callback=_encoding_option,
              help="Text encoding of names and values (default: profile or ascii)")
@click.option("--errors", type=click.Choice(DECODE_ERROR_HANDLERS), default=None,
              help="Undecodable bytes: 'strict' fails the record (default), "
                   "'replace'/'ignore' keep going but alter the text")
@click.option("--log-level", default="WARNING", show_default=True,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False))
@click.option("--json-logs", is_flag=True, help="Emit log records as JSON")
@click.version_option(package_name="dbf3reader")
@click.pass_context
def cli(ctx, dbf: Optional[Path], profile: Optional[str], encoding: Optional[str],
        errors: Optional[str], log_level: str, json_logs: bool):
    """dbf3 - dBase III table reader.

    Inspect the header and field table of a .dbf file, and read,
    dump or export its records.
    """
    configure_logging(level=log_level, json_logs=json_logs)
    ctx.ensure_object(dict)
    ctx.obj = Context(dbf=dbf, profile=profile, encoding=encoding, errors=errors)


@cli.group("profile")
def profile_group():
    """Manage saved reading profiles."""


@profile_group.command("set")
@click.argument("name", callback=_profile_name)
@click.option("--path", "dbf", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Table this profile opens")
@click.option("--encoding", default=None, callback=_encoding_option, help="Text encoding")
@click.option("--errors", type=click.Choice(DECODE_ERROR_HANDLERS), default=None,
              help="Decode error handler")
@click.option("--default", "make_default", is_flag=True, help="Use when no --profile is given")
def profile_set(name: str, dbf: Optional[Path], encoding: Optional[str], errors: Optional[str],
                make_default: bool):
    """Create profile NAME, or update the settings given."""
    config = load_config()
    profile = config.profiles.setdefault(name, Profile(name=name))
    if dbf is not None:
        profile.dbf = dbf.resolve()
    if encoding is not None:
        profile.encoding = encoding
    if errors is not None:
        profile.errors = errors
    if make_default:
        config.default_profile = name

    path = save_config(config)
    click.echo(f"Saved profile '{name}' to {path}")


@profile_group.command("list")
def profile_list():
    """List saved profiles."""
    config = load_config()
    if not config.profiles:
        click.echo("No profiles. Create one with 'dbf3 profile set NAME --path FILE'.")
        return

    click.echo(f"  {'Name':<16}  {'Encoding':<10}  {'Errors':<8}  Path")
    for name, p in config.profiles.items():
        marker = "*" if name == config.default_profile else " "
        click.echo(f"{marker} {name:<16}  {p.encoding or '-':<10}  {p.errors or '-':<8}  {p.dbf or '-'}")


@profile_group.command("remove")
@click.argument("name")
def profile_remove(name: str):
    """Delete profile NAME."""
    config = load_config()
    if config.profiles.pop(name, None) is None:
        raise click.UsageError(f"Profile '{name}' not found.")
    if config.default_profile == name:
        config.default_profile = None
    save_config(config)
    click.echo(f"Removed profile '{name}'")


@cli.command()
@pass_ctx
def info(ctx: Context):
    """Show header details: version, dates, counts and lengths."""
    with ctx.open_reader() as reader:
        schema = reader.schema
        year, month, day = reader.mod_date()

        click.echo(f"File:          {ctx.dbf}")
        click.echo(f"Version:       0x{schema.version:02X}")
        click.echo(f"Last modified: {year:04d}-{month:02d}-{day:02d}")
        click.echo(f"Records:       {schema.record_count:,}")
        click.echo(f"Fields:        {schema.field_count}")
        click.echo(f"Header length: {schema.header_length} bytes")
        click.echo(f"Record length: {schema.record_length} bytes")

        for warning in schema.check_layout():
            click.echo(f"Warning: {warning}")


@cli.command()
@pass_ctx
def fields(ctx: Context):
    """List the field table."""
    with ctx.open_reader() as reader:
        click.echo(f"{'#':>3}  {'Name':<11}  {'Type':<12}  {'Len':>4}  {'Dec':>4}")
        click.echo("-" * 42)
        for i, f in enumerate(reader.schema.fields):
            type_name = f"{f.type} ({FIELD_TYPE_NAMES[f.type]})"
            click.echo(f"{i:>3}  {f.name:<11}  {type_name:<12}  {f.length:>4}  {f.decimal_places:>4}")


@cli.command()
@click.argument("index", type=click.IntRange(min=0))
@pass_ctx
def show(ctx: Context, index: int):
    """Show one record by zero-based INDEX."""
    with ctx.open_reader() as reader:
        try:
            rec = reader.read(index)
        except DeletedRecordError:
            click.echo(f"Record {index} is deleted.")
            return
        except _READ_ERRORS as e:
            raise click.ClickException(str(e)) from e

        click.echo(f"Record {index}")
        for name, value in rec.items():
            click.echo(f"  {name:<11} = {value!r}")


@cli.command()
@click.option("--start", type=click.IntRange(min=0), default=0, show_default=True, help="First record index")
@click.option("--limit", type=click.IntRange(min=0), default=None, help="Maximum number of records to read")
@click.option("--include-deleted", is_flag=True, help="List deleted records instead of skipping them")
@click.option("--keep-going", is_flag=True, help="Report malformed records and continue")
@click.option("--jsonl", is_flag=True, help="One JSON object per record")
@pass_ctx
def dump(ctx: Context, start: int, limit: Optional[int], include_deleted: bool,
         keep_going: bool, jsonl: bool):
    """Print records, one per line."""
    with ctx.open_reader() as reader:
        stop = len(reader) if limit is None else min(len(reader), start + limit)
        live = deleted = bad = 0

        for i in range(start, stop):
            try:
                rec = reader.read(i)
            except DeletedRecordError:
                deleted += 1
                if include_deleted:
                    click.echo(json.dumps({"index": i, "deleted": True}) if jsonl else f"#{i}: (deleted)")
                continue
            except _READ_ERRORS as e:
                if not keep_going:
                    raise click.ClickException(str(e)) from e
                bad += 1
                click.echo(f"Error: {e}", err=True)
                continue

            live += 1
            if jsonl:
                click.echo(json.dumps({"index": i, "values": json_values(rec)}, allow_nan=False))
            else:
                click.echo(_format_record(i, rec))

        click.echo(f"{live:,} live, {deleted:,} deleted, {bad:,} malformed", err=True)


@cli.command()
@click.option("--format", "fmt", type=click.Choice(EXPORT_FORMATS), default=DEFAULT_EXPORT_FORMAT,
              show_default=True)
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Output file path")
@click.option("--save", is_flag=True, help="Write next to the .dbf file with the format's suffix")
@pass_ctx
def export(ctx: Context, fmt: str, output: Optional[Path], save: bool):
    """Export live records as CSV or JSON."""
    if output is not None and save:
        raise click.UsageError("Cannot use both --output and --save. Choose one.")

    with ctx.open_reader() as reader:
        try:
            if fmt == "csv":
                from dbf3reader.export.csv_export import export_csv
                data = export_csv(reader)
            else:
                from dbf3reader.export.json_export import export_json
                data = export_json(reader)
        except _READ_ERRORS as e:
            raise click.ClickException(str(e)) from e

    if save:
        output = derive_export_path(ctx.dbf, fmt)

    if output:
        output.write_text(data, encoding="utf-8")
        click.echo(f"Exported to {output}")
    else:
        click.echo(data, nl=False)
