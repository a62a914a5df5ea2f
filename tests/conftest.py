"""
Pytest configuration for the dBase III reader.

Provides fixtures for:
- Building synthetic DBF files in memory
- A small "people" table with live, deleted, and edge-case records
- Isolating the TOML profile config from the user's real config dir
"""

from __future__ import annotations

import io
import struct
from pathlib import Path
from typing import Callable, Optional, Union

import pytest

_HEADER = struct.Struct("<BBBBIHH20x")
_FIELD = struct.Struct("<11ssIBB14x")

FieldSpec = tuple[Union[str, bytes], str, int, int]


def build_dbf(
    fields: list[FieldSpec],
    records: list[Union[str, bytes]],
    *,
    version: int = 0x03,
    date: tuple[int, int, int] = (124, 1, 2),
    record_count: Optional[int] = None,
    header_length: Optional[int] = None,
    record_length: Optional[int] = None,
    terminator: bytes = b"\r",
    trailer: bytes = b"\x1a",
) -> bytes:
    """
    Assemble a DBF image.

    Each field is (name, type, length, decimals); names may be bytes to
    inject garbage after the null terminator. Records are given whole,
    deletion flag included.
    """
    if header_length is None:
        header_length = 32 + 32 * len(fields) + 1
    if record_length is None:
        record_length = 1 + sum(f[2] for f in fields)
    if record_count is None:
        record_count = len(records)

    year, month, day = date
    out = bytearray(
        _HEADER.pack(version, year, month, day, record_count, header_length, record_length)
    )

    offset = 1
    for name, ftype, length, decimals in fields:
        raw_name = name if isinstance(name, bytes) else name.encode("ascii")
        out += _FIELD.pack(raw_name.ljust(11, b"\x00")[:11], ftype.encode("latin-1"),
                           offset, length, decimals)
        offset += length

    out += terminator
    for rec in records:
        out += rec if isinstance(rec, bytes) else rec.encode("latin-1")
    out += trailer
    return bytes(out)


PEOPLE_FIELDS: list[FieldSpec] = [
    ("name", "C", 10, 0),
    ("age", "N", 3, 0),
    ("score", "F", 6, 2),
]

PEOPLE_RECORDS = [
    " " + "  hello   " + "025" + "  1.50",
    "*" + "bob       " + " 30" + "  2.00",
    " " + "carol     " + "  7" + "-3.25 ",
    " " + "          " + "100" + "  0.00",
]


@pytest.fixture
def make_dbf() -> Callable[..., bytes]:
    """The build_dbf helper, for tests that need custom layouts."""
    return build_dbf


@pytest.fixture
def people_bytes() -> bytes:
    return build_dbf(PEOPLE_FIELDS, PEOPLE_RECORDS)


@pytest.fixture
def people_source(people_bytes: bytes) -> io.BytesIO:
    return io.BytesIO(people_bytes)


@pytest.fixture
def people_path(tmp_path: Path, people_bytes: bytes) -> Path:
    path = tmp_path / "people.dbf"
    path.write_bytes(people_bytes)
    return path


@pytest.fixture(autouse=True)
def config_path(tmp_path: Path, monkeypatch) -> Path:
    """
    Redirect profile storage to a temporary file, so no test sees the
    user's real config.
    """
    path = tmp_path / "config" / "config.toml"
    monkeypatch.setattr("dbf3reader.profiles.get_config_path", lambda: path)
    return path
