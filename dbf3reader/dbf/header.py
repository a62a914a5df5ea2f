"""DBF header and field-descriptor table parser (dBase III, version 0x03)."""
from __future__ import annotations

import logging
import struct
from typing import BinaryIO

from dbf3reader.config import DEFAULT_DECODE_ERRORS, DEFAULT_ENCODING
from dbf3reader.dbf.constants import (
    FIELD_DESCRIPTOR_SIZE,
    FIELD_TABLE_OFFSET,
    HEADER_TERMINATOR,
    SUPPORTED_TYPES,
    VERSION_DBASE3,
)
from dbf3reader.dbf.errors import FormatError
from dbf3reader.dbf.records import FieldDescriptor, Schema
from dbf3reader.dbf.source import read_exact

log = logging.getLogger(__name__)

# Struct formats (little-endian, no padding)
_HEADER_FMT = struct.Struct("<BBBBIHH20x")  # version + y/m/d + nrec(4) + headerlen(2) + recordlen(2) + reserved(20)
_FIELD_FMT = struct.Struct("<11ssIBB14x")   # name(11) + type(1) + offset(4) + len(1) + decimals(1) + reserved(14)


def field_name(raw: bytes, encoding: str = DEFAULT_ENCODING,
               errors: str = DEFAULT_DECODE_ERRORS) -> str:
    """Decode an 11-byte name buffer, stopping at the first null byte.

    Anything after the first null is ignored, even if non-null bytes
    follow it (some writers leave garbage there). Names share the
    encoding of the table's character data.
    """
    name = raw.split(b"\x00", 1)[0]
    try:
        return name.decode(encoding, errors=errors)
    except UnicodeDecodeError:
        raise FormatError(f"Field name {name!r} is not valid {encoding}") from None


def parse_field(data: bytes, encoding: str = DEFAULT_ENCODING,
                errors: str = DEFAULT_DECODE_ERRORS) -> FieldDescriptor:
    """Parse a single 32-byte field descriptor."""
    raw_name, raw_type, offset, length, decimals = _FIELD_FMT.unpack(data)
    name = field_name(raw_name, encoding, errors)
    type_tag = raw_type.decode("latin-1")
    if type_tag not in SUPPORTED_TYPES:
        raise FormatError(
            f"Unsupported type {type_tag!r} for field {name!r} "
            f"(expected one of {', '.join(sorted(SUPPORTED_TYPES))})"
        )
    return FieldDescriptor(
        name=name,
        type=type_tag,
        offset=offset,
        length=length,
        decimal_places=decimals,
    )


def parse_header(source: BinaryIO, encoding: str = DEFAULT_ENCODING,
                 errors: str = DEFAULT_DECODE_ERRORS) -> Schema:
    """Parse the file header and field table into a Schema.

    The source may be positioned anywhere; it is left just past the
    header terminator. Any failure aborts the parse, no partial schema
    is ever returned. `encoding` and `errors` apply to field names.
    """
    source.seek(0)
    version, year, month, day, nrec, header_len, record_len = \
        _HEADER_FMT.unpack(read_exact(source, _HEADER_FMT.size))

    if version != VERSION_DBASE3:
        raise FormatError(
            f"Unsupported file version 0x{version:02X} (expected 0x{VERSION_DBASE3:02X})"
        )

    log.debug("Header len: %d, record len: %d, records: %d", header_len, record_len, nrec)

    source.seek(FIELD_TABLE_OFFSET)
    fields = []
    for _ in range(FIELD_TABLE_OFFSET, header_len - 1, FIELD_DESCRIPTOR_SIZE):
        f = parse_field(read_exact(source, FIELD_DESCRIPTOR_SIZE), encoding, errors)
        log.debug("New field: %s", f)
        fields.append(f)

    eoh = source.read(1)
    if eoh != bytes([HEADER_TERMINATOR]):
        found = f"0x{eoh[0]:02X}" if eoh else "end of stream"
        raise FormatError(
            f"Header was supposed to be {header_len} bytes long, but found {found} "
            f"at that offset instead of expected byte 0x{HEADER_TERMINATOR:02X}"
        )

    return Schema(
        version=version,
        year=year,
        month=month,
        day=day,
        record_count=nrec,
        header_length=header_len,
        record_length=record_len,
        fields=tuple(fields),
    )
