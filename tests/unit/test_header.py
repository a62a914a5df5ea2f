from __future__ import annotations

import dataclasses
import io
import re

import pytest

from dbf3reader.dbf.errors import FormatError
from dbf3reader.dbf.header import field_name, parse_header


def test_parse_header_reads_counts_and_lengths(people_source) -> None:
    schema = parse_header(people_source)

    assert schema.version == 0x03
    assert schema.record_count == 4
    assert schema.header_length == 32 + 3 * 32 + 1
    assert schema.record_length == 20
    assert schema.last_modified == (2024, 1, 2)


def test_parse_header_reads_field_descriptors(people_source) -> None:
    schema = parse_header(people_source)

    assert schema.field_names == ["name", "age", "score"]
    assert schema.field_name(1) == "age"
    score = schema.fields[2]
    assert score.type == "F"
    assert score.length == 6
    assert score.decimal_places == 2
    # Offset is recorded as stored, not recomputed
    assert score.offset == 14


@pytest.mark.parametrize("count", [0, 1, 3, 7])
def test_field_count_matches_header_length(make_dbf, count: int) -> None:
    fields = [(f"F{i}", "C", 2, 0) for i in range(count)]
    schema = parse_header(io.BytesIO(make_dbf(fields, [])))

    assert schema.field_count == (schema.header_length - 0x20 - 1) // 32 == count


def test_parse_header_seeks_to_start(people_source) -> None:
    people_source.seek(77)
    schema = parse_header(people_source)
    assert schema.record_count == 4


def test_parse_header_leaves_source_after_terminator(people_source) -> None:
    schema = parse_header(people_source)
    assert people_source.tell() == schema.header_length


@pytest.mark.parametrize("version", [0x00, 0x02, 0x04, 0x83, 0x8B, 0xF5])
def test_unsupported_version_fails(make_dbf, version: int) -> None:
    data = make_dbf([("name", "C", 5, 0)], [], version=version)
    with pytest.raises(FormatError, match="version"):
        parse_header(io.BytesIO(data))


@pytest.mark.parametrize("tag", ["D", "L", "M", "c", "?"])
def test_unknown_field_type_fails(make_dbf, tag: str) -> None:
    data = make_dbf([("name", "C", 5, 0), ("when", tag, 8, 0)], [])
    with pytest.raises(FormatError, match=re.escape(repr(tag))):
        parse_header(io.BytesIO(data))


def test_unknown_field_type_stops_parsing(make_dbf) -> None:
    data = make_dbf([("when", "D", 8, 0), ("name", "C", 5, 0)], [])
    # Cut the file right after the bad descriptor; the rest must never be read
    truncated = data[:64]
    with pytest.raises(FormatError, match="'D'"):
        parse_header(io.BytesIO(truncated))


@pytest.mark.parametrize("count", [0, 1, 4])
@pytest.mark.parametrize("terminator", [b"\x00", b" ", b"\x0a", b"\x1a"])
def test_bad_terminator_fails(make_dbf, count: int, terminator: bytes) -> None:
    fields = [(f"F{i}", "N", 4, 0) for i in range(count)]
    data = make_dbf(fields, [], terminator=terminator)
    with pytest.raises(FormatError, match="0x0D") as exc:
        parse_header(io.BytesIO(data))
    assert str(32 + 32 * count + 1) in str(exc.value)


def test_missing_terminator_at_end_of_stream_fails(make_dbf) -> None:
    data = make_dbf([("name", "C", 5, 0)], [], terminator=b"", trailer=b"")
    with pytest.raises(FormatError, match="end of stream"):
        parse_header(io.BytesIO(data))


def test_header_length_too_short_finds_wrong_terminator(make_dbf) -> None:
    # Declared header covers one field, but two are present
    data = make_dbf([("a", "C", 1, 0), ("b", "C", 1, 0)], [], header_length=65)
    with pytest.raises(FormatError, match="65 bytes"):
        parse_header(io.BytesIO(data))


def test_truncated_header_is_an_io_error() -> None:
    with pytest.raises(EOFError):
        parse_header(io.BytesIO(b"\x03\x7c\x01\x02"))


def test_truncated_field_table_is_an_io_error(make_dbf) -> None:
    data = make_dbf([("name", "C", 5, 0), ("age", "N", 3, 0)], [])
    with pytest.raises(EOFError):
        parse_header(io.BytesIO(data[:80]))


def test_field_name_stops_at_first_null() -> None:
    assert field_name(b"NAME\x00\x00GARBA") == "NAME"
    assert field_name(b"NAME\x00\x00\x00\x00\x00\x00\x00") == "NAME"


def test_field_name_uses_all_bytes_without_null() -> None:
    assert field_name(b"ABCDEFGHIJK") == "ABCDEFGHIJK"


def test_field_name_uses_table_encoding() -> None:
    assert field_name(b"CIT\xc9\x00\x00\x00\x00\x00\x00\x00", "latin-1") == "CIT\u00c9"
    assert field_name(b"CIT\xc9\x00", "ascii", "replace") == "CIT\ufffd"


def test_undecodable_field_name_is_format_error() -> None:
    with pytest.raises(FormatError, match="is not valid ascii"):
        field_name(b"CIT\xc9\x00")


def test_parse_header_decodes_names_with_encoding(make_dbf) -> None:
    data = make_dbf([(b"CIT\xc9", "C", 5, 0), ("POP", "N", 6, 0)], [])

    assert parse_header(io.BytesIO(data), encoding="cp1252").field_names == ["CIT\u00c9", "POP"]
    with pytest.raises(FormatError, match="Field name"):
        parse_header(io.BytesIO(data))


def test_field_name_with_garbage_in_descriptor(make_dbf) -> None:
    data = make_dbf([(b"NAME\x00GARBAGE", "C", 5, 0)], [" alice"])
    schema = parse_header(io.BytesIO(data))
    assert schema.field_names == ["NAME"]


def test_duplicate_names_are_kept(make_dbf) -> None:
    data = make_dbf([("X", "C", 1, 0), ("X", "N", 1, 0)], [])
    schema = parse_header(io.BytesIO(data))
    assert schema.field_names == ["X", "X"]


def test_schema_is_immutable(people_source) -> None:
    schema = parse_header(people_source)
    with pytest.raises(dataclasses.FrozenInstanceError):
        schema.record_count = 0  # type: ignore[misc]
    assert isinstance(schema.fields, tuple)


def test_record_offset(people_source) -> None:
    schema = parse_header(people_source)
    assert schema.record_offset(0) == schema.header_length
    assert schema.record_offset(3) == schema.header_length + 3 * schema.record_length


def test_check_layout_is_quiet_for_consistent_table(people_source) -> None:
    assert parse_header(people_source).check_layout() == []


def test_check_layout_reports_overlong_fields(make_dbf) -> None:
    data = make_dbf([("a", "C", 10, 0), ("a", "N", 5, 0)], [], record_length=8)
    warnings = parse_header(io.BytesIO(data)).check_layout()

    assert any("record length is 8" in w for w in warnings)
    assert any("Duplicate field names: a" in w for w in warnings)
