"""Exceptions raised while parsing DBF headers and records."""
from __future__ import annotations


class DBFError(Exception):
    """Base class for all DBF reader errors."""


class FormatError(DBFError, ValueError):
    """The byte source does not follow the dBase III layout."""


class FieldValueError(FormatError):
    """A Numeric or Float field holds text that does not parse."""

    def __init__(self, field: str, field_type: str, index: int, raw: str):
        self.field = field
        self.field_type = field_type
        self.index = index
        self.raw = raw
        super().__init__(
            f"Record {index}: field {field!r} ({field_type}) has malformed value {raw!r}"
        )


class DeletedRecordError(DBFError):
    """The requested record is flagged as deleted."""

    def __init__(self, index: int):
        self.index = index
        super().__init__(f"Record {index} is marked as deleted")
