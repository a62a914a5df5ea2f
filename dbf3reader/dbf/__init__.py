"""Low-level DBF parsing: header, field descriptors, and records."""
from __future__ import annotations

from dbf3reader.dbf.errors import DBFError, DeletedRecordError, FieldValueError, FormatError
from dbf3reader.dbf.reader import DBFReader
from dbf3reader.dbf.records import FieldDescriptor, FieldValue, Record, Schema

__all__ = [
    "DBFError",
    "DBFReader",
    "DeletedRecordError",
    "FieldDescriptor",
    "FieldValue",
    "FieldValueError",
    "FormatError",
    "Record",
    "Schema",
]
