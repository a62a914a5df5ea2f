"""Random-access record decoder for dBase III tables."""
from __future__ import annotations

import threading
from typing import BinaryIO, Optional

from dbf3reader.config import DEFAULT_DECODE_ERRORS, DEFAULT_ENCODING
from dbf3reader.dbf.constants import (
    FLAG_DELETED,
    FLAG_LIVE,
    TYPE_CHARACTER,
    TYPE_FLOAT,
    TYPE_NUMERIC,
)
from dbf3reader.dbf.errors import DeletedRecordError, FieldValueError, FormatError
from dbf3reader.dbf.records import FieldDescriptor, FieldValue, Record, Schema
from dbf3reader.dbf.source import read_exact


class RecordDecoder:
    """Decode records of a parsed table by zero-based index.

    Holds no per-read state. The seek position of `source` is shared, so
    every decode runs its seek+reads under `lock`; pass the same lock to
    anything else that reads the same source.
    """

    def __init__(self, schema: Schema, source: BinaryIO,
                 lock: Optional[threading.Lock] = None,
                 encoding: str = DEFAULT_ENCODING,
                 errors: str = DEFAULT_DECODE_ERRORS):
        self.schema = schema
        self.source = source
        self.lock = lock if lock is not None else threading.Lock()
        self.encoding = encoding
        self.errors = errors
        self._data_length = sum(f.length for f in schema.fields)

    def decode(self, index: int, timeout: Optional[float] = None) -> Record:
        """Decode record `index`.

        Negative indices raise IndexError. The index is not checked against
        the declared record count; reading past the end of the data raises
        EOFError. With `timeout`, waiting for the source lock is bounded and
        TimeoutError is raised on expiry.
        """
        if index < 0:
            raise IndexError(f"Record index must be zero or positive, got {index}")
        raw = self._read_raw(index, timeout)

        rec: Record = {}
        pos = 0
        for f in self.schema.fields:
            rec[f.name] = self._decode_field(f, raw[pos:pos + f.length], index)
            pos += f.length
        return rec

    def _read_raw(self, index: int, timeout: Optional[float]) -> bytes:
        """Read the flag and field bytes of one record inside the lock."""
        if timeout is None:
            acquired = self.lock.acquire()
        else:
            acquired = self.lock.acquire(timeout=timeout)
        if not acquired:
            raise TimeoutError(f"Timed out after {timeout}s waiting to read record {index}")
        try:
            offset = self.schema.record_offset(index)
            self.source.seek(offset)
            flag = read_exact(self.source, 1)
            if flag == FLAG_DELETED:
                raise DeletedRecordError(index)
            if flag != FLAG_LIVE:
                raise FormatError(
                    f"Record {index} at offset {offset}: invalid deletion flag {flag!r} "
                    f"(expected {FLAG_LIVE!r} or {FLAG_DELETED!r})"
                )
            return read_exact(self.source, self._data_length)
        finally:
            self.lock.release()

    def _decode_field(self, f: FieldDescriptor, data: bytes, index: int) -> FieldValue:
        try:
            text = data.decode(self.encoding, errors=self.errors).strip()
        except UnicodeDecodeError:
            raise FormatError(
                f"Record {index}: field {f.name!r} is not valid {self.encoding}: {data!r}"
            ) from None
        if f.type == TYPE_CHARACTER:
            return text
        if f.type == TYPE_NUMERIC:
            return _parse_number(int, f, text, index)
        if f.type == TYPE_FLOAT:
            return _parse_number(float, f, text, index)
        # Schemas from parse_header never get here
        raise FormatError(f"Field {f.name!r} has unsupported type {f.type!r}")


def _parse_number(kind, f: FieldDescriptor, text: str, index: int):
    """Parse base-10 text with int() or float(), without Python literal extras."""
    # int()/float() accept digit separators, which dBase never writes
    if "_" in text:
        raise FieldValueError(f.name, f.type, index, text)
    try:
        return kind(text)
    except ValueError:
        raise FieldValueError(f.name, f.type, index, text) from None
