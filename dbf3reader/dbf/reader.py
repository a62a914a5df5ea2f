"""High-level reader over a dBase III file."""
from __future__ import annotations

import threading
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from dbf3reader.config import DEFAULT_DECODE_ERRORS, DEFAULT_ENCODING
from dbf3reader.dbf.decoder import RecordDecoder
from dbf3reader.dbf.errors import DeletedRecordError
from dbf3reader.dbf.header import parse_header
from dbf3reader.dbf.records import Record, Schema


class DBFReader:
    """Reader for dBase III (version 0x03) tables.

    Parses the header on construction and decodes records on demand by
    index. The reader serializes all access to `source` with one lock, so
    it can be shared across threads.
    """

    def __init__(self, source: BinaryIO, encoding: str = DEFAULT_ENCODING,
                 errors: str = DEFAULT_DECODE_ERRORS):
        self.source = source
        self._lock = threading.Lock()
        self._owns_source = False
        with self._lock:
            self.schema: Schema = parse_header(source, encoding=encoding, errors=errors)
        self._decoder = RecordDecoder(self.schema, source, lock=self._lock,
                                      encoding=encoding, errors=errors)

    @classmethod
    def open(cls, path: Path, encoding: str = DEFAULT_ENCODING,
             errors: str = DEFAULT_DECODE_ERRORS) -> DBFReader:
        """Open a DBF file by path. The reader closes it on close()."""
        f = open(path, "rb")
        try:
            reader = cls(f, encoding=encoding, errors=errors)
        except BaseException:
            f.close()
            raise
        reader._owns_source = True
        return reader

    def close(self):
        if self._owns_source:
            self.source.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def __len__(self) -> int:
        """Declared number of records (deleted ones included)."""
        return self.schema.record_count

    def mod_date(self) -> tuple[int, int, int]:
        return self.schema.last_modified

    def field_name(self, i: int) -> str:
        return self.schema.field_name(i)

    def field_names(self) -> list[str]:
        return self.schema.field_names

    def read(self, index: int, timeout: Optional[float] = None) -> Record:
        """Decode one record. Raises DeletedRecordError for deleted rows."""
        return self._decoder.decode(index, timeout=timeout)

    def iter_records(self, start: int = 0, stop: Optional[int] = None,
                     skip_deleted: bool = True) -> Iterator[tuple[int, Record]]:
        """Yield (index, record) for records in [start, stop).

        `stop` defaults to the declared record count. Deleted records are
        skipped unless `skip_deleted` is False, in which case
        DeletedRecordError propagates like any other error.
        """
        if stop is None:
            stop = self.schema.record_count
        for i in range(start, stop):
            try:
                rec = self.read(i)
            except DeletedRecordError:
                if skip_deleted:
                    continue
                raise
            yield i, rec


def main():
    """Quick test: parse a DBF header and print the first records."""
    import sys
    if len(sys.argv) < 2:
        print("Usage: python -m dbf3reader.dbf.reader <path/to/table.dbf>")
        sys.exit(1)

    path = Path(sys.argv[1])
    with DBFReader.open(path) as reader:
        schema = reader.schema
        year, month, day = reader.mod_date()
        print(f"{path.name}: {len(reader):,} records, modified {year:04d}-{month:02d}-{day:02d}")
        print(f"Header len: {schema.header_length}  Record len: {schema.record_length}\n")

        print(f"{'Name':<12} {'Type':<5} {'Len':>4} {'Dec':>4}")
        print("-" * 28)
        for f in schema.fields:
            print(f"{f.name:<12} {f.type:<5} {f.length:>4} {f.decimal_places:>4}")

        print("\nFirst records:")
        for i, rec in reader.iter_records(stop=min(5, len(reader))):
            print(f"  #{i}: {rec}")


if __name__ == "__main__":
    main()
