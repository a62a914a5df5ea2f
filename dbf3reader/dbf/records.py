"""Field descriptor, schema, and record types for DBF parsing."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from dbf3reader.dbf.constants import FIELD_TABLE_OFFSET, YEAR_BASE

# Decoded value of one field: C -> str, N -> int, F -> float
FieldValue = Union[str, int, float]

# One decoded row, keyed by field name
Record = dict[str, FieldValue]


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """One column of a DBF table."""
    name: str            # Logical name (trimmed at first null)
    type: str            # 'C', 'N' or 'F'
    offset: int          # Offset stored in the descriptor (informational)
    length: int          # Width in bytes within a record
    decimal_places: int  # Stored only; N/F text carries its own decimals


@dataclass(frozen=True, slots=True)
class Schema:
    """Parsed file header plus field table. Immutable once built."""
    version: int
    year: int            # Offset from 1900, as stored
    month: int
    day: int
    record_count: int    # Declared, not checked against file size
    header_length: int   # Includes field table and terminator
    record_length: int   # Includes the deletion flag byte
    fields: tuple[FieldDescriptor, ...] = ()

    @property
    def last_modified(self) -> tuple[int, int, int]:
        """(year, month, day) of the last update."""
        return YEAR_BASE + self.year, self.month, self.day

    @property
    def field_count(self) -> int:
        return len(self.fields)

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def field_name(self, i: int) -> str:
        return self.fields[i].name

    def record_offset(self, index: int) -> int:
        """Absolute byte offset of record `index` (its deletion flag)."""
        return self.header_length + self.record_length * index

    def check_layout(self) -> list[str]:
        """Return warnings about lengths that don't add up.

        The parser never calls this; declared lengths are trusted and any
        mismatch surfaces when records are decoded.
        """
        warnings = []
        data_length = 1 + sum(f.length for f in self.fields)
        if data_length > self.record_length:
            warnings.append(
                f"Fields need {data_length} bytes per record (with deletion flag) "
                f"but record length is {self.record_length}"
            )
        table_length = self.header_length - FIELD_TABLE_OFFSET - 1
        if table_length < 0 or table_length % 32:
            warnings.append(
                f"Header length {self.header_length} does not hold a whole "
                f"number of field descriptors"
            )
        names = self.field_names
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            warnings.append(f"Duplicate field names: {', '.join(duplicates)}")
        return warnings
