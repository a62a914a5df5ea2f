"""Export records as CSV."""
from __future__ import annotations

import csv
import io
from typing import Optional

from dbf3reader.dbf.reader import DBFReader


def export_csv(reader: DBFReader, start: int = 0, stop: Optional[int] = None) -> str:
    """Export live records as a CSV string, one column per field."""
    output = io.StringIO()
    writer = csv.writer(output)

    # Header
    names = reader.field_names()
    writer.writerow(names)

    for _, rec in reader.iter_records(start=start, stop=stop):
        writer.writerow([rec[name] for name in names])

    return output.getvalue()
