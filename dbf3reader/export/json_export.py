"""Export records as JSON."""
from __future__ import annotations

import json
import math
from typing import Optional

from dbf3reader.dbf.reader import DBFReader
from dbf3reader.dbf.records import Record


def json_values(rec: Record) -> dict:
    """Record values with NaN/inf floats as None, which JSON can hold."""
    return {
        name: None if isinstance(value, float) and not math.isfinite(value) else value
        for name, value in rec.items()
    }


def export_json(reader: DBFReader, start: int = 0, stop: Optional[int] = None) -> str:
    """Export table metadata and live records as a JSON string."""
    schema = reader.schema
    year, month, day = schema.last_modified

    data = {
        "last_modified": f"{year:04d}-{month:02d}-{day:02d}",
        "record_count": schema.record_count,
        "fields": [
            {
                "name": f.name,
                "type": f.type,
                "length": f.length,
                "decimal_places": f.decimal_places,
            }
            for f in schema.fields
        ],
        "records": [
            {"index": i, "values": json_values(rec)}
            for i, rec in reader.iter_records(start=start, stop=stop)
        ],
    }

    return json.dumps(data, indent=2, allow_nan=False)
