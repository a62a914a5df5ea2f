"""Default paths and constants for reading DBF tables."""
from pathlib import Path

# Character/numeric fields are ASCII text in dBase III files; undecodable
# bytes are a format error unless a lossy handler is chosen
DEFAULT_ENCODING = "ascii"
DEFAULT_DECODE_ERRORS = "strict"
DECODE_ERROR_HANDLERS = ("strict", "replace", "ignore")

EXPORT_FORMATS = ("csv", "json")
DEFAULT_EXPORT_FORMAT = "csv"

APP_NAME = "dbf3"


def derive_export_path(dbf: Path, fmt: str) -> Path:
    """Derive export file path from DBF path (sibling with the format's suffix)."""
    return dbf.with_suffix(f".{fmt}")
