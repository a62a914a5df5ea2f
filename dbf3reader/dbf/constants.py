"""DBF format constants and magic bytes."""

# Version byte of a plain dBase III file (no memo)
VERSION_DBASE3 = 0x03

FIELD_DESCRIPTOR_SIZE = 32  # One entry in the field table
FIELD_TABLE_OFFSET = 0x20   # Field table starts right after the header

HEADER_TERMINATOR = 0x0D    # Ends the field table

# Deletion flag (first byte of every record)
FLAG_LIVE = b" "
FLAG_DELETED = b"*"

# Field type tags
TYPE_CHARACTER = "C"
TYPE_NUMERIC = "N"
TYPE_FLOAT = "F"

SUPPORTED_TYPES = frozenset({TYPE_CHARACTER, TYPE_NUMERIC, TYPE_FLOAT})

# dBase stores the year as an offset from 1900
YEAR_BASE = 1900

FIELD_TYPE_NAMES: dict[str, str] = {
    TYPE_CHARACTER: "character",
    TYPE_NUMERIC: "numeric",
    TYPE_FLOAT: "float",
}
