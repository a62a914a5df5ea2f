"""Seek-and-read helpers over a binary byte source."""
from __future__ import annotations

from typing import BinaryIO


def read_exact(source: BinaryIO, size: int) -> bytes:
    """Read exactly `size` bytes from the current position.

    Raises EOFError on a short read so that truncated files and
    out-of-range record indices fail loudly instead of decoding garbage.
    """
    pos = source.tell()
    data = source.read(size)
    if len(data) != size:
        raise EOFError(
            f"Short read at offset {pos}: wanted {size} bytes, got {len(data)}"
        )
    return data
