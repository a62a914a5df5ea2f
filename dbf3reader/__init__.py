"""dBase III (DBF) table reader."""

__version__ = "0.1.0"
