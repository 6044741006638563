"""
Spreadsheet and delimited-text ingestion for inventory catalogs.

Format detection -> header mapping -> row normalization, producing the
canonical record list that the upload orchestrator sends to the backend.
"""

from .exceptions import (
    EmptyInputError,
    FileTooLargeError,
    IngestionError,
    MissingColumnsError,
    UnreadableInputError,
    UnsupportedFileTypeError,
)
from .pipeline import IngestionResult, parse_delete_file, parse_inventory_file

__all__ = [
    "EmptyInputError",
    "FileTooLargeError",
    "IngestionError",
    "IngestionResult",
    "MissingColumnsError",
    "UnreadableInputError",
    "UnsupportedFileTypeError",
    "parse_delete_file",
    "parse_inventory_file",
]
