"""
Format detection for inventory source files.

Decides whether a file is delimited text or a spreadsheet container, resolves
the dialect (delimiter or sheet), and exposes the content as a RawTable.
"""

import logging
from pathlib import PurePath
from typing import Optional

from .exceptions import EmptyInputError, UnreadableInputError, UnsupportedFileTypeError
from .models import Dialect, FileKind, RawTable
from .processors.delimited_processor import decode_text, read_delimited_rows
from .processors.excel_processor import looks_like_workbook, read_first_sheet

logger = logging.getLogger(__name__)

DELIMITED_EXTENSIONS = {"csv", "tsv", "txt"}
SPREADSHEET_EXTENSIONS = {"xlsx", "xlsm"}


def _normalize_extension(extension_or_name: Optional[str]) -> str:
    if not extension_or_name:
        return ""
    value = extension_or_name.strip().lower()
    if "." in value:
        value = PurePath(value).suffix or value.rsplit(".", 1)[-1]
    return value.lstrip(".")


def detect_file_type(file_name: Optional[str], file_content: Optional[bytes] = None) -> FileKind:
    """
    Detect file kind from the file name, falling back to content sniffing.

    Args:
        file_name: File name or bare extension ("csv", ".xlsx", "stock.csv")
        file_content: Optional raw bytes, used when the extension is unknown

    Raises:
        UnsupportedFileTypeError: If neither name nor content identify a format
    """
    extension = _normalize_extension(file_name)
    if extension in DELIMITED_EXTENSIONS:
        return FileKind.DELIMITED
    if extension in SPREADSHEET_EXTENSIONS:
        return FileKind.SPREADSHEET
    if file_content is not None and looks_like_workbook(file_content):
        logger.info(f"Unknown extension '{extension}' but content is a ZIP container; treating as spreadsheet")
        return FileKind.SPREADSHEET
    raise UnsupportedFileTypeError(file_name, DELIMITED_EXTENSIONS | SPREADSHEET_EXTENSIONS)


def read_raw_table(file_content: bytes, extension: Optional[str], *, file_name: Optional[str] = None) -> RawTable:
    """
    Read raw file bytes into a RawTable of header + data rows.

    Args:
        file_content: Raw file bytes
        extension: Declared extension or file name
        file_name: Optional display name used in error messages

    Raises:
        EmptyInputError: If there are no lines / no sheet rows
        UnreadableInputError: If the bytes cannot be decoded
        UnsupportedFileTypeError: If the format is not supported
    """
    display_name = file_name or extension
    if not file_content:
        raise EmptyInputError(display_name)

    kind = detect_file_type(extension, file_content)

    if kind == FileKind.SPREADSHEET:
        try:
            sheet_name, rows = read_first_sheet(file_content)
        except ValueError as e:
            raise UnreadableInputError(str(e), file_name=display_name) from e
        dialect = Dialect(kind=kind, sheet_name=sheet_name)
    else:
        try:
            text_content = decode_text(file_content)
        except UnicodeDecodeError as e:
            raise UnreadableInputError(f"not valid UTF-8 text ({e.reason} at byte {e.start})", file_name=display_name) from e
        delimiter, rows = read_delimited_rows(text_content)
        dialect = Dialect(kind=kind, delimiter=delimiter)

    if not rows or not any(_row_has_content(row) for row in rows):
        raise EmptyInputError(display_name)

    table = RawTable.from_rows(dialect, rows)
    logger.info(f"Detected {dialect.describe()} with {len(table.data_rows)} data rows")
    return table


def _row_has_content(row) -> bool:
    for cell in row:
        if cell is None:
            continue
        if isinstance(cell, str) and not cell.strip():
            continue
        return True
    return False
