import csv
import logging
import re
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

TAB = "\t"
COMMA = ","

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def decode_text(file_content: bytes) -> str:
    """
    Decode delimited text as UTF-8, tolerating the BOM spreadsheet tools prepend.

    Raises:
        UnicodeDecodeError: If the bytes are not valid UTF-8
    """
    return file_content.decode("utf-8-sig")


def split_lines(text_content: str) -> List[str]:
    """
    Split text on CR/LF boundaries.

    Trailing empty lines (usually a final newline) are dropped so they do not
    show up as blank data rows; blank lines in the middle are kept to preserve
    row ordinals.
    """
    lines = _LINE_BREAK.split(text_content)
    while lines and not lines[-1].strip():
        lines.pop()
    return lines


def detect_delimiter(header_line: str) -> str:
    """
    Pick tab or comma by counting both in the header line.

    Tab wins only when it occurs strictly more often; ties (including a header
    with neither) fall back to comma.

    Examples:
        "a\\tb\\tc" -> "\\t"
        "a,b,c" -> ","
    """
    tab_count = header_line.count(TAB)
    comma_count = header_line.count(COMMA)
    return TAB if tab_count > comma_count else COMMA


def parse_delimited_line(line: str, delimiter: str) -> List[str]:
    """
    Split one line into trimmed fields using standard CSV quoting.

    A doubled quote inside a quoted field is a literal quote and a delimiter
    inside quotes does not split the field.
    """
    if not line.strip():
        return []
    reader = csv.reader([line], delimiter=delimiter, quotechar='"', doublequote=True, skipinitialspace=True)
    fields = next(reader, [])
    return [value.strip() for value in fields]


def read_delimited_rows(text_content: str) -> Tuple[Optional[str], List[List[str]]]:
    """
    Parse decoded delimited text into rows of trimmed string cells.

    Args:
        text_content: Decoded file content

    Returns:
        Tuple of (delimiter, rows). Rows hold the header followed by data rows;
        blank lines become empty rows. When the content has no lines at all the
        delimiter is None and rows is empty.
    """
    lines = split_lines(text_content)
    if not lines:
        return None, []

    delimiter = detect_delimiter(lines[0])
    logger.info("Detected delimiter: %s", "TAB" if delimiter == TAB else "COMMA")

    rows: List[List[str]] = []
    for line_number, line in enumerate(lines):
        try:
            rows.append(parse_delimited_line(line, delimiter))
        except csv.Error as e:
            # Keep the slot so later row ordinals still line up with the file.
            logger.warning(f"Error splitting line {line_number}: {e}")
            rows.append([])

    logger.info(f"Parsed {len(rows)} delimited lines ({len(rows) - 1} data rows)")
    return delimiter, rows
