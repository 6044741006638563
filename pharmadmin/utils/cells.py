"""
Cell coercion helpers shared by the inventory parsers.

Cells arrive either as strings (delimited text) or as typed scalars
(spreadsheets), so every helper accepts both.
"""
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
import math
import numbers
from typing import Any, Optional

CURRENCY_GLYPHS = ("₹", "$")
THOUSANDS_SEPARATOR = ","


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return False


def cell_text(value: Any) -> Optional[str]:
    """
    Render a cell as trimmed text; blank cells become None.

    Integral floats lose their ".0" so spreadsheet numbers read the same as
    they would in a CSV export (10.0 -> "10").
    """
    if _is_missing(value):
        return None
    if isinstance(value, bool):
        text = str(value)
    elif isinstance(value, float) and value.is_integer():
        text = str(int(value))
    elif isinstance(value, (datetime, date)):
        text = value.isoformat()
    else:
        text = str(value)
    text = text.strip()
    return text or None


def parse_int(value: Any) -> Optional[int]:
    """
    Parse a whole number from a cell.

    Decimal parsing is attempted first and truncated toward zero ("150.0" -> 150,
    "7.9" -> 7), then a plain integer parse. Returns None when the cell is blank
    or not numeric.
    """
    if _is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real):
        if math.isinf(value):
            return None
        return int(value)

    text = cell_text(value)
    if text is None:
        return None
    try:
        parsed = Decimal(text)
        if parsed.is_finite():
            return int(parsed)
    except (InvalidOperation, ValueError):
        pass
    try:
        return int(text)
    except ValueError:
        return None


def strip_currency(text: str) -> str:
    """Drop currency glyphs and thousands separators: "₹1,250.50" -> "1250.50"."""
    for glyph in CURRENCY_GLYPHS:
        text = text.replace(glyph, "")
    return text.replace(THOUSANDS_SEPARATOR, "").strip()


def parse_decimal(value: Any) -> Optional[Decimal]:
    """
    Parse a money amount from a cell.

    Currency glyphs (₹, $) and thousands separators are removed first. Returns
    None when the cell is blank or the remainder is not a finite number.

    Examples:
        "₹1,250.50" -> Decimal("1250.50")
        "$ 99" -> Decimal("99")
        "N/A" -> None
    """
    if _is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, numbers.Integral):
        return Decimal(int(value))
    if isinstance(value, numbers.Real):
        if math.isinf(value):
            return None
        # str() first so 0.1 stays 0.1 instead of its binary expansion
        return Decimal(str(value))

    text = cell_text(value)
    if text is None:
        return None
    cleaned = strip_currency(text)
    if not cleaned:
        return None
    try:
        parsed = Decimal(cleaned)
    except (InvalidOperation, ValueError):
        return None
    return parsed if parsed.is_finite() else None
