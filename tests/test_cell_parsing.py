from datetime import datetime
from decimal import Decimal

from pharmadmin.utils.cells import cell_text, parse_decimal, parse_int, strip_currency


def test_parse_decimal_strips_currency_and_thousands():
    assert parse_decimal("₹1,250.50") == Decimal("1250.50")
    assert parse_decimal("$ 99") == Decimal("99")


def test_parse_decimal_handles_typed_cells():
    assert parse_decimal(42) == Decimal("42")
    assert parse_decimal(0.1) == Decimal("0.1")
    assert parse_decimal(float("nan")) is None
    assert parse_decimal(float("inf")) is None


def test_parse_decimal_unparseable_is_none():
    assert parse_decimal("N/A") is None
    assert parse_decimal("₹") is None
    assert parse_decimal(None) is None
    assert parse_decimal("") is None


def test_parse_int_truncates_toward_zero():
    assert parse_int("150.0") == 150
    assert parse_int("7.9") == 7
    assert parse_int("-2.5") == -2
    assert parse_int(12.99) == 12


def test_parse_int_rejects_non_numbers():
    assert parse_int("ten") is None
    assert parse_int("") is None
    assert parse_int(None) is None
    assert parse_int(True) is None


def test_strip_currency():
    assert strip_currency("₹ 1,00,000") == "100000"


def test_cell_text_renders_spreadsheet_scalars():
    assert cell_text(10.0) == "10"
    assert cell_text(10.5) == "10.5"
    assert cell_text("  Crocin  ") == "Crocin"
    assert cell_text("   ") is None
    assert cell_text(float("nan")) is None
    assert cell_text(datetime(2024, 1, 31)) == "2024-01-31T00:00:00"
