"""
Row normalization: one raw row + FieldMapping -> one InventoryRecord or a skip.

Skips are routine (blank lines, section headings, rows without a product
name) and are reported as values, not exceptions. Only unexpected failures
while building a record are logged, and even those only skip their own row.
"""

from dataclasses import dataclass
from decimal import Decimal
import logging
import re
from typing import Any, List, Optional, Sequence, Tuple

from pharmadmin.schemas import InventoryRecord
from pharmadmin.utils.cells import cell_text, parse_decimal, parse_int
from .models import CanonicalField, FieldMapping, IngestionStats, RawTable

logger = logging.getLogger(__name__)

SKIP_BLANK_ROW = "blank_row"
SKIP_MISSING_PRODUCT_NAME = "missing_product_name"
SKIP_PARSE_ERROR = "parse_error"

DEFAULT_INVENTORY_TYPE = "tablet"
DRUG_INTERACTIONS_LABEL = "Drug Interactions"

# Checked in order against the lower-cased product name. Multi-word and more
# specific forms come first ("nasal drops" is drops, "injection solution" is
# an injection, not a syrup); short abbreviations need word boundaries so "tab"
# does not fire inside "stable".
DOSAGE_FORM_PATTERNS: Tuple[Tuple[str, "re.Pattern[str]"], ...] = tuple(
    (form, re.compile(pattern))
    for form, pattern in (
        ("injection", r"injection|\binj\b"),
        ("suspension", r"suspension"),
        ("syrup", r"syrup|solution|oral liquid"),
        ("capsule", r"capsule|\bcaps?\b"),
        ("cream", r"cream|ointment|gel"),
        ("drops", r"drops|\bdrop\b"),
        ("inhaler", r"inhaler|respules"),
        ("powder", r"powder|sachet"),
        ("spray", r"spray|nasal"),
        ("patch", r"patch"),
        ("lotion", r"lotion"),
        ("tablet", r"tablet|\btabs?\b"),
    )
)


@dataclass(frozen=True)
class RowResult:
    """Outcome of normalizing one row: a record, or a skip with its reason."""
    ordinal: int
    record: Optional[InventoryRecord] = None
    skip_reason: Optional[str] = None
    error: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.record is None


def derive_inventory_type(product_name: str) -> str:
    """
    Guess the dosage form from the product name.

    Examples:
        "Amoxicillin 250mg Capsule" -> "capsule"
        "Otrivin Nasal Drops" -> "drops"
        "Paracetamol 500" -> "tablet"
    """
    lowered = product_name.lower()
    for form, pattern in DOSAGE_FORM_PATTERNS:
        if pattern.search(lowered):
            return form
    return DEFAULT_INVENTORY_TYPE


def merge_precautions(precautions: Optional[str], drug_interactions: Optional[str]) -> Optional[str]:
    """Append drug-interaction text to the precautions under its own label."""
    if not drug_interactions:
        return precautions
    labelled = f"{DRUG_INTERACTIONS_LABEL}: {drug_interactions}"
    if precautions:
        return f"{precautions}\n\n{labelled}"
    return labelled


def _cell(row: Sequence[Any], mapping: FieldMapping, canonical: CanonicalField) -> Any:
    index = mapping.get(canonical)
    if index is None or index >= len(row):
        return None
    return row[index]


def _text(row: Sequence[Any], mapping: FieldMapping, canonical: CanonicalField) -> Optional[str]:
    return cell_text(_cell(row, mapping, canonical))


def _price(row: Sequence[Any], mapping: FieldMapping, canonical: CanonicalField, ordinal: int) -> Optional[Decimal]:
    value = parse_decimal(_cell(row, mapping, canonical))
    if value is not None and value < 0:
        logger.debug(f"Row {ordinal}: ignoring negative {canonical.value} {value}")
        return None
    return value


def is_blank_row(row: Sequence[Any]) -> bool:
    return all(cell_text(cell) is None for cell in row)


def build_record(row: Sequence[Any], mapping: FieldMapping, ordinal: int) -> Optional[InventoryRecord]:
    """
    Build an InventoryRecord from a row, or None when it has no product name.

    Args:
        row: Raw cells of one data row
        mapping: Canonical field -> column index
        ordinal: 1-based position of the row in the table (header excluded),
            used as the serial number when the sheet has none
    """
    product_name = _text(row, mapping, CanonicalField.PRODUCT_NAME)
    if not product_name:
        return None

    serial_no = parse_int(_cell(row, mapping, CanonicalField.SERIAL_NO))
    if serial_no is None:
        serial_no = ordinal
    inventory_qty = parse_int(_cell(row, mapping, CanonicalField.INVENTORY_QTY))
    if inventory_qty is None:
        inventory_qty = 0

    mrp = _price(row, mapping, CanonicalField.MRP, ordinal)
    selling_price = _price(row, mapping, CanonicalField.SELLING_PRICE, ordinal)
    # Either price seeds the other; with neither, selling price is 0 and MRP stays unset.
    if mrp is None:
        mrp = selling_price
    if selling_price is None:
        selling_price = mrp if mrp is not None else Decimal("0")

    inventory_type = _text(row, mapping, CanonicalField.INVENTORY_TYPE)
    if not inventory_type:
        inventory_type = derive_inventory_type(product_name)

    precautions = merge_precautions(
        _text(row, mapping, CanonicalField.PRECAUTIONS),
        _text(row, mapping, CanonicalField.DRUG_INTERACTIONS),
    )

    return InventoryRecord(
        serial_no=serial_no,
        product_name=product_name,
        composition=_text(row, mapping, CanonicalField.COMPOSITION),
        company=_text(row, mapping, CanonicalField.COMPANY),
        category=_text(row, mapping, CanonicalField.CATEGORY),
        pack_size=_text(row, mapping, CanonicalField.PACK_SIZE),
        inventory_qty=inventory_qty,
        inventory_type=inventory_type,
        mrp=mrp,
        selling_price=selling_price,
        used_in=_text(row, mapping, CanonicalField.USED_IN),
        precautions=precautions,
        image_url_1=_text(row, mapping, CanonicalField.IMAGE_URL_1),
        image_url_2=_text(row, mapping, CanonicalField.IMAGE_URL_2),
        prescription_info=_text(row, mapping, CanonicalField.PRESCRIPTION_INFO),
    )


def normalize_row(row: Sequence[Any], mapping: FieldMapping, ordinal: int) -> RowResult:
    """
    Normalize one data row. Never raises.

    Returns a RowResult carrying either the record or the reason the row was
    skipped (blank_row, missing_product_name, parse_error).
    """
    if is_blank_row(row):
        return RowResult(ordinal=ordinal, skip_reason=SKIP_BLANK_ROW)
    try:
        record = build_record(row, mapping, ordinal)
    except Exception as e:
        logger.warning(f"Error parsing row {ordinal}: {e}")
        return RowResult(ordinal=ordinal, skip_reason=SKIP_PARSE_ERROR, error=str(e))
    if record is None:
        return RowResult(ordinal=ordinal, skip_reason=SKIP_MISSING_PRODUCT_NAME)
    return RowResult(ordinal=ordinal, record=record)


def normalize_rows(table: RawTable, mapping: FieldMapping) -> Tuple[List[InventoryRecord], IngestionStats]:
    """
    Normalize every data row of a table (the header row is excluded).

    Returns:
        Tuple of (records, stats). ``len(records) <= len(table.rows) - 1``
        always holds; rows that are blank, unnamed or broken are counted in
        the stats instead.
    """
    stats = IngestionStats()
    records: List[InventoryRecord] = []

    for ordinal, row in enumerate(table.data_rows, start=1):
        stats.rows_read += 1
        result = normalize_row(row, mapping, ordinal)
        if result.record is not None:
            records.append(result.record)
        elif result.skip_reason == SKIP_BLANK_ROW:
            stats.blank_rows += 1
        elif result.skip_reason == SKIP_MISSING_PRODUCT_NAME:
            stats.rows_missing_product_name += 1
        else:
            stats.rows_with_errors += 1
            stats.error_rows.append(ordinal)

    stats.records_produced = len(records)
    logger.info(
        f"Parsed {stats.records_produced} items from {stats.rows_read} rows "
        f"({stats.blank_rows} blank, {stats.rows_missing_product_name} without product name, "
        f"{stats.rows_with_errors} with errors)"
    )
    return records, stats
