"""
Ingestion entry points: file bytes -> canonical records.

Detection, mapping and normalization all run here, synchronously and fully in
memory, before any network activity starts. The only exceptions that escape
are IngestionError subclasses; everything row-level is absorbed into stats.
"""

from dataclasses import dataclass
import logging
from typing import Any, List, Optional, Sequence

from pharmadmin.core.config import settings
from pharmadmin.schemas import DeleteItem, InventoryRecord
from pharmadmin.utils.cells import cell_text
from .exceptions import FileTooLargeError, MissingColumnsError
from .format_detector import read_raw_table
from .models import Dialect, FieldMapping, IngestionStats, RawTable
from .normalizer import normalize_rows
from .schema_mapper import build_field_mapping, describe_mapping, normalize_header

logger = logging.getLogger(__name__)

DELETE_NAME_HEADERS = ("product_name", "name", "medicine", "medicine name")
DELETE_ID_HEADERS = ("medicine_id", "id")


@dataclass
class IngestionResult:
    """Everything one file produced, ready for the upload phase."""
    file_name: Optional[str]
    dialect: Dialect
    header: Sequence[Any]
    mapping: FieldMapping
    records: List[InventoryRecord]
    stats: IngestionStats

    @property
    def mapped_columns(self):
        return describe_mapping(self.mapping, self.header)


def _check_size(file_content: bytes, file_name: Optional[str], max_file_size_mb: Optional[int]) -> None:
    limit_mb = settings.max_file_size_mb if max_file_size_mb is None else max_file_size_mb
    if limit_mb and len(file_content) > limit_mb * 1024 * 1024:
        raise FileTooLargeError(len(file_content), limit_mb, file_name=file_name)


def load_table(file_content: bytes, file_name: Optional[str], *, max_file_size_mb: Optional[int] = None) -> RawTable:
    """Size-check and read a file into a RawTable."""
    _check_size(file_content, file_name, max_file_size_mb)
    return read_raw_table(file_content, file_name, file_name=file_name)


def parse_inventory_file(
    file_content: bytes,
    file_name: Optional[str],
    *,
    max_file_size_mb: Optional[int] = None,
) -> IngestionResult:
    """
    Parse an inventory spreadsheet or delimited text file.

    Args:
        file_content: Raw file bytes
        file_name: Name (or extension) used to pick the format
        max_file_size_mb: Optional override of the configured size limit

    Returns:
        IngestionResult with the canonical records and row statistics

    Raises:
        IngestionError: Empty, unreadable, oversized or unsupported input
    """
    table = load_table(file_content, file_name, max_file_size_mb=max_file_size_mb)
    mapping = build_field_mapping(table.header)
    records, stats = normalize_rows(table, mapping)
    logger.info(f"Parsed {len(records)} items from {file_name or 'input'} ({table.dialect.describe()})")
    return IngestionResult(
        file_name=file_name,
        dialect=table.dialect,
        header=table.header,
        mapping=mapping,
        records=records,
        stats=stats,
    )


def _find_delete_columns(header_row: Sequence[Any]):
    name_index = None
    id_index = None
    for index, raw_header in enumerate(header_row):
        header = normalize_header(raw_header)
        if not header:
            continue
        if header in DELETE_NAME_HEADERS or "product name" in header:
            name_index = index
        if header in DELETE_ID_HEADERS or "medicine id" in header:
            id_index = index
    return name_index, id_index


def parse_delete_file(
    file_content: bytes,
    file_name: Optional[str],
    *,
    max_file_size_mb: Optional[int] = None,
) -> List[DeleteItem]:
    """
    Parse a delete list: one product per row, by name and/or medicine id.

    The header must contain a product-name column ("product_name", "name",
    "medicine", "... product name ...") or a medicine-id column ("medicine_id",
    "id", "... medicine id ..."). Rows with neither value are skipped.

    Raises:
        MissingColumnsError: If the header has neither column
        IngestionError: Empty, unreadable, oversized or unsupported input
    """
    table = load_table(file_content, file_name, max_file_size_mb=max_file_size_mb)
    name_index, id_index = _find_delete_columns(table.header)
    if name_index is None and id_index is None:
        raise MissingColumnsError(("product_name", "name", "medicine_id"), file_name=file_name)

    logger.info(f"Found columns - productName: {name_index}, medicineId: {id_index}")

    items: List[DeleteItem] = []
    for ordinal, row in enumerate(table.data_rows, start=1):
        product_name = cell_text(row[name_index]) if name_index is not None and name_index < len(row) else None
        medicine_id = cell_text(row[id_index]) if id_index is not None and id_index < len(row) else None
        if product_name is None and medicine_id is None:
            logger.debug(f"Delete list row {ordinal} has no product name or medicine id; skipping")
            continue
        items.append(DeleteItem(product_name=product_name, medicine_id=medicine_id))

    logger.info(f"Parsed {len(items)} delete items from {file_name or 'input'}")
    return items
