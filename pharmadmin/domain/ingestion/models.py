"""
In-memory structures produced while ingesting a source file.

Nothing here outlives a single run: the RawTable is discarded once rows are
normalized, and the FieldMapping is only consulted by the normalizer.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple


class FileKind(str, Enum):
    DELIMITED = "delimited"
    SPREADSHEET = "spreadsheet"


class CanonicalField(str, Enum):
    """Attributes of an inventory record that source columns resolve into."""
    SERIAL_NO = "serialNo"
    PRODUCT_NAME = "productName"
    COMPOSITION = "composition"
    COMPANY = "company"
    CATEGORY = "category"
    PACK_SIZE = "packSize"
    INVENTORY_QTY = "inventoryQty"
    INVENTORY_TYPE = "inventoryType"
    MRP = "mrp"
    SELLING_PRICE = "sellingPrice"
    USED_IN = "usedIn"
    PRECAUTIONS = "precautions"
    DRUG_INTERACTIONS = "drugInteractions"
    IMAGE_URL_1 = "imageUrl1"
    IMAGE_URL_2 = "imageUrl2"
    PRESCRIPTION_INFO = "prescriptionInfo"


@dataclass(frozen=True)
class Dialect:
    """Structural variant of a source file."""
    kind: FileKind
    delimiter: Optional[str] = None
    sheet_name: Optional[str] = None

    def describe(self) -> str:
        if self.kind == FileKind.SPREADSHEET:
            return f"spreadsheet (sheet '{self.sheet_name}')"
        return "delimited ({})".format("TAB" if self.delimiter == "\t" else "COMMA")


Row = Tuple[Any, ...]


@dataclass(frozen=True)
class RawTable:
    """Header row plus data rows exactly as read from the file."""
    dialect: Dialect
    rows: Tuple[Row, ...]

    @classmethod
    def from_rows(cls, dialect: Dialect, rows: Sequence[Sequence[Any]]) -> "RawTable":
        return cls(dialect=dialect, rows=tuple(tuple(row) for row in rows))

    @property
    def header(self) -> Row:
        return self.rows[0] if self.rows else ()

    @property
    def data_rows(self) -> Tuple[Row, ...]:
        return self.rows[1:]

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class FieldMapping:
    """Read-only map of canonical field -> column index."""
    columns: Mapping[CanonicalField, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", MappingProxyType(dict(self.columns)))

    def get(self, canonical: CanonicalField) -> Optional[int]:
        return self.columns.get(canonical)

    def __contains__(self, canonical: object) -> bool:
        return canonical in self.columns

    def __len__(self) -> int:
        return len(self.columns)

    def __bool__(self) -> bool:
        return bool(self.columns)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldMapping):
            return NotImplemented
        return dict(self.columns) == dict(other.columns)

    def __hash__(self) -> int:
        return hash(frozenset(self.columns.items()))

    def as_dict(self) -> Dict[str, int]:
        """Plain ``{"productName": 1, ...}`` view, handy for logging."""
        return {canonical.value: index for canonical, index in self.columns.items()}


@dataclass
class IngestionStats:
    """Counters describing how the data rows of one file were consumed."""
    rows_read: int = 0
    records_produced: int = 0
    blank_rows: int = 0
    rows_missing_product_name: int = 0
    rows_with_errors: int = 0
    error_rows: List[int] = field(default_factory=list)

    @property
    def rows_skipped(self) -> int:
        return self.rows_read - self.records_produced

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rows_read": self.rows_read,
            "records_produced": self.records_produced,
            "rows_skipped": self.rows_skipped,
            "blank_rows": self.blank_rows,
            "rows_missing_product_name": self.rows_missing_product_name,
            "rows_with_errors": self.rows_with_errors,
            "error_rows": self.error_rows[:100],  # Limit to first 100
        }
