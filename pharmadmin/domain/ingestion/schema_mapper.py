"""
Header-to-field mapping for inventory source files.

Suppliers, ERP exports and hand-made sheets all name their columns
differently ("S. No.", "Product Name", "MRP (Inventory type)", "salt_composition",
...). This module resolves each header cell to at most one canonical field by
walking an ordered rule table. The order of HEADER_RULES is significant:
specific rules sit above looser ones that would otherwise capture the same
header (an "MRP (Inventory type)" header must hit the MRP rule before either
the price rule or the inventory-type rule sees it).
"""

from dataclasses import dataclass
import logging
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from .models import CanonicalField, FieldMapping

logger = logging.getLogger(__name__)

HeaderPredicate = Callable[[str], bool]


def _contains(*keywords: str) -> HeaderPredicate:
    return lambda header: any(keyword in header for keyword in keywords)


def _equals(*values: str) -> HeaderPredicate:
    accepted = frozenset(values)
    return lambda header: header in accepted


def _any_of(*predicates: HeaderPredicate) -> HeaderPredicate:
    return lambda header: any(predicate(header) for predicate in predicates)


def _excluding(predicate: HeaderPredicate, *keywords: str) -> HeaderPredicate:
    return lambda header: predicate(header) and not any(keyword in header for keyword in keywords)


@dataclass(frozen=True)
class HeaderRule:
    field: CanonicalField
    matches: HeaderPredicate
    description: str


# Evaluated top to bottom for every header cell; the first match wins.
HEADER_RULES: Tuple[HeaderRule, ...] = (
    HeaderRule(
        CanonicalField.SERIAL_NO,
        _any_of(_contains("serial", "s."), _equals("no", "no.")),
        'contains "serial" / "s.", or is "no" / "no."',
    ),
    HeaderRule(
        CanonicalField.PRODUCT_NAME,
        # Bare "name" is an exact match only; "company name" must reach the company rule.
        _any_of(_contains("product name"), _equals("product_name", "name", "medicine", "medicine name")),
        'contains "product name", or is "name" / "medicine"',
    ),
    HeaderRule(
        CanonicalField.COMPOSITION,
        _contains("composition", "salt", "generic"),
        'contains "composition" / "salt" / "generic"',
    ),
    HeaderRule(
        CanonicalField.COMPANY,
        _contains("company", "manufacturer", "manufactured"),
        'contains "company" / "manufacturer" / "manufactured"',
    ),
    HeaderRule(
        CanonicalField.CATEGORY,
        _contains("category"),  # also covers "sub_category"
        'contains "category"',
    ),
    HeaderRule(
        CanonicalField.PACK_SIZE,
        _contains("tab/qty", "pack", "strip", "per stp"),
        'contains "pack" / "strip" / "tab/qty" / "per stp"',
    ),
    HeaderRule(
        CanonicalField.INVENTORY_QTY,
        _any_of(_contains("inventory qty", "stock"), _excluding(_contains("qty"), "tab")),
        'contains "stock" / "inventory qty", or "qty" without "tab"',
    ),
    HeaderRule(
        CanonicalField.MRP,
        _contains("mrp"),
        'contains "mrp"',
    ),
    HeaderRule(
        CanonicalField.SELLING_PRICE,
        _any_of(_contains("selling"), _excluding(_contains("price"), "mrp")),
        'contains "selling", or "price" without "mrp"',
    ),
    HeaderRule(
        CanonicalField.INVENTORY_TYPE,
        _any_of(_contains("inventory type"), _equals("form", "type")),
        'contains "inventory type", or is "form" / "type"',
    ),
    HeaderRule(
        CanonicalField.USED_IN,
        _contains("used in", "indication", "uses", "desc"),
        'contains "used in" / "indication" / "uses" / "desc"',
    ),
    HeaderRule(
        CanonicalField.PRECAUTIONS,
        _any_of(_contains("precaution", "warning", "side effect"), _equals("side_effects")),
        'contains "precaution" / "warning" / "side effect"',
    ),
    HeaderRule(
        CanonicalField.DRUG_INTERACTIONS,
        _contains("interaction"),
        'contains "interaction"',
    ),
    HeaderRule(
        CanonicalField.IMAGE_URL_1,
        _contains("image 1", "image1", "image_1"),
        'contains "image 1"',
    ),
    HeaderRule(
        CanonicalField.IMAGE_URL_2,
        _contains("image 2", "image2", "image_2"),
        'contains "image 2"',
    ),
    HeaderRule(
        CanonicalField.PRESCRIPTION_INFO,
        _contains("recommend", "prescri", "rx"),
        'contains "recommend" / "prescri" / "rx"',
    ),
)


def normalize_header(value: Any) -> str:
    """Lower-case and trim a header cell; None becomes an empty string."""
    if value is None:
        return ""
    return str(value).strip().lower()


def match_header(header: str) -> Optional[CanonicalField]:
    """
    Return the canonical field for a normalized header, or None.

    Examples:
        "mrp (inventory type)" -> CanonicalField.MRP
        "selling price" -> CanonicalField.SELLING_PRICE
        "company name" -> CanonicalField.COMPANY
    """
    if not header:
        return None
    for rule in HEADER_RULES:
        if rule.matches(header):
            return rule.field
    return None


def build_field_mapping(header_row: Sequence[Any]) -> FieldMapping:
    """
    Build the canonical field -> column index mapping from a header row.

    Empty header cells are ignored. A header cell maps to at most one field,
    and when two cells resolve to the same field the rightmost one keeps it
    ("category" then "sub_category" reads from "sub_category").
    The mapper never fails: a header with no recognizable columns yields an
    empty mapping.
    """
    columns: Dict[CanonicalField, int] = {}
    for index, raw_header in enumerate(header_row):
        header = normalize_header(raw_header)
        canonical = match_header(header)
        if canonical is None:
            if header:
                logger.debug(f"Header '{raw_header}' (column {index}) does not match any field")
            continue
        if canonical in columns:
            logger.debug(
                f"Header '{raw_header}' (column {index}) also matches {canonical.value}; "
                f"replacing column {columns[canonical]}"
            )
        columns[canonical] = index

    mapping = FieldMapping(columns)
    logger.info(f"Found columns: {mapping.as_dict()}")
    if CanonicalField.PRODUCT_NAME not in mapping:
        logger.warning("No product name column found; every row will be skipped")
    return mapping


def describe_mapping(mapping: FieldMapping, header_row: Sequence[Any]) -> Dict[str, str]:
    """Readable canonical field -> source header summary, in column order."""
    described: Dict[str, str] = {}
    for canonical, index in sorted(mapping.columns.items(), key=lambda item: item[1]):
        header = header_row[index] if index < len(header_row) else None
        described[canonical.value] = str(header).strip() if header is not None else f"col_{index}"
    return described
