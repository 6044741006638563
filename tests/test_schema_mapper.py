"""
Header mapping tests.

Rule order matters, so several tests pin headers that more than one rule
could claim.
"""
import pytest

from pharmadmin.domain.ingestion.models import CanonicalField
from pharmadmin.domain.ingestion.schema_mapper import build_field_mapping, describe_mapping, match_header


@pytest.mark.parametrize(
    "header, expected",
    [
        ("s.no", CanonicalField.SERIAL_NO),
        ("serial number", CanonicalField.SERIAL_NO),
        ("no.", CanonicalField.SERIAL_NO),
        ("product name", CanonicalField.PRODUCT_NAME),
        ("medicine", CanonicalField.PRODUCT_NAME),
        ("name", CanonicalField.PRODUCT_NAME),
        ("company name", CanonicalField.COMPANY),
        ("manufacturer", CanonicalField.COMPANY),
        ("salt composition", CanonicalField.COMPOSITION),
        ("sub_category", CanonicalField.CATEGORY),
        ("pack size", CanonicalField.PACK_SIZE),
        ("tab/qty", CanonicalField.PACK_SIZE),
        ("stock", CanonicalField.INVENTORY_QTY),
        ("qty", CanonicalField.INVENTORY_QTY),
        ("mrp (inventory type)", CanonicalField.MRP),
        ("selling price", CanonicalField.SELLING_PRICE),
        ("price", CanonicalField.SELLING_PRICE),
        ("form", CanonicalField.INVENTORY_TYPE),
        ("indication", CanonicalField.USED_IN),
        ("side_effects", CanonicalField.PRECAUTIONS),
        ("drug interactions", CanonicalField.DRUG_INTERACTIONS),
        ("image 1", CanonicalField.IMAGE_URL_1),
        ("image_2", CanonicalField.IMAGE_URL_2),
        ("prescription required", CanonicalField.PRESCRIPTION_INFO),
    ],
)
def test_match_header(header, expected):
    assert match_header(header) == expected


def test_unknown_and_empty_headers_do_not_match():
    assert match_header("") is None
    assert match_header("barcode") is None


def test_mrp_inventory_type_header_goes_to_mrp_only():
    mapping = build_field_mapping(["Product Name", "MRP (Inventory type)"])

    assert mapping.get(CanonicalField.MRP) == 1
    assert CanonicalField.SELLING_PRICE not in mapping
    assert CanonicalField.INVENTORY_TYPE not in mapping


def test_rightmost_column_wins_for_duplicate_fields():
    mapping = build_field_mapping(["Stock", "Product Name", "Inventory Qty", "Medicine"])

    assert mapping.get(CanonicalField.INVENTORY_QTY) == 2
    assert mapping.get(CanonicalField.PRODUCT_NAME) == 3


def test_sub_category_overrides_category():
    mapping = build_field_mapping(["Product Name", "category", "sub_category"])

    assert mapping.get(CanonicalField.CATEGORY) == 2


def test_mapping_ignores_blank_header_cells():
    mapping = build_field_mapping([None, "  ", "Product Name"])

    assert mapping.as_dict() == {"productName": 2}


def test_mapping_is_deterministic():
    header = ["S.No", "Product Name", "Company Name", "Pack Size", "Stock", "MRP", "Selling Price"]

    assert build_field_mapping(header) == build_field_mapping(list(header))


def test_mapping_without_product_name_is_empty_of_it_but_valid():
    mapping = build_field_mapping(["Barcode", "MRP"])

    assert CanonicalField.PRODUCT_NAME not in mapping
    assert mapping.get(CanonicalField.MRP) == 1


def test_mapping_is_read_only():
    mapping = build_field_mapping(["Product Name"])

    with pytest.raises(TypeError):
        mapping.columns[CanonicalField.MRP] = 3


def test_describe_mapping_uses_source_headers():
    header = [" Product Name ", "Company", "MRP"]

    described = describe_mapping(build_field_mapping(header), header)

    assert described == {"productName": "Product Name", "company": "Company", "mrp": "MRP"}
