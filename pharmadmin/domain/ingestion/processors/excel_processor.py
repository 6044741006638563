import io
import logging
from typing import Any, List, Tuple

import pandas as pd

logger = logging.getLogger(__name__)

# ZIP local file header; every OOXML workbook (.xlsx/.xlsm) starts with it.
ZIP_SIGNATURE = b"PK\x03\x04"


def looks_like_workbook(file_content: bytes) -> bool:
    return file_content[:4] == ZIP_SIGNATURE


def _clean_cell(value: Any) -> Any:
    """Convert pandas NA/NaN/NaT placeholders to None, keep typed values as-is."""
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        # Non-scalar cell payloads are passed through untouched.
        return value
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    return value


def read_first_sheet(file_content: bytes) -> Tuple[str, List[List[Any]]]:
    """
    Read the first worksheet (document order) of a workbook as raw rows.

    Row 1 is returned as-is so the caller can treat it as the header; no
    header inference happens here. Cells keep the types openpyxl reports
    (int, float, str, datetime) and empty cells become None.

    Args:
        file_content: Workbook file as bytes

    Returns:
        Tuple of (sheet_name, rows)

    Raises:
        ValueError: If the bytes are not a readable workbook
    """
    try:
        workbook = pd.ExcelFile(io.BytesIO(file_content), engine="openpyxl")
    except Exception as e:
        raise ValueError(f"Could not read Excel file: {str(e)}")

    try:
        if not workbook.sheet_names:
            raise ValueError("Workbook contains no worksheets")
        sheet_name = workbook.sheet_names[0]
        df = workbook.parse(sheet_name=sheet_name, header=None, dtype=object)
    except ValueError:
        raise
    except Exception as e:
        raise ValueError(f"Could not read worksheet: {str(e)}")
    finally:
        workbook.close()

    rows = [
        [_clean_cell(value) for value in row]
        for row in df.itertuples(index=False, name=None)
    ]
    logger.info(f"Read sheet '{sheet_name}': {len(rows)} rows, {len(df.columns)} columns")
    return str(sheet_name), rows
