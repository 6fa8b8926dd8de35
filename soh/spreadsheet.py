# soh/spreadsheet.py
"""
Reading and row-level validation of stock-on-hand workbooks.

Only the first worksheet is read. Its first row is the header row; every
following row with at least one non-blank cell is a data row.
"""
import math
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from openpyxl import load_workbook

SKU_HEADER = 'SKU'
DESCRIPTION_HEADER = 'Description'
QUANTITY_HEADER = 'SOH Quantity'
LOCATION_HEADER = 'Location'

REQUIRED_HEADERS = (SKU_HEADER, DESCRIPTION_HEADER, QUANTITY_HEADER)

# Data rows start on the second spreadsheet row (row 1 is the header).
FIRST_DATA_ROW_NUMBER = 2

# StockItem.qty_on_hand holds 18 digits, 4 of them after the decimal point.
MAX_QUANTITY_INTEGER_DIGITS = 14


class InvalidRow(Exception):
    def __init__(self, row_number: int, column: str):
        self.row_number = row_number
        self.column = column
        super().__init__(f"Row {row_number}: {column} is missing or invalid.")


@dataclass
class ParsedSheet:
    headers: List[str]
    rows: List[Dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class StockRow:
    sku: str
    description: str
    qty_on_hand: Decimal
    location: str = ''


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def read_first_sheet(file_obj) -> ParsedSheet:
    """
    Load the workbook and return the header names and data rows of its first
    sheet. Parse failures (not an xlsx file, corrupt archive) propagate.
    """
    workbook = load_workbook(file_obj, read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        values = sheet.iter_rows(values_only=True)

        header_cells = next(values, None)
        if header_cells is None:
            return ParsedSheet(headers=[])

        headers = [str(cell).strip() if cell is not None else '' for cell in header_cells]
        rows = []
        for cells in values:
            if all(_is_blank(cell) for cell in cells):
                continue
            row = {}
            for header, cell in zip(headers, cells):
                # First column wins when a header name is repeated.
                if header and header not in row:
                    row[header] = cell
            rows.append(row)
        return ParsedSheet(headers=headers, rows=rows)
    finally:
        workbook.close()


def missing_headers(headers: List[str]) -> List[str]:
    present = set(headers)
    return [header for header in REQUIRED_HEADERS if header not in present]


def _as_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip()
    elif isinstance(value, int):
        text = str(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            return None
        # Numeric SKUs come back from Excel as floats (e.g. 1001.0).
        text = str(int(value)) if value.is_integer() else str(value)
    elif isinstance(value, Decimal):
        text = str(value)
    else:
        return None
    return text or None


def _as_quantity(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return None
    try:
        quantity = Decimal(str(value))
    except InvalidOperation:
        return None
    if not quantity.is_finite() or quantity < 0:
        return None
    if quantity.adjusted() >= MAX_QUANTITY_INTEGER_DIGITS:
        return None
    return quantity


def parse_stock_row(row: Dict[str, Any], row_number: int) -> StockRow:
    """
    Validate one data row. Checks run in a fixed order (SKU, quantity,
    description) and the first failure raises InvalidRow.
    """
    sku = _as_text(row.get(SKU_HEADER))
    if sku is None:
        raise InvalidRow(row_number, SKU_HEADER)

    qty_on_hand = _as_quantity(row.get(QUANTITY_HEADER))
    if qty_on_hand is None:
        raise InvalidRow(row_number, QUANTITY_HEADER)

    description = _as_text(row.get(DESCRIPTION_HEADER))
    if description is None:
        raise InvalidRow(row_number, DESCRIPTION_HEADER)

    return StockRow(
        sku=sku,
        description=description,
        qty_on_hand=qty_on_hand,
        location=_as_text(row.get(LOCATION_HEADER)) or '',
    )
