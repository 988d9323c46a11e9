"""Read rectangular regions of spreadsheets into DataFrames"""
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import openpyxl
import pandas as pd
import requests
from openpyxl.utils import get_column_letter
from openpyxl.utils.cell import range_boundaries

from ..utils.sanitize import clean_names

logger = logging.getLogger(__name__)

# Workbook cache: (filepath, mtime) -> openpyxl.Workbook
_workbook_cache: Dict[Tuple[str, float], Any] = {}


class SheetNotFoundError(LookupError):
    """Requested sheet is not in the workbook."""


def clear_workbook_cache():
    """Clear the workbook cache. Call at end of batch processing."""
    for wb in _workbook_cache.values():
        wb.close()
    _workbook_cache.clear()


def _get_cached_workbook(filepath: str):
    """Get workbook from cache or load and cache it."""
    key = (str(filepath), os.path.getmtime(filepath))
    if key not in _workbook_cache:
        logger.debug(f"Loading workbook: {Path(filepath).name}")
        _workbook_cache[key] = openpyxl.load_workbook(filepath, data_only=True)
    return _workbook_cache[key]


def _get_sheet(filepath: str, sheet: Optional[str]):
    wb = _get_cached_workbook(filepath)
    if sheet is None:
        return wb.worksheets[0]
    if sheet not in wb.sheetnames:
        raise SheetNotFoundError(f"Sheet '{sheet}' not found in {Path(filepath).name}; have {wb.sheetnames}")
    return wb[sheet]


def split_range(cell_range: str) -> Tuple[Optional[str], str]:
    """
    Split "Sheet 1!B3:F20" into ("Sheet 1", "B3:F20").

    Quoted sheet names ("'Q1 data'!A1:B2") are unquoted.
    """
    if '!' not in cell_range:
        return None, cell_range.strip()
    sheet, ref = cell_range.rsplit('!', 1)
    sheet = sheet.strip()
    if len(sheet) >= 2 and sheet[0] == sheet[-1] == "'":
        sheet = sheet[1:-1].replace("''", "'")
    return sheet, ref.strip()


def read_region(
    file_path: str,
    cell_range: str,
    sheet: Optional[str] = None,
    col_names: bool = True,
    skip_empty_rows: bool = True,
) -> pd.DataFrame:
    """
    Read an A1-style rectangle of a worksheet.

    Cell values are read, not formulas. With col_names the first row of the
    region is the header; blank headers become col_<letter> and all headers
    are cleaned to snake_case.

    Raises:
        SheetNotFoundError: sheet is not in the workbook
        ValueError: cell_range is not a valid A1 range
    """
    range_sheet, ref = split_range(cell_range)
    if range_sheet is not None:
        if sheet is not None and sheet != range_sheet:
            raise ValueError(f"Sheet given twice: '{sheet}' and '{range_sheet}'")
        sheet = range_sheet

    try:
        min_col, min_row, max_col, max_row = range_boundaries(ref)
    except (ValueError, TypeError) as e:
        raise ValueError(f"Invalid cell range '{cell_range}': {e}") from e
    if None in (min_col, min_row, max_col, max_row):
        raise ValueError(f"Cell range must be bounded, got '{cell_range}'")

    ws = _get_sheet(file_path, sheet)
    rows: List[tuple] = list(ws.iter_rows(
        min_row=min_row, max_row=max_row, min_col=min_col, max_col=max_col, values_only=True
    ))
    width = max_col - min_col + 1

    if col_names:
        header = rows[0] if rows else (None,) * width
        names = [
            h if h is not None and str(h).strip() else f"col_{get_column_letter(min_col + i)}"
            for i, h in enumerate(header)
        ]
        columns = clean_names(names)
        rows = rows[1:]
    else:
        columns = [f"col_{get_column_letter(min_col + i)}".lower() for i in range(width)]

    if skip_empty_rows:
        rows = [r for r in rows if any(v is not None and str(v).strip() != '' for v in r)]

    logger.debug(f"read_region {Path(file_path).name}!{ref}: {len(rows)} rows x {width} cols")
    return pd.DataFrame(rows, columns=columns)


def load_table(file_path: str, sheet: Optional[str] = None) -> pd.DataFrame:
    """Load a whole CSV file or worksheet."""
    ext = os.path.splitext(str(file_path))[1].lower()

    if ext == '.csv':
        return pd.read_csv(file_path)
    if ext in ['.xlsx', '.xlsm']:
        if sheet is not None and sheet not in get_sheet_names(file_path):
            raise SheetNotFoundError(f"Sheet '{sheet}' not found in {Path(file_path).name}")
        return pd.read_excel(file_path, sheet_name=sheet or 0, engine='openpyxl')
    raise ValueError(f"Unsupported file type: {ext}")


def download_file(url: str, target_dir: Optional[str] = None) -> str:
    """
    Download a file from URL to local path.

    Returns the local file path.
    """
    if target_dir is None:
        target_dir = tempfile.mkdtemp()

    filename = url.split('/')[-1].split('?')[0] or 'download'
    local_path = os.path.join(target_dir, filename)

    logger.debug(f"Downloading {url} -> {local_path}")
    response = requests.get(url, timeout=60)
    response.raise_for_status()

    with open(local_path, 'wb') as f:
        f.write(response.content)

    return local_path


def get_sheet_names(file_path: str) -> List[str]:
    """Get list of sheet names from an Excel file."""
    return list(_get_cached_workbook(file_path).sheetnames)


def preview_sheet(file_path: str, sheet_name: str, nrows: int = 5) -> pd.DataFrame:
    """Preview first N rows of a sheet."""
    if sheet_name not in get_sheet_names(file_path):
        raise SheetNotFoundError(f"Sheet '{sheet_name}' not found in {Path(file_path).name}")
    return pd.read_excel(file_path, sheet_name=sheet_name, nrows=nrows, engine='openpyxl')


def describe_sheets(file_path: str) -> List[dict]:
    """Name, used range, rows and cols of every sheet."""
    wb = _get_cached_workbook(file_path)
    sheets = []
    for ws in wb.worksheets:
        empty = ws.max_row == 1 and ws.max_column == 1 and ws.cell(1, 1).value is None
        sheets.append({
            'name': ws.title,
            'range': '' if empty else ws.dimensions,
            'rows': 0 if empty else ws.max_row,
            'cols': 0 if empty else ws.max_column,
        })
    return sheets
