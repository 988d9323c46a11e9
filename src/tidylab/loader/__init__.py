"""Spreadsheet and CSV loading"""
from .excel import (
    SheetNotFoundError,
    read_region,
    load_table,
    download_file,
    get_sheet_names,
    preview_sheet,
    describe_sheets,
    split_range,
    clear_workbook_cache,
)
