"""
Fruit prices case study.

Each worksheet describes one fruit:

    A1   "Apples-Average retail price per pound or pint and per cup equivalent, 2016"
    A2   Form | Average retail price | unit | Preparation yield factor |
         Size of a cup equivalent | unit | Average price per cup equivalent
    A3.. Fresh | 1.5193 | per pound | 0.9 | 0.2425 | pounds | 0.4094
         Applesauce | ...

Prices are sometimes typed as text "1.5193/pound" with the unit cell left
blank; those are split into price and unit.
"""
import logging
import re
from pathlib import Path
from typing import List, Sequence, Union

import pandas as pd

from ..conditions import warn
from ..loader import SheetNotFoundError, get_sheet_names, read_region
from ..transform import separate

logger = logging.getLogger(__name__)

DEFAULT_RANGE = 'A2:G12'

RAW_COLUMNS = [
    'form', 'retail_price', 'unit', 'yield_factor',
    'cup_size', 'cup_unit', 'price_per_cup',
]
FRUIT_COLUMNS = ['fruit'] + RAW_COLUMNS
NUMERIC_COLUMNS = ['retail_price', 'yield_factor', 'cup_size', 'price_per_cup']


def fruit_name(title) -> str:
    """'Apples—Average retail price ...' -> 'apples'"""
    text = str(title or '').strip()
    name = re.split(r'\s*(?:—|–|-|,|:)\s*', text, maxsplit=1)[0]
    return name.strip().lower()


def read_fruit_sheet(file_path: str, sheet: str, cell_range: str = DEFAULT_RANGE) -> pd.DataFrame:
    """One fruit's price table, typed and labelled with the fruit name."""
    cell = read_region(file_path, 'A1:A1', sheet=sheet, col_names=False, skip_empty_rows=False).iat[0, 0]
    title = cell if cell is not None else sheet
    raw = read_region(file_path, cell_range, sheet=sheet)
    if raw.shape[1] != len(RAW_COLUMNS):
        raise ValueError(
            f"Expected {len(RAW_COLUMNS)} columns in {sheet}!{cell_range}, got {raw.shape[1]}"
        )
    raw.columns = RAW_COLUMNS
    raw = raw[raw['form'].notna()].reset_index(drop=True)
    raw['form'] = raw['form'].astype(str).str.strip()

    # "1.5193/pound" typed into the price cell
    as_text = raw['retail_price'].map(lambda v: isinstance(v, str) and '/' in v)
    if as_text.any():
        split = separate(raw.loc[as_text, ['retail_price']], 'retail_price', ['retail_price', 'unit'])
        raw.loc[as_text, 'retail_price'] = split['retail_price']
        raw.loc[as_text, 'unit'] = split['unit']

    raw['unit'] = raw['unit'].map(_clean_unit)
    raw['cup_unit'] = raw['cup_unit'].map(_clean_unit)
    for col in NUMERIC_COLUMNS:
        raw[col] = pd.to_numeric(raw[col], errors='coerce')

    raw.insert(0, 'fruit', fruit_name(title))
    return raw


def _clean_unit(value):
    if pd.isna(value):
        return None
    return re.sub(r'^per\s+', '', str(value).strip().lower())


def extract_fruit_prices(
    paths: Union[str, Path, Sequence[Union[str, Path]]],
    form: str = 'Fresh',
    cell_range: str = DEFAULT_RANGE,
) -> pd.DataFrame:
    """
    Pull the `form` row out of every fruit sheet.

    Sheets without that form, or whose region is not a fruit table, signal
    a warning and are skipped.

    Returns:
        DataFrame with FRUIT_COLUMNS, one row per fruit sheet
    """
    if isinstance(paths, (str, Path)):
        paths = [paths]

    rows: List[pd.DataFrame] = []
    for path in paths:
        for sheet in get_sheet_names(str(path)):
            try:
                table = read_fruit_sheet(str(path), sheet, cell_range)
            except (ValueError, SheetNotFoundError) as e:
                warn(f"Skipping sheet '{sheet}' of {Path(path).name}: {e}",
                     call='extract_fruit_prices()')
                continue
            match = table[table['form'].str.lower() == form.lower()]
            if match.empty:
                warn(f"No '{form}' row in sheet '{sheet}' of {Path(path).name}",
                     call='extract_fruit_prices()')
                continue
            rows.append(match.head(1))
            logger.debug(f"{Path(path).name}!{sheet}: {table['fruit'].iat[0]}")

    if not rows:
        return pd.DataFrame(columns=FRUIT_COLUMNS)
    return pd.concat(rows, ignore_index=True)[FRUIT_COLUMNS]


def cheapest(prices: pd.DataFrame, n: int = 5) -> pd.DataFrame:
    """Fruits with the lowest price per cup equivalent."""
    return prices.sort_values('price_per_cup', kind='stable').head(n).reset_index(drop=True)
