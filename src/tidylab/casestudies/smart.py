"""
SMART ridership case study.

The ridership report keeps one row per month and one column per fiscal
year, which is wide and awkward to plot:

    Month  FY18   FY19   FY20
    Jul           52k    64k
    Aug    ...
    Total  ...

tidy_ridership() pivots the FY period columns longer and attaches the
calendar month each (fiscal year, month) pair falls in. Fiscal years are
named for the year they end in and start in July.
"""
import logging
from typing import Optional

import pandas as pd

from ..conditions import message
from ..loader import read_region
from ..transform import is_period_column, parse_period_column, pivot_wider, unpivot_wide_periods
from ..utils.period import fiscal_to_calendar, parse_fiscal_year, parse_month

logger = logging.getLogger(__name__)

TIDY_COLUMNS = ['month', 'fiscal_year', 'riders', 'date']


def read_ridership(file_path: str, cell_range: str, sheet: Optional[str] = None) -> pd.DataFrame:
    """Raw wide ridership table from a workbook region."""
    return read_region(file_path, cell_range, sheet=sheet)


def _to_number(series: pd.Series) -> pd.Series:
    # object, "string" and pandas 3 "str" columns all carry typed counts as text
    if not pd.api.types.is_numeric_dtype(series):
        series = series.astype(object).map(lambda v: v.replace(',', '').strip() if isinstance(v, str) else v)
    return pd.to_numeric(series, errors='coerce')


def tidy_ridership(
    df: pd.DataFrame,
    month_col: str = 'month',
    fy_start_month: int = 7,
) -> pd.DataFrame:
    """
    Reshape a month x fiscal-year table into one row per month.

    Rows whose month label can't be read (e.g. "Total") are skipped with a
    message. Months with no riders are dropped.

    Returns:
        DataFrame with TIDY_COLUMNS sorted by date
    """
    if month_col not in df.columns:
        raise ValueError(f"Month column not found: {month_col}")

    fy_cols = [
        c for c in df.columns
        if c != month_col and is_period_column(c) and parse_period_column(str(c)).startswith('FY')
    ]
    if not fy_cols:
        raise ValueError(f"No fiscal-year columns found in {list(df.columns)}")

    months = df[month_col].map(parse_month)
    unreadable = df.loc[months.isna(), month_col].tolist()
    if unreadable:
        message(f"Skipping {len(unreadable)} rows without a month: {unreadable}")

    wide = df.loc[months.notna(), [month_col] + fy_cols].copy()
    wide['_month_num'] = months[months.notna()].astype(int)

    # 'FY19' headers -> period 'FY2019'
    long = unpivot_wide_periods(wide, fy_cols, value_name='riders', period_name='fiscal_year')
    long['riders'] = _to_number(long['riders'])
    long = long[long['riders'].notna()].reset_index(drop=True)

    long['fiscal_year'] = long['fiscal_year'].map(parse_fiscal_year).astype(int)
    long['date'] = pd.to_datetime([
        fiscal_to_calendar(fy, m, fy_start_month)
        for fy, m in zip(long['fiscal_year'], long['_month_num'])
    ])

    tidy = long.rename(columns={month_col: 'month'})[TIDY_COLUMNS]
    logger.debug(f"tidy_ridership: {df.shape} -> {tidy.shape}")
    return tidy.sort_values('date', kind='stable').reset_index(drop=True)


def yearly_totals(tidy: pd.DataFrame, fy_start_month: int = 7) -> pd.DataFrame:
    """
    One row per fiscal year: riders per month in fiscal order (Jul..Jun for
    a July start) plus the annual total over the months reported.
    """
    position = (tidy['date'].dt.month - fy_start_month) % 12
    labelled = (
        tidy.assign(month_label=tidy['date'].dt.strftime('%b'), _position=position)
        .sort_values(['_position', 'fiscal_year'], kind='stable')
    )
    wide = pivot_wider(
        labelled[['fiscal_year', 'month_label', 'riders']],
        names_from='month_label',
        values_from='riders',
    )
    month_cols = [c for c in wide.columns if c != 'fiscal_year']
    wide['total'] = wide[month_cols].sum(axis=1, min_count=1)
    wide['months_reported'] = wide[month_cols].notna().sum(axis=1)
    return wide.sort_values('fiscal_year').reset_index(drop=True)
