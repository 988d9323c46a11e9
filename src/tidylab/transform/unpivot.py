"""Wide period headers - spot them and pivot them longer."""
import logging
import re
from typing import List, Optional

import pandas as pd

from ..utils.period import MONTHS
from .pivot import pivot_longer

logger = logging.getLogger(__name__)


def is_period_column(col_name) -> bool:
    """Check if column name looks like a period header."""
    if col_name is None:
        return False
    return parse_period_column(str(col_name)) is not None


def parse_period_column(col_name: str) -> Optional[str]:
    """
    Parse a period header to a label.

    "FY19" / "FY 2019" / "fy_2019" -> "FY2019"
    "Nov-25" / "November 2025"     -> "2025-11"
    "2025-11" / "2025_11"          -> "2025-11"
    "Q1 2025"                      -> "2025-Q1"
    """
    if not col_name:
        return None
    col_lower = col_name.lower().strip()

    # Fiscal years: "FY19", "FY 2019", "fy_2019"
    match = re.fullmatch(r'fy[\s_-]?(\d{2}|\d{4})', col_lower)
    if match:
        year = int(match.group(1))
        if year < 100:
            year += 2000
        return f"FY{year}"

    # "Nov-25", "November 2025", "march_2020"
    match = re.fullmatch(r'([a-z]+)[\s_-]?(\d{2}|\d{4})', col_lower)
    if match and match.group(1) in MONTHS:
        year = int(match.group(2))
        if year < 100:
            year += 2000
        return f"{year}-{MONTHS[match.group(1)]}"

    # "2025-11" or "2025_11"
    match = re.fullmatch(r'(\d{4})[-_](\d{1,2})', col_lower)
    if match:
        year, month = int(match.group(1)), int(match.group(2))
        if 1 <= month <= 12:
            return f"{year}-{month:02d}"

    # "Q1 2025", "Q2_2024"
    match = re.fullmatch(r'q([1-4])[-_\s]?(\d{2}|\d{4})', col_lower)
    if match:
        quarter, year = int(match.group(1)), int(match.group(2))
        if year < 100:
            year += 2000
        return f"{year}-Q{quarter}"

    return None


def unpivot_wide_periods(
    df: pd.DataFrame, period_columns: List[str],
    value_name: str = 'value', period_name: str = 'period'
) -> pd.DataFrame:
    """Collapse period columns into (period, raw header, value) rows."""
    missing = [c for c in period_columns if c not in df.columns]
    if missing:
        raise ValueError(f"Period columns not found: {missing}")

    df_long = pivot_longer(df, period_columns, names_to='_raw_period', values_to=value_name)
    static_columns = [c for c in df.columns if c not in period_columns]
    df_long[period_name] = df_long['_raw_period'].map(lambda c: parse_period_column(str(c)))
    logger.debug(f"unpivoted {len(period_columns)} period columns: {df.shape} -> {df_long.shape}")
    return df_long[static_columns + [period_name, '_raw_period', value_name]]
