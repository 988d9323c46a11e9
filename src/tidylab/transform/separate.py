"""Split one delimited text column into several fixed fields."""
import logging
import re
from typing import List, Optional, Sequence, Union

import pandas as pd

from ..conditions import warn

logger = logging.getLogger(__name__)

EXTRA_MODES = ('warn', 'drop', 'merge')
FILL_MODES = ('warn', 'right', 'left')


class SeparateError(ValueError):
    """Bad separate() arguments."""


def _describe_rows(rows: List[int]) -> str:
    shown = ', '.join(str(r) for r in rows[:20])
    return f"[{shown}{', ...' if len(rows) > 20 else ''}]"


def _split(text: str, sep: Union[str, re.Pattern], n: int, merge: bool) -> List[str]:
    maxsplit = n - 1 if merge else 0
    if isinstance(sep, str):
        return text.split(sep, maxsplit) if merge else text.split(sep)
    return sep.split(text, maxsplit=maxsplit)


def separate(
    df: pd.DataFrame,
    col: str,
    into: Sequence[str],
    sep: Union[str, re.Pattern] = '/',
    remove: bool = True,
    convert: bool = False,
    extra: str = 'warn',
    fill: str = 'warn',
) -> pd.DataFrame:
    """
    Split `col` on `sep` into the columns named by `into`.

    Args:
        df: input table
        col: text column to split
        into: names of the new columns, one per field
        sep: literal delimiter, or a compiled regex
        remove: drop `col` from the result
        convert: make new columns numeric where every value parses
        extra: too many pieces - 'warn' (drop + warning), 'drop', 'merge'
        fill: too few pieces - 'warn' (pad right + warning), 'right', 'left'

    Row count and order are preserved; new columns sit where `col` was.

    Example:
        separate(df, 'rate', ['cases', 'population'])
        "745/19987071" -> cases="745", population="19987071"
    """
    into = list(into)
    if col not in df.columns:
        raise SeparateError(f"Column not found: {col}")
    if not into:
        raise SeparateError("into must name at least one column")
    if len(set(into)) != len(into):
        raise SeparateError(f"Duplicate names in into: {into}")
    if extra not in EXTRA_MODES:
        raise SeparateError(f"extra must be one of {EXTRA_MODES}, got '{extra}'")
    if fill not in FILL_MODES:
        raise SeparateError(f"fill must be one of {FILL_MODES}, got '{fill}'")
    if isinstance(sep, str) and not sep:
        raise SeparateError("sep must not be empty")

    clash = [c for c in into if c in df.columns and not (remove and c == col)]
    if clash:
        raise SeparateError(f"Output columns already exist: {clash}")

    n = len(into)
    fields: List[List[Optional[str]]] = []
    too_many: List[int] = []
    too_few: List[int] = []

    for row, value in enumerate(df[col].tolist(), 1):
        if pd.isna(value):
            fields.append([None] * n)
            continue

        pieces = _split(str(value), sep, n, extra == 'merge')
        if len(pieces) > n:
            too_many.append(row)
            pieces = pieces[:n]
        elif len(pieces) < n:
            too_few.append(row)
            pad = [None] * (n - len(pieces))
            pieces = pad + pieces if fill == 'left' else pieces + pad
        fields.append(pieces)

    if too_many and extra == 'warn':
        warn(f"Expected {n} pieces. Additional pieces discarded in {len(too_many)} rows "
             f"{_describe_rows(too_many)}.", call='separate()')
    if too_few and fill == 'warn':
        warn(f"Expected {n} pieces. Missing pieces filled with NA in {len(too_few)} rows "
             f"{_describe_rows(too_few)}.", call='separate()')

    new_cols = pd.DataFrame(fields, columns=into, index=df.index, dtype=object)
    if convert:
        for name in into:
            new_cols[name] = _convert(new_cols[name])

    position = list(df.columns).index(col)
    left = df.iloc[:, :position + (0 if remove else 1)]
    right = df.iloc[:, position + 1:]

    logger.debug(f"separate {col} -> {into}: {len(too_many)} long rows, {len(too_few)} short rows")
    return pd.concat([left, new_cols, right], axis=1)


def _convert(series: pd.Series) -> pd.Series:
    """Numeric when every non-null value parses, otherwise unchanged."""
    non_null = series.dropna()
    if non_null.empty:
        return series
    stripped = non_null.str.strip()
    if not stripped.str.fullmatch(r'[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?').all():
        return series
    converted = pd.to_numeric(series.str.strip())
    if converted.notna().all() and not stripped.str.contains(r'[.eE]').any():
        return converted.astype('int64')
    return converted


def unite(df: pd.DataFrame, col: str, from_cols: Sequence[str], sep: str = '/', remove: bool = True) -> pd.DataFrame:
    """Inverse of separate(): paste columns together with `sep`."""
    from_cols = list(from_cols)
    missing = [c for c in from_cols if c not in df.columns]
    if missing:
        raise SeparateError(f"Columns not found: {missing}")

    joined = df[from_cols].astype(object).where(df[from_cols].notna(), 'NA')
    united = joined.astype(str).apply(sep.join, axis=1)

    position = list(df.columns).index(from_cols[0])
    out = df.drop(columns=from_cols) if remove else df.copy()
    out.insert(min(position, len(out.columns)), col, united)
    return out
