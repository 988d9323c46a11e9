"""Wider/longer pivots - structural reshapes that keep every value."""
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import pandas as pd

logger = logging.getLogger(__name__)

Columns = Union[str, Sequence[str]]


class PivotError(ValueError):
    """Pivot request cannot be satisfied."""


def _as_list(cols: Optional[Columns]) -> List[str]:
    if cols is None:
        return []
    if isinstance(cols, str):
        return [cols]
    return list(cols)


def _check_columns(df: pd.DataFrame, cols: List[str], role: str) -> None:
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise PivotError(f"{role} columns not found: {missing}")


def pivot_wider(
    df: pd.DataFrame,
    names_from: Columns,
    values_from: Columns,
    id_cols: Optional[Columns] = None,
    names_sep: str = '_',
    names_prefix: str = '',
    values_fill: Any = None,
    values_fn: Optional[Union[str, Callable]] = None,
) -> pd.DataFrame:
    """
    Spread the distinct values of `names_from` into new columns.

    Args:
        df: long table
        names_from: column(s) whose values become headers
        values_from: column(s) whose entries fill the new columns
        id_cols: columns identifying a row (default: everything else)
        names_sep: joins parts of composite headers
        names_prefix: prepended to every new header
        values_fill: replaces the nulls left by missing combinations
        values_fn: aggregation for duplicate (id, name) pairs

    Returns:
        One row per distinct id combination, in order of first appearance,
        then one column per distinct name (per value column).

    Example:
        country year type       count          country year cases population
        A       2000 cases        100    ->    A       2000   100      10000
        A       2000 population 10000
    """
    names = _as_list(names_from)
    values = _as_list(values_from)
    if not names or not values:
        raise PivotError("names_from and values_from must name at least one column")
    _check_columns(df, names, 'names_from')
    _check_columns(df, values, 'values_from')

    if id_cols is None:
        ids = [c for c in df.columns if c not in names and c not in values]
    else:
        ids = _as_list(id_cols)
        _check_columns(df, ids, 'id')
        overlap = [c for c in ids if c in names or c in values]
        if overlap:
            raise PivotError(f"id columns overlap names/values columns: {overlap}")

    # Composite header keys, e.g. ('cases', 2000) -> 'cases_2000'
    if len(names) == 1 and not names_prefix:
        key_names = list(df[names[0]])
    else:
        key_names = [
            names_prefix + names_sep.join(str(v) for v in row)
            for row in df[names].itertuples(index=False, name=None)
        ]
    work = df[ids + values].copy()
    work['__name__'] = key_names

    keys = ids + ['__name__']
    duplicated = work.duplicated(subset=keys, keep=False)
    if duplicated.any() and values_fn is None:
        examples = work.loc[duplicated, keys].drop_duplicates().head(5)
        raise PivotError(
            f"Values are not uniquely identified ({int(duplicated.sum())} rows); "
            f"pass values_fn to aggregate. Duplicate keys: "
            f"{examples.to_dict(orient='records')}"
        )
    if duplicated.any():
        work = work.groupby(keys, sort=False, dropna=False)[values].agg(values_fn).reset_index()

    # Row and column order follow first appearance; null ids and names are
    # keys like any other value
    name_codes, name_order = pd.factorize(work['__name__'], use_na_sentinel=False)
    if ids:
        groups = work.groupby(ids, sort=False, dropna=False).ngroup()
        # Renumber so row positions follow first appearance
        positions = pd.factorize(groups)[0].tolist()
        id_frame = work.loc[~groups.duplicated().to_numpy(), ids].reset_index(drop=True)
    else:
        id_frame = pd.DataFrame(index=[0])
        positions = [0] * len(work)

    headers: Dict[tuple, Any] = {}
    for value_col in values:
        for code, name in enumerate(name_order):
            if pd.isna(name):
                name = 'NA'
            header = name if len(values) == 1 else f"{value_col}{names_sep}{name}"
            if header in id_frame.columns or header in headers.values():
                raise PivotError(f"New column '{header}' collides with an existing column")
            headers[(value_col, code)] = header

    spread: Dict[Any, pd.Series] = {}
    for value_col in values:
        cells = [[None] * len(id_frame) for _ in name_order]
        for pos, code, val in zip(positions, name_codes, work[value_col]):
            cells[code][pos] = val
        for code in range(len(name_order)):
            spread[headers[(value_col, code)]] = _typed(cells[code], work[value_col])

    out = pd.concat([id_frame, pd.DataFrame(spread, index=id_frame.index)], axis=1)
    if values_fill is not None:
        out[list(spread)] = out[list(spread)].fillna(values_fill)

    logger.debug(f"pivot_wider: {df.shape} -> {out.shape}")
    return out


def _typed(cells: list, source: pd.Series) -> pd.Series:
    """Rebuild a spread column, keeping the source dtype when nothing is missing."""
    series = pd.Series(cells, dtype=object)
    if series.isna().any():
        if pd.api.types.is_numeric_dtype(source.dtype) and not pd.api.types.is_bool_dtype(source.dtype):
            return pd.to_numeric(series)
        return series
    try:
        return series.astype(source.dtype)
    except (TypeError, ValueError):
        return series


def pivot_longer(
    df: pd.DataFrame,
    cols: Union[Columns, Callable[[str], bool]],
    names_to: str = 'name',
    values_to: str = 'value',
    names_prefix: Optional[str] = None,
    values_drop_na: bool = False,
) -> pd.DataFrame:
    """
    Collapse `cols` into a names column and a values column.

    One output row per (input row, collapsed column) pair, ordered by input
    row then column. Columns not collapsed are repeated on every row.
    """
    if callable(cols):
        selected = [c for c in df.columns if cols(c)]
    else:
        selected = _as_list(cols)
        _check_columns(df, selected, 'cols')
    if not selected:
        raise PivotError("pivot_longer() needs at least one column to collapse")

    kept = [c for c in df.columns if c not in selected]
    clash = [c for c in (names_to, values_to) if c in kept]
    if clash:
        raise PivotError(f"Output column names already in use: {clash}")
    if names_to == values_to:
        raise PivotError("names_to and values_to must differ")

    n = len(df)
    k = len(selected)
    base = df[kept].reset_index(drop=True)
    out = base.loc[base.index.repeat(k)].reset_index(drop=True)

    labels = list(selected)
    if names_prefix:
        labels = [
            str(c)[len(names_prefix):] if str(c).startswith(names_prefix) else c
            for c in labels
        ]
    out[names_to] = labels * n

    stacked = df[selected].to_numpy(dtype=object).reshape(n * k)
    values = pd.Series(stacked, dtype=object)
    dtypes = {str(t) for t in df[selected].dtypes}
    if len(dtypes) == 1:
        try:
            values = values.astype(df[selected[0]].dtype)
        except (TypeError, ValueError):
            # mixed python objects stay as object dtype
            pass
    elif all(pd.api.types.is_numeric_dtype(t) for t in df[selected].dtypes):
        values = pd.to_numeric(values)
    out[values_to] = values

    if values_drop_na:
        out = out[out[values_to].notna()].reset_index(drop=True)

    logger.debug(f"pivot_longer: {df.shape} -> {out.shape}")
    return out
