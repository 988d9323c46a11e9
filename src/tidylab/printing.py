"""
Printing conventions.

- show(): the printed form of a value, on stdout
- cat(): raw concatenation, no quotes and no implicit newline
- message(): diagnostics on stderr, handled as a condition
"""
import math
import numbers
import sys
from typing import Any, Optional

import numpy as np
import pandas as pd

from .conditions import message
from .config import get_settings

__all__ = ['show', 'cat', 'message', 'format_num', 'fmt']


def _render(x: Any) -> str:
    if isinstance(x, pd.DataFrame):
        if x.empty:
            return f"Empty table: {len(x)} rows x {len(x.columns)} columns"
        return x.to_string()
    if isinstance(x, pd.Series):
        return x.to_string()
    if isinstance(x, float):
        return format_num(x)
    return repr(x)


def show(x: Any) -> Any:
    """Print the printed form of `x` and return `x` unchanged."""
    sys.stdout.write(_render(x) + '\n')
    return x


def cat(*parts, sep: str = ' ', end: str = '') -> None:
    """Write parts as plain text. Sequences are spread out element by element."""
    pieces = []
    for part in parts:
        if isinstance(part, (list, tuple, np.ndarray, pd.Series)):
            pieces.extend(_plain(p) for p in part)
        else:
            pieces.append(_plain(part))
    sys.stdout.write(sep.join(pieces) + end)


def _plain(x: Any) -> str:
    if isinstance(x, float):
        return format_num(x)
    return str(x)


def format_num(
    x: Any,
    digits: Optional[int] = None,
    nsmall: int = 0,
    big_mark: str = '',
) -> Any:
    """
    Format a number with `digits` significant digits.

    `nsmall` forces at least that many decimals, `big_mark` groups thousands.
    Sequences are formatted element-wise and returned as a list.
    """
    if isinstance(x, (list, tuple, np.ndarray, pd.Series)):
        return [format_num(v, digits, nsmall, big_mark) for v in x]

    if pd.api.types.is_scalar(x) and pd.isna(x):
        return 'NA'
    if not isinstance(x, numbers.Number) or isinstance(x, bool):
        return str(x)

    if digits is None:
        digits = get_settings().digits
    if digits < 1:
        raise ValueError(f"digits must be at least 1, got {digits}")
    if isinstance(x, numbers.Integral):
        text = f"{int(x):,}" if big_mark else str(int(x))
        if nsmall:
            text += '.' + '0' * nsmall
        return text.replace(',', big_mark) if big_mark else text

    value = float(x)
    if math.isinf(value):
        return 'Inf' if value > 0 else '-Inf'

    text = f"{value:.{digits}g}"
    # Whole numbers up to 15 digits print in full, never as 1.234568e+08
    if 'e' in text and 1 <= abs(value) < 1e15:
        text = f"{value:.0f}"
    if 'e' not in text:
        decimals = len(text.split('.')[1]) if '.' in text else 0
        decimals = max(decimals, nsmall)
        text = f"{value:,.{decimals}f}" if big_mark else f"{value:.{decimals}f}"
        if big_mark:
            text = text.replace(',', big_mark)
    return text


def fmt(template: str, *args) -> Any:
    """
    printf-style formatting.

    When any argument is a sequence the template is applied element-wise
    (scalars are recycled) and a list is returned.
    """
    seqs = [a for a in args if isinstance(a, (list, tuple, np.ndarray, pd.Series))]
    if not seqs:
        return template % args

    length = len(seqs[0])
    if any(len(s) != length for s in seqs):
        raise ValueError("fmt() arguments must have the same length")

    rows = []
    for i in range(length):
        row = tuple(
            list(a)[i] if isinstance(a, (list, tuple, np.ndarray, pd.Series)) else a
            for a in args
        )
        rows.append(template % row)
    return rows

