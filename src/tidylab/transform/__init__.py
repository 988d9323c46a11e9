"""Transform module for reshaping tables.

Wider/longer pivots, fixed-field splitting, and wide period layouts.
"""
from .pivot import (
    PivotError,
    pivot_wider,
    pivot_longer,
)
from .separate import (
    SeparateError,
    separate,
    unite,
)
from .unpivot import (
    parse_period_column,
    unpivot_wide_periods,
    is_period_column,
)

__all__ = [
    'PivotError',
    'pivot_wider',
    'pivot_longer',
    'SeparateError',
    'separate',
    'unite',
    'parse_period_column',
    'unpivot_wide_periods',
    'is_period_column',
]
