"""
Iteration strategies - the same jobs done with loops, apply-style
mapping, vectorised numpy operations and recursion.
"""
import functools
import logging
from typing import Any, Callable, Iterable, List

import numpy as np
import pandas as pd

from . import bench

logger = logging.getLogger(__name__)


# =============================================================================
# Loops
# =============================================================================

def for_loop_sum(xs: Iterable[float]) -> float:
    total = 0
    for x in xs:
        total += x
    return total


def while_loop_until(start: float, step: float, limit: float) -> List[float]:
    """Values from `start`, adding `step` while still below `limit`."""
    if step <= 0:
        raise ValueError("step must be positive or the loop never ends")
    values = []
    current = start
    while current < limit:
        values.append(current)
        current += step
    return values


def growing_squares(n: int) -> List[int]:
    """Squares 1..n, appending to a list that grows each pass."""
    out = []
    for i in range(1, n + 1):
        out = out + [i * i]
    return out


def preallocated_squares(n: int) -> np.ndarray:
    """Squares 1..n, filling a preallocated array."""
    out = np.zeros(n, dtype=np.int64)
    for i in range(n):
        out[i] = (i + 1) * (i + 1)
    return out


def vectorised_squares(n: int) -> np.ndarray:
    return np.arange(1, n + 1, dtype=np.int64) ** 2


# =============================================================================
# Apply-style mapping
# =============================================================================

def map_values(fn: Callable, xs: Iterable) -> List[Any]:
    """Apply fn to every element; always a list."""
    return [fn(x) for x in xs]


def sapply(fn: Callable, xs: Iterable) -> Any:
    """
    Apply fn and simplify.

    Scalar results of one type become a numpy array, anything else stays a list.
    """
    results = map_values(fn, xs)
    if not results:
        return []
    kinds = {type(r) for r in results}
    if len(kinds) == 1 and np.isscalar(results[0]):
        return np.array(results)
    return results


def vapply(fn: Callable, xs: Iterable, template: Any) -> np.ndarray:
    """
    Apply fn, checking every result against the template's type.

    Raises:
        TypeError: a result does not match the template type
    """
    expected = type(template)
    results = []
    for i, x in enumerate(xs):
        value = fn(x)
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            raise TypeError(
                f"values must be type '{expected.__name__}', "
                f"but result {i + 1} is type '{type(value).__name__}'"
            )
        results.append(value)
    dtype = object if isinstance(template, str) else np.asarray(template).dtype
    return np.array(results, dtype=dtype)


def apply_rows(df: pd.DataFrame, fn: Callable[[pd.Series], Any]) -> pd.Series:
    """Row-wise apply over a table."""
    return df.apply(fn, axis=1)


# =============================================================================
# Recursion
# =============================================================================

def factorial(n: int) -> int:
    if n < 0:
        raise ValueError("factorial() is undefined for negative numbers")
    if n <= 1:
        return 1
    return n * factorial(n - 1)


def fibonacci(n: int) -> int:
    """Plain recursion; exponential time."""
    if n < 0:
        raise ValueError("fibonacci() is undefined for negative numbers")
    if n < 2:
        return n
    return fibonacci(n - 1) + fibonacci(n - 2)


@functools.lru_cache(maxsize=None)
def fibonacci_memo(n: int) -> int:
    """Recursion with a cache; linear time."""
    if n < 0:
        raise ValueError("fibonacci_memo() is undefined for negative numbers")
    if n < 2:
        return n
    return fibonacci_memo(n - 1) + fibonacci_memo(n - 2)


# =============================================================================
# Comparison
# =============================================================================

def compare_strategies(n: int = 1000, iterations: int = 20) -> pd.DataFrame:
    """Benchmark the squares strategies against each other."""
    logger.debug(f"comparing iteration strategies for n={n}")
    return bench.mark(
        lambda: np.array(growing_squares(n)),
        lambda: preallocated_squares(n),
        lambda: np.array(sapply(lambda i: i * i, range(1, n + 1))),
        lambda: vectorised_squares(n),
        names=['growing loop', 'preallocated loop', 'sapply', 'vectorised'],
        iterations=iterations,
    )
