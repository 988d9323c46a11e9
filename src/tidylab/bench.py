"""
Performance estimation - repeated timing, one-shot timing, profiling, sizes.

mark() is the workhorse: it runs each expression many times and reports
summary statistics, one row per expression.
"""
import cProfile
import gc
import logging
import os
import pstats
import statistics
import sys
import time
import tracemalloc
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence

import numpy as np
import pandas as pd

from .config import get_settings

logger = logging.getLogger(__name__)

MARK_COLUMNS = [
    'expression', 'min', 'median', 'mean', 'max',
    'itr_per_sec', 'n_itr', 'total_time', 'mem_alloc',
]


class BenchmarkError(ValueError):
    """Benchmarked expressions disagree, or the request is malformed."""


def _same_result(a: Any, b: Any) -> bool:
    if isinstance(a, (pd.DataFrame, pd.Series)):
        return isinstance(b, type(a)) and a.equals(b)
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        return np.array_equal(np.asarray(a), np.asarray(b))
    return a == b


def _label(fn: Callable, index: int) -> str:
    name = getattr(fn, '__name__', '')
    if not name or name == '<lambda>':
        return f"expr_{index}"
    return name


def _measure_allocation(fn: Callable) -> int:
    """Peak bytes allocated by one call of fn."""
    already = tracemalloc.is_tracing()
    if not already:
        tracemalloc.start()
    try:
        tracemalloc.reset_peak()
        before, _ = tracemalloc.get_traced_memory()
        fn()
        _, peak = tracemalloc.get_traced_memory()
    finally:
        if not already:
            tracemalloc.stop()
    return max(peak - before, 0)


def mark(
    *exprs: Callable[[], Any],
    iterations: Optional[int] = None,
    min_time: Optional[float] = None,
    check: bool = True,
    names: Optional[Sequence[str]] = None,
    memory: bool = True,
) -> pd.DataFrame:
    """
    Time zero-argument callables and summarise the runs.

    Args:
        exprs: callables to benchmark
        iterations: runs per expression (default: bench_iterations setting)
        min_time: keep running past `iterations` until this many seconds elapsed
        check: require every expression to return the same result
        names: labels for the expression column
        memory: measure peak allocation of one extra run

    Returns:
        DataFrame with MARK_COLUMNS, times in seconds, mem_alloc in bytes
    """
    if not exprs:
        raise BenchmarkError("mark() needs at least one expression")
    if names is not None and len(names) != len(exprs):
        raise BenchmarkError(f"Got {len(names)} names for {len(exprs)} expressions")

    if iterations is None:
        iterations = get_settings().bench_iterations
    if iterations < 1:
        raise BenchmarkError("iterations must be at least 1")

    rows = []
    reference = None
    for i, fn in enumerate(exprs, 1):
        label = names[i - 1] if names else _label(fn, i)

        # Warm-up run doubles as the result check
        result = fn()
        if check:
            if i == 1:
                reference = result
            elif not _same_result(reference, result):
                raise BenchmarkError(f"Each result must equal the first result: '{label}' differs")

        timings = _run(fn, iterations, min_time)
        total = sum(timings)
        rows.append({
            'expression': label,
            'min': min(timings),
            'median': statistics.median(timings),
            'mean': total / len(timings),
            'max': max(timings),
            'itr_per_sec': len(timings) / total if total > 0 else float('inf'),
            'n_itr': len(timings),
            'total_time': total,
            'mem_alloc': _measure_allocation(fn) if memory else np.nan,
        })
        logger.debug(f"mark {label}: {len(timings)} runs, median {rows[-1]['median']:.3g}s")

    return pd.DataFrame(rows, columns=MARK_COLUMNS)


def _run(fn: Callable, iterations: int, min_time: Optional[float]) -> List[float]:
    timings = []
    gc_was_enabled = gc.isenabled()
    gc.disable()
    try:
        started = time.perf_counter()
        while True:
            t0 = time.perf_counter()
            fn()
            timings.append(time.perf_counter() - t0)
            if len(timings) >= iterations:
                if min_time is None or time.perf_counter() - started >= min_time:
                    break
    finally:
        if gc_was_enabled:
            gc.enable()
    return timings


@dataclass
class Timing:
    """CPU and wall-clock seconds for one evaluation."""
    user: float
    system: float
    elapsed: float
    result: Any = None

    def __str__(self) -> str:
        return f"   user  system elapsed\n{self.user:7.3f} {self.system:7.3f} {self.elapsed:7.3f}"


def system_time(fn: Callable[[], Any]) -> Timing:
    """Evaluate fn once and report user, system and elapsed time."""
    before = os.times()
    wall = time.perf_counter()
    result = fn()
    elapsed = time.perf_counter() - wall
    after = os.times()
    return Timing(
        user=after.user - before.user,
        system=after.system - before.system,
        elapsed=elapsed,
        result=result,
    )


def profile(fn: Callable[[], Any], sort: str = 'cumulative', limit: int = 20) -> pd.DataFrame:
    """
    Profile one call of fn with cProfile.

    Returns one row per function: function, ncalls, tottime, cumtime,
    sorted by `sort` ('cumulative' or 'tottime').
    """
    if sort not in ('cumulative', 'tottime'):
        raise ValueError(f"Unsupported sort key: {sort}")

    profiler = cProfile.Profile()
    profiler.runcall(fn)
    stats = pstats.Stats(profiler)

    rows = []
    for (filename, lineno, func), (_, ncalls, tottime, cumtime, _) in stats.stats.items():
        rows.append({
            'function': f"{func} ({filename}:{lineno})",
            'ncalls': ncalls,
            'tottime': tottime,
            'cumtime': cumtime,
        })
    df = pd.DataFrame(rows, columns=['function', 'ncalls', 'tottime', 'cumtime'])
    key = 'cumtime' if sort == 'cumulative' else 'tottime'
    return df.sort_values(key, ascending=False).head(limit).reset_index(drop=True)


def object_size(obj: Any) -> int:
    """
    Deep size of an object in bytes.

    Containers are walked recursively; an object reachable twice counts once.
    """
    seen = set()

    def _size(o: Any) -> int:
        if id(o) in seen:
            return 0
        seen.add(id(o))

        if isinstance(o, pd.DataFrame):
            return int(o.memory_usage(deep=True, index=True).sum())
        if isinstance(o, pd.Series):
            return int(o.memory_usage(deep=True, index=True))
        if isinstance(o, np.ndarray):
            return sys.getsizeof(o) if o.base is None else o.nbytes

        size = sys.getsizeof(o)
        if isinstance(o, dict):
            size += sum(_size(k) + _size(v) for k, v in o.items())
        elif isinstance(o, (list, tuple, set, frozenset)):
            size += sum(_size(item) for item in o)
        elif hasattr(o, '__dict__'):
            size += _size(vars(o))
        return size

    return _size(obj)


def format_bytes(n: float) -> str:
    """e.g. 1536 -> '1.5 KB'"""
    for unit in ('B', 'KB', 'MB', 'GB'):
        if abs(n) < 1024 or unit == 'GB':
            return f"{n:.0f} {unit}" if unit == 'B' else f"{n:.1f} {unit}"
        n /= 1024
    return f"{n:.1f} GB"


def format_seconds(s: float) -> str:
    """e.g. 0.0000123 -> '12.3µs'"""
    if s != s:
        return 'NA'
    if s < 1e-6:
        return f"{s * 1e9:.1f}ns"
    if s < 1e-3:
        return f"{s * 1e6:.1f}µs"
    if s < 1:
        return f"{s * 1e3:.1f}ms"
    return f"{s:.2f}s"
