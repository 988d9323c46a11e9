"""
Interactive debugging commands.

traceback_calls() lists the call stack of a failure, innermost first.
debug()/undebug()/debug_once() flag a function so calls run under pdb.
browse() drops into pdb at the caller's frame.
"""
import functools
import logging
import pdb
import sys
import traceback
from typing import Callable, List, Optional

from . import conditions
from .conditions import last_error

logger = logging.getLogger(__name__)

_CONDITIONS_FILE = conditions.__file__


def traceback_calls(exc: BaseException) -> List[str]:
    """
    Numbered call stack of an exception, innermost call first.

    e.g. ['3: inner()', '2: middle()', '1: outer()']
    """
    frames = traceback.extract_tb(exc.__traceback__)
    calls = [
        f"{frame.name}()" for frame in frames
        if not frame.name.startswith('<') and frame.filename != _CONDITIONS_FILE
    ]
    calls.reverse()
    n = len(calls)
    return [f"{n - i}: {call}" for i, call in enumerate(calls)]


def last_traceback() -> List[str]:
    """Call stack of the last error caught by evaluate(); empty when none."""
    exc = last_error()
    if exc is None:
        return []
    return traceback_calls(exc)


def browse() -> None:
    """Pause execution and open pdb in the calling frame."""
    frame = sys._getframe(1)
    logger.debug(f"browse() at {frame.f_code.co_name}")
    pdb.Pdb().set_trace(frame)


_DEBUG_ALWAYS = 'always'
_DEBUG_ONCE = 'once'


def debug(fn: Callable) -> Callable:
    """Wrap `fn` so every call steps through pdb until undebug() is called."""
    return _flag(fn, _DEBUG_ALWAYS)


def debug_once(fn: Callable) -> Callable:
    """Wrap `fn` so only its next call steps through pdb."""
    return _flag(fn, _DEBUG_ONCE)


def undebug(fn: Callable) -> Callable:
    """Return the original function behind a debug() wrapper."""
    return fn.__wrapped__ if hasattr(fn, '_debug_mode') else fn


def is_debugged(fn: Callable) -> bool:
    return getattr(fn, '_debug_mode', None) is not None


def _flag(fn: Callable, mode: str) -> Callable:
    original = undebug(fn)

    @functools.wraps(original)
    def wrapper(*args, **kwargs):
        current: Optional[str] = wrapper._debug_mode
        if current is None:
            return original(*args, **kwargs)
        if current == _DEBUG_ONCE:
            wrapper._debug_mode = None
        logger.debug(f"debugging {original.__name__}")
        return pdb.runcall(original, *args, **kwargs)

    wrapper._debug_mode = mode
    return wrapper
