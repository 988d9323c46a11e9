"""
Conditions - signal and handle informational, warning and error conditions.

Three tiers:
- message: surfaced immediately on stderr unless a handler muffles it
- warning: buffered until the enclosing evaluate() finishes (warn=0),
  shown immediately (warn=1), turned into an error (warn=2) or dropped (warn=-1)
- error: halts evaluation unless an exiting handler (try_catch) catches it

Handlers live on a single stack. Exiting handlers (try_catch) unwind to
their frame and return the handler's value; calling handlers
(with_calling_handlers) run in place and may call muffle() to stop the
default display of a message or warning.
"""
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .config import (
    WARN_FATAL,
    WARN_IGNORE,
    WARN_IMMEDIATE,
    get_settings,
)
from .console import err_console

logger = logging.getLogger(__name__)


class Condition:
    """Base condition: a message plus the call that raised it."""
    kind = 'condition'

    def __init__(self, message: str, call: Optional[str] = None, exception: Optional[BaseException] = None):
        self.message = message
        self.call = call
        self.exception = exception

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"<{type(self).__name__}: {self.message}>"

    def __eq__(self, other) -> bool:
        return (
            type(self) is type(other)
            and self.message == other.message
            and self.call == other.call
        )

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.message, self.call))


class MessageCondition(Condition):
    kind = 'message'


class WarningCondition(Condition):
    kind = 'warning'


class ErrorCondition(Condition):
    kind = 'error'


class ConditionError(Exception):
    """Raised when an error condition is not caught by any handler."""

    def __init__(self, condition: ErrorCondition, signalled: bool = False):
        super().__init__(condition.message)
        self.condition = condition
        self.signalled = signalled


class _Unwind(BaseException):
    """Carries a condition back to the try_catch frame that will handle it."""

    def __init__(self, frame: '_HandlerFrame', condition: Condition, handler: Callable):
        super().__init__(condition.message)
        self.frame = frame
        self.condition = condition
        self.handler = handler


class _Muffle(BaseException):
    """Restart used by muffle() inside a calling handler."""


@dataclass
class _HandlerFrame:
    handlers: Dict[str, Callable]
    exiting: bool

    def match(self, condition: Condition) -> Optional[Callable]:
        handler = self.handlers.get(condition.kind)
        if handler is None:
            handler = self.handlers.get('condition')
        return handler


_handler_stack: List[_HandlerFrame] = []


# =============================================================================
# Top-level evaluation
# =============================================================================

def _default_display(kind: str, text: str) -> None:
    err_console.print(text, style=kind, markup=False, soft_wrap=True)


@dataclass
class Evaluation:
    """Outcome of one top-level evaluation."""
    value: Any = None
    error: Optional[ErrorCondition] = None
    warnings: List[WarningCondition] = field(default_factory=list)
    output: List[Tuple[str, str]] = field(default_factory=list)
    policy: Optional[int] = None
    display: Callable[[str, str], None] = _default_display
    exception: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def show(self, kind: str, text: str) -> None:
        self.output.append((kind, text))
        self.display(kind, text)


_evaluations: List[Evaluation] = []
_last_warnings: List[WarningCondition] = []
_last_error: Optional[BaseException] = None


def _current_evaluation() -> Optional[Evaluation]:
    return _evaluations[-1] if _evaluations else None


def _show(kind: str, text: str) -> None:
    ev = _current_evaluation()
    if ev is not None:
        ev.show(kind, text)
    else:
        _default_display(kind, text)


def _warning_policy() -> int:
    ev = _current_evaluation()
    if ev is not None and ev.policy is not None:
        return ev.policy
    return get_settings().warn


def _flush_warnings(ev: Evaluation, pending: List[WarningCondition]) -> None:
    global _last_warnings
    _last_warnings = list(pending)
    if not pending:
        return

    prefix = 'In addition: ' if ev.error is not None else ''
    if len(pending) == 1:
        lines = [f"{prefix}Warning message:", _describe(pending[0])]
    else:
        lines = [f"{prefix}Warning messages:"]
        lines.extend(f"{i}: {_describe(w)}" for i, w in enumerate(pending, 1))
    ev.show('warning', '\n'.join(lines))


def _describe(condition: Condition) -> str:
    if condition.call:
        return f"In {condition.call}: {condition.message}"
    return condition.message


def evaluate(
    expr: Callable[[], Any],
    policy: Optional[int] = None,
    display: Optional[Callable[[str, str], None]] = None,
) -> Evaluation:
    """
    Run `expr` as a top-level evaluation.

    Uncaught errors are displayed as `Error: <msg>` and recorded on the
    returned Evaluation instead of propagating. Warnings buffered under the
    default policy are displayed once `expr` has finished.
    """
    global _last_error
    ev = Evaluation(policy=policy, display=display or _default_display)
    pending: List[WarningCondition] = []
    ev.warnings = pending
    _evaluations.append(ev)
    try:
        ev.value = expr()
    except Exception as e:
        condition = as_condition(e)
        ev.error = condition
        ev.exception = e
        _last_error = e
        label = f"Error in {condition.call}" if condition.call else 'Error'
        ev.show('error', f"{label}: {condition.message}")
        logger.debug(f"evaluation failed: {condition.message}")
    finally:
        _evaluations.pop()
    _flush_warnings(ev, pending)
    return ev


def last_warnings() -> List[WarningCondition]:
    """Warnings flushed by the most recent evaluate()."""
    return list(_last_warnings)


def last_error() -> Optional[BaseException]:
    """Exception behind the most recent error caught by evaluate()."""
    return _last_error


# =============================================================================
# Signalling
# =============================================================================

def _caller_name(depth: int = 2) -> Optional[str]:
    frame = inspect.currentframe()
    try:
        for _ in range(depth):
            if frame is None:
                return None
            frame = frame.f_back
        if frame is None or frame.f_code.co_name.startswith('<'):
            return None
        return f"{frame.f_code.co_name}()"
    finally:
        del frame


def _join(parts) -> str:
    return ''.join(str(p) for p in parts)


def as_condition(exc: BaseException) -> ErrorCondition:
    """Wrap an exception as an error condition."""
    if isinstance(exc, ConditionError):
        return exc.condition
    return ErrorCondition(str(exc) or type(exc).__name__, exception=exc)


def signal(condition: Condition) -> bool:
    """
    Offer a condition to the active handlers, innermost first.

    Returns True when a calling handler muffled it. An exiting handler that
    matches unwinds straight to its try_catch.
    """
    stack = _handler_stack
    for i in range(len(stack) - 1, -1, -1):
        frame = stack[i]
        handler = frame.match(condition)
        if handler is None:
            continue
        if frame.exiting:
            raise _Unwind(frame, condition, handler)

        # Handlers run with only the outer frames active
        saved = stack[i:]
        del stack[i:]
        try:
            handler(condition)
        except _Muffle:
            if isinstance(condition, ErrorCondition):
                raise RuntimeError("error conditions cannot be muffled")
            logger.debug(f"{condition.kind} muffled: {condition.message}")
            return True
        finally:
            stack.extend(saved)
    return False


def muffle() -> None:
    """Stop default display of the message or warning being handled."""
    raise _Muffle()


def message(*parts, call: Optional[str] = None) -> None:
    """Signal an informational condition; shown on stderr unless muffled."""
    condition = MessageCondition(_join(parts), call=call)
    if not signal(condition):
        _show('message', condition.message)


def warn(*parts, call: Optional[str] = None) -> None:
    """Signal a warning; display follows the active warning policy."""
    if call is None:
        call = _caller_name()
    condition = WarningCondition(_join(parts), call=call)
    if signal(condition):
        return

    policy = _warning_policy()
    if policy <= WARN_IGNORE:
        return
    if policy >= WARN_FATAL:
        stop(f"(converted from warning) {condition.message}", call=call)

    ev = _current_evaluation()
    if policy == WARN_IMMEDIATE or ev is None:
        label = f"Warning in {call}" if call else 'Warning'
        _show('warning', f"{label}: {condition.message}")
    else:
        ev.warnings.append(condition)


def stop(*parts, call: Optional[str] = None) -> None:
    """Signal an error and halt unless an exiting handler catches it."""
    if len(parts) == 1 and isinstance(parts[0], ErrorCondition):
        condition = parts[0]
    else:
        if call is None:
            call = _caller_name()
        condition = ErrorCondition(_join(parts), call=call)
    signal(condition)
    raise ConditionError(condition, signalled=True)


# =============================================================================
# Handlers
# =============================================================================

def _collect(**handlers) -> Dict[str, Callable]:
    return {kind: fn for kind, fn in handlers.items() if fn is not None}


def _pop(frame: _HandlerFrame) -> None:
    if _handler_stack and _handler_stack[-1] is frame:
        _handler_stack.pop()
    elif frame in _handler_stack:
        del _handler_stack[_handler_stack.index(frame):]


def try_catch(
    expr: Callable[[], Any],
    message: Optional[Callable[[Condition], Any]] = None,
    warning: Optional[Callable[[Condition], Any]] = None,
    error: Optional[Callable[[Condition], Any]] = None,
    condition: Optional[Callable[[Condition], Any]] = None,
    finally_: Optional[Callable[[], Any]] = None,
) -> Any:
    """
    Evaluate `expr` with exiting handlers.

    The first matching condition abandons `expr`; the handler's return value
    becomes the result. Plain Python exceptions count as errors.
    """
    frame = _HandlerFrame(
        _collect(message=message, warning=warning, error=error, condition=condition),
        exiting=True,
    )
    _handler_stack.append(frame)
    try:
        try:
            return expr()
        finally:
            _pop(frame)
    except _Unwind as unwind:
        if unwind.frame is not frame:
            raise
        return unwind.handler(unwind.condition)
    except Exception as e:
        cond = as_condition(e)
        handler = frame.match(cond)
        if handler is None:
            raise
        return handler(cond)
    finally:
        if finally_ is not None:
            finally_()


def with_calling_handlers(
    expr: Callable[[], Any],
    message: Optional[Callable[[Condition], Any]] = None,
    warning: Optional[Callable[[Condition], Any]] = None,
    error: Optional[Callable[[Condition], Any]] = None,
    condition: Optional[Callable[[Condition], Any]] = None,
) -> Any:
    """Evaluate `expr` with calling handlers that run where the condition is raised."""
    frame = _HandlerFrame(
        _collect(message=message, warning=warning, error=error, condition=condition),
        exiting=False,
    )
    _handler_stack.append(frame)
    try:
        try:
            return expr()
        finally:
            _pop(frame)
    except Exception as e:
        # Python exceptions never went through signal(); give the handler a look
        if not (isinstance(e, ConditionError) and e.signalled):
            cond = as_condition(e)
            handler = frame.match(cond)
            if handler is not None:
                try:
                    handler(cond)
                except _Muffle:
                    raise RuntimeError("error conditions cannot be muffled") from e
        raise


def suppress_messages(expr: Callable[[], Any]) -> Any:
    return with_calling_handlers(expr, message=lambda c: muffle())


def suppress_warnings(expr: Callable[[], Any]) -> Any:
    return with_calling_handlers(expr, warning=lambda c: muffle())


def try_(expr: Callable[[], Any], silent: bool = False) -> Any:
    """Evaluate `expr`; on error show it (unless silent) and return the ErrorCondition."""
    def _on_error(cond: Condition) -> Condition:
        if not silent:
            label = f"Error in {cond.call}" if cond.call else 'Error'
            _show('error', f"{label}: {cond.message}")
        return cond

    return try_catch(expr, error=_on_error)
