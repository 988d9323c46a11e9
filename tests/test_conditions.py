"""Test the message / warning / error condition system."""
import pytest

from tidylab.conditions import (
    ConditionError,
    ErrorCondition,
    MessageCondition,
    WarningCondition,
    evaluate,
    last_warnings,
    message,
    muffle,
    stop,
    suppress_messages,
    suppress_warnings,
    try_,
    try_catch,
    warn,
    with_calling_handlers,
)
from tidylab.config import WARN_BUFFERED, WARN_FATAL, WARN_IGNORE, WARN_IMMEDIATE, options


class Recorder:
    """Collects displayed output and program events in one ordered log."""

    def __init__(self):
        self.log = []

    def display(self, kind, text):
        self.log.append(f"{kind}: {text}")

    def event(self, name):
        self.log.append(name)


class TestWarningPolicy:

    def test_buffered_warning_shown_after_evaluation(self):
        rec = Recorder()

        def body():
            warn("careful", call='f()')
            rec.event('after warn')
            return 42

        ev = evaluate(body, policy=WARN_BUFFERED, display=rec.display)

        assert ev.value == 42
        assert rec.log == ['after warn', 'warning: Warning message:\nIn f(): careful']

    def test_immediate_warning_shown_before_evaluation_continues(self):
        rec = Recorder()

        def body():
            warn("careful", call='f()')
            rec.event('after warn')

        evaluate(body, policy=WARN_IMMEDIATE, display=rec.display)
        assert rec.log == ['warning: Warning in f(): careful', 'after warn']

    def test_fatal_warning_becomes_error(self):
        rec = Recorder()

        def body():
            warn("careful", call='f()')
            rec.event('unreachable')

        ev = evaluate(body, policy=WARN_FATAL, display=rec.display)
        assert not ev.ok
        assert ev.error.message == '(converted from warning) careful'
        assert rec.log == ['error: Error in f(): (converted from warning) careful']

    def test_ignored_warning(self):
        rec = Recorder()
        ev = evaluate(lambda: warn("quiet"), policy=WARN_IGNORE, display=rec.display)
        assert rec.log == []
        assert ev.warnings == []

    def test_policy_from_settings(self):
        rec = Recorder()
        with options(warn=WARN_IMMEDIATE):
            evaluate(lambda: (warn("now"), rec.event('after'))[1], display=rec.display)
        assert rec.log == ['warning: Warning: now', 'after']

    def test_several_warnings_numbered(self):
        rec = Recorder()

        def body():
            warn("one")
            warn("two")

        ev = evaluate(body, display=rec.display)
        assert rec.log == ['warning: Warning messages:\n1: In body(): one\n2: In body(): two']
        assert [w.message for w in last_warnings()] == ['one', 'two']
        assert len(ev.warnings) == 2

    def test_warnings_reported_after_error(self):
        rec = Recorder()

        def body():
            warn("first")
            stop("boom")

        evaluate(body, display=rec.display)
        assert rec.log == [
            'error: Error in body(): boom',
            'warning: In addition: Warning message:\nIn body(): first',
        ]

    def test_call_is_taken_from_caller(self):
        rec = Recorder()

        def compute_ratio():
            warn("denominator is zero")

        evaluate(compute_ratio, display=rec.display)
        assert rec.log == ['warning: Warning message:\nIn compute_ratio(): denominator is zero']


class TestMessages:

    def test_message_shown_immediately(self):
        rec = Recorder()

        def body():
            message("loading ", 3, " files")
            rec.event('after message')

        evaluate(body, display=rec.display)
        assert rec.log == ['message: loading 3 files', 'after message']

    def test_message_goes_to_stderr(self, capsys):
        message("status")
        captured = capsys.readouterr()
        assert captured.out == ''
        assert 'status' in captured.err

    def test_suppress_messages(self):
        rec = Recorder()
        ev = evaluate(lambda: suppress_messages(lambda: (message("hidden"), 'done')[1]), display=rec.display)
        assert ev.value == 'done'
        assert rec.log == []


class TestTryCatch:

    def test_error_handler_replaces_result(self):
        result = try_catch(lambda: stop("bad input"), error=lambda c: f"handled: {c.message}")
        assert result == 'handled: bad input'

    def test_warning_handler_abandons_expression(self):
        steps = []

        def body():
            steps.append('before')
            warn("odd value")
            steps.append('after')
            return 'finished'

        result = try_catch(body, warning=lambda c: 'recovered')
        assert result == 'recovered'
        assert steps == ['before']

    def test_caught_condition_not_displayed(self):
        rec = Recorder()
        ev = evaluate(lambda: try_catch(lambda: warn("x"), warning=lambda c: None), display=rec.display)
        assert rec.log == []
        assert ev.warnings == []

    def test_message_handler(self):
        result = try_catch(lambda: message("hello"), message=lambda c: type(c).__name__)
        assert result == 'MessageCondition'

    def test_python_exception_is_an_error(self):
        result = try_catch(lambda: 1 / 0, error=lambda c: 'div')
        assert result == 'div'

    def test_unhandled_kind_propagates(self):
        with pytest.raises(ConditionError):
            try_catch(lambda: stop("boom"), warning=lambda c: 'nope')

    def test_finally_runs(self):
        ran = []
        try_catch(lambda: 1, finally_=lambda: ran.append(True))
        with pytest.raises(ZeroDivisionError):
            try_catch(lambda: 1 / 0, finally_=lambda: ran.append(True))
        assert ran == [True, True]

    def test_innermost_handler_wins(self):
        result = try_catch(
            lambda: try_catch(lambda: stop("x"), error=lambda c: 'inner'),
            error=lambda c: 'outer',
        )
        assert result == 'inner'

    def test_error_in_handler_goes_to_outer(self):
        result = try_catch(
            lambda: try_catch(lambda: stop("x"), error=lambda c: stop("again")),
            error=lambda c: f"outer saw {c.message}",
        )
        assert result == 'outer saw again'

    def test_condition_handler_catches_everything(self):
        kinds = [
            try_catch(lambda: message("m"), condition=lambda c: c.kind),
            try_catch(lambda: warn("w"), condition=lambda c: c.kind),
            try_catch(lambda: stop("e"), condition=lambda c: c.kind),
        ]
        assert kinds == ['message', 'warning', 'error']


class TestCallingHandlers:

    def test_handler_runs_and_evaluation_continues(self):
        rec = Recorder()

        def body():
            warn("w1")
            rec.event('continued')
            return 'done'

        def handler(c):
            rec.event(f"handled {c.message}")
            muffle()

        ev = evaluate(lambda: with_calling_handlers(body, warning=handler), display=rec.display)
        assert ev.value == 'done'
        assert rec.log == ['handled w1', 'continued']

    def test_unmuffled_warning_still_reaches_default(self):
        rec = Recorder()
        seen = []
        evaluate(lambda: with_calling_handlers(lambda: warn("w"), warning=seen.append), display=rec.display)
        assert [c.message for c in seen] == ['w']
        assert rec.log == ['warning: Warning message:\nw']

    def test_calling_handler_runs_before_exiting_handler(self):
        order = []
        result = try_catch(
            lambda: with_calling_handlers(
                lambda: stop("deep"),
                error=lambda c: order.append('calling'),
            ),
            error=lambda c: order.append('exiting') or 'caught',
        )
        assert result == 'caught'
        assert order == ['calling', 'exiting']

    def test_python_exception_reaches_calling_handler(self):
        seen = []
        with pytest.raises(KeyError):
            with_calling_handlers(lambda: {}['missing'], error=seen.append)
        assert len(seen) == 1
        assert isinstance(seen[0], ErrorCondition)

    def test_suppress_warnings(self):
        rec = Recorder()
        ev = evaluate(lambda: suppress_warnings(lambda: (warn("shh"), 7)[1]), display=rec.display)
        assert ev.value == 7
        assert rec.log == []

    def test_errors_cannot_be_muffled(self):
        with pytest.raises(RuntimeError):
            with_calling_handlers(lambda: stop("x"), error=lambda c: muffle())


class TestStopAndTry:

    def test_uncaught_stop_raises(self):
        with pytest.raises(ConditionError, match="halt"):
            stop("halt")

    def test_stop_with_condition_object(self):
        cond = ErrorCondition("custom", call='g()')
        with pytest.raises(ConditionError) as info:
            stop(cond)
        assert info.value.condition is cond

    def test_evaluate_records_error(self):
        rec = Recorder()
        ev = evaluate(lambda: stop("bad", call='h()'), display=rec.display)
        assert not ev.ok
        assert ev.value is None
        assert rec.log == ['error: Error in h(): bad']

    def test_try_returns_error_condition(self):
        rec = Recorder()
        ev = evaluate(lambda: try_(lambda: stop("nope", call='k()')), display=rec.display)
        assert isinstance(ev.value, ErrorCondition)
        assert ev.ok
        assert rec.log == ['error: Error in k(): nope']

    def test_try_silent(self):
        rec = Recorder()
        ev = evaluate(lambda: try_(lambda: stop("nope"), silent=True), display=rec.display)
        assert isinstance(ev.value, ErrorCondition)
        assert rec.log == []

    def test_try_passes_value_through(self):
        assert try_(lambda: 5) == 5


class TestConditionObjects:

    def test_kinds(self):
        assert MessageCondition("m").kind == 'message'
        assert WarningCondition("w").kind == 'warning'
        assert ErrorCondition("e").kind == 'error'

    def test_equality(self):
        assert WarningCondition("w", call='f()') == WarningCondition("w", call='f()')
        assert WarningCondition("w") != ErrorCondition("w")
