import logging
from contextlib import nullcontext

import pytest

from profiler.errors.exceptions import (DecompositionFitError, NoViableModelError, ParseError,
                                        VisitorAnalysisError)
from profiler.errors.utils import get_error_metadata
from profiler.profiler_switch import profiling_switch
from profiler.profiler_utils import conditional_timer, profiled_function
from profiler.timer.ProfilerTimer import ProfilerTimer


@pytest.fixture
def profiling_on():
    previous = profiling_switch.enabled
    profiling_switch.configure(True)
    yield
    profiling_switch.configure(previous)


def test_timer_records_success(caplog):
    caplog.set_level(logging.INFO)
    with ProfilerTimer("tests/test_profiler.py", "block", category="general", context={"run": 1}) as timer:
        pass
    assert timer.record["status"] == "completed"
    assert timer.record["run"] == 1
    assert "completed in" in caplog.text


def test_timer_never_swallows_errors():
    timer = ProfilerTimer("tests/test_profiler.py", "block")
    with pytest.raises(RuntimeError):
        with timer:
            raise RuntimeError("boom")
    assert timer.record["status"] == "failed"
    assert timer.record["error"] == "boom"


def test_timer_decorator():
    @ProfilerTimer.timer("tests/test_profiler.py", "double")
    def double(x):
        return 2 * x

    assert double(4) == 8


def test_conditional_timer_respects_switch(profiling_on):
    assert isinstance(conditional_timer("m", "f", category="dataset"), ProfilerTimer)
    assert conditional_timer("m", "f", category="nonsense").category == "unknown"
    profiling_switch.configure(False)
    assert isinstance(conditional_timer("m", "f"), nullcontext)


def test_profiled_function_passes_through(profiling_on, caplog):
    caplog.set_level(logging.INFO)

    @profiled_function(category="reporting")
    def summarise(values):
        """Function: add things up."""
        return sum(values)

    assert summarise([1, 2, 3]) == 6
    assert summarise.__name__ == "summarise"
    assert "[reporting]" in caplog.text


def test_error_metadata_fills_template():
    meta = get_error_metadata("NoViableModelError", {"windows": [4, 6]})
    assert meta["code"] == "E3003"
    assert "[4, 6]" in meta["message"]


def test_unknown_key_falls_back():
    meta = get_error_metadata("NotInCatalog", {"exception": "x"})
    assert meta["code"] == "E9999"


def test_exceptions_carry_catalog_fields():
    error = ParseError(row="MUSEUM_X_May", column="2012", reason="bad")
    assert isinstance(error, VisitorAnalysisError)
    assert error.code == "E2001"
    assert error.component == "series_builder"
    assert str(error) == "Could not parse row 'MUSEUM_X_May' (column '2012'): bad"

    fit = DecompositionFitError(window=14, reason="even")
    assert fit.window == 14
    assert fit.severity == "low"

    assert NoViableModelError(windows=[]).severity == "critical"


def test_error_hooks_route_to_logging(caplog):
    import sys
    import warnings

    from profiler.init_error_hooks import clean_error_message, init_error_hooks, log_uncaught_exception

    previous = warnings.showwarning, sys.excepthook
    try:
        init_error_hooks()
        assert sys.excepthook is log_uncaught_exception
        with caplog.at_level(logging.WARNING, logger="profiler.hooks"):
            warnings.showwarning("careful", UserWarning, "x.py", 3)
            try:
                raise ValueError("bad ✗ value")
            except ValueError as e:
                log_uncaught_exception(ValueError, e, e.__traceback__)
    finally:
        warnings.showwarning, sys.excepthook = previous
    assert "x.py:3 - UserWarning: careful" in caplog.text
    assert "[Uncaught Exception] bad  value" in caplog.text
    assert clean_error_message("ok ✓") == "ok "
