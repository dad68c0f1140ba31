import numpy as np
import pytest

from diagnostics.decomposition import (FIXED, VARIABLE, DecompositionResult, fit_fixed, fit_variable,
                                       seasonal_impact)
from profiler.errors.exceptions import DecompositionFitError, DecompositionInputError
from tests.conftest import monthly_series


def _assert_additive(result: DecompositionResult):
    rebuilt = result.seasonal + result.trend + result.remainder
    assert np.max(np.abs(rebuilt - result.observed)) < 1e-8


def test_fixed_fit_is_additive(noisy_series):
    result = fit_fixed(noisy_series)
    assert result.kind == FIXED
    assert result.window is None
    assert len(result.seasonal) == len(noisy_series)
    _assert_additive(result)


def test_fixed_seasonal_repeats_every_year(noisy_series):
    result = fit_fixed(noisy_series)
    by_year = result.seasonal.to_numpy().reshape(-1, 12)
    assert np.ptp(by_year, axis=0).max() < 1e-9


@pytest.mark.parametrize("window", [5, 7, 13, 25])
def test_variable_fit_is_additive(noisy_series, window):
    result = fit_variable(noisy_series, window)
    assert result.kind == VARIABLE
    assert result.window == window
    assert result.label == f"variable (window={window})"
    _assert_additive(result)


@pytest.mark.parametrize("robust", [True, False])
@pytest.mark.parametrize("fit", [
    fit_fixed,
    lambda series, robust: fit_variable(series, 7, robust=robust),
    lambda series, robust: fit_variable(series, 25, robust=robust),
], ids=["fixed", "variable-7", "variable-25"])
def test_noiseless_series_leaves_no_remainder(noiseless_series, fit, robust):
    result = fit(noiseless_series, robust=robust)
    assert np.max(np.abs(result.remainder)) < 1e-6


def test_variable_seasonal_may_drift(noisy_series):
    result = fit_variable(noisy_series, 5)
    by_year = result.seasonal.to_numpy().reshape(-1, 12)
    assert np.ptp(by_year, axis=0).max() > 1e-6


@pytest.mark.parametrize("window", [4, 14, 1])
def test_invalid_window_raises_fit_error(noisy_series, window):
    with pytest.raises(DecompositionFitError) as excinfo:
        fit_variable(noisy_series, window)
    assert excinfo.value.window == window
    assert excinfo.value.severity == "low"


@pytest.mark.parametrize("length", [12, 30])
def test_bad_length_raises_input_error(length):
    series = monthly_series(np.sin(np.arange(length)) + 10)
    with pytest.raises(DecompositionInputError):
        fit_fixed(series)
    with pytest.raises(DecompositionInputError):
        fit_variable(series, 7)


def test_constant_series_raises_input_error():
    with pytest.raises(DecompositionInputError):
        fit_variable(monthly_series(np.full(24, 5.0)), 7)


def test_missing_value_raises_input_error():
    values = np.sin(np.arange(24)) + 10
    values[3] = np.nan
    with pytest.raises(DecompositionInputError):
        fit_fixed(monthly_series(values))


def test_result_rejects_broken_components(noisy_series):
    good = fit_variable(noisy_series, 7)
    with pytest.raises(DecompositionFitError):
        DecompositionResult(VARIABLE, 7, good.observed, good.seasonal, good.trend, good.remainder + 1.0)


def test_result_exposes_statistics(noisy_series):
    result = fit_variable(noisy_series, 9)
    assert result.remainder_mean == pytest.approx(float(result.remainder.mean()))
    assert result.remainder_median == pytest.approx(float(result.remainder.median()))
    row = result.to_row()
    assert row["window"] == 9
    assert {"mean_abs", "median", "ljung_box_pvalue"} <= set(row)
    assert list(result.to_frame().columns) == ["observed", "seasonal", "trend", "remainder"]
    assert len(result.to_points("trend")) == 72


def test_seasonal_impact_has_one_row_per_month(noisy_series):
    impact = seasonal_impact(fit_fixed(noisy_series))
    assert list(impact.index) == list(range(1, 13))
    assert list(impact.columns) == ["seasonal", "share_of_trend"]
    # peak of the synthetic cycle is in July, trough in January
    assert impact["seasonal"].idxmax() == 7
    assert impact["seasonal"].idxmin() == 1
