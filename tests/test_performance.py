import math

import numpy as np
import pytest

from evaluation.performance import RemainderStats, remainder_frame, residual_autocorrelation


def test_remainder_stats():
    stats = RemainderStats.from_remainder([1.0, -1.0, 2.0, -2.0])
    assert stats.mean == 0.0
    assert stats.median == 0.0
    assert stats.mean_abs == 1.5
    assert stats.median_abs == 1.5
    assert stats.max_abs == 2.0
    assert stats.rmse == pytest.approx(math.sqrt(2.5))
    assert stats.ranking_key() == (1.5, 0.0)


def test_ranking_key_uses_absolute_median():
    stats = RemainderStats.from_remainder([-3.0, -1.0, -1.0])
    assert stats.median == -1.0
    assert stats.ranking_key() == (pytest.approx(5 / 3), 1.0)


def test_seasonal_remainder_is_not_white_noise():
    t = np.arange(72)
    diag = residual_autocorrelation(np.sin(2 * np.pi * t / 12), seasonal_lag=12)
    assert diag.lag == 12
    assert diag.acf_seasonal > 0.5
    assert diag.ljung_box_pvalue < 0.05
    assert diag.white_noise is False


def test_constant_remainder_has_no_diagnostics():
    diag = residual_autocorrelation(np.zeros(24))
    assert math.isnan(diag.acf_lag1)
    assert diag.white_noise is None
    assert diag.to_row()["white_noise"] is None


def test_lag_is_capped_for_short_input():
    diag = residual_autocorrelation([1.0, 3.0, 2.0, 5.0, 4.0], seasonal_lag=12)
    assert diag.lag == 4


def test_remainder_frame():
    frame = remainder_frame({"fixed": {"mean_abs": 2.0}, "variable": {"mean_abs": 1.0}})
    assert frame.index.name == "model"
    assert frame.loc["variable", "mean_abs"] == 1.0
