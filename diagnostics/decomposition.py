# diagnostics/decomposition.py
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

import numpy as np
import pandas as pd
from statsmodels.tsa.seasonal import STL

from data.series import MonthlySeries
from evaluation.performance import AutocorrelationDiagnostics, RemainderStats, residual_autocorrelation
from profiler.errors.exceptions import DecompositionFitError
from profiler.errors.validation import validate_decomposition_input

logger = logging.getLogger(__name__)

FIXED = "fixed"
VARIABLE = "variable"
ADDITIVE_TOLERANCE = 1e-8
# inner passes for the fixed fit; trend and periodic seasonal converge geometrically
FIXED_INNER_ITERATIONS = 50

SeriesLike = Union[MonthlySeries, pd.Series]


@dataclass
class DecompositionResult:
    """
    One additive STL fit: observed = seasonal + trend + remainder at every point.

    ``window`` is the seasonal smoothing span for variable fits and None for the
    fixed (periodic) fit.
    """
    kind: str
    window: Optional[int]
    observed: pd.Series
    seasonal: pd.Series
    trend: pd.Series
    remainder: pd.Series
    period: int = 12
    stats: RemainderStats = field(init=False)
    autocorrelation: AutocorrelationDiagnostics = field(init=False)

    def __post_init__(self):
        n = len(self.observed)
        if not (len(self.seasonal) == len(self.trend) == len(self.remainder) == n):
            raise DecompositionFitError(window=self.window, reason="component lengths differ from the input")
        components = np.column_stack([self.seasonal, self.trend, self.remainder])
        if not np.isfinite(components).all():
            raise DecompositionFitError(window=self.window, reason="fit produced non-finite values")
        gap = self.additive_gap()
        if gap > ADDITIVE_TOLERANCE * max(1.0, float(np.abs(self.observed).max())):
            raise DecompositionFitError(window=self.window, reason=f"components do not add up (max gap {gap:.3g})")
        self.stats = RemainderStats.from_remainder(self.remainder)
        self.autocorrelation = residual_autocorrelation(self.remainder, self.period)

    @property
    def label(self) -> str:
        return FIXED if self.kind == FIXED else f"{VARIABLE} (window={self.window})"

    @property
    def remainder_mean(self) -> float:
        return self.stats.mean

    @property
    def remainder_median(self) -> float:
        return self.stats.median

    def additive_gap(self) -> float:
        rebuilt = self.seasonal.to_numpy() + self.trend.to_numpy() + self.remainder.to_numpy()
        return float(np.max(np.abs(rebuilt - self.observed.to_numpy())))

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            "observed": self.observed,
            "seasonal": self.seasonal,
            "trend": self.trend,
            "remainder": self.remainder,
        })

    def to_points(self, component: str = "seasonal") -> List[Tuple[pd.Timestamp, float]]:
        values = self.to_frame()[component]
        return list(zip(values.index, values.tolist()))

    def to_row(self):
        return {"kind": self.kind, "window": self.window, **self.stats.to_row(), **self.autocorrelation.to_row()}


def _as_series(series: SeriesLike) -> pd.Series:
    values = series.values if isinstance(series, MonthlySeries) else series
    return values.astype(float)


def _result(kind, window, observed, seasonal, trend, period) -> DecompositionResult:
    index = observed.index
    seasonal = pd.Series(np.asarray(seasonal, dtype=float), index=index, name="seasonal")
    trend = pd.Series(np.asarray(trend, dtype=float), index=index, name="trend")
    remainder = pd.Series(observed.to_numpy() - seasonal.to_numpy() - trend.to_numpy(), index=index, name="remainder")
    return DecompositionResult(kind, window, observed, seasonal, trend, remainder, period)


def fit_fixed(series: SeriesLike, period: int = 12, robust: bool = True,
              trend_window: Optional[int] = None) -> DecompositionResult:
    """
    Fit STL with a seasonal pattern that does not change from year to year.

    The seasonal smoother gets a span far wider than the series with degree 0,
    then each cycle position is replaced by its mean so that every year shares
    exactly the same seasonal values. The inner loop runs to convergence so the
    trend is estimated against that periodic seasonal, not an early iterate.
    """
    observed = _as_series(series)
    validate_decomposition_input(observed, period)
    n = len(observed)
    try:
        fit = STL(observed, period=period, seasonal=10 * n + 1, seasonal_deg=0,
                  trend=trend_window, robust=robust).fit(inner_iter=FIXED_INNER_ITERATIONS)
    except (ValueError, np.linalg.LinAlgError) as e:
        raise DecompositionFitError(window=FIXED, reason=str(e)) from e

    cycle = np.arange(n) % period
    seasonal = pd.Series(np.asarray(fit.seasonal, dtype=float)).groupby(cycle).transform("mean")
    result = _result(FIXED, None, observed, seasonal, fit.trend, period)
    logger.info(f"🧩 Fixed-seasonality STL: mean |remainder| = {result.stats.mean_abs:.3f}")
    return result


def fit_variable(series: SeriesLike, window: int, period: int = 12, robust: bool = True,
                 trend_window: Optional[int] = None) -> DecompositionResult:
    """
    Fit STL letting the seasonal pattern drift, smoothed over ``window`` years.

    Raises:
        DecompositionFitError: statsmodels rejected the window or the fit broke down.
    """
    observed = _as_series(series)
    validate_decomposition_input(observed, period)
    try:
        fit = STL(observed, period=period, seasonal=window, trend=trend_window, robust=robust).fit()
    except (ValueError, np.linalg.LinAlgError) as e:
        raise DecompositionFitError(window=window, reason=str(e)) from e

    result = _result(VARIABLE, window, observed, fit.seasonal, fit.trend, period)
    logger.debug(f"Variable STL window={window}: mean |remainder| = {result.stats.mean_abs:.3f}")
    return result


def seasonal_impact(result: DecompositionResult) -> pd.DataFrame:
    """Average seasonal effect per calendar month, in thousands of visits and as a share of trend."""
    frame = result.to_frame()
    frame["month"] = frame.index.month
    frame["share_of_trend"] = frame["seasonal"] / frame["trend"].replace(0, np.nan)
    impact = frame.groupby("month").agg(seasonal=("seasonal", "mean"), share_of_trend=("share_of_trend", "mean"))
    return impact.reindex(range(1, 13))
