import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import pandas as pd
from joblib import Parallel, delayed

from config_loader import DecompositionConfig
from data.series import MonthlySeries
from diagnostics.decomposition import FIXED, VARIABLE, DecompositionResult, fit_fixed, fit_variable
from evaluation.performance import RemainderStats, remainder_frame
from profiler.errors.exceptions import DecompositionFitError, NoViableModelError
from profiler.errors.validation import validate_decomposition_input
from profiler.profiler_utils import profiled_function

logger = logging.getLogger(__name__)

VariableFit = Callable[..., DecompositionResult]
FixedFit = Callable[..., DecompositionResult]


@dataclass
class SelectionResult:
    fixed: DecompositionResult
    best_variable: DecompositionResult
    candidates: Dict[int, DecompositionResult]
    failures: Dict[int, DecompositionFitError] = field(default_factory=dict)

    @property
    def best_window(self) -> int:
        return self.best_variable.window

    def candidate_table(self) -> pd.DataFrame:
        """One row per evaluated window, ranked best first; failed windows are listed last."""
        rows = []
        for rank, window in enumerate(rank_candidates(self.candidates), start=1):
            result = self.candidates[window]
            rows.append({"window": window, "rank": rank, "status": "ok", **result.stats.to_row(),
                         "ljung_box_pvalue": result.autocorrelation.ljung_box_pvalue})
        for window, error in sorted(self.failures.items()):
            rows.append({"window": window, "rank": None, "status": "failed", "error": error.message})
        return pd.DataFrame(rows)

    def comparison_table(self) -> pd.DataFrame:
        """Fixed model next to the best variable model, statistics as columns."""
        return remainder_frame({
            FIXED: self.fixed.to_row(),
            VARIABLE: self.best_variable.to_row(),
        })


@dataclass(frozen=True)
class ModelChoice:
    preferred: str
    window: Optional[int]
    fixed_stats: RemainderStats
    variable_stats: RemainderStats
    improvement: float
    materiality: float
    reason: str


def rank_candidates(candidates: Dict[int, DecompositionResult]) -> List[int]:
    """
    Order windows best first: lowest mean absolute remainder, then lowest
    absolute median remainder, then smallest window.

    The median tie-break compares distance from zero: a remainder centred at
    -0.5 is as far off as one centred at +0.5, so a signed "lowest median"
    would reward a model that is biased low.
    """
    return sorted(candidates, key=lambda w: (*candidates[w].stats.ranking_key(), w))


def choose_model(selection: SelectionResult, materiality: float = 0.1) -> ModelChoice:
    """
    Prefer the fixed model unless the best variable model lowers the mean
    absolute remainder by more than ``materiality`` (a fraction of the fixed
    model's value).
    """
    fixed = selection.fixed.stats
    variable = selection.best_variable.stats
    if fixed.mean_abs > 0:
        improvement = (fixed.mean_abs - variable.mean_abs) / fixed.mean_abs
    else:
        improvement = 0.0 if variable.mean_abs == 0 else float("-inf")

    if improvement > materiality:
        preferred, window = VARIABLE, selection.best_window
        reason = (f"variable window {window} lowers mean |remainder| by {improvement:.1%}, "
                  f"above the {materiality:.0%} materiality threshold")
    else:
        preferred, window = FIXED, None
        reason = (f"best variable window {selection.best_window} changes mean |remainder| by "
                  f"{improvement:.1%}, within the {materiality:.0%} materiality threshold")
    logger.info(f"🏁 Preferred model: {preferred} ({reason})")
    return ModelChoice(preferred, window, fixed, variable, improvement, materiality, reason)


class DecompositionSelector:
    """
    Fit the fixed-seasonality STL and a variable-seasonality STL per candidate
    window, then pick the candidate with the smallest remainder.
    """

    def __init__(self, config: Optional[DecompositionConfig] = None,
                 fit_variable_fn: VariableFit = fit_variable, fit_fixed_fn: FixedFit = fit_fixed):
        self.config = config or DecompositionConfig()
        self._fit_variable = fit_variable_fn
        self._fit_fixed = fit_fixed_fn

    def _try_fit(self, series: pd.Series, window: int) -> Tuple[int, object]:
        try:
            return window, self._fit_variable(
                series, window, period=self.config.period, robust=self.config.robust,
                trend_window=self.config.trend_window)
        except DecompositionFitError as e:
            return window, e

    def search(self, series: pd.Series, windows: Iterable[int]) -> Tuple[Dict[int, DecompositionResult], Dict[int, DecompositionFitError]]:
        windows = sorted(set(int(w) for w in windows))
        if self.config.n_jobs == 1:
            outcomes = [self._try_fit(series, w) for w in windows]
        else:
            outcomes = Parallel(n_jobs=self.config.n_jobs, prefer="threads")(
                delayed(self._try_fit)(series, w) for w in windows)

        candidates, failures = {}, {}
        for window, outcome in outcomes:
            if isinstance(outcome, DecompositionFitError):
                logger.warning(f"⚠️ Skipping seasonal window {window}: {outcome.message}")
                failures[window] = outcome
            else:
                candidates[window] = outcome
        return candidates, failures

    @profiled_function(category="model_selection")
    def select(self, series, windows: Optional[Iterable[int]] = None) -> SelectionResult:
        """
        Function: Search seasonal windows and compare the best against the fixed model.

        Raises:
            DecompositionInputError: the series is too short, ragged or has gaps.
            NoViableModelError: every candidate window failed to fit.
        """
        values = series.values if isinstance(series, MonthlySeries) else series
        validate_decomposition_input(values, self.config.period)
        windows = list(windows) if windows is not None else list(self.config.candidate_windows)

        fixed = self._fit_fixed(values, period=self.config.period, robust=self.config.robust,
                                trend_window=self.config.trend_window)
        candidates, failures = self.search(values, windows)
        if not candidates:
            raise NoViableModelError(windows=sorted(set(int(w) for w in windows)))

        best = candidates[rank_candidates(candidates)[0]]
        logger.info(f"🔍 Best variable window {best.window} of {len(candidates)} fitted "
                    f"(mean |remainder| {best.stats.mean_abs:.3f} vs fixed {fixed.stats.mean_abs:.3f})")
        return SelectionResult(fixed=fixed, best_variable=best, candidates=candidates, failures=failures)
