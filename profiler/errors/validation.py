import logging

import pandas as pd

from profiler.errors.exceptions import DecompositionInputError

logger = logging.getLogger(__name__)


def invalid_length(series: pd.Series, period: int = 12, min_cycles: int = 2) -> bool:
    n = len(series)
    return n < period * min_cycles or n % period != 0


def invalid_series(series: pd.Series) -> bool:
    return series.isnull().any() or series.nunique() <= 1


def validate_decomposition_input(series: pd.Series, period: int = 12, min_cycles: int = 2) -> None:
    if invalid_length(series, period, min_cycles):
        raise DecompositionInputError(
            length=len(series),
            reason=f"need a whole number of {period}-month cycles and at least {min_cycles} of them",
        )
    if series.isnull().any():
        missing = [ts.strftime("%Y-%m") for ts in series.index[series.isnull()]]
        raise DecompositionInputError(length=len(series), reason=f"missing values at {missing}")
    if invalid_series(series):
        raise DecompositionInputError(length=len(series), reason="series is constant")
    logger.debug(f"Series of length {len(series)} accepted for decomposition.")
